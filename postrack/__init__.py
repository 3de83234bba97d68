"""
postrack - bulk POS Indonesia parcel tracking.

Submits a list of tracking numbers, looks each one up through the
BinderByte tracking API one at a time, and exports the results.
"""

__version__ = "0.1.0"
