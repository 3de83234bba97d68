"""
HTTP API for the bulk tracker.
"""
