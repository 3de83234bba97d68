"""Tracking number input parsing."""

import re

_SEPARATORS = re.compile(r"[\n,]+")


def parse_tracking_numbers(raw_text: str, prefix: str = "P") -> list[str]:
    """
    Split pasted text into tracking numbers.

    Tokens are separated by commas and/or newlines, trimmed, and kept
    only when non-empty and starting with the prefix. Order is preserved
    and duplicates are kept.

    Args:
        raw_text: Free-form text from the user
        prefix: Required leading characters (empty string accepts all)

    Returns:
        Tracking numbers in input order
    """
    tokens = (token.strip() for token in _SEPARATORS.split(raw_text or ""))
    return [token for token in tokens if token and token.startswith(prefix)]
