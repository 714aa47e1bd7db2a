"""Identifier helpers."""

import secrets


def generate_id(length: int = 8) -> str:
    """Generate an opaque lowercase hex identifier.

    Args:
        length: Number of hex characters (minimum 4, rounded down to an even number)

    Returns:
        Random hex string
    """
    length = max(length, 4)
    return secrets.token_hex(length // 2)
