"""Checksum utilities."""

import hashlib


def generate_checksum(content: bytes) -> str:
    """Generate the upload checksum expected by the Bunny Storage API.

    Args:
        content: The exact bytes that will be uploaded

    Returns:
        Uppercase hex encoded SHA-256 digest (64 characters)
    """
    return hashlib.sha256(content).hexdigest().upper()
