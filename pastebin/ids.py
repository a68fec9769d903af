"""
Paste identifier generation.
"""
import secrets

from pastebin.config import settings


def generate_paste_id(num_bytes: int = None) -> str:
    """
    Generate a short opaque paste id.

    Args:
        num_bytes: Random bytes to draw (defaults to PASTE_ID_BYTES)

    Returns:
        Lowercase hex string, two characters per byte
    """
    return secrets.token_hex(num_bytes or settings.PASTE_ID_BYTES)
