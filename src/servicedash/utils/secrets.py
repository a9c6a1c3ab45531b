# src/servicedash/utils/secrets.py
"""
Reversible encoding for stored SSH passwords.

This is base64, not encryption. It keeps secrets out of plain sight in the
connection file and stays compatible with existing server records.
"""

import base64
import binascii
import logging

logger = logging.getLogger('secrets')


def encode_secret(plaintext: str) -> str:
    """Encode a plaintext secret for storage"""
    if not plaintext:
        return ''
    return base64.b64encode(plaintext.encode('utf-8')).decode('ascii')


def decode_secret(encoded: str) -> str:
    """
    Decode a stored secret.

    Returns an empty string when the value cannot be decoded so that a bad
    secret surfaces later as an authentication failure.
    """
    if not encoded:
        return ''

    try:
        return base64.b64decode(encoded, validate=True).decode('utf-8')
    except (binascii.Error, UnicodeDecodeError, ValueError):
        logger.warning("Stored secret could not be decoded, using empty credential")
        return ''
