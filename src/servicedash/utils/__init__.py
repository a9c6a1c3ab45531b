"""
Utility modules for logging, secret handling and identifier validation
"""

from .secrets import encode_secret, decode_secret
from .validation import validate_container_id

__all__ = [
    'encode_secret',
    'decode_secret',
    'validate_container_id'
]
