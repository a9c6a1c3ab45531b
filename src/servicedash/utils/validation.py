# src/servicedash/utils/validation.py
"""
Validation of identifiers that get interpolated into remote shell commands.
"""

import re

from ..errors import InvalidIdentifierError

# Docker ids are hex; names follow [a-zA-Z0-9][a-zA-Z0-9_.-]*
CONTAINER_REF_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9_.-]{0,254}$')


def validate_container_id(container_id: str) -> str:
    """
    Ensure a container id or name is drawn from Docker's own charset.

    Returns:
        The identifier unchanged

    Raises:
        InvalidIdentifierError: if the value could alter the shell command
    """
    if not isinstance(container_id, str) or not CONTAINER_REF_PATTERN.match(container_id):
        raise InvalidIdentifierError('container id', str(container_id))
    return container_id


def validate_line_count(lines: int) -> int:
    """Tail line counts must be positive integers"""
    if isinstance(lines, bool) or not isinstance(lines, int) or lines <= 0:
        raise InvalidIdentifierError('line count', str(lines))
    return lines
