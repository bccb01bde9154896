"""
UUID creation and parsing. Required because uuid7 was not part of the python
standard as of 3.12
"""

from uuid import UUID as UUID

from uuid_extensions import uuid7 as uuid7

from .errors import InvalidInputError

__ALL__ = ["UUID", "uuid7", "parse_identity", "InvalidIdentity"]


class InvalidIdentity(InvalidInputError):
    pass


def parse_identity(value: str | UUID, what: str = "identity") -> UUID:
    """
    Parse an identity received as text (e.g. a path parameter).

    Raises
    ------
    InvalidIdentity
        If the value is not a valid UUID.
    """
    if isinstance(value, UUID):
        return value

    try:
        return UUID(value.strip())
    except (AttributeError, ValueError):
        raise InvalidIdentity(f"{value!r} is not a valid {what}")
