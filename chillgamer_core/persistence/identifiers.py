"""
Parsing of opaque document identifiers into native store identifiers
"""

from typing import Any

import bson
import bson.errors


class InvalidIdentifier(ValueError):
    """
    Exception raised when a value can't be turned into an ``ObjectId``
    """

    def __init__(self, value: Any):
        super().__init__(f"{value!r} is not a valid identifier (expected 24 hex digits)")
        self.value = value


def parse_identifier(value: Any) -> bson.ObjectId:
    """
    Convert the given value into an ``ObjectId``

    Existing ``ObjectId`` instances are returned unchanged. Strings must
    contain exactly 24 hexadecimal digits. Everything else is rejected,
    including the 12-byte binary form accepted by ``ObjectId`` itself.

    :param value: identifier as received from a path or a filter document
    :return: the identifier in the native type of the document store
    :raises InvalidIdentifier: when the value can't be converted
    """

    if isinstance(value, bson.ObjectId):
        return value
    if not isinstance(value, str):
        raise InvalidIdentifier(value)
    try:
        return bson.ObjectId(value)
    except (bson.errors.InvalidId, TypeError) as exc:
        raise InvalidIdentifier(value) from exc


def stringify_identifiers(value: Any) -> Any:
    """
    Return a copy of the given document (or value) with every ``ObjectId`` as its hex string
    """

    if isinstance(value, bson.ObjectId):
        return str(value)
    if isinstance(value, dict):
        return {k: stringify_identifiers(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [stringify_identifiers(v) for v in value]
    return value
