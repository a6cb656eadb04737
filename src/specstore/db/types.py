"""Engine-agnostic column types.

Identifiers are bound in their canonical textual form
(``3fa85f64-5717-4562-b3fc-2c963f66afa6``). PostgreSQL stores them in a
native ``UUID`` column; every other engine gets ``CHAR(36)``. The same codec
runs on every bind and every result row, so equality lookups and the primary
key index behave identically across engines.
"""

import logging
import uuid

from sqlalchemy import CHAR, Text
from sqlalchemy.dialects import postgresql
from sqlalchemy.types import TypeDecorator

from specstore.db.lob import LargeObjectHandle
from specstore.errors.exceptions import DecodingError, EncodingError

logger = logging.getLogger(__name__)

CANONICAL_LENGTH = 36


def encode_identifier(value) -> str:
    """Encode a UUID into its storage value.

    Strings are accepted at boundaries but must parse as a UUID; they are
    normalized to the canonical lowercase hyphenated form.
    """
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, str):
        try:
            return str(uuid.UUID(value))
        except ValueError as exc:
            raise EncodingError(f"Malformed identifier: {value!r}") from exc
    raise EncodingError(
        f"Identifier must be a UUID, got {type(value).__name__}",
        details={"type": type(value).__name__},
    )


def decode_identifier(value) -> uuid.UUID:
    """Decode a stored identifier back into a UUID."""
    try:
        if isinstance(value, uuid.UUID):
            return value
        if isinstance(value, str):
            return uuid.UUID(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return uuid.UUID(bytes=bytes(value))
    except ValueError as exc:
        logger.warning("Stored identifier is not a UUID: %r", value)
        raise DecodingError(f"Stored identifier is not a UUID: {value!r}") from exc

    logger.warning("Stored identifier has unexpected type %s", type(value).__name__)
    raise DecodingError(
        f"Stored identifier has unexpected type {type(value).__name__}",
        details={"type": type(value).__name__},
    )


class GUID(TypeDecorator):
    """UUID column backed by the identifier codec."""

    impl = CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(postgresql.UUID(as_uuid=False))
        return dialect.type_descriptor(CHAR(CANONICAL_LENGTH))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return encode_identifier(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decode_identifier(value)


class LargeText(TypeDecorator):
    """Unbounded text column whose Python value is a ``LargeObjectHandle``.

    NULL loads as an absent handle, so the attribute is never a bare ``None``
    once read from the database.
    """

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, LargeObjectHandle):
            raise EncodingError(
                f"Large text columns take a LargeObjectHandle, got {type(value).__name__}"
            )
        return value.read()

    def process_result_value(self, value, dialect):
        return LargeObjectHandle(value)
