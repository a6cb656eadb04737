"""Large-object handle for unbounded specification text."""

import logging
from collections.abc import Iterable, Iterator

from specstore.errors.exceptions import DecodingError, EncodingError

logger = logging.getLogger(__name__)


class LargeObjectHandle:
    """A large text object, or the absence of one.

    The handle is the unit the storage layer reads and writes. It exposes a
    read stream (``iter_chunks``) and a write stream (``from_chunks``) so
    callers never need the payload as a single ``str``. An absent handle
    streams zero chunks; an empty one streams exactly one empty chunk.
    """

    __slots__ = ("_value",)

    def __init__(self, value: str | bytes | None = None) -> None:
        self._value = value

    @classmethod
    def absent(cls) -> "LargeObjectHandle":
        return cls(None)

    @classmethod
    def from_chunks(cls, chunks: Iterable[str]) -> "LargeObjectHandle":
        """Assemble a handle from a stream of text chunks."""
        parts = list(chunks)
        if not parts:
            return cls.absent()
        return cls("".join(parts))

    @property
    def is_absent(self) -> bool:
        return self._value is None

    @property
    def char_length(self) -> int | None:
        if self._value is None:
            return None
        return len(self._value)

    def read(self) -> str | bytes | None:
        """Return the raw stored value (``None`` when absent)."""
        return self._value

    def iter_chunks(self, chunk_size: int) -> Iterator[str]:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self._value is None:
            return
        if self._value == "":
            yield ""
            return
        for offset in range(0, len(self._value), chunk_size):
            yield self._value[offset:offset + chunk_size]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LargeObjectHandle):
            return NotImplemented
        return self._value == other._value

    def __repr__(self) -> str:
        if self._value is None:
            return "LargeObjectHandle(absent)"
        return f"LargeObjectHandle(length={len(self._value)})"


def encode_payload(text: str | None) -> LargeObjectHandle:
    """Wrap specification text in a handle, rejecting unstorable content.

    The text is opaque: no JSON/YAML validation happens here.
    """
    if text is None:
        return LargeObjectHandle.absent()
    if not isinstance(text, str):
        raise EncodingError(
            f"Specification payload must be text, got {type(text).__name__}",
            details={"type": type(text).__name__},
        )
    if "\x00" in text:
        raise EncodingError(
            "Specification payload contains a NUL character",
            details={"position": text.index("\x00")},
        )
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(
            "Specification payload is not representable as UTF-8",
            details={"position": exc.start},
        ) from exc
    return LargeObjectHandle(text)


def decode_payload(handle: LargeObjectHandle | None) -> str | None:
    """Return the exact stored text, or ``None`` when nothing was stored."""
    if handle is None:
        return None
    if not isinstance(handle, LargeObjectHandle):
        raise DecodingError(f"Expected a LargeObjectHandle, got {type(handle).__name__}")

    value = handle.read()
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.warning("Stored specification payload is not valid UTF-8 (%d bytes)", len(value))
            raise DecodingError(
                "Stored specification payload is not valid UTF-8",
                details={"position": exc.start},
            ) from exc

    logger.warning("Stored specification payload has unexpected type %s", type(value).__name__)
    raise DecodingError(
        f"Stored specification payload has unexpected type {type(value).__name__}",
        details={"type": type(value).__name__},
    )
