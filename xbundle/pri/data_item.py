"""The data item section: a table of NUL-terminated strings and raw blobs."""

from __future__ import annotations

import struct
from typing import BinaryIO, ClassVar, NamedTuple

_HEADER = struct.Struct("<IHHI")
_STRING_SPAN = struct.Struct("<HH")
_BLOB_SPAN = struct.Struct("<II")


class _Span(NamedTuple):
    offset: int
    length: int

    @property
    def end(self) -> int:
        return self.offset + self.length


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


class DataItem:
    """Strings and binary blobs stored in a single data item section."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_dataitem] \x00"

    def __init__(self) -> None:
        self._string_spans: list[_Span] = []
        self._string_data = bytearray()
        self._blob_spans: list[_Span] = []
        self._blob_data = bytearray()

    @classmethod
    def read(cls, stream: BinaryIO) -> DataItem:
        """Read a data item section body from a binary stream."""
        reserved, num_strings, num_blobs, total_length = _HEADER.unpack(
            _read_exact(stream, _HEADER.size)
        )
        if reserved != 0:
            raise ValueError("data item header must start with a zero field")
        string_spans = [
            _Span(offset, length)
            for offset, length in _STRING_SPAN.iter_unpack(
                _read_exact(stream, _STRING_SPAN.size * num_strings)
            )
        ]
        string_length = string_spans[-1].end if string_spans else 0
        blob_spans = []
        for offset, length in _BLOB_SPAN.iter_unpack(
            _read_exact(stream, _BLOB_SPAN.size * num_blobs)
        ):
            if offset < string_length:
                raise ValueError("blob offset lies inside the string data")
            blob_spans.append(_Span(offset - string_length, length))
        blob_length = total_length - string_length
        if blob_length < 0:
            raise ValueError("total data length is shorter than the string data")

        item = cls()
        item._string_spans = string_spans
        item._blob_spans = blob_spans
        item._string_data = bytearray(stream.read(string_length))
        item._blob_data = bytearray(stream.read(blob_length))
        return item

    def write(self, stream: BinaryIO) -> None:
        """Write the section body to a binary stream."""
        total = len(self._string_data) + len(self._blob_data)
        stream.write(
            _HEADER.pack(
                0,
                len(self._string_spans) & 0xFFFF,
                len(self._blob_spans) & 0xFFFF,
                total & 0xFFFFFFFF,
            )
        )
        for span in self._string_spans:
            stream.write(_STRING_SPAN.pack(span.offset & 0xFFFF, span.length & 0xFFFF))
        base = len(self._string_data)
        for span in self._blob_spans:
            stream.write(
                _BLOB_SPAN.pack((span.offset + base) & 0xFFFFFFFF, span.length & 0xFFFFFFFF)
            )
        stream.write(bytes(self._string_data))
        stream.write(bytes(self._blob_data))

    def num_strings(self) -> int:
        return len(self._string_spans)

    def string(self, index: int) -> str | None:
        """Return the string at ``index``, or None if absent or not valid UTF-8."""
        if not 0 <= index < len(self._string_spans):
            return None
        span = self._string_spans[index]
        raw = bytes(self._string_data[span.offset : span.end - 1])
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return None

    def num_blobs(self) -> int:
        return len(self._blob_spans)

    def blob(self, index: int) -> bytes | None:
        """Return the blob at ``index``, or None if absent."""
        if not 0 <= index < len(self._blob_spans):
            return None
        span = self._blob_spans[index]
        return bytes(self._blob_data[span.offset : span.end])

    def add_string(self, s: str) -> int:
        """Append a string and return its index."""
        encoded = s.encode("utf-8")
        index = len(self._string_spans)
        self._string_spans.append(_Span(len(self._string_data), len(encoded) + 1))
        self._string_data += encoded + b"\x00"
        return index

    def add_blob(self, blob: bytes) -> int:
        """Append a blob and return its index."""
        index = len(self._blob_spans)
        self._blob_spans.append(_Span(len(self._blob_data), len(blob)))
        self._blob_data += blob
        return index

    def _key(self) -> tuple:
        return (
            self._string_spans,
            bytes(self._string_data),
            self._blob_spans,
            bytes(self._blob_data),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataItem):
            return NotImplemented
        return self._key() == other._key()

    def __repr__(self) -> str:
        strings = [s for i in range(self.num_strings()) if (s := self.string(i)) is not None]
        blobs = [b for i in range(self.num_blobs()) if (b := self.blob(i)) is not None]
        return f"DataItem({strings + blobs!r})"