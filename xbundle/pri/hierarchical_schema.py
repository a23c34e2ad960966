"""The hierarchical schema section: the tree of resource scopes and items."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar

_HNAMES = b"[def_hnamesx]  \x00"
_HEADER = struct.Struct("<4H")
_VERSION = struct.Struct("<HHIIII")
_TRAILER = struct.Struct("<3H6I")
_ENTRY_INFO = struct.Struct("<3HBBHH")
_SCOPE_EX = struct.Struct("<4H")
_U16 = struct.Struct("<H")

_NO_PARENT = 0xFFFF
_SCOPE_FLAG = 0x10
_ASCII_FLAG = 0x20


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def _read_utf16z(stream: BinaryIO) -> str:
    chars = []
    while (code := _U16.unpack(_read_exact(stream, 2))[0]) != 0:
        chars.append(chr(code))
    return "".join(chars)


def _read_asciiz(stream: BinaryIO) -> str:
    chars = []
    while (code := _read_exact(stream, 1)[0]) != 0:
        chars.append(chr(code))
    return "".join(chars)


def _encode_utf16z(text: str) -> bytes:
    units = [ord(c) & 0xFFFF for c in text]
    units.append(0)
    return struct.pack(f"<{len(units)}H", *units)


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8", "surrogatepass"))


@dataclass
class ResourceMapEntry:
    parent: int | None = None
    name: str = ""


@dataclass
class HierarchicalSchema:
    """Named scopes and items, each pointing at its parent scope."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_hschemaex] "

    unique_name: str = ""
    name: str = ""
    scopes: list[ResourceMapEntry] = field(default_factory=list)
    items: list[ResourceMapEntry] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> HierarchicalSchema:
        """Read a hierarchical schema section body from a seekable binary stream."""
        marker, unique_name_length, name_length, reserved = _HEADER.unpack(
            _read_exact(stream, _HEADER.size)
        )
        if marker != 1 or reserved != 0:
            raise ValueError("invalid hierarchical schema header")
        if _read_exact(stream, len(_HNAMES)) != _HNAMES:
            raise ValueError("missing hierarchical names identifier")
        _major, _minor, zero, _checksum, num_scopes, num_items = _VERSION.unpack(
            _read_exact(stream, _VERSION.size)
        )
        if zero != 0:
            raise ValueError("reserved schema field must be zero")
        unique_name = _read_utf16z(stream)
        if _byte_length(unique_name) + 1 != unique_name_length:
            raise ValueError("unique name length mismatch")
        name = _read_utf16z(stream)
        if _byte_length(name) + 1 != name_length:
            raise ValueError("name length mismatch")
        (
            pad,
            _max_full_path_length,
            pad2,
            total,
            scopes_again,
            items_again,
            unicode_data_length,
            _unknown1,
            _unknown2,
        ) = _TRAILER.unpack(_read_exact(stream, _TRAILER.size))
        if pad != 0 or pad2 != 0:
            raise ValueError("reserved schema field must be zero")
        if (total, scopes_again, items_again) != (
            num_scopes + num_items,
            num_scopes,
            num_items,
        ):
            raise ValueError("scope and item counts do not agree")

        infos = []
        for parent, full_path_length, _upper, _len2, flags, offset, index in (
            _ENTRY_INFO.iter_unpack(
                _read_exact(stream, _ENTRY_INFO.size * (num_scopes + num_items))
            )
        ):
            infos.append(
                (
                    parent,
                    full_path_length,
                    bool(flags & _SCOPE_FLAG),
                    bool(flags & _ASCII_FLAG),
                    offset | ((flags & 0xF) << 16),
                    index,
                )
            )
        for _, _, _, reserved_ex in _SCOPE_EX.iter_unpack(
            _read_exact(stream, _SCOPE_EX.size * num_scopes)
        ):
            if reserved_ex != 0:
                raise ValueError("reserved scope field must be zero")
        _read_exact(stream, 2 * num_items)

        unicode_offset = stream.tell()
        ascii_offset = unicode_offset + unicode_data_length * 2
        scopes = [ResourceMapEntry() for _ in range(num_scopes)]
        items = [ResourceMapEntry() for _ in range(num_items)]
        for parent, full_path_length, is_scope, in_ascii, offset, index in infos:
            entry_name = ""
            if full_path_length != 0:
                if in_ascii:
                    stream.seek(ascii_offset + offset)
                    entry_name = _read_asciiz(stream)
                else:
                    stream.seek(unicode_offset + offset * 2)
                    entry_name = _read_utf16z(stream)
            entry = ResourceMapEntry(None if parent == _NO_PARENT else parent, entry_name)
            target = scopes if is_scope else items
            if index >= len(target):
                raise ValueError("scope or item index out of range")
            target[index] = entry
        return cls(unique_name, name, scopes, items)

    def write(self, stream: BinaryIO) -> None:
        """Write the section body to a binary stream."""
        num_scopes = len(self.scopes)
        num_items = len(self.items)
        stream.write(
            _HEADER.pack(
                1,
                (_byte_length(self.unique_name) + 1) & 0xFFFF,
                (_byte_length(self.name) + 1) & 0xFFFF,
                0,
            )
        )
        stream.write(_HNAMES)
        stream.write(_VERSION.pack(1, 0, 0, 0, num_scopes, num_items))
        stream.write(_encode_utf16z(self.unique_name))
        stream.write(_encode_utf16z(self.name))
        stream.write(
            _TRAILER.pack(0, 256, 0, num_scopes + num_items, num_scopes, num_items, 0, 0, 0)
        )

        strings = bytearray()
        entry_infos = []
        tagged = [(True, i, e) for i, e in enumerate(self.scopes)]
        tagged += [(False, i, e) for i, e in enumerate(self.items)]
        for is_scope, index, entry in tagged:
            offset = len(strings) // 2
            flags = (offset >> 16) & 0xF
            if is_scope:
                flags |= _SCOPE_FLAG
            parent = _NO_PARENT if entry.parent is None else entry.parent
            entry_infos.append(
                _ENTRY_INFO.pack(
                    parent & 0xFFFF,
                    _byte_length(entry.name) & 0xFFFF,
                    0,
                    0,
                    flags,
                    offset & 0xFFFF,
                    index & 0xFFFF,
                )
            )
            strings += _encode_utf16z(entry.name)
        for info in entry_infos:
            stream.write(info)
        for index in range(num_scopes):
            stream.write(_SCOPE_EX.pack(index & 0xFFFF, 0, 0, 0))
        stream.write(b"\x00\x00" * num_items)
        stream.write(bytes(strings))