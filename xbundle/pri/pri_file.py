"""PRI resource index files: a header, a table of contents and typed sections."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar, Union

from xbundle.pri.data_item import DataItem
from xbundle.pri.decision_info import DecisionInfo
from xbundle.pri.hierarchical_schema import HierarchicalSchema
from xbundle.pri.pri_descriptor import PriDescriptor
from xbundle.pri.resource_map import ResourceMap

_MAGIC = struct.Struct("<8s")
_FILE_HEADER_REST = struct.Struct("<HHIIIHHI")
_FILE_TRAILER = struct.Struct("<II8s")
_TOC_ENTRY = struct.Struct("<16sHHIII")
_SECTION_HEADER = struct.Struct("<16sIHHII")
_SECTION_TRAILER = struct.Struct("<II")
_U32 = struct.Struct("<I")

_FILE_MARKER = 0xDEFFFADE
_SECTION_MARKER = 0xDEF5FADE
_TOC_OFFSET = _MAGIC.size + _FILE_HEADER_REST.size
_TOTAL_SIZE_OFFSET = 12
_TOC_OFFSET_FIELD = 24
_SECTION_OVERHEAD = _SECTION_HEADER.size + _SECTION_TRAILER.size


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def _describe_identifier(identifier: bytes) -> str:
    try:
        return identifier.decode("utf-8")
    except UnicodeDecodeError:
        return repr(identifier)


@dataclass
class UnknownSection:
    """A section whose identifier is not recognised; its body is kept verbatim."""

    identifier: bytes
    data: bytes = b""

    @classmethod
    def read(cls, identifier: bytes, length: int, stream: BinaryIO) -> UnknownSection:
        """Read up to ``length`` bytes of section body."""
        return cls(bytes(identifier), stream.read(max(length, 0)))

    def write(self, stream: BinaryIO) -> None:
        stream.write(self.data)

    def __repr__(self) -> str:
        return (
            f"UnknownSection(identifier={_describe_identifier(self.identifier)!r}, "
            f"length={len(self.data)})"
        )


SectionData = Union[
    DataItem, PriDescriptor, ResourceMap, DecisionInfo, HierarchicalSchema, UnknownSection
]

_KNOWN_SECTIONS: dict[bytes, type] = {
    DataItem.IDENTIFIER: DataItem,
    PriDescriptor.IDENTIFIER: PriDescriptor,
    ResourceMap.IDENTIFIER: ResourceMap,
    DecisionInfo.IDENTIFIER: DecisionInfo,
    HierarchicalSchema.IDENTIFIER: HierarchicalSchema,
}


def read_section_data(identifier: bytes, length: int, stream: BinaryIO) -> SectionData:
    """Read a section body of the kind named by ``identifier``."""
    section_type = _KNOWN_SECTIONS.get(bytes(identifier))
    if section_type is None:
        return UnknownSection.read(identifier, length, stream)
    return section_type.read(stream)


def section_identifier(data: SectionData) -> bytes:
    """Return the 16-byte identifier for a section body."""
    if isinstance(data, UnknownSection):
        return data.identifier
    for identifier, section_type in _KNOWN_SECTIONS.items():
        if isinstance(data, section_type):
            return identifier
    raise TypeError(f"not a section body: {type(data).__name__}")


@dataclass
class Section:
    """A section of a PRI file together with its header fields."""

    section_qualifier: int
    flags: int
    section_flags: int
    data: SectionData

    @classmethod
    def read(cls, stream: BinaryIO) -> Section:
        """Read a section, header and trailer included, from a seekable stream."""
        start = stream.tell()
        identifier, qualifier, flags, section_flags, length, reserved = (
            _SECTION_HEADER.unpack(_read_exact(stream, _SECTION_HEADER.size))
        )
        if reserved != 0:
            raise ValueError("reserved section header field must be zero")
        if length < _SECTION_OVERHEAD:
            raise ValueError("section length is shorter than its header and trailer")
        data = read_section_data(identifier, length - _SECTION_OVERHEAD, stream)
        stream.seek(start + length - _SECTION_TRAILER.size)
        marker, trailer_length = _SECTION_TRAILER.unpack(
            _read_exact(stream, _SECTION_TRAILER.size)
        )
        if marker != _SECTION_MARKER:
            raise ValueError("missing section trailer marker")
        if trailer_length != length:
            raise ValueError("section trailer length does not match its header")
        return cls(qualifier, flags, section_flags, data)

    def write(self, stream: BinaryIO) -> None:
        """Write the section to a seekable stream, filling in its length."""
        stream.write(
            _SECTION_HEADER.pack(
                section_identifier(self.data),
                self.section_qualifier & 0xFFFFFFFF,
                self.flags & 0xFFFF,
                self.section_flags & 0xFFFF,
                0,
                0,
            )
        )
        start = stream.tell()
        self.data.write(stream)
        end = stream.tell()
        length = (end - start + _SECTION_OVERHEAD) & 0xFFFFFFFF
        stream.write(_SECTION_TRAILER.pack(_SECTION_MARKER, length))
        stream.seek(start - 8)
        stream.write(_U32.pack(length))
        stream.seek(end + _SECTION_TRAILER.size)


@dataclass(frozen=True)
class _TocEntry:
    section_identifier: bytes
    flags: int
    section_flags: int
    section_qualifier: int
    section_offset: int
    section_length: int

    @classmethod
    def read(cls, stream: BinaryIO) -> _TocEntry:
        return cls(*_TOC_ENTRY.unpack(_read_exact(stream, _TOC_ENTRY.size)))

    def pack(self) -> bytes:
        return _TOC_ENTRY.pack(
            self.section_identifier,
            self.flags & 0xFFFF,
            self.section_flags & 0xFFFF,
            self.section_qualifier & 0xFFFFFFFF,
            self.section_offset & 0xFFFFFFFF,
            self.section_length & 0xFFFFFFFF,
        )


@dataclass
class PriFile:
    """A package resource index: an ordered list of sections."""

    MRM_PRI0: ClassVar[str] = "mrm_pri0"
    MRM_PRI1: ClassVar[str] = "mrm_pri1"
    MRM_PRI2: ClassVar[str] = "mrm_pri2"
    MRM_PRIF: ClassVar[str] = "mrm_prif"

    sections: list[Section] = field(default_factory=list)

    @classmethod
    def open(cls, path: str | os.PathLike[str]) -> PriFile:
        """Read a PRI file from disk."""
        with open(path, "rb") as handle:
            return cls.read(handle)

    @classmethod
    def read(cls, stream: BinaryIO) -> PriFile:
        """Read a PRI file from a seekable binary stream."""
        (magic,) = _MAGIC.unpack(_read_exact(stream, _MAGIC.size))
        versions = {cls.MRM_PRI0, cls.MRM_PRI1, cls.MRM_PRI2, cls.MRM_PRIF}
        if magic.decode("latin-1") not in versions:
            raise ValueError("Data does not start with a PRI file header.")
        (
            zero,
            one,
            total_size,
            toc_offset,
            section_start,
            num_sections,
            marker,
            reserved,
        ) = _FILE_HEADER_REST.unpack(_read_exact(stream, _FILE_HEADER_REST.size))
        if zero != 0 or one != 1 or marker != 0xFFFF:
            raise ValueError("invalid PRI file header")
        if reserved != 0:
            raise ValueError("expected 0")
        if total_size < _FILE_TRAILER.size:
            raise ValueError("total file size is too small")
        stream.seek(total_size - _FILE_TRAILER.size)
        trailer_marker, trailer_size, trailer_magic = _FILE_TRAILER.unpack(
            _read_exact(stream, _FILE_TRAILER.size)
        )
        if trailer_marker != _FILE_MARKER:
            raise ValueError("missing PRI file trailer marker")
        if trailer_size != total_size:
            raise ValueError("PRI file trailer size does not match the header")
        if trailer_magic != magic:
            raise ValueError("PRI file trailer version does not match the header")

        stream.seek(toc_offset)
        toc = [_TocEntry.read(stream) for _ in range(num_sections)]
        sections = []
        for entry in toc:
            stream.seek(section_start + entry.section_offset)
            sections.append(Section.read(stream))
        return cls(sections)

    def create(self, path: str | os.PathLike[str]) -> None:
        """Write the PRI file to disk."""
        with open(path, "wb") as handle:
            self.write(handle)

    def write(self, stream: BinaryIO) -> None:
        """Write the PRI file to a seekable binary stream positioned at its start."""
        magic = self.MRM_PRI2.encode("ascii")
        count = len(self.sections)
        section_start = _TOC_OFFSET + count * _TOC_ENTRY.size
        stream.write(_MAGIC.pack(magic))
        stream.write(
            _FILE_HEADER_REST.pack(0, 1, 0, _TOC_OFFSET, section_start, count & 0xFFFF, 0xFFFF, 0)
        )
        for section in self.sections:
            stream.write(
                _TocEntry(
                    section_identifier(section.data),
                    section.flags,
                    section.section_flags,
                    section.section_qualifier,
                    0,
                    0,
                ).pack()
            )
        for index, section in enumerate(self.sections):
            start = stream.tell()
            section.write(stream)
            end = stream.tell()
            stream.seek(_TOC_OFFSET + _TOC_ENTRY.size * index + _TOC_OFFSET_FIELD)
            stream.write(
                struct.pack(
                    "<II", (start - section_start) & 0xFFFFFFFF, (end - start) & 0xFFFFFFFF
                )
            )
            stream.seek(end)
        total_size = (stream.tell() + _FILE_TRAILER.size) & 0xFFFFFFFF
        stream.write(_FILE_TRAILER.pack(_FILE_MARKER, total_size, magic))
        end = stream.tell()
        stream.seek(_TOTAL_SIZE_OFFSET)
        stream.write(_U32.pack(total_size))
        stream.seek(end)

    def add_section(self, section: Section) -> None:
        self.sections.append(section)

    def num_sections(self) -> int:
        return len(self.sections)

    def section(self, index: int) -> Section | None:
        return self.sections[index] if 0 <= index < len(self.sections) else None