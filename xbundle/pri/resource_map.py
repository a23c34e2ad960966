"""The resource map section: items, item groups and their candidates."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar

_HEADER = struct.Struct("<8H4I")
_TYPE_ENTRY = struct.Struct("<II")
_PAIR = struct.Struct("<HH")
_CANDIDATE = struct.Struct("<BBHHH")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def _read_pairs(stream: BinaryIO, count: int) -> list[tuple[int, int]]:
    return list(_PAIR.iter_unpack(_read_exact(stream, _PAIR.size * count)))


@dataclass(frozen=True)
class ItemToItemInfoGroup:
    first_item: int = 0
    item_info_group: int = 0


@dataclass(frozen=True)
class ItemInfoGroup:
    group_size: int = 0
    first_item_info: int = 0


@dataclass(frozen=True)
class ItemInfo:
    decision: int = 0
    first_candidate: int = 0


@dataclass(frozen=True)
class CandidateInfo:
    resource_value_type: int
    source_file_index: int
    data_item_index: int
    data_item_section: int


class ResourceValueType(enum.Enum):
    STRING = 0
    PATH = 1
    EMBEDDED_DATA = 2
    ASCII_STRING = 3
    UTF8_STRING = 4
    ASCII_PATH = 5
    UTF8_PATH = 6


@dataclass(frozen=True)
class Candidate:
    qualifier_set: int
    value_type: ResourceValueType
    data_item_section: int
    data_item_index: int


@dataclass
class CandidateSet:
    resource_map_item: int
    decision_index: int
    candidates: list[Candidate] = field(default_factory=list)


@dataclass
class ResourceMap:
    """Maps resource items to their candidate values."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_res_map2_]\x00"

    hierarchical_schema_section: int = 0
    decision_info_section: int = 0
    item_to_item_info_groups: list[ItemToItemInfoGroup] = field(default_factory=list)
    item_info_groups: list[ItemInfoGroup] = field(default_factory=list)
    item_infos: list[ItemInfo] = field(default_factory=list)
    candidate_infos: list[CandidateInfo] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> ResourceMap:
        """Read a resource map section body from a binary stream."""
        (
            env_refs_length,
            num_env_refs,
            schema_section,
            _schema_ref_length,
            decision_section,
            type_table_size,
            i2g_count,
            group_count,
            item_info_count,
            num_candidates,
            _data_length,
            large_table_length,
        ) = _HEADER.unpack(_read_exact(stream, _HEADER.size))
        if env_refs_length != 0 or num_env_refs != 0:
            raise ValueError("environment references are not supported")
        if large_table_length != 0:
            raise ValueError("large item tables are not supported")

        type_table = []
        for size, value_type in _TYPE_ENTRY.iter_unpack(
            _read_exact(stream, _TYPE_ENTRY.size * type_table_size)
        ):
            if size != 4:
                raise ValueError("unexpected resource value type entry size")
            type_table.append(value_type)

        i2g = [ItemToItemInfoGroup(a, b) for a, b in _read_pairs(stream, i2g_count)]
        groups = [ItemInfoGroup(a, b) for a, b in _read_pairs(stream, group_count)]
        infos = [ItemInfo(a, b) for a, b in _read_pairs(stream, item_info_count)]

        candidates = []
        for marker, type_index, source, index, section in _CANDIDATE.iter_unpack(
            _read_exact(stream, _CANDIDATE.size * num_candidates)
        ):
            if marker != 0x01:
                raise ValueError("unexpected candidate marker")
            if type_index >= len(type_table):
                raise ValueError("candidate refers to an unknown resource value type")
            candidates.append(CandidateInfo(type_table[type_index], source, index, section))

        return cls(
            hierarchical_schema_section=schema_section,
            decision_info_section=decision_section,
            item_to_item_info_groups=i2g,
            item_info_groups=groups,
            item_infos=infos,
            candidate_infos=candidates,
        )

    def write(self, stream: BinaryIO) -> None:
        """Write the section body to a binary stream."""
        type_table = sorted({c.resource_value_type for c in self.candidate_infos})
        type_index = {value_type: i for i, value_type in enumerate(type_table)}
        stream.write(
            _HEADER.pack(
                0,
                0,
                self.hierarchical_schema_section & 0xFFFF,
                0,
                self.decision_info_section & 0xFFFF,
                len(type_table) & 0xFFFF,
                len(self.item_to_item_info_groups) & 0xFFFF,
                len(self.item_info_groups) & 0xFFFF,
                len(self.item_infos) & 0xFFFFFFFF,
                len(self.candidate_infos) & 0xFFFFFFFF,
                0,
                0,
            )
        )
        for value_type in type_table:
            stream.write(_TYPE_ENTRY.pack(4, value_type & 0xFFFFFFFF))
        for entry in self.item_to_item_info_groups:
            stream.write(_PAIR.pack(entry.first_item & 0xFFFF, entry.item_info_group & 0xFFFF))
        for group in self.item_info_groups:
            stream.write(_PAIR.pack(group.group_size & 0xFFFF, group.first_item_info & 0xFFFF))
        for info in self.item_infos:
            stream.write(_PAIR.pack(info.decision & 0xFFFF, info.first_candidate & 0xFFFF))
        for candidate in self.candidate_infos:
            stream.write(
                _CANDIDATE.pack(
                    0x01,
                    type_index[candidate.resource_value_type] & 0xFF,
                    candidate.source_file_index & 0xFFFF,
                    candidate.data_item_index & 0xFFFF,
                    candidate.data_item_section & 0xFFFF,
                )
            )