"""The PRI descriptor section, which indexes the other sections by kind."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar

_HEADER = struct.Struct("<10H")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise EOFError(f"expected {size} bytes, got {len(data)}")
    return data


def _read_u16_list(stream: BinaryIO, count: int) -> list[int]:
    return list(struct.unpack(f"<{count}H", _read_exact(stream, 2 * count)))


def _write_u16_list(stream: BinaryIO, values: list[int]) -> None:
    stream.write(struct.pack(f"<{len(values)}H", *(v & 0xFFFF for v in values)))


class PriDescriptorFlags(enum.IntFlag):
    AUTO_MERGE = 1
    IS_DEPLOYMENT_MERGEABLE = 2
    IS_DEPLOYMENT_MERGE_RESULT = 4
    IS_AUTOMERGE_MERGE_RESULT = 8


@dataclass
class PriDescriptor:
    """Lists which section indices hold each kind of section."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_pridescex]\x00"

    pri_flags: int = 0
    included_file_list_section: bool = False
    hierarchical_schema_sections: list[int] = field(default_factory=list)
    decision_info_sections: list[int] = field(default_factory=list)
    resource_map_sections: list[int] = field(default_factory=list)
    primary_resource_map_section: int | None = None
    referenced_file_sections: list[int] = field(default_factory=list)
    data_item_sections: list[int] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> PriDescriptor:
        """Read a descriptor section body from a binary stream."""
        (
            pri_flags,
            included,
            reserved,
            num_schemas,
            num_decisions,
            num_maps,
            primary,
            num_referenced,
            num_data_items,
            reserved2,
        ) = _HEADER.unpack(_read_exact(stream, _HEADER.size))
        if reserved != 0 or reserved2 != 0:
            raise ValueError("reserved descriptor fields must be zero")
        return cls(
            pri_flags=pri_flags,
            included_file_list_section=included == 0xFFFF,
            hierarchical_schema_sections=_read_u16_list(stream, num_schemas),
            decision_info_sections=_read_u16_list(stream, num_decisions),
            resource_map_sections=_read_u16_list(stream, num_maps),
            primary_resource_map_section=None if primary == 0xFFF else primary,
            referenced_file_sections=_read_u16_list(stream, num_referenced),
            data_item_sections=_read_u16_list(stream, num_data_items),
        )

    def write(self, stream: BinaryIO) -> None:
        """Write the section body to a binary stream."""
        primary = (
            0xFFFF
            if self.primary_resource_map_section is None
            else self.primary_resource_map_section
        )
        stream.write(
            _HEADER.pack(
                self.pri_flags & 0xFFFF,
                0xFFFF if self.included_file_list_section else 0,
                0,
                len(self.hierarchical_schema_sections) & 0xFFFF,
                len(self.decision_info_sections) & 0xFFFF,
                len(self.resource_map_sections) & 0xFFFF,
                primary & 0xFFFF,
                len(self.referenced_file_sections) & 0xFFFF,
                len(self.data_item_sections) & 0xFFFF,
                0,
            )
        )
        for ids in (
            self.hierarchical_schema_sections,
            self.decision_info_sections,
            self.resource_map_sections,
            self.referenced_file_sections,
            self.data_item_sections,
        ):
            _write_u16_list(stream, ids)