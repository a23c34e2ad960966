"""The decision info section: qualifiers, qualifier sets and decisions."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import BinaryIO, ClassVar

_HEADER = struct.Struct("<6H")
_PAIR = struct.Struct("<HH")
_QUALIFIER_INFO = struct.Struct("<4H")
_DISTINCT_INFO = struct.Struct("<4HI")
_U16 = struct.Struct("<H")


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


def _encode_utf16z(text: str) -> bytes:
    units = [ord(c) & 0xFFFF for c in text]
    units.append(0)
    return struct.pack(f"<{len(units)}H", *units)


def _slice_table(table: list[int], first: int, count: int) -> list[int]:
    if first + count > len(table):
        raise ValueError("index table reference out of range")
    return table[first : first + count]


def _score_to_wire(score: float) -> int:
    return min(max(int(round(score * 1000.0)), 0), 0xFFFF)


class QualifierType(enum.IntEnum):
    LANGUAGE = 0
    CONTRAST = 1
    SCALE = 2
    HOME_REGION = 3
    TARGET_SIZE = 4
    LAYOUT_DIRECTION = 5
    THEME = 6
    ALTERNATE_FORM = 7
    DX_FEATURE_LEVEL = 8
    CONFIGURATION = 9
    DEVICE_FAMILY = 10
    CUSTOM = 11


@dataclass
class Qualifier:
    qualifier_type: QualifierType
    priority: int
    fallback_score: float
    value: str


@dataclass
class QualifierSet:
    qualifiers: list[int] = field(default_factory=list)


@dataclass
class Decision:
    qualifier_sets: list[int] = field(default_factory=list)


@dataclass
class DecisionInfo:
    """Qualifiers grouped into sets, and sets grouped into decisions."""

    IDENTIFIER: ClassVar[bytes] = b"[mrm_decn_info]\x00"

    qualifiers: list[Qualifier] = field(default_factory=list)
    qualifier_sets: list[QualifierSet] = field(default_factory=list)
    decisions: list[Decision] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> DecisionInfo:
        """Read a decision info section body from a seekable binary stream."""
        (
            num_distinct,
            num_qualifiers,
            num_sets,
            num_decisions,
            num_index_entries,
            _total_data_length,
        ) = _HEADER.unpack(_read_exact(stream, _HEADER.size))
        decision_infos = list(
            _PAIR.iter_unpack(_read_exact(stream, _PAIR.size * num_decisions))
        )
        set_infos = list(_PAIR.iter_unpack(_read_exact(stream, _PAIR.size * num_sets)))
        qualifier_infos = []
        for index, priority, score, reserved in _QUALIFIER_INFO.iter_unpack(
            _read_exact(stream, _QUALIFIER_INFO.size * num_qualifiers)
        ):
            if reserved != 0:
                raise ValueError("reserved qualifier field must be zero")
            qualifier_infos.append((index, priority, score))
        distinct_infos = [
            (qualifier_type, offset)
            for _, qualifier_type, _, _, offset in _DISTINCT_INFO.iter_unpack(
                _read_exact(stream, _DISTINCT_INFO.size * num_distinct)
            )
        ]
        index_table = list(
            struct.unpack(
                f"<{num_index_entries}H", _read_exact(stream, 2 * num_index_entries)
            )
        )
        data_start = stream.tell()

        qualifiers = []
        for index, priority, score in qualifier_infos:
            if index >= len(distinct_infos):
                raise ValueError("qualifier refers to an unknown distinct qualifier")
            raw_type, offset = distinct_infos[index]
            try:
                qualifier_type = QualifierType(raw_type)
            except ValueError:
                continue
            stream.seek(data_start + offset * 2)
            qualifiers.append(
                Qualifier(
                    qualifier_type=qualifier_type,
                    priority=priority,
                    fallback_score=score / 1000.0,
                    value=_read_utf16z(stream),
                )
            )

        qualifier_sets = [
            QualifierSet(_slice_table(index_table, first, count))
            for first, count in set_infos
        ]
        decisions = [
            Decision(_slice_table(index_table, first, count))
            for first, count in decision_infos
        ]
        return cls(qualifiers, qualifier_sets, decisions)

    def write(self, stream: BinaryIO) -> None:
        """Write the section body to a seekable binary stream."""
        values = bytearray()
        distinct: dict[tuple[int, str], int] = {}
        distinct_infos: list[tuple[int, int]] = []
        qualifier_infos: list[tuple[int, int, int]] = []
        for qualifier in self.qualifiers:
            key = (int(qualifier.qualifier_type), qualifier.value)
            index = distinct.get(key)
            if index is None:
                index = len(distinct_infos)
                distinct[key] = index
                distinct_infos.append((key[0], len(values) // 2))
                values += _encode_utf16z(qualifier.value)
            qualifier_infos.append(
                (index, qualifier.priority, _score_to_wire(qualifier.fallback_score))
            )

        index_table: list[int] = []
        set_infos = []
        for qualifier_set in self.qualifier_sets:
            set_infos.append((len(index_table), len(qualifier_set.qualifiers)))
            index_table.extend(qualifier_set.qualifiers)
        decision_infos = []
        for decision in self.decisions:
            decision_infos.append((len(index_table), len(decision.qualifier_sets)))
            index_table.extend(decision.qualifier_sets)

        stream.write(
            _HEADER.pack(
                len(distinct_infos) & 0xFFFF,
                len(qualifier_infos) & 0xFFFF,
                len(set_infos) & 0xFFFF,
                len(decision_infos) & 0xFFFF,
                len(index_table) & 0xFFFF,
                0,
            )
        )
        start = stream.tell()
        for first, count in decision_infos:
            stream.write(_PAIR.pack(first & 0xFFFF, count & 0xFFFF))
        for first, count in set_infos:
            stream.write(_PAIR.pack(first & 0xFFFF, count & 0xFFFF))
        for index, priority, score in qualifier_infos:
            stream.write(_QUALIFIER_INFO.pack(index & 0xFFFF, priority & 0xFFFF, score, 0))
        for qualifier_type, offset in distinct_infos:
            stream.write(_DISTINCT_INFO.pack(0, qualifier_type & 0xFFFF, 0, 0, offset))
        for entry in index_table:
            stream.write(_U16.pack(entry & 0xFFFF))
        stream.write(bytes(values))
        end = stream.tell()
        stream.seek(start - 2)
        stream.write(_U16.pack((end - start) & 0xFFFF))
        stream.seek(end)

    def num_qualifiers(self) -> int:
        return len(self.qualifiers)

    def qualifier(self, index: int) -> Qualifier | None:
        return self.qualifiers[index] if 0 <= index < len(self.qualifiers) else None

    def add_qualifier(self, qualifier: Qualifier) -> int:
        self.qualifiers.append(qualifier)
        return len(self.qualifiers) - 1

    def num_qualifier_sets(self) -> int:
        return len(self.qualifier_sets)

    def qualifier_set(self, index: int) -> QualifierSet | None:
        return self.qualifier_sets[index] if 0 <= index < len(self.qualifier_sets) else None

    def add_qualifier_set(self, qualifier_set: QualifierSet) -> int:
        self.qualifier_sets.append(qualifier_set)
        return len(self.qualifier_sets) - 1

    def num_decisions(self) -> int:
        return len(self.decisions)

    def decision(self, index: int) -> Decision | None:
        return self.decisions[index] if 0 <= index < len(self.decisions) else None

    def add_decision(self, decision: Decision) -> int:
        self.decisions.append(decision)
        return len(self.decisions) - 1