import io
import struct

import pytest

from xbundle.pri.decision_info import (
    Decision,
    DecisionInfo,
    Qualifier,
    QualifierSet,
    QualifierType,
)


def _sample() -> DecisionInfo:
    info = DecisionInfo()
    en = info.add_qualifier(Qualifier(QualifierType.LANGUAGE, 700, 0.5, "EN-US"))
    scale = info.add_qualifier(Qualifier(QualifierType.SCALE, 200, 0.0, "100"))
    info.add_qualifier(Qualifier(QualifierType.LANGUAGE, 700, 0.5, "EN-US"))
    first = info.add_qualifier_set(QualifierSet([en]))
    second = info.add_qualifier_set(QualifierSet([en, scale]))
    info.add_decision(Decision([first, second]))
    info.add_decision(Decision([]))
    return info


def _to_bytes(info: DecisionInfo) -> bytes:
    buf = io.BytesIO()
    info.write(buf)
    return buf.getvalue()


def test_round_trip():
    info = _sample()
    again = DecisionInfo.read(io.BytesIO(_to_bytes(info)))
    assert again == info
    assert again.qualifier(0).value == "EN-US"
    assert again.qualifier(1).qualifier_type is QualifierType.SCALE
    assert again.qualifier(0).fallback_score == 0.5


def test_empty_section_bytes():
    assert _to_bytes(DecisionInfo()) == b"\x00" * 12
    assert DecisionInfo.read(io.BytesIO(b"\x00" * 12)) == DecisionInfo()


def test_add_returns_indices_and_lookup():
    info = _sample()
    assert info.num_qualifiers() == 3
    assert info.num_qualifier_sets() == 2
    assert info.num_decisions() == 2
    assert info.qualifier_set(1).qualifiers == [0, 1]
    assert info.decision(0).qualifier_sets == [0, 1]
    assert info.qualifier(3) is None
    assert info.qualifier_set(-1) is None
    assert info.decision(2) is None


def test_distinct_qualifiers_are_shared():
    data = _to_bytes(_sample())
    header = struct.unpack("<6H", data[:12])
    assert header[0] == 2
    assert header[1] == 3
    assert header[5] == len(data) - 12


def test_written_after_prefix():
    info = _sample()
    buf = io.BytesIO()
    buf.write(b"abcd")
    info.write(buf)
    assert buf.tell() == len(buf.getvalue())
    buf.seek(4)
    assert DecisionInfo.read(buf) == info


def test_unknown_qualifier_type_is_skipped():
    info = DecisionInfo()
    info.add_qualifier(Qualifier(QualifierType.THEME, 1, 0.0, "dark"))
    data = bytearray(_to_bytes(info))
    # header (12) + one qualifier info (8) then distinct info: reserved u16, type u16
    struct.pack_into("<H", data, 22, 99)
    assert DecisionInfo.read(io.BytesIO(bytes(data))).num_qualifiers() == 0


def test_nonzero_reserved_qualifier_field():
    info = DecisionInfo()
    info.add_qualifier(Qualifier(QualifierType.THEME, 1, 0.0, "dark"))
    data = bytearray(_to_bytes(info))
    struct.pack_into("<H", data, 18, 1)
    with pytest.raises(ValueError):
        DecisionInfo.read(io.BytesIO(bytes(data)))


def test_set_outside_index_table():
    data = struct.pack("<6H2H", 0, 0, 1, 0, 0, 0, 0, 3)
    with pytest.raises(ValueError):
        DecisionInfo.read(io.BytesIO(data))


def test_truncated_input():
    data = _to_bytes(_sample())
    with pytest.raises(EOFError):
        DecisionInfo.read(io.BytesIO(data[:20]))