import io

import pytest

from xbundle.pri.hierarchical_schema import HierarchicalSchema, ResourceMapEntry


def _sample() -> HierarchicalSchema:
    return HierarchicalSchema(
        unique_name="ms-appx://app/",
        name="app",
        scopes=[
            ResourceMapEntry(None, "Files"),
            ResourceMapEntry(0, "Assets"),
        ],
        items=[
            ResourceMapEntry(1, "Logo.png"),
            ResourceMapEntry(0, "café"),
            ResourceMapEntry(1, ""),
        ],
    )


def _to_bytes(schema: HierarchicalSchema) -> bytes:
    buf = io.BytesIO()
    schema.write(buf)
    return buf.getvalue()


def test_round_trip():
    schema = _sample()
    again = HierarchicalSchema.read(io.BytesIO(_to_bytes(schema)))
    assert again == schema
    assert again.scopes[0].parent is None
    assert again.items[1].name == "café"


def test_empty_round_trip():
    schema = HierarchicalSchema()
    assert HierarchicalSchema.read(io.BytesIO(_to_bytes(schema))) == schema


def test_header_bytes():
    data = _to_bytes(_sample())
    assert data[:2] == b"\x01\x00"
    assert data[8:24] == b"[def_hnamesx]  \x00"
    assert HierarchicalSchema.IDENTIFIER == b"[mrm_hschemaex] "


def test_bad_marker():
    data = bytearray(_to_bytes(_sample()))
    data[0] = 2
    with pytest.raises(ValueError):
        HierarchicalSchema.read(io.BytesIO(bytes(data)))


def test_bad_names_identifier():
    data = bytearray(_to_bytes(_sample()))
    data[9] = ord("x")
    with pytest.raises(ValueError):
        HierarchicalSchema.read(io.BytesIO(bytes(data)))


def test_unique_name_length_mismatch():
    data = bytearray(_to_bytes(_sample()))
    data[2] += 1
    with pytest.raises(ValueError):
        HierarchicalSchema.read(io.BytesIO(bytes(data)))


def test_truncated_input():
    data = _to_bytes(_sample())
    with pytest.raises(EOFError):
        HierarchicalSchema.read(io.BytesIO(data[:30]))


def test_read_from_offset():
    schema = _sample()
    buf = io.BytesIO(b"xxxx" + _to_bytes(schema))
    buf.seek(4)
    assert HierarchicalSchema.read(buf) == schema