from __future__ import annotations

import pytest

from flakeid.core.codec import extract_bits
from flakeid.core.layout import CONFIGURABLE_LAYOUT, FIXED_LAYOUT, FieldLayout
from flakeid.enums import Field, LayoutPreset
from flakeid.errors import ConfigurationError


def test_fixed_layout_offsets():
    assert FIXED_LAYOUT.offset(Field.sequence) == 0
    assert FIXED_LAYOUT.offset(Field.worker) == 10
    assert FIXED_LAYOUT.offset(Field.timestamp) == 23
    assert FIXED_LAYOUT.max(Field.worker) == 8191
    assert FIXED_LAYOUT.sequence_space == 1024
    assert not FIXED_LAYOUT.has_process


def test_configurable_layout_offsets():
    layout = CONFIGURABLE_LAYOUT
    assert [layout.offset(f) for f in Field] == [22, 17, 12, 0]
    assert layout.max("worker") == 31
    assert layout.max(Field.process) == 31
    assert layout.max(Field.sequence) == 4095
    assert layout.sequence_space == 4096


def test_from_preset():
    assert FieldLayout.from_preset("fixed") is FIXED_LAYOUT
    assert FieldLayout.from_preset(LayoutPreset.configurable) is CONFIGURABLE_LAYOUT


def test_widths_over_total_rejected():
    with pytest.raises(ConfigurationError):
        FieldLayout(total_bits=64, epoch_bits=42, worker_bits=10, process_bits=5, sequence_bits=12)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"worker_bits": 0},
        {"sequence_bits": -1},
        {"epoch_bits": 41.0},
        {"total_bits": "64"},
        {"worker_bits": True},
        {"process_bits": -1},
    ],
)
def test_invalid_widths_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        FieldLayout(**kwargs)


def test_narrower_fields_leave_high_bits_unused():
    layout = FieldLayout(total_bits=128, epoch_bits=42, worker_bits=10, process_bits=10, sequence_bits=20)
    assert layout.offset(Field.timestamp) == 40
    value = layout.pack(2**42 - 1, 5, 6, 7)
    assert value < 2**82
    assert layout.unpack(value) == {
        Field.timestamp: 2**42 - 1,
        Field.worker: 5,
        Field.process: 6,
        Field.sequence: 7,
    }


def test_pack_fixed_layout():
    assert FIXED_LAYOUT.pack(1, 1, 0, 1) == (1 << 23) | (1 << 10) | 1
    # no process field, the value is ignored
    assert FIXED_LAYOUT.pack(1, 1, 99, 1) == FIXED_LAYOUT.pack(1, 1, 0, 1)


def test_describe_skips_missing_process_field():
    names = [f["name"] for f in FIXED_LAYOUT.describe()["fields"]]
    assert names == ["timestamp", "worker", "sequence"]
    assert len(CONFIGURABLE_LAYOUT.describe()["fields"]) == 4


def test_unpack_matches_extract_bits():
    layout = FieldLayout(total_bits=80, epoch_bits=40, worker_bits=6, process_bits=4, sequence_bits=12)
    value = layout.pack(987654321, 45, 11, 3000) | (1 << 79)
    fields = layout.unpack(value)
    assert fields == {Field.timestamp: 987654321, Field.worker: 45, Field.process: 11, Field.sequence: 3000}
    for field in Field:
        assert fields[field] == extract_bits(value, layout.offset(field), layout.width(field))
