from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from flakeid.core.deconstruct import deconstruct, deconstruct_many
from flakeid.core.layout import CONFIGURABLE_LAYOUT, FIXED_LAYOUT, FieldLayout
from flakeid.errors import FormatError

EPOCH_MS = 1577836800000


def test_fixed_layout_fields():
    value = (1000 << 23) | (77 << 10) | 513
    view = deconstruct(EPOCH_MS, FIXED_LAYOUT, value)
    assert view.snowflake == value
    assert view.timestamp == EPOCH_MS + 1000
    assert view.shard_id == view.worker_id == 77
    assert view.process_id is None
    assert view.sequence == 513
    assert view.binary == format(value, "b").zfill(64)


def test_short_value_is_zero_padded():
    view = deconstruct(EPOCH_MS, FIXED_LAYOUT, "5")
    assert view.sequence == 5
    assert view.worker_id == 0
    assert view.timestamp == EPOCH_MS
    assert view.binary == "0" * 61 + "101"
    assert view.date == datetime(2020, 1, 1, tzinfo=timezone.utc)


def test_accepts_decimal_string_beyond_signed_range():
    value = 2**64 - 1
    view = deconstruct(EPOCH_MS, CONFIGURABLE_LAYOUT, str(value))
    assert view.timestamp == EPOCH_MS + 2**42 - 1
    assert (view.worker_id, view.process_id, view.sequence) == (31, 31, 4095)
    assert view.binary == "1" * 64


@pytest.mark.parametrize("bad", [2**64, "-7", "0x10", 3.0, None, "1 2"])
def test_rejects_invalid(bad):
    with pytest.raises(FormatError):
        deconstruct(EPOCH_MS, FIXED_LAYOUT, bad)


def test_view_is_read_only():
    view = deconstruct(EPOCH_MS, FIXED_LAYOUT, 1)
    with pytest.raises(ValidationError):
        view.sequence = 2  # type: ignore[misc]


def test_deconstruct_many_and_dump():
    views = deconstruct_many(EPOCH_MS, FIXED_LAYOUT, [1, "2", 3])
    assert [v.sequence for v in views] == [1, 2, 3]
    dumped = views[0].model_dump()
    assert "date" in dumped
    assert dumped["process_id"] is None


def test_date_beyond_datetime_range_is_none():
    # 60 位时间戳差值远超 9999 年
    layout = FieldLayout(total_bits=96, epoch_bits=60, worker_bits=12, process_bits=12, sequence_bits=12)
    view = deconstruct(EPOCH_MS, layout, 2**96 - 1)
    assert view.timestamp == EPOCH_MS + 2**60 - 1
    assert (view.worker_id, view.process_id, view.sequence) == (4095, 4095, 4095)
    assert view.date is None
    assert view.model_dump()["date"] is None
