"""
Snowflake ID 解析模块

根据 epoch 和位布局，将 ID 拆解为时间戳、worker/分片 ID、进程 ID、序列号。
解析是纯函数，不读写任何生成器状态。
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field

from flakeid.core.codec import decimal_to_binary, normalize
from flakeid.core.layout import FieldLayout
from flakeid.enums import Field

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class DeconstructedSnowflake(BaseModel):
    """
    解析结果（只读）

    每次解析都重新计算，不缓存。
    """
    model_config = ConfigDict(frozen=True)

    snowflake: int  # 原始 ID
    timestamp: int  # 毫秒时间戳（已加上 epoch）
    worker_id: int  # worker ID（固定布局下即分片 ID）
    process_id: int | None = None  # 进程 ID，布局没有进程字段时为 None
    sequence: int  # 同一毫秒内的序列号
    binary: str  # 按总位宽左侧补零的二进制字符串

    @property
    def shard_id(self) -> int:
        return self.worker_id

    @computed_field  # type: ignore[prop-decorator]
    @property
    def date(self) -> datetime | None:
        """
        时间戳对应的 UTC 时间

        时间戳字段较宽时解析结果可能超出 datetime 的范围（9999 年以后），此时返回 None。
        """
        try:
            return _UNIX_EPOCH + timedelta(milliseconds=self.timestamp)
        except OverflowError:
            return None


def deconstruct(epoch: int, layout: FieldLayout, snowflake: Any) -> DeconstructedSnowflake:
    """
    解析 Snowflake ID

    Args:
        epoch: 生成时使用的 epoch（毫秒）
        layout: 生成时使用的位布局
        snowflake: ID，支持 int、十进制字符串等

    Returns:
        DeconstructedSnowflake: 解析结果

    Raises:
        FormatError: 无法解析为非负整数，或位数超过 layout.total_bits

    比总位宽短的值视为左侧补零，不是错误。
    """
    value = normalize(snowflake)
    binary = decimal_to_binary(value, layout.total_bits)
    fields = layout.unpack(value)
    return DeconstructedSnowflake(
        snowflake=value,
        timestamp=fields[Field.timestamp] + epoch,
        worker_id=fields[Field.worker],
        process_id=fields[Field.process] if layout.has_process else None,
        sequence=fields[Field.sequence],
        binary=binary,
    )


def deconstruct_many(
    epoch: int, layout: FieldLayout, snowflakes: Iterable[Any]
) -> list[DeconstructedSnowflake]:
    return [deconstruct(epoch, layout, snowflake) for snowflake in snowflakes]
