"""
位布局模块

描述 Snowflake ID 中各字段的位宽和偏移，从高位到低位依次为：

    | 时间戳差值 (E) | worker/分片 ID (W) | 进程 ID (P) | 序列号 (S) |

E + W + P + S 不能超过总位宽 T；未使用的高位保持为 0。
固定布局没有进程字段（P = 0），worker 字段即分片 ID。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flakeid.core.codec import extract_bits
from flakeid.enums import Field, LayoutPreset
from flakeid.errors import ConfigurationError


def _check_width(name: str, value: Any, *, allow_zero: bool = False) -> None:
    # bool 是 int 的子类，要单独排除
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f'Invalid "{name}" {value!r}: must be an integer')
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(f'Invalid "{name}" {value}: must be a positive integer')


@dataclass(frozen=True)
class FieldLayout:
    """
    ID 位布局（不可变）

    Attributes:
        total_bits: ID 总位宽
        epoch_bits: 时间戳差值位宽
        worker_bits: worker/分片 ID 位宽
        process_bits: 进程 ID 位宽，0 表示没有进程字段
        sequence_bits: 序列号位宽

    Raises:
        ConfigurationError: 位宽非正整数，或位宽之和超过总位宽
    """
    total_bits: int = 64
    epoch_bits: int = 42
    worker_bits: int = 5
    process_bits: int = 5
    sequence_bits: int = 12

    def __post_init__(self) -> None:
        _check_width("total_bits", self.total_bits)
        _check_width("epoch_bits", self.epoch_bits)
        _check_width("worker_bits", self.worker_bits)
        _check_width("process_bits", self.process_bits, allow_zero=True)
        _check_width("sequence_bits", self.sequence_bits)
        used = self.epoch_bits + self.worker_bits + self.process_bits + self.sequence_bits
        if used > self.total_bits:
            raise ConfigurationError(
                f"Field widths add up to {used} bits, more than total_bits={self.total_bits}"
            )

    @classmethod
    def from_preset(cls, preset: LayoutPreset | str) -> FieldLayout:
        return _PRESETS[LayoutPreset(preset)]

    @property
    def has_process(self) -> bool:
        return self.process_bits > 0

    @property
    def sequence_space(self) -> int:
        """序列号取模的基数（每毫秒最多可生成的 ID 数）"""
        return 1 << self.sequence_bits

    def width(self, field: Field | str) -> int:
        return {
            Field.timestamp: self.epoch_bits,
            Field.worker: self.worker_bits,
            Field.process: self.process_bits,
            Field.sequence: self.sequence_bits,
        }[Field(field)]

    def offset(self, field: Field | str) -> int:
        """字段最低位在 ID 中的偏移（第 0 位为最低位）"""
        field = Field(field)
        offset = 0
        for candidate in (Field.sequence, Field.process, Field.worker, Field.timestamp):
            if candidate is field:
                return offset
            offset += self.width(candidate)
        raise AssertionError(field)  # pragma: no cover

    def max(self, field: Field | str) -> int:
        """字段可表示的最大值 2^width - 1"""
        return (1 << self.width(field)) - 1

    def pack(self, delta: int, worker_id: int, process_id: int, sequence: int) -> int:
        """
        将各字段组合成 ID

        调用方负责保证每个值都在字段范围内（生成器在调用前完成了校验/截断）。
        """
        value = delta << self.offset(Field.timestamp)
        value |= worker_id << self.offset(Field.worker)
        if self.has_process:
            value |= process_id << self.offset(Field.process)
        return value | sequence

    def unpack(self, value: int) -> dict[Field, int]:
        """将 ID 拆分为各字段的值（pack 的逆操作）"""
        return {
            field: extract_bits(value, self.offset(field), self.width(field))
            for field in Field
        }

    def describe(self) -> dict[str, Any]:
        """布局信息（用于 API 展示/日志）"""
        return {
            "total_bits": self.total_bits,
            "fields": [
                {
                    "name": field.value,
                    "bits": self.width(field),
                    "offset": self.offset(field),
                    "max": self.max(field),
                }
                for field in Field
                if self.width(field) > 0
            ],
            "sequence_space": self.sequence_space,
        }


# 64 位固定布局：41 | 13 | 10，分片 ID 占据 worker + 进程的位置
FIXED_LAYOUT = FieldLayout(total_bits=64, epoch_bits=41, worker_bits=13, process_bits=0, sequence_bits=10)

# 可配置布局的默认值：42 | 5 | 5 | 12
CONFIGURABLE_LAYOUT = FieldLayout()

_PRESETS = {
    LayoutPreset.fixed: FIXED_LAYOUT,
    LayoutPreset.configurable: CONFIGURABLE_LAYOUT,
}
