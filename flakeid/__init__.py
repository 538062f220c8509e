"""
flakeid: Snowflake ID 生成与解析

模块划分：
- core/codec.py: 十进制 ↔ 二进制编解码
- core/layout.py: 位布局
- core/snowflake.py: 生成器
- core/deconstruct.py: 解析
- core/origin.py: worker/进程 ID 来源
"""
from .core.codec import binary_to_decimal, decimal_to_binary
from .core.deconstruct import DeconstructedSnowflake, deconstruct
from .core.layout import CONFIGURABLE_LAYOUT, FIXED_LAYOUT, FieldLayout
from .core.origin import ProcessOrigin, StaticOrigin
from .core.snowflake import GenerateOptions, Snowflake, SnowflakeGenerator, generate_id
from .enums import Field, LayoutPreset
from .errors import ConfigurationError, FlakeIdError, FormatError, SequenceRangeError

__all__ = [
    "CONFIGURABLE_LAYOUT",
    "FIXED_LAYOUT",
    "ConfigurationError",
    "DeconstructedSnowflake",
    "Field",
    "FieldLayout",
    "FlakeIdError",
    "FormatError",
    "GenerateOptions",
    "LayoutPreset",
    "ProcessOrigin",
    "SequenceRangeError",
    "Snowflake",
    "SnowflakeGenerator",
    "StaticOrigin",
    "binary_to_decimal",
    "decimal_to_binary",
    "deconstruct",
    "generate_id",
]
