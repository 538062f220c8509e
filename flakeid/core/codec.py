"""
十进制 ↔ 二进制编解码模块

Snowflake ID 在跨系统传输时使用十进制字符串（很多客户端的数字类型
无法精确表示 2^53 以上的整数），而位提取需要二进制表示。

Python 的 int 是任意精度整数，所以这里不需要手写长除法，
所有转换都是精确的，全程不经过浮点数。
"""
from __future__ import annotations

from typing import Any

from flakeid.errors import FormatError

_BINARY_DIGITS = frozenset("01")


def normalize(value: Any) -> int:
    """
    将 ID 的各种表示统一转换为非负整数

    支持：
    - int（包括超过 64 位的大整数）
    - 十进制字符串（允许首尾空白）
    - 实现了 __index__ 的对象（如 numpy 整数、Snowflake 实例）

    Args:
        value: 待转换的值

    Returns:
        非负整数

    Raises:
        FormatError: bool、float、负数、非数字字符串等
    """
    # bool 是 int 的子类，但 True/False 不是合法的 ID
    if isinstance(value, bool):
        raise FormatError(f"Invalid snowflake {value!r}: booleans are not identifiers")
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit() or not text.isascii():
            raise FormatError(f"Invalid snowflake {value!r}: expected a non-negative decimal string")
        return int(text)
    if isinstance(value, float):
        raise FormatError(f"Invalid snowflake {value!r}: floats lose precision, pass an int or str")
    try:
        number = value.__index__()
    except (AttributeError, TypeError):
        raise FormatError(
            f"Invalid snowflake {value!r}: expected int or decimal string, got {type(value).__name__}"
        ) from None
    if number < 0:
        raise FormatError(f"Invalid snowflake {value!r}: must be non-negative")
    return number


def decimal_to_binary(value: Any, width: int | None = None) -> str:
    """
    十进制 → 二进制字符串

    Args:
        value: 非负整数或十进制字符串
        width: 目标宽度，给定时左侧补零

    Returns:
        二进制字符串，如 "101"；0 编码为 "0"

    Raises:
        FormatError: 值非法，或位数超过 width
    """
    number = normalize(value)
    bits = format(number, "b")
    if width is None:
        return bits
    if len(bits) > width:
        raise FormatError(f"Snowflake {number} needs {len(bits)} bits, wider than {width} bits")
    return bits.zfill(width)


def binary_to_int(bits: str) -> int:
    """二进制字符串 → 整数"""
    if not isinstance(bits, str) or not bits or not set(bits) <= _BINARY_DIGITS:
        raise FormatError(f"Invalid binary string {bits!r}")
    return int(bits, 2)


def binary_to_decimal(bits: str) -> str:
    """
    二进制字符串 → 十进制字符串

    与 decimal_to_binary 互逆：
        binary_to_decimal(decimal_to_binary(x)) == str(x)
    """
    return str(binary_to_int(bits))


def extract_bits(value: Any, shift: int, length: int) -> int:
    """
    从 ID 中提取一段连续的位

    Args:
        value: ID（任意可 normalize 的表示）
        shift: 字段最低位的偏移量
        length: 字段位宽

    Returns:
        字段的值
    """
    mask = (1 << length) - 1
    return (normalize(value) >> shift) & mask
