"""
枚举类型定义模块

所有枚举都继承自 str 和 Enum，这样既可以用作字符串（环境变量、JSON），
又具有枚举的特性。
"""
from enum import Enum


class LayoutPreset(str, Enum):
    """
    位布局预设

    - fixed: 64 位固定布局，时间戳 41 位 | 分片 ID 13 位 | 序列号 10 位
    - configurable: 可配置布局的默认值，64 位，时间戳 42 | worker 5 | 进程 5 | 序列号 12
    """
    fixed = "fixed"
    configurable = "configurable"


class Field(str, Enum):
    """
    ID 中的字段，按从高位到低位的顺序排列
    """
    timestamp = "timestamp"
    worker = "worker"
    process = "process"
    sequence = "sequence"
