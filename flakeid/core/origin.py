"""
来源 ID（worker/进程）模块

生成器在每次生成时向来源对象查询默认的 worker ID 和进程 ID。
多个生成器实例能否互不冲突，完全取决于这里配置的 ID 是否唯一，
这是部署方的责任，算法本身不做协调。
"""
from __future__ import annotations

import os
from typing import Protocol

from flakeid.errors import ConfigurationError

DEFAULT_WORKER_ID = 1
DEFAULT_PROCESS_ID = 0


def check_origin_id(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f'Invalid "{name}" {value!r}: must be an integer')
    if value < 0:
        raise ConfigurationError(f'Invalid "{name}" {value}: must be non-negative')
    return value


class OriginSource(Protocol):
    def worker_id(self) -> int: ...

    def process_id(self) -> int: ...


class StaticOrigin:
    """显式配置的 worker ID / 进程 ID"""

    def __init__(self, worker_id: int = DEFAULT_WORKER_ID, process_id: int = DEFAULT_PROCESS_ID) -> None:
        self._worker_id = check_origin_id("worker_id", worker_id)
        self._process_id = check_origin_id("process_id", process_id)

    def worker_id(self) -> int:
        return self._worker_id

    def process_id(self) -> int:
        return self._process_id

    def __repr__(self) -> str:
        return f"StaticOrigin(worker_id={self._worker_id}, process_id={self._process_id})"


class ProcessOrigin(StaticOrigin):
    """
    进程 ID 取自操作系统 PID

    PID 通常超过进程字段的位宽，生成器会按位与截断（见 SnowflakeGenerator）。
    每次调用都重新读取，fork 之后的子进程会拿到自己的 PID。
    """

    def __init__(self, worker_id: int = DEFAULT_WORKER_ID) -> None:
        super().__init__(worker_id=worker_id, process_id=DEFAULT_PROCESS_ID)

    def process_id(self) -> int:
        return os.getpid()

    def __repr__(self) -> str:
        return f"ProcessOrigin(worker_id={self._worker_id})"
