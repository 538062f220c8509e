"""
Snowflake ID 生成器模块

生成按时间排序、无需协调的分布式唯一 ID。

ID 结构（从高位到低位，位宽由 FieldLayout 决定）：
- 时间戳：距离 epoch 的毫秒数
- worker/分片 ID：区分不同的生成器实例
- 进程 ID：可选，固定布局下没有这个字段
- 序列号：同一毫秒内的序号

唯一性保证只针对同一个 (来源 ID, 生成器实例)：
- 同一实例内通过锁串行化 sequence / last_timestamp 的读-改-写
- 不同实例之间没有共享状态，依赖部署方配置不同的来源 ID
"""
from __future__ import annotations

import logging
import threading  # 线程锁，用于并发安全
import time  # 时间处理
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from flakeid.core.config import settings
from flakeid.core.deconstruct import DeconstructedSnowflake, deconstruct, deconstruct_many
from flakeid.core.layout import CONFIGURABLE_LAYOUT, FieldLayout
from flakeid.core.origin import OriginSource, StaticOrigin, check_origin_id
from flakeid.enums import Field
from flakeid.errors import FormatError, SequenceRangeError, epoch_overflow

logger = logging.getLogger(__name__)

# 默认 epoch：2000-01-01T00:00:00Z
DEFAULT_EPOCH_MS = 946684800000

# 低于 epoch + 3 的时间戳会被抬高到 epoch + 3
EPOCH_CLAMP_MS = 3

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_millis(value: datetime | int) -> int:
    """
    将时间转换为毫秒时间戳

    Args:
        value: 毫秒时间戳（int）或 datetime（无时区视为 UTC）

    Raises:
        FormatError: 不支持的类型
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (value - _UNIX_EPOCH) // timedelta(milliseconds=1)
    if isinstance(value, bool) or not isinstance(value, int):
        raise FormatError(f"Invalid timestamp {value!r}: expected epoch milliseconds or datetime")
    return value


@dataclass(frozen=True)
class GenerateOptions:
    """
    单次生成的可选参数，未给出的字段按以下规则取默认值：

    - timestamp: 当前时间
    - worker_id / process_id: 生成器的来源（OriginSource）
    - sequence: 自动递增；显式给出时原样使用，重复风险由调用方负责
    """
    timestamp: datetime | int | None = None
    worker_id: int | None = None
    process_id: int | None = None
    sequence: int | None = None


@dataclass(frozen=True, order=True)
class Snowflake:
    """
    生成的 ID（不可变）

    相等和排序只比较整数值；解析出的各字段在生成时一次性计算好。
    str() 返回十进制字符串，用于跨系统传输。
    """
    id: int
    view: DeconstructedSnowflake = field(compare=False, repr=False)

    @property
    def timestamp(self) -> int:
        return self.view.timestamp

    @property
    def worker_id(self) -> int:
        return self.view.worker_id

    @property
    def shard_id(self) -> int:
        return self.view.worker_id

    @property
    def process_id(self) -> int | None:
        return self.view.process_id

    @property
    def sequence(self) -> int:
        return self.view.sequence

    @property
    def binary(self) -> str:
        return self.view.binary

    @property
    def date(self) -> datetime | None:
        return self.view.date

    def __int__(self) -> int:
        return self.id

    def __index__(self) -> int:
        return self.id

    def __str__(self) -> str:
        return str(self.id)


class SnowflakeGenerator:
    """
    Snowflake ID 生成器

    每个实例独占自己的 sequence / last_timestamp，多个实例之间互不干扰。
    generate 是临界区：同一实例被多个线程调用时由锁串行化。

    Args:
        epoch: 毫秒时间戳或 datetime，默认 2000-01-01 UTC
        layout: 位布局，默认 CONFIGURABLE_LAYOUT（64 位：42 | 5 | 5 | 12）
        origin: 默认来源 ID，默认 StaticOrigin(worker_id=1, process_id=0)
    """

    def __init__(
        self,
        epoch: datetime | int | None = None,
        layout: FieldLayout = CONFIGURABLE_LAYOUT,
        origin: OriginSource | None = None,
    ) -> None:
        self._epoch = DEFAULT_EPOCH_MS if epoch is None else to_millis(epoch)
        self._layout = layout
        self._origin = origin if origin is not None else StaticOrigin()
        # 最后一个可编码的时间戳，时间戳差值必须能放进 epoch_bits
        self._max_epoch = self._epoch + layout.max(Field.timestamp)
        # RLock: generate_many 持锁期间会重入 generate
        self._lock = threading.RLock()
        self._last_ts: int | None = None  # None 表示尚未生成过 ID
        self._seq = 0

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def layout(self) -> FieldLayout:
        return self._layout

    @property
    def origin(self) -> OriginSource:
        return self._origin

    @property
    def max_epoch(self) -> int:
        return self._max_epoch

    @property
    def sequence(self) -> int:
        return self._seq

    @property
    def last_timestamp(self) -> int | None:
        return self._last_ts

    @staticmethod
    def _now_ms() -> int:
        """获取当前时间的毫秒时间戳"""
        return int(time.time() * 1000)

    def _resolve_origin(self, name: str, field_: Field, value: int) -> int:
        check_origin_id(name, value)
        limit = self._layout.max(field_)
        if value > limit:
            # 超出位宽的来源 ID 按位与截断，而不是报错
            masked = value & limit
            logger.warning("%s %d exceeds %d bits, masked to %d", name, value, self._layout.width(field_), masked)
            return masked
        return value

    def _next_state(self, requested: int, sequence: int | None) -> tuple[int, int]:
        """
        计算下一个 (timestamp, sequence)，不修改任何状态

        调用方在持锁状态下调用，校验全部通过后再提交。
        """
        timestamp = max(requested, self._epoch + EPOCH_CLAMP_MS)
        if timestamp > self._max_epoch:
            raise epoch_overflow(timestamp, self._max_epoch)

        if sequence is not None:
            return timestamp, sequence

        last_ts = self._last_ts
        if last_ts is None or timestamp > last_ts:
            return timestamp, 0

        if timestamp < last_ts:
            # 时钟回拨或请求了更早的时间戳：不低于已发出的最大时间戳
            logger.debug("timestamp %d is behind last issued %d, reusing %d", timestamp, last_ts, last_ts)
            timestamp = last_ts

        seq = (self._seq + 1) % self._layout.sequence_space
        if seq == 0:
            # 当前毫秒的序列号用完，顺延到下一毫秒
            timestamp += 1
            logger.debug("sequence space exhausted, rolling over to %d", timestamp)
            if timestamp > self._max_epoch:
                raise epoch_overflow(timestamp, self._max_epoch)
        return timestamp, seq

    def generate(self, options: GenerateOptions | None = None, **overrides: Any) -> Snowflake:
        """
        生成一个 ID

        Args:
            options: GenerateOptions
            **overrides: 覆盖 options 中的同名字段（timestamp / worker_id / process_id / sequence）

        Returns:
            Snowflake: 生成的 ID 及其解析结果

        Raises:
            ConfigurationError: 时间戳超出 epoch 位宽（需要更换 epoch）、来源 ID 为负数
            SequenceRangeError: 显式序列号超出 [0, sequence_space)

        算法说明：
        1. 未指定时间戳时取当前时间
        2. 早于 epoch + 3 的时间戳抬高到 epoch + 3
        3. 时间戳超出 epoch 位宽时报错
        4. 显式序列号原样使用；否则同一毫秒内递增，溢出时顺延到下一毫秒，新的毫秒从 0 开始
        5. 记录 last_timestamp
        6. 来源 ID 超出位宽时按位与截断
        7. 组合各字段生成最终 ID

        注意：显式序列号连同时间戳原样记录为 last_timestamp，即使它早于已发出的时间戳。
        之后的自动递增会从这个较早的位置继续，可能重新生成之前自动分配过的 ID，
        这是显式序列号的重复风险的一部分，由调用方负责避免。
        """
        opts = replace(options or GenerateOptions(), **overrides)
        requested = self._now_ms() if opts.timestamp is None else to_millis(opts.timestamp)

        if opts.sequence is not None:
            if isinstance(opts.sequence, bool) or not isinstance(opts.sequence, int):
                raise SequenceRangeError(f'Invalid "sequence" {opts.sequence!r}: must be an integer')
            if not 0 <= opts.sequence < self._layout.sequence_space:
                raise SequenceRangeError(
                    f'Invalid "sequence" {opts.sequence}: must be in [0, {self._layout.sequence_space})'
                )

        worker_id = self._resolve_origin(
            "worker_id",
            Field.worker,
            self._origin.worker_id() if opts.worker_id is None else opts.worker_id,
        )
        process_id = 0
        if self._layout.has_process:
            process_id = self._resolve_origin(
                "process_id",
                Field.process,
                self._origin.process_id() if opts.process_id is None else opts.process_id,
            )

        with self._lock:  # 加锁，确保线程安全
            timestamp, seq = self._next_state(requested, opts.sequence)
            self._seq = seq
            self._last_ts = timestamp

        value = self._layout.pack(timestamp - self._epoch, worker_id, process_id, seq)
        return Snowflake(id=value, view=self.deconstruct(value))

    def generate_many(
        self, amount: int, options: GenerateOptions | None = None, **overrides: Any
    ) -> list[Snowflake]:
        """
        批量生成 ID

        timestamp 和 sequence 只是起点：sequence 只作用于第一个 ID，
        固定的 timestamp 在序列号溢出后随之顺延，保证整批 ID 不重复。
        整批生成期间持有锁，同一批 ID 严格递增。

        Raises:
            SequenceRangeError: amount 不是 >= 1 的整数
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 1:
            raise SequenceRangeError(f'Invalid "amount" {amount!r}: must be an integer greater than 0')

        opts = replace(options or GenerateOptions(), **overrides)
        if amount == 1:
            return [self.generate(opts)]

        if opts.timestamp is not None:
            opts = replace(opts, timestamp=max(to_millis(opts.timestamp), self._epoch + EPOCH_CLAMP_MS))

        snowflakes: list[Snowflake] = []
        with self._lock:
            while len(snowflakes) < amount:
                snowflake = self.generate(opts)
                snowflakes.append(snowflake)
                # 后续 ID 交给自动递增
                opts = replace(opts, sequence=None)
                if opts.timestamp is not None and snowflake.timestamp > opts.timestamp:
                    opts = replace(opts, timestamp=snowflake.timestamp)
        return snowflakes

    def deconstruct(self, snowflake: Any) -> DeconstructedSnowflake:
        """使用本生成器的 epoch 和布局解析 ID"""
        return deconstruct(self._epoch, self._layout, snowflake)

    def deconstruct_many(self, snowflakes: Iterable[Any]) -> list[DeconstructedSnowflake]:
        return deconstruct_many(self._epoch, self._layout, snowflakes)

    def __repr__(self) -> str:
        return f"SnowflakeGenerator(epoch={self._epoch}, layout={self._layout!r}, origin={self._origin!r})"


@lru_cache(maxsize=1)
def get_generator() -> SnowflakeGenerator:
    """
    获取全局 Snowflake 生成器实例（单例模式）

    第一次调用时根据配置创建实例，后续调用返回同一个实例。
    测试中可以用 get_generator.cache_clear() 重置。
    """
    generator = SnowflakeGenerator(
        epoch=settings.SNOWFLAKE_EPOCH_MS,
        layout=settings.build_layout(),
        origin=settings.build_origin(),
    )
    logger.info("snowflake generator ready: %r", generator)
    return generator


def generate_id() -> int:
    """
    生成唯一 ID（便捷函数）

    示例：
        >>> user_id = generate_id()
    """
    return get_generator().generate().id
