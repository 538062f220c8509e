"""
API 请求/响应数据模型（Schema）

使用 Pydantic 进行数据验证和序列化。
ID 在响应中一律以十进制字符串返回，避免 JavaScript 等客户端丢失精度。
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from flakeid.core.deconstruct import DeconstructedSnowflake

# ============================================================
# 通用响应模型
# ============================================================


class ApiEnvelope(BaseModel):
    """
    API 统一响应格式

    示例响应：
        {"code": 0, "message": "success", "data": {...}}
        {"code": 400201, "message": "Invalid \"amount\" ...", "data": None}
    """
    code: int = 0  # 默认成功
    message: str = "success"  # 默认成功消息
    data: Any | None = None  # 业务数据（可选）


# ============================================================
# ID 相关
# ============================================================


class GenerateRequest(BaseModel):
    """
    批量生成请求模型

    除 amount 外都是可选的起点参数，未给出时使用生成器的默认值。
    """
    amount: int = Field(default=1, ge=1)  # 生成数量，上限由 MAX_BATCH_SIZE 控制
    timestamp: int | None = Field(default=None, ge=0)  # 毫秒时间戳
    worker_id: int | None = Field(default=None, ge=0)
    process_id: int | None = Field(default=None, ge=0)
    sequence: int | None = Field(default=None, ge=0)


class SnowflakePublic(BaseModel):
    """解析后的 ID，id 为十进制字符串"""
    id: str
    timestamp: int
    worker_id: int
    process_id: int | None = None
    sequence: int
    binary: str
    date: datetime | None = None  # 超出 datetime 范围时为 None

    @classmethod
    def from_view(cls, view: DeconstructedSnowflake) -> SnowflakePublic:
        return cls(
            id=str(view.snowflake),
            timestamp=view.timestamp,
            worker_id=view.worker_id,
            process_id=view.process_id,
            sequence=view.sequence,
            binary=view.binary,
            date=view.date,
        )


class GenerateData(BaseModel):
    count: int
    ids: list[SnowflakePublic]


class LayoutField(BaseModel):
    name: str
    bits: int
    offset: int
    max: int


class LayoutData(BaseModel):
    """当前生成器的 epoch 和位布局"""
    epoch: int
    max_epoch: int
    total_bits: int
    sequence_space: int
    fields: list[LayoutField]
