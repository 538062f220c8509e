"""
ID 路由模块

- POST /ids: 生成一个或多个 ID
- GET /ids/layout: 当前 epoch 和位布局
- GET /ids/{snowflake}: 解析 ID
"""
import logging

from fastapi import APIRouter

from flakeid.api.deps import GeneratorDep
from flakeid.api.schemas import (
    ApiEnvelope,
    GenerateData,
    GenerateRequest,
    LayoutData,
    SnowflakePublic,
)
from flakeid.core.config import settings
from flakeid.core.snowflake import GenerateOptions
from flakeid.errors import SequenceRangeError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ids", tags=["ids"])


@router.post("", response_model=ApiEnvelope)
def generate_ids(body: GenerateRequest, generator: GeneratorDep) -> ApiEnvelope:
    """
    生成 ID

    请求路径: POST /api/v1/ids

    Raises:
        SequenceRangeError: amount 超过 MAX_BATCH_SIZE，或 sequence 超出序列号范围
        ConfigurationError: 时间戳超出 epoch 位宽
    """
    if body.amount > settings.MAX_BATCH_SIZE:
        raise SequenceRangeError(
            f'Invalid "amount" {body.amount}: at most {settings.MAX_BATCH_SIZE} per request'
        )
    options = GenerateOptions(
        timestamp=body.timestamp,
        worker_id=body.worker_id,
        process_id=body.process_id,
        sequence=body.sequence,
    )
    snowflakes = generator.generate_many(body.amount, options)
    logger.debug("generated %d ids, last=%s", len(snowflakes), snowflakes[-1])
    data = GenerateData(
        count=len(snowflakes),
        ids=[SnowflakePublic.from_view(s.view) for s in snowflakes],
    )
    return ApiEnvelope(data=data.model_dump(mode="json"))


@router.get("/layout", response_model=ApiEnvelope)
def get_layout(generator: GeneratorDep) -> ApiEnvelope:
    """请求路径: GET /api/v1/ids/layout"""
    layout = generator.layout.describe()
    data = LayoutData(
        epoch=generator.epoch,
        max_epoch=generator.max_epoch,
        total_bits=layout["total_bits"],
        sequence_space=layout["sequence_space"],
        fields=layout["fields"],
    )
    return ApiEnvelope(data=data.model_dump(mode="json"))


@router.get("/{snowflake}", response_model=ApiEnvelope)
def deconstruct_id(snowflake: str, generator: GeneratorDep) -> ApiEnvelope:
    """
    解析 ID

    请求路径: GET /api/v1/ids/{snowflake}

    Raises:
        FormatError: 不是合法的非负十进制整数，或位数超过总位宽
    """
    view = generator.deconstruct(snowflake)
    return ApiEnvelope(data=SnowflakePublic.from_view(view).model_dump(mode="json"))
