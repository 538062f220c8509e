"""
应用配置模块

使用 Pydantic Settings 管理所有环境变量和配置。
配置从当前目录的 .env 文件和环境变量读取，支持类型验证和默认值。

配置来源优先级：
1. 环境变量（最高优先级）
2. .env 文件
3. 代码中的默认值（最低优先级）
"""
from typing import Annotated, Any, Literal

from pydantic import (
    AnyUrl,  # URL 类型验证
    BeforeValidator,  # 字段验证前的转换器
    HttpUrl,  # HTTP URL 类型验证
    computed_field,  # 计算字段装饰器
    model_validator,  # 模型验证器装饰器
)
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Self

from flakeid.core.layout import FieldLayout
from flakeid.core.origin import OriginSource, ProcessOrigin, StaticOrigin
from flakeid.enums import LayoutPreset


def parse_cors(v: Any) -> list[str] | str:
    """
    解析 CORS 配置值

    支持逗号分隔的字符串或列表格式。
    """
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",") if i.strip()]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    """
    应用配置类

    Snowflake 相关配置：
    - SNOWFLAKE_EPOCH_MS: epoch（毫秒），默认 2000-01-01 UTC
    - SNOWFLAKE_LAYOUT: 布局预设（fixed / configurable）
    - SNOWFLAKE_*_BITS: 任意一项给出时覆盖预设中对应的位宽
    - SNOWFLAKE_WORKER_ID / SNOWFLAKE_PROCESS_ID: 默认来源 ID
    - SNOWFLAKE_USE_PID: 为 True 时进程 ID 取自操作系统 PID
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,  # 忽略空的环境变量
        extra="ignore",  # 忽略未定义的额外字段
    )
    PROJECT_NAME: str = "flakeid"
    API_V1_STR: str = "/api/v1"  # API 版本前缀
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    SENTRY_DSN: HttpUrl | None = None

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS]

    # Snowflake
    SNOWFLAKE_EPOCH_MS: int = 946684800000
    SNOWFLAKE_LAYOUT: LayoutPreset = LayoutPreset.configurable
    SNOWFLAKE_TOTAL_BITS: int | None = None
    SNOWFLAKE_EPOCH_BITS: int | None = None
    SNOWFLAKE_WORKER_BITS: int | None = None
    SNOWFLAKE_PROCESS_BITS: int | None = None
    SNOWFLAKE_SEQUENCE_BITS: int | None = None
    SNOWFLAKE_WORKER_ID: int = 1
    SNOWFLAKE_PROCESS_ID: int = 0
    SNOWFLAKE_USE_PID: bool = False

    # 单次批量生成的上限（仅限 API）
    MAX_BATCH_SIZE: int = 10000

    def build_layout(self) -> FieldLayout:
        """
        根据预设和位宽覆盖项构建位布局

        Raises:
            ConfigurationError: 位宽非法
        """
        base = FieldLayout.from_preset(self.SNOWFLAKE_LAYOUT)
        return FieldLayout(
            total_bits=self._pick(self.SNOWFLAKE_TOTAL_BITS, base.total_bits),
            epoch_bits=self._pick(self.SNOWFLAKE_EPOCH_BITS, base.epoch_bits),
            worker_bits=self._pick(self.SNOWFLAKE_WORKER_BITS, base.worker_bits),
            process_bits=self._pick(self.SNOWFLAKE_PROCESS_BITS, base.process_bits),
            sequence_bits=self._pick(self.SNOWFLAKE_SEQUENCE_BITS, base.sequence_bits),
        )

    def build_origin(self) -> OriginSource:
        if self.SNOWFLAKE_USE_PID:
            return ProcessOrigin(worker_id=self.SNOWFLAKE_WORKER_ID)
        return StaticOrigin(worker_id=self.SNOWFLAKE_WORKER_ID, process_id=self.SNOWFLAKE_PROCESS_ID)

    @staticmethod
    def _pick(value: int | None, default: int) -> int:
        return default if value is None else value

    @model_validator(mode="after")
    def _validate_snowflake(self) -> Self:
        """
        模型验证器：配置加载时就构建一次布局和来源

        非法的位宽或负数来源 ID 在启动时就失败，而不是等到第一次生成 ID。
        """
        self.build_layout()
        self.build_origin()
        return self


# 创建全局配置实例，整个应用共享
settings = Settings()
