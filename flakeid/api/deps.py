"""
FastAPI 依赖注入模块

路由通过 GeneratorDep 拿到全局生成器；测试中可以用
app.dependency_overrides[get_snowflake_generator] 替换为固定时钟的实例。
"""
from typing import Annotated

from fastapi import Depends

from flakeid.core.snowflake import SnowflakeGenerator, get_generator


def get_snowflake_generator() -> SnowflakeGenerator:
    return get_generator()


GeneratorDep = Annotated[SnowflakeGenerator, Depends(get_snowflake_generator)]
