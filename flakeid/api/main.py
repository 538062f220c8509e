"""
API 路由聚合模块

路由模块说明：
- ids: 生成/解析 Snowflake ID
- utils: 工具相关（健康检查等）
"""
from fastapi import APIRouter

from flakeid.api.routes import ids, utils

api_router = APIRouter()

api_router.include_router(ids.router)  # /ids/*
api_router.include_router(utils.router)  # /utils/*
