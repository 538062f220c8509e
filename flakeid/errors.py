"""
自定义异常模块

定义 Snowflake ID 生成/解析过程中使用的异常类。
所有异常都继承自 FlakeIdError，在 main.py 中有统一的异常处理器，
转换为 {"code", "message", "data"} 格式的响应。

异常分类：
- ConfigurationError: 位宽布局非法、epoch 过旧（时间戳溢出）
- SequenceRangeError: 批量数量 < 1、显式序列号超出范围
- FormatError: 待解析的 ID 不是合法的非负整数
"""
from __future__ import annotations


class FlakeIdError(Exception):
    """
    应用自定义异常基类

    包含：
    - code: 业务错误码
    - message: 错误消息
    - status_code: HTTP 状态码（仅在 API 层使用）

    使用示例：
        raise FlakeIdError(code=400001, message="Bad input", status_code=400)
    """

    def __init__(self, *, code: int, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status_code = status_code


class ConfigurationError(FlakeIdError, ValueError):
    """
    配置错误

    位宽非正数/非整数、位宽之和超过总位宽、或时间戳超出 epoch 位宽可表示的范围。
    属于运维配置问题，所以 HTTP 状态码是 500。
    """

    def __init__(self, message: str) -> None:
        super().__init__(code=500101, message=message, status_code=500)


class SequenceRangeError(FlakeIdError, ValueError):
    """批量数量或显式序列号超出允许范围"""

    def __init__(self, message: str) -> None:
        super().__init__(code=400201, message=message, status_code=400)


class FormatError(FlakeIdError, ValueError):
    """待解析的值不是合法的非负整数（或超出总位宽）"""

    def __init__(self, message: str) -> None:
        super().__init__(code=400301, message=message, status_code=400)


def epoch_overflow(timestamp: int, max_epoch: int) -> ConfigurationError:
    """
    创建"epoch 过旧"异常（便捷函数）

    时间戳与 epoch 的差值超出 epoch 位宽时抛出，运维需要更换更近的 epoch。

    Returns:
        ConfigurationError: 异常实例
    """
    return ConfigurationError(
        f"Timestamp {timestamp} is past the last encodable timestamp {max_epoch}; "
        "the generator epoch is too old, configure a more recent one."
    )
