"""项目内使用的自定义异常定义。"""

from __future__ import annotations

from typing import Optional


class WebPBatchError(Exception):
    """基础异常类型。"""


class ImageDecodeError(WebPBatchError):
    """源文件缺失、为空或无法解码时抛出。"""


class InvalidInputError(WebPBatchError):
    """转换引擎收到空位图、空输出路径或空参数时抛出。"""


class InvalidConfigurationError(WebPBatchError):
    """配置不合法时抛出（编码参数、预设、语言等）。"""


class EncodeError(WebPBatchError):
    """编码器导入像素或编码失败，携带 libwebp 错误码。"""

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


class ImageWriteError(WebPBatchError):
    """输出文件无法写入或写入不完整。"""


class SessionStateError(WebPBatchError):
    """批处理会话处于不允许该操作的状态。"""
