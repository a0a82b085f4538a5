"""WebP 编码器配置与 libwebp 编码后端。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

import numpy as np
import webp

from webp_batch.core.exceptions import EncodeError, InvalidConfigurationError
from webp_batch.core.models import CHANNELS
from webp_batch.core.parameters import EncodeParameters

LOGGER = logging.getLogger(__name__)

WEBP_MAX_DIMENSION = 16383
LOSSLESS_QUALITY = 100.0


class WebPErrorCode(IntEnum):
    """libwebp 的 VP8_ENC_ERROR_* 错误码。"""

    OK = 0
    OUT_OF_MEMORY = 1
    BITSTREAM_OUT_OF_MEMORY = 2
    NULL_PARAMETER = 3
    INVALID_CONFIGURATION = 4
    BAD_DIMENSION = 5
    PARTITION0_OVERFLOW = 6
    PARTITION_OVERFLOW = 7
    BAD_WRITE = 8
    FILE_TOO_BIG = 9
    USER_ABORT = 10


@dataclass(slots=True, frozen=True)
class EncoderConfig:
    """交给编码器的最终配置，字段与 EncodeParameters 一一对应。"""

    quality: float
    method: int
    lossless: bool
    alpha_quality: int
    filter_strength: int
    filter_sharpness: int
    preprocessing: int

    def validate(self) -> None:
        """按 libwebp WebPValidateConfig 的范围校验，不合法时抛出异常。"""

        checks = (
            ("quality", 0 <= self.quality <= 100),
            ("method", 0 <= self.method <= 6),
            ("alpha_quality", 0 <= self.alpha_quality <= 100),
            ("filter_strength", 0 <= self.filter_strength <= 100),
            ("filter_sharpness", 0 <= self.filter_sharpness <= 7),
            ("preprocessing", 0 <= self.preprocessing <= 7),
        )
        invalid = [name for name, ok in checks if not ok]
        if invalid:
            raise InvalidConfigurationError(f"WebP 配置不合法: {', '.join(invalid)}")


def build_encoder_config(params: EncodeParameters) -> EncoderConfig:
    """将用户参数截断后映射为编码器配置。

    无损模式下质量值只代表压缩耗时，固定传 100。
    """

    clamped = params.clamped()
    quality = LOSSLESS_QUALITY if clamped.lossless else clamped.quality
    return EncoderConfig(
        quality=quality,
        method=clamped.method,
        lossless=clamped.lossless,
        alpha_quality=int(clamped.alpha_quality),
        filter_strength=clamped.filter_strength,
        filter_sharpness=clamped.filter_sharpness,
        preprocessing=clamped.preprocessing,
    )


class WebPEncoder(Protocol):
    """编码服务协议：像素 + 配置 -> WebP 字节流。"""

    def encode(self, pixels: np.ndarray, width: int, height: int, config: EncoderConfig) -> bytes:
        """编码失败时抛出 EncodeError。"""
        ...


class LibWebPEncoder:
    """基于 libwebp 绑定（``webp`` 包）的内存编码实现，配置字段全部写入 WebPConfig。"""

    def encode(self, pixels: np.ndarray, width: int, height: int, config: EncoderConfig) -> bytes:
        webp_config = self._build_webp_config(config)
        picture = self._import_rgba(pixels, width, height)

        try:
            writer = picture.encode(webp_config)
        except MemoryError as exc:
            raise EncodeError("WebP 编码内存不足", WebPErrorCode.OUT_OF_MEMORY) from exc
        except webp.WebPError as exc:
            code = int(picture.ptr.error_code)
            raise EncodeError(f"WebP 编码失败: {exc}", code) from exc

        payload = bytes(writer.buffer())
        LOGGER.debug("编码完成 %dx%d: %d 字节", width, height, len(payload))
        return payload

    @staticmethod
    def _build_webp_config(config: EncoderConfig) -> "webp.WebPConfig":
        webp_config = webp.WebPConfig.new()
        ptr = webp_config.ptr
        ptr.quality = float(config.quality)
        ptr.method = config.method
        ptr.lossless = 1 if config.lossless else 0
        ptr.alpha_quality = config.alpha_quality
        ptr.filter_strength = config.filter_strength
        ptr.filter_sharpness = config.filter_sharpness
        ptr.preprocessing = config.preprocessing
        if not webp_config.validate():
            raise InvalidConfigurationError("libwebp 拒绝了编码配置")
        return webp_config

    @staticmethod
    def _import_rgba(pixels: np.ndarray, width: int, height: int) -> "webp.WebPPicture":
        """将 RGBA 缓冲区导入 WebPPicture。"""

        if width <= 0 or height <= 0 or width > WEBP_MAX_DIMENSION or height > WEBP_MAX_DIMENSION:
            raise EncodeError(f"图像尺寸不受支持: {width}x{height}", WebPErrorCode.BAD_DIMENSION)

        expected = width * height * CHANNELS
        if pixels.size != expected:
            raise EncodeError(
                f"像素数据长度不符: {pixels.size} != {expected}", WebPErrorCode.BAD_DIMENSION
            )

        buffer = np.ascontiguousarray(pixels, dtype=np.uint8).reshape(height, width, CHANNELS)
        try:
            return webp.WebPPicture.from_numpy(buffer)
        except MemoryError as exc:
            raise EncodeError("导入像素数据失败", WebPErrorCode.OUT_OF_MEMORY) from exc
        except webp.WebPError as exc:
            raise EncodeError(f"导入像素数据失败: {exc}", WebPErrorCode.BAD_DIMENSION) from exc
