"""图片加载与像素归一化实现。"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from webp_batch.core.exceptions import ImageDecodeError
from webp_batch.core.models import Bitmap
from webp_batch.core.scanner import SUPPORTED_EXTENSIONS, is_supported

LOGGER = logging.getLogger(__name__)

__all__ = ["SUPPORTED_EXTENSIONS", "is_supported", "load_image", "release_image"]

_DECODE_ERRORS = (UnidentifiedImageError, OSError, ValueError, SyntaxError, Image.DecompressionBombError)


def load_image(path: Union[str, Path]) -> Bitmap:
    """加载单张图片并统一为 4 通道 RGBA 位图。

    文件不存在、长度为 0 或像素解码失败时抛出 ImageDecodeError。
    返回的位图由调用者独占，用完后调用 :func:`release_image`。
    """

    source = Path(path)
    try:
        file_size = source.stat().st_size
    except OSError as exc:
        raise ImageDecodeError(f"文件不存在: {source}") from exc

    if file_size == 0:
        raise ImageDecodeError(f"文件为空: {source}")

    try:
        data = source.read_bytes()
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            # EXIF Orientation 校正
            img = ImageOps.exif_transpose(img)
            native_channels = len(img.getbands())
            rgba = _convert_to_rgba(img)
            pixels = np.ascontiguousarray(np.asarray(rgba, dtype=np.uint8))
    except _DECODE_ERRORS as exc:
        LOGGER.debug("无法解码图像文件 %s: %s", source, exc)
        raise ImageDecodeError(f"无法加载图像: {source}") from exc

    height, width = pixels.shape[:2]
    return Bitmap(
        pixels=pixels,
        width=width,
        height=height,
        file_size=file_size,
        source_path=source,
        native_channels=native_channels,
    )


def release_image(bitmap: Optional[Bitmap]) -> None:
    """释放位图；已释放或为 None 时什么也不做。"""

    if bitmap is not None:
        bitmap.release()


def _convert_to_rgba(img: Image.Image) -> Image.Image:
    """将任意模式图像扩展为 RGBA，灰度复制到三个颜色通道，缺失的 Alpha 填满。"""

    if img.mode == "RGBA":
        return img

    if img.mode in {"I", "I;16", "I;16B", "I;16L", "I;16N"}:
        # 16 位灰度先缩放到 8 位
        img = img.convert("I").point(lambda value: value * (1 / 256)).convert("L")

    if img.mode == "F":
        img = img.convert("L")

    if img.mode == "CMYK":
        img = img.convert("RGB")

    return img.convert("RGBA")
