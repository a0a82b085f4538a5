"""单个位图的 WebP 转换：配置映射、内存编码、落盘。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from webp_batch.core.exceptions import (
    EncodeError,
    ImageWriteError,
    InvalidConfigurationError,
    InvalidInputError,
)
from webp_batch.core.models import Bitmap, ConversionResult
from webp_batch.core.output_manager import save_bytes
from webp_batch.core.parameters import EncodeParameters
from webp_batch.processing.encoder import (
    LibWebPEncoder,
    WebPEncoder,
    WebPErrorCode,
    build_encoder_config,
)

LOGGER = logging.getLogger(__name__)


class ConversionEngine:
    """执行一次 "编码到内存 -> 写文件" 的转换，失败以结果对象返回。"""

    def __init__(self, encoder: Optional[WebPEncoder] = None) -> None:
        self.encoder: WebPEncoder = encoder or LibWebPEncoder()

    def encode(self, bitmap: Optional[Bitmap], params: Optional[EncodeParameters]) -> bytes:
        """完全在内存中编码，返回 WebP 字节流；各阶段失败抛出对应异常。"""

        if bitmap is None or bitmap.is_empty:
            raise InvalidInputError("位图为空")
        if params is None:
            raise InvalidInputError("编码参数为空")

        config = build_encoder_config(params)
        config.validate()

        assert bitmap.pixels is not None
        payload = self.encoder.encode(bitmap.pixels, bitmap.width, bitmap.height, config)
        if not payload:
            raise EncodeError("编码结果为空", WebPErrorCode.BAD_WRITE)
        return payload

    def convert(
        self,
        bitmap: Optional[Bitmap],
        output_path: Union[str, Path, None],
        params: Optional[EncodeParameters],
    ) -> ConversionResult:
        # Path("") 会变成 "."
        if output_path is None or str(output_path) in ("", "."):
            return ConversionResult.failed("error-input", "输出路径为空")

        try:
            payload = self.encode(bitmap, params)
        except InvalidInputError as exc:
            return ConversionResult.failed("error-input", str(exc))
        except InvalidConfigurationError as exc:
            return ConversionResult.failed("error-config", str(exc))
        except EncodeError as exc:
            LOGGER.debug("编码失败 %s: %s", output_path, exc)
            return ConversionResult.failed("error-encode", str(exc), exc.code)

        destination = Path(output_path)
        try:
            save_bytes(destination, payload)
        except ImageWriteError as exc:
            return ConversionResult.failed("error-write", str(exc))

        assert bitmap is not None
        result = ConversionResult.converted(bitmap.file_size, len(payload))
        LOGGER.debug(
            "已写入 %s: %d 字节, 压缩比 %.2f", destination, result.output_size, result.compression_ratio
        )
        return result


def convert(
    bitmap: Optional[Bitmap],
    output_path: Union[str, Path, None],
    params: Optional[EncodeParameters],
    encoder: Optional[WebPEncoder] = None,
) -> ConversionResult:
    """使用默认（或指定）编码器执行一次转换。"""

    return ConversionEngine(encoder).convert(bitmap, output_path, params)
