"""输出体积的启发式估算，仅用于界面提示。"""

from __future__ import annotations

from typing import Iterable, Optional

from webp_batch.core.models import CHANNELS, Bitmap, FileEntry
from webp_batch.core.parameters import EncodeParameters

# 未预览文件假定原始像素约为压缩文件的 3 倍
RAW_TO_FILE_RATIO = 3
LOSSLESS_FALLBACK_RATIO = 0.3


def estimate_size(bitmap: Bitmap, params: EncodeParameters) -> int:
    """根据位图尺寸与当前参数估算输出字节数。

    无损: raw * (0.7 - method/6 * 0.3)
    有损: raw * (0.01 + quality/100 * 0.10) * (1.0 - method/6 * 0.2)
    """

    settings = params.clamped()
    raw_size = bitmap.width * bitmap.height * CHANNELS

    if settings.lossless:
        method_factor = 0.7 - (settings.method / 6.0) * 0.3
        return int(raw_size * method_factor)

    quality_ratio = 0.01 + (settings.quality / 100.0) * 0.10
    method_factor = 1.0 - (settings.method / 6.0) * 0.2
    return int(raw_size * quality_ratio * method_factor)


def estimate_from_file_size(file_size: int, params: EncodeParameters) -> int:
    """没有解码位图时，按原文件大小粗略估算。"""

    settings = params.clamped()
    approx_raw = file_size * RAW_TO_FILE_RATIO
    if settings.lossless:
        ratio = LOSSLESS_FALLBACK_RATIO
    else:
        qf = settings.quality / 100.0
        ratio = 0.001 + qf * qf * 0.025
    return int(approx_raw * ratio)


def estimate_batch(
    entries: Iterable[FileEntry],
    params: EncodeParameters,
    preview: Optional[Bitmap] = None,
    preview_index: Optional[int] = None,
) -> tuple[int, int]:
    """返回 (原始总字节数, 估算输出总字节数)。

    已预览的条目使用像素估算，其余条目使用文件大小估算。
    """

    total_input = 0
    total_estimate = 0
    for index, entry in enumerate(entries):
        total_input += entry.original_size
        if preview is not None and not preview.is_empty and index == preview_index:
            total_estimate += estimate_size(preview, params)
        else:
            total_estimate += estimate_from_file_size(entry.original_size, params)
    return total_input, total_estimate
