"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import numpy as np

CHANNELS = 4


class Phase(str, Enum):
    """应用生命周期阶段。"""

    IDLE = "idle"
    LOADED = "loaded"
    CONVERTING = "converting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True, eq=False)
class Bitmap:
    """解码并归一化后的 RGBA 位图。

    ``pixels`` 为 ``(height, width, 4)`` 的 uint8 数组，由请求加载的一方独占，
    调用 :meth:`release` 后置空。
    """

    pixels: Optional[np.ndarray]
    width: int
    height: int
    file_size: int
    source_path: Path
    native_channels: int = CHANNELS

    @property
    def is_empty(self) -> bool:
        return self.pixels is None or self.width <= 0 or self.height <= 0

    def release(self) -> None:
        """释放像素缓冲区；重复调用无副作用。"""

        self.pixels = None


@dataclass(slots=True)
class ConversionResult:
    """单次转换尝试的结果，每次尝试新建一个实例。"""

    success: bool
    status: str
    error_message: str = ""
    error_code: Optional[int] = None
    output_size: int = 0
    compression_ratio: float = 0.0

    @classmethod
    def converted(cls, original_size: int, output_size: int) -> "ConversionResult":
        return cls(
            success=True,
            status="converted",
            output_size=output_size,
            compression_ratio=original_size / output_size,
        )

    @classmethod
    def failed(cls, status: str, message: str, code: Optional[int] = None) -> "ConversionResult":
        return cls(success=False, status=status, error_message=message, error_code=code)


@dataclass(slots=True)
class FileEntry:
    """批处理列表中的单个文件。"""

    input_path: Path
    output_path: Path
    filename: str
    original_size: int = 0
    converted: bool = False
    failed: bool = False
    output_size: int = 0
    message: str = ""

    @property
    def status(self) -> str:
        if self.converted:
            return "converted"
        if self.failed:
            return "failed"
        return "pending"

    def reset(self) -> None:
        self.converted = False
        self.failed = False
        self.output_size = 0
        self.message = ""


@dataclass(slots=True)
class AddFilesReport:
    """``add_files`` 的处理结果，超出容量的文件交由调用方处理。"""

    added: list[Path] = field(default_factory=list)
    unsupported: list[Path] = field(default_factory=list)
    duplicates: list[Path] = field(default_factory=list)
    rejected: list[Path] = field(default_factory=list)


@dataclass(slots=True)
class BatchSummary:
    """批处理完成后的汇总数据。"""

    total: int
    converted: int
    failed: int
    total_input_bytes: int
    total_output_bytes: int

    @property
    def saved_percent(self) -> int:
        """节省的空间百分比；输出未变小时为 0。"""

        if self.total_input_bytes <= self.total_output_bytes:
            return 0
        saved = self.total_input_bytes - self.total_output_bytes
        return int(100.0 * saved / self.total_input_bytes)
