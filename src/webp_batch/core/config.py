"""会话与输出相关的配置模型。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_MAX_FILES = 100


@dataclass(slots=True)
class OutputConfig:
    """输出位置配置。

    ``same_folder`` 为真时输出写到源文件旁；否则写入 ``output_dir``。
    未选择输出目录时退回到源文件所在目录。
    """

    same_folder: bool = True
    output_dir: Optional[Path] = None


@dataclass(slots=True)
class SessionConfig:
    """单个批处理会话的配置集合。"""

    max_files: Optional[int] = DEFAULT_MAX_FILES
    language: str = "en"
    output: OutputConfig = field(default_factory=OutputConfig)
