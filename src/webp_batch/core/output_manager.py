"""输出路径推导与文件写入模块。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from webp_batch.core.config import OutputConfig
from webp_batch.core.exceptions import ImageWriteError

LOGGER = logging.getLogger(__name__)

OUTPUT_EXTENSION = "webp"


def replace_extension(path: Path) -> Path:
    """将文件名最后一个 ``.`` 之后的扩展名替换为 ``.webp``，无扩展名时追加。"""

    stem, dot, _ = path.name.rpartition(".")
    if dot:
        return path.with_name(f"{stem}.{OUTPUT_EXTENSION}")
    return path.with_name(f"{path.name}.{OUTPUT_EXTENSION}")


def save_bytes(destination: Path, payload: bytes) -> int:
    """写入完整的编码数据，写入字节数与数据长度不符时视为失败。"""

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with destination.open("wb") as handle:
            written = handle.write(payload)
    except OSError as exc:
        raise ImageWriteError(f"无法写入输出文件: {destination}") from exc

    if written != len(payload):
        LOGGER.debug("写入不完整 %s: %d/%d 字节", destination, written, len(payload))
        raise ImageWriteError(f"输出文件写入不完整: {destination}")
    return written


class OutputManager:
    """负责根据输出配置推导目标路径。"""

    def __init__(self, config: OutputConfig) -> None:
        self.config = config

    def destination_for(self, input_path: Union[str, Path]) -> Path:
        """每次都从输入路径重新推导输出路径。"""

        source = Path(input_path)
        if self.config.same_folder or self.config.output_dir is None:
            return replace_extension(source)
        return replace_extension(Path(self.config.output_dir) / source.name)
