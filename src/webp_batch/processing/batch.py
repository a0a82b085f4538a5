"""批处理会话：文件列表、参数、预览与状态机。"""

from __future__ import annotations

import logging
import threading
from dataclasses import fields
from pathlib import Path
from typing import Any, Callable, Iterable, Optional, Union

from webp_batch.core.config import SessionConfig
from webp_batch.core.exceptions import ImageDecodeError, InvalidConfigurationError, SessionStateError
from webp_batch.core.models import AddFilesReport, Bitmap, BatchSummary, ConversionResult, FileEntry, Phase
from webp_batch.core.output_manager import OutputManager
from webp_batch.core.parameters import EncodeParameters, default_parameters
from webp_batch.core.presets import PresetId, apply_preset
from webp_batch.core.progress import ProgressUpdate
from webp_batch.core.scanner import expand_sources, is_supported
from webp_batch.processing.codec import load_image, release_image
from webp_batch.processing.engine import ConversionEngine
from webp_batch.processing.estimator import estimate_batch
from webp_batch.utils.i18n import Localizer, MessageId

LOGGER = logging.getLogger(__name__)

Loader = Callable[[Path], Bitmap]
PathLike = Union[str, Path]

_PARAMETER_FIELDS = frozenset(f.name for f in fields(EncodeParameters))


class BatchSession:
    """一次批处理会话的全部状态，由调用方创建并持有。

    ``start_batch`` 在调用线程中顺序处理所有条目并阻塞到结束；界面可在另一线程
    通过 :meth:`progress` 轮询。计数器与条目标记的更新在锁内完成。
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        loader: Loader = load_image,
        engine: Optional[ConversionEngine] = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.output_manager = OutputManager(self.config.output)
        self.params: EncodeParameters = default_parameters()
        self.selected_preset: Optional[PresetId] = PresetId.MEDIUM
        apply_preset(PresetId.MEDIUM, self.params)

        self.entries: list[FileEntry] = []
        self.phase = Phase.IDLE
        self.converted_count = 0
        self.failed_count = 0
        self.total_input_bytes = 0
        self.total_output_bytes = 0
        self.current_index: Optional[int] = None

        self.preview: Optional[Bitmap] = None
        self.selected_index: Optional[int] = None
        self.last_error = ""

        self._status: tuple[MessageId, tuple[Any, ...]] = (MessageId.DROP_OR_ADD, ())
        self._loader = loader
        self._engine = engine or ConversionEngine()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # 文件列表

    def add_files(self, paths: Iterable[PathLike]) -> AddFilesReport:
        """将文件加入批处理列表。

        不支持的扩展名、已在列表中的路径、超出容量的文件不会加入，分别记录在
        返回的报告中。
        """

        self._ensure_idle_for("添加文件")
        report = AddFilesReport()
        # 按路径字符串区分大小写比较
        known = {str(entry.input_path) for entry in self.entries}

        for raw in paths:
            path = Path(raw)
            if not is_supported(path):
                report.unsupported.append(path)
                continue
            if str(path) in known:
                report.duplicates.append(path)
                continue
            if self._at_capacity():
                report.rejected.append(path)
                continue

            entry = FileEntry(
                input_path=path,
                output_path=self.output_manager.destination_for(path),
                filename=path.name,
                original_size=self._read_size(path),
            )
            with self._lock:
                self.entries.append(entry)
            known.add(str(path))
            report.added.append(path)

        if report.rejected:
            LOGGER.warning("列表已满（上限 %s），%d 个文件未加入", self.config.max_files, len(report.rejected))
        if report.unsupported:
            LOGGER.info("忽略 %d 个不支持的文件", len(report.unsupported))

        if not report.added:
            return report

        LOGGER.info("加入 %d 个文件，当前共 %d 个", len(report.added), len(self.entries))
        self.regenerate_output_paths()
        with self._lock:
            self.phase = Phase.LOADED
            self._status = (MessageId.READY_TO_CONVERT, (len(self.entries),))

        if self.selected_index is None:
            try:
                self._load_preview(0)
            except ImageDecodeError as exc:
                # 自动预览失败不影响列表
                LOGGER.warning("预览加载失败: %s", exc)
        return report

    def add_paths(self, paths: Iterable[PathLike], recursive: bool = False) -> AddFilesReport:
        """接受文件与目录混合输入，目录展开为其中受支持的图片。"""

        return self.add_files(expand_sources(paths, recursive=recursive))

    def clear_all(self) -> None:
        self._ensure_idle_for("清空列表")
        with self._lock:
            self.entries.clear()
            self._release_preview()
            self.selected_index = None
            self._reset_counters()
            self.current_index = None
            self.last_error = ""
            self.phase = Phase.IDLE
            self._status = (MessageId.DROP_OR_ADD, ())
        LOGGER.info("已清空文件列表")

    def _at_capacity(self) -> bool:
        limit = self.config.max_files
        return limit is not None and len(self.entries) >= limit

    def _read_size(self, path: Path) -> int:
        """通过一次临时加载读取原始文件大小，失败时为 0。"""

        try:
            bitmap = self._loader(path)
        except ImageDecodeError as exc:
            LOGGER.debug("读取文件大小失败 %s: %s", path, exc)
            return 0
        size = bitmap.file_size
        release_image(bitmap)
        return size

    # ------------------------------------------------------------------
    # 输出位置

    def set_same_folder(self, enabled: bool) -> None:
        self.config.output.same_folder = enabled
        self.regenerate_output_paths()

    def set_output_dir(self, output_dir: Optional[PathLike]) -> None:
        self.config.output.output_dir = Path(output_dir) if output_dir else None
        self.regenerate_output_paths()

    def regenerate_output_paths(self) -> None:
        """从输入路径重新推导每个条目的输出路径。"""

        with self._lock:
            for entry in self.entries:
                entry.output_path = self.output_manager.destination_for(entry.input_path)

    # ------------------------------------------------------------------
    # 参数

    def apply_preset(self, preset_id: Union[PresetId, str]) -> None:
        preset = apply_preset(preset_id, self.params)
        self.selected_preset = preset.id

    def update_parameters(self, **changes: Any) -> None:
        """手动修改参数字段；超出范围的值在编码前被截断。"""

        unknown = set(changes) - _PARAMETER_FIELDS
        if unknown:
            raise InvalidConfigurationError(f"未知的参数: {', '.join(sorted(unknown))}")
        for name, value in changes.items():
            setattr(self.params, name, value)
        self.selected_preset = None

    def estimate_total(self) -> tuple[int, int]:
        """返回 (原始总字节数, 估算输出总字节数)。"""

        return estimate_batch(self.entries, self.params, self.preview, self.selected_index)

    # ------------------------------------------------------------------
    # 预览

    def select_preview(self, index: int) -> bool:
        """加载指定条目作为预览；失败时进入 ERROR 阶段并返回 False。

        批处理进行中失败时只记录错误，阶段保持 CONVERTING。
        """

        if index < 0 or index >= len(self.entries):
            return False
        try:
            self._load_preview(index)
        except ImageDecodeError as exc:
            entry = self.entries[index]
            LOGGER.warning("预览加载失败 %s: %s", entry.input_path, exc)
            with self._lock:
                self.last_error = str(exc)
                if self.phase is not Phase.CONVERTING:
                    self.phase = Phase.ERROR
                    self._status = (MessageId.PREVIEW_FAILED, (entry.filename,))
            return False

        if self.phase is Phase.ERROR:
            with self._lock:
                self.last_error = ""
                self.phase = Phase.LOADED
                self._status = (MessageId.READY_TO_CONVERT, (len(self.entries),))
        return True

    def _load_preview(self, index: int) -> None:
        self._release_preview()
        self.selected_index = None
        self.preview = self._loader(self.entries[index].input_path)
        self.selected_index = index

    def _release_preview(self) -> None:
        release_image(self.preview)
        self.preview = None

    # ------------------------------------------------------------------
    # 批处理

    def start_batch(self) -> BatchSummary:
        """按列表顺序转换全部条目，单个文件失败不会中断批处理。"""

        if self.phase is Phase.CONVERTING:
            raise SessionStateError("批处理正在进行")
        if not self.entries:
            LOGGER.info("文件列表为空，无需转换")
            return self.summary()

        params = self.params.copy()
        with self._lock:
            self.phase = Phase.CONVERTING
            self._reset_counters()
            for entry in self.entries:
                entry.reset()
        total = len(self.entries)
        LOGGER.info("开始转换 %d 个文件", total)

        for index, entry in enumerate(self.entries):
            with self._lock:
                self.current_index = index
                self._status = (MessageId.CONVERTING, (index + 1, total, entry.filename))
            result = self._convert_entry(entry, params)
            self._record(entry, result)

        with self._lock:
            self.current_index = None
            self.phase = Phase.SUCCESS
            self._status = (MessageId.DONE, (self.converted_count, self.failed_count))
        summary = self.summary()
        LOGGER.info(
            "转换完成：成功 %d，失败 %d，%d -> %d 字节",
            summary.converted,
            summary.failed,
            summary.total_input_bytes,
            summary.total_output_bytes,
        )
        return summary

    def _convert_entry(self, entry: FileEntry, params: EncodeParameters) -> ConversionResult:
        try:
            bitmap = self._loader(entry.input_path)
        except ImageDecodeError as exc:
            return ConversionResult.failed("error-load", str(exc))
        try:
            return self._engine.convert(bitmap, entry.output_path, params)
        finally:
            release_image(bitmap)

    def _record(self, entry: FileEntry, result: ConversionResult) -> None:
        with self._lock:
            if result.success:
                entry.converted = True
                entry.output_size = result.output_size
                self.converted_count += 1
                self.total_input_bytes += entry.original_size
                self.total_output_bytes += result.output_size
                return
            entry.failed = True
            entry.message = result.error_message
            self.failed_count += 1
        LOGGER.warning("转换失败 %s [%s]: %s", entry.input_path, result.status, result.error_message)

    def _reset_counters(self) -> None:
        self.converted_count = 0
        self.failed_count = 0
        self.total_input_bytes = 0
        self.total_output_bytes = 0

    def _ensure_idle_for(self, action: str) -> None:
        if self.phase is Phase.CONVERTING:
            raise SessionStateError(f"批处理进行中，无法{action}")

    # ------------------------------------------------------------------
    # 供界面读取的快照

    def progress(self) -> ProgressUpdate:
        with self._lock:
            current_file = None
            if self.current_index is not None:
                current_file = self.entries[self.current_index].filename
            return ProgressUpdate(
                total=len(self.entries),
                completed=self.converted_count + self.failed_count,
                phase=self.phase,
                current_index=self.current_index,
                current_file=current_file,
            )

    def summary(self) -> BatchSummary:
        with self._lock:
            return BatchSummary(
                total=len(self.entries),
                converted=self.converted_count,
                failed=self.failed_count,
                total_input_bytes=self.total_input_bytes,
                total_output_bytes=self.total_output_bytes,
            )

    @property
    def status(self) -> tuple[MessageId, tuple[Any, ...]]:
        with self._lock:
            return self._status

    def status_text(self, localizer: Localizer) -> str:
        message_id, args = self.status
        return localizer.text(message_id, *args)
