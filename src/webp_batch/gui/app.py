"""Tkinter 图形界面实现。"""

from __future__ import annotations

import logging
import queue
import threading
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk
from typing import Callable, List, Optional

from PIL import Image, ImageTk

from webp_batch.core.exceptions import WebPBatchError
from webp_batch.core.models import BatchSummary, Phase
from webp_batch.core.presets import PRESETS, PresetId
from webp_batch.core.report import write_csv_report
from webp_batch.core.scanner import DIALOG_PATTERNS
from webp_batch.processing.batch import BatchSession
from webp_batch.utils.i18n import LANGUAGE_NAMES, Localizer, MessageId, format_size
from webp_batch.utils.logging import setup_logging

LOGGER = logging.getLogger(__name__)

PREVIEW_SIZE = (240, 240)

PRESET_LABELS = {
    PresetId.LOW: MessageId.PRESET_LOW,
    PresetId.MEDIUM: MessageId.PRESET_MEDIUM,
    PresetId.HIGH: MessageId.PRESET_HIGH,
    PresetId.LOSSLESS: MessageId.PRESET_LOSSLESS,
    PresetId.WEB: MessageId.PRESET_WEB,
    PresetId.PHOTO: MessageId.PRESET_PHOTO,
    PresetId.THUMBNAIL: MessageId.PRESET_THUMBNAIL,
}


class TextWidgetHandler(logging.Handler):
    """Logging handler that writes records into a Tk Text widget."""

    def __init__(self, widget: tk.Text) -> None:
        super().__init__()
        self._widget = widget

    def emit(self, record: logging.LogRecord) -> None:  # noqa: D401 - standard logging handler signature
        message = self.format(record)
        # Schedule UI update on main thread
        self._widget.after(0, self._write, message)

    def _write(self, message: str) -> None:
        if not self._widget.winfo_exists():
            return
        self._widget.configure(state=tk.NORMAL)
        self._widget.insert(tk.END, message + "\n")
        self._widget.configure(state=tk.DISABLED)
        self._widget.see(tk.END)


class WebPConverterApp(tk.Tk):
    """主窗口：文件列表、参数面板、预览与日志。"""

    def __init__(self) -> None:
        super().__init__()
        setup_logging()
        self.session = BatchSession()
        self.localizer = Localizer(self.session.config.language)
        self.geometry("980x680")

        self._worker_thread: Optional[threading.Thread] = None
        self._event_queue: queue.Queue = queue.Queue()
        self._translatable: List[tuple[Callable[[str], None], MessageId]] = []
        self._busy_widgets: List[tk.Widget] = []
        self._preview_photo: Optional[ImageTk.PhotoImage] = None
        self._syncing_controls = False

        self._build_ui()
        self._attach_log_handler()
        self._sync_parameter_controls()
        self._apply_language()
        self._refresh()
        self.after(200, self._poll)

    # ---------------------- UI 构建 ---------------------- #

    def _translate(self, widget: tk.Widget, message_id: MessageId) -> tk.Widget:
        """登记需要随语言切换更新文本的控件。"""

        self._translatable.append((lambda text, w=widget: w.configure(text=text), message_id))
        return widget

    def _build_ui(self) -> None:
        container = ttk.Frame(self, padding=12)
        container.pack(fill=tk.BOTH, expand=True)

        left = ttk.Frame(container)
        left.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        right = ttk.Frame(container)
        right.pack(side=tk.RIGHT, fill=tk.Y, padx=(12, 0))

        self._build_files_section(left)
        self._build_output_section(left)
        self._build_status_section(left)
        self._build_preview_section(right)
        self._build_presets_section(right)
        self._build_settings_section(right)
        self._build_convert_section(right)

    def _build_files_section(self, parent: tk.Widget) -> None:
        frame = self._translate(ttk.LabelFrame(parent, padding=8), MessageId.FILES)
        frame.pack(fill=tk.BOTH, expand=True)

        self.file_listbox = tk.Listbox(frame, height=10, exportselection=False)
        self.file_listbox.pack(side=tk.LEFT, fill=tk.BOTH, expand=True, padx=(0, 8))
        self.file_listbox.bind("<<ListboxSelect>>", self._on_select_file)

        btn_frame = ttk.Frame(frame)
        btn_frame.pack(side=tk.RIGHT, fill=tk.Y)
        for message_id, command in (
            (MessageId.ADD_FILES, self._add_files),
            (MessageId.ADD_FOLDER, self._add_folder),
            (MessageId.CLEAR_ALL, self._clear_all),
            (MessageId.EXPORT_REPORT, self._export_report),
        ):
            button = self._translate(ttk.Button(btn_frame, command=command), message_id)
            button.pack(fill=tk.X, pady=2)
            self._busy_widgets.append(button)

        self.count_var = tk.StringVar()
        ttk.Label(btn_frame, textvariable=self.count_var).pack(fill=tk.X, pady=(8, 0))

    def _build_output_section(self, parent: tk.Widget) -> None:
        frame = self._translate(ttk.LabelFrame(parent, padding=8), MessageId.OUTPUT_FOLDER)
        frame.pack(fill=tk.X, pady=8)

        self.same_folder_var = tk.BooleanVar(value=self.session.config.output.same_folder)
        check = self._translate(
            ttk.Checkbutton(frame, variable=self.same_folder_var, command=self._on_same_folder),
            MessageId.SAME_FOLDER,
        )
        check.grid(row=0, column=0, sticky=tk.W)
        self._busy_widgets.append(check)

        self.output_var = tk.StringVar()
        ttk.Entry(frame, textvariable=self.output_var, state="readonly", width=50).grid(
            row=1, column=0, sticky=tk.EW, pady=(4, 0)
        )
        self.folder_button = self._translate(
            ttk.Button(frame, command=self._select_output), MessageId.SELECT_FOLDER
        )
        self.folder_button.grid(row=1, column=1, padx=4, pady=(4, 0))
        self._busy_widgets.append(self.folder_button)
        frame.columnconfigure(0, weight=1)

    def _build_status_section(self, parent: tk.Widget) -> None:
        frame = ttk.Frame(parent)
        frame.pack(fill=tk.BOTH, expand=True)

        self.progress_var = tk.DoubleVar(value=0.0)
        ttk.Progressbar(frame, variable=self.progress_var, maximum=100).pack(fill=tk.X, pady=4)
        self.status_var = tk.StringVar()
        ttk.Label(frame, textvariable=self.status_var).pack(fill=tk.X)

        self.log_text = tk.Text(frame, height=10, state=tk.DISABLED)
        self.log_text.pack(fill=tk.BOTH, expand=True, pady=(4, 0))

    def _build_preview_section(self, parent: tk.Widget) -> None:
        header = ttk.Frame(parent)
        header.pack(fill=tk.X)
        self.language_var = tk.StringVar(value=LANGUAGE_NAMES[self.localizer.language])
        selector = ttk.Combobox(
            header,
            textvariable=self.language_var,
            state="readonly",
            values=list(LANGUAGE_NAMES.values()),
            width=8,
        )
        selector.pack(side=tk.RIGHT)
        selector.bind("<<ComboboxSelected>>", self._on_language)

        self.preview_label = ttk.Label(parent, anchor=tk.CENTER)
        self.preview_label.pack(fill=tk.X, pady=(8, 0))
        self.preview_info_var = tk.StringVar()
        ttk.Label(parent, textvariable=self.preview_info_var).pack(fill=tk.X)

    def _build_presets_section(self, parent: tk.Widget) -> None:
        frame = self._translate(ttk.LabelFrame(parent, padding=8), MessageId.PRESETS)
        frame.pack(fill=tk.X, pady=8)

        self.preset_var = tk.StringVar()
        for index, preset in enumerate(PRESETS):
            button = self._translate(
                ttk.Radiobutton(
                    frame,
                    value=preset.id.value,
                    variable=self.preset_var,
                    command=lambda pid=preset.id: self._on_preset(pid),
                ),
                PRESET_LABELS[preset.id],
            )
            button.grid(row=index // 4, column=index % 4, sticky=tk.W, padx=2)
            self._busy_widgets.append(button)

    def _build_settings_section(self, parent: tk.Widget) -> None:
        frame = self._translate(ttk.LabelFrame(parent, padding=8), MessageId.SETTINGS)
        frame.pack(fill=tk.X)

        self.quality_var = tk.DoubleVar()
        self.method_var = tk.IntVar()
        self.lossless_var = tk.BooleanVar()
        self.advanced_var = tk.BooleanVar(value=False)
        self.alpha_var = tk.DoubleVar()
        self.filter_strength_var = tk.IntVar()
        self.filter_sharpness_var = tk.IntVar()
        self.preprocessing_var = tk.IntVar()

        self._add_scale(frame, 0, MessageId.QUALITY, self.quality_var, 0, 100)
        self._add_scale(frame, 1, MessageId.COMPRESSION_EFFORT, self.method_var, 0, 6)

        lossless = self._translate(
            ttk.Checkbutton(frame, variable=self.lossless_var, command=self._on_parameters_changed),
            MessageId.LOSSLESS_COMPRESSION,
        )
        lossless.grid(row=2, column=0, columnspan=3, sticky=tk.W)
        advanced = self._translate(
            ttk.Checkbutton(frame, variable=self.advanced_var, command=self._toggle_advanced),
            MessageId.SHOW_ADVANCED,
        )
        advanced.grid(row=3, column=0, columnspan=3, sticky=tk.W)
        self._busy_widgets.extend([lossless, advanced])

        self.advanced_frame = ttk.Frame(frame)
        self._add_scale(self.advanced_frame, 0, MessageId.ALPHA_QUALITY, self.alpha_var, 0, 100)
        self._add_scale(self.advanced_frame, 1, MessageId.FILTER_STRENGTH, self.filter_strength_var, 0, 100)
        self._add_scale(self.advanced_frame, 2, MessageId.FILTER_SHARPNESS, self.filter_sharpness_var, 0, 7)
        self._add_scale(self.advanced_frame, 3, MessageId.PREPROCESSING, self.preprocessing_var, 0, 2)

    def _add_scale(
        self,
        parent: tk.Widget,
        row: int,
        message_id: MessageId,
        variable: tk.Variable,
        low: int,
        high: int,
    ) -> None:
        self._translate(ttk.Label(parent), message_id).grid(row=row, column=0, sticky=tk.W)
        scale = ttk.Scale(
            parent,
            from_=low,
            to=high,
            variable=variable,
            command=lambda _value: self._on_parameters_changed(),
        )
        scale.grid(row=row, column=1, sticky=tk.EW, padx=4)
        ttk.Label(parent, textvariable=variable, width=4).grid(row=row, column=2, sticky=tk.E)
        parent.columnconfigure(1, weight=1)
        self._busy_widgets.append(scale)

    def _build_convert_section(self, parent: tk.Widget) -> None:
        frame = ttk.Frame(parent)
        frame.pack(fill=tk.X, pady=(8, 0))
        self.estimate_var = tk.StringVar()
        ttk.Label(frame, textvariable=self.estimate_var).pack(fill=tk.X)
        self.convert_button = ttk.Button(frame, command=self._start_conversion)
        self.convert_button.pack(fill=tk.X, pady=(4, 0))

    def _attach_log_handler(self) -> None:
        handler = TextWidgetHandler(self.log_text)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
        logging.getLogger("webp_batch").addHandler(handler)

    # ---------------------- 状态同步 ---------------------- #

    def _apply_language(self) -> None:
        self.title(self.localizer.text(MessageId.APP_TITLE))
        for setter, message_id in self._translatable:
            setter(self.localizer.text(message_id))
        self._refresh()

    def _sync_parameter_controls(self) -> None:
        """将会话参数写回控件，不触发参数修改回调。"""

        params = self.session.params
        self._syncing_controls = True
        try:
            self.quality_var.set(int(params.quality))
            self.method_var.set(params.method)
            self.lossless_var.set(params.lossless)
            self.alpha_var.set(int(params.alpha_quality))
            self.filter_strength_var.set(params.filter_strength)
            self.filter_sharpness_var.set(params.filter_sharpness)
            self.preprocessing_var.set(params.preprocessing)
            preset = self.session.selected_preset
            self.preset_var.set(preset.value if preset else "")
        finally:
            self._syncing_controls = False

    def _refresh(self) -> None:
        session = self.session
        text = self.localizer.text
        count = len(session.entries)

        self.count_var.set(text(MessageId.FILE_COUNT, count))
        self.status_var.set(session.status_text(self.localizer))

        output = session.config.output
        if output.same_folder:
            self.output_var.set("")
        else:
            self.output_var.set(str(output.output_dir or ""))
        folder_label = MessageId.CHANGE_FOLDER if output.output_dir else MessageId.SELECT_FOLDER
        self.folder_button.configure(text=text(folder_label))

        if count:
            total_input, total_estimate = session.estimate_total()
            self.estimate_var.set(text(MessageId.ESTIMATE, format_size(total_input), format_size(total_estimate)))
        else:
            self.estimate_var.set(text(MessageId.DROP_IMAGES))

        if count > 1:
            self.convert_button.configure(text=text(MessageId.CONVERT_FILES, count))
        else:
            self.convert_button.configure(text=text(MessageId.CONVERT_TO_WEBP))

        # 禁用状态的 Listbox 不接受修改，先更新状态
        self._set_busy(session.phase is Phase.CONVERTING)
        self._refresh_file_list()

    def _refresh_file_list(self) -> None:
        self.file_listbox.delete(0, tk.END)
        for entry in self.session.entries:
            marker = {"converted": "✓", "failed": "✗"}.get(entry.status, " ")
            self.file_listbox.insert(tk.END, f"{marker} {entry.filename}  ({format_size(entry.original_size)})")
        if self.session.selected_index is not None:
            self.file_listbox.selection_set(self.session.selected_index)

    def _refresh_preview(self) -> None:
        bitmap = self.session.preview
        if bitmap is None or bitmap.is_empty:
            self.preview_label.configure(image="")
            self._preview_photo = None
            self.preview_info_var.set("")
            return
        image = Image.fromarray(bitmap.pixels)
        image.thumbnail(PREVIEW_SIZE)
        self._preview_photo = ImageTk.PhotoImage(image)
        self.preview_label.configure(image=self._preview_photo)
        self.preview_info_var.set(
            f"{bitmap.source_path.name}  {bitmap.width}x{bitmap.height}  {format_size(bitmap.file_size)}"
        )

    def _set_busy(self, busy: bool) -> None:
        state = ["disabled"] if busy else ["!disabled"]
        for widget in self._busy_widgets:
            widget.state(state)
        self.file_listbox.configure(state=tk.DISABLED if busy else tk.NORMAL)
        self.convert_button.state(["disabled"] if busy or not self.session.entries else ["!disabled"])
        if not busy and self.same_folder_var.get():
            self.folder_button.state(["disabled"])

    # ---------------------- 事件处理 ---------------------- #

    def _add_files(self) -> None:
        filenames = filedialog.askopenfilenames(
            title=self.localizer.text(MessageId.SELECT_IMAGES),
            filetypes=[("Images", " ".join(DIALOG_PATTERNS))],
        )
        if filenames:
            self._add_paths(list(filenames))

    def _add_folder(self) -> None:
        path = filedialog.askdirectory(title=self.localizer.text(MessageId.ADD_FOLDER))
        if path:
            self._add_paths([path])

    def _add_paths(self, paths: List[str]) -> None:
        report = self.session.add_paths(paths)
        self._refresh_preview()
        self._refresh()
        if report.rejected:
            messagebox.showwarning(
                self.localizer.text(MessageId.APP_TITLE),
                self.localizer.text(MessageId.FILES_REJECTED, len(report.rejected)),
            )

    def _clear_all(self) -> None:
        self.session.clear_all()
        self.progress_var.set(0)
        self._refresh_preview()
        self._refresh()

    def _on_select_file(self, _event: tk.Event) -> None:
        if self.session.phase is Phase.CONVERTING:
            return
        selection = self.file_listbox.curselection()
        if not selection or selection[0] == self.session.selected_index:
            return
        self.session.select_preview(selection[0])
        self._refresh_preview()
        self._refresh()

    def _on_same_folder(self) -> None:
        self.session.set_same_folder(self.same_folder_var.get())
        self._refresh()

    def _select_output(self) -> None:
        path = filedialog.askdirectory(title=self.localizer.text(MessageId.SELECT_FOLDER))
        if not path:
            return
        self.session.set_output_dir(Path(path))
        self._refresh()

    def _on_preset(self, preset_id: PresetId) -> None:
        self.session.apply_preset(preset_id)
        self._sync_parameter_controls()
        self._refresh()

    def _on_parameters_changed(self) -> None:
        if self._syncing_controls:
            return
        self.session.update_parameters(
            quality=float(round(self.quality_var.get())),
            method=int(round(self.method_var.get())),
            lossless=self.lossless_var.get(),
            alpha_quality=float(round(self.alpha_var.get())),
            filter_strength=int(round(self.filter_strength_var.get())),
            filter_sharpness=int(round(self.filter_sharpness_var.get())),
            preprocessing=int(round(self.preprocessing_var.get())),
        )
        self.preset_var.set("")
        self._refresh()

    def _toggle_advanced(self) -> None:
        if self.advanced_var.get():
            self.advanced_frame.grid(row=4, column=0, columnspan=3, sticky=tk.EW)
        else:
            self.advanced_frame.grid_remove()

    def _on_language(self, _event: tk.Event) -> None:
        selected = self.language_var.get()
        for code, label in LANGUAGE_NAMES.items():
            if label == selected:
                self.localizer.set_language(code)
        self._apply_language()

    def _export_report(self) -> None:
        if not self.session.entries:
            return
        filename = filedialog.asksaveasfilename(
            title=self.localizer.text(MessageId.EXPORT_REPORT),
            defaultextension=".csv",
            filetypes=[("CSV", "*.csv")],
        )
        if not filename:
            return
        try:
            write_csv_report(self.session.entries, Path(filename))
        except OSError as exc:
            LOGGER.error("写入报告失败：%s", exc)
            messagebox.showerror(self.localizer.text(MessageId.APP_TITLE), str(exc))

    def _start_conversion(self) -> None:
        if self._worker_thread and self._worker_thread.is_alive():
            return
        if not self.session.entries:
            return
        self.progress_var.set(0)
        self._worker_thread = threading.Thread(target=self._run_batch_thread, daemon=True)
        self._worker_thread.start()
        self._set_busy(True)

    def _run_batch_thread(self) -> None:
        try:
            summary = self.session.start_batch()
            self._event_queue.put(("done", summary))
        except WebPBatchError as exc:
            self._event_queue.put(("error", str(exc)))

    def _poll(self) -> None:
        try:
            while True:
                kind, payload = self._event_queue.get_nowait()
                if kind == "done":
                    self._handle_done(payload)
                elif kind == "error":
                    self._handle_error(payload)
        except queue.Empty:
            pass
        finally:
            if self.session.phase is Phase.CONVERTING:
                update = self.session.progress()
                self.progress_var.set(update.fraction * 100)
                self.status_var.set(self.session.status_text(self.localizer))
            self.after(200, self._poll)

    def _handle_done(self, summary: BatchSummary) -> None:
        self.progress_var.set(100)
        self._refresh()
        text = self.localizer.text
        lines = [
            text(MessageId.FILES_CONVERTED, summary.converted, summary.total),
            text(MessageId.SAVED_SPACE, summary.saved_percent),
        ]
        if summary.failed:
            lines.append(text(MessageId.FILES_FAILED, summary.failed))
        messagebox.showinfo(text(MessageId.CONVERSION_COMPLETE), "\n".join(lines))

    def _handle_error(self, message: str) -> None:
        self._refresh()
        messagebox.showerror(self.localizer.text(MessageId.APP_TITLE), message)


def run_gui() -> None:
    """启动 GUI 应用。"""

    app = WebPConverterApp()
    app.mainloop()


if __name__ == "__main__":
    run_gui()
