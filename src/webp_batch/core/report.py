"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from webp_batch.core.models import FileEntry

HEADER = ["source_path", "output_path", "status", "original_size", "output_size", "compression_ratio", "message"]


def write_csv_report(entries: Iterable[FileEntry], report_path: Path) -> Path:
    """将批处理列表中每个文件的结果写入 CSV 报告。"""

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for entry in entries:
            writer.writerow(
                [
                    str(entry.input_path),
                    str(entry.output_path),
                    entry.status,
                    entry.original_size,
                    entry.output_size if entry.converted else "",
                    _format_ratio(entry),
                    entry.message,
                ]
            )
    return report_path


def _format_ratio(entry: FileEntry) -> str:
    if not entry.converted or entry.output_size <= 0:
        return ""
    return f"{entry.original_size / entry.output_size:.3f}"
