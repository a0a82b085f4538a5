"""测试输出体积估算公式。"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from webp_batch.core.models import Bitmap, FileEntry
from webp_batch.core.parameters import EncodeParameters, default_parameters
from webp_batch.processing.estimator import estimate_batch, estimate_from_file_size, estimate_size


def make_bitmap(width: int, height: int, file_size: int = 1000) -> Bitmap:
    return Bitmap(
        pixels=np.zeros((height, width, 4), dtype=np.uint8),
        width=width,
        height=height,
        file_size=file_size,
        source_path=Path("sample.png"),
    )


def make_entry(name: str, size: int) -> FileEntry:
    path = Path(name)
    return FileEntry(input_path=path, output_path=path.with_suffix(".webp"), filename=name, original_size=size)


def test_lossy_estimate_uses_quality_and_method() -> None:
    bitmap = make_bitmap(100, 100)

    # raw 40000 * (0.01 + 0.075) * (1 - 4/6 * 0.2)
    assert estimate_size(bitmap, default_parameters()) == 2946


def test_lossless_estimate_depends_only_on_method() -> None:
    bitmap = make_bitmap(100, 100)
    low_quality = EncodeParameters(quality=10, method=6, lossless=True)
    high_quality = EncodeParameters(quality=90, method=6, lossless=True)

    estimate = estimate_size(bitmap, low_quality)

    assert estimate == estimate_size(bitmap, high_quality)
    assert abs(estimate - 16000) <= 1
    assert abs(estimate_size(bitmap, EncodeParameters(method=0, lossless=True)) - 28000) <= 1


def test_estimate_is_deterministic() -> None:
    bitmap = make_bitmap(37, 23)
    params = EncodeParameters(quality=63, method=2)

    assert estimate_size(bitmap, params) == estimate_size(bitmap, params)


def test_estimate_clamps_parameters() -> None:
    bitmap = make_bitmap(50, 50)

    assert estimate_size(bitmap, EncodeParameters(quality=500, method=40)) == estimate_size(
        bitmap, EncodeParameters(quality=100, method=6)
    )


def test_file_size_fallback() -> None:
    # 3000 * (0.001 + 0.75^2 * 0.025)
    assert estimate_from_file_size(1000, default_parameters()) == 45
    assert abs(estimate_from_file_size(1000, EncodeParameters(lossless=True)) - 900) <= 1
    assert estimate_from_file_size(0, default_parameters()) == 0


def test_batch_estimate_uses_preview_for_selected_entry() -> None:
    entries = [make_entry("a.png", 1000), make_entry("b.png", 2000)]
    preview = make_bitmap(100, 100, file_size=2000)
    params = default_parameters()

    total_input, total_estimate = estimate_batch(entries, params, preview=preview, preview_index=1)

    assert total_input == 3000
    assert total_estimate == estimate_from_file_size(1000, params) + estimate_size(preview, params)

    _, without_preview = estimate_batch(entries, params)
    assert without_preview == estimate_from_file_size(1000, params) + estimate_from_file_size(2000, params)
