"""测试编码参数默认值、截断与预设目录。"""

from __future__ import annotations

from dataclasses import asdict

import pytest

from webp_batch.core.exceptions import InvalidConfigurationError
from webp_batch.core.parameters import EncodeParameters, default_parameters
from webp_batch.core.presets import (
    PRESETS,
    QUALITY_PRESETS,
    USE_CASE_PRESETS,
    PresetId,
    apply_preset,
    get_preset,
)


def test_default_parameters() -> None:
    params = default_parameters()

    assert params.quality == 75
    assert params.method == 4
    assert params.lossless is False
    assert params.alpha_quality == 100
    assert params.filter_strength == 60
    assert params.filter_sharpness == 0
    assert params.preprocessing == 0


def test_out_of_range_values_are_clamped_not_rejected() -> None:
    params = EncodeParameters(
        quality=150,
        method=9,
        alpha_quality=-5,
        filter_strength=200,
        filter_sharpness=10,
        preprocessing=-1,
    )

    clamped = params.clamped()

    assert clamped.quality == 100
    assert clamped.method == 6
    assert clamped.alpha_quality == 0
    assert clamped.filter_strength == 100
    assert clamped.filter_sharpness == 7
    assert clamped.preprocessing == 0
    # 原对象保持不变
    assert params.quality == 150


@pytest.mark.parametrize(
    ("preset_id", "expected"),
    [
        (PresetId.LOW, (50, 4, False, 50, 80, 0, 0)),
        (PresetId.MEDIUM, (75, 4, False, 80, 60, 0, 0)),
        (PresetId.HIGH, (90, 5, False, 100, 40, 0, 0)),
        (PresetId.LOSSLESS, (100, 6, True, 100, 0, 0, 0)),
        (PresetId.WEB, (75, 4, False, 80, 60, 0, 1)),
        (PresetId.PHOTO, (95, 6, False, 100, 20, 0, 0)),
        (PresetId.THUMBNAIL, (70, 3, False, 70, 70, 0, 0)),
    ],
)
def test_preset_catalog_values(preset_id: PresetId, expected: tuple) -> None:
    params = get_preset(preset_id).to_parameters()

    actual = (
        params.quality,
        params.method,
        params.lossless,
        params.alpha_quality,
        params.filter_strength,
        params.filter_sharpness,
        params.preprocessing,
    )
    assert actual == expected


def test_catalog_has_quality_and_use_case_tiers() -> None:
    assert len(PRESETS) == 7
    assert [p.id for p in PRESETS] == list(QUALITY_PRESETS + USE_CASE_PRESETS)
    assert all(p.name and p.description for p in PRESETS)


def test_applying_another_preset_discards_manual_edits() -> None:
    params = default_parameters()
    apply_preset(PresetId.LOW, params)
    params.quality = 12
    params.method = 1
    params.lossless = True
    params.filter_sharpness = 5

    apply_preset(PresetId.PHOTO, params)

    assert asdict(params) == dict(get_preset(PresetId.PHOTO).values)


def test_editing_applied_parameters_leaves_catalog_untouched() -> None:
    params = default_parameters()
    apply_preset("high", params)
    params.quality = 1

    assert get_preset(PresetId.HIGH).values["quality"] == 90
    with pytest.raises(TypeError):
        get_preset(PresetId.HIGH).values["quality"] = 1  # type: ignore[index]


def test_unknown_preset_raises() -> None:
    with pytest.raises(InvalidConfigurationError):
        get_preset("ultra")
    with pytest.raises(InvalidConfigurationError):
        apply_preset("ultra", default_parameters())
