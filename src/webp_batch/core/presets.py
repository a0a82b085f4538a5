"""内置编码预设。"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Union

from webp_batch.core.exceptions import InvalidConfigurationError
from webp_batch.core.parameters import EncodeParameters

LOGGER = logging.getLogger(__name__)


class PresetId(str, Enum):
    """预设标识：前四个按质量分级，后三个按用途分级。"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    LOSSLESS = "lossless"
    WEB = "web"
    PHOTO = "photo"
    THUMBNAIL = "thumbnail"


QUALITY_PRESETS = (PresetId.LOW, PresetId.MEDIUM, PresetId.HIGH, PresetId.LOSSLESS)
USE_CASE_PRESETS = (PresetId.WEB, PresetId.PHOTO, PresetId.THUMBNAIL)


@dataclass(frozen=True)
class Preset:
    """不可变的预设：标识、名称、说明与参数快照。"""

    id: PresetId
    name: str
    description: str
    values: Mapping[str, Any]

    def to_parameters(self) -> EncodeParameters:
        """返回参数快照的独立副本。"""

        return EncodeParameters(**self.values)


def _preset(
    preset_id: PresetId,
    name: str,
    description: str,
    **values: Any,
) -> Preset:
    snapshot = MappingProxyType(asdict(EncodeParameters(**values)))
    return Preset(id=preset_id, name=name, description=description, values=snapshot)


PRESETS: tuple[Preset, ...] = (
    _preset(
        PresetId.LOW, "Low", "Maximum compression, smaller files",
        quality=50.0, method=4, lossless=False, alpha_quality=50.0,
        filter_strength=80, filter_sharpness=0, preprocessing=0,
    ),
    _preset(
        PresetId.MEDIUM, "Medium", "Balanced quality and size",
        quality=75.0, method=4, lossless=False, alpha_quality=80.0,
        filter_strength=60, filter_sharpness=0, preprocessing=0,
    ),
    _preset(
        PresetId.HIGH, "High", "High quality, larger files",
        quality=90.0, method=5, lossless=False, alpha_quality=100.0,
        filter_strength=40, filter_sharpness=0, preprocessing=0,
    ),
    _preset(
        PresetId.LOSSLESS, "Lossless", "Perfect quality, no compression loss",
        quality=100.0, method=6, lossless=True, alpha_quality=100.0,
        filter_strength=0, filter_sharpness=0, preprocessing=0,
    ),
    _preset(
        PresetId.WEB, "Web", "Optimized for web pages",
        quality=75.0, method=4, lossless=False, alpha_quality=80.0,
        filter_strength=60, filter_sharpness=0, preprocessing=1,
    ),
    _preset(
        PresetId.PHOTO, "Photo", "Best for photographs",
        quality=95.0, method=6, lossless=False, alpha_quality=100.0,
        filter_strength=20, filter_sharpness=0, preprocessing=0,
    ),
    _preset(
        PresetId.THUMBNAIL, "Thumbnail", "Small previews",
        quality=70.0, method=3, lossless=False, alpha_quality=70.0,
        filter_strength=70, filter_sharpness=0, preprocessing=0,
    ),
)

_PRESETS_BY_ID = {preset.id: preset for preset in PRESETS}


def get_preset(preset_id: Union[PresetId, str]) -> Preset:
    """按标识查找预设，未知标识抛出 InvalidConfigurationError。"""

    try:
        key = PresetId(preset_id)
    except ValueError as exc:
        raise InvalidConfigurationError(f"未知的预设: {preset_id}") from exc
    return _PRESETS_BY_ID[key]


def apply_preset(preset_id: Union[PresetId, str], params: EncodeParameters) -> Preset:
    """用预设快照整体覆盖 ``params``，返回所用预设。"""

    preset = get_preset(preset_id)
    params.overwrite_from(preset.to_parameters())
    LOGGER.debug("应用预设 %s", preset.name)
    return preset
