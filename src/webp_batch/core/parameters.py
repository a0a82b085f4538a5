"""WebP 编码参数模型与取值范围。"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace

QUALITY_RANGE = (0.0, 100.0)
METHOD_RANGE = (0, 6)
ALPHA_QUALITY_RANGE = (0.0, 100.0)
FILTER_STRENGTH_RANGE = (0, 100)
FILTER_SHARPNESS_RANGE = (0, 7)
PREPROCESSING_RANGE = (0, 2)


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    low, high = bounds
    return max(low, min(value, high))


@dataclass(slots=True)
class EncodeParameters:
    """用户可调的编码参数。

    字段允许暂时超出范围（例如界面滑块的中间值），交给编码器前统一通过
    :meth:`clamped` 截断，而不是拒绝。
    """

    quality: float = 75.0
    method: int = 4
    lossless: bool = False
    alpha_quality: float = 100.0
    filter_strength: int = 60
    filter_sharpness: int = 0
    preprocessing: int = 0

    def clamped(self) -> "EncodeParameters":
        """返回截断到合法范围的新副本。"""

        return EncodeParameters(
            quality=float(_clamp(float(self.quality), QUALITY_RANGE)),
            method=int(_clamp(int(self.method), METHOD_RANGE)),
            lossless=bool(self.lossless),
            alpha_quality=float(_clamp(float(self.alpha_quality), ALPHA_QUALITY_RANGE)),
            filter_strength=int(_clamp(int(self.filter_strength), FILTER_STRENGTH_RANGE)),
            filter_sharpness=int(_clamp(int(self.filter_sharpness), FILTER_SHARPNESS_RANGE)),
            preprocessing=int(_clamp(int(self.preprocessing), PREPROCESSING_RANGE)),
        )

    def copy(self) -> "EncodeParameters":
        return replace(self)

    def overwrite_from(self, other: "EncodeParameters") -> None:
        """整体覆盖全部字段，不做字段级合并。"""

        for item in fields(self):
            setattr(self, item.name, getattr(other, item.name))


def default_parameters() -> EncodeParameters:
    """返回默认参数：质量 75、方法 4、有损、Alpha 质量 100、滤波 60。"""

    return EncodeParameters()
