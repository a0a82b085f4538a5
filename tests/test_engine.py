"""测试单文件转换引擎与 libwebp 编码后端。"""

from __future__ import annotations

import io
from dataclasses import replace
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from webp_batch.core.exceptions import EncodeError
from webp_batch.core.models import Bitmap
from webp_batch.core.parameters import EncodeParameters, default_parameters
from webp_batch.core.presets import PresetId, get_preset
from webp_batch.processing import engine as engine_module
from webp_batch.processing.encoder import (
    EncoderConfig,
    LibWebPEncoder,
    WebPErrorCode,
    build_encoder_config,
)
from webp_batch.processing.engine import ConversionEngine, convert


def make_bitmap(width: int = 1, height: int = 1, color=(200, 30, 60, 255), file_size: int = 100) -> Bitmap:
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[...] = color
    return Bitmap(pixels=pixels, width=width, height=height, file_size=file_size, source_path=Path("in.png"))


class RecordingEncoder:
    def __init__(self, payload: bytes = b"RIFF\x00\x00\x00\x00WEBPVP8 ") -> None:
        self.payload = payload
        self.configs: list[EncoderConfig] = []

    def encode(self, pixels, width, height, config):
        self.configs.append(config)
        return self.payload


class FailingEncoder:
    def __init__(self, code: int) -> None:
        self.code = code

    def encode(self, pixels, width, height, config):
        raise EncodeError("模拟编码失败", self.code)


def test_single_pixel_conversion_succeeds(tmp_path: Path) -> None:
    output = tmp_path / "pixel.webp"

    result = convert(make_bitmap(), output, default_parameters())

    assert result.success
    assert result.status == "converted"
    assert result.output_size > 0
    assert result.compression_ratio > 0
    assert result.compression_ratio == pytest.approx(100 / result.output_size)
    assert output.stat().st_size == result.output_size
    assert output.read_bytes()[:4] == b"RIFF"


def test_output_directory_is_created(tmp_path: Path) -> None:
    output = tmp_path / "nested" / "deeper" / "pixel.webp"

    result = convert(make_bitmap(), output, default_parameters())

    assert result.success
    assert output.exists()


def test_lossless_round_trip_preserves_pixels(tmp_path: Path) -> None:
    pixels = np.arange(2 * 3 * 4, dtype=np.uint8).reshape(3, 2, 4) * 7
    pixels[..., 3] = 255
    bitmap = Bitmap(pixels=pixels, width=2, height=3, file_size=50, source_path=Path("in.png"))
    output = tmp_path / "lossless.webp"

    result = convert(bitmap, output, EncodeParameters(lossless=True, method=6))

    assert result.success
    with Image.open(output) as decoded:
        assert decoded.size == (2, 3)
        assert np.array_equal(np.asarray(decoded.convert("RGBA")), pixels)


@pytest.mark.parametrize("bitmap", [None, Bitmap(None, 1, 1, 10, Path("x.png"))])
def test_missing_bitmap_is_invalid_input_without_writing(tmp_path: Path, bitmap) -> None:
    output = tmp_path / "never.webp"

    result = convert(bitmap, output, default_parameters())

    assert not result.success
    assert result.status == "error-input"
    assert result.error_message
    assert not output.exists()
    assert list(tmp_path.iterdir()) == []


def test_missing_params_or_path_is_invalid_input(tmp_path: Path) -> None:
    assert convert(make_bitmap(), tmp_path / "a.webp", None).status == "error-input"
    assert convert(make_bitmap(), "", default_parameters()).status == "error-input"
    assert convert(make_bitmap(), None, default_parameters()).status == "error-input"
    assert convert(make_bitmap(), Path(""), default_parameters()).status == "error-input"
    assert list(tmp_path.iterdir()) == []


def test_lossless_forces_quality_100() -> None:
    for quality in (0, 37.5, 100, 250):
        config = build_encoder_config(EncodeParameters(quality=quality, lossless=True))
        assert config.quality == 100

    assert build_encoder_config(EncodeParameters(quality=37.5)).quality == 37.5


def test_engine_passes_clamped_config_to_encoder(tmp_path: Path) -> None:
    encoder = RecordingEncoder()
    engine = ConversionEngine(encoder)

    result = engine.convert(make_bitmap(), tmp_path / "out.webp", EncodeParameters(quality=20, method=11, lossless=True))

    assert result.success
    (config,) = encoder.configs
    assert config.quality == 100
    assert config.method == 6
    assert config.lossless is True


def test_encoder_failure_keeps_error_code_and_writes_nothing(tmp_path: Path) -> None:
    output = tmp_path / "fail.webp"
    engine = ConversionEngine(FailingEncoder(WebPErrorCode.PARTITION0_OVERFLOW))

    result = engine.convert(make_bitmap(), output, default_parameters())

    assert not result.success
    assert result.status == "error-encode"
    assert result.error_code == WebPErrorCode.PARTITION0_OVERFLOW
    assert not output.exists()


def test_zero_byte_output_is_encode_error(tmp_path: Path) -> None:
    output = tmp_path / "empty.webp"

    result = ConversionEngine(RecordingEncoder(payload=b"")).convert(make_bitmap(), output, default_parameters())

    assert result.status == "error-encode"
    assert result.error_code == WebPErrorCode.BAD_WRITE
    assert result.compression_ratio == 0
    assert not output.exists()


def test_invalid_configuration_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    bad_config = EncoderConfig(
        quality=75, method=9, lossless=False, alpha_quality=100,
        filter_strength=60, filter_sharpness=0, preprocessing=0,
    )
    monkeypatch.setattr(engine_module, "build_encoder_config", lambda params: bad_config)

    result = convert(make_bitmap(), tmp_path / "config.webp", default_parameters())

    assert result.status == "error-config"
    assert "method" in result.error_message
    assert not (tmp_path / "config.webp").exists()


def test_unwritable_destination_is_write_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory")

    result = convert(make_bitmap(), blocker / "out.webp", default_parameters())

    assert result.status == "error-write"
    assert not result.success


class ShortWriteHandle:
    """写入时少写一个字节的文件句柄。"""

    def __init__(self, path: Path) -> None:
        self._handle = open(path, "wb")

    def __enter__(self) -> "ShortWriteHandle":
        return self

    def __exit__(self, *exc_info) -> None:
        self._handle.close()

    def write(self, data: bytes) -> int:
        return self._handle.write(data[:-1])


def test_partial_write_is_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    output = tmp_path / "partial.webp"
    monkeypatch.setattr(Path, "open", lambda self, *args, **kwargs: ShortWriteHandle(self))

    result = convert(make_bitmap(), output, default_parameters())

    assert not result.success
    assert result.status == "error-write"
    # 部分写入的文件仍留在磁盘上
    assert output.exists()


def test_libwebp_encoder_rejects_mismatched_buffer() -> None:
    config = build_encoder_config(default_parameters())
    encoder = LibWebPEncoder()

    with pytest.raises(EncodeError) as excinfo:
        encoder.encode(np.zeros((2, 2, 4), dtype=np.uint8), 3, 3, config)
    assert excinfo.value.code == WebPErrorCode.BAD_DIMENSION

    with pytest.raises(EncodeError) as excinfo:
        encoder.encode(np.zeros((1, 1, 4), dtype=np.uint8), 0, 1, config)
    assert excinfo.value.code == WebPErrorCode.BAD_DIMENSION


def test_libwebp_encoder_output_decodes() -> None:
    config = build_encoder_config(EncodeParameters(quality=60, method=2))

    payload = LibWebPEncoder().encode(make_bitmap(4, 3).pixels, 4, 3, config)

    with Image.open(io.BytesIO(payload)) as decoded:
        assert decoded.format == "WEBP"
        assert decoded.size == (4, 3)


def random_pixels(size: int = 64) -> np.ndarray:
    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(size, size, 4), dtype=np.uint8)
    pixels[..., 3] = 255
    return pixels


@pytest.mark.parametrize(
    "changes",
    [
        {"filter_strength": 100},
        {"filter_sharpness": 7},
        {"filter_strength": 100, "filter_sharpness": 7, "preprocessing": 2},
    ],
)
def test_filter_settings_reach_the_encoder(changes: dict) -> None:
    pixels = random_pixels()
    encoder = LibWebPEncoder()
    base = EncodeParameters(quality=75, method=4, filter_strength=20, filter_sharpness=0, preprocessing=0)
    tuned = replace(base, **changes)

    plain = encoder.encode(pixels, 64, 64, build_encoder_config(base))
    filtered = encoder.encode(pixels, 64, 64, build_encoder_config(tuned))

    assert plain != filtered


def test_presets_differing_only_in_preprocessing_encode_differently() -> None:
    pixels = random_pixels()
    encoder = LibWebPEncoder()

    medium = encoder.encode(pixels, 64, 64, build_encoder_config(get_preset(PresetId.MEDIUM).to_parameters()))
    web = encoder.encode(pixels, 64, 64, build_encoder_config(get_preset(PresetId.WEB).to_parameters()))

    assert medium != web
