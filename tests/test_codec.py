"""测试图片加载、通道归一化与扩展名判断。"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from webp_batch.core.exceptions import ImageDecodeError
from webp_batch.processing.codec import is_supported, load_image, release_image


@pytest.mark.parametrize(
    "name",
    ["photo.png", "photo.PNG", "scan.Jpg", "scan.JPEG", "icon.bmp", "anim.GiF", "dir.with.dots/a.jpeg"],
)
def test_supported_extensions_ignore_case(name: str) -> None:
    assert is_supported(name)


@pytest.mark.parametrize(
    "name",
    ["notes.txt", "archive.png.zip", "noextension", "trailing.", "image.webp", "image.tiff", ""],
)
def test_other_extensions_are_unsupported(name: str) -> None:
    assert not is_supported(name)


def test_rgb_image_is_expanded_with_opaque_alpha(tmp_path: Path) -> None:
    path = tmp_path / "blue.png"
    Image.new("RGB", (6, 4), (0, 0, 255)).save(path)

    bitmap = load_image(path)

    assert (bitmap.width, bitmap.height) == (6, 4)
    assert bitmap.pixels is not None
    assert bitmap.pixels.shape == (4, 6, 4)
    assert bitmap.pixels.dtype == np.uint8
    assert np.all(bitmap.pixels[..., 2] == 255)
    assert np.all(bitmap.pixels[..., 3] == 255)
    assert bitmap.native_channels == 3
    assert bitmap.file_size == path.stat().st_size
    assert bitmap.source_path == path


def test_grayscale_is_replicated_to_colour_channels(tmp_path: Path) -> None:
    path = tmp_path / "gray.bmp"
    Image.new("L", (3, 2), 77).save(path)

    bitmap = load_image(path)

    assert bitmap.pixels is not None
    assert np.all(bitmap.pixels[..., :3] == 77)
    assert np.all(bitmap.pixels[..., 3] == 255)
    assert bitmap.native_channels == 1


def test_palette_gif_and_rgba_png_load_as_rgba(tmp_path: Path) -> None:
    gif_path = tmp_path / "palette.gif"
    Image.new("P", (5, 5), 3).save(gif_path)
    png_path = tmp_path / "alpha.png"
    Image.new("RGBA", (2, 2), (10, 20, 30, 40)).save(png_path)

    gif = load_image(gif_path)
    png = load_image(png_path)

    assert gif.pixels is not None and gif.pixels.shape == (5, 5, 4)
    assert png.pixels is not None
    assert tuple(png.pixels[0, 0]) == (10, 20, 30, 40)


def test_exif_orientation_is_applied(tmp_path: Path) -> None:
    if not hasattr(Image, "Exif"):
        pytest.skip("当前 Pillow 版本不支持写入 EXIF 数据")

    image = Image.new("RGB", (80, 40), "red")
    exif = Image.Exif()
    exif[274] = 6  # 旋转 90 度
    path = tmp_path / "rotated.jpg"
    image.save(path, exif=exif.tobytes())

    bitmap = load_image(path)

    assert (bitmap.width, bitmap.height) == (40, 80)


def test_missing_empty_and_corrupt_files_raise(tmp_path: Path) -> None:
    empty = tmp_path / "empty.png"
    empty.write_bytes(b"")
    corrupt = tmp_path / "corrupt.jpg"
    corrupt.write_text("not an image")

    for path in (tmp_path / "missing.png", empty, corrupt):
        with pytest.raises(ImageDecodeError):
            load_image(path)


def test_release_is_idempotent(tmp_path: Path) -> None:
    path = tmp_path / "one.png"
    Image.new("RGB", (1, 1)).save(path)
    bitmap = load_image(path)

    release_image(bitmap)
    release_image(bitmap)
    release_image(None)

    assert bitmap.is_empty
    assert bitmap.pixels is None
