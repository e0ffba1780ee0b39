"""DPI 解析逻辑测试。"""

from __future__ import annotations

from pathlib import Path

from PIL import Image

from image_resizer.processing.dpi import DEFAULT_DPI, extract_dpi, resolve_dpi


def test_override_wins_without_reading_file(tmp_path: Path) -> None:
    notes: list[str] = []

    assert resolve_dpi(150, tmp_path / "missing.jpg", notes) == 150
    assert notes == []


def test_png_density_is_extracted(tmp_path: Path) -> None:
    path = tmp_path / "dense.png"
    Image.new("RGB", (10, 10), "white").save(path, dpi=(300, 300))

    assert extract_dpi(path) == 300
    notes: list[str] = []
    assert resolve_dpi(0, path, notes) == 300
    assert notes and "300" in notes[0]


def test_exif_resolution_is_extracted(tmp_path: Path) -> None:
    path = tmp_path / "exif.jpg"
    exif = Image.Exif()
    exif[282] = 240
    exif[283] = 240
    Image.new("RGB", (10, 10), "white").save(path, exif=exif.tobytes())

    assert resolve_dpi(0, path) == 240


def test_mismatched_resolution_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "uneven.jpg"
    Image.new("RGB", (10, 10), "white").save(path, dpi=(300, 150))

    notes: list[str] = []
    assert resolve_dpi(0, path, notes) == DEFAULT_DPI
    assert str(DEFAULT_DPI) in notes[0]


def test_missing_metadata_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "plain.png"
    Image.new("RGB", (10, 10), "white").save(path)

    assert resolve_dpi(0, path) == DEFAULT_DPI


def test_corrupted_file_falls_back(tmp_path: Path) -> None:
    path = tmp_path / "broken.jpg"
    path.write_text("not an image")

    assert resolve_dpi(0, path) == DEFAULT_DPI
    assert resolve_dpi(0, tmp_path / "missing.png") == DEFAULT_DPI


def test_pixel_limit_error_falls_back(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "huge.png"
    Image.new("RGB", (100, 100), "white").save(path, dpi=(300, 300))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

    assert resolve_dpi(0, path) == DEFAULT_DPI
