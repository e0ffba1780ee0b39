"""DPI 解析：命令行覆盖值优先，否则读取元数据，失败时回退默认值。"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from image_resizer.core.exceptions import ImageResizerError

DEFAULT_DPI = 72

EXIF_X_RESOLUTION = 282
EXIF_Y_RESOLUTION = 283


class DpiExtractionError(ImageResizerError):
    """无法从文件元数据中得到有效 DPI。"""


def extract_dpi(path: Path) -> int:
    """读取 EXIF XResolution/YResolution，缺失时使用容器密度（JFIF/pHYs）。"""

    try:
        with Image.open(path) as img:
            exif = img.getexif()
            x_res = exif.get(EXIF_X_RESOLUTION)
            y_res = exif.get(EXIF_Y_RESOLUTION)
            if x_res is None or y_res is None:
                x_res, y_res = img.info.get("dpi", (None, None))
    except (UnidentifiedImageError, OSError, SyntaxError, Image.DecompressionBombError) as exc:
        raise DpiExtractionError(f"无 EXIF 数据或 EXIF 数据损坏: {exc}") from exc

    if x_res is None or y_res is None:
        raise DpiExtractionError("元数据中没有分辨率信息")

    try:
        x_dpi = round(float(x_res))
        y_dpi = round(float(y_res))
    except (TypeError, ValueError, OverflowError, ZeroDivisionError) as exc:
        raise DpiExtractionError(f"分辨率数值无效: {x_res!r}/{y_res!r}") from exc

    if x_dpi != y_dpi:
        raise DpiExtractionError(f"水平与垂直分辨率不一致: {x_dpi}/{y_dpi}")
    if x_dpi < 1:
        raise DpiExtractionError(f"分辨率必须为正数: {x_dpi}")
    return x_dpi


def resolve_dpi(override_dpi: int, path: Path, notes: Optional[list[str]] = None) -> int:
    """返回用于量化的 DPI，从不抛出异常。"""

    if override_dpi > 0:
        return override_dpi

    try:
        dpi = extract_dpi(path)
    except DpiExtractionError as exc:
        if notes is not None:
            notes.append(f"{path.name}: 无法提取 DPI（{exc}），使用默认值 {DEFAULT_DPI}")
        return DEFAULT_DPI

    if notes is not None:
        notes.append(f"{path.name}: 提取到 DPI {dpi}")
    return dpi
