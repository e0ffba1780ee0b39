"""缩放插值算法映射。"""

from __future__ import annotations

from PIL import Image

from image_resizer.core.exceptions import InvalidConfigurationError

RESAMPLING_FILTERS = {
    "lanczos": Image.Resampling.LANCZOS,
    "bilinear": Image.Resampling.BILINEAR,
    "nearest": Image.Resampling.NEAREST,
}


def resolve_resampling(name: str) -> Image.Resampling:
    """将算法名称（不区分大小写）映射为 Pillow 的重采样滤波器。"""

    try:
        return RESAMPLING_FILTERS[name.lower()]
    except KeyError as exc:
        choices = ", ".join(RESAMPLING_FILTERS)
        raise InvalidConfigurationError(f"未知的缩放算法: {name}（可选: {choices}）") from exc


def resize_image(image: Image.Image, size: tuple[int, int], algorithm: str) -> Image.Image:
    return image.resize(size, resolve_resampling(algorithm))
