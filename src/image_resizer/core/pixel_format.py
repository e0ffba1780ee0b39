"""像素格式与行跨度（stride）规则。"""

from __future__ import annotations

from enum import Enum

from image_resizer.core.exceptions import InvalidConfigurationError

SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png"}


class PixelFormat(Enum):
    """解码后位图的像素格式。"""

    INDEXED_8 = "8bpp-indexed"
    RGB_24 = "24bpp-rgb"
    ARGB_32 = "32bpp-argb"


# 24bpp 在目标平台上按 4 字节存储。
_BYTES_PER_PIXEL = {
    PixelFormat.INDEXED_8: 1,
    PixelFormat.RGB_24: 4,
    PixelFormat.ARGB_32: 4,
}

_EXTENSION_FORMATS = {
    ".png": PixelFormat.ARGB_32,
    ".jpg": PixelFormat.RGB_24,
    ".jpeg": PixelFormat.RGB_24,
}


def bytes_per_pixel(pixel_format: PixelFormat) -> int:
    """返回像素格式对应的每像素字节数。"""

    try:
        return _BYTES_PER_PIXEL[pixel_format]
    except KeyError as exc:
        raise InvalidConfigurationError(f"不支持的像素格式: {pixel_format!r}") from exc


def pixel_format_for_extension(extension: str) -> PixelFormat:
    """根据文件扩展名（不区分大小写）确定像素格式。"""

    pixel_format = _EXTENSION_FORMATS.get(extension.lower())
    if pixel_format is None:
        raise InvalidConfigurationError(f"不支持的文件格式: {extension or '<无扩展名>'}")
    return pixel_format


def aligned_stride(width: int, bpp: int, alignment: int) -> int:
    """计算按 alignment 字节对齐后的单行字节数。"""

    return (width * bpp + alignment - 1) // alignment * alignment
