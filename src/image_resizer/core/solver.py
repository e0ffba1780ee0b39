"""内存预算下的最大分辨率求解。

解码后的位图按行存储，每行需要填充到 alignment 字节边界。求解器先用理想
（未对齐）尺寸估算高度，再用实际 stride 反复收缩，直到 stride * height
不超过预算。
"""

from __future__ import annotations

import math
from typing import Optional

from image_resizer.core.exceptions import InvalidConfigurationError, ResolutionError
from image_resizer.core.models import ResizeSpec
from image_resizer.core.pixel_format import PixelFormat, aligned_stride, bytes_per_pixel


def calculate_max_resolution(
    original_width: int,
    original_height: int,
    pixel_format: PixelFormat,
    alignment: int,
    memory_limit: int,
    dpi: Optional[int] = None,
) -> tuple[int, int]:
    """求解满足内存预算的最大宽高。

    ``dpi`` 为正整数时启用 DPI 量化：宽度向下取整到 dpi 的倍数，并按原始
    宽高比重新计算高度。结果可能大于原图，是否缩放由调用者判断。
    """

    if original_width <= 0 or original_height <= 0:
        raise InvalidConfigurationError(f"原始尺寸必须大于 0: {original_width}x{original_height}")
    if alignment <= 0:
        raise InvalidConfigurationError(f"alignment 必须大于 0: {alignment}")
    if memory_limit <= 0:
        raise InvalidConfigurationError(f"内存上限必须大于 0: {memory_limit}")

    bpp = bytes_per_pixel(pixel_format)
    aspect_ratio = original_width / original_height
    estimated_height = math.sqrt(memory_limit / (bpp * aspect_ratio))

    while True:
        height = math.floor(estimated_height)
        width = math.floor(aspect_ratio * height)
        stride = aligned_stride(width, bpp, alignment)

        if stride * height <= memory_limit:
            break

        # 用含填充的 stride 收缩估算值；height 严格递减，循环必然终止。
        estimated_height = math.sqrt(memory_limit / (stride * bpp))

    if width < 1 or height < 1:
        raise ResolutionError(
            f"内存上限 {memory_limit} 字节不足以容纳 {original_width}x{original_height} 图像的任何缩放结果"
        )

    if dpi is not None and dpi > 0:
        snapped = width - width % dpi
        # 宽度小于 dpi 时量化会得到 0，保留未量化的宽度。
        if snapped > 0:
            width = snapped
            height = max(1, int(width / aspect_ratio))

    return width, height


def plan_resize(
    original_width: int,
    original_height: int,
    pixel_format: PixelFormat,
    alignment: int,
    memory_limit: int,
    dpi: int,
) -> ResizeSpec:
    """计算单个文件的目标尺寸，并应用"不放大"规则。"""

    unchanged = ResizeSpec(width=original_width, height=original_height, dpi=dpi, needs_resize=False)

    # 先按未量化的结果判断；DPI 量化只作用于确实需要缩小的图像。
    try:
        width, height = calculate_max_resolution(
            original_width, original_height, pixel_format, alignment, memory_limit
        )
    except ResolutionError:
        if _fits_budget(original_width, original_height, pixel_format, alignment, memory_limit):
            return unchanged
        raise

    if width >= original_width and height >= original_height:
        return unchanged
    if _fits_budget(original_width, original_height, pixel_format, alignment, memory_limit):
        return unchanged

    width, height = calculate_max_resolution(
        original_width, original_height, pixel_format, alignment, memory_limit, dpi
    )

    if width < original_width or height < original_height:
        target_dpi = int(width / (original_width / dpi)) if dpi > 0 else 0
        return ResizeSpec(
            width=min(width, original_width),
            height=min(height, original_height),
            dpi=target_dpi,
            needs_resize=True,
        )

    return unchanged


def _fits_budget(width: int, height: int, pixel_format: PixelFormat, alignment: int, memory_limit: int) -> bool:
    return aligned_stride(width, bytes_per_pixel(pixel_format), alignment) * height <= memory_limit
