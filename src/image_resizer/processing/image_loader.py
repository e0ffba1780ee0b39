"""图片解码实现。"""

from __future__ import annotations

from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from image_resizer.core.exceptions import ImageResizerError

# 超大图像正是需要缩小的对象，关闭 Pillow 的像素数上限（同时不再发出警告）。
Image.MAX_IMAGE_PIXELS = None


class ImageLoadingError(ImageResizerError):
    """图片加载失败。"""


def load_image(path: Path) -> Image.Image:
    """加载单张图片并执行 EXIF 旋转校正，保留原始颜色模式。

    返回值为新的 Image 对象，调用者负责关闭。在工作线程中调用，
    不写日志，失败原因由调用者记入诊断信息。
    """

    try:
        with Image.open(path) as img:
            img.load()
            # EXIF Orientation 校正，返回新的 Image 对象
            return ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        raise ImageLoadingError(f"无法加载图像: {path.name}: {exc}") from exc
