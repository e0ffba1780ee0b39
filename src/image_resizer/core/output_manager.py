"""输出路径与图像写入模块。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from PIL import Image

from image_resizer.core.config import OUTPUT_SUFFIX
from image_resizer.core.exceptions import ImageResizerError

LOGGER = logging.getLogger(__name__)

SUPPORTED_FORMATS = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
}


class ImageWriteError(ImageResizerError):
    """输出目录创建或文件写入失败。"""


class OutputManager:
    """负责输出目录、输出文件命名与图像写入。"""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def output_path_for(self, source_path: Path) -> Path:
        """同名加后缀、同扩展名，放在输出目录中。"""

        return self.output_dir / f"{source_path.stem}{OUTPUT_SUFFIX}{source_path.suffix}"

    def ensure_output_dir(self) -> None:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ImageWriteError(f"无法创建输出目录 {self.output_dir}: {exc}") from exc

    def save_image(self, image: Image.Image, destination: Path, quality: int, dpi: int = 0) -> None:
        """将 PIL Image 保存到磁盘，格式由目标扩展名决定。"""

        suffix = destination.suffix.lower()
        image_format = SUPPORTED_FORMATS.get(suffix)
        if not image_format:
            raise ImageWriteError(f"不支持的输出格式: {suffix}")

        save_params: dict[str, Any] = {"optimize": True}
        if dpi > 0:
            save_params["dpi"] = (dpi, dpi)

        image_to_save = image
        if image_format == "JPEG":
            save_params["quality"] = quality
            if image.mode != "RGB":
                image_to_save = image.convert("RGB")
        else:
            if image.mode not in {"RGB", "RGBA", "L", "LA", "P"}:
                image_to_save = image.convert("RGBA")

        try:
            image_to_save.save(destination, format=image_format, **save_params)
        except OSError as exc:
            raise ImageWriteError(f"写入文件失败: {destination}: {exc}") from exc
        finally:
            if image_to_save is not image:
                image_to_save.close()
