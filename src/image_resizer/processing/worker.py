"""并发处理的工作单元。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image

from image_resizer.core.exceptions import ResolutionError
from image_resizer.core.models import FileOutcome
from image_resizer.core.output_manager import ImageWriteError, OutputManager
from image_resizer.core.pixel_format import PixelFormat
from image_resizer.core.solver import plan_resize
from image_resizer.processing.dpi import resolve_dpi
from image_resizer.processing.image_loader import ImageLoadingError, load_image
from image_resizer.processing.resizing import resize_image


@dataclass(slots=True)
class ResizeTask:
    """描述单个图片处理任务，只会被一个工作线程消费一次。"""

    source_path: Path
    output_dir: Path
    pixel_format: PixelFormat
    memory_limit: int
    alignment: int
    algorithm: str
    quality: int
    dry_run: bool
    dpi_override: int


def run_task(task: ResizeTask) -> FileOutcome:
    """执行单个文件的完整流程，所有可恢复错误都转换为结果记录。

    工作单元不直接输出到控制台，消息记录在 ``FileOutcome.diagnostics`` 中。
    """

    name = task.source_path.name
    notes: list[str] = []
    output_manager = OutputManager(task.output_dir)

    try:
        output_manager.ensure_output_dir()
    except ImageWriteError as exc:
        notes.append(f"{name}: 创建输出目录失败：{exc}")
        return FileOutcome(
            source_path=task.source_path,
            status="error-output-dir",
            message=str(exc),
            diagnostics=notes,
        )

    dest_path = output_manager.output_path_for(task.source_path)
    if dest_path.exists():
        notes.append(f"{name}: 跳过已存在的文件 {dest_path}")
        return FileOutcome(
            source_path=task.source_path,
            status="skip-existing",
            output_path=dest_path,
            message="目标已存在",
            diagnostics=notes,
        )

    dpi = resolve_dpi(task.dpi_override, task.source_path, notes)
    notes.append(f"{name}: 开始处理")

    image: Optional[Image.Image] = None
    resized: Optional[Image.Image] = None
    try:
        try:
            image = load_image(task.source_path)
        except ImageLoadingError as exc:
            notes.append(f"{name}: 解码失败：{exc}")
            return FileOutcome(
                source_path=task.source_path,
                status="error-load",
                message=str(exc),
                diagnostics=notes,
            )

        original_size = image.size
        try:
            spec = plan_resize(*original_size, task.pixel_format, task.alignment, task.memory_limit, dpi)
        except ResolutionError as exc:
            notes.append(f"{name}: 无法计算目标尺寸：{exc}")
            return FileOutcome(
                source_path=task.source_path,
                status="error-resolve",
                message=str(exc),
                original_size=original_size,
                diagnostics=notes,
            )

        if not spec.needs_resize:
            notes.append(f"{name}: {original_size[0]}x{original_size[1]} 已在内存上限内，无需缩放")
            return FileOutcome(
                source_path=task.source_path,
                status="skip-no-reduction",
                message="无需缩放",
                original_size=original_size,
                target=spec,
                diagnostics=notes,
            )

        resized = resize_image(image, spec.size, task.algorithm)
        notes.append(f"{name}: 缩放至 {spec.width}x{spec.height}，DPI {spec.dpi}")

        if task.dry_run:
            notes.append(f"{name}: 演练模式，未写入 {dest_path.name}")
            return FileOutcome(
                source_path=task.source_path,
                status="dry-run",
                message="演练模式",
                original_size=original_size,
                target=spec,
                diagnostics=notes,
            )

        try:
            output_manager.save_image(resized, dest_path, task.quality, spec.dpi)
        except ImageWriteError as exc:
            notes.append(f"{name}: 写入失败：{exc}")
            return FileOutcome(
                source_path=task.source_path,
                status="error-write",
                message=str(exc),
                original_size=original_size,
                target=spec,
                diagnostics=notes,
            )

        notes.append(f"{name}: 已保存 {dest_path}")
        return FileOutcome(
            source_path=task.source_path,
            status="resized",
            output_path=dest_path,
            original_size=original_size,
            target=spec,
            diagnostics=notes,
        )
    finally:
        _close_if_needed(image, resized)


def _close_if_needed(*images: Optional[Image.Image]) -> None:
    for img in images:
        if img is not None:
            img.close()
