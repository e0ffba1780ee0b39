"""处理流水线：扫描输入路径、并发执行缩放任务并汇总诊断信息。"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Optional

from image_resizer.core.config import JobConfig
from image_resizer.core.diagnostics import DiagnosticSink
from image_resizer.core.exceptions import InvalidConfigurationError
from image_resizer.core.models import BatchResult, FileOutcome
from image_resizer.core.pixel_format import pixel_format_for_extension
from image_resizer.core.progress import ProgressCallback, ProgressState
from image_resizer.core.report import write_csv_report
from image_resizer.core.scanner import discover
from image_resizer.processing.resizing import resolve_resampling
from image_resizer.processing.worker import ResizeTask, run_task

LOGGER = logging.getLogger(__name__)

DiagnosticWriter = Optional[Callable[[str], None]]


def validate_job_config(config: JobConfig) -> None:
    """检查运行期参数，不合法时抛出 InvalidConfigurationError。"""

    if not config.sources:
        raise InvalidConfigurationError("至少需要指定一个输入文件或目录")
    if config.memory_limit <= 0:
        raise InvalidConfigurationError(f"内存上限必须大于 0: {config.memory_limit}")
    if config.alignment <= 0:
        raise InvalidConfigurationError(f"alignment 必须大于 0: {config.alignment}")
    if not 1 <= config.quality <= 100:
        raise InvalidConfigurationError(f"quality 必须在 1~100 之间: {config.quality}")
    if config.dpi < 0:
        raise InvalidConfigurationError(f"dpi 不能为负数: {config.dpi}")
    if config.max_workers < 1:
        raise InvalidConfigurationError(f"并发数量必须大于 0: {config.max_workers}")
    resolve_resampling(config.algorithm)


def process_batch(
    config: JobConfig,
    progress_callback: ProgressCallback = None,
    diagnostic_writer: DiagnosticWriter = None,
) -> BatchResult:
    """批量处理入口：依次处理每个输入路径，每个路径结束后输出其诊断信息。"""

    validate_job_config(config)

    result = BatchResult(succeeded=[], skipped=[], failed=[])
    for root in config.sources:
        result.merge(process_path(Path(root), config, progress_callback, diagnostic_writer))

    if config.report_filename:
        _write_report(config, result)
    return result


def process_path(
    root: Path,
    config: JobConfig,
    progress_callback: ProgressCallback = None,
    diagnostic_writer: DiagnosticWriter = None,
) -> BatchResult:
    """处理单个输入路径：扫描、分发到线程池、等待全部完成后刷新诊断信息。"""

    LOGGER.info("开始扫描输入路径 %s", root)
    files = discover(root, config.recursive)
    total = len(files)
    LOGGER.info("发现 %d 个候选图片文件", total)

    result = BatchResult(succeeded=[], skipped=[], failed=[], total=total)
    if total == 0:
        return result

    # 在分发前确定像素格式，不支持的格式属于配置错误。
    tasks = [
        ResizeTask(
            source_path=path,
            output_dir=config.output_dir,
            pixel_format=pixel_format_for_extension(path.suffix),
            memory_limit=config.memory_limit,
            alignment=config.alignment,
            algorithm=config.algorithm,
            quality=config.quality,
            dry_run=config.dry_run,
            dpi_override=config.dpi,
        )
        for path in files
    ]

    sink = DiagnosticSink()
    # 以完整路径区分不同输入，同名目录也各自拥有进度条。
    progress = ProgressState(total, progress_callback, description=str(root))
    outcomes: dict[Path, FileOutcome] = {}

    with ThreadPoolExecutor(max_workers=min(config.max_workers, total)) as executor:
        future_map = {executor.submit(_run_unit, task, sink, progress): task for task in tasks}
        for future in as_completed(future_map):
            task = future_map[future]
            outcomes[task.source_path] = future.result()

    for task in tasks:
        result.record(outcomes[task.source_path])

    result.completed = progress.completed
    result.diagnostics = sink.flush(diagnostic_writer)
    LOGGER.info(
        "%s 处理完成：成功 %d，跳过 %d，失败 %d",
        root,
        len(result.succeeded),
        len(result.skipped),
        len(result.failed),
    )
    return result


def _run_unit(task: ResizeTask, sink: DiagnosticSink, progress: ProgressState) -> FileOutcome:
    """线程池中的工作单元边界：任何异常都不会越过此处。"""

    try:
        outcome = run_task(task)
    except Exception as exc:  # noqa: BLE001
        outcome = FileOutcome(
            source_path=task.source_path,
            status="error-worker",
            message=str(exc),
            diagnostics=[f"{task.source_path.name}: 处理异常：{exc!r}"],
        )

    try:
        sink.append(*outcome.diagnostics)
    finally:
        progress.increment(task.source_path.name)
    return outcome


def _write_report(config: JobConfig, result: BatchResult) -> None:
    try:
        config.output_dir.mkdir(parents=True, exist_ok=True)
        write_csv_report(result.all_outcomes(), config.output_dir, config.report_filename)
    except OSError as exc:
        LOGGER.error("写入报告失败：%s", exc)
