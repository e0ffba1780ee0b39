"""命令行入口。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from image_resizer.core.config import (
    DEFAULT_ALGORITHM,
    DEFAULT_ALIGNMENT,
    DEFAULT_MEMORY_LIMIT,
    DEFAULT_QUALITY,
    JobConfig,
)
from image_resizer.core.exceptions import InvalidConfigurationError
from image_resizer.core.progress import ProgressUpdate
from image_resizer.processing.pipeline import process_batch
from image_resizer.processing.resizing import RESAMPLING_FILTERS
from image_resizer.utils.logging import setup_logging

app = typer.Typer(help="按内存上限批量缩放图片。")


def _parse_algorithm(value: str) -> str:
    lowered = value.lower()
    if lowered not in RESAMPLING_FILTERS:
        raise typer.BadParameter(f"算法必须为 {', '.join(RESAMPLING_FILTERS)} 之一")
    return lowered


def _build_progress_callback(progress: Progress):
    task_ids: dict[str, TaskID] = {}

    def callback(update: ProgressUpdate) -> None:
        if update.total == 0:
            return
        task_id = task_ids.get(update.description)
        if task_id is None:
            task_id = progress.add_task(update.description or "处理图片", total=update.total)
            task_ids[update.description] = task_id
        progress.update(task_id, completed=update.completed)

    return callback


@app.command("run")
def run_cli(  # noqa: PLR0913
    source: List[Path] = typer.Argument(..., help="源图片文件或目录，可指定多个"),
    memory: int = typer.Option(DEFAULT_MEMORY_LIMIT, "--memory", "-m", min=1, help="内存上限（字节）"),
    output: Path = typer.Option(Path("."), "--output", "-o", help="输出目录，不存在时自动创建"),
    algorithm: str = typer.Option(
        DEFAULT_ALGORITHM, "--algorithm", "-a", help="缩放算法 lanczos/bilinear/nearest"
    ),
    quality: int = typer.Option(DEFAULT_QUALITY, "--quality", "-q", min=1, max=100, help="JPEG 质量 (1-100)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="只计算与记录，不写入文件"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="递归扫描子目录"),
    dpi: int = typer.Option(0, "--dpi", "-d", min=0, help="覆盖 DPI；为 0 时从 EXIF 中提取"),
    max_workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="并发线程数量，默认 CPU 核数"),
    alignment: int = typer.Option(DEFAULT_ALIGNMENT, "--alignment", min=1, help="位图行对齐字节数"),
    report: Optional[str] = typer.Option(None, "--report", help="在输出目录写入 CSV 报告的文件名"),
) -> None:
    """执行批量缩放。"""

    setup_logging()
    logging.getLogger(__name__).debug("CLI 参数解析完成")

    job = JobConfig(
        sources=[p.expanduser() for p in source],
        output_dir=output.expanduser(),
        memory_limit=memory,
        algorithm=_parse_algorithm(algorithm),
        quality=quality,
        dry_run=dry_run,
        recursive=recursive,
        dpi=dpi,
        alignment=alignment,
        report_filename=report,
    )
    if max_workers is not None:
        job.max_workers = max_workers

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
    )

    def write_diagnostic(message: str) -> None:
        progress.console.print(message, markup=False, highlight=False)

    try:
        with progress:
            result = process_batch(
                job,
                progress_callback=_build_progress_callback(progress),
                diagnostic_writer=write_diagnostic,
            )
    except InvalidConfigurationError as exc:
        typer.echo(f"配置错误：{exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(
        f"处理完成：成功 {len(result.succeeded)} 张，跳过 {len(result.skipped)} 张，失败 {len(result.failed)} 张。"
    )
    if report:
        typer.echo(f"报告文件：{job.output_dir / report}")


if __name__ == "__main__":
    app()
