"""处理任务的配置模型。"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

DEFAULT_MEMORY_LIMIT = 2 * 1024 * 1024 * 1024
DEFAULT_ALGORITHM = "lanczos"
DEFAULT_QUALITY = 75
DEFAULT_ALIGNMENT = 4
OUTPUT_SUFFIX = "-resized"


def _default_workers() -> int:
    return os.cpu_count() or 4


@dataclass(slots=True)
class JobConfig:
    """单次批处理任务的配置集合，运行期间只读。"""

    sources: Sequence[Path]
    output_dir: Path = field(default_factory=lambda: Path("."))
    memory_limit: int = DEFAULT_MEMORY_LIMIT
    algorithm: str = DEFAULT_ALGORITHM
    quality: int = DEFAULT_QUALITY
    dry_run: bool = False
    recursive: bool = False
    dpi: int = 0  # 0 表示未设置，从元数据中提取
    alignment: int = DEFAULT_ALIGNMENT
    max_workers: int = field(default_factory=_default_workers)
    report_filename: Optional[str] = None
