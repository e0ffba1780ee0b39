"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(slots=True, frozen=True)
class ResizeSpec:
    """求解器给出的目标尺寸与 DPI。"""

    width: int
    height: int
    dpi: int
    needs_resize: bool

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


@dataclass(slots=True)
class FileOutcome:
    """记录单个文件的处理结果（用于报告/日志）。"""

    source_path: Path
    status: str
    output_path: Optional[Path] = None
    message: Optional[str] = None
    original_size: Optional[tuple[int, int]] = None
    target: Optional[ResizeSpec] = None
    diagnostics: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status.startswith("error")

    @property
    def skipped(self) -> bool:
        return self.status.startswith("skip")


@dataclass(slots=True)
class BatchResult:
    """批处理阶段性的产出。"""

    succeeded: list[FileOutcome]
    skipped: list[FileOutcome]
    failed: list[FileOutcome]
    total: int = 0
    completed: int = 0
    diagnostics: list[str] = field(default_factory=list)

    def all_outcomes(self) -> list[FileOutcome]:
        """返回所有结果记录，方便生成报告。"""

        return [*self.succeeded, *self.skipped, *self.failed]

    def record(self, outcome: FileOutcome) -> None:
        if outcome.failed:
            self.failed.append(outcome)
        elif outcome.skipped:
            self.skipped.append(outcome)
        else:
            self.succeeded.append(outcome)

    def merge(self, other: "BatchResult") -> None:
        self.succeeded.extend(other.succeeded)
        self.skipped.extend(other.skipped)
        self.failed.extend(other.failed)
        self.total += other.total
        self.completed += other.completed
        self.diagnostics.extend(other.diagnostics)
