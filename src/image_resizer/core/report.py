"""报告生成工具。"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable, Optional

from image_resizer.core.models import FileOutcome

HEADER = ["source_path", "output_path", "status", "message", "original_size", "target_size", "target_dpi"]


def write_csv_report(outcomes: Iterable[FileOutcome], output_dir: Path, filename: str) -> Path:
    """将处理结果写入 CSV 报告。"""

    report_path = output_dir / filename
    with report_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        for record in outcomes:
            writer.writerow(
                [
                    str(record.source_path),
                    str(record.output_path) if record.output_path else "",
                    record.status,
                    record.message or "",
                    _format_size(record.original_size),
                    _format_size(record.target.size if record.target else None),
                    str(record.target.dpi) if record.target else "",
                ]
            )
    return report_path


def _format_size(value: Optional[tuple[int, int]]) -> str:
    if value is None:
        return ""
    return f"{value[0]}x{value[1]}"
