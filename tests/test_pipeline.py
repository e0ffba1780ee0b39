"""批处理流水线测试：缩放、跳过、进度与诊断输出。"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

import pytest
from PIL import Image

from image_resizer.core.config import JobConfig
from image_resizer.core.exceptions import InvalidConfigurationError
from image_resizer.core.progress import ProgressUpdate
from image_resizer.processing.pipeline import process_batch


def make_config(source: Path, output: Path, **overrides) -> JobConfig:
    params = dict(sources=[source], output_dir=output, memory_limit=20_000, dpi=10, max_workers=4)
    params.update(overrides)
    return JobConfig(**params)


def _make_dirs(tmp_path: Path) -> tuple[Path, Path]:
    source = tmp_path / "input"
    output = tmp_path / "output"
    source.mkdir()
    return source, output


def test_image_over_budget_is_resized(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (200, 100), "blue").save(source / "wide.png")

    result = process_batch(make_config(source, output))

    assert len(result.succeeded) == 1
    record = result.succeeded[0]
    assert record.status == "resized"
    assert record.output_path == output / "wide-resized.png"
    assert record.original_size == (200, 100)
    with Image.open(record.output_path) as img:
        assert img.size == (100, 50)


def test_default_dpi_is_used_when_metadata_missing(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (200, 100), "blue").save(source / "wide.png")

    result = process_batch(make_config(source, output, dpi=0))

    with Image.open(output / "wide-resized.png") as img:
        assert img.size == (72, 36)
    assert any("72" in message for message in result.diagnostics)


def test_output_directory_is_created(tmp_path: Path) -> None:
    source, _ = _make_dirs(tmp_path)
    output = tmp_path / "nested" / "out"
    Image.new("RGB", (200, 100), "blue").save(source / "wide.jpg")

    result = process_batch(make_config(source, output))

    assert len(result.succeeded) == 1
    assert (output / "wide-resized.jpg").exists()


def test_second_run_skips_everything(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    for idx in range(3):
        Image.new("RGB", (200, 100), "red").save(source / f"img{idx}.png")

    first = process_batch(make_config(source, output))
    snapshot = {path.name: path.read_bytes() for path in output.iterdir()}
    second = process_batch(make_config(source, output))

    assert len(first.succeeded) == 3
    assert len(second.succeeded) == 0
    assert [r.status for r in second.skipped] == ["skip-existing"] * 3
    assert {path.name: path.read_bytes() for path in output.iterdir()} == snapshot


def test_existing_output_is_not_touched(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    output.mkdir()
    Image.new("RGB", (300, 200), "green").save(source / "photo.jpg")
    (output / "photo-resized.jpg").write_bytes(b"sentinel")

    result = process_batch(make_config(source, output))

    assert len(result.skipped) == 1
    assert result.skipped[0].status == "skip-existing"
    assert (output / "photo-resized.jpg").read_bytes() == b"sentinel"
    assert any(m.startswith("photo.jpg:") for m in result.diagnostics)


def test_image_within_budget_produces_no_output(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (64, 64), "blue").save(source / "small.png")

    result = process_batch(make_config(source, output, memory_limit=2 * 1024**3))

    assert [r.status for r in result.skipped] == ["skip-no-reduction"]
    assert list(output.iterdir()) == []


def test_dry_run_writes_nothing(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (200, 100), "blue").save(source / "wide.png")

    result = process_batch(make_config(source, output, dry_run=True))

    assert [r.status for r in result.succeeded] == ["dry-run"]
    assert result.succeeded[0].target is not None
    assert result.succeeded[0].target.size == (100, 50)
    assert not (output / "wide-resized.png").exists()


def test_failures_do_not_abort_siblings_and_progress_completes(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (200, 100), "blue").save(source / "valid.png")
    (source / "corrupted.png").write_text("not an image")
    (source / "notes.txt").write_text("hello")

    updates: list[ProgressUpdate] = []
    result = process_batch(make_config(source, output), progress_callback=updates.append)

    assert len(result.succeeded) == 1
    assert [r.status for r in result.failed] == ["error-load"]
    assert result.total == 2
    assert result.completed == 2
    assert len(updates) == 2
    assert updates[-1].completed == updates[-1].total == 2


def test_budget_too_small_is_a_per_file_error(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (200, 100), "blue").save(source / "a.png")
    Image.new("RGB", (200, 100), "blue").save(source / "b.png")

    result = process_batch(make_config(source, output, memory_limit=1))

    assert [r.status for r in result.failed] == ["error-resolve", "error-resolve"]
    assert result.completed == 2


def test_diagnostics_are_contiguous_per_file(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    names = [f"img{idx}.png" for idx in range(12)]
    for name in names:
        Image.new("RGB", (200, 100), "white").save(source / name)

    written: list[str] = []
    result = process_batch(make_config(source, output), diagnostic_writer=written.append)

    assert written == result.diagnostics
    for name in names:
        indices = [i for i, message in enumerate(written) if message.startswith(f"{name}:")]
        assert indices == list(range(indices[0], indices[-1] + 1))
        block = [written[i] for i in indices]
        assert "开始处理" in block[0]
        assert "已保存" in block[-1]


def test_recursive_flag_controls_depth(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    (source / "nested").mkdir()
    Image.new("RGB", (200, 100), "blue").save(source / "top.png")
    Image.new("RGB", (200, 100), "blue").save(source / "nested" / "deep.jpeg")

    shallow = process_batch(make_config(source, output, dry_run=True))
    deep = process_batch(make_config(source, output, dry_run=True, recursive=True))

    assert shallow.total == 1
    assert deep.total == 2


def test_multiple_roots_are_processed_in_order(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    output = tmp_path / "output"
    first.mkdir()
    second.mkdir()
    Image.new("RGB", (200, 100), "blue").save(first / "one.png")
    Image.new("RGB", (200, 100), "blue").save(second / "two.jpg")

    result = process_batch(make_config(first, output, sources=[first, second]))

    assert result.total == 2
    assert sorted(p.name for p in output.iterdir()) == ["one-resized.png", "two-resized.jpg"]
    first_idx = next(i for i, m in enumerate(result.diagnostics) if m.startswith("one.png:"))
    second_idx = next(i for i, m in enumerate(result.diagnostics) if m.startswith("two.jpg:"))
    assert first_idx < second_idx


def test_report_is_written_when_requested(tmp_path: Path) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (200, 100), "blue").save(source / "wide.png")

    process_batch(make_config(source, output, report_filename="report.csv"))

    with (output / "report.csv").open("r", encoding="utf-8", newline="") as handle:
        row = next(csv.DictReader(handle))
    assert row["status"] == "resized"
    assert row["original_size"] == "200x100"
    assert row["target_size"] == "100x50"
    assert row["target_dpi"] == "5"


@pytest.mark.parametrize(
    "overrides",
    [
        {"quality": 0},
        {"memory_limit": 0},
        {"algorithm": "bicubic"},
        {"sources": []},
    ],
)
def test_invalid_configuration_fails_before_dispatch(tmp_path: Path, overrides: dict) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (200, 100), "blue").save(source / "wide.png")

    with pytest.raises(InvalidConfigurationError):
        process_batch(make_config(source, output, **overrides))
    assert not output.exists()


def test_roots_with_same_name_report_progress_separately(tmp_path: Path) -> None:
    first = tmp_path / "a" / "img"
    second = tmp_path / "b" / "img"
    first.mkdir(parents=True)
    second.mkdir(parents=True)
    Image.new("RGB", (200, 100), "blue").save(first / "one.png")
    Image.new("RGB", (200, 100), "blue").save(second / "two.png")
    Image.new("RGB", (200, 100), "blue").save(second / "three.png")

    updates: list[ProgressUpdate] = []
    process_batch(
        make_config(first, tmp_path / "output", sources=[first, second], dry_run=True),
        progress_callback=updates.append,
    )

    totals = {u.description: u.total for u in updates}
    assert totals == {str(first): 1, str(second): 2}


def test_workers_do_not_log(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    source, output = _make_dirs(tmp_path)
    Image.new("RGB", (200, 100), "blue").save(source / "valid.png")
    (source / "corrupted.png").write_text("not an image")

    with caplog.at_level(logging.DEBUG):
        result = process_batch(make_config(source, output, dpi=0))

    assert len(result.failed) == 1
    own_records = [r for r in caplog.records if r.name.startswith("image_resizer")]
    assert own_records
    assert all(record.threadName == "MainThread" for record in own_records)
