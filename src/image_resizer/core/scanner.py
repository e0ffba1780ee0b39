"""文件扫描与筛选逻辑。"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from image_resizer.core.pixel_format import SUPPORTED_EXTENSIONS

LOGGER = logging.getLogger(__name__)


def is_supported_image(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def _iter_candidate_files(path: Path, recursive: bool) -> Iterator[Path]:
    """遍历目录下的所有文件；非递归时只看根目录本身。"""

    iterator = path.rglob("*") if recursive else path.glob("*")
    for candidate in iterator:
        if candidate.is_file():
            yield candidate


def discover(root: Path, recursive: bool = False) -> list[Path]:
    """将输入路径展开为待处理的图片列表。

    单个文件：扩展名受支持时返回该文件，否则返回空列表并记录拒绝原因。
    目录：按扩展名（不区分大小写）筛选，结果按路径排序以保证稳定。
    """

    if root.is_file():
        if is_supported_image(root):
            return [root]
        LOGGER.warning("不支持的文件格式，已忽略：%s", root)
        return []

    if not root.is_dir():
        LOGGER.error("无法访问路径：%s", root)
        return []

    collected: list[Path] = []
    seen_paths: set[Path] = set()
    for candidate in _iter_candidate_files(root, recursive):
        if candidate in seen_paths or not is_supported_image(candidate):
            continue
        seen_paths.add(candidate)
        collected.append(candidate)

    collected.sort(key=lambda x: (str(x).lower(), str(x)))
    return collected
