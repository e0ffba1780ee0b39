"""进度更新的数据模型与线程安全计数器。"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(slots=True)
class ProgressUpdate:
    """批处理过程中的进度信息。"""

    total: int
    completed: int
    message: Optional[str] = None
    status: str = "running"
    description: str = ""


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


class ProgressState:
    """已完成数量计数器，单调递增且不超过 total。

    每个工作单元在任意退出路径上恰好调用一次 ``increment``。
    """

    def __init__(self, total: int, callback: ProgressCallback = None, description: str = "") -> None:
        self.total = total
        self.description = description
        self._callback = callback
        self._completed = 0
        self._lock = threading.Lock()

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def increment(self, message: Optional[str] = None) -> int:
        with self._lock:
            if self._completed < self.total:
                self._completed += 1
            completed = self._completed
            # 在锁内回调，保证进度条看到的计数有序。
            if self._callback:
                status = "done" if completed == self.total else "running"
                self._callback(
                    ProgressUpdate(
                        total=self.total,
                        completed=completed,
                        message=message,
                        status=status,
                        description=self.description,
                    )
                )
        return completed
