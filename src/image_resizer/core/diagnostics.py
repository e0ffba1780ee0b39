"""线程安全、保持顺序的诊断消息缓冲区。"""

from __future__ import annotations

import threading
from typing import Callable, Optional


class DiagnosticSink:
    """工作线程写入、批次结束后统一输出的消息缓冲。

    ``flush`` 只应在所有写入者结束后调用，由调度器的 join 保证。
    """

    def __init__(self) -> None:
        self._messages: list[str] = []
        self._lock = threading.Lock()

    def append(self, *messages: str) -> None:
        """追加消息；同一次调用的多条消息保持连续。"""

        if not messages:
            return
        with self._lock:
            self._messages.extend(messages)

    def flush(self, writer: Optional[Callable[[str], None]] = None) -> list[str]:
        """按追加顺序取出全部消息并清空缓冲区。"""

        with self._lock:
            drained = self._messages
            self._messages = []

        if writer is not None:
            for message in drained:
                writer(message)
        return drained
