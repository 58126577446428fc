"""Progress reporting and cooperative abort for batch runs."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import List


class ProgressReporter(ABC):
    """Receives progress updates from a batch run and carries the abort flag."""

    def __init__(self) -> None:
        self._abort = threading.Event()
        self.main_progress = 0
        self.main_total = 0
        self.main_status = ""
        self.sub_status = ""

    def set_title(self, title: str) -> None:
        """Name the run being reported."""

    def set_main_progress(self, value: int, total: int | None = None) -> None:
        self.main_progress = value
        if total is not None:
            self.main_total = total

    def set_main_status(self, status: str) -> None:
        self.main_status = status

    def set_sub_status(self, status: str) -> None:
        self.sub_status = status

    @abstractmethod
    def log_message(self, message: str) -> None:
        """Show one operator-facing log line."""

    def request_abort(self) -> None:
        self._abort.set()

    def abort_requested(self) -> bool:
        return self._abort.is_set()


class ConsoleProgress(ProgressReporter):
    """Prints progress to stdout."""

    def __init__(self, *, verbose: bool = False) -> None:
        super().__init__()
        self.verbose = verbose

    def set_title(self, title: str) -> None:
        print(f"{title}")

    def set_sub_status(self, status: str) -> None:
        super().set_sub_status(status)
        if self.verbose and self.main_status:
            print(f"{self.main_status}: {status}")

    def log_message(self, message: str) -> None:
        print(message)

    def request_abort(self) -> None:
        if not self.abort_requested():
            print("Abort requested; stopping after the current item.")
        super().request_abort()


class RecordingProgress(ProgressReporter):
    """Keeps log messages in memory."""

    def __init__(self) -> None:
        super().__init__()
        self.messages: List[str] = []

    def log_message(self, message: str) -> None:
        self.messages.append(message)
