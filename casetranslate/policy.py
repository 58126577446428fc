"""Error handling policy for batch runs."""

from __future__ import annotations

from typing import Callable, List, Optional

from .errors import (
    AbortRequested,
    ErrorCategory,
    ErrorRecord,
    ErrorTracker,
    NonInteractiveAbort,
)


class ErrorPolicy:
    """Decides whether a failed item stops the batch.

    Failures are isolated to their item until the tracker's thresholds are
    reached; then the operator chooses (interactive) or the batch stops
    (non-interactive). With ``stop_on_error`` the first failure stops the
    batch. Nothing is retried.
    """

    def __init__(
        self,
        *,
        interactive: bool,
        stop_on_error: bool = False,
        notify: Callable[[str], None] = print,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self.interactive = interactive
        self.stop_on_error = stop_on_error
        self.notify = notify
        self.prompt = prompt
        self.records: List[ErrorRecord] = []
        self.tracker = ErrorTracker()

    def record_success(self) -> None:
        """Reset consecutive counters after successful work."""

        self.tracker.reset_consecutive()

    def handle_error(
        self,
        category: ErrorCategory,
        message: str,
        details: Optional[str] = None,
    ) -> None:
        """Record an error; return to continue or raise to stop the batch."""

        self.records.append(ErrorRecord(category=category, message=message, details=details))
        consecutive, total, threshold = self.tracker.register(category)

        self.notify(message)

        if self.stop_on_error:
            raise NonInteractiveAbort("Stopping the batch after the first failure.")

        if not threshold:
            return

        question = (
            f"Repeated errors detected ({consecutive} in a row). Continue or abort?"
            if consecutive >= self.tracker.CONSECUTIVE_LIMIT
            else f"{total} errors encountered. Continue or abort?"
        )

        if not self.interactive:
            raise NonInteractiveAbort(
                "Error threshold exceeded in non-interactive mode. Stopping safely."
            )

        while True:
            response = self.prompt(f"{question} ").strip().lower()
            if response in {"continue", "c"}:
                self.tracker.reset_consecutive()
                return
            if response in {"abort", "a"}:
                raise AbortRequested("Abort requested by user.")
            self.notify("Please respond with Continue or Abort (c/a).")
