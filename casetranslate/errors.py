"""Error definitions and policy helpers for casetranslate."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categorises runtime errors to apply policy thresholds."""

    GATEWAY = auto()


class CaseTranslateError(Exception):
    """Base exception for all custom errors."""


class AbortRequested(CaseTranslateError):
    """Raised when the operator elects to abort processing."""


class NonInteractiveAbort(CaseTranslateError):
    """Raised when non-interactive policy dictates termination."""


class ConfigError(CaseTranslateError):
    """Raised when a settings file is missing fields or cannot be parsed."""


class ValidationError(CaseTranslateError):
    """Raised when a required option is empty before a batch starts."""


class ItemStoreError(CaseTranslateError):
    """Raised when the case file cannot be read, locked or mutated."""


class SettingsPersistenceError(CaseTranslateError):
    """Raised when settings could not be written back to disk."""


class GatewayConfigurationError(CaseTranslateError):
    """Raised when the translation provider is misconfigured."""


class GatewayError(CaseTranslateError):
    """Raised when a detection or translation call fails."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str
    details: Optional[str] = None


class ErrorTracker:
    """Tracks consecutive and aggregate errors to satisfy policy rules."""

    CONSECUTIVE_LIMIT = 3
    TOTAL_LIMIT = 10

    def __init__(self) -> None:
        self.last_category: Optional[ErrorCategory] = None
        self.consecutive: int = 0
        self.total: int = 0

    def register(self, category: ErrorCategory) -> tuple[int, int, bool]:
        """Register a new error and return counters."""

        if self.last_category == category:
            self.consecutive += 1
        else:
            self.last_category = category
            self.consecutive = 1

        self.total += 1

        threshold_reached = (
            self.consecutive >= self.CONSECUTIVE_LIMIT
            or self.total >= self.TOTAL_LIMIT
        )

        return self.consecutive, self.total, threshold_reached

    def reset_consecutive(self) -> None:
        """Reset the consecutive counter after successful work."""

        self.consecutive = 0
        self.last_category = None
