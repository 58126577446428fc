"""Core data structures for casetranslate."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Operation(Enum):
    """Batch operations, keyed by their dialog label."""

    DETECT = ("detect", "Detect languages")
    TRANSLATE = ("translate", "Translate text")
    DETECT_AND_TRANSLATE = ("detect-translate", "Detect languages and translate text")
    CLEAR = ("clear", "Clear translations")

    def __init__(self, slug: str, label: str) -> None:
        self.slug = slug
        self.label = label

    @property
    def detects(self) -> bool:
        return self in (Operation.DETECT, Operation.DETECT_AND_TRANSLATE)

    @property
    def translates(self) -> bool:
        return self in (Operation.TRANSLATE, Operation.DETECT_AND_TRANSLATE)

    @classmethod
    def parse(cls, value: str) -> "Operation":
        normalized = value.strip().lower().replace("_", "-")
        for operation in cls:
            if normalized in {operation.slug, operation.label.lower()}:
                return operation
        raise ValueError(f"Unknown operation '{value}'.")


@dataclass(frozen=True)
class OperationRequest:
    """Options for one batch run."""

    operation: Operation
    target_language: str | None = None
    apply_metadata: bool = False
    tag_items: bool = False


@dataclass(frozen=True)
class OptionsEnabled:
    """Which option groups apply to an operation."""

    translation: bool
    detection: bool


_OPTIONS_ENABLED = {
    Operation.DETECT: OptionsEnabled(translation=False, detection=True),
    Operation.TRANSLATE: OptionsEnabled(translation=True, detection=False),
    Operation.DETECT_AND_TRANSLATE: OptionsEnabled(translation=True, detection=True),
    Operation.CLEAR: OptionsEnabled(translation=False, detection=False),
}


def options_enabled_for(operation: Operation) -> OptionsEnabled:
    return _OPTIONS_ENABLED[operation]


class ItemOutcome(Enum):
    """Result of processing a single item."""

    DETECTED = "detected"
    TRANSLATED = "translated"
    DETECTED_AND_TRANSLATED = "detected_and_translated"
    CLEARED = "cleared"
    SKIPPED = "skipped"
    FAILED = "failed"
