"""High-level orchestration of language detection and translation batches."""

from __future__ import annotations

import logging
import pathlib
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Sequence

from .annotation import compose_with_translation, extract_original, has_translation
from .casestore import CaseItem, CaseStore
from .errors import ErrorCategory, GatewayError, ValidationError
from .languages import LanguageCatalog
from .policy import ErrorPolicy
from .progress import ProgressReporter
from .providers import TranslationGateway
from .settings import Settings
from .structures import ItemOutcome, Operation, OperationRequest

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    """Report returned after a batch run."""

    case_path: pathlib.Path
    operation: Operation
    provider_name: str
    target_language: str | None
    total_items: int
    processed_items: int
    outcomes: Counter = field(default_factory=Counter)
    aborted: bool = False
    elapsed_seconds: float = 0.0
    error_messages: List[str] = field(default_factory=list)

    def count(self, outcome: ItemOutcome) -> int:
        return self.outcomes.get(outcome, 0)


class BatchRunner:
    """Applies one operation to each selected item inside a single write scope."""

    def __init__(
        self,
        *,
        case: CaseStore,
        items: Sequence[CaseItem],
        request: OperationRequest,
        settings: Settings,
        gateway: TranslationGateway,
        catalog: LanguageCatalog,
        progress: ProgressReporter,
        error_policy: ErrorPolicy,
    ) -> None:
        self.case = case
        self.items = list(items)
        self.request = request
        self.settings = settings
        self.gateway = gateway
        self.catalog = catalog
        self.progress = progress
        self.error_policy = error_policy

        self.target_code: str | None = None
        if request.operation.translates:
            self.target_code = catalog.code_for(request.target_language or "")
            if self.target_code is None:
                raise ValidationError(
                    f"Unknown translation language '{request.target_language}'."
                )

    def run(self) -> BatchSummary:
        start_time = time.time()
        operation = self.request.operation
        total = len(self.items)
        summary = BatchSummary(
            case_path=self.case.path,
            operation=operation,
            provider_name=self.gateway.name,
            target_language=self.request.target_language,
            total_items=total,
            processed_items=0,
        )

        self.progress.set_title(operation.label)
        self.progress.set_main_progress(0, total)

        try:
            with self.case.with_write_access():
                for index, item in enumerate(self.items, start=1):
                    if self.progress.abort_requested():
                        summary.aborted = True
                        break

                    self.progress.set_main_progress(index, total)
                    self.progress.set_sub_status(f"Item {index}/{total}")

                    outcome = self._process_item(item, index, total)
                    summary.outcomes[outcome] += 1
                    summary.processed_items = index
        finally:
            summary.elapsed_seconds = time.time() - start_time
            summary.error_messages = [record.message for record in self.error_policy.records]

        if summary.aborted:
            self.progress.log_message("Aborting...")
        self.progress.log_message("Completed!")
        return summary

    def _process_item(self, item: CaseItem, index: int, total: int) -> ItemOutcome:
        operation = self.request.operation
        position = f"({index}/{total}): [Item GUID: {item.guid}]"
        try:
            if operation is Operation.CLEAR:
                self.progress.log_message(f"Clearing translation {position}")
                return ItemOutcome.CLEARED if self.clear(item) else ItemOutcome.SKIPPED

            detected = translated = False
            if operation.detects:
                self.progress.set_main_status("Detecting Languages")
                self.progress.log_message(f"Detecting language {position}")
                detected = self.detect(item)
            if operation.translates:
                self.progress.set_main_status("Translating")
                self.progress.log_message(f"Translating text {position}")
                translated = self.translate(item)
        except GatewayError as exc:
            logger.debug("Gateway failure for item %s", item.guid, exc_info=True)
            self.error_policy.handle_error(
                ErrorCategory.GATEWAY,
                f"Could not process item {item.guid}: {exc}",
            )
            return ItemOutcome.FAILED

        self.error_policy.record_success()
        if detected and translated:
            return ItemOutcome.DETECTED_AND_TRANSLATED
        if detected:
            return ItemOutcome.DETECTED
        if translated:
            return ItemOutcome.TRANSLATED
        return ItemOutcome.SKIPPED

    def detect(self, item: CaseItem) -> bool:
        """Record the item's language as metadata and/or a tag."""

        text = extract_original(item.text)
        if not text.strip():
            return False
        code = self.gateway.detect_language(text)
        if code is None:
            return False

        label = self.catalog.detection_label(code)
        if self.request.apply_metadata:
            item.custom_metadata.put_text(self.settings.custom_metadata_field_name, label)
        if self.request.tag_items:
            item.add_tag(f"{self.settings.top_level_tag}|{label}")
        return True

    def translate(self, item: CaseItem) -> bool:
        """Replace any previous translation block with a fresh one."""

        original = extract_original(item.text)
        if not original.strip():
            return False
        translated = self.gateway.translate(original, self.target_code or "")
        if not translated:
            return False

        new_text = compose_with_translation(
            original, self.request.target_language or "", translated
        )
        with item.modify() as modifier:
            modifier.replace_text(new_text)
        return True

    def clear(self, item: CaseItem) -> bool:
        """Strip the translation block, if any."""

        text = item.text
        if not has_translation(text):
            return False
        with item.modify() as modifier:
            modifier.replace_text(extract_original(text))
        return True
