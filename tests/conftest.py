"""Shared fixtures for the casetranslate test suite."""

from __future__ import annotations

import json
import pathlib
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from casetranslate.casestore import CaseStore
from casetranslate.errors import GatewayError
from casetranslate.languages import default_catalog
from casetranslate.policy import ErrorPolicy
from casetranslate.progress import RecordingProgress
from casetranslate.providers import TranslationGateway
from casetranslate.settings import Settings


class FakeGateway(TranslationGateway):
    """Gateway returning canned answers and recording every provider call."""

    name = "fake"

    def __init__(
        self,
        *,
        detections: Dict[str, str] | None = None,
        translations: Dict[str, str] | None = None,
        failures: set[str] | None = None,
    ) -> None:
        super().__init__()
        self.detections = detections or {}
        self.translations = translations or {}
        self.failures = failures or set()
        self.calls: List[tuple[str, str, str | None]] = []

    def _detect(self, text: str) -> str | None:
        self.calls.append(("detect", text, None))
        if text in self.failures:
            raise GatewayError("quota exceeded")
        return self.detections.get(text, "und")

    def _translate(self, text: str, target_code: str) -> str:
        self.calls.append(("translate", text, target_code))
        if text in self.failures:
            raise GatewayError("quota exceeded")
        return self.translations.get(text, "")


def write_case(path: pathlib.Path, items: List[Dict[str, Any]]) -> pathlib.Path:
    path.write_text(json.dumps({"items": items}), encoding="utf-8")
    return path


@pytest.fixture
def make_case(tmp_path):
    """Write a case file from ``(guid, text)`` pairs and open it."""

    def _make(*entries: tuple[str, str]) -> CaseStore:
        items = [{"guid": guid, "name": f"{guid}.txt", "text": text} for guid, text in entries]
        return CaseStore.open(write_case(tmp_path / "case.json", items))

    return _make


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def settings():
    return Settings(api_key="test-key")


@pytest.fixture
def progress():
    return RecordingProgress()


@pytest.fixture
def policy():
    return ErrorPolicy(interactive=False, notify=lambda message: None)


@pytest.fixture
def fake_config():
    return SimpleNamespace(
        CASETRANSLATE_PROVIDER="google",
        GOOGLE_TRANSLATE_API_KEY=None,
        OPENAI_API_KEY=None,
        OPENAI_MODEL=None,
        CASETRANSLATE_SETTINGS_PATH=None,
        CASETRANSLATE_LOG_LEVEL="WARNING",
        CASETRANSLATE_PROVIDER_DEBUG=False,
    )


@pytest.fixture
def make_gateway():
    return FakeGateway
