"""Persisted operator defaults (API key, language, metadata field, tag)."""

from __future__ import annotations

import json
import logging
import pathlib
from dataclasses import dataclass, replace
from typing import Any, Dict

from .errors import ConfigError, SettingsPersistenceError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = pathlib.Path(__file__).resolve().parent / "settings.json"

# JSON keys kept stable for existing settings files.
_FIELD_KEYS: Dict[str, str] = {
    "api_key": "googleTranslateApiKey",
    "default_language": "defaultLanguage",
    "custom_metadata_field_name": "customMetadataFieldName",
    "top_level_tag": "topLevelTag",
}


@dataclass(frozen=True)
class Settings:
    """Operator defaults carried from one batch run to the next."""

    api_key: str = ""
    default_language: str = "english"
    custom_metadata_field_name: str = "Detected Languages"
    top_level_tag: str = "Detected Languages"

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "Settings":
        """Build settings from a parsed JSON record.

        Missing or non-string fields keep their default value.
        """

        defaults = cls()
        values: Dict[str, str] = {}
        for attribute, key in _FIELD_KEYS.items():
            value = data.get(key)
            if isinstance(value, str):
                values[attribute] = value
            else:
                if value is not None:
                    logger.warning(
                        "Ignoring settings field %r: expected a string, got %s.",
                        key,
                        type(value).__name__,
                    )
                values[attribute] = getattr(defaults, attribute)
        return cls(**values)

    def to_mapping(self) -> Dict[str, str]:
        return {key: getattr(self, attribute) for attribute, key in _FIELD_KEYS.items()}

    def updated_from(
        self,
        *,
        api_key: str,
        target_language: str | None,
        save_default_language: bool,
        apply_metadata: bool,
        metadata_field_name: str | None,
        tag_items: bool,
        top_level_tag: str | None,
    ) -> "Settings":
        """Return settings updated with the choices of a validated run.

        The API key is always kept; the default language only when the
        operator asked for it; the field name and top-level tag whenever the
        corresponding option was used.
        """

        changes: Dict[str, str] = {"api_key": api_key.strip()}
        if save_default_language and target_language:
            changes["default_language"] = target_language
        if apply_metadata and metadata_field_name:
            changes["custom_metadata_field_name"] = metadata_field_name.strip()
        if tag_items and top_level_tag:
            changes["top_level_tag"] = top_level_tag.strip()
        return replace(self, **changes)


class SettingsStore:
    """Loads and saves :class:`Settings` as a single JSON file."""

    def __init__(self, path: pathlib.Path | None = None) -> None:
        self.path = path or DEFAULT_SETTINGS_PATH

    def load(self) -> Settings:
        """Return stored settings, or defaults when the file is absent or unusable."""

        if not self.path.exists():
            return Settings()
        try:
            return Settings.from_mapping(self._read())
        except ConfigError as exc:
            logger.warning("%s Falling back to default settings.", exc)
            return Settings()

    def save(self, settings: Settings) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            serialized = json.dumps(settings.to_mapping(), indent=2)
            self.path.write_text(serialized + "\n", encoding="utf-8")
        except OSError as exc:
            raise SettingsPersistenceError(
                f"Settings could not be saved to {self.path}: {exc}"
            ) from exc

    def _read(self) -> Dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Settings file {self.path} could not be read: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(
                f"Invalid settings file {self.path}: expected an object at the root."
            )
        return data
