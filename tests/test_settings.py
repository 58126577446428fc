import json
import logging

import pytest

from casetranslate.errors import SettingsPersistenceError
from casetranslate.settings import Settings, SettingsStore


def test_missing_file_yields_defaults(tmp_path):
    settings = SettingsStore(tmp_path / "settings.json").load()
    assert settings == Settings(
        api_key="",
        default_language="english",
        custom_metadata_field_name="Detected Languages",
        top_level_tag="Detected Languages",
    )


def test_reads_existing_settings_file_keys(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "googleTranslateApiKey": "abc",
                "defaultLanguage": "french",
                "customMetadataFieldName": "Language",
                "topLevelTag": "Languages",
            }
        ),
        encoding="utf-8",
    )
    settings = SettingsStore(path).load()
    assert settings.api_key == "abc"
    assert settings.default_language == "french"
    assert settings.custom_metadata_field_name == "Language"
    assert settings.top_level_tag == "Languages"


def test_missing_and_invalid_fields_fall_back_individually(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps({"googleTranslateApiKey": "abc", "topLevelTag": 5, "extra": True}),
        encoding="utf-8",
    )
    settings = SettingsStore(path).load()
    assert settings.api_key == "abc"
    assert settings.top_level_tag == "Detected Languages"
    assert settings.default_language == "english"


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_unusable_file_falls_back_to_defaults(tmp_path, caplog, content):
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="casetranslate.settings"):
        settings = SettingsStore(path).load()
    assert settings == Settings()
    assert "Falling back to default settings" in caplog.text


def test_save_overwrites_in_place(tmp_path):
    path = tmp_path / "nested" / "settings.json"
    store = SettingsStore(path)
    store.save(Settings(api_key="first"))
    store.save(Settings(api_key="second", top_level_tag="Langs"))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {
        "googleTranslateApiKey": "second",
        "defaultLanguage": "english",
        "customMetadataFieldName": "Detected Languages",
        "topLevelTag": "Langs",
    }
    assert store.load().api_key == "second"


def test_save_failure_raises_persistence_error(tmp_path):
    store = SettingsStore(tmp_path)
    with pytest.raises(SettingsPersistenceError):
        store.save(Settings())


class TestUpdatedFrom:
    def _update(self, settings, **overrides):
        options = dict(
            api_key=" new-key ",
            target_language="german",
            save_default_language=False,
            apply_metadata=False,
            metadata_field_name="Field",
            tag_items=False,
            top_level_tag="Tag",
        )
        options.update(overrides)
        return settings.updated_from(**options)

    def test_api_key_is_always_kept(self):
        updated = self._update(Settings(api_key="old"))
        assert updated.api_key == "new-key"
        assert updated.default_language == "english"
        assert updated.custom_metadata_field_name == "Detected Languages"
        assert updated.top_level_tag == "Detected Languages"

    def test_default_language_only_when_saving_default(self):
        updated = self._update(Settings(), save_default_language=True)
        assert updated.default_language == "german"

    def test_field_name_and_tag_follow_their_options(self):
        updated = self._update(Settings(), apply_metadata=True, tag_items=True)
        assert updated.custom_metadata_field_name == "Field"
        assert updated.top_level_tag == "Tag"
