import pytest

from casetranslate.configuration import (
    _format_validation_errors,
    canonical_provider_name,
    normalise_provider_name,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("google", "google"),
        ("Google-Translate", "google"),
        ("OpenAI", "openai"),
        ("legacy", "legacy_openai"),
        ("azure-open-ai", "azure_openai"),
        ("mock", "echo"),
        ("babelfish", None),
    ],
)
def test_canonical_provider_name(value, expected):
    assert canonical_provider_name(value) == expected


def test_normalise_defaults_to_google():
    assert normalise_provider_name(None) == "google"
    assert normalise_provider_name("babelfish") == "google"
    assert normalise_provider_name(" echo ") == "echo"


def test_validation_errors_are_listed_with_their_source():
    message = _format_validation_errors(
        [
            {"path": ["CASETRANSLATE_LOG_LEVEL"], "message": "Invalid value", "source": "env:.env"},
            {"path": [], "msg": "Missing field"},
        ]
    )
    assert message.splitlines() == [
        "Configuration validation errors detected:",
        "- CASETRANSLATE_LOG_LEVEL: Invalid value (source: env:.env)",
        "- Missing field",
    ]
