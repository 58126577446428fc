"""Language code and display name catalog."""

from __future__ import annotations

from typing import Iterator, Mapping

# Google Translate v2 languages, code -> lower-case name.
GOOGLE_LANGUAGES: dict[str, str] = {
    "af": "afrikaans",
    "sq": "albanian",
    "am": "amharic",
    "ar": "arabic",
    "hy": "armenian",
    "az": "azerbaijani",
    "eu": "basque",
    "be": "belarusian",
    "bn": "bengali",
    "bs": "bosnian",
    "bg": "bulgarian",
    "my": "burmese",
    "ca": "catalan",
    "ceb": "cebuano",
    "ny": "chichewa",
    "zh": "chinese",
    "zh-CN": "chinese_simplified",
    "zh-TW": "chinese_traditional",
    "co": "corsican",
    "hr": "croatian",
    "cs": "czech",
    "da": "danish",
    "nl": "dutch",
    "en": "english",
    "eo": "esperanto",
    "et": "estonian",
    "tl": "filipino",
    "fi": "finnish",
    "fr": "french",
    "fy": "frisian",
    "gl": "galician",
    "ka": "georgian",
    "de": "german",
    "el": "greek",
    "gu": "gujarati",
    "ht": "haitian_creole",
    "ha": "hausa",
    "haw": "hawaiian",
    "iw": "hebrew",
    "hi": "hindi",
    "hmn": "hmong",
    "hu": "hungarian",
    "is": "icelandic",
    "ig": "igbo",
    "id": "indonesian",
    "ga": "irish",
    "it": "italian",
    "ja": "japanese",
    "jw": "javanese",
    "kn": "kannada",
    "kk": "kazakh",
    "km": "khmer",
    "ko": "korean",
    "ku": "kurdish",
    "ky": "kyrgyz",
    "lo": "lao",
    "la": "latin",
    "lv": "latvian",
    "lt": "lithuanian",
    "lb": "luxembourgish",
    "mk": "macedonian",
    "mg": "malagasy",
    "ms": "malay",
    "ml": "malayalam",
    "mt": "maltese",
    "mi": "maori",
    "mr": "marathi",
    "mn": "mongolian",
    "ne": "nepali",
    "no": "norwegian",
    "ps": "pashto",
    "fa": "persian",
    "pl": "polish",
    "pt": "portuguese",
    "pa": "punjabi",
    "ro": "romanian",
    "ru": "russian",
    "sm": "samoan",
    "gd": "scots_gaelic",
    "sr": "serbian",
    "st": "sesotho",
    "sn": "shona",
    "sd": "sindhi",
    "si": "sinhala",
    "sk": "slovak",
    "sl": "slovenian",
    "so": "somali",
    "es": "spanish",
    "su": "sundanese",
    "sw": "swahili",
    "sv": "swedish",
    "tg": "tajik",
    "ta": "tamil",
    "te": "telugu",
    "th": "thai",
    "tr": "turkish",
    "uk": "ukrainian",
    "ur": "urdu",
    "uz": "uzbek",
    "vi": "vietnamese",
    "cy": "welsh",
    "xh": "xhosa",
    "yi": "yiddish",
    "yo": "yoruba",
    "zu": "zulu",
}


class LanguageCatalog(Mapping[str, str]):
    """Read-only mapping of provider language codes to names."""

    def __init__(self, languages: Mapping[str, str]) -> None:
        self._languages = {
            str(code): str(name).strip().lower()
            for code, name in languages.items()
            if code and name
        }
        self._codes_by_name = {
            name: code for code, name in self._languages.items()
        }

    def __getitem__(self, code: str) -> str:
        return self._languages[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._languages)

    def __len__(self) -> int:
        return len(self._languages)

    def display_name(self, code: str) -> str:
        """Capitalised name for a code, or the code itself when unknown."""

        name = self._languages.get(code)
        if name is None:
            return code
        return name.capitalize()

    def detection_label(self, code: str) -> str:
        return f"{self.display_name(code)} ({code})"

    def code_for(self, name: str) -> str | None:
        """Resolve a language name (or a code) to its provider code."""

        if not name:
            return None
        candidate = name.strip()
        code = self._codes_by_name.get(candidate.lower())
        if code is not None:
            return code
        for known in self._languages:
            if known.lower() == candidate.lower():
                return known
        return None


def default_catalog() -> LanguageCatalog:
    return LanguageCatalog(GOOGLE_LANGUAGES)
