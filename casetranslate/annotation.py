"""Embedding and stripping translation blocks in item text.

A translated item carries a single trailing block::

    <original text>
    ----------Translation to <language>----------
    <translated text>

Extraction only requires a newline, nine or more dashes and ``Tran`` so that
blocks written by older runs with slightly different rulers still match.
"""

from __future__ import annotations

import re

BLOCK_RULER = "-" * 10

TRANSLATION_MARKER_PATTERN = re.compile(r"(^.*?)\n-{9,}Tran", re.DOTALL)


def _match_marker(text: str) -> re.Match[str] | None:
    return TRANSLATION_MARKER_PATTERN.match(text)


def has_translation(text: str) -> bool:
    """Return True when the text carries a translation block."""

    return _match_marker(text) is not None


def extract_original(text: str) -> str:
    """Return the portion of ``text`` preceding the translation block.

    The whole string is returned when no block marker is present.
    """

    match = _match_marker(text)
    if match is None:
        return text
    return match.group(1)


def translation_header(target_name: str) -> str:
    return f"{BLOCK_RULER}Translation to {target_name}{BLOCK_RULER}"


def compose_with_translation(original: str, target_name: str, translated: str) -> str:
    """Append a labelled translation block to ``original``."""

    return f"{original}\n{translation_header(target_name)}\n{translated}"
