"""Predicates deciding whether model-produced text may be shown to a user."""

from __future__ import annotations

import unicodedata
from typing import Any, Mapping

from .vocabulary import SCRIPT_RANGES, ScriptRanges

NAME_MAX_CHARS = 40
NAME_MAX_WORDS = 3

_FORBIDDEN_CHARS = frozenset("{}<>[]`$\\")
_NAME_PUNCTUATION = frozenset("'’- ")


def _is_control(ch: str) -> bool:
    code = ord(ch)
    return code <= 31 or code == 127


def is_clean_text(value: Any, max_length: int) -> bool:
    """Return True when ``value`` is a short, printable, markup-free string.

    前後の空白を除いた長さで判定する。制御文字（0–31, 127）と
    `{ } < > [ ] ` $ \\` を含む文字列は拒否する。
    """

    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if not trimmed or len(trimmed) > max_length:
        return False
    for ch in trimmed:
        if _is_control(ch) or ch in _FORBIDDEN_CHARS:
            return False
    return True


def _is_mark(ch: str) -> bool:
    return unicodedata.category(ch).startswith("M")


def _is_letter(ch: str) -> bool:
    return unicodedata.category(ch).startswith("L")


def _is_latin_letter(ch: str) -> bool:
    return _is_letter(ch) and unicodedata.name(ch, "").startswith("LATIN ")


def is_latin_only(value: Any) -> bool:
    """Latin letters, combining marks, apostrophes, hyphens and spaces only."""

    if not isinstance(value, str) or not value:
        return False
    return all(
        ch in _NAME_PUNCTUATION or _is_mark(ch) or _is_latin_letter(ch) for ch in value
    )


def looks_like_name(value: Any) -> bool:
    """Name-shape gate: clean, at most three words, letters of any script.

    文字体系は問わない（キリル文字やアラビア文字の名前も通す）。
    """

    if not is_clean_text(value, NAME_MAX_CHARS):
        return False
    text = value.strip()
    if len(text.split()) > NAME_MAX_WORDS:
        return False
    return all(ch in _NAME_PUNCTUATION or _is_mark(ch) or _is_letter(ch) for ch in text)


def contains_script(
    text: Any,
    script_id: str,
    scripts: Mapping[str, ScriptRanges] = SCRIPT_RANGES,
) -> bool:
    """Return True if any character of ``text`` falls in the named script blocks."""

    ranges = scripts.get(script_id)
    if not ranges or not isinstance(text, str):
        return False
    for ch in text:
        code = ord(ch)
        for low, high in ranges:
            if low <= code <= high:
                return True
    return False


__all__ = [
    "NAME_MAX_CHARS",
    "contains_script",
    "is_clean_text",
    "is_latin_only",
    "looks_like_name",
]
