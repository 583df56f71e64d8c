"""Fixed vocabularies used by request validation, prompts and the normalizer.

固定語彙（性別/スタイル/文化圏/禁止トークン/文字体系の範囲表）を
不変データとしてまとめる。テストでは `Vocabulary` を差し替えて使う。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

ScriptRanges = tuple[tuple[int, int], ...]

ANY_ORIGIN = "any"
DEFAULT_ORIGIN = "Various"

GENDERS: tuple[str, ...] = ("boy", "girl", "neutral", "surprise")
STYLES: tuple[str, ...] = ("classic", "modern", "unique", "nature-inspired", "vintage")
ORIGINS: tuple[str, ...] = (
    "African",
    "Arabic",
    "English",
    "French",
    "Greek",
    "Hebrew",
    "Indian",
    "Irish",
    "Italian",
    "Japanese",
    "Russian",
    "Scandinavian",
    "Spanish",
)

# 書式崩れ時にモデルが name 欄へ出しがちなメタ語
DISALLOWED_NAME_TOKENS: frozenset[str] = frozenset(
    {
        "think",
        "okay",
        "ok",
        "example",
        "name",
        "names",
        "here",
        "first",
        "next",
        "then",
        "sure",
        "json",
        "meaning",
        "origin",
    }
)

SCRIPT_RANGES: Mapping[str, ScriptRanges] = MappingProxyType(
    {
        "arabic": (
            (0x0600, 0x06FF),
            (0x0750, 0x077F),
            (0x08A0, 0x08FF),
            (0xFB50, 0xFDFF),
            (0xFE70, 0xFEFF),
        ),
        "hebrew": ((0x0590, 0x05FF), (0xFB1D, 0xFB4F)),
        "greek": ((0x0370, 0x03FF), (0x1F00, 0x1FFF)),
        "cyrillic": ((0x0400, 0x04FF), (0x0500, 0x052F)),
        "japanese": ((0x3040, 0x309F), (0x30A0, 0x30FF), (0x4E00, 0x9FFF)),
    }
)

SCRIPT_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "arabic": "Arabic",
        "hebrew": "Hebrew",
        "greek": "Greek",
        "cyrillic": "Cyrillic",
        "japanese": "Japanese (kana or kanji)",
    }
)

ORIGIN_SCRIPTS: Mapping[str, str] = MappingProxyType(
    {
        "Arabic": "arabic",
        "Hebrew": "hebrew",
        "Greek": "greek",
        "Russian": "cyrillic",
        "Japanese": "japanese",
    }
)


@dataclass(frozen=True)
class Vocabulary:
    """Immutable bundle of the fixed vocabularies."""

    genders: tuple[str, ...] = GENDERS
    styles: tuple[str, ...] = STYLES
    origins: tuple[str, ...] = ORIGINS
    disallowed_tokens: frozenset[str] = DISALLOWED_NAME_TOKENS
    scripts: Mapping[str, ScriptRanges] = field(default_factory=lambda: SCRIPT_RANGES)
    script_labels: Mapping[str, str] = field(default_factory=lambda: SCRIPT_LABELS)
    origin_scripts: Mapping[str, str] = field(default_factory=lambda: ORIGIN_SCRIPTS)

    def accepts_origin(self, origin: str) -> bool:
        return origin == ANY_ORIGIN or origin in self.origins

    def script_for_origin(self, origin: str) -> str | None:
        """文化圏に対応する固有文字体系の ID を返す。なければ None。"""

        return self.origin_scripts.get(origin)


DEFAULT_VOCABULARY = Vocabulary()


__all__ = [
    "ANY_ORIGIN",
    "DEFAULT_ORIGIN",
    "DEFAULT_VOCABULARY",
    "DISALLOWED_NAME_TOKENS",
    "GENDERS",
    "ORIGINS",
    "ORIGIN_SCRIPTS",
    "SCRIPT_LABELS",
    "SCRIPT_RANGES",
    "STYLES",
    "Vocabulary",
]
