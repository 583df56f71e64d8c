"""Recover name candidates from raw model completions."""

from __future__ import annotations

import json
import re
from typing import AbstractSet, Any

from .vocabulary import DISALLOWED_NAME_TOKENS

FALLBACK_MEANING = "A beautiful name"
FALLBACK_ORIGIN = "Various"

_WORD = r"[^\W\d_](?:[^\W\d_]|['’-](?=[^\W\d_]))*"
# 箇条書き記号・番号・太字マーカーに続く先頭語（最大2語）を名前候補とみなす
_LEADING_NAME_RE = re.compile(
    rf"^\s*(?:[-*•·]+\s*|\d{{1,2}}[.):]\s*)?(?:\*\*|__)?\s*(?P<name>{_WORD}(?: {_WORD})?)"
)
_MEANING_RE = re.compile(
    r"\b(?:meaning|means)\b\s*(?:is\s+)?[:=–—-]?\s*[\"“']?(?P<value>[^,;|\"”(){}\[\]]+)",
    re.IGNORECASE,
)
_ORIGIN_RE = re.compile(
    r"\borigin\b\s*(?:is\s+)?[:=–—-]?\s*(?P<value>[^,;|.()\"”{}\[\]]+)",
    re.IGNORECASE,
)
_ORIGIN_WORD_RE = re.compile(r"\borigin\b", re.IGNORECASE)


def extract_json_array(text: Any) -> list[Any] | None:
    """Return the JSON array embedded in ``text`` or None.

    1. 全文を JSON として解釈し、配列ならそのまま返す。
    2. 失敗したら最初の `[` から最後の `]` までを切り出して再解釈する。
    3. どちらでも配列が得られなければ None（オブジェクトやスカラーも失敗扱い）。
    """

    if not isinstance(text, str) or not text.strip():
        return None
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        parsed = None
    if isinstance(parsed, list):
        return parsed

    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None
    try:
        parsed = json.loads(text[start : end + 1])
    except (ValueError, RecursionError):
        # 深くネストした括弧は RecursionError になる
        return None
    return parsed if isinstance(parsed, list) else None


def _leading_name(line: str) -> str | None:
    match = _LEADING_NAME_RE.match(line)
    if not match:
        return None
    words = match.group("name").split(" ")
    if not words[0][:1].isupper():
        return None
    if len(words) > 1 and not words[1][:1].isupper():
        words = words[:1]
    return " ".join(words)


def _meaning_of(line: str) -> str | None:
    match = _MEANING_RE.search(line)
    if not match:
        return None
    # 同じ行に origin が続く場合はその手前で切る
    value = _ORIGIN_WORD_RE.split(match.group("value"), maxsplit=1)[0]
    value = value.strip().rstrip(".").strip(" -–—:")
    return value or None


def _origin_of(line: str) -> str | None:
    match = _ORIGIN_RE.search(line)
    if not match:
        return None
    value = match.group("value").strip().strip(" -–—:")
    return value or None


def parse_fallback_text(
    text: Any,
    count: int,
    disallowed_tokens: AbstractSet[str] = DISALLOWED_NAME_TOKENS,
) -> list[dict[str, str]]:
    """Scan free-text lines for name tokens when no JSON array is recoverable.

    出力は未検証の候補であり、必ず正規化処理を通してから利用する。
    "Here are three names:" のような前置き行は件数に数えない。
    """

    if not isinstance(text, str) or count <= 0:
        return []
    candidates: list[dict[str, str]] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        name = _leading_name(line)
        if name is None:
            continue
        if name.split(" ")[0].lower() in disallowed_tokens:
            continue
        candidates.append(
            {
                "name": name,
                "meaning": _meaning_of(line) or FALLBACK_MEANING,
                "origin": _origin_of(line) or FALLBACK_ORIGIN,
            }
        )
        if len(candidates) >= count:
            break
    return candidates


__all__ = [
    "FALLBACK_MEANING",
    "FALLBACK_ORIGIN",
    "extract_json_array",
    "parse_fallback_text",
]
