"""Per-item repair and validation of raw name candidates.

モデル出力の各要素を文字列へ強制変換し、name/nativeName の取り違えを
補正したうえで、表示に安全なレコードだけを順序を保って残す。
同じ入力には常に同じ出力を返す純粋関数として実装する。
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from .models.name import NameRecord
from .sanitize import is_clean_text, is_latin_only, looks_like_name
from .vocabulary import ANY_ORIGIN, DEFAULT_ORIGIN, DEFAULT_VOCABULARY, Vocabulary

MEANING_MAX_CHARS = 180
ORIGIN_MAX_CHARS = 60


def _coerce_text(value: Any) -> str:
    """Coerce a possibly wrong-typed JSON field into a trimmed string."""

    if value is None or isinstance(value, (dict, list, tuple, set)):
        return ""
    if isinstance(value, str):
        return value.strip()
    return str(value).strip()


def _field(item: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = item.get(key)
        if value is not None:
            return _coerce_text(value)
    return ""


def _fallback_origin(origin: str | None) -> str:
    text = _coerce_text(origin)
    if not text or text.lower() == ANY_ORIGIN:
        return DEFAULT_ORIGIN
    return text


def _as_mapping(raw: Any) -> Mapping[str, Any]:
    """dict 以外に、正規化済みの `NameRecord` も入力として受け付ける。"""

    if isinstance(raw, Mapping):
        return raw
    if isinstance(raw, BaseModel):
        return raw.model_dump(by_alias=True)
    return {}


def _repair_transposition(name: str, native_name: str) -> tuple[str, str]:
    """Swap or move native-script text out of the display name field."""

    if not name or is_latin_only(name):
        return name, native_name
    if is_latin_only(native_name):
        # ネイティブ表記と翻字が逆の欄に入っている
        return native_name, name
    if not native_name:
        # 翻字なしでネイティブ表記だけが返ってきた
        return "", name
    return name, native_name


def normalize_and_validate_items(
    raw_items: Iterable[Any] | None,
    origin: str | None,
    count: int,
    exclude_names: Iterable[str] | None = (),
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> list[NameRecord]:
    """Turn raw model items into at most ``count`` validated `NameRecord` values.

    - 不正な要素は例外にせず読み飛ばす
    - name は大文字小文字を無視して一意、かつ ``exclude_names`` と重複しない
    - ``count`` 件に達したら残りの要素は評価しない
    """

    if count <= 0 or raw_items is None:
        return []
    excluded = {
        entry.strip().lower()
        for entry in (exclude_names or ())
        if isinstance(entry, str) and entry.strip()
    }
    default_origin = _fallback_origin(origin)

    seen: set[str] = set()
    records: list[NameRecord] = []
    for raw in raw_items:
        item = _as_mapping(raw)
        name = _field(item, "name")
        native_name = _field(item, "nativeName", "native_name")
        meaning = _field(item, "meaning")
        item_origin = _field(item, "origin") or default_origin

        name, native_name = _repair_transposition(name, native_name)

        if not name or not looks_like_name(name):
            continue
        if not is_clean_text(meaning, MEANING_MAX_CHARS):
            continue
        if not is_clean_text(item_origin, ORIGIN_MAX_CHARS):
            continue
        key = name.lower()
        if key in vocabulary.disallowed_tokens or key in seen or key in excluded:
            continue

        seen.add(key)
        keep_native = bool(native_name) and looks_like_name(native_name) and not is_latin_only(native_name)
        records.append(
            NameRecord(
                name=name,
                native_name=native_name if keep_native else None,
                meaning=meaning,
                origin=item_origin,
            )
        )
        if len(records) >= count:
            break
    return records


__all__ = [
    "MEANING_MAX_CHARS",
    "ORIGIN_MAX_CHARS",
    "normalize_and_validate_items",
]
