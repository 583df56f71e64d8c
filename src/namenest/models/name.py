from __future__ import annotations

import math
from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError
from ..vocabulary import ANY_ORIGIN, DEFAULT_VOCABULARY, Vocabulary

MIN_COUNT = 1
MAX_COUNT = 10
DEFAULT_COUNT = 6
MAX_EXCLUDE = 50


class Gender(str, Enum):
    boy = "boy"
    girl = "girl"
    neutral = "neutral"
    surprise = "surprise"


class Style(str, Enum):
    classic = "classic"
    modern = "modern"
    unique = "unique"
    nature_inspired = "nature-inspired"
    vintage = "vintage"


def _vocabulary_from(info: ValidationInfo) -> Vocabulary:
    context = info.context if isinstance(info.context, Mapping) else {}
    vocabulary = context.get("vocabulary")
    return vocabulary if isinstance(vocabulary, Vocabulary) else DEFAULT_VOCABULARY


class NameRequest(BaseModel):
    """Request model for one name generation call.

    性別・スタイル・文化圏・件数・除外リストを受け取る。件数は範囲外なら
    1..10 に丸め、数値でない値は拒否する。
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "gender": "girl",
                    "style": "classic",
                    "origin": "Russian",
                    "count": 6,
                    "exclude": ["Olga"],
                }
            ]
        },
    )

    gender: Gender
    style: Style
    origin: str = Field(description="'any' または固定の文化圏リストのいずれか")
    count: int = Field(default=DEFAULT_COUNT, description="生成件数（1..10 に丸める）")
    exclude: tuple[str, ...] = Field(
        default=(),
        description="既に表示済みの名前（最大50件）",
    )

    @field_validator("origin", mode="before")
    @classmethod
    def _canonical_origin(cls, raw: object, info: ValidationInfo) -> str:
        if not isinstance(raw, str) or not raw.strip():
            raise ValueError("origin must be a non-empty string")
        wanted = raw.strip().lower()
        if wanted == ANY_ORIGIN:
            return ANY_ORIGIN
        for origin in _vocabulary_from(info).origins:
            if origin.lower() == wanted:
                return origin
        raise ValueError(f"unsupported origin: {raw.strip()[:40]}")

    @field_validator("gender", "style", mode="before")
    @classmethod
    def _lower_enum_value(cls, raw: object) -> object:
        return raw.strip().lower() if isinstance(raw, str) else raw

    @field_validator("count", mode="before")
    @classmethod
    def _clamp_count(cls, raw: object) -> int:
        if raw is None:
            return DEFAULT_COUNT
        if isinstance(raw, bool):
            raise ValueError("count must be a number")
        if isinstance(raw, (int, float)):
            number = float(raw)
        elif isinstance(raw, str):
            try:
                number = float(raw.strip())
            except ValueError:
                raise ValueError("count must be a number") from None
        else:
            raise ValueError("count must be a number")
        if math.isnan(number):
            raise ValueError("count must be a number")
        if math.isinf(number):
            return MAX_COUNT if number > 0 else MIN_COUNT
        return max(MIN_COUNT, min(MAX_COUNT, int(number)))

    @field_validator("exclude", mode="before")
    @classmethod
    def _clean_exclude(cls, raw: object) -> tuple[str, ...]:
        if raw is None:
            return ()
        if isinstance(raw, (str, bytes)) or not isinstance(raw, (list, tuple)):
            raise ValueError("exclude must be a list of strings")
        if len(raw) > MAX_EXCLUDE:
            raise ValueError(f"exclude accepts at most {MAX_EXCLUDE} names")
        cleaned: list[str] = []
        for entry in raw:
            if not isinstance(entry, str):
                raise ValueError("exclude must be a list of strings")
            trimmed = entry.strip()
            if trimmed:
                cleaned.append(trimmed)
        return tuple(cleaned)


class NameRecord(BaseModel):
    """One validated name suggestion.

    `native_name` は JSON 上 `nativeName` として出力し、値がなければ省略する。
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    native_name: str | None = Field(default=None, alias="nativeName")
    meaning: str
    origin: str

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def build_name_request(
    payload: Mapping[str, Any],
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> NameRequest:
    """Validate a raw mapping into a `NameRequest` or raise `ValidationError`."""

    try:
        return NameRequest.model_validate(dict(payload), context={"vocabulary": vocabulary})
    except PydanticValidationError as exc:
        raise ValidationError(describe_validation_errors(exc.errors())) from exc
    except TypeError as exc:
        raise ValidationError("Request body must be a JSON object.") from exc


def describe_validation_errors(errors: Any) -> str:
    """先頭のエラーから利用者向けの短いメッセージを組み立てる。"""

    for error in errors or ():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body",)]
        field = loc[0] if loc else "request"
        if error.get("type") == "missing":
            return f"Missing required field: {field}."
        return f"Invalid value for {field}."
    return "Invalid request."


__all__ = [
    "DEFAULT_COUNT",
    "Gender",
    "MAX_COUNT",
    "MAX_EXCLUDE",
    "NameRecord",
    "NameRequest",
    "Style",
    "build_name_request",
    "describe_validation_errors",
]
