"""Chat message construction for name generation."""

from __future__ import annotations

import json

from .models.name import Gender, NameRequest
from .sanitize import contains_script
from .vocabulary import ANY_ORIGIN, DEFAULT_VOCABULARY, Vocabulary

SYSTEM_PROMPT = (
    "You are a baby name expert. You answer with a JSON array only, "
    "without markdown fences, commentary or explanations."
)

STRICT_COMPLIANCE_NOTE = (
    "IMPORTANT: Your previous answer could not be used. Respond with ONLY the JSON array, "
    "starting with [ and ending with ]. Every \"name\" value MUST be written in Latin letters "
    "(A-Z, with accents if needed). Do not add notes, thoughts or numbering."
)


def _gender_text(gender: Gender) -> str:
    if gender is Gender.surprise:
        return "any gender (mix of boy and girl names)"
    if gender is Gender.neutral:
        return "gender-neutral use"
    return f"a {gender.value}"


def _schema_example(request: NameRequest, script_id: str | None) -> str:
    example: dict[str, str] = {"name": "Example", "meaning": "meaning here", "origin": "origin here"}
    if script_id:
        example = {
            "name": "Latin transliteration",
            "nativeName": "name in native script",
            "meaning": "meaning here",
            "origin": request.origin,
        }
    return json.dumps([example], ensure_ascii=False)


def build_messages(
    request: NameRequest,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    *,
    strict: bool = False,
    previous_completion: str | None = None,
) -> list[dict[str, str]]:
    """Return system/user messages for one attempt.

    strict=True のときは JSON のみ・name はラテン文字という追加指示を付ける。
    直前の出力に対象文字体系が含まれていた場合はその文字体系を名指しする。
    """

    origin_text = "any cultural origin" if request.origin == ANY_ORIGIN else request.origin
    script_id = vocabulary.script_for_origin(request.origin)
    lines = [
        f"Generate exactly {request.count} unique baby names for {_gender_text(request.gender)}.",
        f"Style: {request.style.value}. Cultural origin: {origin_text}.",
        "For each name, provide the name, its meaning, and cultural origin.",
    ]
    if script_id:
        label = vocabulary.script_labels.get(script_id, script_id)
        lines.append(
            f"Write \"name\" as a Latin-letter transliteration and put the {label} "
            "spelling in \"nativeName\"."
        )
    if request.exclude:
        lines.append("Do not suggest any of these names: " + ", ".join(request.exclude) + ".")
    lines.append("")
    lines.append("You MUST respond with ONLY a valid JSON array, no other text. Format:")
    lines.append(_schema_example(request, script_id))
    lines.append("")
    lines.append(f"Generate exactly {request.count} names now.")
    if strict:
        lines.append("")
        lines.append(STRICT_COMPLIANCE_NOTE)
        if script_id and previous_completion and contains_script(
            previous_completion, script_id, vocabulary.scripts
        ):
            label = vocabulary.script_labels.get(script_id, script_id)
            lines.append(f"Never put {label} characters in \"name\"; they belong in \"nativeName\" only.")

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "\n".join(lines)},
    ]


__all__ = ["STRICT_COMPLIANCE_NOTE", "SYSTEM_PROMPT", "build_messages"]
