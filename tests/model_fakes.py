"""Fake model transport used by the flow and API tests."""

from __future__ import annotations

import json
from typing import Any

from namenest.providers.llm import ModelResponse


class ScriptedModel:
    """Fake `call_model` replaying a fixed list of responses.

    呼び出しごとに (candidate_id, messages) を記録し、台本の応答を順に返す。
    台本が尽きたら最後の応答を繰り返す。
    """

    def __init__(self, responses: list[ModelResponse]) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, list[dict[str, str]]]] = []

    async def __call__(self, candidate_id: str, messages: list[dict[str, str]]) -> ModelResponse:
        self.calls.append((candidate_id, messages))
        index = min(len(self.calls), len(self._responses)) - 1
        return self._responses[index]

    @property
    def candidates(self) -> list[str]:
        return [candidate for candidate, _ in self.calls]

    def user_prompt(self, index: int) -> str:
        return self.calls[index][1][-1]["content"]


def ok(body: Any) -> ModelResponse:
    text = body if isinstance(body, str) else json.dumps(body, ensure_ascii=False)
    return ModelResponse(ok=True, status=200, body_text=text)


def failed(status: int | None, error: str = "boom") -> ModelResponse:
    return ModelResponse(ok=False, status=status, error=error)


def name_items(*names: str, origin: str = "Italian") -> list[dict[str, str]]:
    return [{"name": n, "meaning": f"meaning of {n}", "origin": origin} for n in names]
