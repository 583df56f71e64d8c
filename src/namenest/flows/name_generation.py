"""Attempt/retry loop turning model completions into a validated name list.

状態は (候補インデックス, 候補内の試行インデックス, 読み込み中リトライ回数) の
組で表し、各試行の結果を `decide` で次のアクションへ写像する。
候補は必ず逐次に試し、並列には投げない。
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping, Sequence

from ..config import settings
from ..errors import (
    NameGenerationError,
    TransportError,
    UpstreamAuthError,
    UpstreamFormatError,
    UpstreamUnavailable,
)
from ..logging import logger
from ..models.name import NameRecord, NameRequest, build_name_request
from ..normalize import normalize_and_validate_items
from ..parsing import extract_json_array, parse_fallback_text
from ..prompts import build_messages
from ..providers.llm import ModelResponse, call_model as default_call_model
from ..sanitize import contains_script
from ..vocabulary import DEFAULT_VOCABULARY, Vocabulary

CallModel = Callable[[str, list[dict[str, str]]], Awaitable[ModelResponse]]

ACCEPTANCE_FLOOR = 3
AUTH_STATUSES = frozenset({401, 403})


class OutcomeKind(str, Enum):
    accepted = "accepted"
    rejected = "rejected"  # 本文はあるが有効件数が閾値未満
    empty = "empty"
    http_error = "http_error"
    unavailable = "unavailable"
    auth = "auth"
    transport = "transport"


class Action(str, Enum):
    accept = "accept"
    retry_same_candidate = "retry_same_candidate"
    next_attempt = "next_attempt"
    next_candidate = "next_candidate"
    terminal_failure = "terminal_failure"


@dataclass(frozen=True)
class AttemptState:
    candidate_index: int = 0
    attempt_index: int = 0
    unavailable_retries: int = 0


@dataclass(frozen=True)
class RetryPolicy:
    candidate_count: int
    attempts_per_candidate: int = 2
    unavailable_retries: int = 2


@dataclass(frozen=True)
class Decision:
    action: Action
    state: AttemptState


def meets_acceptance(records: Sequence[Any], count: int) -> bool:
    """要求数が少なくても min(count, 3) 件そろえば採用する。"""

    return len(records) >= min(count, ACCEPTANCE_FLOOR)


def classify_response(
    response: ModelResponse,
    retryable_statuses: Sequence[int] = (503,),
) -> OutcomeKind | None:
    """Classify transport-level outcomes; None means the body needs parsing."""

    if not response.ok:
        if response.status is None:
            return OutcomeKind.transport
        if response.status in AUTH_STATUSES:
            return OutcomeKind.auth
        if response.status in retryable_statuses:
            return OutcomeKind.unavailable
        return OutcomeKind.http_error
    if not (response.body_text or "").strip():
        return OutcomeKind.empty
    return None


def _advance_candidate(state: AttemptState, policy: RetryPolicy) -> Decision:
    if state.candidate_index + 1 < policy.candidate_count:
        return Decision(Action.next_candidate, AttemptState(candidate_index=state.candidate_index + 1))
    return Decision(Action.terminal_failure, state)


def decide(outcome: OutcomeKind, state: AttemptState, policy: RetryPolicy) -> Decision:
    """Map one attempt outcome and the current state to the next action."""

    if outcome is OutcomeKind.accepted:
        return Decision(Action.accept, state)
    if outcome is OutcomeKind.auth:
        return Decision(Action.terminal_failure, state)
    if outcome is OutcomeKind.unavailable:
        if state.unavailable_retries < policy.unavailable_retries:
            return Decision(
                Action.retry_same_candidate,
                replace(state, unavailable_retries=state.unavailable_retries + 1),
            )
        return _advance_candidate(state, policy)
    if state.attempt_index + 1 < policy.attempts_per_candidate:
        return Decision(Action.next_attempt, replace(state, attempt_index=state.attempt_index + 1))
    return _advance_candidate(state, policy)


def _terminal_error(failures: Sequence[OutcomeKind]) -> NameGenerationError:
    kinds = set(failures)
    if kinds == {OutcomeKind.unavailable}:
        return UpstreamUnavailable()
    if kinds == {OutcomeKind.transport}:
        return TransportError()
    return UpstreamFormatError(detail="invalid name data")


class NameGenerationFlow:
    """Name generation flow across model candidates and prompt variants.

    1 回の `run` がそれぞれ独自の試行状態を持つため、インスタンスは
    複数リクエストで共有してよい。
    """

    def __init__(
        self,
        *,
        call_model: CallModel | None = None,
        candidates: Sequence[str] | None = None,
        attempts_per_candidate: int | None = None,
        unavailable_retries: int | None = None,
        unavailable_retry_delay_ms: int | None = None,
        retryable_statuses: Sequence[int] | None = None,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._call_model = call_model or default_call_model
        self.candidates = tuple(candidates if candidates is not None else settings.llm_model_candidates)
        if not self.candidates:
            raise ValueError("at least one model candidate is required")
        self.policy = RetryPolicy(
            candidate_count=len(self.candidates),
            attempts_per_candidate=(
                attempts_per_candidate
                if attempts_per_candidate is not None
                else settings.llm_attempts_per_candidate
            ),
            unavailable_retries=(
                unavailable_retries
                if unavailable_retries is not None
                else settings.llm_unavailable_retries
            ),
        )
        delay_ms = (
            unavailable_retry_delay_ms
            if unavailable_retry_delay_ms is not None
            else settings.llm_unavailable_retry_delay_ms
        )
        self._unavailable_delay = max(0, delay_ms) / 1000.0
        self.retryable_statuses = tuple(
            retryable_statuses if retryable_statuses is not None else settings.llm_retryable_statuses
        )
        self.vocabulary = vocabulary
        self._sleep = sleep

    def parse_completion(self, text: str, request: NameRequest) -> list[NameRecord]:
        """JSON 抽出 → 正規化。空なら行ベースのフォールバック解析 → 正規化。"""

        raw_items = extract_json_array(text)
        records: list[NameRecord] = []
        if raw_items is not None:
            records = normalize_and_validate_items(
                raw_items, request.origin, request.count, request.exclude, self.vocabulary
            )
        if records:
            return records
        fallback_items = parse_fallback_text(
            text, request.count, self.vocabulary.disallowed_tokens
        )
        logger.info(
            "name_generation_fallback_parse",
            json_found=raw_items is not None,
            candidates=len(fallback_items),
        )
        return normalize_and_validate_items(
            fallback_items, request.origin, request.count, request.exclude, self.vocabulary
        )

    def _log_native_script(self, records: Sequence[NameRecord], request: NameRequest) -> None:
        script_id = self.vocabulary.script_for_origin(request.origin)
        if not script_id:
            return
        hits = sum(
            1
            for record in records
            if contains_script(record.native_name, script_id, self.vocabulary.scripts)
        )
        logger.info("name_generation_native_script", script=script_id, hits=hits, total=len(records))

    async def run(self, request: NameRequest | Mapping[str, Any]) -> list[NameRecord]:
        """Return the first accepted result set or raise a terminal error."""

        if not isinstance(request, NameRequest):
            request = build_name_request(request, self.vocabulary)

        state = AttemptState()
        failures: list[OutcomeKind] = []
        previous_completion: str | None = None
        while True:
            candidate = self.candidates[state.candidate_index]
            strict = state.attempt_index > 0
            messages = build_messages(
                request,
                self.vocabulary,
                strict=strict,
                previous_completion=previous_completion,
            )
            logger.info(
                "name_generation_attempt",
                model=candidate,
                candidate_index=state.candidate_index,
                attempt=state.attempt_index + 1,
                strict=strict,
                unavailable_retries=state.unavailable_retries,
            )
            response = await self._call_model(candidate, messages)
            outcome = classify_response(response, self.retryable_statuses)
            records: list[NameRecord] = []
            if outcome is None:
                previous_completion = response.body_text
                records = self.parse_completion(response.body_text, request)
                outcome = (
                    OutcomeKind.accepted
                    if meets_acceptance(records, request.count)
                    else OutcomeKind.rejected
                )

            decision = decide(outcome, state, self.policy)
            logger.info(
                "name_generation_outcome",
                model=candidate,
                outcome=outcome.value,
                status=response.status,
                valid=len(records),
                requested=request.count,
                action=decision.action.value,
            )

            if decision.action is Action.accept:
                self._log_native_script(records, request)
                logger.info("name_generation_accepted", model=candidate, names=len(records))
                return records

            failures.append(outcome)
            if outcome is OutcomeKind.auth:
                logger.warning("name_generation_auth_failed", model=candidate, status=response.status)
                raise UpstreamAuthError(detail=response.error)
            if decision.action is Action.terminal_failure:
                error = _terminal_error(failures)
                logger.warning(
                    "name_generation_exhausted",
                    error_type=type(error).__name__,
                    failures=[kind.value for kind in failures],
                )
                raise error
            if decision.action is Action.retry_same_candidate and self._unavailable_delay:
                await self._sleep(self._unavailable_delay)
            if decision.action is Action.next_candidate:
                previous_completion = None
            state = decision.state


__all__ = [
    "Action",
    "AttemptState",
    "Decision",
    "NameGenerationFlow",
    "OutcomeKind",
    "RetryPolicy",
    "classify_response",
    "decide",
    "meets_acceptance",
]
