"""Chat-completion transport for the name generation flow.

OpenAI 互換のチャット補完エンドポイント（既定は Hugging Face router）へ
1 回だけリクエストを送り、結果を `ModelResponse` に詰めて返す。
再試行の判断はフロー側が行うため、SDK 内部のリトライは無効化する。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from ..config import settings
from ..errors import ConfigurationError
from ..logging import logger
from . import _get_llm_client, _set_llm_client


@dataclass(frozen=True)
class ModelResponse:
    """Outcome of one request/response round-trip.

    status が None のときは接続失敗やタイムアウトなどの通信エラーを表す。
    """

    ok: bool
    status: int | None
    body_text: str = ""
    error: str | None = None


def get_llm_client() -> AsyncOpenAI:
    """設定値から非同期クライアントを生成し、以降は同じインスタンスを返す。"""

    client = _get_llm_client()
    if client is not None:
        return client
    token = settings.hf_api_token
    if not token:
        raise ConfigurationError(detail="HF_API_TOKEN is not set")
    client = AsyncOpenAI(
        api_key=token,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout_ms / 1000.0,
        max_retries=0,
    )
    logger.info("llm_client_created", base_url=settings.llm_base_url)
    _set_llm_client(client)
    return client


def _extract_text(resp: Any) -> str:
    """チャット補完レスポンスから本文を抜き出す。"""

    try:
        choices = getattr(resp, "choices", None)
        if isinstance(choices, list) and choices:
            message = getattr(choices[0], "message", None)
            content = getattr(message, "content", None)
            if isinstance(content, str):
                return content.strip()
    except (AttributeError, IndexError, TypeError):
        pass
    if isinstance(resp, dict):
        choices = resp.get("choices") or []
        if choices and isinstance(choices[0], dict):
            content = (choices[0].get("message") or {}).get("content")
            if isinstance(content, str):
                return content.strip()
        generated = resp.get("generated_text")
        if isinstance(generated, str):
            return generated.strip()
    return ""


def _error_detail(exc: APIStatusError) -> str:
    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        message = body.get("error") or body.get("message")
        if isinstance(message, dict):
            message = message.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()[:200]
    return (str(exc) or type(exc).__name__)[:200]


async def call_model(candidate_id: str, messages: list[dict[str, str]]) -> ModelResponse:
    """Send one chat completion request for ``candidate_id``."""

    client = get_llm_client()
    logger.info(
        "llm_complete_call",
        model=candidate_id,
        prompt_chars=sum(len(m.get("content", "")) for m in messages),
    )
    try:
        resp = await client.chat.completions.create(
            model=candidate_id,
            messages=messages,  # type: ignore[arg-type]
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
            top_p=settings.llm_top_p,
        )
    except APIStatusError as exc:
        logger.info(
            "llm_complete_error",
            model=candidate_id,
            status=exc.status_code,
            error=_error_detail(exc),
        )
        return ModelResponse(ok=False, status=exc.status_code, error=_error_detail(exc))
    except APIConnectionError as exc:
        logger.info(
            "llm_complete_transport_error",
            model=candidate_id,
            error_type=type(exc).__name__,
            error=str(exc)[:200],
        )
        return ModelResponse(ok=False, status=None, error=type(exc).__name__)

    content = _extract_text(resp)
    logger.info(
        "llm_complete_result",
        model=candidate_id,
        content_chars=len(content),
        preview=content[:120],
    )
    return ModelResponse(ok=True, status=200, body_text=content)


async def shutdown_providers() -> None:
    """共有クライアントを閉じてシングルトンを解放する。"""

    client = _get_llm_client()
    _set_llm_client(None)
    if client is None:
        return
    close = getattr(client, "close", None)
    if close is not None:
        await close()
