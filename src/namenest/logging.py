"""Structured JSON logging for the name service.

生成ループは試行ごとにモデル名・結果種別・件数をイベントとして出す。
上流のエラー本文には Authorization ヘッダ由来のトークンが混ざることがあるため、
描画直前のプロセッサで伏せ字にしてから JSON へ変換する。
"""

from typing import Any

import logging
import structlog
from structlog import contextvars as structlog_contextvars
from .config import settings


_SENSITIVE_KEYWORDS = ("api_key", "token", "secret", "authorization", "password", "key")
_MASK_PLACEHOLDER = "***"
_VISIBLE_EDGE = 4


def _mask_secret_value(raw: object) -> str:
    """Hide a credential, keeping only its first and last four characters.

    8 文字以下の値は桁数の手がかりも残さず `***` にする。
    """

    if raw is None:
        return _MASK_PLACEHOLDER
    text = str(raw).strip()
    if len(text) <= _VISIBLE_EDGE * 2:
        return _MASK_PLACEHOLDER
    return f"{text[:_VISIBLE_EDGE]}…{text[-_VISIBLE_EDGE:]}"


def _is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(keyword in lowered for keyword in _SENSITIVE_KEYWORDS)


def _known_secrets() -> tuple[str, ...]:
    """現在の設定に載っている推論APIトークン（未設定なら空）。"""

    token = settings.hf_api_token
    return (token,) if token else ()


def _mask_known_literals(value: str, known_secrets: tuple[str, ...]) -> str:
    """Replace every occurrence of a configured token inside free text."""

    for secret in known_secrets:
        value = value.replace(secret, _mask_secret_value(secret))
    return value


def _sanitize_event_dict(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog processor masking credentials in an event before rendering.

    - キー名が認証情報らしい項目（`hf_api_token`, `authorization` など）は値ごと伏せる
    - それ以外の文字列でも、設定済みトークンの文字列が含まれていれば置換する
    - ネストした dict は同じ規則で再帰的に処理する
    """

    known_secrets = _known_secrets()

    def _sanitize_value(value: Any, key_hint: str) -> Any:
        if isinstance(value, dict):
            return {k: _sanitize_value(v, str(k)) for k, v in value.items()}
        sensitive = _is_sensitive_key(key_hint)
        if isinstance(value, str):
            value = _mask_known_literals(value, known_secrets)
        return _mask_secret_value(value) if sensitive else value

    for key, value in list(event_dict.items()):
        event_dict[key] = _sanitize_value(value, str(key))
    return event_dict


def _processors() -> list[Any]:
    # request_id は AccessLogMiddleware が ContextVar に束縛したものを合流させる
    return [
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog_contextvars.merge_contextvars,
        _sanitize_event_dict,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging() -> None:
    """Route structlog events through stdlib logging as one JSON object per line.

    レベルは `settings.log_level`。既存ハンドラ（uvicorn 等）は置き換え、
    行頭に "INFO:root:" のような接頭辞が付かないようにする。
    """

    level = logging.getLevelName(settings.log_level.upper())
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.INFO,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )
    structlog.configure(
        processors=_processors(),
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


logger = structlog.get_logger()
