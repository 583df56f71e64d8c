"""プロバイダー向けの共有ステートと公開APIを管理するパッケージ。"""

from __future__ import annotations

from typing import Any

# 推論APIクライアントのシングルトン。設定の再読み込み時は None へ戻して再生成する。
_LLM_CLIENT: Any | None = None


def _get_llm_client() -> Any | None:
    """LLM クライアントの現在値を返す。"""

    return _LLM_CLIENT


def _set_llm_client(client: Any | None) -> None:
    """LLM クライアントを更新する。テストでは None へ戻し再初期化する。"""

    global _LLM_CLIENT
    _LLM_CLIENT = client


from .llm import ModelResponse, call_model, get_llm_client, shutdown_providers

__all__ = [
    "ModelResponse",
    "call_model",
    "get_llm_client",
    "shutdown_providers",
]
