from typing import Annotated

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_LLM_BASE_URL = "https://router.huggingface.co/v1"
DEFAULT_MODEL_CANDIDATES = (
    "mistralai/Mistral-7B-Instruct-v0.2",
    "meta-llama/Llama-3.1-8B-Instruct",
    "Qwen/Qwen2.5-7B-Instruct",
)


def _split_csv(raw: object) -> list[object] | None:
    """カンマ区切り文字列またはシーケンスを候補リストへ展開する。"""

    if raw is None:
        return []
    if isinstance(raw, str):
        return list(raw.split(","))
    try:
        return list(raw)  # type: ignore[call-overload]
    except TypeError:
        return None


def _dedupe_trimmed(candidates: list[object]) -> tuple[str, ...]:
    normalised: list[str] = []
    seen: set[str] = set()
    for candidate in candidates:
        if not isinstance(candidate, str):
            continue
        trimmed = candidate.strip()
        if not trimmed or trimmed in seen:
            continue
        seen.add(trimmed)
        normalised.append(trimmed)
    return tuple(normalised)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    環境変数から読み込まれるアプリ設定クラス。
    - hf_api_token: 推論エンドポイントの認証トークン
    - llm_model_candidates: 順番に試行するモデル候補
    - llm_attempts_per_candidate: 候補ごとのフォーマット再試行回数
    """

    environment: str = Field(
        default="development",
        description="Runtime environment / 実行環境",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level / ログレベル（DEBUG, INFO, WARNING など）",
    )
    hf_api_token: str | None = Field(
        default=None,
        description="Inference API token / 推論APIトークン",
        validation_alias=AliasChoices("hf_api_token", "hf_token"),
    )
    llm_base_url: str = Field(
        default=DEFAULT_LLM_BASE_URL,
        description="OpenAI compatible base URL / OpenAI互換エンドポイントのベースURL",
    )
    llm_model_candidates: Annotated[tuple[str, ...], NoDecode] = Field(
        default=DEFAULT_MODEL_CANDIDATES,
        description=(
            "Ordered model candidates (comma separated) / "
            "順番に試行するモデル候補（カンマ区切り）"
        ),
        validation_alias=AliasChoices("llm_model_candidates", "llm_models"),
    )

    # --- 試行制御 ---
    llm_attempts_per_candidate: int = Field(
        default=2,
        ge=1,
        description="Format attempts per model candidate / 候補ごとの試行回数",
    )
    llm_unavailable_retries: int = Field(
        default=2,
        ge=0,
        description=(
            "Extra retries on model-loading responses per candidate / "
            "モデル読み込み中応答に対する候補ごとの追加リトライ回数"
        ),
    )
    llm_unavailable_retry_delay_ms: int = Field(
        default=1500,
        ge=0,
        description="Delay before retrying an unavailable model (ms) / 再試行までの待機(ms)",
    )
    llm_retryable_statuses: Annotated[tuple[int, ...], NoDecode] = Field(
        default=(503,),
        description="HTTP statuses treated as model loading / モデル読み込み中とみなすステータス",
    )

    # --- LLM 呼出しパラメータ ---
    llm_timeout_ms: int = Field(
        default=30000,
        description="Per-request timeout for LLM calls (ms) / LLM呼出しのタイムアウト(ms)",
    )
    llm_max_tokens: int = Field(
        default=800,
        description="Max tokens for LLM completion output / LLM出力の最大トークン数",
    )
    llm_temperature: float = Field(
        default=0.8,
        ge=0.0,
        le=2.0,
        description="Sampling temperature / サンプリング温度",
    )
    llm_top_p: float = Field(
        default=0.95,
        gt=0.0,
        le=1.0,
        description="Nucleus sampling top_p / top_p",
    )

    allowed_cors_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(),
        description=(
            "Comma separated CORS origins / CORS で許可するオリジンのカンマ区切り一覧"
        ),
        validation_alias=AliasChoices("allowed_cors_origins", "cors_allowed_origins"),
    )

    # Pydantic v2 settings config
    # - env_file: .env を読み込む
    # - extra: 未使用キーを無視
    # - case_sensitive: 環境変数キーの大小文字を区別しない
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @field_validator("hf_api_token", mode="after")
    @classmethod
    def _blank_token_is_missing(cls, value: str | None) -> str | None:
        """空白のみのトークンは未設定として扱う。"""

        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None

    @field_validator("llm_model_candidates", "allowed_cors_origins", mode="before")
    @classmethod
    def _normalise_string_tuple(
        cls, raw_values: object
    ) -> tuple[str, ...] | object:  # pragma: no cover - pydantic handles typing
        """Convert environment input into a trimmed, deduplicated tuple.

        文字列/シーケンスのいずれでも受け取り、空白除去と重複排除を行う。
        """

        candidates = _split_csv(raw_values)
        if candidates is None:
            return raw_values
        return _dedupe_trimmed(candidates)

    @field_validator("llm_model_candidates", mode="after")
    @classmethod
    def _require_candidates(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("LLM_MODEL_CANDIDATES must list at least one model")
        return value

    @field_validator("llm_retryable_statuses", mode="before")
    @classmethod
    def _normalise_statuses(cls, raw_statuses: object) -> tuple[int, ...] | object:
        """ステータスコードのカンマ区切り指定を整数タプルへ変換する。"""

        candidates = _split_csv(raw_statuses)
        if candidates is None:
            return raw_statuses
        statuses: list[int] = []
        for candidate in candidates:
            text = str(candidate).strip()
            if not text:
                continue
            code = int(text)
            if code not in statuses:
                statuses.append(code)
        return tuple(statuses)


settings = Settings()
