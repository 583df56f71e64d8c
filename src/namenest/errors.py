"""Error kinds that may cross the API boundary.

利用者へ返すメッセージは `public_message` に固定し、LLM の生出力や
スタックトレースを含めない。
"""

from __future__ import annotations


class NameGenerationError(Exception):
    """Base class for terminal name generation failures."""

    status_code: int = 500
    public_message: str = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        self.message = message or self.public_message
        # detail はログ専用。レスポンスには載せない。
        self.detail = detail
        super().__init__(self.message)


class ConfigurationError(NameGenerationError):
    status_code = 500
    public_message = "API token not configured on server."


class ValidationError(NameGenerationError):
    status_code = 400
    public_message = "Invalid request."


class UpstreamUnavailable(NameGenerationError):
    status_code = 503
    public_message = "The AI model is loading. Please wait a moment and try again."


class UpstreamAuthError(NameGenerationError):
    status_code = 502
    public_message = "The AI service rejected the server credentials."


class UpstreamFormatError(NameGenerationError):
    status_code = 502
    public_message = "Could not parse name suggestions. Please try again."


class TransportError(NameGenerationError):
    status_code = 502
    public_message = "Failed to reach the AI service. Please try again."


__all__ = [
    "ConfigurationError",
    "NameGenerationError",
    "TransportError",
    "UpstreamAuthError",
    "UpstreamFormatError",
    "UpstreamUnavailable",
    "ValidationError",
]
