"""Flow 基盤。名前生成の試行ループを公開する。"""

from .name_generation import (
    Action,
    AttemptState,
    Decision,
    NameGenerationFlow,
    OutcomeKind,
    RetryPolicy,
    classify_response,
    decide,
    meets_acceptance,
)

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
