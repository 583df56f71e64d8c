"""Request/response models for the name generation API."""

from .name import (
    Gender,
    NameRecord,
    NameRequest,
    Style,
    build_name_request,
)

__all__ = [
    "Gender",
    "NameRecord",
    "NameRequest",
    "Style",
    "build_name_request",
]
