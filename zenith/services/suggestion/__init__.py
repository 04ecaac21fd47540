"""Category suggestion package."""

from zenith.services.suggestion.gemini_service import (
    GeminiCategorySuggester,
    ServiceUnavailableError,
)

__all__ = [
    "GeminiCategorySuggester",
    "ServiceUnavailableError",
]
