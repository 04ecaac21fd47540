"""
Category Suggestion Service

Asks Gemini which of a profile's categories best fits a transaction
description, to pre-fill the category field.

CRITICAL BOUNDARIES:
- CAN: Pick one of the candidate categories it is given
- CANNOT: Invent a category (answers are matched back to candidates)
- CANNOT: Block or fail a transaction. This is advisory only; any
  failure means "no suggestion".

This is the only network call in the system, so it carries a timeout.
"""

import asyncio
from collections.abc import Sequence
from typing import Any, Optional, Protocol

import google.generativeai as genai

from zenith.audit import AuditLogger
from zenith.config import GeminiSettings, get_settings


class ServiceUnavailableError(Exception):
    """The suggestion service is unconfigured, failed, or timed out."""
    pass


class Candidate(Protocol):
    """Anything with an id and a name (Category, IncomeSource)."""

    id: str
    name: str


class GeminiCategorySuggester:
    """
    Suggests a category id for a transaction description.

    Pass `model` to use a preconfigured client (or a fake in tests);
    otherwise one is built from GeminiSettings when an API key is set.
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._audit = audit_logger or AuditLogger()
        self._model = model
        if self._model is None and self._settings.api_key:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    @staticmethod
    def build_prompt(description: str, candidates: Sequence[Candidate]) -> str:
        names = ", ".join(c.name for c in candidates)
        return (
            f'Based on the transaction description "{description}", '
            f"suggest the best category from this list: [{names}]. "
            "Respond with only the name of the category."
        )

    @staticmethod
    def match_candidate(answer: str, candidates: Sequence[Candidate]) -> Optional[str]:
        """Map the model's answer back to a candidate id (case-insensitive)."""
        cleaned = answer.strip().strip('"\'').strip().rstrip(".").lower()
        for candidate in candidates:
            if candidate.name.lower() == cleaned:
                return candidate.id
        return None

    async def suggest(
        self,
        description: str,
        candidates: Sequence[Candidate],
    ) -> Optional[str]:
        """
        Suggest one of `candidates` for `description`.

        Returns:
            The id of the suggested candidate, or None if the answer
            matched none of them

        Raises:
            ServiceUnavailableError: If unconfigured, on error, or on timeout
        """
        if self._model is None:
            raise ServiceUnavailableError("Gemini API key is not configured")
        if not description.strip() or not candidates:
            return None

        prompt = self.build_prompt(description, candidates)
        try:
            response = await asyncio.wait_for(
                self._model.generate_content_async(prompt),
                timeout=self._settings.timeout_seconds,
            )
            answer = response.text
        except asyncio.TimeoutError:
            raise ServiceUnavailableError(
                f"Suggestion timed out after {self._settings.timeout_seconds}s"
            )
        except Exception as e:
            raise ServiceUnavailableError(f"Suggestion failed: {e}")

        return self.match_candidate(answer, candidates)

    async def suggest_or_none(
        self,
        description: str,
        candidates: Sequence[Candidate],
    ) -> Optional[str]:
        """Like suggest(), but any failure is logged and becomes None."""
        try:
            return await self.suggest(description, candidates)
        except ServiceUnavailableError as e:
            self._audit.log_external_service_error(
                service="gemini",
                error_message=str(e),
            )
            return None
