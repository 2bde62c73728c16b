"""Async Gemini API client.

Uses the google-generativeai library to turn a contributor's free-text
description of a workday into candidate time-entry rows.
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from typing import Any

import google.generativeai as genai
from pydantic import BaseModel, Field

from timesheet.config import settings
from timesheet.core.enums import ActivityType
from timesheet.core.exceptions import (
    AIRateLimitError,
    AIResponseParseError,
    AIServiceNotConfiguredError,
    AIServiceUnavailableError,
)
from timesheet.core.rate_limiter import get_rate_limiter

logger = logging.getLogger(__name__)

_JSON_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*\n?(.*?)\n?\s*```", re.DOTALL)


# ---------------------------------------------------------------------------
# Response model
# ---------------------------------------------------------------------------

class DayParseResult(BaseModel):
    """Raw rows proposed by the model for one day.

    Rows are kept as plain dicts; normalization and capping happen in the
    parse service.
    """

    rows: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_payload(cls, raw: dict[str, Any]) -> DayParseResult:
        """Keep the dict entries of ``raw["rows"]``, drop everything else."""
        rows = raw.get("rows")
        if not isinstance(rows, list):
            return cls()
        return cls(rows=[r for r in rows if isinstance(r, dict)])


# ---------------------------------------------------------------------------
# Gemini client
# ---------------------------------------------------------------------------

class GeminiClient:
    """Gemini API client.

    Rate limited, asks for a JSON answer and falls back to extracting a
    JSON object from prose when the model wraps its answer.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
    ) -> None:
        """Configure the client.

        Raises:
            AIServiceNotConfiguredError: When no API key is available.
        """
        key = settings.GEMINI_API_KEY if api_key is None else api_key
        if not key or not key.strip():
            raise AIServiceNotConfiguredError()

        genai.configure(api_key=key)
        self._model = genai.GenerativeModel(
            model_name=model_name or settings.GEMINI_MODEL,
            generation_config=genai.GenerationConfig(
                response_mime_type="application/json",
                temperature=0.2,
            ),
        )
        self._rate_limiter = get_rate_limiter()

    # ------------------------------------------------------------------
    # Day parsing
    # ------------------------------------------------------------------

    async def parse_day(
        self,
        text: str,
        day: date,
        known_projects: list[str],
        ceiling: float,
        fallback_type: ActivityType,
    ) -> DayParseResult:
        """Ask the model to split ``text`` into rows for ``day``.

        Args:
            text: Free-text description of the day.
            day: Day the rows belong to.
            known_projects: Project labels the model should pick from.
            ceiling: Default total hours when the text gives none.
            fallback_type: Type the model should use when unsure.

        Returns:
            DayParseResult with the model's raw rows.

        Raises:
            AIRateLimitError: Quota exceeded upstream.
            AIServiceUnavailableError: The call failed.
            AIResponseParseError: No JSON object could be extracted.
        """
        prompt = self._build_day_prompt(
            text, day, known_projects, ceiling, fallback_type,
        )
        raw_response = await self._generate(prompt)
        parsed = self._parse_json_response(raw_response)

        if parsed is None:
            logger.warning(
                "Gemini day parse returned non-JSON text for day=%s. raw=%s",
                day,
                raw_response[:500],
            )
            raise AIResponseParseError()

        return DayParseResult.from_payload(parsed)

    # ------------------------------------------------------------------
    # Internal: API call
    # ------------------------------------------------------------------

    async def _generate(self, prompt: str) -> str:
        """Send ``prompt`` to Gemini and return the text answer.

        Raises:
            AIRateLimitError: Quota exceeded upstream.
            AIServiceUnavailableError: Any other failure.
        """
        await self._rate_limiter.acquire_gemini()

        try:
            response = await self._model.generate_content_async(prompt)
            return response.text
        except Exception as exc:
            error_msg = str(exc).lower()
            if "rate" in error_msg or "quota" in error_msg or "429" in error_msg:
                logger.error("Gemini API rate limit exceeded: %s", exc)
                raise AIRateLimitError(
                    detail=f"Gemini API rate limit exceeded: {exc}",
                ) from exc
            logger.error("Gemini API call failed: %s", exc)
            raise AIServiceUnavailableError(
                detail=f"Gemini API call failed: {exc}",
            ) from exc

    # ------------------------------------------------------------------
    # Internal: JSON parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _loads_dict(text: str) -> dict[str, Any] | None:
        try:
            result = json.loads(text)
        except json.JSONDecodeError:
            return None
        return result if isinstance(result, dict) else None

    @staticmethod
    def _first_balanced_object(text: str) -> str | None:
        """Return the first brace-balanced ``{...}`` span of ``text``.

        Braces inside JSON string literals are ignored.
        """
        start = text.find("{")
        while start != -1:
            depth = 0
            in_string = False
            escaped = False
            for i in range(start, len(text)):
                ch = text[i]
                if in_string:
                    if escaped:
                        escaped = False
                    elif ch == "\\":
                        escaped = True
                    elif ch == '"':
                        in_string = False
                    continue
                if ch == '"':
                    in_string = True
                elif ch == "{":
                    depth += 1
                elif ch == "}":
                    depth -= 1
                    if depth == 0:
                        return text[start : i + 1]
            start = text.find("{", start + 1)
        return None

    @classmethod
    def _parse_json_response(cls, raw_text: str) -> dict[str, Any] | None:
        """Extract a JSON dict from a Gemini answer.

        Tries, in order: the whole text, a fenced ```json block, the first
        brace-balanced object, then the span from the first ``{`` to the
        last ``}``.

        Returns:
            Parsed dict, or None when nothing parses.
        """
        if not raw_text:
            return None

        result = cls._loads_dict(raw_text)
        if result is not None:
            return result

        match = _JSON_BLOCK_PATTERN.search(raw_text)
        if match:
            result = cls._loads_dict(match.group(1).strip())
            if result is not None:
                return result

        balanced = cls._first_balanced_object(raw_text)
        if balanced is not None:
            result = cls._loads_dict(balanced)
            if result is not None:
                return result

        first_brace = raw_text.find("{")
        last_brace = raw_text.rfind("}")
        if first_brace != -1 and last_brace > first_brace:
            result = cls._loads_dict(raw_text[first_brace : last_brace + 1])
            if result is not None:
                return result

        logger.warning("Failed to parse JSON from Gemini response: %s", raw_text[:300])
        return None

    # ------------------------------------------------------------------
    # Internal: prompt
    # ------------------------------------------------------------------

    @staticmethod
    def _build_day_prompt(
        text: str,
        day: date,
        known_projects: list[str],
        ceiling: float,
        fallback_type: ActivityType,
    ) -> str:
        """Build the day-parsing prompt."""
        types = ActivityType.values()
        half = round(ceiling / 2, 2)
        return f"""You help a developer fill in their daily timesheet.
Answer with ONLY a valid JSON object, no text outside the JSON, in this EXACT format:

{{
    "rows": [
        {{
            "day": "YYYY-MM-DD",
            "ticket_id": "",
            "subject": "",
            "project": "",
            "hours": 0,
            "type": "{'|'.join(types)}",
            "billing_code": ""
        }}
    ]
}}

Rules:
- Each distinct task is a separate row; several rows may share the same day.
- "morning/afternoon" descriptions may become two or more rows.
- Allowed types, STRICTLY: {json.dumps(types, ensure_ascii=False)}
- Weekend or leave: type "Weekend" or "Leave", hours 0, subject "Weekend"/"Leave".
- When the type is unclear use "{fallback_type.value}".
- ticket_id: only when the text names a ticket (e.g. ABC-123), otherwise "".
- project: choose the closest entry from this list when relevant: {json.dumps(known_projects, ensure_ascii=False)}
- When no total time is given, spread {ceiling:g}h over the rows (e.g. {half:g} + {half:g}), or {ceiling:g}h on a single row.
- The total of "hours" must not exceed {ceiling:g}.
- The answer MUST start with {{ and end with }}.

Day: {day.isoformat()}
Text: {text}"""
