from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from .bmi import calculate_bmi
from .config import AssessmentConfig
from .errors import AssessmentError, ParseError
from .models import AssessmentEnvelope, PatientIntakeRecord
from .normalizer import normalize_assessment
from .orchestrator import ProviderOrchestrator, ProviderResponse
from .prompt_builder import build_prompt
from .providers import GeminiClient, OpenRouterClient

logger = logging.getLogger(__name__)

# Raw provider text may contain patient details; never log more than this.
RAW_TEXT_LOG_LIMIT = 500

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class FixedBackoff:
    delay_seconds: float = 2.0

    def delay_for(self, attempt: int) -> float:
        return self.delay_seconds


_FENCE = "```"


def _strip_markdown_fence(text: str) -> str:
    if len(text) < 2 * len(_FENCE) or not (text.startswith(_FENCE) and text.endswith(_FENCE)):
        return text
    body = text[len(_FENCE) : -len(_FENCE)]
    first_line, newline, rest = body.partition("\n")
    # Drop an info string such as ```json on the opening line.
    if newline and first_line.strip().isalnum():
        body = rest
    return body.strip()


def _load_json_object(raw_text: str) -> dict[str, Any] | None:
    text = (raw_text or "").strip()
    if not text:
        return None
    for candidate in dict.fromkeys((text, _strip_markdown_fence(text))):
        try:
            payload = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        return payload if isinstance(payload, dict) else None
    return None


def parse_assessment_text(raw_text: str) -> dict[str, Any]:
    payload = _load_json_object(raw_text)
    if payload is None:
        logger.error("Failed to parse JSON response from AI provider")
        logger.error(f"Response content (truncated): {(raw_text or '')[:RAW_TEXT_LOG_LIMIT]}")
        raise ParseError(
            "AI service returned invalid response format. Please check API configuration or try again later."
        )
    return payload


class AssessmentPipeline:
    def __init__(
        self,
        *,
        orchestrator: ProviderOrchestrator,
        max_attempts: int = 3,
        backoff: FixedBackoff | None = None,
        sleep: Sleep | None = None,
        language: str = "English",
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.orchestrator = orchestrator
        self.max_attempts = max_attempts
        self.backoff = backoff or FixedBackoff()
        self._sleep = sleep or asyncio.sleep
        self.language = language

    @classmethod
    def from_config(cls, config: AssessmentConfig) -> "AssessmentPipeline":
        orchestrator = ProviderOrchestrator(
            primary=OpenRouterClient(config),
            fallback=GeminiClient(config),
        )
        return cls(
            orchestrator=orchestrator,
            max_attempts=config.max_attempts,
            backoff=FixedBackoff(config.retry_delay_seconds),
            language=config.response_language,
        )

    async def _attempt(self, record: PatientIntakeRecord) -> tuple[dict[str, Any], ProviderResponse]:
        bmi = calculate_bmi(record.weight, record.height)
        prompt = build_prompt(record, bmi, language=self.language)
        response = await self.orchestrator.generate(prompt)
        parsed = parse_assessment_text(response.text)
        logger.info(f"Parsed JSON response from {response.provider}")
        return normalize_assessment(parsed), response

    async def assess(self, record: PatientIntakeRecord) -> AssessmentEnvelope:
        logger.info("Starting assessment process")
        attempt = 0
        while True:
            attempt += 1
            logger.info(f"[Attempt {attempt}/{self.max_attempts}] Calling AI...")
            try:
                analysis, response = await self._attempt(record)
            except Exception as exc:
                logger.error(f"[Attempt {attempt}] Failed: {exc}")
                if attempt >= self.max_attempts:
                    raise AssessmentError(attempt, exc) from exc
                await self._sleep(self.backoff.delay_for(attempt))
                continue
            return AssessmentEnvelope(
                record=record,
                bmi=calculate_bmi(record.weight, record.height),
                analysis=analysis,
                provider=response.provider,
                attempts=attempt,
            )
