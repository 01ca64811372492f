from __future__ import annotations

import logging
from typing import Any

import google.generativeai as genai
import httpx
from google.api_core import exceptions as google_exceptions

from .config import AssessmentConfig
from .errors import ProviderError, ProviderHttpError, ProviderShapeError, ProviderTransportError
from .prompt_builder import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

_PROVIDER_DETAIL_LOG_CHARS = 200


def _provider_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        error = payload.get("error")
        nested = error.get("message") if isinstance(error, dict) else error
        for candidate in (nested, payload.get("message")):
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
    return response.text.strip() or f"HTTP {response.status_code}"


def _coerce_completion_text(response_json: Any) -> str:
    if not isinstance(response_json, dict):
        return ""
    choices = response_json.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for item in content:
            if isinstance(item, dict):
                text_value = item.get("text")
                if isinstance(text_value, str):
                    parts.append(text_value)
        return "\n".join(parts)
    return ""


class OpenRouterClient:
    """Primary provider: OpenAI-compatible chat completions in JSON mode."""

    name = "openrouter"

    def __init__(
        self,
        config: AssessmentConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = config.openrouter_api_key
        self.model = config.openrouter_model
        self.endpoint = f"{config.openrouter_base_url.rstrip('/')}/chat/completions"
        self.http_referer = config.http_referer
        self.x_title = config.x_title
        self.timeout_seconds = config.timeout_seconds
        self._transport = transport

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
        }

    def build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.http_referer,
            "X-Title": self.x_title,
        }

    async def generate(self, prompt: str) -> str:
        logger.info(f"Sending request to OpenRouter (primary) with model: {self.model}")
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds, connect=8.0),
                transport=self._transport,
            ) as client:
                response = await client.post(self.endpoint, headers=self.build_headers(), json=self.build_payload(prompt))
        except httpx.TransportError as exc:
            raise ProviderTransportError(self.name, f"OpenRouter request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            detail = _provider_error_message(response)[:_PROVIDER_DETAIL_LOG_CHARS]
            logger.error(f"OpenRouter API failed with status {response.status_code}: {detail}")
            raise ProviderHttpError(self.name, response.status_code, f"OpenRouter API request failed with status {response.status_code}")

        try:
            completion_payload = response.json()
        except ValueError as exc:
            raise ProviderShapeError(self.name, "Invalid response structure from OpenRouter API") from exc
        text = _coerce_completion_text(completion_payload).strip()
        if not text:
            raise ProviderShapeError(self.name, "Invalid response structure from OpenRouter API")
        return text


class GeminiClient:
    """Fallback provider: Gemini generative content with a JSON response MIME type."""

    name = "gemini"

    def __init__(self, config: AssessmentConfig, *, model: Any | None = None) -> None:
        self.model_name = config.gemini_model
        if model is None:
            genai.configure(api_key=config.gemini_api_key)
            model = genai.GenerativeModel(
                self.model_name,
                generation_config={"response_mime_type": "application/json"},
            )
        self._model = model

    async def generate(self, prompt: str) -> str:
        logger.info(f"Falling back to Google Gemini with model: {self.model_name}")
        try:
            result = await self._model.generate_content_async(prompt)
        except google_exceptions.GoogleAPICallError as exc:
            if exc.code:
                raise ProviderHttpError(self.name, int(exc.code), str(exc.message or exc)) from exc
            raise ProviderTransportError(self.name, str(exc.message or exc)) from exc
        except ProviderError:
            raise
        except Exception as exc:
            raise ProviderTransportError(self.name, str(exc) or exc.__class__.__name__) from exc

        try:
            text = result.text
        except ValueError as exc:
            raise ProviderShapeError(self.name, str(exc) or "Gemini returned no readable text") from exc
        if not isinstance(text, str) or not text.strip():
            raise ProviderShapeError(self.name, "Gemini returned an empty response")
        logger.info("Received response from Gemini successfully.")
        return text.strip()
