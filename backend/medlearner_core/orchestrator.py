from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .errors import FallbackExhaustedError, ProviderError

logger = logging.getLogger(__name__)

TRY_PRIMARY = "try_primary"
TRY_FALLBACK = "try_fallback"
SUCCESS = "success"
FAILED = "failed"

_TRANSITIONS = {
    TRY_PRIMARY: {SUCCESS, TRY_FALLBACK},
    TRY_FALLBACK: {SUCCESS, FAILED},
    SUCCESS: set(),
    FAILED: set(),
}


class OrchestratorStateError(Exception):
    pass


@dataclass
class ProviderResponse:
    text: str
    provider: str
    route: list[str] = field(default_factory=list)


class _Route:
    def __init__(self) -> None:
        self.states = [TRY_PRIMARY]

    @property
    def current(self) -> str:
        return self.states[-1]

    def advance(self, next_state: str) -> None:
        if next_state not in _TRANSITIONS[self.current]:
            raise OrchestratorStateError(f"Invalid transition {self.current} -> {next_state}")
        self.states.append(next_state)


def _provider_name(client: Any) -> str:
    return str(getattr(client, "name", None) or client.__class__.__name__)


async def _call(client: Any, prompt: str) -> str:
    try:
        return await client.generate(prompt)
    except ProviderError:
        raise
    except Exception as exc:
        # Untyped failures from a client still count as a provider failure.
        raise ProviderError(_provider_name(client), str(exc) or exc.__class__.__name__) from exc


class ProviderOrchestrator:
    """Primary first, fallback on any provider failure; no retries at this level."""

    def __init__(self, *, primary: Any, fallback: Any) -> None:
        self.primary = primary
        self.fallback = fallback

    async def generate(self, prompt: str) -> ProviderResponse:
        route = _Route()
        try:
            text = await _call(self.primary, prompt)
        except ProviderError as exc:
            primary_error = exc
            logger.warning(f"Primary provider {exc.provider} failed ({exc.kind}): {exc.message}")
            route.advance(TRY_FALLBACK)
        else:
            route.advance(SUCCESS)
            logger.info(f"Received response from {_provider_name(self.primary)} successfully.")
            return ProviderResponse(text=text, provider=_provider_name(self.primary), route=route.states)

        try:
            text = await _call(self.fallback, prompt)
        except ProviderError as exc:
            route.advance(FAILED)
            logger.error(f"Fallback provider {exc.provider} failed ({exc.kind}): {exc.message}")
            raise FallbackExhaustedError(primary_error, exc) from exc
        route.advance(SUCCESS)
        return ProviderResponse(text=text, provider=_provider_name(self.fallback), route=route.states)
