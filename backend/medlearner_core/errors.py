from __future__ import annotations


class ConfigError(Exception):
    pass


class ProviderError(Exception):
    kind = "provider_error"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider
        self.message = message


class ProviderHttpError(ProviderError):
    kind = "http_status"

    def __init__(self, provider: str, status_code: int, message: str | None = None) -> None:
        super().__init__(provider, message or f"{provider} API request failed with status {status_code}")
        self.status_code = status_code


class ProviderShapeError(ProviderError):
    kind = "unexpected_body"


class ProviderTransportError(ProviderError):
    kind = "transport"


class FallbackExhaustedError(Exception):
    """Both providers failed. Only the fallback's message is surfaced."""

    def __init__(self, primary_error: ProviderError, fallback_error: ProviderError) -> None:
        super().__init__(f"AI service failed: {fallback_error.message}")
        self.primary_error = primary_error
        self.fallback_error = fallback_error


class ParseError(Exception):
    pass


class AssessmentError(Exception):
    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(f"Could not communicate with AI after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error
