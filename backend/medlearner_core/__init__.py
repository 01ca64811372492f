from .bmi import calculate_bmi, classify_bmi
from .config import AssessmentConfig, bootstrap_local_env
from .errors import (
    AssessmentError,
    ConfigError,
    FallbackExhaustedError,
    ParseError,
    ProviderError,
    ProviderHttpError,
    ProviderShapeError,
    ProviderTransportError,
)
from .models import AssessmentEnvelope, BmiResult, PatientIntakeRecord, missing_required_fields
from .normalizer import normalize_assessment
from .orchestrator import ProviderOrchestrator, ProviderResponse
from .pipeline import AssessmentPipeline, FixedBackoff, parse_assessment_text
from .prompt_builder import build_prompt
from .providers import GeminiClient, OpenRouterClient

__all__ = [
    "AssessmentConfig",
    "AssessmentEnvelope",
    "AssessmentError",
    "AssessmentPipeline",
    "BmiResult",
    "ConfigError",
    "FallbackExhaustedError",
    "FixedBackoff",
    "GeminiClient",
    "OpenRouterClient",
    "ParseError",
    "PatientIntakeRecord",
    "ProviderError",
    "ProviderHttpError",
    "ProviderOrchestrator",
    "ProviderResponse",
    "ProviderShapeError",
    "ProviderTransportError",
    "bootstrap_local_env",
    "build_prompt",
    "calculate_bmi",
    "classify_bmi",
    "missing_required_fields",
    "normalize_assessment",
    "parse_assessment_text",
]
