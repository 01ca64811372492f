from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from medlearner_core import AssessmentConfig  # noqa: E402


@pytest.fixture
def config() -> AssessmentConfig:
    return AssessmentConfig(openrouter_api_key="test-openrouter-key", gemini_api_key="test-gemini-key")


@pytest.fixture
def backend_module(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "test-openrouter-key")
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("MEDLEARNER_RETRY_DELAY_SECONDS", "0")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def patient_payload() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": "Somchai Jaidee",
            "age": 45,
            "sex": "male",
            "weight": 60,
            "height": 170,
            "symptoms": "headache and dizziness",
            "symptom_duration": "2 days",
            "previous_meal": "rice soup",
            "vitals": {"bp": "150/95", "hr": 88, "rr": 18, "temp": 37.2},
            "health_profile": {
                "allergies": {"drug": "penicillin", "food": "", "other": None},
                "current_medications": [{"name": "amlodipine", "dose": "5mg", "frequency": "once daily"}],
                "chronic_conditions": ["hypertension"],
                "past_surgical_history": "",
                "family_history": "father had a stroke",
                "lifestyle_factors": {"smoking": "never", "alcohol": "occasionally"},
                "additional_notes": "",
            },
        }
        payload.update(overrides)
        return payload

    return _make
