#!/usr/bin/env python3
"""Run a few intake scenarios against the live providers and report the envelopes."""
from __future__ import annotations

import importlib
import json
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi.testclient import TestClient

_LIST_FIELDS = (
  ("risk_analysis",),
  ("red_flags",),
  ("personalized_care", "immediate_actions"),
  ("personalized_care", "general_wellness"),
  ("personalized_care", "activity_guidance", "recommended"),
  ("personalized_care", "activity_guidance", "to_avoid"),
  ("dietary_recommendations", "foods_to_eat", "main_dishes"),
  ("dietary_recommendations", "foods_to_eat", "snacks_and_fruits"),
  ("dietary_recommendations", "foods_to_eat", "drinks"),
  ("dietary_recommendations", "foods_to_avoid"),
)
_RISK_LEVELS = {"high", "medium", "low", "info"}


@dataclass
class Scenario:
  name: str
  payload: dict[str, Any]
  expected_bmi_category: str


def lookup(payload: dict[str, Any], path: tuple[str, ...]) -> Any:
  current: Any = payload
  for key in path:
    if not isinstance(current, dict):
      return None
    current = current.get(key)
  return current


def check_analysis(analysis: dict[str, Any]) -> list[str]:
  problems: list[str] = []
  for path in _LIST_FIELDS:
    if not isinstance(lookup(analysis, path), list):
      problems.append(f"{'.'.join(path)} is not a list")
  for entry in analysis.get("risk_analysis") or []:
    level = entry.get("risk_level") if isinstance(entry, dict) else None
    if level not in _RISK_LEVELS:
      problems.append(f"unexpected risk_level: {level!r}")
  return problems


def run() -> int:
  repo_root = Path(__file__).resolve().parents[1]
  backend_dir = repo_root / "backend"
  if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

  backend_module = importlib.import_module("main")

  scenarios = [
    Scenario(
      name="Hypertensive Headache",
      payload={
        "name": "Smoke Patient A",
        "age": 58,
        "sex": "male",
        "weight": 82,
        "height": 168,
        "symptoms": "throbbing headache and blurred vision",
        "symptom_duration": "1 day",
        "vitals": {"bp": "170/105", "hr": 92},
        "health_profile": {
          "chronic_conditions": ["hypertension"],
          "current_medications": [{"name": "amlodipine", "dose": "10mg", "frequency": "once daily"}],
        },
      },
      expected_bmi_category="obese class I",
    ),
    Scenario(
      name="Food Allergy Stomach Ache",
      payload={
        "name": "Smoke Patient B",
        "age": 24,
        "sex": "female",
        "weight": 50,
        "height": 165,
        "symptoms": "stomach cramps after lunch",
        "previous_meal": "shrimp fried rice",
        "health_profile": {"allergies": {"food": "shellfish"}},
      },
      expected_bmi_category="underweight",
    ),
  ]

  results: list[dict[str, Any]] = []

  with TestClient(backend_module.app) as client:
    for scenario in scenarios:
      response = client.post("/api/assess", json=scenario.payload)
      body = response.json()
      problems: list[str] = []
      if response.status_code != 200:
        problems.append(f"status {response.status_code}: {body.get('details')}")
      else:
        if body["bmi"]["category"] != scenario.expected_bmi_category:
          problems.append(f"bmi category {body['bmi']['category']!r}")
        problems.extend(check_analysis(body["analysis"]))
      results.append(
        {
          "scenario": scenario.name,
          "status_code": response.status_code,
          "passed": not problems,
          "problems": problems,
          "primary_assessment": lookup(body, ("analysis", "primary_assessment")),
        }
      )

  report = {
    "generated_at": datetime.now(timezone.utc).isoformat(),
    "results": results,
  }
  print(json.dumps(report, indent=2, ensure_ascii=False))  # noqa: T201
  return 0 if all(item["passed"] for item in results) else 1


if __name__ == "__main__":
  raise SystemExit(run())
