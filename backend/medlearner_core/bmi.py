from __future__ import annotations

import math
from typing import Any

from .models import BmiResult

INVALID_BMI = BmiResult(value=0, category="invalid")

# Evaluated in order, first upper bound the value is below wins.
_BMI_BANDS = (
    (18.5, "underweight"),
    (23.0, "normal"),
    (25.0, "overweight"),
    (30.0, "obese class I"),
)
_TOP_BAND = "obese class II (high-risk)"


def _safe_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def classify_bmi(value: float) -> str:
    for upper_bound, category in _BMI_BANDS:
        if value < upper_bound:
            return category
    return _TOP_BAND


def calculate_bmi(weight: Any, height: Any) -> BmiResult:
    """Weight in kg, height in cm. The category is taken from the rounded value."""
    weight_kg = _safe_float(weight)
    height_cm = _safe_float(height)
    if not weight_kg or not height_cm or weight_kg <= 0 or height_cm <= 0:
        return INVALID_BMI
    height_m = height_cm / 100
    value = f"{weight_kg / (height_m * height_m):.2f}"
    return BmiResult(value=value, category=classify_bmi(float(value)))
