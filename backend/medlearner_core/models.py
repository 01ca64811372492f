from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Scalar = str | int | float


class IntakeModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class Vitals(IntakeModel):
    bp: Scalar | None = None
    hr: Scalar | None = None
    rr: Scalar | None = None
    temp: Scalar | None = None


class Allergies(IntakeModel):
    drug: str | None = None
    food: str | None = None
    other: str | None = None


class Medication(IntakeModel):
    name: str | None = None
    dose: Scalar | None = None
    frequency: str | None = None


class LifestyleFactors(IntakeModel):
    smoking: str | None = None
    alcohol: str | None = None


class HealthProfile(IntakeModel):
    allergies: Allergies = Field(default_factory=Allergies)
    current_medications: list[Medication] = Field(default_factory=list)
    chronic_conditions: list[str] = Field(default_factory=list)
    past_surgical_history: str | None = None
    family_history: str | None = None
    lifestyle_factors: LifestyleFactors = Field(default_factory=LifestyleFactors)
    additional_notes: str | None = None


class PatientIntakeRecord(IntakeModel):
    name: str | None = None
    age: Scalar | None = None
    sex: str | None = None
    weight: Scalar | None = None
    height: Scalar | None = None
    symptoms: str | None = None
    symptom_duration: str | None = None
    previous_meal: str | None = None
    vitals: Vitals = Field(default_factory=Vitals)
    health_profile: HealthProfile = Field(default_factory=HealthProfile)


REQUIRED_INTAKE_FIELDS = ("name", "age", "sex", "weight", "height", "symptoms")


def missing_required_fields(record: PatientIntakeRecord) -> list[str]:
    """Names of required fields that are absent, blank or zero."""
    missing: list[str] = []
    for name in REQUIRED_INTAKE_FIELDS:
        value = getattr(record, name)
        if isinstance(value, str):
            value = value.strip()
        if not value:
            missing.append(name)
    return missing


@dataclass(frozen=True)
class BmiResult:
    value: str | int
    category: str

    @property
    def is_valid(self) -> bool:
        return self.category != "invalid"


@dataclass
class AssessmentEnvelope:
    record: PatientIntakeRecord
    bmi: BmiResult
    analysis: dict[str, Any] = field(default_factory=dict)
    provider: str | None = None
    attempts: int = 1

    def as_envelope(self) -> dict[str, Any]:
        return {
            "userInfo": {
                "name": self.record.name,
                "age": self.record.age,
                "sex": self.record.sex,
            },
            "bmi": {
                "value": self.bmi.value,
                "category": self.bmi.category,
                "weight": self.record.weight,
                "height": self.record.height,
            },
            "analysis": self.analysis,
        }
