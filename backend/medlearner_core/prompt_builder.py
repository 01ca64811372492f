"""
Prompt construction for the AI assessment.

Renders a patient intake record into a context block (optional fields are only
included when present) and wraps it with the fixed instruction block that
mandates the reasoning steps, the JSON output schema and the output rules.
"""
from __future__ import annotations

from typing import Any

from .models import BmiResult, HealthProfile, PatientIntakeRecord, Vitals

SYSTEM_PROMPT = (
    "**Role and Goal:** You are an Analytical Wellness Advisor AI. Your sole purpose is to analyze "
    "the provided patient data to generate a coherent, safe, and logically structured analysis "
    "in a complete JSON object format."
)

RISK_LEVELS = ("high", "medium", "low", "info")

NO_PROFILE_CONTEXT = "The user has not provided any specific health profile information."

DISCLAIMER = (
    "This assessment was generated by AI for preliminary guidance only and is based solely on the "
    "information you provided. It cannot replace a diagnosis from a doctor. Please consult a "
    "healthcare professional for an accurate diagnosis and treatment."
)

_INSTRUCTIONS = """
**MANDATORY THINKING PROCESS:**
Before producing the final JSON, work through the following steps:
1. **Fact Summary:** Summarize all key user facts (symptoms, duration, health profile) without interpretation.
2. **Potential Conditions Analysis:** Based primarily on the current symptoms, list 2-3 possible conditions with a short reason for each.
3. **Risk Evaluation & Triage:** Evaluate the conditions from step 2 against the health profile and rank them from highest to lowest risk, explaining why one condition is riskier than another.
4. **Final Conclusion:** Conclude which condition is most likely and use it to build the JSON.

**DATA ADHERENCE MANDATE:**
Analyze ONLY the raw data provided. Never refer to diseases or symptoms that are not present in the data. Fabricating information that does not exist (hallucination) is a serious violation of these instructions.

**MANDATORY JSON STRUCTURE:**
Produce a complete JSON object with exactly this structure. **Every field must be reasoned against the health profile data when such data exists.**
{{
  "primary_assessment": "A summary that always begins by stating how the health profile affects the current symptoms",
  "risk_analysis": [{{"condition": "...", "risk_level": "...", "rationale": "Explain how the health profile raises or lowers the risk of this condition"}}],
  "personalized_care": {{
    "immediate_actions": ["..."],
    "general_wellness": ["At least one recommendation specific to the health profile"],
    "activity_guidance": {{ "recommended": ["..."], "to_avoid": ["..."] }}
  }},
  "dietary_recommendations": {{
    "concept": "The eating approach that fits both the current symptoms and the health profile",
    "foods_to_eat": {{ "main_dishes": ["..."], "snacks_and_fruits": ["..."], "drinks": ["..."] }},
    "foods_to_avoid": ["Each item with a reason linked to the health profile and the current symptoms"]
  }},
  "red_flags": ["At least one warning sign related to the health profile"],
  "disclaimer": "{disclaimer}"
}}

**OUTPUT RULES:**
1. **Link the data:** every recommendation must consider the health profile (if any) first.
2. "risk_level" must be exactly one of: {risk_levels}.
3. Sort "risk_analysis" from the highest risk to the lowest risk.
4. Produce every field of the JSON; do not omit fields or add extra ones.
5. Content must be safe: do not diagnose, and **never recommend buying or taking any medication**.
6. Every "foods_to_eat" category must contain at least one item.
7. Respond entirely in {language}.
"""


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _medication_line(profile: HealthProfile) -> str:
    rendered = []
    for medication in profile.current_medications:
        parts = [str(part).strip() for part in (medication.name, medication.dose, medication.frequency) if _present(part)]
        if parts:
            rendered.append(" ".join(parts))
    return ", ".join(rendered)


def build_profile_context(profile: HealthProfile) -> str:
    parts: list[str] = []
    allergies = profile.allergies
    lifestyle = profile.lifestyle_factors
    if _present(allergies.drug):
        parts.append(f"**Drug allergies (very important): {allergies.drug}**")
    if _present(allergies.food):
        parts.append(f"**Food allergies: {allergies.food}**")
    if _present(allergies.other):
        parts.append(f"**Other allergies: {allergies.other}**")
    medications = _medication_line(profile)
    if medications:
        parts.append(f"**Current medications: {medications}**")
    conditions = [condition.strip() for condition in profile.chronic_conditions if _present(condition)]
    if conditions:
        parts.append(f"Chronic conditions: {', '.join(conditions)}")
    if _present(profile.past_surgical_history):
        parts.append(f"Past surgical history: {profile.past_surgical_history}")
    if _present(profile.family_history):
        parts.append(f"Family history: {profile.family_history}")
    if _present(lifestyle.smoking) and lifestyle.smoking.strip().lower() != "never":
        parts.append(f"Smoking: {lifestyle.smoking}")
    if _present(lifestyle.alcohol) and lifestyle.alcohol.strip().lower() != "none":
        parts.append(f"Alcohol consumption: {lifestyle.alcohol}")
    if _present(profile.additional_notes):
        parts.append(f'Additional notes: "{profile.additional_notes}"')
    return ". ".join(parts) if parts else NO_PROFILE_CONTEXT


def build_vitals_context(vitals: Vitals) -> str:
    parts: list[str] = []
    if _present(vitals.bp):
        parts.append(f"BP {vitals.bp} mmHg")
    if _present(vitals.hr):
        parts.append(f"HR {vitals.hr}/min")
    if _present(vitals.rr):
        parts.append(f"RR {vitals.rr}/min")
    if _present(vitals.temp):
        parts.append(f"Temp {vitals.temp}°C")
    return ", ".join(parts)


def _bmi_phrase(bmi: BmiResult) -> str:
    if not bmi.is_valid:
        return "BMI not available (invalid data)"
    return f"BMI {bmi.value} ({bmi.category})"


def build_full_context(record: PatientIntakeRecord, bmi: BmiResult) -> str:
    lines = [
        f"Analyze the user named {record.name} (age {record.age}, sex {record.sex}) with {_bmi_phrase(bmi)}.",
        "**Current situation:**",
        f'- **Symptoms:** "{record.symptoms}"',
    ]
    if _present(record.symptom_duration):
        lines.append(f"- **Duration:** {record.symptom_duration}")
    if _present(record.previous_meal):
        lines.append(f"- **Last meal:** {record.previous_meal}")
    vitals = build_vitals_context(record.vitals)
    if vitals:
        lines.append(f"- **Vital signs:** {vitals}")
    lines.append("")
    lines.append(f"**Health profile data (MOST IMPORTANT!): {build_profile_context(record.health_profile)}**")
    return "\n".join(lines)


def build_prompt(record: PatientIntakeRecord, bmi: BmiResult, *, language: str = "English") -> str:
    instructions = _INSTRUCTIONS.format(
        disclaimer=DISCLAIMER,
        risk_levels=", ".join(f"'{level}'" for level in RISK_LEVELS),
        language=language,
    )
    return (
        "**RAW DATA FOR ANALYSIS:**\n"
        f"{build_full_context(record, bmi)}\n"
        f"{instructions}"
    )
