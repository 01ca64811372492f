"""
Schema repair for provider assessments.

Each repaired field is classified into one of a fixed set of shape variants and
the variant's repair function is applied. Rules run in order and never raise;
running the normalizer on its own output changes nothing.
"""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Callable

logger = logging.getLogger(__name__)

NO_DATA_CONCEPT = "No data"
INVALID_FLAG = "Invalid data"

LIST = "list"
STRING = "string"
OBJECT = "object"
MISSING = "missing"
OTHER = "other"


def shape_of(value: Any) -> str:
    if value is None:
        return MISSING
    if isinstance(value, list):
        return LIST
    if isinstance(value, str):
        return STRING
    if isinstance(value, dict):
        return OBJECT
    return OTHER


def empty_foods_to_eat() -> dict[str, list[Any]]:
    return {"main_dishes": [], "snacks_and_fruits": [], "drinks": []}


def default_dietary_recommendations() -> dict[str, Any]:
    return {
        "concept": NO_DATA_CONCEPT,
        "foods_to_eat": empty_foods_to_eat(),
        "foods_to_avoid": [],
    }


def _keep(value: Any) -> Any:
    return value


def _empty_list(value: Any) -> list[Any]:
    return []


def _wrap(value: Any) -> list[Any]:
    return [value]


def _empty_object(value: Any) -> dict[str, Any]:
    return {}


Repairs = dict[str, Callable[[Any], Any]]

STRING_LIST_REPAIRS: Repairs = {LIST: _keep, STRING: _wrap, OBJECT: _empty_list, MISSING: _empty_list, OTHER: _empty_list}
OBJECT_LIST_REPAIRS: Repairs = {LIST: _keep, STRING: _empty_list, OBJECT: _empty_list, MISSING: _empty_list, OTHER: _empty_list}
OBJECT_REPAIRS: Repairs = {OBJECT: _keep, LIST: _empty_object, STRING: _empty_object, MISSING: _empty_object, OTHER: _empty_object}

ACTIVITY_GUIDANCE_REPAIRS: Repairs = {
    OBJECT: _keep,
    LIST: lambda value: {"recommended": value, "to_avoid": []},
    STRING: lambda value: {"recommended": [], "to_avoid": []},
    MISSING: lambda value: {"recommended": [], "to_avoid": []},
    OTHER: lambda value: {"recommended": [], "to_avoid": []},
}

DIETARY_REPAIRS: Repairs = {
    OBJECT: _keep,
    LIST: lambda value: default_dietary_recommendations(),
    STRING: lambda value: default_dietary_recommendations(),
    MISSING: lambda value: default_dietary_recommendations(),
    OTHER: lambda value: default_dietary_recommendations(),
}

FOODS_TO_EAT_REPAIRS: Repairs = {
    OBJECT: _keep,
    LIST: lambda value: empty_foods_to_eat(),
    STRING: lambda value: empty_foods_to_eat(),
    MISSING: lambda value: empty_foods_to_eat(),
    OTHER: lambda value: empty_foods_to_eat(),
}


def _avoid_from_object(value: dict[str, Any]) -> list[Any]:
    reasoning = value.get("reasoning")
    if reasoning:
        return [reasoning if isinstance(reasoning, str) else str(reasoning)]
    return []


FOODS_TO_AVOID_REPAIRS: Repairs = {
    LIST: _keep,
    OBJECT: _avoid_from_object,
    STRING: _empty_list,
    MISSING: _empty_list,
    OTHER: _empty_list,
}


def _flag_text(flag: Any) -> str:
    if isinstance(flag, dict):
        flag = flag.get("condition")
    if isinstance(flag, str) and flag.strip():
        return flag
    return INVALID_FLAG


def _flatten_red_flags(value: list[Any]) -> list[str]:
    # The result holds only strings.
    if all(isinstance(flag, str) for flag in value):
        return value
    return [_flag_text(flag) for flag in value]


def repair(container: dict[str, Any], key: str, repairs: Repairs) -> Any:
    value = container.get(key)
    repaired = repairs[shape_of(value)](value)
    container[key] = repaired
    return repaired


@dataclass(frozen=True)
class RepairRule:
    name: str
    apply: Callable[[dict[str, Any]], None]


def _personalized_care(analysis: dict[str, Any]) -> None:
    repair(analysis, "personalized_care", OBJECT_REPAIRS)


def _general_wellness(analysis: dict[str, Any]) -> None:
    repair(analysis["personalized_care"], "general_wellness", STRING_LIST_REPAIRS)


def _activity_guidance(analysis: dict[str, Any]) -> None:
    repair(analysis["personalized_care"], "activity_guidance", ACTIVITY_GUIDANCE_REPAIRS)


def _dietary_recommendations(analysis: dict[str, Any]) -> None:
    repair(analysis, "dietary_recommendations", DIETARY_REPAIRS)


def _foods_to_eat(analysis: dict[str, Any]) -> None:
    repair(analysis["dietary_recommendations"], "foods_to_eat", FOODS_TO_EAT_REPAIRS)


def _foods_to_avoid(analysis: dict[str, Any]) -> None:
    repair(analysis["dietary_recommendations"], "foods_to_avoid", FOODS_TO_AVOID_REPAIRS)


def _red_flags(analysis: dict[str, Any]) -> None:
    if shape_of(analysis.get("red_flags")) == LIST:
        analysis["red_flags"] = _flatten_red_flags(analysis["red_flags"])


def _remaining_lists(analysis: dict[str, Any]) -> None:
    care = analysis["personalized_care"]
    guidance = care["activity_guidance"]
    foods = analysis["dietary_recommendations"]["foods_to_eat"]
    repair(analysis, "risk_analysis", OBJECT_LIST_REPAIRS)
    repair(analysis, "red_flags", STRING_LIST_REPAIRS)
    repair(care, "immediate_actions", STRING_LIST_REPAIRS)
    repair(guidance, "recommended", STRING_LIST_REPAIRS)
    repair(guidance, "to_avoid", STRING_LIST_REPAIRS)
    for category in ("main_dishes", "snacks_and_fruits", "drinks"):
        repair(foods, category, STRING_LIST_REPAIRS)


REPAIR_RULES = (
    RepairRule("personalized_care", _personalized_care),
    RepairRule("general_wellness", _general_wellness),
    RepairRule("activity_guidance", _activity_guidance),
    RepairRule("dietary_recommendations", _dietary_recommendations),
    RepairRule("foods_to_eat", _foods_to_eat),
    RepairRule("foods_to_avoid", _foods_to_avoid),
    RepairRule("red_flags", _red_flags),
    RepairRule("list_fields", _remaining_lists),
)


def normalize_assessment(analysis: Any) -> dict[str, Any]:
    """Return a repaired copy of a parsed provider assessment."""
    normalized = copy.deepcopy(analysis) if isinstance(analysis, dict) else {}
    for rule in REPAIR_RULES:
        rule.apply(normalized)
    logger.debug("Normalization complete.")
    return normalized
