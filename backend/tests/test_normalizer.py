from __future__ import annotations

import copy

import pytest
from fakes import canonical_assessment

from medlearner_core import normalize_assessment
from medlearner_core.normalizer import INVALID_FLAG, NO_DATA_CONCEPT


def test_general_wellness_string_is_wrapped():
    normalized = normalize_assessment({"personalized_care": {"general_wellness": "x"}})
    assert normalized["personalized_care"]["general_wellness"] == ["x"]


def test_foods_to_avoid_reasoning_object_becomes_list():
    normalized = normalize_assessment({"dietary_recommendations": {"foods_to_avoid": {"reasoning": "y"}}})
    assert normalized["dietary_recommendations"]["foods_to_avoid"] == ["y"]


def test_foods_to_avoid_object_without_reasoning_becomes_empty():
    normalized = normalize_assessment({"dietary_recommendations": {"foods_to_avoid": {"items": ["a"]}}})
    assert normalized["dietary_recommendations"]["foods_to_avoid"] == []


def test_red_flag_objects_are_flattened_to_conditions():
    normalized = normalize_assessment({"red_flags": [{"condition": "fever"}]})
    assert normalized["red_flags"] == ["fever"]


def test_red_flag_object_without_condition_uses_placeholder():
    normalized = normalize_assessment({"red_flags": [{"condition": "fever"}, {"severity": "high"}]})
    assert normalized["red_flags"] == ["fever", INVALID_FLAG]


@pytest.mark.parametrize("value", [5, {}, None, True])
def test_general_wellness_other_shapes_become_empty(value):
    normalized = normalize_assessment({"personalized_care": {"general_wellness": value}})
    assert normalized["personalized_care"]["general_wellness"] == []


@pytest.mark.parametrize("value", ["skip fried food", 3, None])
def test_foods_to_avoid_scalar_becomes_empty(value):
    normalized = normalize_assessment({"dietary_recommendations": {"foods_to_avoid": value}})
    assert normalized["dietary_recommendations"]["foods_to_avoid"] == []


@pytest.mark.parametrize(
    "red_flags, expected",
    [
        ([{"condition": {"name": "chest pain"}}], [INVALID_FLAG]),
        ([{"condition": 42}], [INVALID_FLAG]),
        ([{"condition": "  "}], [INVALID_FLAG]),
        (["chest pain", {"condition": "fever"}, 7], ["chest pain", "fever", INVALID_FLAG]),
        ([3, None], [INVALID_FLAG, INVALID_FLAG]),
    ],
)
def test_red_flags_always_hold_strings(red_flags, expected):
    normalized = normalize_assessment({"red_flags": red_flags})
    assert normalized["red_flags"] == expected
    assert all(isinstance(flag, str) for flag in normalized["red_flags"])


def test_missing_sections_get_defaults():
    normalized = normalize_assessment({"primary_assessment": "ok"})
    assert normalized["primary_assessment"] == "ok"
    assert normalized["personalized_care"] == {
        "general_wellness": [],
        "activity_guidance": {"recommended": [], "to_avoid": []},
        "immediate_actions": [],
    }
    assert normalized["dietary_recommendations"] == {
        "concept": NO_DATA_CONCEPT,
        "foods_to_eat": {"main_dishes": [], "snacks_and_fruits": [], "drinks": []},
        "foods_to_avoid": [],
    }
    assert normalized["red_flags"] == []
    assert normalized["risk_analysis"] == []


def test_activity_guidance_list_is_reinterpreted_as_recommended():
    normalized = normalize_assessment({"personalized_care": {"activity_guidance": ["walk", "stretch"]}})
    assert normalized["personalized_care"]["activity_guidance"] == {
        "recommended": ["walk", "stretch"],
        "to_avoid": [],
    }


def test_activity_guidance_scalar_is_replaced():
    normalized = normalize_assessment({"personalized_care": {"activity_guidance": "rest"}})
    assert normalized["personalized_care"]["activity_guidance"] == {"recommended": [], "to_avoid": []}


def test_foods_to_eat_is_synthesized_when_missing():
    normalized = normalize_assessment({"dietary_recommendations": {"concept": "light meals", "foods_to_avoid": []}})
    dietary = normalized["dietary_recommendations"]
    assert dietary["concept"] == "light meals"
    assert dietary["foods_to_eat"] == {"main_dishes": [], "snacks_and_fruits": [], "drinks": []}


def test_non_object_top_level_normalizes_from_empty():
    normalized = normalize_assessment(["not", "an", "object"])
    assert normalized["red_flags"] == []
    assert normalized["dietary_recommendations"]["concept"] == NO_DATA_CONCEPT


def test_canonical_input_is_unchanged():
    canonical = canonical_assessment()
    assert normalize_assessment(canonical) == canonical


def test_input_is_not_mutated():
    raw = {"personalized_care": {"general_wellness": "x"}, "red_flags": [{"condition": "fever"}]}
    snapshot = copy.deepcopy(raw)
    normalize_assessment(raw)
    assert raw == snapshot


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"personalized_care": {"general_wellness": "x"}},
        {"personalized_care": "nonsense", "dietary_recommendations": 7},
        {"personalized_care": {"activity_guidance": ["walk"], "immediate_actions": "call a doctor"}},
        {"dietary_recommendations": {"foods_to_avoid": {"reasoning": "y"}, "foods_to_eat": []}},
        {"dietary_recommendations": {"foods_to_eat": {"drinks": "water"}}},
        {"red_flags": [{"condition": "fever"}, {}, "chest pain"]},
        {"red_flags": "fainting", "risk_analysis": {"condition": "x"}},
        {"red_flags": [{"condition": {"name": "chest pain"}}]},
        {"red_flags": [{"condition": 42}]},
        {"red_flags": ["chest pain", {"condition": "fever"}, 7]},
        {"personalized_care": {"general_wellness": {}}, "dietary_recommendations": {"foods_to_avoid": 3}},
        None,
        canonical_assessment(),
    ],
)
def test_normalizer_is_idempotent(raw):
    once = normalize_assessment(raw)
    assert normalize_assessment(once) == once
