import json

import pytest

from menuscan.errors import MalformedOutputError
from menuscan.services.menu_analysis.response_extractor import extract_json

DISHES = [{"name": "Pad Thai [spicy]", "calories": 650, "flags": {"diets": [], "allergens": ["nuts"]}}]


@pytest.mark.parametrize("template", [
    "{payload}",
    "Here are the dishes I found:\n{payload}\nLet me know if you need more.",
    "```json\n{payload}\n```",
    "Sure! ```\n{payload}\n``` Note: estimates only [approximate].",
    "Menu analysis [v2]: {payload} -- end",
    "I found [1] dish on this menu:\n```json\n{payload}\n```",
    "Allergens marked [] mean none.\n{payload}",
    "Scores [8, 6] below.\n{payload}\nSee [notes].",
])
def test_recovers_embedded_array(template):
    raw = template.format(payload=json.dumps(DISHES))
    assert extract_json(raw, expected="array") == DISHES


def test_fenced_taco_scenario(taco_json):
    raw = "```json\n" + taco_json + "\n```"
    dishes = extract_json(raw)
    assert len(dishes) == 1
    assert dishes[0]["name"] == "Taco"


def test_empty_array_is_still_a_result():
    assert extract_json("No entrees visible: []") == []
    assert extract_json("Counts [1, 2] only") == [1, 2]


def test_object_extraction_prefers_dishes_payload():
    payload = {"dishes": DISHES, "nutritionSummary": {"averageCalories": 650}}
    raw = 'Legend: {"v": 1}\n' + json.dumps(payload)
    assert extract_json(raw, expected="object") == payload


def test_object_extraction_ignores_prose_braces():
    payload = {"dishes": DISHES, "menuInsights": {"cuisineType": "thai"}}
    raw = "Result {see below}:\n" + json.dumps(payload) + "\n{end}"
    assert extract_json(raw, expected="object") == payload


@pytest.mark.parametrize("raw", [
    "",
    "   ",
    None,
    "I could not read this menu.",
    "[{\"name\": \"Taco\", \"calories\": 300",
    "```json\n[{'name': 'Taco'}]\n```",
])
def test_malformed_output(raw):
    with pytest.raises(MalformedOutputError):
        extract_json(raw)


def test_expected_shape_mismatch_is_malformed():
    with pytest.raises(MalformedOutputError):
        extract_json('{"name": "Taco", "calories": 300}', expected="array")
