"""System prompt construction for both extraction schemas."""

from __future__ import annotations

import pytest

from voicelog.services.prompt_builder import (
    NO_KNOWN_ENTITIES,
    build_system_prompt,
    normalize_entity_names,
)
from voicelog.services.response_contract import ACTIVITY_TYPES, BUSINESS_TYPES


def test_same_inputs_produce_identical_prompts():
    first = build_system_prompt(["Acme Corp", "Globex"], "activity")
    second = build_system_prompt(["Acme Corp", "Globex"], "activity")

    assert first == second


def test_activity_prompt_lists_every_activity_type_and_null_policy():
    prompt = build_system_prompt([], "activity")

    for activity_type in ACTIVITY_TYPES:
        assert f'"{activity_type}"' in prompt
    assert "use null rather than guessing" in prompt
    assert f"Known clients: {NO_KNOWN_ENTITIES}" in prompt


def test_activity_prompt_injects_known_clients_in_order():
    prompt = build_system_prompt([" Globex ", "Acme Corp", "", "Globex"], "activity")

    assert "Known clients: Globex, Acme Corp\n" in prompt


def test_onboarding_prompt_lists_business_types_and_caps_challenges():
    prompt = build_system_prompt(None, "onboarding")

    for business_type in BUSINESS_TYPES:
        assert f'"{business_type}"' in prompt
    assert "at most 3 main challenges" in prompt
    assert "Use null for uncertain values" in prompt
    assert "{" in prompt and "{known_entities}" not in prompt


def test_onboarding_prompt_ignores_known_clients():
    assert build_system_prompt(["Acme"], "onboarding") == build_system_prompt([], "onboarding")


def test_unknown_schema_is_rejected():
    with pytest.raises(ValueError, match="Unknown extraction schema"):
        build_system_prompt([], "invoice")  # type: ignore[arg-type]


def test_normalize_entity_names_skips_non_strings():
    assert normalize_entity_names(["Acme", None, 3, "  ", "Acme", "Initech"]) == ["Acme", "Initech"]
