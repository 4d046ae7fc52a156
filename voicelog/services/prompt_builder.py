"""Helpers to construct the system prompts for structured extraction.

Given the target schema id and the caller's known entities (client names),
we emit a deterministic system prompt that:
* enumerates the permitted enum values for the schema,
* describes the exact JSON shape expected back,
* tells the model to leave unstated facts null.
"""

from __future__ import annotations

from typing import Iterable, Literal

from voicelog.services.response_contract import (
    ACTIVITY_TYPES,
    BUSINESS_TYPES,
    CLIENT_TYPES,
    MAX_CHALLENGES,
)

SchemaId = Literal["activity", "onboarding"]

NO_KNOWN_ENTITIES = "None specified yet"


def _quoted(values: Iterable[str]) -> str:
    return ", ".join(f'"{value}"' for value in values)


PROMPT_TEMPLATES: dict[str, str] = {
    "activity": (
        "You are an AI assistant that parses voice activity logs for a portfolio entrepreneur.\n"
        "Extract structured information from the transcript about business activities.\n"
        "\n"
        "Known clients: {known_entities}\n"
        "\n"
        "Return a JSON object with:\n"
        f"- activity_type: one of {_quoted(ACTIVITY_TYPES)}\n"
        "- client_name: the client mentioned (or null if none/personal)\n"
        "- duration_minutes: estimated duration in minutes if mentioned (or null)\n"
        "- revenue: any revenue/payment mentioned as number (or null)\n"
        "- summary: a brief 1-2 sentence summary of the activity\n"
        "- notes: any additional details mentioned (or null)\n"
        "- confidence: your confidence in the parsing (0-1)\n"
        "\n"
        "Be conservative - if unsure, use null rather than guessing. "
        "Never invent a client, duration, or amount that the transcript does not state."
    ),
    "onboarding": (
        "You are an AI assistant helping set up a portfolio management app for a "
        "fractional executive or consultant.\n"
        "Parse the user's voice introduction to extract key information about their work.\n"
        "\n"
        "Return a JSON object with:\n"
        "- clients: array of objects with { name: string, type: one of "
        f"{_quoted(CLIENT_TYPES)} or null, monthly_value: number | null }}\n"
        "- revenue_target: monthly revenue target as number (or null if not mentioned)\n"
        "- work_patterns: object with { typical_start_time: string | null, "
        "typical_end_time: string | null, busy_days: string[] }\n"
        f"- business_type: one of {_quoted(BUSINESS_TYPES)}\n"
        "- target_market: brief description of their target market (or null)\n"
        f"- main_challenges: array of at most {MAX_CHALLENGES} main challenges they mentioned\n"
        "\n"
        "Be conservative - extract only what's clearly stated. Use null for uncertain values.\n"
        "For clients, include any companies, projects, or engagements mentioned."
    ),
}


def normalize_entity_names(names: Iterable[str] | None) -> list[str]:
    """Trim names, drop blanks, and collapse duplicates while keeping order."""

    unique: list[str] = []
    seen: set[str] = set()
    for raw in names or ():
        if not isinstance(raw, str):
            continue
        name = raw.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        unique.append(name)
    return unique


def build_system_prompt(known_entities: Iterable[str] | None, schema_id: SchemaId) -> str:
    """Return the extraction instructions for ``schema_id``.

    The output depends only on the arguments, so identical inputs always
    produce byte-identical prompts.
    """

    try:
        template = PROMPT_TEMPLATES[schema_id]
    except KeyError:
        raise ValueError(f"Unknown extraction schema: {schema_id!r}") from None

    if schema_id != "activity":
        # Onboarding has no known-clients slot.
        return template

    names = normalize_entity_names(known_entities)
    return template.replace(
        "{known_entities}",
        ", ".join(names) if names else NO_KNOWN_ENTITIES,
    )


__all__ = [
    "NO_KNOWN_ENTITIES",
    "PROMPT_TEMPLATES",
    "SchemaId",
    "build_system_prompt",
    "normalize_entity_names",
]
