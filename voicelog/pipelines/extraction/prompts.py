"""Prompt construction stage for the extraction pipeline.

Transforms the transcript + known client names into the request consumed
by the structured extraction client.
"""

from __future__ import annotations

import logging
from typing import Iterable

from voicelog.services.prompt_builder import build_system_prompt, normalize_entity_names

from .types import ExtractionRequest, SchemaDescriptor

logger = logging.getLogger("voicelog.pipeline")


def _truncate(value: str, max_length: int = 240) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def build_extraction_request(
    schema: SchemaDescriptor,
    transcript: str,
    *,
    known_entities: Iterable[str] | None = None,
) -> ExtractionRequest:
    """Assemble the system prompt and metadata for the extraction call."""

    entities = tuple(normalize_entity_names(known_entities))
    system_prompt = build_system_prompt(entities, schema.id)

    logger.info(
        "Prompt generated schema=%s known_entities=%s\nSYSTEM> %s",
        schema.id,
        len(entities),
        _truncate(system_prompt, 500),
    )

    return ExtractionRequest(
        schema=schema,
        transcript=transcript,
        known_entities=entities,
        system_prompt=system_prompt,
    )


__all__ = ["build_extraction_request"]
