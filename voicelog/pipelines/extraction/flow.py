"""State machine and stage map for the extraction pipeline.

Every request walks the same ordered states:

1. ``decoding`` – turn the base64 payload into audio bytes (audio only).
2. ``transcribing`` – send the audio to Whisper and read back text (audio only).
3. ``prompting`` – render the schema-specific system prompt.
4. ``extracting`` – run the JSON-mode completion and validate the record.

Text input starts directly at ``prompting``. Any stage can move the run
to ``failed``; ``done`` and ``failed`` are terminal.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

logger = logging.getLogger("voicelog.pipeline")


class PipelineState(str, Enum):
    IDLE = "idle"
    DECODING = "decoding"
    TRANSCRIBING = "transcribing"
    PROMPTING = "prompting"
    EXTRACTING = "extracting"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({PipelineState.DONE, PipelineState.FAILED})

_ORDER = (
    PipelineState.IDLE,
    PipelineState.DECODING,
    PipelineState.TRANSCRIBING,
    PipelineState.PROMPTING,
    PipelineState.EXTRACTING,
    PipelineState.DONE,
)


@dataclass(frozen=True)
class PipelineStage:
    """Human-readable description of one stage in the extraction pipeline."""

    order: int
    state: PipelineState
    module: str
    summary: str
    audio_only: bool = False


class ExtractionPipeline:
    """Utility wrapper for documenting the extraction flow."""

    _STAGES: List[PipelineStage] = [
        PipelineStage(
            1,
            PipelineState.DECODING,
            "voicelog.pipelines.extraction.ingestion",
            "Validate the format tag and decode the base64 audio payload.",
            audio_only=True,
        ),
        PipelineStage(
            2,
            PipelineState.TRANSCRIBING,
            "voicelog.services.transcribe",
            "Upload the audio to the Whisper transcription endpoint.",
            audio_only=True,
        ),
        PipelineStage(
            3,
            PipelineState.PROMPTING,
            "voicelog.pipelines.extraction.prompts",
            "Render the schema-specific system prompt with known clients.",
        ),
        PipelineStage(
            4,
            PipelineState.EXTRACTING,
            "voicelog.services.llm_client",
            "Call the JSON-mode completion and validate the record contract.",
        ),
    ]

    @classmethod
    def describe(cls, *, audio: bool = True) -> Iterable[PipelineStage]:
        """Expose the ordered list of stages for debugging and documentation."""

        return tuple(stage for stage in cls._STAGES if audio or not stage.audio_only)


class InvalidTransition(RuntimeError):
    """Raised when a run tries to move backwards or leave a terminal state."""


@dataclass
class PipelineRun:
    """Tracks the state of a single pipeline invocation."""

    pipeline: str
    state: PipelineState = PipelineState.IDLE
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.IDLE])

    def advance(self, target: PipelineState) -> None:
        if self.state in TERMINAL_STATES:
            raise InvalidTransition(f"{self.pipeline} run already {self.state.value}")
        if target is not PipelineState.FAILED and _ORDER.index(target) <= _ORDER.index(self.state):
            raise InvalidTransition(
                f"{self.pipeline} cannot move from {self.state.value} to {target.value}"
            )
        logger.debug("%s: %s -> %s", self.pipeline, self.state.value, target.value)
        self.state = target
        self.history.append(target)

    def fail(self) -> PipelineState:
        """Move to ``failed`` and return the state the error happened in."""

        failed_in = self.state
        self.advance(PipelineState.FAILED)
        return failed_in


__all__ = [
    "ExtractionPipeline",
    "InvalidTransition",
    "PipelineRun",
    "PipelineStage",
    "PipelineState",
    "TERMINAL_STATES",
]
