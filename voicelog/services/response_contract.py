"""Pydantic models for validating extraction JSON returned by the LLM.

Both pipelines run the model output through these schemas so downstream
code receives normalized, type-safe records. Optional facts the model left
out, or filled with the wrong type, become ``None``; required fields and
enum members are strict and surface as a failed ``ContractResult``.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Generic, List, Literal, Optional, TypeVar, Union, get_args

from pydantic import BaseModel, Field, ValidationError, field_validator

ActivityType = Literal["meeting", "call", "email", "work", "admin", "networking", "other"]
BusinessType = Literal[
    "consultant",
    "fractional_executive",
    "advisor",
    "agency",
    "freelancer",
    "other",
]
ClientType = Literal["retainer", "project", "advisory"]

ACTIVITY_TYPES: tuple[str, ...] = get_args(ActivityType)
BUSINESS_TYPES: tuple[str, ...] = get_args(BusinessType)
CLIENT_TYPES: tuple[str, ...] = get_args(ClientType)

MAX_CHALLENGES = 3

Number = Union[int, float]


def _coerce_number(value: Any) -> Number | None:
    """Return a finite number, parsing strings like ``"$1,200"``; otherwise None."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number: float | int = value
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "").replace("$", "").strip()
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None

    if isinstance(number, float):
        if not math.isfinite(number):
            return None
        if number.is_integer() and not isinstance(value, float):
            return int(number)
    return number


_PLACEHOLDERS = frozenset({"", "-", "null", "none", "n/a", "na", "unknown", "not mentioned", "not specified"})


def _coerce_text(value: Any) -> str | None:
    """Return stripped text, treating placeholders such as ``"N/A"`` as missing."""

    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    if cleaned.lower() in _PLACEHOLDERS:
        return None
    return cleaned


def _normalize_choice(value: Any) -> Any:
    """Lower-case enum candidates so ``"Call"`` and ``"fractional executive"`` match."""

    if isinstance(value, str):
        return value.strip().lower().replace("-", "_").replace(" ", "_")
    return value


class ActivityRecord(BaseModel):
    """Structured activity parsed from a voice log."""

    activity_type: ActivityType
    client_name: Optional[str] = None
    duration_minutes: Optional[Number] = None
    revenue: Optional[Number] = None
    summary: str
    notes: Optional[str] = None
    confidence: float

    model_config = {"extra": "ignore"}

    @field_validator("activity_type", mode="before")
    @classmethod
    def normalize_activity_type(cls, value: Any) -> Any:
        return _normalize_choice(value)

    @field_validator("client_name", "notes", mode="before")
    @classmethod
    def coerce_optional_text(cls, value: Any) -> str | None:
        return _coerce_text(value)

    @field_validator("duration_minutes", "revenue", mode="before")
    @classmethod
    def coerce_optional_number(cls, value: Any) -> Number | None:
        return _coerce_number(value)

    @field_validator("summary", mode="before")
    @classmethod
    def strip_summary(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("confidence", mode="before")
    @classmethod
    def normalize_confidence(cls, value: Any) -> float:
        number = _coerce_number(value)
        if number is None:
            raise ValueError("confidence must be a number")
        return max(0.0, min(1.0, float(number)))


class OnboardingClient(BaseModel):
    name: str
    type: Optional[ClientType] = None
    monthly_value: Optional[Number] = None

    model_config = {"extra": "ignore"}

    @field_validator("name", mode="before")
    @classmethod
    def require_name(cls, value: Any) -> str:
        name = _coerce_text(value)
        if name is None:
            raise ValueError("client name is required")
        return name

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return _normalize_choice(value)

    @field_validator("monthly_value", mode="before")
    @classmethod
    def coerce_monthly_value(cls, value: Any) -> Number | None:
        return _coerce_number(value)


class WorkPatterns(BaseModel):
    typical_start_time: Optional[str] = None
    typical_end_time: Optional[str] = None
    busy_days: List[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("typical_start_time", "typical_end_time", mode="before")
    @classmethod
    def coerce_time(cls, value: Any) -> str | None:
        return _coerce_text(value)

    @field_validator("busy_days", mode="before")
    @classmethod
    def dedupe_days(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        days: list[str] = []
        seen: set[str] = set()
        for item in value:
            day = _coerce_text(item)
            if day is None or day.lower() in seen:
                continue
            seen.add(day.lower())
            days.append(day)
        return days


class OnboardingProfile(BaseModel):
    """Business profile parsed from a spoken onboarding introduction."""

    clients: List[OnboardingClient] = Field(default_factory=list)
    revenue_target: Optional[Number] = None
    work_patterns: WorkPatterns = Field(default_factory=WorkPatterns)
    business_type: BusinessType
    target_market: Optional[str] = None
    main_challenges: List[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator("clients", mode="before")
    @classmethod
    def coerce_clients(cls, value: Any) -> Any:
        return value if isinstance(value, (list, tuple)) else []

    @field_validator("revenue_target", mode="before")
    @classmethod
    def coerce_revenue_target(cls, value: Any) -> Number | None:
        return _coerce_number(value)

    @field_validator("work_patterns", mode="before")
    @classmethod
    def coerce_work_patterns(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @field_validator("business_type", mode="before")
    @classmethod
    def normalize_business_type(cls, value: Any) -> Any:
        return _normalize_choice(value)

    @field_validator("target_market", mode="before")
    @classmethod
    def coerce_target_market(cls, value: Any) -> str | None:
        return _coerce_text(value)

    @field_validator("main_challenges", mode="before")
    @classmethod
    def cap_challenges(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, (list, tuple)):
            return []
        challenges = [text for text in (_coerce_text(item) for item in value) if text]
        return challenges[:MAX_CHALLENGES]


RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass(frozen=True)
class ContractResult(Generic[RecordT]):
    """Tagged outcome of validating a payload: either ``record`` or ``error``."""

    record: Optional[RecordT] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.record is not None

    @classmethod
    def success(cls, record: RecordT) -> "ContractResult[RecordT]":
        return cls(record=record)

    @classmethod
    def failure(cls, error: str) -> "ContractResult[RecordT]":
        return cls(error=error)


def _summarize_errors(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "payload"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def validate_contract(model: type[RecordT], payload: Any) -> ContractResult[RecordT]:
    """Validate an already-decoded payload against ``model``."""

    if not isinstance(payload, dict):
        return ContractResult.failure(
            f"{model.__name__} payload must be a JSON object"
        )
    try:
        return ContractResult.success(model.model_validate(payload))
    except ValidationError as exc:
        return ContractResult.failure(
            f"{model.__name__} failed validation: {_summarize_errors(exc)}"
        )


def parse_contract(model: type[RecordT], raw: str) -> ContractResult[RecordT]:
    """Decode raw JSON text and validate it against ``model``."""

    try:
        payload = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as exc:
        return ContractResult.failure(f"LLM returned invalid JSON: {exc}")
    return validate_contract(model, payload)


__all__ = [
    "ACTIVITY_TYPES",
    "BUSINESS_TYPES",
    "CLIENT_TYPES",
    "MAX_CHALLENGES",
    "ActivityRecord",
    "ContractResult",
    "OnboardingClient",
    "OnboardingProfile",
    "WorkPatterns",
    "parse_contract",
    "validate_contract",
]
