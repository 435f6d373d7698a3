"""Validated form payloads for session preparation, cycle plan/review, and debrief."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal, Mapping, Optional

from .errors import ValidationError

Level = Literal["high", "medium", "low"]

_LEVELS = ("high", "medium", "low")
_REQUIRED = "Required"

MAX_DURATION_MINUTES = 24 * 60
MAX_TOTAL_CYCLES = 100


@dataclass(frozen=True)
class SessionPreparation:
    """Session settings plus the six preparation questions."""
    cycle_duration_minutes: int
    break_duration_minutes: int
    total_cycles: int
    accomplish: str
    importance: str
    completion: str
    concrete: str
    hazards: Optional[str] = None
    noteworthy: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SessionPreparation":
        form = _Form(payload)
        values = cls(
            cycle_duration_minutes=form.positive_int("cycle_duration_minutes", MAX_DURATION_MINUTES),
            break_duration_minutes=form.positive_int("break_duration_minutes", MAX_DURATION_MINUTES),
            total_cycles=form.positive_int("total_cycles", MAX_TOTAL_CYCLES),
            accomplish=form.required_text("accomplish"),
            importance=form.required_text("importance"),
            completion=form.required_text("completion"),
            concrete=form.required_text("concrete"),
            hazards=form.optional_text("hazards"),
            noteworthy=form.optional_text("noteworthy"),
        )
        form.raise_for_errors()
        return values

    def answers(self) -> dict[str, Optional[str]]:
        return {
            "accomplish": self.accomplish,
            "importance": self.importance,
            "completion": self.completion,
            "hazards": self.hazards,
            "concrete": self.concrete,
            "noteworthy": self.noteworthy,
        }


@dataclass(frozen=True)
class CyclePlan:
    goal: str
    how_to_start: str
    energy_level: Level
    morale_level: Level
    hazards: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CyclePlan":
        form = _Form(payload)
        values = cls(
            goal=form.required_text("goal"),
            how_to_start=form.required_text("how_to_start"),
            energy_level=form.level("energy_level"),
            morale_level=form.level("morale_level"),
            hazards=form.optional_text("hazards"),
        )
        form.raise_for_errors()
        return values

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CycleReview:
    completed_target: bool
    noteworthy: Optional[str] = None
    distractions: Optional[str] = None
    improvements: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CycleReview":
        form = _Form(payload)
        values = cls(
            completed_target=form.boolean("completed_target"),
            noteworthy=form.optional_text("noteworthy"),
            distractions=form.optional_text("distractions"),
            improvements=form.optional_text("improvements"),
        )
        form.raise_for_errors()
        return values

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SessionDebrief:
    done: str
    compare: str
    bogged: str
    went_well: str
    takeaways: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "SessionDebrief":
        form = _Form(payload)
        values = cls(
            done=form.required_text("done"),
            compare=form.required_text("compare"),
            bogged=form.required_text("bogged"),
            went_well=form.required_text("went_well"),
            takeaways=form.optional_text("takeaways"),
        )
        form.raise_for_errors()
        return values

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class _Form:
    """Collects per-field errors so a submission reports every problem at once."""

    def __init__(self, payload: Mapping[str, Any]):
        if not isinstance(payload, Mapping):
            raise ValidationError({"__root__": "Expected an object"})
        self._payload = payload
        self._errors: dict[str, str] = {}

    def raise_for_errors(self) -> None:
        if self._errors:
            raise ValidationError(self._errors)

    def required_text(self, field: str) -> str:
        value = self._payload.get(field)
        if not isinstance(value, str) or not value.strip():
            self._errors[field] = _REQUIRED
            return ""
        return value.strip()

    def optional_text(self, field: str) -> Optional[str]:
        value = self._payload.get(field)
        if value is None:
            return None
        if not isinstance(value, str):
            self._errors[field] = "Must be text"
            return None
        return value.strip() or None

    def positive_int(self, field: str, maximum: int) -> int:
        value = self._payload.get(field)
        if isinstance(value, bool):
            value = None
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError:
                value = None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            self._errors[field] = "Must be a whole number"
            return 0
        if value < 1:
            self._errors[field] = "Must be at least 1"
        elif value > maximum:
            self._errors[field] = f"Must be at most {maximum}"
            return 0
        return value

    def boolean(self, field: str) -> bool:
        value = self._payload.get(field)
        if not isinstance(value, bool):
            self._errors[field] = "Must be true or false"
            return False
        return value

    def level(self, field: str) -> Level:
        value = self._payload.get(field)
        if isinstance(value, str):
            value = value.strip().lower()
        if value not in _LEVELS:
            self._errors[field] = f"Must be one of: {', '.join(_LEVELS)}"
            return "medium"
        return value  # type: ignore[return-value]
