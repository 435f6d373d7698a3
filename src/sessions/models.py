"""Record types returned by the session store."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

RecordStatus = Literal["in_progress", "completed"]


@dataclass(frozen=True)
class SessionRecord:
    id: str
    cycle_duration_minutes: int
    break_duration_minutes: int
    total_cycles: int
    status: RecordStatus
    started_at: str
    preparation_answers: dict[str, Any] = field(default_factory=dict)
    completed_at: Optional[str] = None
    debrief_answers: Optional[dict[str, Any]] = None

    @property
    def cycle_duration_seconds(self) -> int:
        return self.cycle_duration_minutes * 60

    @property
    def break_duration_seconds(self) -> int:
        return self.break_duration_minutes * 60


@dataclass(frozen=True)
class CycleRecord:
    id: str
    session_id: str
    cycle_number: int
    status: RecordStatus
    scheduled_start_time: str
    actual_end_time: Optional[str] = None
    plan: Optional[dict[str, Any]] = None
    review: Optional[dict[str, Any]] = None

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED
