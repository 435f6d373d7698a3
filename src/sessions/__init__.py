"""Session, cycle, plan, and review records plus their validated orchestrator."""

from .errors import PersistenceError, SessionError, SessionNotFoundError, ValidationError
from .models import (
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    CycleRecord,
    SessionRecord,
)
from .orchestrator import SessionOrchestrator
from .schemas import CyclePlan, CycleReview, SessionDebrief, SessionPreparation
from .store import SessionStore, StoreConfig

__all__ = [
    "STATUS_COMPLETED",
    "STATUS_IN_PROGRESS",
    "CyclePlan",
    "CycleRecord",
    "CycleReview",
    "PersistenceError",
    "SessionDebrief",
    "SessionError",
    "SessionNotFoundError",
    "SessionOrchestrator",
    "SessionPreparation",
    "SessionRecord",
    "SessionStore",
    "StoreConfig",
    "ValidationError",
]
