"""Validate-then-persist facade the cycle lifecycle calls at phase boundaries."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from .errors import PersistenceError, SessionNotFoundError
from .models import CycleRecord, SessionRecord
from .schemas import CyclePlan, CycleReview, SessionDebrief, SessionPreparation
from .store import SessionStore


class SessionOrchestrator:
    """Creates, reads, and updates session and cycle records.

    Every write validates its payload first, so a ``ValidationError`` means
    nothing was stored.
    """

    def __init__(self, store: SessionStore, logger: Optional[logging.Logger] = None):
        self._store = store
        self._logger = logger or logging.getLogger("sessions")

    def create_session(self, payload: Mapping[str, Any]) -> SessionRecord:
        preparation = SessionPreparation.from_payload(payload)
        try:
            session = self._store.create_session(preparation)
        except PersistenceError as error:
            self._logger.error("Failed to create session: %s", error)
            raise
        self._logger.info(
            "Session created: id=%s cycles=%d work=%dm break=%dm",
            session.id,
            session.total_cycles,
            session.cycle_duration_minutes,
            session.break_duration_minutes,
        )
        return session

    def get_session(self, session_id: str) -> SessionRecord:
        session = self._store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(f"Unknown session: {session_id}")
        return session

    def get_cycle(self, session_id: str, cycle_number: int) -> Optional[CycleRecord]:
        return self._store.get_cycle(session_id, cycle_number)

    def create_cycle_plan(
        self,
        session_id: str,
        cycle_number: int,
        payload: Mapping[str, Any],
    ) -> str:
        """Save the plan for (session, cycle); repeated saves update in place."""
        plan = CyclePlan.from_payload(payload)
        try:
            cycle_id = self._store.save_cycle_plan(session_id, cycle_number, plan)
        except PersistenceError as error:
            self._logger.error("Failed to save plan: %s", error)
            raise
        self._logger.info(
            "Cycle plan saved: session=%s cycle=%d id=%s",
            session_id,
            cycle_number,
            cycle_id,
        )
        return cycle_id

    def create_cycle_review(self, cycle_id: str, payload: Mapping[str, Any]) -> bool:
        review = CycleReview.from_payload(payload)
        try:
            self._store.save_cycle_review(cycle_id, review)
        except PersistenceError as error:
            self._logger.error("Failed to save review: %s", error)
            raise
        self._logger.info(
            "Cycle review saved: id=%s completed_target=%s",
            cycle_id,
            review.completed_target,
        )
        return True

    def complete_session(self, session_id: str, payload: Mapping[str, Any]) -> bool:
        debrief = SessionDebrief.from_payload(payload)
        try:
            self._store.complete_session(session_id, debrief)
        except PersistenceError as error:
            self._logger.error("Failed to complete session: %s", error)
            raise
        self._logger.info("Session completed: id=%s", session_id)
        return True
