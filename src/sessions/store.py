"""SQLite persistence for sessions, cycles, plans, and reviews.

Schema changes are listed in ``MIGRATIONS``; applied versions are tracked in
``schema_migrations`` so ``init_db`` can run on every startup.
"""

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from .errors import PersistenceError, SessionNotFoundError
from .models import STATUS_COMPLETED, STATUS_IN_PROGRESS, CycleRecord, SessionRecord
from .schemas import CyclePlan, CycleReview, SessionDebrief, SessionPreparation

# Integers outside SQLite's 64-bit range raise OverflowError rather than sqlite3.Error.
_DATABASE_ERRORS = (sqlite3.Error, OverflowError, ValueError)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class StoreConfig:
    path: Path
    pragmas: tuple[tuple[str, str | int], ...] = (
        ("journal_mode", "WAL"),
        ("foreign_keys", 1),
        ("synchronous", "NORMAL"),
    )


class SessionStore:
    def __init__(
        self,
        config: StoreConfig,
        *,
        clock: Callable[[], str] = _utc_now,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._clock = clock
        self._logger = logger or logging.getLogger("sessions.store")
        self._conn: Optional[sqlite3.Connection] = None

    # --- Connection & migrations -------------------------------------------
    def connect(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._config.path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(self._config.path)
                conn.row_factory = sqlite3.Row
                for key, value in self._config.pragmas:
                    conn.execute(f"PRAGMA {key}={value}")
            except (OSError, sqlite3.Error) as error:
                raise PersistenceError(
                    f"Failed to open session database {self._config.path}: {error}"
                ) from error
            self._conn = conn
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def init_db(self) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_migrations (
                    version INTEGER PRIMARY KEY,
                    applied_at TEXT NOT NULL
                )
                """
            )
        applied = {
            row["version"]
            for row in self._query_all("SELECT version FROM schema_migrations")
        }
        for version, migration in enumerate(MIGRATIONS, start=1):
            if version in applied:
                continue
            with self._transaction() as conn:
                migration(conn)
                conn.execute(
                    "INSERT INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                    (version, self._clock()),
                )
            self._logger.info("Applied session schema migration %d", version)

    # --- Sessions -----------------------------------------------------------
    def create_session(self, preparation: SessionPreparation) -> SessionRecord:
        session_id = _new_id()
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO sessions (
                    id, cycle_duration_minutes, break_duration_minutes,
                    total_cycles, status, started_at, preparation_answers
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session_id,
                    preparation.cycle_duration_minutes,
                    preparation.break_duration_minutes,
                    preparation.total_cycles,
                    STATUS_IN_PROGRESS,
                    self._clock(),
                    json.dumps(preparation.answers()),
                ),
            )
        session = self.get_session(session_id)
        if session is None:
            raise PersistenceError(f"Session {session_id} was not stored")
        return session

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        row = self._query_one("SELECT * FROM sessions WHERE id=?", (session_id,))
        if row is None:
            return None
        return SessionRecord(
            id=row["id"],
            cycle_duration_minutes=row["cycle_duration_minutes"],
            break_duration_minutes=row["break_duration_minutes"],
            total_cycles=row["total_cycles"],
            status=row["status"],
            started_at=row["started_at"],
            preparation_answers=_load_json(row["preparation_answers"]) or {},
            completed_at=row["completed_at"],
            debrief_answers=_load_json(row["debrief_answers"]),
        )

    def complete_session(self, session_id: str, debrief: SessionDebrief) -> None:
        with self._transaction() as conn:
            cur = conn.execute(
                """
                UPDATE sessions
                SET status=?, completed_at=?, debrief_answers=?
                WHERE id=?
                """,
                (
                    STATUS_COMPLETED,
                    self._clock(),
                    json.dumps(debrief.to_dict()),
                    session_id,
                ),
            )
            if cur.rowcount == 0:
                raise SessionNotFoundError(f"Unknown session: {session_id}")

    # --- Cycles -------------------------------------------------------------
    def get_cycle(self, session_id: str, cycle_number: int) -> Optional[CycleRecord]:
        row = self._query_one(
            "SELECT * FROM cycles WHERE session_id=? AND cycle_number=?",
            (session_id, cycle_number),
        )
        return self._cycle_from_row(row) if row is not None else None

    def save_cycle_plan(self, session_id: str, cycle_number: int, plan: CyclePlan) -> str:
        """Create the cycle with its plan, or update the plan of an existing cycle."""
        with self._transaction() as conn:
            if conn.execute(
                "SELECT 1 FROM sessions WHERE id=?", (session_id,)
            ).fetchone() is None:
                raise SessionNotFoundError(f"Unknown session: {session_id}")

            row = conn.execute(
                "SELECT id FROM cycles WHERE session_id=? AND cycle_number=?",
                (session_id, cycle_number),
            ).fetchone()
            if row is not None:
                cycle_id = row["id"]
            else:
                cycle_id = _new_id()
                conn.execute(
                    """
                    INSERT INTO cycles (
                        id, session_id, cycle_number, status, scheduled_start_time
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (cycle_id, session_id, cycle_number, STATUS_IN_PROGRESS, self._clock()),
                )
            conn.execute(
                """
                INSERT INTO cycle_plans (
                    cycle_id, goal, how_to_start, hazards, energy_level, morale_level
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(cycle_id) DO UPDATE SET
                    goal=excluded.goal,
                    how_to_start=excluded.how_to_start,
                    hazards=excluded.hazards,
                    energy_level=excluded.energy_level,
                    morale_level=excluded.morale_level
                """,
                (
                    cycle_id,
                    plan.goal,
                    plan.how_to_start,
                    plan.hazards,
                    plan.energy_level,
                    plan.morale_level,
                ),
            )
        return cycle_id

    def save_cycle_review(self, cycle_id: str, review: CycleReview) -> None:
        """Store the review and mark its cycle completed in one transaction."""
        with self._transaction() as conn:
            cur = conn.execute(
                "UPDATE cycles SET status=?, actual_end_time=? WHERE id=?",
                (STATUS_COMPLETED, self._clock(), cycle_id),
            )
            if cur.rowcount == 0:
                raise SessionNotFoundError(f"Unknown cycle: {cycle_id}")
            conn.execute(
                """
                INSERT INTO cycle_reviews (
                    cycle_id, completed_target, noteworthy, distractions, improvements
                ) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(cycle_id) DO UPDATE SET
                    completed_target=excluded.completed_target,
                    noteworthy=excluded.noteworthy,
                    distractions=excluded.distractions,
                    improvements=excluded.improvements
                """,
                (
                    cycle_id,
                    int(review.completed_target),
                    review.noteworthy,
                    review.distractions,
                    review.improvements,
                ),
            )

    # --- Internal -----------------------------------------------------------
    def _cycle_from_row(self, row: sqlite3.Row) -> CycleRecord:
        plan_row = self._query_one(
            "SELECT goal, how_to_start, hazards, energy_level, morale_level "
            "FROM cycle_plans WHERE cycle_id=?",
            (row["id"],),
        )
        review_row = self._query_one(
            "SELECT completed_target, noteworthy, distractions, improvements "
            "FROM cycle_reviews WHERE cycle_id=?",
            (row["id"],),
        )
        review = dict(review_row) if review_row is not None else None
        if review is not None:
            review["completed_target"] = bool(review["completed_target"])
        return CycleRecord(
            id=row["id"],
            session_id=row["session_id"],
            cycle_number=row["cycle_number"],
            status=row["status"],
            scheduled_start_time=row["scheduled_start_time"],
            actual_end_time=row["actual_end_time"],
            plan=dict(plan_row) if plan_row is not None else None,
            review=review,
        )

    @contextlib.contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self.connect()
        try:
            with conn:
                yield conn
        except _DATABASE_ERRORS as error:
            raise PersistenceError(f"Session database error: {error}") from error

    def _query_one(self, sql: str, params: tuple[Any, ...] = ()) -> Optional[sqlite3.Row]:
        try:
            return self.connect().execute(sql, params).fetchone()
        except _DATABASE_ERRORS as error:
            raise PersistenceError(f"Session database error: {error}") from error

    def _query_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[sqlite3.Row]:
        try:
            return self.connect().execute(sql, params).fetchall()
        except _DATABASE_ERRORS as error:
            raise PersistenceError(f"Session database error: {error}") from error


def _load_json(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    return json.loads(raw)


# --- Migration definitions --------------------------------------------------

def migration_001_create_session_tables(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE sessions (
            id TEXT PRIMARY KEY,
            cycle_duration_minutes INTEGER NOT NULL,
            break_duration_minutes INTEGER NOT NULL,
            total_cycles INTEGER NOT NULL,
            status TEXT NOT NULL,
            started_at TEXT NOT NULL,
            completed_at TEXT,
            preparation_answers TEXT,
            debrief_answers TEXT
        );

        CREATE TABLE cycles (
            id TEXT PRIMARY KEY,
            session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
            cycle_number INTEGER NOT NULL,
            status TEXT NOT NULL,
            scheduled_start_time TEXT NOT NULL,
            actual_end_time TEXT,
            UNIQUE(session_id, cycle_number)
        );

        CREATE TABLE cycle_plans (
            cycle_id TEXT PRIMARY KEY REFERENCES cycles(id) ON DELETE CASCADE,
            goal TEXT NOT NULL,
            how_to_start TEXT NOT NULL,
            hazards TEXT,
            energy_level TEXT NOT NULL,
            morale_level TEXT NOT NULL
        );

        CREATE TABLE cycle_reviews (
            cycle_id TEXT PRIMARY KEY REFERENCES cycles(id) ON DELETE CASCADE,
            completed_target INTEGER NOT NULL,
            noteworthy TEXT,
            distractions TEXT,
            improvements TEXT
        );
        """
    )


MIGRATIONS: list[Callable[[sqlite3.Connection], None]] = [
    migration_001_create_session_tables,
]
