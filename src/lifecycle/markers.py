"""Per-cycle phase markers that let a reloaded cycle page resume its phase."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Optional

from .constants import CYCLE_PHASES


class MarkerStoreError(Exception):
    """Raised when a phase marker cannot be written."""


def marker_key(session_id: str, cycle_number: int) -> str:
    return f"cycle-{session_id}-{cycle_number}"


class PhaseMarkerStore:
    """Key/value store of ``{"phase": ...}`` records.

    With ``path=None`` markers live only in memory. Otherwise the whole map is
    rewritten to a temp file and renamed over ``path`` on each write.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        logger: Optional[logging.Logger] = None,
    ):
        self._path = path
        self._logger = logger or logging.getLogger("lifecycle.markers")
        self._lock = threading.Lock()
        self._memory: dict[str, dict[str, Any]] = {}

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def read_phase(self, session_id: str, cycle_number: int) -> Optional[str]:
        key = marker_key(session_id, cycle_number)
        with self._lock:
            entries = self._load()
        entry = entries.get(key)
        if entry is None:
            return None
        phase = entry.get("phase") if isinstance(entry, dict) else None
        if phase not in CYCLE_PHASES:
            self._logger.warning("Ignoring unreadable phase marker %s: %r", key, entry)
            return None
        return phase

    def write_phase(self, session_id: str, cycle_number: int, phase: str) -> None:
        if phase not in CYCLE_PHASES:
            raise ValueError(f"Unknown cycle phase: {phase}")
        key = marker_key(session_id, cycle_number)
        with self._lock:
            entries = self._load()
            entries[key] = {"phase": phase}
            self._save(entries)
        self._logger.debug("Phase marker %s -> %s", key, phase)

    def clear(self, session_id: str, cycle_number: int) -> None:
        key = marker_key(session_id, cycle_number)
        with self._lock:
            entries = self._load()
            if entries.pop(key, None) is not None:
                self._save(entries)

    def _load(self) -> dict[str, Any]:
        if self._path is None:
            return dict(self._memory)
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as error:
            self._logger.warning("Failed to read phase markers %s: %s", self._path, error)
            return {}
        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as error:
            self._logger.warning("Phase marker file %s is not valid JSON: %s", self._path, error)
            return {}
        if not isinstance(data, dict):
            self._logger.warning("Phase marker file %s must contain an object", self._path)
            return {}
        return data

    def _save(self, entries: dict[str, Any]) -> None:
        if self._path is None:
            self._memory = dict(entries)
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", dir=self._path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(entries, handle, indent=2, sort_keys=True)
                os.replace(tmp_name, self._path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as error:
            raise MarkerStoreError(
                f"Failed to write phase markers {self._path}: {error}"
            ) from error
