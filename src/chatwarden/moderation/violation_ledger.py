"""
Per-user blacklist violation counters shared by every moderated chat.

A user without an entry has zero violations; clearing removes the entry
instead of storing zero. Counters survive restarts through a JSON file that
maps the user id (as a string) to its count.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from chatwarden.persistence.json_store import JsonFileStore
from chatwarden.persistence.rw_lock import ReadWriteLock
from chatwarden.util.logger import get_logger

logger = get_logger("violation_ledger")


class ViolationLedger:
    """Thread-safe violation counters keyed by user id."""

    def __init__(self, path: Path | str, log: logging.Logger | None = None) -> None:
        self.logger = log or logger
        self.store = JsonFileStore(path, log=self.logger)
        self.lock = ReadWriteLock()
        self.violations: Dict[int, int] = {}
        self.load()

    def load(self) -> None:
        """Replace the in-memory counters with the backing file's contents."""
        data = self.store.load()
        violations: Dict[int, int] = {}

        if data is not None and not isinstance(data, dict):
            self.logger.error("[VIOLATION LEDGER] %s is not a mapping, starting empty", self.store.path)
            data = None

        for raw_user_id, raw_count in (data or {}).items():
            try:
                user_id = int(raw_user_id)
                count = int(raw_count)
            except (TypeError, ValueError):
                self.logger.warning("[VIOLATION LEDGER] Skipping malformed entry %r: %r", raw_user_id, raw_count)
                continue
            if count > 0:
                violations[user_id] = count

        with self.lock.write_locked():
            self.violations = violations
        self.logger.info("[VIOLATION LEDGER] Loaded %d users from %s", len(violations), self.store.path)

    def _persist(self) -> None:
        # Caller holds the write lock.
        try:
            self.store.save({str(user_id): count for user_id, count in self.violations.items()})
        except (OSError, TypeError, ValueError) as exc:
            self.logger.error("[VIOLATION LEDGER] Failed to persist violations to %s: %s", self.store.path, exc)

    def add_violation(self, user_id: int) -> int:
        """Increment the user's counter and return the new value."""
        with self.lock.write_locked():
            count = self.violations.get(user_id, 0) + 1
            self.violations[user_id] = count
            self._persist()
        self.logger.debug("[VIOLATION LEDGER] User %s now has %d violations", user_id, count)
        return count

    def get_violations(self, user_id: int) -> int:
        with self.lock.read_locked():
            return self.violations.get(user_id, 0)

    def clear_violations(self, user_id: int) -> bool:
        """Drop the user's entry; return whether there was one."""
        with self.lock.write_locked():
            if self.violations.pop(user_id, None) is None:
                return False
            self._persist()
        self.logger.debug("[VIOLATION LEDGER] Cleared violations for user %s", user_id)
        return True

    def snapshot(self) -> Dict[int, int]:
        """Copy of all non-zero counters."""
        with self.lock.read_locked():
            return dict(self.violations)
