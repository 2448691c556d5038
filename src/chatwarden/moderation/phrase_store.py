"""
Persistent blacklist of banned phrases.

Matching rules:
- a one-token phrase matches when that token equals a whitespace-delimited
  word of the lower-cased message;
- a longer phrase matches when every token occurs as a substring anywhere in
  the lower-cased message, in any order and without adjacency.

Duplicate phrases are rejected on add. Every accepted mutation is written to
disk while the exclusive lock is held; a failed write is logged and the
in-memory change is kept.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

from chatwarden.datatypes.moderation_datatypes import Phrase, normalize_tokens
from chatwarden.persistence.json_store import JsonFileStore
from chatwarden.persistence.rw_lock import ReadWriteLock
from chatwarden.util.logger import get_logger

logger = get_logger("phrase_store")


class PhraseStore:
    """Insertion-ordered, de-duplicated set of :data:`Phrase` values backed by a JSON file."""

    def __init__(self, path: Path | str, log: logging.Logger | None = None) -> None:
        self.logger = log or logger
        self.store = JsonFileStore(path, log=self.logger)
        self.lock = ReadWriteLock()
        self.phrases: List[Phrase] = []
        self.load()

    # --------------------------
    # Persistence
    # --------------------------
    def load(self) -> None:
        """Replace the in-memory list with the backing file's contents."""
        data = self.store.load()
        phrases: List[Phrase] = []

        raw_phrases = data.get("phrases") if isinstance(data, dict) else None
        if data is not None and not isinstance(raw_phrases, list):
            self.logger.error("[PHRASE STORE] %s has no 'phrases' list, starting empty", self.store.path)
            raw_phrases = None

        for entry in raw_phrases or []:
            if not isinstance(entry, list) or not all(isinstance(token, str) for token in entry):
                self.logger.warning("[PHRASE STORE] Skipping malformed phrase entry %r", entry)
                continue
            phrase = normalize_tokens(entry)
            if phrase and phrase not in phrases:
                phrases.append(phrase)

        with self.lock.write_locked():
            self.phrases = phrases
        self.logger.info("[PHRASE STORE] Loaded %d phrases from %s", len(phrases), self.store.path)

    def _persist(self) -> None:
        # Caller holds the write lock.
        try:
            self.store.save({"phrases": [list(phrase) for phrase in self.phrases]})
        except (OSError, TypeError, ValueError) as exc:
            self.logger.error("[PHRASE STORE] Failed to persist blacklist to %s: %s", self.store.path, exc)

    # --------------------------
    # Public API
    # --------------------------
    def add_phrase(self, tokens: Iterable[str]) -> bool:
        """Add a phrase; return False if it is empty or already stored."""
        phrase = normalize_tokens(tokens)
        if not phrase:
            return False

        with self.lock.write_locked():
            if phrase in self.phrases:
                self.logger.debug("[PHRASE STORE] Ignoring duplicate phrase %r", " ".join(phrase))
                return False
            self.phrases.append(phrase)
            self._persist()

        self.logger.info("[PHRASE STORE] Added phrase %r", " ".join(phrase))
        return True

    def remove_phrase(self, tokens: Iterable[str]) -> bool:
        """Remove the phrase with exactly this token sequence; return whether one was removed."""
        phrase = normalize_tokens(tokens)

        with self.lock.write_locked():
            try:
                self.phrases.remove(phrase)
            except ValueError:
                return False
            self._persist()

        self.logger.info("[PHRASE STORE] Removed phrase %r", " ".join(phrase))
        return True

    def check_message(self, text: str) -> bool:
        """Return True if ``text`` matches any stored phrase."""
        lowered = (text or "").lower()
        words = set(lowered.split())

        with self.lock.read_locked():
            for phrase in self.phrases:
                if len(phrase) == 1:
                    if phrase[0] in words:
                        return True
                elif all(token in lowered for token in phrase):
                    return True
        return False

    def list(self) -> List[Phrase]:
        """Snapshot of the stored phrases in insertion order."""
        with self.lock.read_locked():
            return list(self.phrases)

    def __len__(self) -> int:
        with self.lock.read_locked():
            return len(self.phrases)
