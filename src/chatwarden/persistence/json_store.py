from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from chatwarden.util.logger import get_logger

logger = get_logger("json_store")


class JsonFileStore:
    """Load/save helper shared by the phrase store and the violation ledger.

    ``save`` writes indented JSON to a temporary sibling file and swaps it in
    with :func:`os.replace`, so a crash mid-write leaves the previous file
    intact. ``load`` never raises: a missing file means "start empty" and a
    corrupt one is logged and treated the same way.
    """

    def __init__(self, path: Path | str, log: logging.Logger | None = None) -> None:
        self.path = Path(path)
        self.logger = log or logger

    def save(self, data: Any) -> None:
        """Serialise ``data`` and overwrite the backing file.

        Raises
        ------
        OSError
            The directory or file could not be written.
        TypeError, ValueError
            ``data`` is not JSON serialisable.
        """
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
                tmp_file.write(payload)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

    def load(self) -> Any | None:
        """Return the decoded file contents, or ``None`` if there is nothing usable."""
        try:
            with self.path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            self.logger.debug("[JSON STORE] %s does not exist yet, starting empty", self.path)
        except (OSError, ValueError) as exc:
            self.logger.error("[JSON STORE] Failed to load %s, starting empty: %s", self.path, exc)
        return None
