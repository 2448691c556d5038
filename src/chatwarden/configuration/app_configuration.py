from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict, Optional
import yaml

from chatwarden.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The mapping is cached on construction and on :meth:`reload`. A missing or
    malformed file yields an empty mapping, so every property falls back to
    its default.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = Path(config_path)
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                try:
                    data = yaml.safe_load(f)
                finally:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.error("[APP CONFIGURATION] Config %s is not a mapping, ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, name: str) -> Dict[str, Any]:
        value = self._data.get(name, {})
        return value if isinstance(value, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Re-read the YAML file, replace the cache and return it."""
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    # --------------------------
    # Storage
    # --------------------------
    @property
    def data_dir(self) -> Path:
        """Directory holding the blacklist and violation files. Relative paths resolve against the config file."""
        raw = self._section("storage").get("data_dir") or "data"
        path = Path(str(raw))
        return path if path.is_absolute() else (self.config_path.parent.parent / path).resolve()

    @property
    def phrases_path(self) -> Path:
        return self.data_dir / str(self._section("storage").get("phrases_file") or "blacklist.json")

    @property
    def violations_path(self) -> Path:
        return self.data_dir / str(self._section("storage").get("violations_file") or "violations.json")

    # --------------------------
    # Moderation
    # --------------------------
    @property
    def admin_channel_id(self) -> Optional[int]:
        """Admin/audit channel id, or None when audit messages only go to the log."""
        value = self._section("moderation").get("admin_channel_id")
        try:
            return int(value) if value not in (None, "") else None
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid admin_channel_id %r, ignoring it.", value)
            return None

    @property
    def command_prefix(self) -> str:
        return str(self._section("moderation").get("command_prefix", "/") or "")

    @property
    def ban_threshold(self) -> int:
        """Violation count that triggers a ban. Default is 2 (warn once, then ban)."""
        try:
            return max(1, int(self._section("moderation").get("ban_threshold", 2)))
        except (TypeError, ValueError):
            return 2

    @property
    def warning_delete_delay(self) -> float:
        """Seconds before a public warning is deleted again. Default is 5."""
        try:
            return float(self._section("moderation").get("warning_delete_delay_seconds", 5.0))
        except (TypeError, ValueError):
            return 5.0

