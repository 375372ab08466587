"""
Runtime settings for notefeed.

Values come from (highest wins):
  - environment variables (NOTEFEED_*)
  - the JSON config file at ~/.config/notefeed/config.json
  - module defaults
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = os.path.expanduser(
    os.getenv("NOTEFEED_CONFIG_DIR") or "~/.config/notefeed"
)
CONFIG_PATH = os.path.join(CONFIG_DIR, "config.json")

NOTES_LIMIT = 16


class DeleteFailurePolicy(str, Enum):
    """What happens to a hidden row when the committed remote delete fails."""

    KEEP_HIDDEN = "keep"
    RESTORE = "restore"


@dataclass(frozen=True)
class Settings:
    url: str = ""
    anon_key: str = ""
    access_token: Optional[str] = None
    bucket: str = "files"
    page_size: int = NOTES_LIMIT
    undo_seconds: float = 4.0
    exit_delay: float = 0.6
    delete_failure: DeleteFailurePolicy = DeleteFailurePolicy.KEEP_HIDDEN

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["delete_failure"] = self.delete_failure.value
        return data

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Settings":
        """Build settings from the config file, then apply env overrides."""
        settings = cls.from_dict(load_config(path))
        return settings.with_env()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        unknown = sorted(set(data) - set(known))
        if unknown:
            LOGGER.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        return cls()._coerced(known)

    def with_env(self) -> "Settings":
        env_map = {
            "url": "NOTEFEED_URL",
            "anon_key": "NOTEFEED_ANON_KEY",
            "access_token": "NOTEFEED_ACCESS_TOKEN",
            "bucket": "NOTEFEED_BUCKET",
            "page_size": "NOTEFEED_PAGE_SIZE",
            "undo_seconds": "NOTEFEED_UNDO_SECONDS",
            "exit_delay": "NOTEFEED_EXIT_DELAY",
            "delete_failure": "NOTEFEED_DELETE_FAILURE",
        }
        overrides = {}
        for field_name, var in env_map.items():
            raw = os.getenv(var)
            if raw is not None and raw.strip() != "":
                overrides[field_name] = raw.strip()
        return self._coerced(overrides)

    def _coerced(self, values: Dict[str, Any]) -> "Settings":
        out: Dict[str, Any] = {}
        for key, value in values.items():
            if key == "page_size":
                value = int(value)
                if value < 2:
                    raise ValueError("page_size must be at least 2")
            elif key in ("undo_seconds", "exit_delay"):
                value = float(value)
                if value < 0:
                    raise ValueError(f"{key} must not be negative")
            elif key == "delete_failure" and not isinstance(
                value, DeleteFailurePolicy
            ):
                value = DeleteFailurePolicy(str(value).strip().lower())
            elif key == "url":
                value = str(value).rstrip("/")
            out[key] = value
        return replace(self, **out)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from file."""
    path = path or CONFIG_PATH
    try:
        if os.path.exists(path):
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        LOGGER.warning("Could not load config file %s: %s", path, exc)
    return {}


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> None:
    """Save configuration to file with owner-only permissions."""
    path = path or CONFIG_PATH
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)
    os.chmod(path, 0o600)
