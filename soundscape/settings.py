"""Persisted AssistantMode - JSON file, defaults fill missing keys."""

import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Optional, Union

from soundscape.config import SETTINGS_PATH
from soundscape.models import AssistantMode

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = AssistantMode()

_FIELD_NAMES = {f.name for f in fields(AssistantMode)}


class SettingsStore:
    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else SETTINGS_PATH

    def load(self) -> AssistantMode:
        if not self.path.exists():
            return DEFAULT_SETTINGS
        try:
            stored = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(stored, dict):
                raise ValueError("settings file is not a JSON object")
            known = {k: v for k, v in stored.items() if k in _FIELD_NAMES}
            return AssistantMode(**{**asdict(DEFAULT_SETTINGS), **known})
        except (OSError, ValueError, TypeError) as e:
            logger.error("Error loading settings: %s", e)
            return DEFAULT_SETTINGS

    def save(self, mode: AssistantMode) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(asdict(mode), indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("Error saving settings: %s", e)

    def reset(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Error resetting settings: %s", e)
