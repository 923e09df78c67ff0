"""Durable key-value store for settings that outlive a session.

Backed by a single JSON file. Reads happen at mount, writes on every change.
A missing or corrupt file behaves like an empty store.
"""
from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any

from core.config import DEFAULT_MODEL, MODELS, SELECTED_MODEL_KEY

logger = logging.getLogger(__name__)

USER_ID_KEY = 'user-id'


class PreferenceStore:
    def __init__(self, path: Path) -> None:
        self.path = path
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        try:
            if self.path.exists():
                data = json.loads(self.path.read_text())
                if isinstance(data, dict):
                    logger.debug("Loaded preferences from %s", self.path)
                    return data
                logger.debug("Ignoring non-object preferences in %s", self.path)
            else:
                logger.debug("Preferences file not found at %s; using defaults", self.path)
        except (OSError, ValueError):
            logger.debug("Failed to read preferences from %s; using defaults", self.path)
        return {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self.path.write_text(json.dumps(self._data, indent=2))
        except OSError:
            logger.debug("Failed to save preferences to %s", self.path)

    def selected_model(self) -> str:
        model = self.get(SELECTED_MODEL_KEY, DEFAULT_MODEL)
        if model not in MODELS:
            logger.debug("Stored model %r is unknown; falling back to %s", model, DEFAULT_MODEL)
            return DEFAULT_MODEL
        return model

    def remember_model(self, model_id: str) -> None:
        self.set(SELECTED_MODEL_KEY, model_id)

    def user_id(self) -> str:
        """Stable anonymous id for this install, created on first use."""
        uid = self.get(USER_ID_KEY)
        if not isinstance(uid, str) or not uid:
            uid = str(uuid.uuid4())
            self.set(USER_ID_KEY, uid)
        return uid
