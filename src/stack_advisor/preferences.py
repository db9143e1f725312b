"""User preference storage.

API keys and the last selected model are stored per provider in a simple
key-value store. The store is passed in explicitly so tests can use the
in-memory implementation.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

from .providers import DEFAULT_MODELS, AIProvider

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES_PATH = Path.home() / ".config" / "stack-advisor" / "preferences.json"


class PreferenceStore(Protocol):
    """Minimal string key-value store."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def clear(self, key: str) -> None: ...


class InMemoryPreferenceStore:
    """Preference store held in a dict. Nothing is persisted."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFilePreferenceStore:
    """Preference store backed by a JSON object on disk.

    The whole file is rewritten on every change via a temporary file and
    ``os.replace``, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_PREFERENCES_PATH):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".preferences-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def clear(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


def api_key_name(provider: AIProvider) -> str:
    return f"techstack_api_key_{provider.value}"


def model_key_name(provider: AIProvider) -> str:
    return f"techstack_model_{provider.value}"


class Preferences:
    """Per-provider credentials and model selection on top of a store."""

    def __init__(self, store: PreferenceStore):
        self.store = store

    def get_api_key(self, provider: AIProvider) -> Optional[str]:
        return self.store.get(api_key_name(provider)) or None

    def save_api_key(self, provider: AIProvider, key: str) -> None:
        self.store.set(api_key_name(provider), key.strip())

    def clear_api_key(self, provider: AIProvider) -> None:
        self.store.clear(api_key_name(provider))

    def get_selected_model(self, provider: AIProvider) -> str:
        """Last selected model, or the provider's first default model."""
        return self.store.get(model_key_name(provider)) or DEFAULT_MODELS[provider][0].id

    def save_selected_model(self, provider: AIProvider, model_id: str) -> None:
        self.store.set(model_key_name(provider), model_id)
