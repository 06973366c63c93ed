"""Configuration management and the persistent key-value store.

This module handles:
- Locating and loading/saving the JSON configuration file
- Client settings (device type, timeouts, polling) with defaults
- MemoryStore for tests and embedding
"""

import json
import os
from pathlib import Path
from typing import Any, Protocol

import click

# Configuration file path, overridable with HUETREK_CONFIG
CONFIG_FILE = Path(os.getenv('HUETREK_CONFIG', Path.home() / '.huetrek' / 'config.json'))

SETTINGS_KEY = 'settings'

DEFAULT_SETTINGS = {
    'device_type': 'huetrek#python',
    'discovery_url': 'https://discovery.meethue.com/',
    'discovery_timeout': 5.0,
    'request_timeout': 5.0,
    'pairing_timeout': 35.0,
    'poll_interval': 10.0,
    'verify_tls': True,
    'demo_fallback': False,
}


class KeyValueStore(Protocol):
    """Storage collaborator used by the bridge registry."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...


class MemoryStore:
    """In-process store; contents are lost when the process exits."""

    def __init__(self, data: dict | None = None):
        self.data = dict(data or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value


class JsonFileStore:
    """Key-value store backed by a JSON file.

    Every set() rewrites the whole file with user-only permissions, since
    the file holds bridge credentials.
    """

    def __init__(self, path: Path = CONFIG_FILE):
        self.path = Path(path)
        self.data = self._load()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            click.echo(f"Warning: Failed to load config from {self.path}: {e}", err=True)
            return {}
        if not isinstance(data, dict):
            click.echo(f"Warning: Ignoring malformed config in {self.path}", err=True)
            return {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.data[key] = value
        self.save()

    def save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.path, 'w') as f:
            json.dump(self.data, f, indent=2)

        os.chmod(self.path, 0o600)


def load_settings(store: KeyValueStore) -> dict:
    """Return settings from the store merged over DEFAULT_SETTINGS.

    Unknown keys in the stored settings are ignored.
    """
    settings = dict(DEFAULT_SETTINGS)
    stored = store.get(SETTINGS_KEY) or {}
    if isinstance(stored, dict):
        settings.update({k: v for k, v in stored.items() if k in DEFAULT_SETTINGS})
    return settings


def save_setting(store: KeyValueStore, key: str, value: Any):
    """Persist a single setting.

    Raises:
        KeyError: key is not a known setting
    """
    if key not in DEFAULT_SETTINGS:
        raise KeyError(key)
    stored = dict(store.get(SETTINGS_KEY) or {})
    stored[key] = value
    store.set(SETTINGS_KEY, stored)
