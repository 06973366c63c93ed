"""Known bridges and the current selection.

The registry persists the full list of bridge configurations and the
current bridge id to a key-value store after every change.
"""

import click
from pydantic import ValidationError

from core.config import KeyValueStore
from core.dispatch import Observable
from models.types import DEMO_BRIDGE, BridgeConfig

CONFIGS_KEY = 'bridge_configurations'
CURRENT_KEY = 'current_bridge_id'


class BridgeRegistry(Observable):
    """Ordered set of BridgeConfig with at most one current entry.

    The stored current id always names an entry in the set. With
    demo_fallback enabled, ``current`` reports DEMO_BRIDGE whenever no real
    bridge is selected.

    Observers are notified with topic 'registry'.
    """

    def __init__(self, store: KeyValueStore, demo_fallback: bool = False):
        super().__init__()
        self.store = store
        self.demo_fallback = demo_fallback
        self._configs: list[BridgeConfig] = self._load_configs()

        current_id = store.get(CURRENT_KEY)
        self._current_id: str | None = current_id if self.get(current_id) else None

    def _load_configs(self) -> list[BridgeConfig]:
        configs = []
        for raw in self.store.get(CONFIGS_KEY) or []:
            try:
                configs.append(BridgeConfig.model_validate(raw))
            except ValidationError as e:
                click.echo(f"Warning: Ignoring invalid bridge configuration: {e}", err=True)
        return configs

    @property
    def configs(self) -> list[BridgeConfig]:
        return list(self._configs)

    @property
    def current(self) -> BridgeConfig | None:
        config = self.get(self._current_id)
        if config is None and self.demo_fallback:
            return DEMO_BRIDGE
        return config

    @property
    def current_id(self) -> str | None:
        return self._current_id

    def get(self, config_id: str | None) -> BridgeConfig | None:
        if config_id is None:
            return None
        for config in self._configs:
            if config.id == config_id:
                return config
        return None

    def _require(self, config_id: str) -> int:
        for index, config in enumerate(self._configs):
            if config.id == config_id:
                return index
        raise KeyError(config_id)

    def add(self, config: BridgeConfig) -> BridgeConfig:
        """Append config and make it current.

        Raises:
            ValueError: a config with the same id already exists
        """
        if config.is_demo or self.get(config.id):
            raise ValueError(f"Bridge configuration {config.id} already exists")
        self._configs.append(config)
        self._current_id = config.id
        self._persist()
        return config

    def create(self, name: str, address: str, credential: str) -> BridgeConfig:
        """Build a new config (for manual entry) and add it."""
        return self.add(BridgeConfig(name=name, address=address, credential=credential))

    def next_default_name(self) -> str:
        return f"Bridge {len(self._configs) + 1}"

    def rename(self, config_id: str, name: str) -> BridgeConfig:
        index = self._require(config_id)
        self._configs[index] = self._configs[index].model_copy(update={'name': name})
        self._persist()
        return self._configs[index]

    def remove(self, config_id: str):
        """Remove a config. If it was current, the first remaining one takes over."""
        index = self._require(config_id)
        del self._configs[index]
        if self._current_id == config_id:
            self._current_id = self._configs[0].id if self._configs else None
        self._persist()

    def switch(self, config_id: str) -> BridgeConfig:
        index = self._require(config_id)
        self._current_id = config_id
        self._persist()
        return self._configs[index]

    def _persist(self):
        self.store.set(CONFIGS_KEY, [config.model_dump() for config in self._configs])
        self.store.set(CURRENT_KEY, self._current_id)
        self.notify('registry')
