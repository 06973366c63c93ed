"""Application state: the one object a front end holds.

HueState wires the registry, synchroniser, discovery and pairing engines
to a shared update queue and executor, and re-publishes their change
notifications to its own observers.
"""

import socket
from concurrent.futures import Executor, Future, ThreadPoolExecutor

import requests

from core.config import KeyValueStore, load_settings
from core.discovery import BridgeDiscovery
from core.dispatch import Observable, UpdateQueue
from core.errors import HueError, LinkButtonNotPressed, describe_error
from core.pairing import PairingEngine, PairingResult
from core.registry import BridgeRegistry
from core.sync import StateSynchronizer, make_transport_factory
from core.transport import TransportPolicy

PAIRING_IDLE = 'idle'
PAIRING = 'pairing'
WAITING_FOR_BUTTON = 'waiting_for_button'
PAIRED = 'paired'
PAIRING_FAILED = 'failed'


class HueState(Observable):
    """Owns all bridge-derived state for one front end.

    Args:
        store: Key-value store holding bridge configurations and settings
        settings: Overrides individual settings loaded from store
        executor: Runs network I/O; a thread pool is created if omitted
        session: requests session shared by discovery and pairing; one is
            created and closed with the state if omitted
        transport_factory: Builds a transport for a BridgeConfig
        policy: Connection trust policy for all HTTP traffic
        socket_factory: Socket constructor for SSDP discovery
    """

    def __init__(self, store: KeyValueStore, settings: dict | None = None,
                 executor: Executor | None = None, session: requests.Session | None = None,
                 transport_factory=None, policy: TransportPolicy | None = None,
                 socket_factory=socket.socket):
        super().__init__()
        self.settings = {**load_settings(store), **(settings or {})}
        self.updates = UpdateQueue()
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix='huetrek')
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.policy = policy or TransportPolicy(verify=self.settings['verify_tls'])

        self.registry = BridgeRegistry(store, demo_fallback=self.settings['demo_fallback'])
        self.sync = StateSynchronizer(
            self.registry, self.updates, self.executor,
            transport_factory or make_transport_factory(self.settings, self.policy),
            self.settings,
        )
        self.discovery = BridgeDiscovery(self.updates, self.executor, self.session,
                                         self.settings, self.policy, socket_factory)
        self.pairing = PairingEngine(self.session, self.settings['device_type'],
                                     self.settings['pairing_timeout'], self.policy)

        self.pairing_status = PAIRING_IDLE
        self.pairing_error: str | None = None

        for component in (self.registry, self.sync, self.discovery):
            component.subscribe(self.notify)

    # Discovery

    def start_discovery(self) -> Future:
        return self.discovery.start()

    def cancel_discovery(self):
        self.discovery.cancel()

    # Pairing

    def start_pairing(self, address: str | None = None, name: str | None = None) -> Future:
        """Send one pairing request; on success the bridge is added and selected.

        Args:
            address: Bridge address, defaults to the last discovered one
            name: Display name, defaults to "Bridge N"

        Raises:
            ValueError: no address given and nothing discovered yet
        """
        address = address or self.discovery.address
        if not address:
            raise ValueError("No bridge address to pair with, run discovery first")
        self._set_pairing(PAIRING, None)
        return self.executor.submit(self._pair_job, address, name)

    def _pair_job(self, address: str, name: str | None) -> PairingResult | None:
        try:
            result = self.pairing.pair(address)
        except HueError as e:
            self.updates.post(self._pairing_failed, e)
            return None
        self.updates.post(self._paired, result, name)
        return result

    def _paired(self, result: PairingResult, name: str | None):
        self.registry.add(result.to_config(name or self.registry.next_default_name()))
        self._set_pairing(PAIRED, None)

    def _pairing_failed(self, error: HueError):
        status = WAITING_FOR_BUTTON if isinstance(error, LinkButtonNotPressed) else PAIRING_FAILED
        self._set_pairing(status, describe_error(error, 'pairing'))

    def _set_pairing(self, status: str, error: str | None):
        self.pairing_status = status
        self.pairing_error = error
        self.notify('pairing')

    # Bridges

    def switch_bridge(self, config_id: str):
        """Select a bridge and fetch its state.

        Re-selecting the current bridge refreshes it.
        """
        previous = self.registry.current_id
        self.registry.switch(config_id)
        if previous == config_id:
            self.sync.fetch_all()

    # Update context

    def wait(self, future: Future, timeout: float | None = None):
        """Apply updates until future completes and return its result."""
        return self.updates.wait(future, timeout)

    def wait_all(self, futures: list[Future], timeout: float | None = None):
        return [self.wait(future, timeout) for future in futures]

    def close(self):
        self.discovery.cancel()
        self.sync.close()
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
