"""Bridge discovery on the local network.

Discovery asks the Philips cloud service first and falls back to an SSDP
multicast search when the cloud lookup fails or comes back empty.
BridgeDiscovery wraps that in a cancellable background attempt whose state
is published through the update queue.
"""

import socket
import threading
import time
from concurrent.futures import Executor, Future
from urllib.parse import urlparse

import click
import requests
from pydantic import ValidationError

from core.config import DEFAULT_SETTINGS
from core.dispatch import Observable, UpdateQueue
from core.errors import BridgeNotFound, DecodingError, HueError, TransportError, describe_error
from core.transport import TransportPolicy, request_json
from models.types import DiscoveryResult
from models.wire import DiscoveredBridge

SSDP_ADDRESS = ('239.255.255.250', 1900)
BRIDGE_MARKER = 'IpBridge'
SEARCH_MESSAGE = (
    'M-SEARCH * HTTP/1.1\r\n'
    'HOST: 239.255.255.250:1900\r\n'
    'MAN: "ssdp:discover"\r\n'
    'MX: 2\r\n'
    'ST: ssdp:all\r\n'
    '\r\n'
)

# Longest a receive blocks before checking for cancellation
RECEIVE_SLICE = 0.25

IDLE = 'idle'
DISCOVERING = 'discovering'
FOUND = 'found'
NOT_FOUND = 'not_found'
FAILED = 'failed'


def cloud_lookup(session: requests.Session, url: str = DEFAULT_SETTINGS['discovery_url'],
                 timeout: float = 5.0, policy: TransportPolicy | None = None) -> str | None:
    """Ask the cloud discovery service for a bridge on this network.

    Returns:
        Address of the first bridge listed, or None if the list is empty

    Raises:
        TransportError, NoDataError: service unreachable
        DecodingError: response is not a list of bridge records
    """
    payload = request_json(session, 'GET', url, timeout=timeout, policy=policy)
    if not isinstance(payload, list):
        raise DecodingError(f"Expected a list from {url}, got {type(payload).__name__}")
    try:
        bridges = [DiscoveredBridge.model_validate(item) for item in payload]
    except ValidationError as e:
        raise DecodingError(f"Malformed discovery record: {e}") from e

    return bridges[0].internalipaddress if bridges else None


def parse_ssdp_response(text: str) -> str | None:
    """Extract the bridge host from an SSDP reply.

    Only replies mentioning IpBridge count. The host comes from the URL in
    the LOCATION header.
    """
    if BRIDGE_MARKER not in text:
        return None
    for line in text.splitlines():
        name, sep, value = line.partition(':')
        if sep and name.strip().upper() == 'LOCATION':
            try:
                host = urlparse(value.strip()).hostname
            except ValueError:
                continue
            if host:
                return host
    return None


def ssdp_search(timeout: float = 5.0, cancel: threading.Event | None = None,
                socket_factory=socket.socket) -> str | None:
    """Send one M-SEARCH and wait for a bridge to answer.

    Args:
        timeout: Seconds to listen for replies
        cancel: Event that aborts the search when set
        socket_factory: Socket constructor, replaceable in tests

    Returns:
        Bridge address, or None if nothing answered within timeout

    Raises:
        TransportError: socket failure, or cancelled (``cancelled=True``)
    """
    deadline = time.monotonic() + timeout
    try:
        with socket_factory(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP) as sock:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
            sock.sendto(SEARCH_MESSAGE.encode('utf-8'), SSDP_ADDRESS)

            while True:
                if cancel is not None and cancel.is_set():
                    raise TransportError("Discovery cancelled", cancelled=True)
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                sock.settimeout(min(remaining, RECEIVE_SLICE))
                try:
                    data, _ = sock.recvfrom(65507)
                except socket.timeout:
                    continue
                address = parse_ssdp_response(data.decode('utf-8', errors='replace'))
                if address:
                    return address
    except OSError as e:
        raise TransportError(f"SSDP search failed: {e}") from e


def discover(session: requests.Session, url: str = DEFAULT_SETTINGS['discovery_url'],
             timeout: float = 5.0, cancel: threading.Event | None = None,
             policy: TransportPolicy | None = None, socket_factory=socket.socket) -> DiscoveryResult:
    """Find a bridge: cloud lookup first, SSDP search as fallback.

    Raises:
        BridgeNotFound: neither method found a bridge
        TransportError: SSDP socket failure or cancellation
    """
    try:
        address = cloud_lookup(session, url, timeout=timeout, policy=policy)
    except HueError as e:
        click.echo(f"Cloud discovery failed ({e}), trying SSDP", err=True)
        address = None
    else:
        if not address:
            click.echo("Cloud discovery returned no bridges, trying SSDP", err=True)

    if cancel is not None and cancel.is_set():
        raise TransportError("Discovery cancelled", cancelled=True)

    if not address:
        address = ssdp_search(timeout, cancel=cancel, socket_factory=socket_factory)

    if not address:
        raise BridgeNotFound("No bridge answered the cloud lookup or SSDP search")
    return DiscoveryResult(address)


class BridgeDiscovery(Observable):
    """Runs one discovery attempt at a time and publishes its outcome.

    Observers are notified with topic 'discovery' whenever status changes.
    Starting a new attempt cancels the previous one, and results arriving
    from a superseded attempt are dropped.
    """

    def __init__(self, updates: UpdateQueue, executor: Executor,
                 session: requests.Session | None = None, settings: dict | None = None,
                 policy: TransportPolicy | None = None, socket_factory=socket.socket):
        super().__init__()
        self.updates = updates
        self.executor = executor
        self.session = session or requests.Session()
        self.settings = {**DEFAULT_SETTINGS, **(settings or {})}
        self.policy = policy
        self.socket_factory = socket_factory

        self.status = IDLE
        self.address: str | None = None
        self.error: str | None = None
        self._attempt: threading.Event | None = None

    def start(self) -> Future:
        """Begin a new attempt, superseding any attempt still running."""
        self.cancel()
        attempt = threading.Event()
        self._attempt = attempt
        self._set(DISCOVERING, None, None)
        return self.executor.submit(self._run, attempt)

    def cancel(self):
        """Abort the running attempt, if any. Status returns to idle."""
        if self._attempt is None:
            return
        self._attempt.set()
        self._attempt = None
        if self.status == DISCOVERING:
            self._set(IDLE, None, None)

    def _run(self, attempt: threading.Event) -> DiscoveryResult | None:
        try:
            result = discover(self.session, self.settings['discovery_url'],
                              timeout=self.settings['discovery_timeout'], cancel=attempt,
                              policy=self.policy, socket_factory=self.socket_factory)
        except BridgeNotFound:
            self.updates.post(self._finish, attempt, NOT_FOUND, None, describe_error(BridgeNotFound()))
            return None
        except HueError as e:
            if isinstance(e, TransportError) and e.cancelled:
                return None
            self.updates.post(self._finish, attempt, FAILED, None, describe_error(e, 'discovery'))
            return None
        except Exception as e:
            click.echo(f"Discovery failed unexpectedly: {e!r}", err=True)
            self.updates.post(self._finish, attempt, FAILED, None, describe_error(e, 'discovery'))
            return None

        self.updates.post(self._finish, attempt, FOUND, result.address, None)
        return result

    def _finish(self, attempt: threading.Event, status: str, address: str | None, error: str | None):
        if attempt is not self._attempt or attempt.is_set():
            return
        self._attempt = None
        self._set(status, address, error)

    def _set(self, status: str, address: str | None, error: str | None):
        self.status = status
        self.address = address
        self.error = error
        self.notify('discovery')
