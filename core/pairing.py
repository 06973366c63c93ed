"""Pairing with a bridge via link button authentication.

The bridge only issues a credential within 30 seconds of its physical link
button being pressed. Until then the registration request is answered with
error type 101, which callers treat as "press the button and retry".
"""

import time
from dataclasses import dataclass
from typing import Callable

import click
import requests

from core.config import DEFAULT_SETTINGS
from core.errors import (
    LINK_BUTTON_NOT_PRESSED,
    BridgeProtocolError,
    DecodingError,
    LinkButtonNotPressed,
)
from core.transport import TransportPolicy, request_json
from models.types import BridgeConfig
from models.wire import parse_replies


@dataclass(frozen=True)
class PairingResult:
    address: str
    credential: str

    def to_config(self, name: str) -> BridgeConfig:
        return BridgeConfig(name=name, address=self.address, credential=self.credential)


class PairingEngine:
    """Registers this client with a bridge. Does not persist anything."""

    def __init__(self, session: requests.Session | None = None,
                 device_type: str = DEFAULT_SETTINGS['device_type'],
                 timeout: float = DEFAULT_SETTINGS['pairing_timeout'],
                 policy: TransportPolicy | None = None):
        self.session = session or requests.Session()
        self.device_type = device_type
        self.timeout = timeout
        self.policy = policy

    def pair(self, address: str) -> PairingResult:
        """Send one registration request.

        Raises:
            LinkButtonNotPressed: the user has not pressed the link button yet
            BridgeProtocolError: any other error reported by the bridge
            TransportError, NoDataError: bridge unreachable
            DecodingError: reply has no success or error entry
        """
        payload = request_json(self.session, 'POST', f"http://{address}/api",
                               body={'devicetype': self.device_type},
                               timeout=self.timeout, policy=self.policy)
        try:
            replies = parse_replies(payload)
        except BridgeProtocolError as e:
            if e.error_type == LINK_BUTTON_NOT_PRESSED:
                raise LinkButtonNotPressed(e.description) from e
            raise

        for reply in replies:
            username = (reply.success or {}).get('username')
            if isinstance(username, str) and username:
                return PairingResult(address, username)

        raise DecodingError("Pairing reply did not contain a username")

    def pair_until_linked(self, address: str, attempts: int = 30, interval: float = 1.0,
                          on_waiting: Callable[[int], None] | None = None,
                          sleep: Callable[[float], None] = time.sleep) -> PairingResult:
        """Poll the bridge until the link button is pressed.

        Args:
            address: Bridge address
            attempts: Maximum number of registration requests
            interval: Seconds between requests
            on_waiting: Called with the attempt number after each
                "link button not pressed" reply
            sleep: Sleep function, replaceable in tests

        Raises:
            LinkButtonNotPressed: button still not pressed after all attempts
        """
        for attempt in range(1, attempts + 1):
            try:
                return self.pair(address)
            except LinkButtonNotPressed:
                if attempt == attempts:
                    raise
                if on_waiting:
                    on_waiting(attempt)
                else:
                    click.echo(f"Waiting for link button... (attempt {attempt}/{attempts})", err=True)
                sleep(interval)

        raise LinkButtonNotPressed()
