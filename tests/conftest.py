"""Pytest configuration and fixtures for HueTrek tests."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from core.config import MemoryStore
from core.dispatch import UpdateQueue
from core.registry import BridgeRegistry
from core.state import HueState
from core.transport import DemoTransport
from models.demo import demo_bridge_data
from models.types import BridgeConfig


@pytest.fixture
def project_root():
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def store():
    """Empty in-memory key-value store."""
    return MemoryStore()


@pytest.fixture
def bridge_config():
    """A paired bridge with a fixed id."""
    return BridgeConfig(id='bridge-1', name='Office', address='192.168.1.20', credential='abc123')


@pytest.fixture
def registry(store):
    return BridgeRegistry(store)


@pytest.fixture
def updates():
    return UpdateQueue()


@pytest.fixture
def executor():
    """Small thread pool, shut down after the test."""
    pool = ThreadPoolExecutor(max_workers=2)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def demo_transport():
    """DemoTransport over a private copy of the demo data."""
    return DemoTransport(demo_bridge_data())


@pytest.fixture
def state(store, executor, demo_transport, bridge_config):
    """HueState with one paired bridge served from demo data."""
    store.set('bridge_configurations', [bridge_config.model_dump()])
    store.set('current_bridge_id', bridge_config.id)
    hue_state = HueState(store, executor=executor, transport_factory=lambda config: demo_transport)
    yield hue_state
    hue_state.close()
