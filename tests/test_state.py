"""Tests for application state wiring in core/state.py"""

from unittest.mock import MagicMock, patch

from core.config import SETTINGS_KEY, MemoryStore
from core.discovery import FOUND
from core.state import PAIRING_IDLE, HueState
from models.types import DEMO_BRIDGE_ID, BridgeConfig, DiscoveryResult


class TestHueState:
    """HueState ties the registry, synchroniser and engines together."""

    def test_initial_state(self, state):
        assert state.registry.current_id == 'bridge-1'
        assert state.sync.lights == []
        assert state.pairing_status == PAIRING_IDLE

    def test_fetch_through_state(self, state):
        state.wait_all(state.sync.fetch_all(), timeout=5)
        assert len(state.sync.lights) == 5
        assert len(state.sync.groups) == 2

    def test_republishes_notifications(self, state):
        topics = []
        state.subscribe(topics.append)
        state.wait(state.sync.fetch_lights(), timeout=5)
        assert 'lights' in topics

    def test_switch_to_same_bridge_refreshes(self, state):
        with patch.object(state.sync, 'fetch_all') as mock_fetch:
            state.switch_bridge('bridge-1')
        mock_fetch.assert_called_once()

    def test_switch_to_other_bridge_clears(self, state):
        state.wait_all(state.sync.fetch_all(), timeout=5)
        state.registry.add(BridgeConfig(id='bridge-2', name='Home', address='10.0.0.3', credential='k'))

        state.switch_bridge('bridge-1')

        assert state.registry.current_id == 'bridge-1'
        assert state.sync.lights == []

    def test_discovery_result_used_for_pairing(self, state):
        with patch('core.discovery.discover', return_value=DiscoveryResult('10.0.0.9')):
            state.wait(state.start_discovery(), timeout=5)

        assert state.discovery.status == FOUND
        with patch.object(state.pairing, 'pair') as mock_pair:
            mock_pair.side_effect = RuntimeError('stop here')
            future = state.start_pairing()
            future.exception(timeout=5)
        mock_pair.assert_called_once_with('10.0.0.9')

    def test_partial_settings_override(self, executor):
        store = MemoryStore({SETTINGS_KEY: {'verify_tls': False}})
        with HueState(store, settings={'discovery_timeout': 1.0}, executor=executor,
                      session=MagicMock(), transport_factory=MagicMock()) as state:
            assert state.settings['discovery_timeout'] == 1.0
            assert state.settings['verify_tls'] is False
            assert state.settings['request_timeout'] == 5.0
            assert state.discovery.settings['discovery_timeout'] == 1.0

    def test_close_leaves_passed_session_open(self, executor):
        session = MagicMock()
        HueState(MemoryStore(), executor=executor, session=session,
                 transport_factory=MagicMock()).close()
        session.close.assert_not_called()

    def test_close_closes_own_session(self, executor):
        with patch('core.state.requests.Session') as mock_session:
            HueState(MemoryStore(), executor=executor, transport_factory=MagicMock()).close()
        mock_session.return_value.close.assert_called_once()


class TestDemoMode:
    def test_demo_fallback_serves_canned_data(self, executor):
        store = MemoryStore({SETTINGS_KEY: {'demo_fallback': True}})
        with HueState(store, executor=executor) as state:
            assert state.registry.current.id == DEMO_BRIDGE_ID
            state.wait_all(state.sync.fetch_all(), timeout=5)

            assert [l.name for l in state.sync.lights][0] == 'Bridge Console'
            assert state.sync.sensors[0].battery == 87

    def test_demo_mutation_round_trip(self, executor):
        store = MemoryStore({SETTINGS_KEY: {'demo_fallback': True}})
        with HueState(store, executor=executor) as state:
            state.wait_all(state.sync.fetch_all(), timeout=5)
            state.wait(state.sync.set_group_power('2', False), timeout=5)

            assert state.sync.group('2').any_on is False
            assert state.sync.error is None
