"""Tests for HTTP and demo transports in core/transport.py"""

from unittest.mock import MagicMock

import pytest
import requests

from core.errors import DecodingError, NoDataError, TransportError
from core.transport import BridgeTransport, DemoTransport, TransportPolicy, request_json


def response(content=b'{}', payload=None, status_error=None, json_error=None):
    mock = MagicMock()
    mock.content = content
    if status_error:
        mock.raise_for_status.side_effect = status_error
    if json_error:
        mock.json.side_effect = json_error
    else:
        mock.json.return_value = payload
    return mock


class TestRequestJson:
    """request_json maps every failure to the bridge error taxonomy."""

    def test_success(self):
        session = MagicMock()
        session.request.return_value = response(payload={'1': {}})

        assert request_json(session, 'GET', 'http://bridge/api/key/lights') == {'1': {}}
        session.request.assert_called_once_with('GET', 'http://bridge/api/key/lights', json=None,
                                                timeout=5.0, verify=True)

    def test_timeout(self):
        session = MagicMock()
        session.request.side_effect = requests.exceptions.ReadTimeout('slow')
        with pytest.raises(TransportError) as exc_info:
            request_json(session, 'GET', 'http://bridge/api')
        assert 'timed out' in str(exc_info.value)
        assert not exc_info.value.cancelled

    def test_connection_error(self):
        session = MagicMock()
        session.request.side_effect = requests.exceptions.ConnectionError('refused')
        with pytest.raises(TransportError):
            request_json(session, 'GET', 'http://bridge/api')

    def test_http_error_status(self):
        session = MagicMock()
        session.request.return_value = response(status_error=requests.exceptions.HTTPError('503'))
        with pytest.raises(TransportError):
            request_json(session, 'GET', 'http://bridge/api')

    def test_empty_body(self):
        session = MagicMock()
        session.request.return_value = response(content=b'')
        with pytest.raises(NoDataError):
            request_json(session, 'GET', 'http://bridge/api')

    def test_invalid_json(self):
        session = MagicMock()
        session.request.return_value = response(content=b'<html>', json_error=ValueError('bad'))
        with pytest.raises(DecodingError):
            request_json(session, 'GET', 'http://bridge/api')

    def test_policy_can_reject(self):
        class RejectAll(TransportPolicy):
            def check(self, response):
                raise TransportError('certificate mismatch')

        session = MagicMock()
        session.request.return_value = response(payload={})
        with pytest.raises(TransportError):
            request_json(session, 'GET', 'https://bridge/api', policy=RejectAll())

    def test_policy_verify_passed_through(self):
        session = MagicMock()
        session.request.return_value = response(payload={})
        request_json(session, 'GET', 'https://bridge/api', policy=TransportPolicy(verify='/tmp/ca.pem'))
        assert session.request.call_args.kwargs['verify'] == '/tmp/ca.pem'


class TestBridgeTransport:
    def test_urls(self):
        session = MagicMock()
        session.request.return_value = response(payload=[{'success': {}}])
        transport = BridgeTransport('192.168.1.20', 'abc123', session=session, timeout=2.0)

        transport.put('lights/1/state', {'on': True})

        session.request.assert_called_once_with('PUT', 'http://192.168.1.20/api/abc123/lights/1/state',
                                                json={'on': True}, timeout=2.0, verify=True)

    def test_get(self):
        session = MagicMock()
        session.request.return_value = response(payload={})
        BridgeTransport('10.0.0.2', 'key', session=session).get('sensors')
        assert session.request.call_args.args == ('GET', 'http://10.0.0.2/api/key/sensors')


class TestDemoTransport:
    """The demo bridge answers like a real one."""

    def test_get_returns_copy(self, demo_transport):
        lights = demo_transport.get('lights')
        lights['1']['name'] = 'Changed'
        assert demo_transport.get('lights')['1']['name'] == 'Bridge Console'

    def test_get_unknown_resource(self, demo_transport):
        with pytest.raises(TransportError):
            demo_transport.get('scenes')

    def test_put_light_state(self, demo_transport):
        reply = demo_transport.put('lights/3/state', {'on': True, 'bri': 50})

        assert reply == [{'success': {'/lights/3/state/on': True}},
                         {'success': {'/lights/3/state/bri': 50}}]
        assert demo_transport.get('lights')['3']['state']['on'] is True

    def test_put_group_action_updates_members(self, demo_transport):
        demo_transport.put('groups/1/action', {'on': False})

        data = demo_transport.get('groups')['1']
        assert data['state'] == {'all_on': False, 'any_on': False}
        assert demo_transport.get('lights')['2']['state']['on'] is False

    def test_put_unknown_item(self, demo_transport):
        reply = demo_transport.put('lights/42/state', {'on': True})
        assert reply[0]['error']['type'] == 3

    def test_instances_do_not_share_data(self):
        first, second = DemoTransport(), DemoTransport()
        first.put('lights/1/state', {'on': False})
        assert second.get('lights')['1']['state']['on'] is True
