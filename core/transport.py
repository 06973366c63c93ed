"""HTTP transport for the Hue bridge v1 API and the discovery service.

Connection trust is delegated to a TransportPolicy so certificate pinning
or self-signed acceptance can be injected without touching callers.
"""

import copy

import requests
from requests.packages.urllib3.exceptions import InsecureRequestWarning

from core.errors import DecodingError, NoDataError, TransportError
from models.demo import demo_bridge_data


class TransportPolicy:
    """Validate-or-reject decision for bridge connections.

    Attributes:
        verify: Passed to requests as ``verify`` (bool or CA bundle path)
    """

    def __init__(self, verify: bool | str = True):
        self.verify = verify
        if verify is False:
            # Bridges ship self-signed certificates
            requests.packages.urllib3.disable_warnings(InsecureRequestWarning)

    def check(self, response: requests.Response):
        """Raise TransportError to reject a response's connection."""


def request_json(session: requests.Session, method: str, url: str, body: dict | None = None,
                 timeout: float = 5.0, policy: TransportPolicy | None = None):
    """Send a request and return the decoded JSON body.

    Raises:
        TransportError: connection failure, timeout, HTTP error status or
            connection rejected by the policy
        NoDataError: empty response body
        DecodingError: body is not valid JSON
    """
    policy = policy or TransportPolicy()
    try:
        response = session.request(method, url, json=body, timeout=timeout, verify=policy.verify)
    except requests.exceptions.Timeout as e:
        raise TransportError(f"Request to {url} timed out") from e
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Request to {url} failed: {e}") from e

    policy.check(response)

    try:
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        raise TransportError(f"Request to {url} failed: {e}") from e

    if not response.content:
        raise NoDataError(f"Empty response from {url}")

    try:
        return response.json()
    except ValueError as e:
        raise DecodingError(f"Invalid JSON from {url}: {e}") from e


class BridgeTransport:
    """Authenticated access to one bridge's resources."""

    def __init__(self, address: str, credential: str, policy: TransportPolicy | None = None,
                 timeout: float = 5.0, session: requests.Session | None = None):
        self.address = address
        self.credential = credential
        self.policy = policy or TransportPolicy()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.base_url = f"http://{address}/api/{credential}"

    def get(self, path: str):
        return request_json(self.session, 'GET', f"{self.base_url}/{path}",
                            timeout=self.timeout, policy=self.policy)

    def put(self, path: str, body: dict):
        return request_json(self.session, 'PUT', f"{self.base_url}/{path}", body=body,
                            timeout=self.timeout, policy=self.policy)

    def close(self):
        self.session.close()


class DemoTransport:
    """Serves the built-in demo bridge from memory. Never touches the network."""

    def __init__(self, data: dict | None = None):
        self.data = data if data is not None else demo_bridge_data()

    def get(self, path: str):
        resource = path.strip('/').split('/')[0]
        if resource not in self.data:
            raise TransportError(f"Demo bridge has no resource '{resource}'")
        return copy.deepcopy(self.data[resource])

    def put(self, path: str, body: dict):
        parts = path.strip('/').split('/')
        if len(parts) != 3 or parts[0] not in self.data or parts[1] not in self.data[parts[0]]:
            return [{'error': {'type': 3, 'address': f"/{path}",
                               'description': f"resource, /{path}, not available"}}]

        resource, item_id, section = parts
        item = self.data[resource][item_id]
        item.setdefault(section, {}).update(body)

        if resource == 'groups' and 'on' in body:
            item['state'] = {'all_on': body['on'], 'any_on': body['on']}
            for light_id in item.get('lights', []):
                light = self.data['lights'].get(light_id)
                if light:
                    light['state']['on'] = body['on']

        return [{'success': {f"/{resource}/{item_id}/{section}/{key}": value}}
                for key, value in body.items()]

    def close(self):
        pass
