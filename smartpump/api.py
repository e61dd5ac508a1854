"""
HTTP client for the pump-control backend

Every call returns a dict with:
    status: 'success' or 'error'
    <payload key> (on success, for calls that return data)
    error_message (if status='error')
"""
import requests

from smartpump.config import API_URL, REQUEST_TIMEOUT, TANK_ACTIONS, CONSUMPTION_PERIODS
from smartpump.models import (
    SystemStatus, parse_tanks, parse_alerts, parse_consumption, encode_initialize
)

def _error(message):
    return {'status': 'error', 'error_message': message}

class BackendClient:
    """Thin wrapper over the backend's JSON endpoints"""

    def __init__(self, base_url=API_URL, timeout=REQUEST_TIMEOUT, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method, path, key=None, parser=None, json_body=None, params=None):
        """
        Perform one request. Only HTTP 200 counts as success.
        When key is given the decoded body is run through parser and
        stored under that key.
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(
                method, url, json=json_body, params=params, timeout=self.timeout
            )
        except requests.Timeout:
            return _error(f"Timeout after {self.timeout}s on {method} {path}")
        except requests.ConnectionError as e:
            return _error(f"Connection error: {str(e)}")
        except requests.RequestException as e:
            return _error(f"Request failed: {str(e)}")

        if response.status_code != 200:
            return _error(f"HTTP {response.status_code} from {method} {path}")

        result = {'status': 'success'}
        if key is not None:
            try:
                result[key] = parser(response.json())
            except (ValueError, KeyError, TypeError) as e:
                # Malformed JSON as well as missing or mistyped fields
                return _error(f"Parse error on {path}: {str(e)}")
        return result

    def get_tanks(self):
        return self._request('GET', '/tanks', key='tanks', parser=parse_tanks)

    def get_system(self):
        return self._request('GET', '/system', key='system', parser=SystemStatus.from_json)

    def set_tank_state(self, tank_id, action):
        """Command a tank into 'active', 'refill' or 'idle'"""
        if action not in TANK_ACTIONS:
            raise ValueError(f"Unknown tank action {action!r}, expected one of {TANK_ACTIONS}")
        return self._request('POST', f'/tanks/{int(tank_id)}/set_state',
                             json_body={'action': action})

    def toggle_manual(self):
        return self._request('POST', '/system/toggle_manual')

    def activate_cycle(self):
        return self._request('POST', '/system/activate_cycle')

    def deactivate_cycle(self):
        return self._request('POST', '/system/deactivate_cycle')

    def get_alerts(self):
        return self._request('GET', '/alerts', key='alerts', parser=parse_alerts)

    def clear_alerts(self):
        return self._request('POST', '/alerts/clear')

    def initialize(self, capacities):
        return self._request('POST', '/initialize', json_body=encode_initialize(capacities))

    def get_consumption(self, period):
        """Consumption history bucketed by 'day', 'month' or 'year'"""
        if period not in CONSUMPTION_PERIODS:
            raise ValueError(f"Unknown period {period!r}, expected one of {CONSUMPTION_PERIODS}")
        return self._request('GET', '/consumption', key='consumption',
                             parser=parse_consumption, params={'period': period})
