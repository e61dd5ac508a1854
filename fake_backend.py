"""
In-memory stand-in for BackendClient used by the tests
"""
from smartpump.models import Tank, SystemStatus

def make_tank(tank_id=1, capacity=100.0, water_level=50.0, state='idle',
              last_event='', sensor=None):
    return Tank(
        id=tank_id,
        capacity=capacity,
        water_level=water_level,
        state=state,
        last_event=last_event,
        sensor=water_level if sensor is None else sensor,
    )

def ok(**payload):
    return {'status': 'success', **payload}

def failed(message='Connection error: refused'):
    return {'status': 'error', 'error_message': message}

class FakeClient:
    """Returns canned results and records every call"""

    base_url = 'http://fake/api'

    def __init__(self, tanks=(), manual_override=False, deactivated=False):
        self.tanks = list(tanks)
        self.system = SystemStatus(manual_override=manual_override, deactivated=deactivated)
        self.alerts = []
        self.consumption = []
        self.fail = set()  # names of calls that should fail
        self.calls = []

    def _result(self, name, **payload):
        self.calls.append(name)
        if name in self.fail:
            return failed(f"{name} failed")
        return ok(**payload)

    def count(self, name):
        return self.calls.count(name)

    def get_tanks(self):
        return self._result('get_tanks', tanks=tuple(self.tanks))

    def get_system(self):
        return self._result('get_system', system=self.system)

    def set_tank_state(self, tank_id, action):
        self.calls.append(('set_tank_state', tank_id, action))
        if 'set_tank_state' in self.fail:
            return failed("set_tank_state failed")
        return ok()

    def toggle_manual(self):
        return self._result('toggle_manual')

    def activate_cycle(self):
        return self._result('activate_cycle')

    def deactivate_cycle(self):
        return self._result('deactivate_cycle')

    def get_alerts(self):
        return self._result('get_alerts', alerts=list(self.alerts))

    def clear_alerts(self):
        return self._result('clear_alerts')

    def initialize(self, capacities):
        self.calls.append(('initialize', list(capacities)))
        if 'initialize' in self.fail:
            return failed("initialize failed")
        return ok()

    def get_consumption(self, period):
        return self._result('get_consumption', consumption=list(self.consumption))
