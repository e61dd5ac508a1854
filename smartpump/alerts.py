"""
Low-water alert latch

The latch is ARMED until a qualifying reading trips it. Once TRIPPED it
stays tripped, whatever later readings show, until the operator
acknowledges the alert with the Refill action.
"""
import threading

from smartpump.config import LOW_WATER_FRACTION

ARMED = 'ARMED'
TRIPPED = 'TRIPPED'

def find_active_tank(tanks):
    """First tank in backend order whose state is 'active'"""
    for tank in tanks:
        if tank.has_state('active'):
            return tank
    return None

def is_low_water(tank, threshold=LOW_WATER_FRACTION):
    return tank.water_level < tank.capacity * threshold

class LowWaterLatch:
    """One alert per low-water episode"""

    def __init__(self, threshold=LOW_WATER_FRACTION):
        self.threshold = threshold
        self.state = ARMED
        self.tank_id = None  # Tank captured when the latch tripped
        self._lock = threading.Lock()

    @property
    def tripped(self):
        return self.state == TRIPPED

    def evaluate(self, view_state):
        """
        Check the current view-state. Returns the tank that tripped the
        latch, or None when nothing changed.
        """
        if not view_state.manual_override:
            return None

        tank = find_active_tank(view_state.tanks)
        if tank is None or not is_low_water(tank, self.threshold):
            return None

        with self._lock:
            if self.state == TRIPPED:
                return None
            self.state = TRIPPED
            self.tank_id = tank.id
        return tank

    def acknowledge(self):
        """
        Re-arm the latch. Returns the tank id captured at trip time, or
        None if the latch was not tripped.
        """
        with self._lock:
            if self.state != TRIPPED:
                return None
            tank_id = self.tank_id
            self.state = ARMED
            self.tank_id = None
        return tank_id
