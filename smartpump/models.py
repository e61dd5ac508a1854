"""
Snapshot records returned by the pump-control backend
"""
from dataclasses import dataclass

@dataclass(frozen=True)
class Tank:
    """One tank as reported by GET /tanks"""
    id: int
    capacity: float
    water_level: float
    state: str
    last_event: str
    sensor: float

    @classmethod
    def from_json(cls, data):
        return cls(
            id=int(data['id']),
            capacity=float(data['capacity']),
            water_level=float(data['water_level']),
            state=str(data['state']),
            last_event=str(data['last_event']),
            sensor=float(data['sensor']),
        )

    @property
    def fraction(self):
        """Fill fraction, 0 for a tank with no usable capacity"""
        if self.capacity <= 0:
            return 0.0
        return self.water_level / self.capacity

    def has_state(self, state):
        return self.state.lower() == state.lower()


@dataclass(frozen=True)
class SystemStatus:
    """System flags as reported by GET /system"""
    manual_override: bool
    deactivated: bool

    @classmethod
    def from_json(cls, data):
        return cls(
            manual_override=bool(data['manual_override']),
            deactivated=bool(data['deactivated']),
        )


@dataclass(frozen=True)
class ConsumptionPoint:
    """One bar of the consumption history"""
    time: str
    consumption: float

    @classmethod
    def from_json(cls, data):
        return cls(time=str(data['time']), consumption=float(data['consumption']))


def parse_tanks(items):
    """Decode a tank array, keeping backend order"""
    if not isinstance(items, list):
        raise TypeError(f"Expected a list of tanks, got {type(items).__name__}")
    return tuple(Tank.from_json(item) for item in items)


def parse_consumption(items):
    if not isinstance(items, list):
        raise TypeError(f"Expected a list of consumption points, got {type(items).__name__}")
    return [ConsumptionPoint.from_json(item) for item in items]


def parse_alerts(items):
    """Notifications are rendered as plain strings"""
    if not isinstance(items, list):
        raise TypeError(f"Expected a list of alerts, got {type(items).__name__}")
    return [str(item) for item in items]


def encode_initialize(capacities):
    """Request body for POST /initialize"""
    return {'capacities': [float(c) for c in capacities]}
