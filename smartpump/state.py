"""
Immutable view-state and the reducer that folds fetch results into it
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple

from smartpump.config import STALE_AFTER
from smartpump.models import Tank, SystemStatus

@dataclass(frozen=True)
class TankStatistics:
    """Aggregates shown on the statistics card"""
    total_capacity: float = 0.0
    total_water: float = 0.0
    overall_fraction: float = 0.0
    active_count: int = 0
    refill_count: int = 0
    idle_count: int = 0

    @property
    def overall_percent(self):
        return self.overall_fraction * 100


def compute_statistics(tanks):
    """Sum capacity and water, count tanks per state (case-insensitive)"""
    total_capacity = sum(tank.capacity for tank in tanks)
    total_water = sum(tank.water_level for tank in tanks)
    overall_fraction = total_water / total_capacity if total_capacity > 0 else 0.0

    return TankStatistics(
        total_capacity=total_capacity,
        total_water=total_water,
        overall_fraction=overall_fraction,
        active_count=sum(1 for tank in tanks if tank.has_state('active')),
        refill_count=sum(1 for tank in tanks if tank.has_state('refill')),
        idle_count=sum(1 for tank in tanks if tank.has_state('idle')),
    )


@dataclass(frozen=True)
class ViewState:
    """
    Everything the rendering layer needs for one frame.

    tanks and system are replaced wholesale by successful fetches; the
    two halves carry their own sequence numbers because they are fetched
    independently and may land out of order.
    """
    tanks: Tuple[Tank, ...] = ()
    system: Optional[SystemStatus] = None
    statistics: TankStatistics = field(default_factory=TankStatistics)
    tanks_seq: int = 0
    system_seq: int = 0
    last_updated: Optional[datetime] = None
    low_water_tank_id: Optional[int] = None

    @property
    def manual_override(self):
        return self.system is not None and self.system.manual_override

    @property
    def deactivated(self):
        return self.system is not None and self.system.deactivated

    def is_stale(self, now=None, max_age=STALE_AFTER):
        """True if nothing has ever landed or the last update is older than max_age seconds"""
        if self.last_updated is None:
            return True
        now = now or datetime.now()
        return (now - self.last_updated).total_seconds() > max_age

    def to_dict(self):
        """JSON-friendly rendering for the web dashboard"""
        stats = self.statistics
        return {
            'tanks': [
                {
                    'id': tank.id,
                    'capacity': tank.capacity,
                    'water_level': tank.water_level,
                    'state': tank.state,
                    'last_event': tank.last_event,
                    'sensor': tank.sensor,
                    'fraction': tank.fraction,
                }
                for tank in self.tanks
            ],
            'system': None if self.system is None else {
                'manual_override': self.system.manual_override,
                'deactivated': self.system.deactivated,
            },
            'statistics': {
                'total_capacity': stats.total_capacity,
                'total_water': stats.total_water,
                'overall_fraction': stats.overall_fraction,
                'overall_percent': stats.overall_percent,
                'active': stats.active_count,
                'refill': stats.refill_count,
                'idle': stats.idle_count,
            },
            'last_updated': self.last_updated.isoformat() if self.last_updated else None,
            'low_water_tank_id': self.low_water_tank_id,
        }


def reduce_view_state(state, kind, result, seq, now=None):
    """
    Fold one fetch result into the view-state.

    kind is 'tanks' or 'system'; result is a BackendClient result dict.
    A failed fetch, or a response older than the last one applied for the
    same kind, returns state itself so the display keeps its last good data.
    """
    if result.get('status') != 'success':
        return state

    now = now or datetime.now()

    if kind == 'tanks':
        if seq < state.tanks_seq:
            return state
        tanks = tuple(result['tanks'])
        return replace(
            state,
            tanks=tanks,
            statistics=compute_statistics(tanks),
            tanks_seq=seq,
            last_updated=now,
        )

    if kind == 'system':
        if seq < state.system_seq:
            return state
        return replace(state, system=result['system'], system_seq=seq, last_updated=now)

    raise ValueError(f"Unknown fetch kind {kind!r}")
