#!/usr/bin/env python3
"""
Tests for the low-water alert latch
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smartpump.alerts import LowWaterLatch, ARMED, TRIPPED, find_active_tank, is_low_water
from smartpump.models import SystemStatus
from smartpump.state import ViewState
from fake_backend import make_tank


def view(tanks, manual_override=True):
    return ViewState(tanks=tuple(tanks),
                     system=SystemStatus(manual_override=manual_override, deactivated=False))


def test_trips_below_quarter_capacity():
    latch = LowWaterLatch()
    assert latch.state == ARMED
    tank = latch.evaluate(view([make_tank(7, capacity=100, water_level=24, state='active')]))
    assert tank is not None and tank.id == 7
    assert latch.state == TRIPPED
    assert latch.tank_id == 7


def test_no_trip_above_threshold():
    latch = LowWaterLatch()
    assert latch.evaluate(view([make_tank(7, capacity=100, water_level=26, state='active')])) is None
    assert latch.state == ARMED
    assert latch.evaluate(view([make_tank(7, capacity=100, water_level=25, state='active')])) is None, \
        "Exactly 25% is not below the threshold"


def test_only_in_manual_override():
    latch = LowWaterLatch()
    low = [make_tank(1, capacity=100, water_level=5, state='active')]
    assert latch.evaluate(view(low, manual_override=False)) is None
    assert latch.evaluate(ViewState(tanks=tuple(low))) is None, "No system status means no alert"
    assert latch.state == ARMED


def test_stays_tripped_until_acknowledged():
    latch = LowWaterLatch()
    latch.evaluate(view([make_tank(1, capacity=100, water_level=24, state='active')]))
    assert latch.evaluate(view([make_tank(1, capacity=100, water_level=10, state='active')])) is None
    assert latch.state == TRIPPED

    # Level recovering does not re-arm
    latch.evaluate(view([make_tank(1, capacity=100, water_level=90, state='active')]))
    assert latch.state == TRIPPED

    assert latch.acknowledge() == 1
    assert latch.state == ARMED and latch.tank_id is None
    assert latch.acknowledge() is None, "Acknowledging an armed latch does nothing"


def test_first_active_tank_wins():
    tanks = [
        make_tank(1, state='idle', water_level=1),
        make_tank(2, state='Active', water_level=80),
        make_tank(3, state='active', water_level=1),
    ]
    assert find_active_tank(tanks).id == 2
    assert LowWaterLatch().evaluate(view(tanks)) is None, "Only the first active tank is checked"
    assert find_active_tank([make_tank(1, state='refill')]) is None


def test_custom_threshold():
    tank = make_tank(1, capacity=200, water_level=90, state='active')
    assert not is_low_water(tank)
    assert is_low_water(tank, threshold=0.5)


if __name__ == "__main__":
    import pytest
    sys.exit(pytest.main([__file__, '-v']))
