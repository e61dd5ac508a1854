#!/usr/bin/env python3
"""
Tests for text rendering of the view-state
"""
import os
import sys
from datetime import datetime, timedelta

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smartpump.check import (
    format_view_state, format_tank, format_system, format_level_bar, format_notifications
)
from smartpump.models import SystemStatus
from smartpump.state import ViewState, compute_statistics
from fake_backend import make_tank

NOW = datetime(2025, 3, 1, 12, 0, 0)


def test_format_tank():
    text = format_tank(make_tank(2, capacity=100, water_level=24.567, state='active',
                                 last_event='Pump on', sensor=24.5))
    assert 'Tank 2' in text
    assert 'Water Level: 24.57 (Sensor: 24.50)' in text
    assert 'Last Event:  Pump on' in text


def test_format_system():
    assert 'UNKNOWN' in format_system(None)
    text = format_system(SystemStatus(manual_override=True, deactivated=True))
    assert 'Manual Override: ON' in text
    assert 'DEACTIVATED' in text


def test_level_bar_clamped():
    assert format_level_bar(0.5, width=4) == '[##--]'
    assert format_level_bar(1.7, width=4) == '[####]'
    assert format_level_bar(-1, width=4) == '[----]'


def test_format_view_state():
    tanks = (make_tank(1, capacity=100, water_level=20, state='active'),)
    state = ViewState(
        tanks=tanks,
        system=SystemStatus(manual_override=True, deactivated=False),
        statistics=compute_statistics(tanks),
        last_updated=NOW,
        low_water_tank_id=1,
    )
    text = format_view_state(state, now=NOW + timedelta(seconds=1))
    assert 'Overall Fullness: 20.00%' in text
    assert 'LOW WATER ALERT - tank 1' in text
    assert '[STALE]' not in text
    assert '[STALE]' in format_view_state(state, now=NOW + timedelta(seconds=30))


def test_format_empty_state():
    text = format_view_state(ViewState(), now=NOW)
    assert 'waiting for first update' in text
    assert 'No tanks reported' in text


def test_format_notifications():
    assert format_notifications(None) == 'Could not fetch notifications'
    assert format_notifications([]) == 'No notifications.'
    assert 'Tank 3 low' in format_notifications(['Tank 3 low'])


if __name__ == "__main__":
    import pytest
    sys.exit(pytest.main([__file__, '-v']))
