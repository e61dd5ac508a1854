#!/usr/bin/env python3
"""
Tests for the simulation setup form
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smartpump.initialize import (
    parse_tank_count, parse_capacities, initialize_simulation,
    TANK_COUNT_ERROR, CAPACITY_ERROR, CAPACITY_COUNT_ERROR
)
from smartpump.poll import PollSyncController
from fake_backend import FakeClient


def expect_error(fn, arg, message):
    try:
        fn(arg)
    except ValueError as e:
        assert str(e) == message
    else:
        raise AssertionError(f"{arg!r} should be rejected")


def test_tank_count():
    assert parse_tank_count('3') == 3
    assert parse_tank_count(' 12 ') == 12
    for bad in ('', 'two', '0', '-1', '2.5'):
        expect_error(parse_tank_count, bad, TANK_COUNT_ERROR)


def test_capacities():
    assert parse_capacities(['10.5', '20']) == [10.5, 20.0]
    assert parse_capacities([5, 7.5]) == [5.0, 7.5]
    for bad in (['10', ''], ['10', 'abc'], ['0'], ['-3'], ['nan'], []):
        expect_error(parse_capacities, bad, CAPACITY_ERROR)


def test_initialize_simulation_sends_capacities():
    client = FakeClient()
    controller = PollSyncController(client, spawn=lambda fn: fn())
    assert initialize_simulation(controller, ['10.5', '20.0'])
    assert ('initialize', [10.5, 20.0]) in client.calls
    assert client.count('get_tanks') == 1, "Initialization refreshes the view"


def test_initialize_simulation_invalid_sends_nothing():
    client = FakeClient()
    controller = PollSyncController(client, spawn=lambda fn: fn())
    expect_error(lambda texts: initialize_simulation(controller, texts), ['x'], CAPACITY_ERROR)
    assert client.calls == []


def test_initialize_simulation_backend_failure():
    client = FakeClient()
    client.fail.add('initialize')
    controller = PollSyncController(client, spawn=lambda fn: fn())
    assert not initialize_simulation(controller, ['1'])


def test_initialize_simulation_checks_tank_count():
    """Count comes first, then exactly that many capacities"""
    client = FakeClient()
    controller = PollSyncController(client, spawn=lambda fn: fn())

    expect_error(lambda texts: initialize_simulation(controller, texts, count='3'),
                 ['10', '20'], CAPACITY_COUNT_ERROR.format(count=3))
    expect_error(lambda texts: initialize_simulation(controller, texts, count='0'),
                 ['10'], TANK_COUNT_ERROR)
    assert client.calls == [], "Rejected forms send nothing"

    assert initialize_simulation(controller, ['10', '20'], count='2')
    assert ('initialize', [10.0, 20.0]) in client.calls

if __name__ == "__main__":
    import pytest
    sys.exit(pytest.main([__file__, '-v']))
