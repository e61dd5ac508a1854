#!/usr/bin/env python3
"""
Tests for the console entry point's one-shot commands
"""
import os
import sys
from unittest import mock

import pytest

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smartpump import main as console
from fake_backend import FakeClient


def run(argv, client):
    with mock.patch.object(sys, 'argv', ['smartpump'] + argv), \
         mock.patch.object(console, 'load_config_file', return_value={}), \
         mock.patch.object(console, 'BackendClient', return_value=client):
        with pytest.raises(SystemExit) as exit_info:
            console.main()
    return exit_info.value.code


def test_set_state_rejects_non_numeric_tank(capsys):
    client = FakeClient()
    assert run(['--set-state', 'abc', 'idle'], client) == 2
    assert 'TANK_ID must be a tank number' in capsys.readouterr().err
    assert client.calls == [], "Nothing is sent for a bad tank id"


def test_set_state_rejects_unknown_action():
    client = FakeClient()
    assert run(['--set-state', '3', 'drain'], client) == 2
    assert client.calls == []


def test_set_state_sends_command():
    client = FakeClient()
    assert run(['--set-state', '3', 'refill'], client) == 0
    assert ('set_tank_state', 3, 'refill') in client.calls


def test_init_with_tank_count(capsys):
    client = FakeClient()
    assert run(['--init', '10', '--tanks', '3'], client) == 2
    assert 'each of the 3 tanks' in capsys.readouterr().err
    assert run(['--init', '10', '20', '--tanks', '2'], client) == 0
    assert ('initialize', [10.0, 20.0]) in client.calls

if __name__ == "__main__":
    sys.exit(pytest.main([__file__, '-v']))
