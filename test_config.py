#!/usr/bin/env python3
"""
Tests for the config file loader
"""
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smartpump.config import load_config_file, parse_config_value


def test_parse_config_value():
    assert parse_config_value('true') is True
    assert parse_config_value('False') is False
    assert parse_config_value('8080') == 8080
    assert parse_config_value('0.5') == 0.5
    assert parse_config_value('http://pump:8000/api') == 'http://pump:8000/api'


def test_load_config_file(tmp_path):
    path = tmp_path / 'client.conf'
    path.write_text(
        "# backend\n"
        "API_URL = http://pump:8000/api\n"
        "\n"
        "POLL_INTERVAL=2.5\n"
        "WEB_PORT=9090\n"
    )
    config = load_config_file(path)
    assert config == {'API_URL': 'http://pump:8000/api', 'POLL_INTERVAL': 2.5, 'WEB_PORT': 9090}


def test_missing_config_file_is_empty(tmp_path):
    assert load_config_file(tmp_path / 'nope.conf') == {}


def test_bad_lines_are_logged(tmp_path, caplog):
    path = tmp_path / 'client.conf'
    path.write_text("STALE_AFTER=7\nPOLL_INTERVAL\nWEB_PASS=secret\n")
    with caplog.at_level(logging.WARNING, logger='smartpump.config'):
        config = load_config_file(path)
    assert config == {'STALE_AFTER': 7}
    assert len(caplog.records) == 2, "One warning per ignored line"
    assert ':2:' in caplog.records[0].getMessage()


def test_unreadable_config_file_is_logged(tmp_path, caplog):
    # A directory exists but cannot be read as a file
    with caplog.at_level(logging.WARNING, logger='smartpump.config'):
        assert load_config_file(tmp_path) == {}
    assert 'Could not load config file' in caplog.text

if __name__ == "__main__":
    import pytest
    sys.exit(pytest.main([__file__, '-v']))
