#!/usr/bin/env python3
"""
Tests for consumption chart rendering
"""
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from smartpump.chart import render_consumption_chart, chart_summary
from smartpump.models import ConsumptionPoint

POINTS = [
    ConsumptionPoint('08:00', 12.0),
    ConsumptionPoint('09:00', 30.5),
    ConsumptionPoint('10:00', 0.0),
]


def test_render_png():
    png = render_consumption_chart(POINTS, 'day')
    assert png.startswith(b'\x89PNG'), "Chart should be a PNG image"


def test_render_all_zero():
    png = render_consumption_chart([ConsumptionPoint('Jan', 0.0)], 'month')
    assert png.startswith(b'\x89PNG')


def test_empty_series():
    assert render_consumption_chart([], 'year') is None


def test_summary():
    assert chart_summary(POINTS) == {'count': 3, 'total': 42.5, 'peak': 30.5}
    assert chart_summary([]) == {'count': 0, 'total': 0, 'peak': 0.0}


if __name__ == "__main__":
    import pytest
    sys.exit(pytest.main([__file__, '-v']))
