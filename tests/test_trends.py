"""Unit tests for the trend tracker."""

import pytest

from app.models import RiskLevel, TrendPoint
from app.trends import TrendTracker

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May"]


def test_series_is_chronological_regardless_of_record_order():
    tracker = TrendTracker(MONTHS)
    tracker.record(1, "Mar", 61)
    tracker.record(1, "Jan", 45)
    tracker.record(1, "May", 85)
    tracker.record(1, "Feb", 52)

    assert [p.period for p in tracker.series(1)] == ["Jan", "Feb", "Mar", "May"]
    assert [p.value for p in tracker.series(1)] == [45, 52, 61, 85]


def test_record_overwrites_same_period_only():
    tracker = TrendTracker(MONTHS)
    tracker.record_series(1, [TrendPoint(period=m, value=v) for m, v in zip(MONTHS, [45, 52, 61, 73, 85])])
    tracker.record(1, "Apr", 70)

    series = tracker.series(1)
    assert len(series) == 5
    assert series[3] == TrendPoint(period="Apr", value=70)
    assert series[-1] == TrendPoint(period="May", value=85)


def test_unknown_entity_has_empty_series():
    tracker = TrendTracker(MONTHS)
    assert tracker.series("nobody") == []


def test_unknown_period_is_rejected():
    tracker = TrendTracker(MONTHS)
    with pytest.raises(ValueError):
        tracker.record(1, "Jun", 50)


def test_duplicate_periods_rejected():
    with pytest.raises(ValueError):
        TrendTracker(["Week 1", "Week 1"])


def test_aggregate_partitions_entities():
    tracker = TrendTracker(MONTHS)
    tracker.record("a", "May", 85)
    tracker.record("b", "May", 70)
    tracker.record("c", "May", 40)
    tracker.record("d", "May", 39.9)
    tracker.record("e", "Apr", 90)  # no May point

    counts = tracker.aggregate(["a", "b", "c", "d", "e"], "May")
    assert counts == {RiskLevel.HIGH: 2, RiskLevel.MEDIUM: 1, RiskLevel.LOW: 1}
    assert sum(counts.values()) == 4


def test_cohort_distribution_prefers_seeded_counts():
    tracker = TrendTracker(MONTHS)
    tracker.record(1, "Jan", 80)
    tracker.record(2, "Jan", 20)
    tracker.load_distribution("Feb", {RiskLevel.HIGH: 15, RiskLevel.MEDIUM: 32, RiskLevel.LOW: 88})

    rows = tracker.cohort_distribution()
    assert [row['period'] for row in rows] == MONTHS
    assert rows[0] == {'period': 'Jan', 'high': 1, 'medium': 0, 'low': 1}
    assert rows[1] == {'period': 'Feb', 'high': 15, 'medium': 32, 'low': 88}
    assert rows[2] == {'period': 'Mar', 'high': 0, 'medium': 0, 'low': 0}
