"""Per-entity risk trends over a fixed set of periods."""

import logging
from typing import Dict, Hashable, Iterable, List, Optional, Sequence

from app.models import RiskLevel, TrendPoint
from app.risk import get_risk_category

logger = logging.getLogger(__name__)


class TrendTracker:
    """
    Ordered score history for students or cohorts.

    Every tracked entity shares one time axis, declared up front
    (e.g. five months or six weeks). Points are stored by period and
    always read back in declared order, so recording a period late
    never reorders what is already there.
    """

    def __init__(self, periods: Sequence[str]):
        if len(set(periods)) != len(periods):
            raise ValueError(f"Duplicate trend periods: {list(periods)}")
        self.periods = list(periods)
        self._position = {period: idx for idx, period in enumerate(self.periods)}
        self._points: Dict[Hashable, Dict[str, float]] = {}
        self._distribution: Dict[str, Dict[RiskLevel, int]] = {}

    def _check_period(self, period: str):
        if period not in self._position:
            raise ValueError(f"Unknown period '{period}'. Declared periods: {self.periods}")

    def record(self, entity: Hashable, period: str, value: float):
        """Insert or overwrite the value of ``entity`` at ``period``."""
        self._check_period(period)
        self._points.setdefault(entity, {})[period] = float(value)

    def record_series(self, entity: Hashable, points: Iterable[TrendPoint]):
        for point in points:
            self.record(entity, point.period, point.value)

    def series(self, entity: Hashable) -> List[TrendPoint]:
        """Chronological trend for ``entity``; empty if never recorded."""
        values = self._points.get(entity, {})
        return [
            TrendPoint(period=period, value=values[period])
            for period in self.periods
            if period in values
        ]

    def aggregate(self, entities: Iterable[Hashable], period: str) -> Dict[RiskLevel, int]:
        """
        Count entities per risk level at ``period``.

        Each entity with a value at that period lands in exactly one
        level; entities without one are left out.
        """
        self._check_period(period)
        counts = {level: 0 for level in RiskLevel}
        for entity in entities:
            value = self._points.get(entity, {}).get(period)
            if value is None:
                continue
            counts[get_risk_category(value)] += 1
        return counts

    def load_distribution(self, period: str, counts: Dict[RiskLevel, int]):
        """Seed precomputed cohort counts for a period (e.g. a whole-college view)."""
        self._check_period(period)
        self._distribution[period] = {level: int(counts.get(level, 0)) for level in RiskLevel}

    def cohort_distribution(self, entities: Optional[Iterable[Hashable]] = None) -> List[Dict[str, object]]:
        """
        Level counts for every period, in order, for a stacked distribution chart.

        Seeded counts take precedence; otherwise counts are aggregated from
        the recorded points of ``entities`` (all tracked entities by default).
        """
        members = list(self._points) if entities is None else list(entities)
        rows = []
        for period in self.periods:
            counts = self._distribution.get(period)
            if counts is None:
                counts = self.aggregate(members, period)
            rows.append({
                'period': period,
                'high': counts[RiskLevel.HIGH],
                'medium': counts[RiskLevel.MEDIUM],
                'low': counts[RiskLevel.LOW],
            })
        logger.debug("Cohort distribution over %d periods for %d entities", len(rows), len(members))
        return rows
