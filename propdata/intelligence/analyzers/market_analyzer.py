"""
Market Analyzer

Summarizes a set of comparable sales:
- Average price per square foot (sold price, else list price)
- Average days on market
- Price range
- Trend (rising / falling / stable)

The trend is a coarse heuristic: the mean of the two earliest sales is
compared with the mean of the two latest, with a +/-5% dead band. It is
not a statistically validated trend model and should be presented as a
hint, never as a forecast.
"""

from typing import Iterable, List, Sequence
import statistics

import structlog

from ...models import ComparableSale, MarketStatistics, MarketTrend

logger = structlog.get_logger(__name__)


class MarketAnalyzer:
    """
    Market statistics from comparable sales

    Usage:
        analyzer = MarketAnalyzer()
        stats = analyzer.analyze(comparables)
    """

    def __init__(self, trend_threshold: float = 0.05, trend_window: int = 2, min_trend_samples: int = 3):
        """
        Initialize analyzer

        Args:
            trend_threshold: Relative change beyond which the trend is rising/falling
            trend_window: Number of earliest/latest sales averaged for the trend
            min_trend_samples: Dated sales required before a trend is reported
        """
        self.trend_threshold = trend_threshold
        self.trend_window = trend_window
        self.min_trend_samples = min_trend_samples

    def analyze(self, comparables: Iterable[ComparableSale]) -> MarketStatistics:
        """
        Compute market statistics

        Args:
            comparables: Normalized comparable sales, possibly empty

        Returns:
            MarketStatistics; MarketStatistics.empty() for no input
        """
        comps = list(comparables)
        if not comps:
            return MarketStatistics.empty()

        prices = [comp.usable_price for comp in comps if comp.usable_price is not None]

        stats = MarketStatistics(
            average_price_per_area=self._average_price_per_area(comps),
            trend=self.trend(comps),
            average_days_on_market=self._average_days_on_market(comps),
            price_range=(min(prices), max(prices)) if prices else (0.0, 0.0),
        )

        logger.debug(
            "market_statistics_computed",
            comparables=len(comps),
            priced=len(prices),
            trend=stats.trend.value
        )
        return stats

    def _average_price_per_area(self, comps: Sequence[ComparableSale]) -> float:
        # Only records with both a price and a floor area; no assumed default area
        ratios = [
            comp.usable_price / comp.floor_area
            for comp in comps
            if comp.usable_price is not None and comp.floor_area and comp.floor_area > 0
        ]
        if not ratios:
            return 0.0
        return round(float(statistics.mean(ratios)), 2)

    def _average_days_on_market(self, comps: Sequence[ComparableSale]) -> float:
        days = [comp.days_on_market for comp in comps if comp.days_on_market is not None]
        if not days:
            return 0.0
        return round(float(statistics.mean(days)), 1)

    def trend(self, comps: Sequence[ComparableSale]) -> MarketTrend:
        """
        Direction of sold prices over time

        Sales with both a sold date and a sold price are sorted by date
        (stable, so same-day sales keep input order). Fewer than
        min_trend_samples -> stable.
        """
        dated: List[ComparableSale] = sorted(
            (comp for comp in comps if comp.sold_date is not None and comp.sold_price and comp.sold_price > 0),
            key=lambda comp: comp.sold_date
        )
        if len(dated) < self.min_trend_samples:
            return MarketTrend.STABLE

        earliest = statistics.mean(comp.sold_price for comp in dated[:self.trend_window])
        latest = statistics.mean(comp.sold_price for comp in dated[-self.trend_window:])
        if earliest <= 0:
            return MarketTrend.STABLE

        change = (latest - earliest) / earliest
        if change > self.trend_threshold:
            return MarketTrend.RISING
        if change < -self.trend_threshold:
            return MarketTrend.FALLING
        return MarketTrend.STABLE
