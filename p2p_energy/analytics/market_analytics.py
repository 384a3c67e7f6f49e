"""
Running market statistics for the P2P Energy Marketplace.

This module keeps the price and volume time series of executed trades and derives
the market indicators shown to the rendering layer: average price, volatility,
trend, liquidity and bounded-window histories.
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from scipy.stats import linregress

DEFAULT_PRICE = 0.15  # Market default reported before any trade


@dataclass(frozen=True)
class MarketSample:
    """Represents one executed trade as seen by the analytics."""
    timestamp: float
    price: float
    volume: float


class MarketAnalytics:
    """Append-only price/volume series with derived market indicators."""

    def __init__(self) -> None:
        """Initialize empty series."""
        self.prices: List[float] = []
        self.volumes: List[float] = []
        self.timestamps: List[float] = []
        self._total_volume: float = 0.0
        self._price_volatility: float = 0.0

    def record_sample(self, amount: float, price: float, timestamp: float) -> None:
        """Record an executed trade.

        The volatility is recomputed over the whole price history, which stays
        small in this domain.

        Args:
            amount: Traded energy (kWh)
            price: Price per unit
            timestamp: Trade time (epoch seconds)
        """
        self.prices.append(float(price))
        self.volumes.append(float(amount))
        self.timestamps.append(float(timestamp))
        self._total_volume += float(amount)

        if len(self.prices) >= 2:
            self._price_volatility = float(np.std(self.prices))

    def sample_count(self) -> int:
        return len(self.prices)

    def samples(self) -> List[MarketSample]:
        return [MarketSample(t, p, v) for t, p, v in zip(self.timestamps, self.prices, self.volumes)]

    def average_price(self) -> float:
        """Mean price of all recorded trades, or the market default if none."""
        if not self.prices:
            return DEFAULT_PRICE
        return float(np.mean(self.prices))

    def total_volume(self) -> float:
        return self._total_volume

    def price_volatility(self) -> float:
        """Population standard deviation of all recorded prices (0 until two samples)."""
        return self._price_volatility

    def price_trend(self) -> float:
        """Slope of the least-squares line through the prices over trade index.

        Returns:
            Price change per trade, 0.0 with fewer than two samples
        """
        if len(self.prices) < 2:
            return 0.0

        return float(linregress(np.arange(len(self.prices)), self.prices).slope)

    def price_history(self, max_points: int = 20) -> List[Tuple[float, float]]:
        """Most recent prices in chronological order.

        Args:
            max_points: Maximum number of points

        Returns:
            List of (timestamp, price) pairs
        """
        return self._window(self.prices, max_points)

    def volume_history(self, max_points: int = 20) -> List[Tuple[float, float]]:
        """Most recent volumes in chronological order.

        Args:
            max_points: Maximum number of points

        Returns:
            List of (timestamp, volume) pairs
        """
        return self._window(self.volumes, max_points)

    def liquidity(self) -> float:
        """Average traded volume per trade, scaled by 100 (0 when no trades)."""
        if not self.prices:
            return 0.0
        return (self._total_volume / len(self.prices)) * 100.0

    def _window(self, values: List[float], max_points: int) -> List[Tuple[float, float]]:
        if max_points <= 0:
            return []
        start = max(0, len(values) - max_points)
        return list(zip(self.timestamps[start:], values[start:]))
