"""
MarketAnalytics: Validates the running market statistics.
"""

import os
import sys

import numpy as np
import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from p2p_energy.analytics.market_analytics import DEFAULT_PRICE, MarketAnalytics


def _create_analytics(samples) -> MarketAnalytics:
    """Create analytics from (amount, price) samples with increasing timestamps."""
    analytics = MarketAnalytics()
    for i, (amount, price) in enumerate(samples):
        analytics.record_sample(amount, price, 1000.0 + i)
    return analytics


def test_empty_market() -> None:
    """Test the defaults reported before any trade."""
    analytics = MarketAnalytics()

    assert analytics.average_price() == DEFAULT_PRICE == 0.15
    assert analytics.total_volume() == 0.0
    assert analytics.price_volatility() == 0.0
    assert analytics.price_trend() == 0.0
    assert analytics.liquidity() == 0.0
    assert analytics.price_history() == []
    assert analytics.volume_history() == []
    print("✓ Empty market defaults")


def test_market_metrics() -> None:
    """Test mean, volatility, trend and liquidity."""
    analytics = _create_analytics([(45.5, 0.18)])
    assert analytics.price_volatility() == 0.0  # Needs two samples
    assert analytics.average_price() == pytest.approx(0.18)

    samples = [(45.5, 0.18), (78.2, 0.16), (32.7, 0.22), (95.0, 0.15)]
    analytics = _create_analytics(samples)
    prices = [p for _, p in samples]
    volumes = [v for v, _ in samples]

    assert analytics.average_price() == pytest.approx(np.mean(prices))
    assert analytics.price_volatility() == pytest.approx(np.std(prices))
    assert analytics.total_volume() == pytest.approx(sum(volumes))
    assert analytics.liquidity() == pytest.approx(sum(volumes) / len(volumes) * 100)
    assert analytics.sample_count() == 4
    print(f"  - Average price: {analytics.average_price():.4f}")
    print(f"  - Price volatility: {analytics.price_volatility():.4f}")
    print(f"  - Liquidity: {analytics.liquidity():.2f}")

    rising = _create_analytics([(10, 0.10), (10, 0.12), (10, 0.14)])
    assert rising.price_trend() == pytest.approx(0.02)
    flat = _create_analytics([(10, 0.15), (10, 0.15)])
    assert flat.price_trend() == pytest.approx(0.0)
    print(f"✓ Price trend: {rising.price_trend():.4f}")


def test_history_windows() -> None:
    """Test bounded price and volume histories."""
    analytics = _create_analytics([(float(i), 0.1 + i / 100) for i in range(1, 26)])

    history = analytics.price_history()
    assert len(history) == 20
    assert history[0] == (1005.0, pytest.approx(0.16))
    assert history[-1] == (1024.0, pytest.approx(0.35))

    volumes = analytics.volume_history(3)
    assert volumes == [(1022.0, 23.0), (1023.0, 24.0), (1024.0, 25.0)]

    assert len(analytics.price_history(100)) == 25
    assert analytics.price_history(0) == []

    samples = analytics.samples()
    assert len(samples) == 25 and samples[0].volume == 1.0
    print(f"✓ Price history window: {len(history)} points")


def run_tests() -> bool:
    """Run all comprehensive tests.

    Returns:
        bool: True if all tests passed, False otherwise.
    """
    print("🚀 STARTING MarketAnalytics TESTS")

    try:
        test_empty_market()
        test_market_metrics()
        test_history_windows()
        print("🎉 MarketAnalytics TESTS COMPLETED SUCCESSFULLY!")
        return True

    except Exception as e:
        print(f"❌ ERROR during testing: {str(e)}")
        return False


if __name__ == "__main__":
    success = run_tests()
    exit(0 if success else 1)
