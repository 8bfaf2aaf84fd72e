from unittest.mock import MagicMock

import pytest

from config import TOKEN_ADDRESSES
from dca import DCAParams, UnknownTokenError, analyze_dca, format_dca_analysis, simulate_dca_performance
from market_data import Quote


def quote_fetcher(buy_amount, fee_usd=None):
    return MagicMock(return_value=Quote(sell_amount=0, buy_amount=buy_amount, fee_usd=fee_usd))


def test_unknown_token_fails_fast():
    fetcher = quote_fetcher(1)
    with pytest.raises(UnknownTokenError):
        analyze_dca(DCAParams("USDC", "DOGE", 100, "weekly"), fetcher)
    fetcher.assert_not_called()


def test_invalid_frequency():
    with pytest.raises(ValueError):
        analyze_dca(DCAParams("USDC", "STRK", 100, "yearly"), quote_fetcher(1))


def test_weekly_analysis():
    # 120 USDC over 12 weekly cycles -> 10 USDC per cycle, quote gives 20 STRK
    fetcher = quote_fetcher(20 * 10 ** 18, fee_usd=0.03)
    analysis = analyze_dca(DCAParams("usdc", "strk", 120, "weekly"), fetcher)

    fetcher.assert_called_once_with(
        TOKEN_ADDRESSES["USDC"]["address"], TOKEN_ADDRESSES["STRK"]["address"], 10 * 10 ** 6,
    )
    assert analysis.number_of_cycles == 12
    assert analysis.amount_per_cycle == pytest.approx(10)
    assert analysis.current_price == pytest.approx(0.5)
    assert analysis.estimated_buy_amount == pytest.approx(240)
    assert analysis.gas_cost_estimate == pytest.approx(0.36)
    assert analysis.recommendation.startswith("Weekly DCA looks reasonable")


def test_default_gas_and_small_amount_warning():
    analysis = analyze_dca(DCAParams("USDC", "ETH", 30, "daily", duration=10), quote_fetcher(10 ** 15))

    assert analysis.number_of_cycles == 10
    assert analysis.gas_cost_estimate == pytest.approx(0.5)
    assert "Low amount per cycle" in analysis.recommendation


def test_hourly_warning():
    analysis = analyze_dca(DCAParams("USDC", "ETH", 100_000, "hourly"), quote_fetcher(10 ** 16))

    assert analysis.number_of_cycles == 720 * 3
    assert "High frequency" in analysis.recommendation


def test_format_analysis():
    analysis = analyze_dca(DCAParams("USDC", "STRK", 120, "weekly"), quote_fetcher(20 * 10 ** 18))
    text = format_dca_analysis(analysis)

    assert "# 💰 DCA Analysis" in text
    assert "- **Cycles**: 12" in text
    assert "- **Current price**: $0.500000" in text


def test_simulate_performance_harmonic_average():
    result = simulate_dca_performance([1.0, 2.0, 4.0], 10)

    assert result["total_spent"] == 30
    assert result["total_acquired"] == pytest.approx(17.5)
    assert result["avg_price"] == pytest.approx(30 / 17.5)


def test_simulate_empty_and_invalid():
    assert simulate_dca_performance([], 10)["total_spent"] == 0.0
    with pytest.raises(ValueError):
        simulate_dca_performance([1.0, 0.0], 10)
