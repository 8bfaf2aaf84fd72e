# Filename: dca.py

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

import numpy as np

from config import TOKEN_ADDRESSES

logger = logging.getLogger("DCA")

FREQUENCY_CYCLES_PER_MONTH = {
    "hourly": 720,
    "daily": 30,
    "weekly": 4,
    "monthly": 1,
}

DEFAULT_GAS_PER_CYCLE_USD = 0.05
DEFAULT_DURATION_MONTHS = 3


class UnknownTokenError(ValueError):
    """A token symbol is not in TOKEN_ADDRESSES."""


@dataclass
class DCAParams:
    sell_token: str
    buy_token: str
    total_amount: float
    frequency: str
    duration: Optional[int] = None   # Number of cycles


@dataclass
class DCAAnalysis:
    params: DCAParams
    amount_per_cycle: float
    number_of_cycles: int
    estimated_buy_amount: float
    current_price: float
    estimated_avg_price: float
    gas_cost_estimate: float
    recommendation: str


def resolve_token(symbol: str) -> Dict:
    info = TOKEN_ADDRESSES.get(symbol.upper())
    if info is None:
        raise UnknownTokenError(f"Unknown token: {symbol}")
    return info


def analyze_dca(params: DCAParams, quote_fetcher: Callable) -> DCAAnalysis:
    """
    Estimate a DCA strategy from one live quote for a single cycle.

    Args:
        params: Strategy parameters (symbols must be in TOKEN_ADDRESSES)
        quote_fetcher: callable(sell_address, buy_address, sell_amount_raw) -> Quote

    Raises:
        UnknownTokenError: sell or buy symbol is unknown
        ValueError: invalid frequency or amount
    """
    logger.info(f"[DCA] Analyzing {params.total_amount} {params.sell_token} -> {params.buy_token} ({params.frequency})")

    sell_info = resolve_token(params.sell_token)
    buy_info = resolve_token(params.buy_token)

    if params.frequency not in FREQUENCY_CYCLES_PER_MONTH:
        raise ValueError(f"Invalid frequency: {params.frequency} (expected one of {', '.join(FREQUENCY_CYCLES_PER_MONTH)})")
    if params.total_amount <= 0:
        raise ValueError("Total amount must be positive")

    cycles = params.duration or FREQUENCY_CYCLES_PER_MONTH[params.frequency] * DEFAULT_DURATION_MONTHS
    amount_per_cycle = params.total_amount / cycles

    sell_amount_raw = int(round(amount_per_cycle * 10 ** sell_info["decimals"]))
    quote = quote_fetcher(sell_info["address"], buy_info["address"], sell_amount_raw)

    buy_amount_per_cycle = quote.buy_amount / 10 ** buy_info["decimals"]
    if buy_amount_per_cycle <= 0:
        raise ValueError("Quote returned no output amount")

    current_price = amount_per_cycle / buy_amount_per_cycle
    gas_per_cycle = quote.fee_usd if quote.fee_usd else DEFAULT_GAS_PER_CYCLE_USD

    if params.frequency == "hourly":
        recommendation = "High frequency DCA may incur significant gas costs. Consider daily or weekly."
    elif amount_per_cycle < 10:
        recommendation = "Low amount per cycle. Gas costs may be disproportionate."
    else:
        recommendation = (f"{params.frequency.capitalize()} DCA looks reasonable for "
                          f"{params.total_amount} {params.sell_token} → {params.buy_token}.")

    return DCAAnalysis(
        params=params,
        amount_per_cycle=amount_per_cycle,
        number_of_cycles=cycles,
        estimated_buy_amount=buy_amount_per_cycle * cycles,
        current_price=current_price,
        estimated_avg_price=current_price,
        gas_cost_estimate=gas_per_cycle * cycles,
        recommendation=recommendation,
    )


def format_dca_analysis(analysis: DCAAnalysis) -> str:
    p = analysis.params
    lines = [
        "# 💰 DCA Analysis",
        "",
        "## Strategy",
        f"- **Sell**: {p.total_amount} {p.sell_token}",
        f"- **Buy**: {p.buy_token}",
        f"- **Frequency**: {p.frequency}",
        f"- **Cycles**: {analysis.number_of_cycles}",
        f"- **Per cycle**: {analysis.amount_per_cycle:.2f} {p.sell_token}",
        "",
        "## Estimates",
        f"- **Current price**: ${analysis.current_price:.6f}",
        f"- **Est. total buy**: {analysis.estimated_buy_amount:.4f} {p.buy_token}",
        f"- **Est. gas cost**: ${analysis.gas_cost_estimate:.2f}",
        "",
        "## Recommendation",
        analysis.recommendation,
    ]
    return "\n".join(lines)


def simulate_dca_performance(prices: Iterable[float], amount_per_cycle: float) -> Dict[str, float]:
    """
    Replay a fixed-amount purchase at each historical price.
    The resulting average price is the harmonic mean of the prices.
    """
    arr = np.asarray(list(prices), dtype=float)
    if arr.size == 0:
        return {"total_spent": 0.0, "total_acquired": 0.0, "avg_price": 0.0}
    if np.any(arr <= 0):
        raise ValueError("Prices must be positive")

    total_spent = float(amount_per_cycle * arr.size)
    total_acquired = float(np.sum(amount_per_cycle / arr))
    return {
        "total_spent": total_spent,
        "total_acquired": total_acquired,
        "avg_price": total_spent / total_acquired,
    }
