"""
Market breadth statistics for the daily report
"""

from typing import Any, Dict, Iterable

import pandas as pd

from models import TokenRecord


def market_breadth(records: Iterable[TokenRecord], top_n: int = 10) -> Dict[str, Any]:
    """
    Summarize a batch of token records

    Args:
        records: Token records from one fetch
        top_n: Size of the group used for volume concentration

    Returns:
        Dictionary with advancers/decliners, change distribution and
        the share of 24h volume held by the top_n tokens
    """
    df = pd.DataFrame(
        [(t.price_change_24h, t.volume_24h, t.liquidity, t.verified) for t in records],
        columns=["change", "volume", "liquidity", "verified"],
    )

    if df.empty:
        return {
            "advancers": 0,
            "decliners": 0,
            "unchanged": 0,
            "median_change": 0.0,
            "mean_change": 0.0,
            "volume_concentration": 0.0,
            "verified_count": 0,
            "total_liquidity": 0.0,
        }

    active = df[df["volume"] > 0]
    total_volume = active["volume"].sum()
    top_volume = active["volume"].nlargest(top_n).sum()

    return {
        "advancers": int((active["change"] > 0).sum()),
        "decliners": int((active["change"] < 0).sum()),
        "unchanged": int((active["change"] == 0).sum()),
        "median_change": float(active["change"].median()) if not active.empty else 0.0,
        "mean_change": float(active["change"].mean()) if not active.empty else 0.0,
        "volume_concentration": float(top_volume / total_volume * 100) if total_volume > 0 else 0.0,
        "verified_count": int(df["verified"].sum()),
        "total_liquidity": float(pd.to_numeric(df["liquidity"], errors="coerce").fillna(0).sum()),
    }
