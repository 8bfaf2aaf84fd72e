# Filename: snapshot.py

from datetime import datetime
from typing import Dict, Iterable, List, Optional

from models import MarketSnapshot, TokenRecord, utc_now

TOP_VOLUME_COUNT = 20
TOP_MOVERS_COUNT = 10


def aggregate(records: Iterable[TokenRecord], watchlist: Iterable[str],
              network: str = "mainnet", timestamp: Optional[datetime] = None,
              top_volume_count: int = TOP_VOLUME_COUNT,
              top_movers_count: int = TOP_MOVERS_COUNT) -> MarketSnapshot:
    """
    Build a ranked snapshot from one batch of token records.

    Volume rankings, movers and the total volume only consider tokens that
    traded in the last 24h. The watchlist view is taken from the full batch.
    Sorting is stable, so ties keep their input order.
    """
    all_tokens = list(records)
    active = [t for t in all_tokens if t.volume_24h > 0]

    by_volume = sorted(active, key=lambda t: t.volume_24h, reverse=True)
    gainers = sorted((t for t in active if t.price_change_24h > 0),
                     key=lambda t: t.price_change_24h, reverse=True)
    losers = sorted((t for t in active if t.price_change_24h < 0),
                    key=lambda t: t.price_change_24h)

    wanted = {s.upper() for s in watchlist}
    watched = [t for t in all_tokens if t.symbol.upper() in wanted]

    return MarketSnapshot(
        timestamp=timestamp or utc_now(),
        network=network,
        token_count=len(all_tokens),
        total_volume_24h=sum(t.volume_24h for t in active),
        top_by_volume=tuple(by_volume[:top_volume_count]),
        top_gainers=tuple(gainers[:top_movers_count]),
        top_losers=tuple(losers[:top_movers_count]),
        watchlist=tuple(watched),
    )


def aggregate_with_config(records: Iterable[TokenRecord], config: Dict) -> MarketSnapshot:
    return aggregate(
        records,
        config.get("WATCHLIST") or [],
        network=config.get("NETWORK", "mainnet"),
        top_volume_count=int(config.get("TOP_VOLUME_COUNT", TOP_VOLUME_COUNT)),
        top_movers_count=int(config.get("TOP_MOVERS_COUNT", TOP_MOVERS_COUNT)),
    )


def compare_prices(current: Iterable[TokenRecord], previous: Iterable[TokenRecord]) -> List[Dict]:
    """
    Price change per address between two batches, largest absolute move first.
    Tokens missing from `previous` or with a zero previous price are skipped.
    """
    previous_by_address = {t.address: t for t in previous}
    changes = []
    for token in current:
        prev = previous_by_address.get(token.address)
        if prev is None or prev.price_usd == 0:
            continue
        changes.append({
            "symbol": token.symbol,
            "address": token.address,
            "current": token.price_usd,
            "previous": prev.price_usd,
            "change": (token.price_usd - prev.price_usd) / prev.price_usd * 100,
        })
    changes.sort(key=lambda c: abs(c["change"]), reverse=True)
    return changes
