from datetime import datetime, timezone

import pytest

from models import TokenRecord

FIXED_TIME = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def token(symbol, address, price=1.0, change=0.0, volume=0.0, verified=False, name=None, **kwargs):
    return TokenRecord(
        symbol=symbol,
        name=name or symbol,
        address=address,
        price_usd=price,
        volume_24h=volume,
        price_change_24h=change,
        verified=verified,
        last_updated=FIXED_TIME,
        **kwargs,
    )


@pytest.fixture
def make_token():
    return token


@pytest.fixture
def scenario_a_tokens():
    return [
        token("ETH", "0x1", price=3000, change=6.2, volume=1_000_000),
        token("STRK", "0x2", price=0.5, change=-3, volume=500_000),
        token("USDC", "0x3", price=1.0, change=0, volume=0),
    ]


@pytest.fixture
def base_config(tmp_path):
    return {
        "NETWORK": "mainnet",
        "WATCHLIST": ["ETH", "STRK"],
        "PRICE_CHANGE_THRESHOLD": 5.0,
        "VOLUME_SPIKE_THRESHOLD": 200.0,
        "OUTPUT_FORMAT": "markdown",
        "REPORTS_DIR": str(tmp_path / "reports"),
        "HTTP_TIMEOUT_SECONDS": 5,
    }
