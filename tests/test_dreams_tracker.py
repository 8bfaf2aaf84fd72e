import asyncio
from unittest.mock import patch

import aiohttp

from dreams_tracker import (
    DREAMS_BRIDGES,
    DREAMS_TOKENS,
    fetch_dreams_from_avnu,
    fetch_dreams_from_dexscreener,
    get_dreams_stats,
)


class FakeResponse:
    def __init__(self, status=200, payload=None):
        self.status = status
        self.payload = payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def json(self):
        return self.payload


class FakeSessionContext:
    def __init__(self, session):
        self.session = session

    async def __aenter__(self):
        return self.session

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, params=None):
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.response


def test_avnu_match_by_address():
    session = FakeSession(FakeResponse(payload={"content": [
        {"symbol": "ETH", "address": "0x49d"},
        {"symbol": "DREAMS", "address": DREAMS_TOKENS["starknet"]["address"].upper(), "lastDailyVolumeUsd": 1234.5},
    ]}))

    stats = asyncio.run(fetch_dreams_from_avnu(session))

    assert stats.network == "starknet"
    assert stats.volume_24h == 1234.5


def test_avnu_token_missing():
    session = FakeSession(FakeResponse(payload={"content": [{"symbol": "ETH", "address": "0x49d"}]}))

    assert asyncio.run(fetch_dreams_from_avnu(session)) is None


def test_avnu_http_error():
    assert asyncio.run(fetch_dreams_from_avnu(FakeSession(FakeResponse(status=502)))) is None


def test_dexscreener_main_pair():
    session = FakeSession(FakeResponse(payload={"pairs": [
        {"priceUsd": "0.0123", "priceChange": {"h24": -4.5}, "volume": {"h24": 98000}},
        {"priceUsd": "0.0200", "priceChange": {"h24": 10}, "volume": {"h24": 5}},
    ]}))

    stats = asyncio.run(fetch_dreams_from_dexscreener(session))

    assert session.urls[0].endswith(DREAMS_TOKENS["base"]["address"])
    assert stats.price == 0.0123
    assert stats.change_24h == -4.5
    assert stats.volume_24h == 98000


def test_dexscreener_connection_error():
    session = FakeSession(error=aiohttp.ClientConnectionError("refused"))

    assert asyncio.run(fetch_dreams_from_dexscreener(session)) is None


def test_dexscreener_no_pairs():
    assert asyncio.run(fetch_dreams_from_dexscreener(FakeSession(FakeResponse(payload={"pairs": None})))) is None


def test_get_dreams_stats_combines_both_feeds():
    payload = {
        "content": [{"symbol": "DREAMS", "address": "0xdead", "lastDailyVolumeUsd": 50}],
        "pairs": [{"priceUsd": "0.01", "priceChange": {"h24": 2}, "volume": {"h24": 700}}],
    }
    session = FakeSession(FakeResponse(payload=payload))

    with patch("dreams_tracker.aiohttp.ClientSession", return_value=FakeSessionContext(session)):
        stats = asyncio.run(get_dreams_stats(timeout=1))

    assert stats["starknet"].volume_24h == 50
    assert stats["base"].price == 0.01
    assert stats["bridges"] == DREAMS_BRIDGES
