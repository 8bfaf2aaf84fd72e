"""
Market data sources for StarkWatch
Fetches token markets and swap quotes from AVNU and maps them to TokenRecord
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp
import requests
from loguru import logger

from config import AVNU_ENDPOINTS, AVNU_IMPULSE_ENDPOINTS
from models import TokenRecord, utc_now

# Upstream tags that mark a token as curated
VERIFIED_TAGS = ("Community", "AVNU", "Verified")


class FetchError(Exception):
    """Upstream market data could not be retrieved."""


@dataclass
class Quote:
    sell_amount: int
    buy_amount: int
    fee_usd: Optional[float] = None
    quote_id: str = ""


def _to_float(value: Any, default: Optional[float]) -> Optional[float]:
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any) -> int:
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return int(value or 0)


def normalize_token(raw: Dict[str, Any]) -> Optional[TokenRecord]:
    """
    Map one AVNU market entry to a TokenRecord.

    Defaults for missing upstream fields:
        starknet.usd                          -> 0.0
        starknet.usdVolume24h                 -> 0.0
        starknet.usdPriceChangePercentage24h  -> 0.0
        global.usdMarketCap                   -> None
        starknet.usdLiquidity / usdTvl        -> None
        tags                                  -> [] (unverified)
        symbol / name                         -> "" / symbol

    Returns None for entries without an address.
    """
    address = (raw.get("address") or "").strip()
    if not address:
        return None

    starknet = raw.get("starknet") or {}
    global_data = raw.get("global") or {}
    tags = raw.get("tags") or []
    symbol = raw.get("symbol") or ""

    liquidity = _to_float(starknet.get("usdLiquidity"), None)
    if liquidity is None:
        liquidity = _to_float(starknet.get("usdTvl"), None)

    return TokenRecord(
        symbol=symbol,
        name=raw.get("name") or symbol,
        address=address,
        price_usd=max(_to_float(starknet.get("usd"), 0.0), 0.0),
        volume_24h=max(_to_float(starknet.get("usdVolume24h"), 0.0), 0.0),
        price_change_24h=_to_float(starknet.get("usdPriceChangePercentage24h"), 0.0),
        market_cap=_to_float(global_data.get("usdMarketCap"), None),
        liquidity=liquidity,
        verified=any(tag in tags for tag in VERIFIED_TAGS),
        last_updated=utc_now(),
    )


def normalize_tokens(payload: Any) -> List[TokenRecord]:
    if isinstance(payload, dict):
        payload = payload.get("content", payload.get("data"))
    if not isinstance(payload, list):
        raise FetchError("Invalid market data response format")

    tokens = []
    for raw in payload:
        token = normalize_token(raw) if isinstance(raw, dict) else None
        if token is not None:
            tokens.append(token)
    return tokens


class MarketDataFetcher:
    """
    Market data source backed by the AVNU APIs
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.network = config.get("NETWORK", "mainnet")
        self.timeout = config.get("HTTP_TIMEOUT_SECONDS", 15)
        self.api_url = AVNU_ENDPOINTS[self.network]
        self.impulse_url = AVNU_IMPULSE_ENDPOINTS[self.network]

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, params=params) as response:
                    if response.status != 200:
                        raise FetchError(f"GET {url} returned {response.status}")
                    return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            raise FetchError(f"GET {url} failed: {e}") from e

    async def fetch_tokens(self) -> List[TokenRecord]:
        """
        Fetch all token markets from AVNU

        Returns:
            Normalized token records

        Raises:
            FetchError: the upstream call failed or returned an unusable payload
        """
        logger.info(f"[FETCH] Fetching market data from AVNU ({self.network})...")
        payload = await self._get_json(f"{self.impulse_url}/v1/tokens")
        tokens = normalize_tokens(payload)
        logger.info(f"[FETCH] Fetched {len(tokens)} tokens")
        return tokens

    async def get_token_price(self, symbol: str) -> Optional[float]:
        tokens = await self.fetch_tokens()
        for token in tokens:
            if token.symbol.upper() == symbol.upper():
                return token.price_usd or None
        return None

    async def get_verified_tokens(self) -> List[TokenRecord]:
        tokens = await self.fetch_tokens()
        return [t for t in tokens if t.verified]

    def fetch_quote(self, sell_address: str, buy_address: str, sell_amount_raw: int) -> Quote:
        """
        Get the best swap quote for a sell amount given in raw token units

        Raises:
            FetchError: no quote could be obtained
        """
        params = {
            "sellTokenAddress": sell_address,
            "buyTokenAddress": buy_address,
            "sellAmount": hex(sell_amount_raw),
            "takerAddress": "0x0",
        }
        url = f"{self.api_url}/swap/v2/quotes"
        try:
            resp = requests.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            quotes = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[QUOTE] Quote request failed: {e}")
            raise FetchError(f"Quote request failed: {e}") from e

        if not isinstance(quotes, list) or not quotes:
            logger.error(f"[QUOTE] No quote returned: {quotes}")
            raise FetchError("Could not get quote")

        best = quotes[0]
        quote = Quote(
            sell_amount=_to_int(best.get("sellAmount", sell_amount_raw)),
            buy_amount=_to_int(best.get("buyAmount")),
            fee_usd=_to_float(best.get("gasFeesInUsd"), None),
            quote_id=best.get("quoteId", ""),
        )
        logger.info(f"[QUOTE] {sell_address[:10]}... -> {buy_address[:10]}... buyAmount={quote.buy_amount}")
        return quote
