"""
$DREAMS token tracker
Follows the Daydreams token on Starknet (AVNU) and Base (DexScreener)
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

import aiohttp
from loguru import logger

from config import AVNU_ENDPOINTS
from models import utc_now

DREAMS_TOKENS = {
    "starknet": {
        "address": "0x04fcaf2a7b4a072fe57c59beee807322d34ed65000d78611c909a46fead07fb1",
        "explorer": "https://starkscan.co/token/",
        "decimals": 18,
    },
    "base": {
        "address": "0x176383016BB310C9f1C180DC6729d5E28104e602",
        "explorer": "https://basescan.org/address/",
        "decimals": 18,
    },
    "solana": {
        "address": "GMzuntWYJLpNuCizrSR7ZXggiMdDzTNiEmSNHHunpump",
        "explorer": "https://solscan.io/token/",
        "decimals": 6,
    },
}

DREAMS_BRIDGES = {
    "solana_to_base": "https://bridge.daydreams.systems/",
    "solana_to_starknet": "https://nexus.hyperlane.xyz/?origin=solanamainnet&destination=starknet",
}

DEXSCREENER_TOKENS_URL = "https://api.dexscreener.com/latest/dex/tokens"


@dataclass
class DreamsStats:
    network: str
    address: str
    price: Optional[float] = None
    change_24h: Optional[float] = None
    volume_24h: Optional[float] = None
    last_updated: datetime = field(default_factory=utc_now)


async def fetch_dreams_from_avnu(session: aiohttp.ClientSession) -> Optional[DreamsStats]:
    """Look up $DREAMS in the AVNU token list. Returns None when unavailable."""
    url = f"{AVNU_ENDPOINTS['mainnet']}/v1/starknet/tokens"
    target = DREAMS_TOKENS["starknet"]["address"].lower()
    try:
        async with session.get(url, params={"page": 0, "size": 500}) as response:
            if response.status != 200:
                logger.error(f"[DREAMS] AVNU returned {response.status}")
                return None
            data = await response.json()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"[DREAMS] Failed to fetch $DREAMS from AVNU: {e}")
        return None

    tokens = data.get("content", []) if isinstance(data, dict) else []
    match = next(
        (t for t in tokens
         if (t.get("address") or "").lower() == target or (t.get("symbol") or "").upper() == "DREAMS"),
        None,
    )
    if match is None:
        logger.warning("[DREAMS] $DREAMS token not found in AVNU token list")
        return None

    return DreamsStats(
        network="starknet",
        address=DREAMS_TOKENS["starknet"]["address"],
        volume_24h=float(match.get("lastDailyVolumeUsd") or 0),
    )


async def fetch_dreams_from_dexscreener(session: aiohttp.ClientSession) -> Optional[DreamsStats]:
    """Read $DREAMS on Base from its most liquid DexScreener pair."""
    address = DREAMS_TOKENS["base"]["address"]
    try:
        async with session.get(f"{DEXSCREENER_TOKENS_URL}/{address}") as response:
            if response.status != 200:
                logger.error(f"[DREAMS] DexScreener returned {response.status}")
                return None
            data = await response.json()
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"[DREAMS] Failed to fetch $DREAMS from DexScreener: {e}")
        return None

    pairs = (data or {}).get("pairs") or []
    if not pairs:
        return None

    main_pair = pairs[0]
    try:
        price = float(main_pair.get("priceUsd") or 0)
    except (TypeError, ValueError):
        price = 0.0

    return DreamsStats(
        network="base",
        address=address,
        price=price,
        change_24h=float((main_pair.get("priceChange") or {}).get("h24") or 0),
        volume_24h=float((main_pair.get("volume") or {}).get("h24") or 0),
    )


async def get_dreams_stats(timeout: float = 15) -> Dict[str, Any]:
    """Query both feeds concurrently."""
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        starknet, base = await asyncio.gather(
            fetch_dreams_from_avnu(session),
            fetch_dreams_from_dexscreener(session),
        )

    return {
        "starknet": starknet,
        "base": base,
        "bridges": DREAMS_BRIDGES,
    }
