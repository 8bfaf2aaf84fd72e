# Filename: models.py

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

ALERT_TYPES = ("price_surge", "price_drop", "volume_spike", "new_token")
SEVERITIES = ("low", "medium", "high")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class TokenRecord:
    """
    TokenRecord is a point-in-time observation of one tradable asset.
    `address` is the join key across polls; symbols can collide or be renamed.
    """
    symbol: str                          # Short ticker, compared case-insensitively
    name: str
    address: str                         # Token contract address
    price_usd: float
    volume_24h: float                    # Trailing 24h traded value (USD)
    price_change_24h: float              # Signed percentage
    market_cap: Optional[float] = None
    liquidity: Optional[float] = None
    verified: bool = False               # Passed an upstream curation tag check
    last_updated: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "address": self.address,
            "priceUsd": self.price_usd,
            "volume24h": self.volume_24h,
            "priceChange24h": self.price_change_24h,
            "marketCap": self.market_cap,
            "liquidity": self.liquidity,
            "verified": self.verified,
            "lastUpdated": _iso(self.last_updated),
        }


@dataclass(frozen=True)
class MarketSnapshot:
    """Ranked view computed from one fetch batch. Never mutated once built."""
    timestamp: datetime
    network: str
    token_count: int
    total_volume_24h: float
    top_by_volume: tuple
    top_gainers: tuple
    top_losers: tuple
    watchlist: tuple

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": _iso(self.timestamp),
            "network": self.network,
            "tokenCount": self.token_count,
            "totalVolume24h": self.total_volume_24h,
            "topByVolume": [t.to_dict() for t in self.top_by_volume],
            "topGainers": [t.to_dict() for t in self.top_gainers],
            "topLosers": [t.to_dict() for t in self.top_losers],
            "watchlist": [t.to_dict() for t in self.watchlist],
        }


@dataclass(frozen=True)
class AlertEvent:
    type: str           # price_surge | price_drop | volume_spike | new_token
    symbol: str
    message: str
    value: float        # Percentage change or volume change ratio
    threshold: float
    timestamp: datetime
    severity: str       # low | medium | high

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "symbol": self.symbol,
            "message": self.message,
            "value": self.value,
            "threshold": self.threshold,
            "timestamp": _iso(self.timestamp),
            "severity": self.severity,
        }


@dataclass
class AlertConfig:
    price_change_threshold: float = 5.0
    volume_spike_threshold: float = 200.0
    watchlist: List[str] = field(default_factory=list)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "AlertConfig":
        return cls(
            price_change_threshold=float(config.get("PRICE_CHANGE_THRESHOLD", 5.0)),
            volume_spike_threshold=float(config.get("VOLUME_SPIKE_THRESHOLD", 200.0)),
            watchlist=list(config.get("WATCHLIST") or []),
        )


@dataclass
class AlertDetectorState:
    """
    State carried from one detection call to the next.
    Every map is keyed by token address, never by symbol.
    """
    last_price_by_address: Dict[str, float] = field(default_factory=dict)
    last_volume_by_address: Dict[str, float] = field(default_factory=dict)
    known_addresses: Set[str] = field(default_factory=set)
    last_check_timestamp: Optional[datetime] = None

    def copy(self) -> "AlertDetectorState":
        return AlertDetectorState(
            last_price_by_address=dict(self.last_price_by_address),
            last_volume_by_address=dict(self.last_volume_by_address),
            known_addresses=set(self.known_addresses),
            last_check_timestamp=self.last_check_timestamp,
        )

    def reset(self):
        self.last_price_by_address.clear()
        self.last_volume_by_address.clear()
        self.known_addresses.clear()
        self.last_check_timestamp = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastPrices": self.last_price_by_address,
            "lastVolumes": self.last_volume_by_address,
            "knownTokens": sorted(self.known_addresses),
            "lastCheck": _iso(self.last_check_timestamp),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AlertDetectorState":
        if not isinstance(data, dict):
            raise ValueError(f"Alert state must be an object, got {type(data).__name__}")
        for key in ("lastPrices", "lastVolumes"):
            if not isinstance(data.get(key) or {}, dict):
                raise ValueError(f"Alert state field {key} must be an object")
        last_check = data.get("lastCheck")
        if last_check is not None and not isinstance(last_check, str):
            raise ValueError("Alert state field lastCheck must be an ISO timestamp")
        return cls(
            last_price_by_address={k: float(v) for k, v in (data.get("lastPrices") or {}).items()},
            last_volume_by_address={k: float(v) for k, v in (data.get("lastVolumes") or {}).items()},
            known_addresses=set(data.get("knownTokens") or []),
            last_check_timestamp=datetime.fromisoformat(last_check) if last_check else None,
        )


@dataclass
class Report:
    type: str                     # snapshot | daily | alerts | dreams
    title: str
    content: str
    format: str = "markdown"      # markdown | json
    generated_at: datetime = field(default_factory=utc_now)
    data: Optional[Dict[str, Any]] = None
