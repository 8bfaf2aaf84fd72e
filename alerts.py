# Filename: alerts.py

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from models import AlertConfig, AlertDetectorState, AlertEvent, TokenRecord, utc_now

logger = logging.getLogger("AlertDetector")

# (medium, high) cut points, strict ">" comparisons
PRICE_SEVERITY_CUTOFFS = (10.0, 20.0)
VOLUME_SEVERITY_CUTOFFS = (300.0, 500.0)


def classify_severity(value: float, cutoffs: Tuple[float, float]) -> str:
    medium, high = cutoffs
    magnitude = abs(value)
    if magnitude > high:
        return "high"
    if magnitude > medium:
        return "medium"
    return "low"


def cutoffs_from_config(config: Dict) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    price = (float(config.get("PRICE_SEVERITY_MEDIUM", PRICE_SEVERITY_CUTOFFS[0])),
             float(config.get("PRICE_SEVERITY_HIGH", PRICE_SEVERITY_CUTOFFS[1])))
    volume = (float(config.get("VOLUME_SEVERITY_MEDIUM", VOLUME_SEVERITY_CUTOFFS[0])),
              float(config.get("VOLUME_SEVERITY_HIGH", VOLUME_SEVERITY_CUTOFFS[1])))
    return price, volume


def detect(records: Iterable[TokenRecord], config: AlertConfig, state: AlertDetectorState,
           now: Optional[datetime] = None,
           price_cutoffs: Tuple[float, float] = PRICE_SEVERITY_CUTOFFS,
           volume_cutoffs: Tuple[float, float] = VOLUME_SEVERITY_CUTOFFS
           ) -> Tuple[List[AlertEvent], AlertDetectorState]:
    """
    Compare a batch of token records against the previous poll.

    Args:
        records: Current batch
        config: Thresholds and optional watchlist filter
        state: State left by the previous call (left untouched)
        now: Timestamp stamped on alerts and on the new state

    Returns:
        (alerts in record order, new state)
    """
    now = now or utc_now()
    new_state = state.copy()
    watchlist = {s.upper() for s in (config.watchlist or [])}
    alerts: List[AlertEvent] = []

    for token in records:
        if watchlist and token.symbol.upper() not in watchlist:
            continue

        change = token.price_change_24h
        if abs(change) >= config.price_change_threshold:
            is_up = change > 0
            alerts.append(AlertEvent(
                type="price_surge" if is_up else "price_drop",
                symbol=token.symbol,
                message=f"{token.symbol} {'surged' if is_up else 'dropped'} {abs(change):.2f}% in 24h",
                value=change,
                threshold=config.price_change_threshold,
                timestamp=now,
                severity=classify_severity(change, price_cutoffs),
            ))

        # Compared against the previous poll, before this record is stored
        last_volume = state.last_volume_by_address.get(token.address)
        if last_volume is not None and last_volume > 0:
            volume_change = (token.volume_24h - last_volume) / last_volume * 100
            if volume_change >= config.volume_spike_threshold:
                alerts.append(AlertEvent(
                    type="volume_spike",
                    symbol=token.symbol,
                    message=f"{token.symbol} volume spiked {volume_change:.0f}%",
                    value=volume_change,
                    threshold=config.volume_spike_threshold,
                    timestamp=now,
                    severity=classify_severity(volume_change, volume_cutoffs),
                ))

        if token.address not in state.known_addresses and token.verified:
            alerts.append(AlertEvent(
                type="new_token",
                symbol=token.symbol,
                message=f"New verified token: {token.symbol} ({token.name})",
                value=0,
                threshold=0,
                timestamp=now,
                severity="medium",
            ))

        new_state.last_price_by_address[token.address] = token.price_usd
        new_state.last_volume_by_address[token.address] = token.volume_24h
        new_state.known_addresses.add(token.address)

    new_state.last_check_timestamp = now
    return alerts, new_state


class AlertDetector:
    """
    Holds the detector state between polls.
    Callers must not run two checks at the same time.
    """

    def __init__(self, config: Dict, state: Optional[AlertDetectorState] = None):
        self.alert_config = AlertConfig.from_config(config)
        self.price_cutoffs, self.volume_cutoffs = cutoffs_from_config(config)
        self.state = state or AlertDetectorState()

    def check(self, records: Iterable[TokenRecord], alert_config: Optional[AlertConfig] = None) -> List[AlertEvent]:
        alert_config = alert_config or self.alert_config
        logger.info(f"[ALERTS] Checking (price >= {alert_config.price_change_threshold}%, "
                    f"volume >= {alert_config.volume_spike_threshold}%, "
                    f"watchlist={len(alert_config.watchlist or [])} symbols)")
        alerts, self.state = detect(
            records, alert_config, self.state,
            price_cutoffs=self.price_cutoffs,
            volume_cutoffs=self.volume_cutoffs,
        )
        logger.info(f"[ALERTS] Found {len(alerts)} alerts")
        return alerts

    def preview(self, records: Iterable[TokenRecord]) -> List[AlertEvent]:
        """Alerts this batch would raise, without moving the state forward."""
        alerts, _ = detect(records, self.alert_config, self.state,
                           price_cutoffs=self.price_cutoffs,
                           volume_cutoffs=self.volume_cutoffs)
        return alerts

    def get_state(self) -> AlertDetectorState:
        return self.state.copy()

    def reset(self):
        self.state = AlertDetectorState()
