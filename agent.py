# Filename: agent.py

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

from alert_state_store import AlertStateStore
from alerts import AlertDetector
from dca import DCAAnalysis, DCAParams, analyze_dca
from dreams_tracker import get_dreams_stats
from market_data import MarketDataFetcher
from market_stats import market_breadth
from models import AlertEvent, MarketSnapshot, Report, TokenRecord
from reports import (
    generate_alerts_report,
    generate_daily_report,
    generate_dreams_report,
    generate_snapshot_report,
    save_report,
    to_json,
)
from snapshot import aggregate_with_config

logger = logging.getLogger("MarketAgent")

REPORT_TYPES = ("snapshot", "daily", "alerts", "dreams")


class MarketAgent:
    """
    Single entry point used by the CLI and the scheduler.
    Owns the only AlertDetector, so detections never overlap within one agent
    as long as the caller runs one operation at a time.
    """

    def __init__(self, config: Dict[str, Any], fetcher: Optional[MarketDataFetcher] = None,
                 state_store: Optional[AlertStateStore] = None):
        self.config = config
        self.fetcher = fetcher or MarketDataFetcher(config)

        if state_store is None and config.get("PERSIST_ALERT_STATE"):
            state_store = AlertStateStore(config.get("ALERT_STATE_FILE", "alert_state.json"))
        self.state_store = state_store

        initial_state = self.state_store.load() if self.state_store else None
        self.detector = AlertDetector(config, state=initial_state)
        logger.info(f"🚀 MarketAgent initialized (network={config.get('NETWORK')})")

    # Market data

    def fetch_tokens(self) -> List[TokenRecord]:
        return asyncio.run(self.fetcher.fetch_tokens())

    def get_snapshot(self, tokens: Optional[List[TokenRecord]] = None) -> MarketSnapshot:
        if tokens is None:
            tokens = self.fetch_tokens()
        return aggregate_with_config(tokens, self.config)

    def get_top_by_volume(self, count: int = 10) -> List[TokenRecord]:
        return list(self.get_snapshot().top_by_volume[:count])

    def get_price(self, symbol: str) -> Optional[float]:
        return asyncio.run(self.fetcher.get_token_price(symbol))

    # Alerts

    def check_alerts(self, tokens: Optional[List[TokenRecord]] = None) -> List[AlertEvent]:
        if tokens is None:
            tokens = self.fetch_tokens()
        alerts = self.detector.check(tokens)
        if self.state_store:
            self.state_store.save(self.detector.state)
        return alerts

    def reset_alerts(self):
        self.detector.reset()
        if self.state_store:
            self.state_store.clear()

    # Reports

    def _generate(self, report_type: str, fmt: str) -> Report:
        if report_type == "dreams":
            stats = asyncio.run(get_dreams_stats(timeout=self.config.get("HTTP_TIMEOUT_SECONDS", 15)))
            return generate_dreams_report(stats, fmt)

        tokens = self.fetch_tokens()
        if report_type == "snapshot":
            return generate_snapshot_report(self.get_snapshot(tokens), fmt)
        if report_type == "alerts":
            return generate_alerts_report(self.check_alerts(tokens), fmt)
        if report_type == "daily":
            snapshot = self.get_snapshot(tokens)
            alerts = self.detector.preview(tokens)
            breadth = market_breadth(tokens, top_n=10)
            return generate_daily_report(snapshot, alerts, breadth, fmt)
        raise ValueError(f"Unknown report type: {report_type} (expected one of {', '.join(REPORT_TYPES)})")

    def generate_report(self, report_type: str = "snapshot", fmt: Optional[str] = None) -> Report:
        fmt = fmt or self.config.get("OUTPUT_FORMAT", "markdown")
        if fmt == "both":
            fmt = "markdown"
        return self._generate(report_type, fmt)

    def generate_reports(self, report_type: str = "snapshot") -> List[Report]:
        """One report per configured output format; fetches once."""
        fmt = self.config.get("OUTPUT_FORMAT", "markdown")
        if fmt != "both":
            return [self._generate(report_type, fmt)]

        markdown = self._generate(report_type, "markdown")
        return [markdown, _as_json(markdown)]

    def generate_and_save_report(self, report_type: str = "snapshot", path: Optional[str] = None) -> List[str]:
        output_dir = self.config.get("REPORTS_DIR", "./reports")
        reports = self.generate_reports(report_type)
        if path is None:
            return [save_report(r, output_dir=output_dir) for r in reports]
        if len(reports) == 1:
            return [save_report(reports[0], path=path, output_dir=output_dir)]

        # One destination per format: <path>.md and <path>.json
        root, _ = os.path.splitext(path)
        return [
            save_report(r, path=f"{root}.{'json' if r.format == 'json' else 'md'}", output_dir=output_dir)
            for r in reports
        ]

    # DCA

    def analyze_dca(self, params: DCAParams) -> DCAAnalysis:
        return analyze_dca(params, self.fetcher.fetch_quote)


def _as_json(report: Report) -> Report:
    return Report(type=report.type, title=report.title, content=to_json(report.data),
                  format="json", generated_at=report.generated_at, data=report.data)
