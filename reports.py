"""
Report formatting for StarkWatch
Renders snapshots, alerts and token stats as Markdown or JSON
"""

import json
import logging
import os
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from models import AlertEvent, MarketSnapshot, Report, TokenRecord, utc_now

logger = logging.getLogger("Reports")

# Display order and headers for alert groups
ALERT_SECTIONS = [
    ("price_surge", "## 📈 Price Surges"),
    ("price_drop", "## 📉 Price Drops"),
    ("volume_spike", "## 📊 Volume Spikes"),
    ("new_token", "## 🆕 New Tokens"),
]

NO_ALERTS_MESSAGE = "No active alerts."


def format_usd(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    if value >= 1e9:
        return f"${value / 1e9:.2f}B"
    if value >= 1e6:
        return f"${value / 1e6:.2f}M"
    if value >= 1e3:
        return f"${value / 1e3:.2f}K"
    return f"${value:.2f}"


def format_price(value: float) -> str:
    if value >= 1:
        return f"${value:,.2f}"
    return f"${value:.6f}"


def format_change(value: float) -> str:
    return f"{'+' if value > 0 else ''}{value:.2f}%"


def _token_table(tokens: Iterable[TokenRecord]) -> List[str]:
    lines = [
        "| # | Token | Price | 24h Volume | 24h Change |",
        "|---|-------|-------|------------|------------|",
    ]
    for i, t in enumerate(tokens, 1):
        lines.append(f"| {i} | {t.symbol} | {format_price(t.price_usd)} | "
                     f"{format_usd(t.volume_24h)} | {format_change(t.price_change_24h)} |")
    return lines


def _snapshot_sections(snapshot: MarketSnapshot) -> List[str]:
    lines = [
        "## Summary",
        f"- **Network**: {snapshot.network}",
        f"- **Tokens**: {snapshot.token_count}",
        f"- **24h Volume**: {format_usd(snapshot.total_volume_24h)}",
        "",
        "## 🏆 Top by Volume",
        "",
    ]
    if snapshot.top_by_volume:
        lines += _token_table(snapshot.top_by_volume)
    else:
        lines.append("_No trading activity._")

    lines += ["", "## 📈 Top Gainers", ""]
    if snapshot.top_gainers:
        lines += [f"- **{t.symbol}**: {format_change(t.price_change_24h)}" for t in snapshot.top_gainers]
    else:
        lines.append("_None._")

    lines += ["", "## 📉 Top Losers", ""]
    if snapshot.top_losers:
        lines += [f"- **{t.symbol}**: {format_change(t.price_change_24h)}" for t in snapshot.top_losers]
    else:
        lines.append("_None._")

    if snapshot.watchlist:
        lines += ["", "## 👀 Watchlist", ""]
        lines += _token_table(snapshot.watchlist)

    lines.append("")
    return lines


def format_snapshot(snapshot: MarketSnapshot) -> str:
    lines = [
        "# 📊 Starknet Market Snapshot",
        "",
        f"Generated: {snapshot.timestamp.isoformat()}",
        "",
    ]
    lines += _snapshot_sections(snapshot)
    return "\n".join(lines)


def _alert_sections(alerts: List[AlertEvent]) -> List[str]:
    by_type: Dict[str, List[AlertEvent]] = {}
    for alert in alerts:
        by_type.setdefault(alert.type, []).append(alert)

    lines = []
    for alert_type, header in ALERT_SECTIONS:
        group = by_type.get(alert_type)
        if not group:
            continue
        lines.append(header)
        for a in group:
            if alert_type == "price_surge":
                lines.append(f"- **{a.symbol}**: +{a.value:.2f}% ({a.severity})")
            elif alert_type == "price_drop":
                lines.append(f"- **{a.symbol}**: {a.value:.2f}% ({a.severity})")
            elif alert_type == "volume_spike":
                lines.append(f"- **{a.symbol}**: +{a.value:.0f}% volume ({a.severity})")
            else:
                lines.append(f"- {a.message}")
        lines.append("")
    return lines


def format_alerts(alerts: List[AlertEvent], generated_at: Optional[datetime] = None) -> str:
    """Alerts grouped by type; empty groups get no header."""
    if not alerts:
        return NO_ALERTS_MESSAGE

    generated_at = generated_at or utc_now()
    lines = ["# 🚨 StarkWatch Alerts", "", f"Generated: {generated_at.isoformat()}", ""]
    lines += _alert_sections(alerts)
    return "\n".join(lines)


def format_daily(snapshot: MarketSnapshot, alerts: List[AlertEvent], breadth: Dict[str, Any]) -> str:
    lines = [
        f"# 🗞️ Starknet Daily Report ({snapshot.timestamp.date().isoformat()})",
        "",
        f"Generated: {snapshot.timestamp.isoformat()}",
        "",
    ]
    lines += _snapshot_sections(snapshot)
    lines += [
        "## 🌡️ Market Breadth",
        f"- **Advancers / Decliners / Unchanged**: {breadth['advancers']} / {breadth['decliners']} / {breadth['unchanged']}",
        f"- **Median 24h change**: {format_change(breadth['median_change'])}",
        f"- **Mean 24h change**: {format_change(breadth['mean_change'])}",
        f"- **Top-10 volume share**: {breadth['volume_concentration']:.1f}%",
        f"- **Verified tokens**: {breadth['verified_count']}",
        f"- **Total liquidity**: {format_usd(breadth['total_liquidity'])}",
        "",
        "## 🚨 Alerts",
        "",
    ]
    if alerts:
        lines += [line.replace("## ", "### ", 1) if line.startswith("## ") else line
                  for line in _alert_sections(alerts)]
    else:
        lines += [NO_ALERTS_MESSAGE, ""]
    lines += ["---", "*Generated by StarkWatch*"]
    return "\n".join(lines)


def format_dreams_report(stats: Dict[str, Any]) -> str:
    report = "# 💭 $DREAMS Token Report\n\n"

    base = stats.get("base")
    if base:
        price = f"${base.price:.6f}" if base.price is not None else "N/A"
        change = f"{base.change_24h:.2f}%" if base.change_24h is not None else "N/A"
        report += "## Base\n"
        report += f"- **Price**: {price}\n"
        report += f"- **24h Change**: {change}\n"
        report += f"- **24h Volume**: ${base.volume_24h or 0:,.0f}\n\n"

    starknet = stats.get("starknet")
    if starknet:
        report += "## Starknet\n"
        report += f"- **24h Volume**: ${starknet.volume_24h or 0:,.0f}\n\n"

    if not base and not starknet:
        report += "_No $DREAMS market data available._\n\n"

    bridges = stats.get("bridges") or {}
    report += "## Bridges\n"
    report += f"- [Solana ↔ Base]({bridges.get('solana_to_base', '')})\n"
    report += f"- [Solana ↔ Starknet (Hyperlane)]({bridges.get('solana_to_starknet', '')})\n"
    return report


def to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


def _build(report_type: str, title: str, markdown: str, data: Dict[str, Any], fmt: str) -> Report:
    if fmt == "json":
        return Report(type=report_type, title=title, content=to_json(data), format="json", data=data)
    if fmt == "markdown":
        return Report(type=report_type, title=title, content=markdown, format="markdown", data=data)
    raise ValueError(f"Invalid report format: {fmt}")


def generate_snapshot_report(snapshot: MarketSnapshot, fmt: str = "markdown") -> Report:
    return _build("snapshot", "Market Snapshot", format_snapshot(snapshot), snapshot.to_dict(), fmt)


def generate_alerts_report(alerts: List[AlertEvent], fmt: str = "markdown") -> Report:
    data = {"generated": utc_now().isoformat(), "count": len(alerts), "alerts": [a.to_dict() for a in alerts]}
    return _build("alerts", "Alerts", format_alerts(alerts), data, fmt)


def generate_daily_report(snapshot: MarketSnapshot, alerts: List[AlertEvent],
                          breadth: Dict[str, Any], fmt: str = "markdown") -> Report:
    data = {
        "snapshot": snapshot.to_dict(),
        "breadth": breadth,
        "alerts": [a.to_dict() for a in alerts],
    }
    return _build("daily", "Daily Report", format_daily(snapshot, alerts, breadth), data, fmt)


def generate_dreams_report(stats: Dict[str, Any], fmt: str = "markdown") -> Report:
    data = {
        "starknet": vars(stats["starknet"]) if stats.get("starknet") else None,
        "base": vars(stats["base"]) if stats.get("base") else None,
        "bridges": stats.get("bridges"),
    }
    return _build("dreams", "$DREAMS Report", format_dreams_report(stats), data, fmt)


def save_report(report: Report, path: Optional[str] = None, output_dir: str = "./reports") -> str:
    """
    Write a report to disk

    Args:
        report: Report to write
        path: Destination file; a timestamped name in output_dir when omitted

    Returns:
        Absolute path of the written file
    """
    if path is None:
        ext = "json" if report.format == "json" else "md"
        stamp = report.generated_at.strftime("%Y-%m-%d_%H%M%S")
        path = os.path.join(output_dir, f"{report.type}-{stamp}.{ext}")

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        f.write(report.content)

    resolved = os.path.abspath(path)
    logger.info(f"[REPORT] Saved {report.type} report to {resolved}")
    return resolved
