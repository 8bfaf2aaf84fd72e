# Filename: telegram_alert.py

import os
import logging
from typing import List, Optional

import requests

from models import AlertEvent

logger = logging.getLogger("TelegramNotifier")

SEVERITY_ICONS = {"high": "🔴", "medium": "🟠", "low": "🟡"}


class TelegramNotifier:
    def __init__(self, bot_token: str = None, chat_id: str = None, timeout: float = 10):
        self.bot_token = bot_token or os.getenv("TELEGRAM_BOT_TOKEN", "")
        self.chat_id = chat_id or os.getenv("TELEGRAM_CHAT_ID", "")
        self.timeout = timeout

        if not self.bot_token or not self.chat_id:
            logger.error("[Telegram] Missing bot token or chat ID!")

    def format_alerts(self, alerts: List[AlertEvent]) -> str:
        lines = [f"🚨 *StarkWatch: {len(alerts)} alert(s)*", ""]
        for alert in alerts:
            icon = SEVERITY_ICONS.get(alert.severity, "⚪")
            lines.append(f"{icon} `{alert.symbol}` {alert.message}")
        return "\n".join(lines)

    def send_alerts(self, alerts: List[AlertEvent]) -> bool:
        if not alerts:
            return False
        return self.send_markdown(self.format_alerts(alerts))

    def send_markdown(self, text: str) -> bool:
        """
        Sends a raw Markdown message.
        """
        if not self.bot_token or not self.chat_id:
            return False

        url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": "Markdown",
            "disable_web_page_preview": True
        }

        try:
            response = requests.post(url, data=payload, timeout=self.timeout)
            if response.status_code != 200:
                logger.error(f"[Telegram] Failed: {response.status_code} - {response.text}")
                return False
            logger.info("[Telegram] ✅ Message sent successfully.")
            return True
        except requests.RequestException as e:
            logger.error(f"[Telegram] Request exception: {e}")
            return False


def build_notifier(config) -> Optional[TelegramNotifier]:
    if config.get("ENABLE_TELEGRAM") and config.get("TELEGRAM_BOT_TOKEN") and config.get("TELEGRAM_CHAT_ID"):
        return TelegramNotifier(config["TELEGRAM_BOT_TOKEN"], config["TELEGRAM_CHAT_ID"])
    return None
