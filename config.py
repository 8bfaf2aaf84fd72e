"""
StarkWatch configuration
Defaults, config.json loading and environment overrides
"""

import os
import json
import logging
from typing import Dict, Any, List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("config")

CONFIG_FILE = "config.json"

# Default configuration
DEFAULT_CONFIG = {
    "NETWORK": "mainnet",
    "WATCHLIST": ["ETH", "STRK", "USDC", "LORDS", "ZEND", "BROTHER", "NSTR"],

    # Alerts (percentages)
    "PRICE_CHANGE_THRESHOLD": 5.0,
    "VOLUME_SPIKE_THRESHOLD": 200.0,
    "PRICE_SEVERITY_MEDIUM": 10.0,
    "PRICE_SEVERITY_HIGH": 20.0,
    "VOLUME_SEVERITY_MEDIUM": 300.0,
    "VOLUME_SEVERITY_HIGH": 500.0,

    # Rankings
    "TOP_VOLUME_COUNT": 20,
    "TOP_MOVERS_COUNT": 10,

    # Reports
    "REPORTS_DIR": "./reports",
    "OUTPUT_FORMAT": "markdown",

    # Schedules: "every N seconds|minutes|hours|days" or "daily at HH:MM" (cron strings are rejected)
    "SNAPSHOT_SCHEDULE": "every 6 hours",
    "REPORT_SCHEDULE": "daily at 07:00",
    "ALERT_SCHEDULE": "every 15 minutes",

    # Network
    "HTTP_TIMEOUT_SECONDS": 15,

    # Alert state
    "PERSIST_ALERT_STATE": False,
    "ALERT_STATE_FILE": "alert_state.json",

    # Notifier
    "ENABLE_TELEGRAM": False,
    "TELEGRAM_BOT_TOKEN": "",
    "TELEGRAM_CHAT_ID": "",
}

OUTPUT_FORMATS = ("markdown", "json", "both")

AVNU_ENDPOINTS = {
    "mainnet": "https://starknet.api.avnu.fi",
    "sepolia": "https://sepolia.api.avnu.fi",
}

AVNU_IMPULSE_ENDPOINTS = {
    "mainnet": "https://starknet.impulse.avnu.fi",
    "sepolia": "https://sepolia.impulse.avnu.fi",
}

# Common token addresses (mainnet)
TOKEN_ADDRESSES = {
    "ETH": {"address": "0x049d36570d4e46f48e99674bd3fcc84644ddd6b96f7c741b1562b82f9e004dc7", "decimals": 18},
    "STRK": {"address": "0x04718f5a0fc34cc1af16a1cdee98ffb20c31f5cd61d6ab07201858f4287c938d", "decimals": 18},
    "USDC": {"address": "0x053c91253bc9682c04929ca02ed00b3e423f6710d2ee7e0d5ebb06f3ecf368a8", "decimals": 6},
    "USDT": {"address": "0x068f5c6a61780768455de69077e07e89787839bf8166decfbf92b645209c0fb8", "decimals": 6},
    "DAI": {"address": "0x00da114221cb83fa859dbdb4c44beeaa0bb37c7537ad5ae66fe5e0efd20e6eb3", "decimals": 18},
    "WBTC": {"address": "0x03fe2b97c1fd336e750087d68b9b867997fd64a2661ff3ca5a7c771641e8e7ac", "decimals": 8},
    "LORDS": {"address": "0x0124aeb495b947201f5fac96fd1138e326ad86195b98df6dec9009158a533b49", "decimals": 18},
    "ZEND": {"address": "0x00585c32b625999e6e5e78645ff8df7a9001cf5cf3eb6b80ccdd16cb64bd3a34", "decimals": 18},
    "BROTHER": {"address": "0x03b405a98c9e795d427fe82cdeeeed803f221b52471e3a757574a2b4180793ee", "decimals": 18},
    "NSTR": {"address": "0x04d74d2d1f9e8c7cc4f22fce00a6bda5f6c5ece0c3b5f76d6e3b5c2e8f9a1b2c3", "decimals": 18},
}


def load_config(config_file: str = CONFIG_FILE) -> Dict[str, Any]:
    """
    Load configuration from config.json.
    When the file does not exist it is created from the defaults.

    Returns:
        Configuration dictionary
    """
    if os.environ.get("USE_ENV_CONFIG", "").lower() == "true":
        logger.info("Loading configuration from environment variables")
        config = load_config_from_env()
    else:
        if not os.path.exists(config_file):
            with open(config_file, "w") as f:
                json.dump(DEFAULT_CONFIG, f, indent=2)
            logger.info(f"Configuration file created: {config_file}")
            return normalize_config(dict(DEFAULT_CONFIG))

        try:
            with open(config_file, "r") as f:
                config = json.load(f)
            logger.info(f"Configuration loaded from: {config_file}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load configuration: {e}")
            logger.info("Using default configuration")
            return normalize_config(dict(DEFAULT_CONFIG))

    # Merge missing keys
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    return normalize_config(config)


def load_config_from_env() -> Dict[str, Any]:
    """
    Build configuration from environment variables

    Returns:
        Configuration dictionary
    """
    config = {}

    for key, default_value in DEFAULT_CONFIG.items():
        env_value = os.environ.get(key)

        if env_value is not None:
            try:
                if isinstance(default_value, bool):
                    config[key] = env_value.lower() == "true"
                elif isinstance(default_value, int):
                    config[key] = int(env_value)
                elif isinstance(default_value, float):
                    config[key] = float(env_value)
                elif isinstance(default_value, list):
                    config[key] = parse_watchlist(env_value)
                else:
                    config[key] = env_value
            except ValueError as parse_err:
                logger.warning(f"Could not parse env variable {key}: {parse_err}. Using default value.")
                config[key] = default_value
        else:
            config[key] = default_value

    return config


def parse_watchlist(value) -> List[str]:
    """Accepts a list or a comma separated string; symbols are upper-cased."""
    if isinstance(value, str):
        value = value.split(",")
    return [s.strip().upper() for s in value if s and s.strip()]


def normalize_config(config: Dict[str, Any]) -> Dict[str, Any]:
    config["WATCHLIST"] = parse_watchlist(config.get("WATCHLIST") or [])
    config["NETWORK"] = str(config.get("NETWORK", "mainnet")).lower()

    output_format = str(config.get("OUTPUT_FORMAT", "markdown")).lower()
    if output_format not in OUTPUT_FORMATS:
        raise ValueError(f"Invalid OUTPUT_FORMAT: {output_format} (expected one of {', '.join(OUTPUT_FORMATS)})")
    config["OUTPUT_FORMAT"] = output_format

    if config["NETWORK"] not in AVNU_ENDPOINTS:
        raise ValueError(f"Unknown network: {config['NETWORK']}")

    return config


def save_config(config: Dict[str, Any], config_file: str = CONFIG_FILE) -> bool:
    """
    Save the configuration to config.json

    Args:
        config: Configuration dictionary

    Returns:
        True when saved, False otherwise
    """
    try:
        with open(config_file, "w") as f:
            json.dump(config, f, indent=2)
        logger.info(f"Configuration saved to: {config_file}")
        return True
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False
