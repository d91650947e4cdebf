# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load and validate all configuration from environment
#   variables / .env file. Provides typed config objects
#   to the connection, the client and the CLI.
#
# CLASSES:
# --------
# - SalesforceConfig (dataclass)
#     instance_url: str | None   (SF_INSTANCE_URL)
#     access_token: str | None   (SF_ACCESS_TOKEN, the session id)
#     api_version: str           (default "59.0")
#     request_timeout: float     (default 120.0)
#
# - PollingConfig (dataclass)
#     poll_interval: float       (default 5.0)
#     poll_timeout: float        (default 600.0)
#
# - AppConfig (dataclass)
#     salesforce: SalesforceConfig
#     polling: PollingConfig
#
# FUNCTIONS:
# ----------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# - reset_config() -> None
#     Drop the singleton so the next get_config() reloads.
#
# USAGE:
# ------
#   from sfmeta.config import get_config
#   config = get_config()
#   print(config.salesforce.instance_url)
#   print(config.polling.poll_timeout)
#
# ==============================================

import os
from dataclasses import dataclass
from typing import Optional
from pathlib import Path

from dotenv import load_dotenv


@dataclass
class SalesforceConfig:
    """Remote org and API settings."""
    instance_url: Optional[str] = None
    access_token: Optional[str] = None
    api_version: str = "59.0"
    request_timeout: float = 120.0


@dataclass
class PollingConfig:
    """Polling settings for deploy / retrieve jobs."""
    poll_interval: float = 5.0
    poll_timeout: float = 600.0


@dataclass
class AppConfig:
    """Main application configuration."""
    salesforce: SalesforceConfig
    polling: PollingConfig


# Singleton instance
_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    salesforce_config = SalesforceConfig(
        instance_url=os.getenv("SF_INSTANCE_URL") or None,
        access_token=os.getenv("SF_ACCESS_TOKEN") or None,
        api_version=os.getenv("SF_API_VERSION", "59.0"),
        request_timeout=float(os.getenv("SF_REQUEST_TIMEOUT", "120.0"))
    )

    polling_config = PollingConfig(
        poll_interval=float(os.getenv("SF_POLL_INTERVAL", "5.0")),
        poll_timeout=float(os.getenv("SF_POLL_TIMEOUT", "600.0"))
    )

    _config_instance = AppConfig(
        salesforce=salesforce_config,
        polling=polling_config
    )

    return _config_instance


def reset_config() -> None:
    """Forget the cached configuration."""
    global _config_instance
    _config_instance = None
