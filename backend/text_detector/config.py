"""
Configuration for the Text Detector module.
"""
import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

from external_api.config import API_MAX_RETRIES, API_RETRY_DELAY_SECONDS, API_TIMEOUT_SECONDS

load_dotenv()

# Input limits
MAX_TEXT_LENGTH = 10000  # 10k char limit for text detection
YEARLY_API_MIN_LENGTH = 500  # Yearly tier only pays for the API above this

# Result cache
CACHE_MAX_ENTRIES = 10000
CACHE_TTL_SECONDS = 7 * 24 * 60 * 60  # 7 days

# Per-user request limiter protecting the paid APIs
RATE_LIMIT_WINDOW_SECONDS = 60
RATE_LIMIT_MAX_REQUESTS = 10

# Coarse per-IP guard in front of the API; must stay well above the per-user limit
IP_RATE_LIMIT = "60 per minute"

# Free tier daily allowance
FREE_DAILY_CHECKS = 3


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


@dataclass
class DetectionSettings:
    """Runtime settings for the detection pipeline.

    Built from environment variables by ``from_env``; tests construct it
    directly with the values they need.
    """
    gptzero_api_key: Optional[str] = None
    huggingface_api_key: Optional[str] = None
    demo_mode: bool = False
    rate_limit_window_seconds: int = RATE_LIMIT_WINDOW_SECONDS
    rate_limit_max_requests: int = RATE_LIMIT_MAX_REQUESTS
    ip_rate_limit: str = IP_RATE_LIMIT
    cache_max_entries: int = CACHE_MAX_ENTRIES
    cache_ttl_seconds: int = CACHE_TTL_SECONDS
    free_daily_checks: int = FREE_DAILY_CHECKS
    yearly_api_min_length: int = YEARLY_API_MIN_LENGTH
    max_text_length: int = MAX_TEXT_LENGTH
    api_timeout_seconds: float = API_TIMEOUT_SECONDS
    api_max_retries: int = API_MAX_RETRIES
    api_retry_delay_seconds: float = API_RETRY_DELAY_SECONDS
    accounts_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'DetectionSettings':
        return cls(
            gptzero_api_key=os.getenv('GPTZERO_API_KEY') or None,
            huggingface_api_key=os.getenv('HUGGINGFACE_API_KEY') or None,
            demo_mode=_env_bool('DEMO_MODE'),
            rate_limit_window_seconds=_env_int('RATE_LIMIT_WINDOW_SECONDS', RATE_LIMIT_WINDOW_SECONDS),
            rate_limit_max_requests=_env_int('RATE_LIMIT_MAX_REQUESTS', RATE_LIMIT_MAX_REQUESTS),
            ip_rate_limit=os.getenv('IP_RATE_LIMIT') or IP_RATE_LIMIT,
            cache_max_entries=_env_int('CACHE_MAX_ENTRIES', CACHE_MAX_ENTRIES),
            cache_ttl_seconds=_env_int('CACHE_TTL_SECONDS', CACHE_TTL_SECONDS),
            free_daily_checks=_env_int('FREE_DAILY_CHECKS', FREE_DAILY_CHECKS),
            yearly_api_min_length=_env_int('YEARLY_API_MIN_LENGTH', YEARLY_API_MIN_LENGTH),
            max_text_length=_env_int('MAX_TEXT_LENGTH', MAX_TEXT_LENGTH),
            api_timeout_seconds=_env_float('API_TIMEOUT_SECONDS', API_TIMEOUT_SECONDS),
            api_max_retries=_env_int('API_MAX_RETRIES', API_MAX_RETRIES),
            api_retry_delay_seconds=_env_float('API_RETRY_DELAY_SECONDS', API_RETRY_DELAY_SECONDS),
            accounts_file=os.getenv('ACCOUNTS_FILE') or None,
        )

    @property
    def has_api_keys(self) -> bool:
        return bool(self.gptzero_api_key or self.huggingface_api_key)
