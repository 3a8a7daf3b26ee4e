"""
Usage Module
Per-user request limiting and daily detection allowance.
"""
from .rate_limiter import RateLimiter, RateLimitResult, rate_limit_headers
from .quota_gate import QuotaGate, QuotaRecord, QuotaStatus

__all__ = [
    'RateLimiter',
    'RateLimitResult',
    'rate_limit_headers',
    'QuotaGate',
    'QuotaRecord',
    'QuotaStatus',
]
