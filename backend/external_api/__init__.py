"""
External API Module
Client and error taxonomy for third-party AI-text detection vendors.
"""
from .client import ExternalDetectionClient, estimate_cost, is_retryable_error
from .errors import (
    APIError,
    UpstreamTimeout,
    UpstreamNetworkError,
    UpstreamMisconfigured,
    UpstreamUnauthorized,
    UpstreamRateLimited,
    UpstreamServerError,
    UpstreamUnknownError,
    classify_api_error,
    error_for_status,
)

__all__ = [
    'ExternalDetectionClient',
    'estimate_cost',
    'is_retryable_error',
    'APIError',
    'UpstreamTimeout',
    'UpstreamNetworkError',
    'UpstreamMisconfigured',
    'UpstreamUnauthorized',
    'UpstreamRateLimited',
    'UpstreamServerError',
    'UpstreamUnknownError',
    'classify_api_error',
    'error_for_status',
]
