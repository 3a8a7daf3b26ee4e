"""
Error classification for third-party detection APIs.

Every upstream failure ends up as an ``APIError`` subclass carrying a stable
code and whether retrying (or falling back) makes sense.
"""
from typing import Any, Dict, Optional

import requests


class APIError(Exception):
    code = 'UNKNOWN_ERROR'
    default_status = 0
    default_retryable = True
    default_message = 'An unexpected error occurred. Please try again.'

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None,
                 status_code: Optional[int] = None, retryable: Optional[bool] = None):
        self.message = message or self.default_message
        super().__init__(self.message)
        if code is not None:
            self.code = code
        self.status_code = self.default_status if status_code is None else status_code
        self.retryable = self.default_retryable if retryable is None else retryable

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': False,
            'error': self.message,
            'code': self.code,
            'retryable': self.retryable,
        }

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r}, code={self.code!r}, status={self.status_code})"


class UpstreamTimeout(APIError):
    code = 'TIMEOUT'
    default_status = 408
    default_message = 'Request timed out. Please try again.'


class UpstreamNetworkError(APIError):
    code = 'NETWORK_ERROR'
    default_message = 'Network error. Please check your connection and try again.'


class UpstreamMisconfigured(APIError):
    """Credentials rejected. Retrying or falling back would hide a config problem."""
    code = 'UNAUTHORIZED'
    default_status = 401
    default_retryable = False
    default_message = 'API key is invalid or expired.'


UpstreamUnauthorized = UpstreamMisconfigured


class UpstreamRateLimited(APIError):
    code = 'RATE_LIMIT'
    default_status = 429
    default_message = 'Rate limit exceeded. Please try again later.'


class UpstreamServerError(APIError):
    code = 'SERVER_ERROR'
    default_status = 500
    default_message = 'Service temporarily unavailable. Please try again.'


class UpstreamUnknownError(APIError):
    pass


_SERVER_MARKERS = ('500', '502', '503', '504', 'internal server error', 'bad gateway',
                   'service unavailable')


def error_for_status(status_code: int, message: str) -> APIError:
    """Build the error for a completed HTTP response with a failure status."""
    if status_code in (401, 403):
        return UpstreamMisconfigured(message, status_code=status_code)
    if status_code == 429:
        return UpstreamRateLimited(message)
    if status_code == 408:
        return UpstreamTimeout(message)
    if status_code >= 500:
        return UpstreamServerError(message, status_code=status_code)
    return UpstreamUnknownError(message, status_code=status_code)


def classify_api_error(error) -> APIError:
    """Map an exception (or message) from an upstream call to an ``APIError``."""
    if isinstance(error, APIError):
        return error

    if isinstance(error, requests.Timeout):
        return UpstreamTimeout()
    if isinstance(error, requests.ConnectionError):
        return UpstreamNetworkError()

    message = str(error).lower() if error is not None else ''

    if 'timeout' in message or 'timed out' in message:
        return UpstreamTimeout()
    if 'network' in message or 'fetch failed' in message or 'connection' in message:
        return UpstreamNetworkError()
    if any(m in message for m in ('401', '403', 'unauthorized', 'forbidden')):
        return UpstreamMisconfigured()
    if '429' in message or 'rate limit' in message:
        return UpstreamRateLimited()
    if any(m in message for m in _SERVER_MARKERS):
        return UpstreamServerError()

    return UpstreamUnknownError()
