"""
Errors raised by the detection pipeline before any detector runs.

Each carries the HTTP status and error code the API layer should return.
Upstream (third-party API) failures live in ``external_api.errors``.
"""
from typing import Any, Dict, Optional


class DetectionError(Exception):
    status_code = 500
    code = 'INTERNAL_ERROR'
    retryable = False

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': False,
            'error': self.message,
            'code': self.code,
            'retryable': self.retryable,
        }


class ValidationError(DetectionError):
    """Bad input. Never retried."""
    status_code = 400
    code = 'INVALID_INPUT'


class AuthenticationError(DetectionError):
    status_code = 401
    code = 'UNAUTHENTICATED'


class _LimitError(DetectionError):
    status_code = 429
    retryable = True

    def __init__(self, message: str, reset_time: float, code: Optional[str] = None):
        super().__init__(message, code)
        self.reset_time = reset_time

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data['resetTime'] = self.reset_time
        return data


class QuotaExceeded(_LimitError):
    """Free tier daily allowance used up; the user must wait or upgrade."""
    code = 'DAILY_LIMIT_REACHED'


class RateLimited(_LimitError):
    """Too many requests in the current window."""
    code = 'RATE_LIMITED'
