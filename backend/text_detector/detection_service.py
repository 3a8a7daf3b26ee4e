"""
Text Detection Service
Runs one detection request through the full pipeline:

    validate -> daily quota -> rate limit -> language / minimum length
             -> count the check -> route (cache / pattern / API)

Every failure before routing is a ``DetectionError`` with its HTTP status.
Upstream failures that the router refuses to mask surface as ``APIError``.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from external_api.client import estimate_cost
from .config import DetectionSettings
from .detection_router import DetectionRouter
from .errors import QuotaExceeded, RateLimited, ValidationError
from .language_detector import LanguageDetector
from .models import DetectionRequest, DetectionResult, LanguageInfo, Method

if TYPE_CHECKING:
    from usage import QuotaGate, QuotaStatus, RateLimiter, RateLimitResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionResponse:
    result: DetectionResult
    language: LanguageInfo
    language_warning: Optional[str]
    cost_saved: float
    quota: 'QuotaStatus'
    rate_limit: 'RateLimitResult'

    @property
    def likely_ai(self) -> bool:
        return self.result.is_ai

    @property
    def score(self) -> float:
        return self.result.confidence

    def to_dict(self) -> Dict[str, Any]:
        details = self.result.details.to_dict()
        details['method'] = self.result.method.value
        return {
            'success': True,
            'likelyAI': self.likely_ai,
            'score': self.score,
            'language': {
                'detected': self.language.name,
                'code': self.language.code,
                'accuracy': self.language.accuracy,
                'warning': self.language_warning,
            },
            'details': details,
            'costSaved': self.cost_saved,
            'usage': self.quota.to_dict(),
        }


class TextDetectionService:
    """
    Entry point for text detection requests.

    ``quota_gate`` and ``rate_limiter`` come from the ``usage`` package; they
    are passed in so the same instances are shared across requests.
    """

    def __init__(self, router: DetectionRouter, quota_gate: 'QuotaGate',
                 rate_limiter: 'RateLimiter',
                 settings: Optional[DetectionSettings] = None,
                 language_detector: Optional[LanguageDetector] = None):
        self.router = router
        self.quota_gate = quota_gate
        self.rate_limiter = rate_limiter
        self.settings = settings or DetectionSettings()
        self.language_detector = language_detector or LanguageDetector()

    def validate_text(self, text) -> str:
        if text is None:
            raise ValidationError('Missing "text" field in request body', code='MISSING_TEXT')
        if not isinstance(text, str) or not text.strip():
            raise ValidationError('Input cannot be empty')
        text = text.strip()
        if len(text) > self.settings.max_text_length:
            raise ValidationError(
                f'Input too long (max {self.settings.max_text_length:,} characters)',
                code='TEXT_TOO_LONG',
            )
        return text

    def detect(self, request: DetectionRequest) -> DetectionResponse:
        text = self.validate_text(request.text)
        user_id = request.user_id

        if not self.quota_gate.can_check(user_id):
            status = self.quota_gate.status(user_id)
            raise QuotaExceeded(
                'Daily limit reached. Upgrade to continue.', reset_time=status.reset_at,
            )

        rate = self.rate_limiter.check(
            f"text-{user_id}",
            self.settings.rate_limit_window_seconds,
            self.settings.rate_limit_max_requests,
        )
        if not rate.allowed:
            raise RateLimited('Too many requests. Please slow down.', reset_time=rate.reset_at)

        language = self.language_detector.detect(text)
        min_length = self.language_detector.get_minimum_text_length(language)
        if len(text) < min_length:
            raise ValidationError(
                f'Text must be at least {min_length} characters for {language.name}',
                code='TEXT_TOO_SHORT',
            )

        quota = self.quota_gate.consume(user_id)
        if not quota.allowed:
            raise QuotaExceeded('Daily limit reached. Upgrade to continue.', reset_time=quota.reset_at)

        result = self.router.route(text, request.subscription_tier, language)

        served_by = result.method
        if served_by is Method.CACHE:
            served_by = result.details.original_method
        cost_saved = 0.0
        if result.method is not Method.API:
            cost_saved = estimate_cost(len(text.split()), Method.API.value)

        logger.info(
            f"User {user_id} ({request.subscription_tier.value}): {result.method.value} "
            f"[{served_by.value}] score={result.confidence:.3f} lang={language.code}"
        )

        return DetectionResponse(
            result=result,
            language=language,
            language_warning=self.language_detector.get_accuracy_warning(language),
            cost_saved=cost_saved,
            quota=quota,
            rate_limit=rate,
        )
