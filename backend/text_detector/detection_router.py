"""
Detection Router ("smart detect")
Chooses, per request, between the result cache, the local pattern classifier
and a paid detection API, based on subscription tier and text length.

Routing:
- free:   cache -> pattern classifier
- yearly: cache -> pattern classifier below the length threshold, API above
- pro:    cache -> API

The API path falls back to the pattern classifier on retryable upstream
errors. Non-retryable ones (bad credentials) propagate so a misconfigured
deployment is visible instead of silently degraded.
"""
import concurrent.futures
import logging
from typing import List, Optional

from external_api.client import ExternalDetectionClient
from external_api.errors import APIError
from .config import YEARLY_API_MIN_LENGTH
from .demo_strategy import DemoModeStrategy
from .language_detector import detect_language
from .models import (
    ApiDetails, DetectionResult, LanguageInfo, Method, ModelDetails, SubscriptionTier,
)
from .pattern_classifier import PatternClassifier
from .result_cache import ResultCache, make_key

logger = logging.getLogger(__name__)


class DetectionRouter:

    BATCH_WORKERS = 4

    def __init__(self, cache: ResultCache,
                 classifier: Optional[PatternClassifier] = None,
                 api_client: Optional[ExternalDetectionClient] = None,
                 demo_strategy: Optional[DemoModeStrategy] = None,
                 yearly_api_min_length: int = YEARLY_API_MIN_LENGTH):
        """
        Args:
            cache: Shared result cache.
            classifier: Local heuristic classifier.
            api_client: Client for the paid APIs. Without one (or without any
                configured key) the router runs heuristic-only.
            demo_strategy: When given, used instead of the heuristic for the
                API path while no vendor is configured.
            yearly_api_min_length: Yearly-tier texts shorter than this never
                reach the API.
        """
        self.cache = cache
        self.classifier = classifier or PatternClassifier()
        self.api_client = api_client
        self.demo_strategy = demo_strategy
        self.yearly_api_min_length = yearly_api_min_length

    @property
    def api_available(self) -> bool:
        return self.api_client is not None and self.api_client.is_configured

    def wants_api(self, text: str, tier: SubscriptionTier) -> bool:
        if tier is SubscriptionTier.PRO:
            return True
        if tier is SubscriptionTier.YEARLY:
            return len(text) >= self.yearly_api_min_length
        return False

    def route(self, text: str, tier, language: Optional[LanguageInfo] = None) -> DetectionResult:
        tier = SubscriptionTier.parse(tier)
        key = make_key(text)

        entry = self.cache.get_entry(key)
        if entry is not None:
            logger.debug(f"Cache hit for {key[:8]}")
            return entry.value.as_cached(entry.inserted_at)

        if language is None:
            language = detect_language(text)

        if not self.wants_api(text, tier):
            return self._pattern(key, text, language)

        if not self.api_available:
            if self.demo_strategy is not None:
                return self.demo_strategy.detect(text)
            return self._pattern(key, text, language)

        try:
            result = self._detect_with_api(text)
        except APIError as e:
            if not e.retryable:
                logger.error(f"Detection API rejected the request ({e.code}): {e.message}")
                raise
            logger.warning(f"Detection API unavailable ({e.code}), falling back to pattern detection")
            # Not cached: the next request should try the API again
            return self.classifier.classify(text, language)

        self.cache.put(key, result)
        return result

    def _pattern(self, key: str, text: str, language: LanguageInfo) -> DetectionResult:
        result = self.classifier.classify(text, language)
        self.cache.put(key, result)
        return result

    def _detect_with_api(self, text: str) -> DetectionResult:
        client = self.api_client
        if client.gptzero_api_key:
            data = client.detect_text_with_gptzero(text)
            probability = data['probability']
            logger.info(f"GPTZero probability {probability:.3f}")
            return DetectionResult(
                is_ai=probability > 0.5,
                confidence=probability,
                method=Method.API,
                details=ApiDetails(
                    vendor='gptzero',
                    probability=probability,
                    classification=data.get('classification'),
                ),
            )

        data = client.detect_text_with_huggingface(text)
        probability = data['probability']
        logger.info(f"Hugging Face probability {probability:.3f}")
        return DetectionResult(
            is_ai=probability > 0.5,
            confidence=probability,
            method=Method.ML_MODEL,
            details=ModelDetails(source='huggingface', model=data['model']),
        )

    def detect_batch(self, texts: List[str], tier) -> List[DetectionResult]:
        """Route several texts concurrently; results keep the input order."""
        if not texts:
            return []
        workers = min(self.BATCH_WORKERS, len(texts))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(lambda t: self.route(t, tier), texts))
