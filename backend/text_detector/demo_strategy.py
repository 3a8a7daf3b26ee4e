"""
Demo mode: synthetic scores for deployments with no detection API configured.

Results are flagged ``synthetic`` and use their own method so they can never
be mistaken for (or cached as) a real detection.
"""
import logging
import random
from typing import Optional

from .models import DemoDetails, DetectionResult, Method

logger = logging.getLogger(__name__)


class DemoModeStrategy:

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def detect(self, text: str) -> DetectionResult:
        # 50-80%, same band the placeholder UI was designed around
        score = round(0.5 + self._rng.random() * 0.3, 4)
        logger.info("Demo mode: returning synthetic detection result")
        return DetectionResult(
            is_ai=score > 0.5,
            confidence=score,
            method=Method.DEMO,
            details=DemoDetails(),
        )
