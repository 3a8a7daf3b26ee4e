"""
Data types shared by the text detection pipeline.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class SubscriptionTier(str, Enum):
    FREE = 'free'
    YEARLY = 'yearly'
    PRO = 'pro'

    @classmethod
    def parse(cls, value) -> 'SubscriptionTier':
        """Accept a tier or its string value; unknown values fall back to free."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.FREE


class Method(str, Enum):
    CACHE = 'cache'
    PATTERN = 'pattern'
    API = 'api'
    ML_MODEL = 'ml-model'
    DEMO = 'demo'


@dataclass(frozen=True)
class LanguageInfo:
    code: str
    name: str
    accuracy: str  # high | medium | low
    min_length: int


@dataclass(frozen=True)
class DetectionRequest:
    text: str
    user_id: str
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE


# ==================== RESULT DETAILS (tagged by method) ====================

@dataclass(frozen=True)
class PatternDetails:
    strong_ai_matches: int
    weak_ai_matches: int
    human_matches: int
    matched_phrases: Tuple[str, ...]
    sentences: int
    average_words_per_sentence: float
    sentence_length_deviation: float
    repetition_ratio: float
    ai_score: int
    human_score: int
    language: str = 'en'
    neutral_fallback: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['matched_phrases'] = list(self.matched_phrases)
        return data


@dataclass(frozen=True)
class ApiDetails:
    vendor: str
    probability: float
    classification: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ModelDetails:
    source: str
    model: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DemoDetails:
    synthetic: bool = True
    notice: str = 'Demo mode: synthetic score, no detection was performed.'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CacheDetails:
    original_method: Method
    original: Union[PatternDetails, ApiDetails, ModelDetails]
    cached_at: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'original_method': self.original_method.value,
            'original': self.original.to_dict(),
            'cached_at': self.cached_at,
        }


Details = Union[PatternDetails, ApiDetails, ModelDetails, DemoDetails, CacheDetails]

_DETAILS_BY_METHOD = {
    Method.PATTERN: PatternDetails,
    Method.API: ApiDetails,
    Method.ML_MODEL: ModelDetails,
    Method.DEMO: DemoDetails,
    Method.CACHE: CacheDetails,
}


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of one detection; ``details`` type always matches ``method``."""
    is_ai: bool
    confidence: float
    method: Method
    details: Details = field(repr=False)

    def __post_init__(self):
        expected = _DETAILS_BY_METHOD[self.method]
        if not isinstance(self.details, expected):
            raise TypeError(
                f"{self.method.value} result needs {expected.__name__}, "
                f"got {type(self.details).__name__}"
            )
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence out of range: {self.confidence}")

    def as_cached(self, cached_at: float) -> 'DetectionResult':
        """Wrap a stored result so callers can see it was served from cache."""
        if self.method is Method.CACHE:
            return self
        return DetectionResult(
            is_ai=self.is_ai,
            confidence=self.confidence,
            method=Method.CACHE,
            details=CacheDetails(
                original_method=self.method,
                original=self.details,
                cached_at=cached_at,
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'is_ai': self.is_ai,
            'confidence': self.confidence,
            'method': self.method.value,
            'details': self.details.to_dict(),
        }
