"""
Text Detector Module
AI-generated text detection: language identification, heuristic scoring,
result caching and tier-based routing to paid detection APIs.
"""
from .config import DetectionSettings
from .detection_router import DetectionRouter
from .detection_service import DetectionResponse, TextDetectionService
from .demo_strategy import DemoModeStrategy
from .errors import DetectionError, ValidationError, QuotaExceeded, RateLimited, AuthenticationError
from .language_detector import LanguageDetector, detect_language, get_accuracy_warning, get_minimum_text_length
from .models import DetectionRequest, DetectionResult, LanguageInfo, Method, SubscriptionTier
from .pattern_classifier import PatternClassifier
from .result_cache import ResultCache, make_key

__all__ = [
    'DetectionSettings',
    'DetectionRouter',
    'DetectionResponse',
    'TextDetectionService',
    'DemoModeStrategy',
    'DetectionError',
    'ValidationError',
    'QuotaExceeded',
    'RateLimited',
    'AuthenticationError',
    'LanguageDetector',
    'detect_language',
    'get_accuracy_warning',
    'get_minimum_text_length',
    'DetectionRequest',
    'DetectionResult',
    'LanguageInfo',
    'Method',
    'SubscriptionTier',
    'PatternClassifier',
    'ResultCache',
    'make_key',
]
