"""
Language Detector
Lightweight script and stop-word based language identification.

Non-Latin scripts are recognised by Unicode block. Latin-script languages are
told apart by counting stop words in the first 20 tokens. Anything that does
not clear the threshold is treated as English.
"""
import re
from typing import Dict, List, Optional, Tuple

from .models import LanguageInfo


SUPPORTED_LANGUAGES: Dict[str, LanguageInfo] = {
    'en': LanguageInfo('en', 'English', 'high', 50),
    'es': LanguageInfo('es', 'Spanish', 'high', 50),
    'fr': LanguageInfo('fr', 'French', 'high', 50),
    'de': LanguageInfo('de', 'German', 'high', 50),
    'it': LanguageInfo('it', 'Italian', 'medium', 50),
    'pt': LanguageInfo('pt', 'Portuguese', 'medium', 50),
    'nl': LanguageInfo('nl', 'Dutch', 'medium', 50),
    'zh': LanguageInfo('zh', 'Chinese', 'medium', 30),
    'ja': LanguageInfo('ja', 'Japanese', 'medium', 30),
    'ko': LanguageInfo('ko', 'Korean', 'medium', 30),
    'ru': LanguageInfo('ru', 'Russian', 'medium', 50),
    'ar': LanguageInfo('ar', 'Arabic', 'low', 50),
}

DEFAULT_LANGUAGE = SUPPORTED_LANGUAGES['en']

# Checked in order; the first script present wins for mixed text
SCRIPT_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ('zh', re.compile(r'[\u4e00-\u9fff]')),  # CJK unified ideographs
    ('ja', re.compile(r'[\u3040-\u309f\u30a0-\u30ff]')),  # Hiragana, Katakana
    ('ko', re.compile(r'[\uac00-\ud7af]')),  # Hangul syllables
    ('ar', re.compile(r'[\u0600-\u06ff]')),
    ('ru', re.compile(r'[\u0400-\u04ff]')),  # Cyrillic
]

# Ten stop words per language; list order breaks ties
STOP_WORDS: List[Tuple[str, frozenset]] = [
    ('es', frozenset(['el', 'la', 'de', 'que', 'y', 'es', 'en', 'un', 'te', 'lo'])),
    ('fr', frozenset(['le', 'de', 'et', 'un', 'il', 'être', 'les', 'en', 'avoir', 'que'])),
    ('de', frozenset(['der', 'die', 'und', 'in', 'den', 'von', 'zu', 'das', 'mit', 'sich'])),
    ('it', frozenset(['di', 'che', 'e', 'il', 'un', 'a', 'è', 'per', 'una', 'in'])),
    ('pt', frozenset(['de', 'a', 'o', 'que', 'e', 'do', 'da', 'em', 'um', 'para'])),
    ('nl', frozenset(['de', 'het', 'een', 'en', 'van', 'te', 'dat', 'die', 'in', 'op'])),
]

KEYWORD_WINDOW = 20
MIN_KEYWORD_MATCHES = 2


def detect_language(text: str) -> LanguageInfo:
    """Return the best guess for ``text``. Never raises; defaults to English."""
    if not text:
        return DEFAULT_LANGUAGE

    for code, pattern in SCRIPT_PATTERNS:
        if pattern.search(text):
            return SUPPORTED_LANGUAGES[code]

    words = text.lower().split()[:KEYWORD_WINDOW]

    best_code, best_score = None, 0
    for code, stop_words in STOP_WORDS:
        score = sum(1 for w in words if w in stop_words)
        if score > best_score:
            best_code, best_score = code, score

    if best_code is not None and best_score >= MIN_KEYWORD_MATCHES:
        return SUPPORTED_LANGUAGES[best_code]

    return DEFAULT_LANGUAGE


def get_language(code: Optional[str]) -> LanguageInfo:
    return SUPPORTED_LANGUAGES.get((code or '').lower(), DEFAULT_LANGUAGE)


def get_minimum_text_length(language: LanguageInfo) -> int:
    return language.min_length


def get_accuracy_warning(language: LanguageInfo) -> Optional[str]:
    if language.accuracy == 'medium':
        return (
            f"Detection accuracy may be lower for {language.name} text. "
            f"For best results, use English content."
        )
    if language.accuracy == 'low':
        return (
            f"Limited support for {language.name}. Detection accuracy may be "
            f"significantly lower. Consider translating to English for better results."
        )
    return None


class LanguageDetector:
    """Object wrapper so the pipeline can take the detector as a dependency."""

    def detect(self, text: str) -> LanguageInfo:
        return detect_language(text)

    def get_minimum_text_length(self, language: LanguageInfo) -> int:
        return get_minimum_text_length(language)

    def get_accuracy_warning(self, language: LanguageInfo) -> Optional[str]:
        return get_accuracy_warning(language)
