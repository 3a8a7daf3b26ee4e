"""
Pattern Classifier
Rule-based AI-text scoring: phrase patterns plus sentence-structure statistics.

Scoring:
- Each pattern adds its weight once if it appears anywhere in the text.
  Strong AI phrases (assistant disclaimers) outweigh weak ones (formal
  connectives), which outweigh the structural signals.
- Uniform sentence lengths and heavy word repetition point to AI; varied
  sentences and a rich vocabulary point to a human writer.
- Confidence = ai / (ai + human). With no signal at all a neutral
  vocabulary-vs-pronoun check picks 0.3, 0.5 or 0.7.
- Non-English text is pulled toward 0.5, then everything is clamped so the
  classifier never claims certainty.
"""
import logging
import re
from typing import List, Optional, Tuple

from .models import DetectionResult, LanguageInfo, Method, PatternDetails

logger = logging.getLogger(__name__)


STRONG_AI_PATTERNS = [
    r"\bas an ai\b",
    r"\bi'?m an ai\b",
    r"\bas a language model\b",
    r"\bi cannot provide\b",
    r"\bi don'?t have access to\b",
    r"\bas an artificial intelligence\b",
    r"\bi'?m not able to\b",
    r"\bi cannot assist\b",
]

WEAK_AI_PATTERNS = [
    r"\bit(?:'s| is) important to note\b",
    r"\bit(?:'s| is) worth noting\b",
    r"\bin conclusion\b",
    r"\bfurthermore\b",
    r"\bmoreover\b",
    r"\bnevertheless\b",
    r"\bit should be noted\b",
    r"\bit(?:'s| is) worth mentioning\b",
    r"\badditionally\b",
    r"\bdelv(?:e|ing) into\b",
]

HUMAN_PATTERNS = [
    r"\bi\s+think\b",
    r"\bmy\s+opinion\b",
    r"\bpersonally\b",
    r"\byesterday\b",
    r"\btomorrow\b",
    r"\blol\b",
    r"\bomg\b",
    r"\bwtf\b",
    r"\byeah\b",
    r"\bnah\b",
    r"\bawesome\b",
    r"\bcool\b",
    r"\bwow\b",
]

COMPLEX_VOCABULARY = re.compile(
    r"\b(?:furthermore|moreover|consequently|nevertheless|accordingly|specifically|particularly)\b",
    re.IGNORECASE,
)
PERSONAL_PRONOUNS = re.compile(r"\b(?:i|my|me|myself)\b", re.IGNORECASE)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def _compile(patterns: List[str]) -> List[re.Pattern]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


class PatternClassifier:
    """Heuristic AI-text classifier. Pure: the same text always scores the same."""

    STRONG_AI_WEIGHT = 30
    WEAK_AI_WEIGHT = 10
    HUMAN_WEIGHT = 15
    STRUCTURE_WEIGHT = 5
    REPETITION_WEIGHT = 5

    LOW_DEVIATION = 3.0    # words; below this sentence lengths look uniform
    HIGH_DEVIATION = 10.0  # words; above this they look naturally bursty
    HIGH_REPETITION = 2.0
    LOW_REPETITION = 1.5

    NEUTRAL_HUMAN = 0.3
    NEUTRAL = 0.5
    NEUTRAL_AI = 0.7

    CONFIDENCE_FLOOR = 0.15
    CONFIDENCE_CEILING = 0.90

    def __init__(self):
        self.strong_ai_patterns = _compile(STRONG_AI_PATTERNS)
        self.weak_ai_patterns = _compile(WEAK_AI_PATTERNS)
        self.human_patterns = _compile(HUMAN_PATTERNS)

    @staticmethod
    def _matches(patterns: List[re.Pattern], text: str) -> List[str]:
        found = []
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                found.append(match.group())
        return found

    @staticmethod
    def sentence_stats(text: str) -> Tuple[int, float, float]:
        """Return (sentence count, mean words per sentence, mean absolute deviation)."""
        sentences = [s for s in _SENTENCE_SPLIT.split(text) if s.strip()]
        if not sentences:
            return 0, 0.0, 0.0
        lengths = [len(s.split()) for s in sentences]
        mean = sum(lengths) / len(lengths)
        deviation = sum(abs(n - mean) for n in lengths) / len(lengths)
        return len(sentences), mean, deviation

    @staticmethod
    def repetition_ratio(text: str) -> float:
        words = text.split()
        if not words:
            return 0.0
        unique = {w.lower() for w in words}
        return len(words) / len(unique)

    def _neutral_score(self, text: str) -> float:
        has_complex = bool(COMPLEX_VOCABULARY.search(text))
        has_pronouns = bool(PERSONAL_PRONOUNS.search(text))
        if has_pronouns and not has_complex:
            return self.NEUTRAL_HUMAN
        if has_complex and not has_pronouns:
            return self.NEUTRAL_AI
        return self.NEUTRAL

    def classify(self, text: str, language: Optional[LanguageInfo] = None) -> DetectionResult:
        """Score ``text``. ``language`` defaults to English (no damping)."""
        text = text or ''

        strong = self._matches(self.strong_ai_patterns, text)
        weak = self._matches(self.weak_ai_patterns, text)
        human = self._matches(self.human_patterns, text)

        ai_score = len(strong) * self.STRONG_AI_WEIGHT + len(weak) * self.WEAK_AI_WEIGHT
        human_score = len(human) * self.HUMAN_WEIGHT

        sentence_count, mean_words, deviation = self.sentence_stats(text)
        if sentence_count >= 2:
            if deviation < self.LOW_DEVIATION:
                ai_score += self.STRUCTURE_WEIGHT
            elif deviation > self.HIGH_DEVIATION:
                human_score += self.STRUCTURE_WEIGHT

        ratio = self.repetition_ratio(text)
        if ratio > self.HIGH_REPETITION:
            ai_score += self.REPETITION_WEIGHT
        elif 0 < ratio < self.LOW_REPETITION:
            human_score += self.REPETITION_WEIGHT

        total = ai_score + human_score
        neutral_fallback = total == 0
        if neutral_fallback:
            confidence = self._neutral_score(text)
        else:
            confidence = ai_score / total

        language_code = language.code if language else 'en'
        if language_code != 'en':
            confidence = confidence * 0.8 + 0.1

        confidence = max(self.CONFIDENCE_FLOOR, min(self.CONFIDENCE_CEILING, confidence))
        confidence = round(confidence, 4)

        logger.debug(
            f"Pattern score ai={ai_score} human={human_score} -> {confidence:.3f} ({language_code})"
        )

        return DetectionResult(
            is_ai=confidence > 0.5,
            confidence=confidence,
            method=Method.PATTERN,
            details=PatternDetails(
                strong_ai_matches=len(strong),
                weak_ai_matches=len(weak),
                human_matches=len(human),
                matched_phrases=tuple(strong + weak + human),
                sentences=sentence_count,
                average_words_per_sentence=round(mean_words, 2),
                sentence_length_deviation=round(deviation, 2),
                repetition_ratio=round(ratio, 2),
                ai_score=ai_score,
                human_score=human_score,
                language=language_code,
                neutral_fallback=neutral_fallback,
            ),
        )
