"""
Tests for script and stop-word based language detection
"""
import sys
from pathlib import Path

import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / 'backend'))

from text_detector.language_detector import (
    SUPPORTED_LANGUAGES, LanguageDetector, detect_language, get_accuracy_warning,
    get_language, get_minimum_text_length,
)


class TestScriptDetection:

    @pytest.mark.parametrize('text,code', [
        ('这是一个测试句子', 'zh'),
        ('ひらがなとカタカナ', 'ja'),
        ('안녕하세요 반갑습니다', 'ko'),
        ('مرحبا بالعالم', 'ar'),
        ('Привет мир', 'ru'),
    ])
    def test_non_latin_scripts(self, text, code):
        assert detect_language(text).code == code

    def test_mixed_scripts_use_priority_order(self):
        """Kanji and kana together: CJK ideographs are checked first."""
        assert detect_language('日本語のテキスト').code == 'zh'

    def test_script_beats_stop_words(self):
        assert detect_language('el perro de la casa Привет').code == 'ru'


class TestStopWordDetection:

    def test_spanish(self):
        assert detect_language('el perro de la casa es muy grande y bonito').code == 'es'

    def test_french(self):
        text = 'le chat et le chien sont dans la maison avec les enfants'
        assert detect_language(text).code == 'fr'

    def test_german(self):
        text = 'der Hund und die Katze sind in dem Haus mit den Kindern'
        assert detect_language(text).code == 'de'

    def test_italian(self):
        assert detect_language('il gatto e il cane dormono insieme').code == 'it'

    def test_single_match_is_not_enough(self):
        assert detect_language('el is a name here').code == 'en'

    def test_only_first_twenty_words_count(self):
        text = ' '.join(['word'] * 20) + ' el la de que y es'
        assert detect_language(text).code == 'en'

    def test_english_default(self):
        assert detect_language('The quick brown fox jumps over the lazy dog').code == 'en'

    def test_empty_text(self):
        assert detect_language('').code == 'en'


class TestLanguageTable:

    def test_minimum_lengths(self):
        assert get_minimum_text_length(SUPPORTED_LANGUAGES['en']) == 50
        assert get_minimum_text_length(SUPPORTED_LANGUAGES['zh']) == 30
        assert get_minimum_text_length(SUPPORTED_LANGUAGES['ja']) == 30
        assert get_minimum_text_length(SUPPORTED_LANGUAGES['ko']) == 30

    def test_no_warning_for_high_accuracy(self):
        assert get_accuracy_warning(SUPPORTED_LANGUAGES['en']) is None
        assert get_accuracy_warning(SUPPORTED_LANGUAGES['es']) is None

    def test_medium_accuracy_warning(self):
        warning = get_accuracy_warning(SUPPORTED_LANGUAGES['it'])
        assert 'Italian' in warning
        assert 'may be lower' in warning

    def test_low_accuracy_warning(self):
        warning = get_accuracy_warning(SUPPORTED_LANGUAGES['ar'])
        assert warning.startswith('Limited support for Arabic')

    def test_get_language_falls_back_to_english(self):
        assert get_language('xx').code == 'en'
        assert get_language(None).code == 'en'
        assert get_language('FR').code == 'fr'


class TestLanguageDetector:

    def test_wrapper_delegates(self):
        detector = LanguageDetector()
        info = detector.detect('这是一个测试句子')
        assert info.name == 'Chinese'
        assert detector.get_minimum_text_length(info) == 30
        assert detector.get_accuracy_warning(info) is not None
