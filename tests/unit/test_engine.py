"""Unit tests for the classification engine."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import CHROME_MOBILE_UA, GOOGLEBOT_IP, GOOGLEBOT_UA, UNKNOWN_UA
from uaintel.cache import ResultCache
from uaintel.classification.engine import Classifier, cache_key


@pytest.mark.unit
class TestCacheKey:
    """Test cases for cache_key()."""

    def test_absent_inputs(self):
        """Test None and empty inputs share a key."""
        assert cache_key(None, None) == ("", "")
        assert cache_key("", None) == cache_key(None, "")

    def test_no_concatenation_collisions(self):
        """Test the pair is kept apart."""
        assert cache_key("ab", "c") != cache_key("a", "bc")


@pytest.mark.unit
class TestClassifier:
    """Test cases for Classifier."""

    def test_without_cache(self, dataset, test_settings):
        """Test an engine without a cache never flags hits."""
        classifier = Classifier(dataset, settings=test_settings)

        classifier.classify(ua=GOOGLEBOT_UA)
        result = classifier.classify(ua=GOOGLEBOT_UA)

        assert result.from_cache is False

    def test_cache_hit_is_a_copy(self, dataset, test_settings):
        """Test a hit returns a flagged copy of the stored result."""
        cache = ResultCache(max_records=10)
        classifier = Classifier(dataset, settings=test_settings, cache=cache)

        first = classifier.classify(ua=GOOGLEBOT_UA, ip=GOOGLEBOT_IP)
        second = classifier.classify(ua=GOOGLEBOT_UA, ip=GOOGLEBOT_IP)

        assert first.from_cache is False
        assert second.from_cache is True
        assert second.user_agent == first.user_agent
        assert second.ip_address == first.ip_address

    def test_use_cache_false(self, dataset, test_settings):
        """Test callers can bypass an attached cache."""
        cache = ResultCache(max_records=10)
        classifier = Classifier(dataset, settings=test_settings, cache=cache)

        classifier.classify(ua=GOOGLEBOT_UA, use_cache=False)

        assert cache.size() == 0

    def test_info_url_base_from_settings(self, dataset, test_settings):
        """Test detail links use the configured base."""
        settings = test_settings.model_copy(update={"info_url_base": "https://example.test/ua"})
        classifier = Classifier(dataset, settings=settings)

        result = classifier.classify(ua=GOOGLEBOT_UA)

        assert result.user_agent.ua_family_info_url.startswith("https://example.test/ua/bot-detail")

    def test_shared_across_threads(self, dataset, test_settings):
        """Test one engine and cache serve concurrent callers."""
        cache = ResultCache(max_records=2)
        classifier = Classifier(dataset, settings=test_settings, cache=cache)
        inputs = [GOOGLEBOT_UA, CHROME_MOBILE_UA, UNKNOWN_UA] * 50

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda ua: classifier.classify(ua=ua), inputs))

        assert cache.size() <= 2
        for ua, result in zip(inputs, results):
            assert result.user_agent.ua_string == ua
