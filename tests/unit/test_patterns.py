"""Unit tests for vendor pattern translation."""

import pytest
import regex

from uaintel.common.exceptions import DatasetIntegrityError, PatternCompileError
from uaintel.dataset.patterns import first_group, search, split_pattern, translate


@pytest.mark.unit
class TestSplitPattern:
    """Test cases for delimiter handling."""

    def test_body_and_flags(self):
        """Test the last slash ends the pattern body."""
        body, flags = split_pattern(r"/mozilla\/5\.0 (.*)/si")

        assert body == r"mozilla\/5\.0 (.*)"
        assert flags == "si"

    def test_no_flags(self):
        """Test a pattern without flags."""
        assert split_pattern("/abc/") == ("abc", "")

    @pytest.mark.parametrize("source", ["abc", "/abc", "", "abc/i"])
    def test_missing_delimiters(self, source):
        """Test undelimited sources are rejected."""
        with pytest.raises(PatternCompileError):
            split_pattern(source)

    def test_non_string(self):
        """Test non-string sources are rejected."""
        with pytest.raises(PatternCompileError):
            split_pattern(None)


@pytest.mark.unit
class TestTranslate:
    """Test cases for translate()."""

    def test_case_insensitive_flag(self):
        """Test the i flag."""
        pattern = translate(r"/firefox\/([0-9\.]+)/i")

        match = pattern.search("Mozilla/5.0 FIREFOX/40.0")
        assert match is not None
        assert match.group(1) == "40.0"

    def test_dotall_flag(self):
        """Test the s flag lets dot cross newlines."""
        assert translate("/a.b/s").search("a\nb") is not None
        assert translate("/a.b/").search("a\nb") is None

    def test_multiline_flag(self):
        """Test the m flag anchors at line starts."""
        assert translate("/^b/m").search("a\nb") is not None

    def test_unicode_flag_accepted(self):
        """Test the u flag compiles."""
        assert translate("/abc/u").search("xabcx") is not None

    def test_cached_per_source(self):
        """Test the same source returns the same compiled object."""
        assert translate("/cached-one/i") is translate("/cached-one/i")

    def test_pcre_constructs(self):
        """Test atomic groups and possessive quantifiers compile."""
        assert translate("/(?>foo|foobar)baz/").search("foobaz") is not None
        assert translate("/a++b/").search("aaab") is not None

    def test_unknown_flag(self):
        """Test unsupported flags fail."""
        with pytest.raises(PatternCompileError) as exc_info:
            translate("/abc/g")

        assert "g" in exc_info.value.message

    def test_syntax_error(self):
        """Test a broken pattern fails as a dataset integrity error."""
        with pytest.raises(DatasetIntegrityError) as exc_info:
            translate("/([a-z]/i")

        assert exc_info.value.details["pattern"] == "/([a-z]/i"
        assert isinstance(exc_info.value.cause, regex.error)


@pytest.mark.unit
class TestSearch:
    """Test cases for timed searches and group extraction."""

    def test_search_match(self):
        """Test a plain match."""
        match = search(translate(r"/chrome\/([0-9\.]+)/i"), "Chrome/55.0", timeout=1.0)

        assert first_group(match) == "55.0"

    def test_search_timeout_is_no_match(self):
        """Test a search over budget counts as no match."""

        class SlowPattern:
            pattern = "(a+)+$"

            def search(self, text, timeout=None):
                raise TimeoutError("regex timed out")

        assert search(SlowPattern(), "a" * 64 + "!", timeout=0.001, table="client_regex") is None

    def test_search_passes_timeout(self):
        """Test the budget is handed to the engine."""
        seen = {}

        class RecordingPattern:
            pattern = "x"

            def search(self, text, timeout=None):
                seen["timeout"] = timeout
                return None

        search(RecordingPattern(), "text", timeout=0.5)

        assert seen["timeout"] == 0.5

    def test_first_group_without_groups(self):
        """Test patterns without a capture group yield an empty string."""
        match = translate("/curl/i").search("curl/7.1")

        assert first_group(match) == ""

    def test_first_group_none(self):
        """Test no match yields an empty string."""
        assert first_group(None) == ""

    def test_first_group_unmatched_optional(self):
        """Test an optional group that did not take part."""
        match = translate("/curl(\\/[0-9]+)?/i").search("curl")

        assert first_group(match) == ""
