"""Tests for sitecontent.extraction.truncate."""

from sitecontent.extraction.truncate import truncate_html


class TestTruncateHtml:
    """Tests for truncate_html."""

    def test_short_content_untouched(self):
        content = "<p>Short paragraph.</p>"
        assert truncate_html(content) == content

    def test_exactly_at_limit_untouched(self):
        content = "a" * 4000
        assert truncate_html(content) == content

    def test_long_content_cut_at_sentences(self):
        sentence = "This sentence is about the Tamil language society"
        content = ". ".join([sentence] * 120) + "."
        assert len(content) > 5000

        result = truncate_html(content)
        assert len(result) <= 4000
        assert result.endswith(".")
        assert result.startswith(sentence)

    def test_no_sentence_break_cut_hard(self):
        content = "x" * 5000
        result = truncate_html(content)
        assert result == "x" * 4000 + "..."
        assert len(result) == 4003

    def test_none_passthrough(self):
        assert truncate_html(None) is None
