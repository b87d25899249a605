"""Tests for the call-scanning helpers behind the Java and Python rules."""

import re

from smartui_migrator.transform.transformers import text


class TestSplitArgs:
    def test_nested_and_quoted_commas(self):
        assert text.split_args('driver, "a, b", foo(1, 2), [3, 4]') == [
            "driver",
            '"a, b"',
            "foo(1, 2)",
            "[3, 4]",
        ]

    def test_escaped_quote(self):
        assert text.split_args(r'"say \"hi\", ok", x') == [r'"say \"hi\", ok"', "x"]

    def test_empty(self):
        assert text.split_args("") == []


class TestIterCalls:
    def test_finds_calls_with_nested_parens(self):
        source = 'percy.snapshot("Home", opts(")"))\nother()\n'
        calls = list(text.iter_calls(source, re.compile(r"percy\.snapshot\(")))
        assert len(calls) == 1
        assert source[calls[0].start:calls[0].end] == 'percy.snapshot("Home", opts(")"))'
        assert calls[0].args == ['"Home"', 'opts(")")']

    def test_unterminated_call_is_skipped(self):
        assert list(text.iter_calls("percy.snapshot(", re.compile(r"percy\.snapshot\("))) == []


class TestKeyword:
    def test_keyword(self):
        assert text.keyword("name='Home'") == ("name", "'Home'")
        assert text.keyword("a == b") is None
        assert text.keyword('"x=y"') is None


class TestStatementSpan:
    def test_whole_line(self):
        source = "a\n    eyes.close();\nb\n"
        start = source.index("eyes")
        end = source.index(")") + 1
        assert text.statement_span(source, start, end, ";") == (2, source.index("b"))

    def test_not_standalone(self):
        source = "x = eyes.close() + 1\n"
        start = source.index("eyes")
        end = source.index(")") + 1
        assert text.statement_span(source, start, end) is None


class TestSplice:
    def test_overlapping_edit_dropped(self):
        assert text.splice("abcdef", [(0, 3, "X"), (2, 4, "Y"), (5, 6, "Z")]) == "abYeZ"
