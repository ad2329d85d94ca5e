"""Tests for keyline.parser -- splitting command lines into arguments."""

from __future__ import annotations

import pytest

from keyline.errors import ParseError, UnterminatedQuote
from keyline.parser import split_identifier, tokenize


class TestTokenize:
    """Separator and quote handling."""

    def test_simple_words(self) -> None:
        assert tokenize("a b c") == ["a", "b", "c"]

    def test_quoted_span_is_one_token(self) -> None:
        assert tokenize('a "b c" d') == ["a", "b c", "d"]

    def test_separator_runs_collapse(self) -> None:
        assert tokenize("a   b") == ["a", "b"]

    def test_leading_and_trailing_separators(self) -> None:
        assert tokenize("  a b  ") == ["a", "b"]

    def test_quote_glued_to_text(self) -> None:
        assert tokenize('ab"c d"e f') == ["abc de", "f"]

    def test_empty_quotes_make_empty_token(self) -> None:
        assert tokenize('a "" b') == ["a", "", "b"]

    def test_empty_line(self) -> None:
        assert tokenize("") == [""]

    def test_only_separators(self) -> None:
        assert tokenize("    ") == [""]

    def test_custom_separator_and_quote(self) -> None:
        assert tokenize("a,'b,c',,d", separator=",", quote="'") == ["a", "b,c", "d"]

    def test_newlines_are_ordinary_characters(self) -> None:
        assert tokenize("a\nb c") == ["a\nb", "c"]

    def test_multi_character_separator_rejected(self) -> None:
        with pytest.raises(ValueError):
            tokenize("a b", separator="  ")


class TestUnterminatedQuote:
    def test_raises(self) -> None:
        with pytest.raises(UnterminatedQuote):
            tokenize('a "b')

    def test_is_a_parse_error(self) -> None:
        with pytest.raises(ParseError) as excinfo:
            tokenize('cat "unfinished')
        assert excinfo.value.position == 4
        assert "column 5" in excinfo.value.message

    def test_second_quote_unterminated(self) -> None:
        with pytest.raises(UnterminatedQuote):
            tokenize('"ok" "no')


class TestRoundTrip:
    """Joining tokens with the separator and re-tokenizing gives them back."""

    @pytest.mark.parametrize(
        "tokens",
        [
            ["help"],
            ["cat", "a", "b"],
            ["x", "y.z", "--flag", "1,2"],
            ["unicode", "héllo", "世界"],
        ],
    )
    def test_round_trip(self, tokens: list[str]) -> None:
        assert tokenize(" ".join(tokens)) == tokens


class TestSplitIdentifier:
    def test_identifier_and_rest(self) -> None:
        assert split_identifier('cat "a b"  c') == ("cat", '"a b"  c')

    def test_no_separator(self) -> None:
        assert split_identifier("help") == ("help", None)

    def test_trailing_separator_gives_empty_rest(self) -> None:
        assert split_identifier("help ") == ("help", "")

    def test_leading_separator_gives_empty_identifier(self) -> None:
        assert split_identifier(" exit") == ("", "exit")

    def test_blank(self) -> None:
        assert split_identifier("") == ("", None)
        assert split_identifier("   ") == ("", "  ")
