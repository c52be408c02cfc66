"""
Unit tests for the tokenizer
"""

import types

from indexing.tokenizer import tokenize


class TestTokenize:
    """Tests for splitting document text into tokens"""

    def test_lower_cases_and_splits_on_punctuation(self):
        assert list(tokenize("The Cat, sat!")) == ["the", "cat", "sat"]

    def test_case_variants_merge(self):
        assert set(tokenize("Spark SPARK spark")) == {"spark"}

    def test_apostrophe_keeps_abbreviations_whole(self):
        assert list(tokenize("there's a dog")) == ["there's", "a", "dog"]

    def test_digits_are_token_characters(self):
        assert list(tokenize("route66 and 42")) == ["route66", "and", "42"]

    def test_underscore_is_a_delimiter(self):
        assert list(tokenize("snake_case")) == ["snake", "case"]

    def test_runs_of_delimiters_do_not_produce_empty_tokens(self):
        assert list(tokenize("a -- b...c")) == ["a", "b", "c"]

    def test_leading_and_trailing_whitespace_is_ignored(self):
        assert list(tokenize("   hello world   ")) == ["hello", "world"]

    def test_only_delimiters_yields_nothing(self):
        assert list(tokenize(" ,.;!? -- ")) == []

    def test_empty_text_yields_nothing(self):
        assert list(tokenize("")) == []

    def test_non_ascii_letters_are_kept(self):
        assert list(tokenize("Café naïve")) == ["café", "naïve"]

    def test_is_lazy(self):
        tokens = tokenize("one two")
        assert isinstance(tokens, types.GeneratorType)
        assert next(tokens) == "one"
