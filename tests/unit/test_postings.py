"""
Unit tests for counting, grouping, ranking and formatting
"""

from indexing.postings import (
    build_index,
    count_tokens,
    format_postings,
    format_record,
    group_by_word,
    merge_counts,
    rank_index,
    rank_postings,
)
from indexing.records import CountEntry, WordPosting
from indexing.stop_words import StopWordSet


class TestCounting:
    """Tests for the counter/aggregator"""

    def test_counts_tokens_per_document(self):
        entries = count_tokens("doc1", ["cat", "dog", "cat"])
        assert sorted(entries) == [CountEntry("cat", "doc1", 2), CountEntry("dog", "doc1", 1)]

    def test_no_tokens_no_entries(self):
        assert count_tokens("doc1", []) == []

    def test_merge_sums_identical_pairs(self):
        entries = [
            CountEntry("cat", "doc1", 2),
            CountEntry("cat", "doc2", 1),
            CountEntry("cat", "doc1", 3),
        ]
        assert sorted(merge_counts(entries)) == [CountEntry("cat", "doc1", 5), CountEntry("cat", "doc2", 1)]

    def test_merge_is_order_independent(self):
        entries = [CountEntry("a", "d1", 1), CountEntry("b", "d1", 2), CountEntry("a", "d1", 4)]
        assert sorted(merge_counts(entries)) == sorted(merge_counts(list(reversed(entries))))


class TestGrouping:
    """Tests for the grouper"""

    def test_groups_pairs_by_word(self):
        entries = [CountEntry("cat", "doc1", 1), CountEntry("dog", "doc2", 1), CountEntry("cat", "doc2", 3)]
        groups = group_by_word(entries)
        assert sorted(groups) == ["cat", "dog"]
        assert sorted(groups["cat"]) == [("doc1", 1), ("doc2", 3)]

    def test_no_pairs_lost_or_duplicated(self):
        entries = [CountEntry(w, d, 1) for w in "abc" for d in ("d1", "d2")]
        groups = group_by_word(entries)
        assert sum(len(pairs) for pairs in groups.values()) == len(entries)


class TestRanking:
    """Tests for the ranker"""

    def test_orders_by_count_descending(self):
        assert rank_postings([("d1", 1), ("d2", 5), ("d3", 3)]) == (("d2", 5), ("d3", 3), ("d1", 1))

    def test_ties_broken_by_document_id(self):
        assert rank_postings([("doc2", 1), ("doc10", 1), ("doc1", 1)]) == (("doc1", 1), ("doc10", 1), ("doc2", 1))

    def test_ranking_ignores_input_order(self):
        pairs = [("b", 2), ("a", 2), ("c", 7)]
        assert rank_postings(pairs) == rank_postings(reversed(pairs))

    def test_words_in_ascending_order(self):
        index = rank_index({"zebra": [("d", 1)], "apple": [("d", 1)], "mango": [("d", 1)]})
        assert [p.word for p in index] == ["apple", "mango", "zebra"]


class TestFormatting:
    """Tests for the formatter"""

    def test_formats_postings(self):
        assert format_postings([("doc1", 2), ("doc2", 1)]) == "(doc1,2), (doc2,1)"

    def test_formats_record(self):
        posting = WordPosting("sat", (("doc1", 1), ("doc2", 1)))
        assert format_record(posting) == "sat\t(doc1,1), (doc2,1)"

    def test_does_not_reorder(self):
        assert format_postings([("b", 1), ("a", 9)]) == "(b,1), (a,9)"


class TestBuildIndex:
    """Tests for the single-process pipeline"""

    def test_cat_dog_example(self):
        lines = ["(doc1, the cat sat)", "(doc2, the dog sat)"]
        assert list(build_index(lines, StopWordSet(["the"]))) == [
            "cat\t(doc1,1)",
            "dog\t(doc2,1)",
            "sat\t(doc1,1), (doc2,1)",
        ]

    def test_numbers_never_indexed(self):
        records = list(build_index(["(doc1, 42 cats and 42 dogs)"], StopWordSet.empty()))
        assert all(not r.startswith("42\t") for r in records)
        assert "cats\t(doc1,1)" in records

    def test_apostrophe_word_kept_whole(self):
        records = list(build_index(["(doc1, There's a cat)"], StopWordSet.empty()))
        assert "there's\t(doc1,1)" in records
        assert not any(r.startswith("there\t") or r.startswith("s\t") for r in records)

    def test_malformed_line_contributes_nothing(self):
        lines = ["garbage", "(doc1, cat)"]
        assert list(build_index(lines, StopWordSet.empty())) == ["cat\t(doc1,1)"]

    def test_ranked_by_count_then_document(self):
        lines = ["(b, fox)", "(a, fox)", "(c, fox fox fox)"]
        assert list(build_index(lines, StopWordSet.empty())) == ["fox\t(c,3), (a,1), (b,1)"]

    def test_same_document_on_several_lines_is_summed(self):
        lines = ["(doc1, fox)", "(doc1, fox fox)"]
        assert list(build_index(lines, StopWordSet.empty())) == ["fox\t(doc1,3)"]

    def test_empty_corpus(self):
        assert list(build_index([], StopWordSet.default())) == []

    def test_idempotent(self, sample_lines, stop_words):
        assert list(build_index(sample_lines, stop_words)) == list(build_index(sample_lines, stop_words))
