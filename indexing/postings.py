"""
Counting, grouping, ranking and formatting of postings

These are the pure building blocks shared by the MapReduce job in
jobs/inverted_index.py and by build_index, the single-process reference.
"""

from collections import Counter, defaultdict
from typing import Dict, Iterable, Iterator, List, Tuple

from indexing.records import CountEntry, WordPosting, read_crawl_record
from indexing.stop_words import StopWordFilter
from indexing.tokenizer import tokenize

RECORD_SEPARATOR = "\t"
POSTING_SEPARATOR = ", "


def count_tokens(document_id: str, tokens: Iterable[str]) -> List[CountEntry]:
    """Count each distinct token of one document"""
    return [
        CountEntry(word, document_id, count)
        for word, count in Counter(tokens).items()
    ]


def merge_counts(entries: Iterable[CountEntry]) -> List[CountEntry]:
    """
    Sum counts of identical (word, document_id) pairs.

    Order of the input does not matter; the result has one entry per pair.
    """
    totals: Dict[Tuple[str, str], int] = defaultdict(int)
    for word, document_id, count in entries:
        totals[(word, document_id)] += count
    return [
        CountEntry(word, document_id, count)
        for (word, document_id), count in totals.items()
        if count > 0
    ]


def group_by_word(entries: Iterable[CountEntry]) -> Dict[str, List[Tuple[str, int]]]:
    """Collect the (document_id, count) pairs of each word, unordered"""
    groups: Dict[str, List[Tuple[str, int]]] = defaultdict(list)
    for word, document_id, count in entries:
        groups[word].append((document_id, count))
    return dict(groups)


def ranking_key(posting: Tuple[str, int]):
    """Count descending, then document id ascending for ties"""
    document_id, count = posting
    return -count, document_id


def rank_postings(postings: Iterable[Tuple[str, int]]) -> Tuple[Tuple[str, int], ...]:
    return tuple(sorted(postings, key=ranking_key))


def rank_index(groups: Dict[str, Iterable[Tuple[str, int]]]) -> List[WordPosting]:
    """Rank every word's postings and order the words ascending"""
    return [
        WordPosting(word, rank_postings(groups[word]))
        for word in sorted(groups)
    ]


def format_postings(postings: Iterable[Tuple[str, int]]) -> str:
    """Render ranked postings as '(doc1,3), (doc2,1)'"""
    return POSTING_SEPARATOR.join(
        f"({document_id},{count})" for document_id, count in postings
    )


def format_record(posting: WordPosting) -> str:
    """Render one index record: word, tab, ranked postings"""
    return f"{posting.word}{RECORD_SEPARATOR}{format_postings(posting.postings)}"


def index_document(document_id: str, text: str, token_filter: StopWordFilter) -> List[CountEntry]:
    """Tokenize, filter and count one document"""
    if not document_id:
        return []
    return count_tokens(document_id, token_filter(tokenize(text)))


def build_index(lines: Iterable[str], stop_words) -> Iterator[str]:
    """
    Build the index of a corpus in a single process

    Args:
        lines: Crawl lines in '(document_id, text)' format
        stop_words: Object with a contains(word) method

    Yields:
        Formatted index records in ascending word order
    """
    token_filter = StopWordFilter(stop_words)
    entries = []
    for line in lines:
        document_id, text = read_crawl_record(line)
        entries.extend(index_document(document_id, text, token_filter))

    for posting in rank_index(group_by_word(merge_counts(entries))):
        yield format_record(posting)
