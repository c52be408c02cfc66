"""
Inverted index MapReduce job.
Maps each word to the documents it appears in, with per-document counts,
ranked by count and ordered by word. Stop words and pure numbers are dropped.

Stage 'count':  (document_id, text) lines  -> ((word, document_id), count)
Stage 'index':  ((word, document_id), count) -> (word, ranked postings)
"""

from common.broadcast import Broadcast
from common.stage import Stage, HASH_PARTITIONING, RANGE_PARTITIONING, RECORD_INPUT, TEXT_INPUT
from indexing.postings import format_postings, rank_postings
from indexing.records import read_crawl_record
from indexing.stop_words import StopWordFilter, StopWordSet
from indexing.tokenizer import tokenize


def make_count_map_function(stop_words: Broadcast):
    """
    Build the map function of the count stage around the broadcast stop words.

    Yields:
        ((word, document_id), 1) for each surviving token of a crawl line
    """
    def map_function(key, value):
        document_id, text = read_crawl_record(value)
        if not document_id:
            return
        token_filter = StopWordFilter(stop_words.value)
        for word in token_filter(tokenize(text)):
            yield ((word, document_id), 1)

    return map_function


def sum_counts(key, values):
    """
    Combiner and reducer of the count stage: sum the counts of a
    (word, document_id) pair. Addition is associative and commutative, so
    partial sums from any map task can be merged in any order.
    """
    yield (key, sum(values))


def regroup_by_word(key, value):
    """Re-key a (word, document_id) count by word alone"""
    word, document_id = key
    yield (word, (document_id, value))


def rank_and_format(key, values):
    """
    Reduce function of the index stage.

    Yields:
        (word, '(doc,n), (doc,n), ...') with postings ranked by count
        descending, then document id ascending
    """
    yield (key, format_postings(rank_postings(values)))


def stages(broadcast=None):
    """Stages of the inverted index job, in execution order"""
    if broadcast is None:
        broadcast = Broadcast(StopWordSet.default())

    return [
        Stage(
            name='count',
            map_function=make_count_map_function(broadcast),
            reduce_function=sum_counts,
            combiner_function=sum_counts,
            partitioning=HASH_PARTITIONING,
            input_format=TEXT_INPUT
        ),
        Stage(
            name='index',
            map_function=regroup_by_word,
            reduce_function=rank_and_format,
            partitioning=RANGE_PARTITIONING,
            input_format=RECORD_INPUT
        ),
    ]
