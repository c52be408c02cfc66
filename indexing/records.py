"""
Crawl input records and index record types
"""

import re
import logging
from typing import NamedTuple, Tuple

from common.errors import MalformedInputLine

logger = logging.getLogger(__name__)

# "(document_id, text)": the id runs to the first comma, the text to the
# closing parenthesis at the end of the line.
LINE_RE = re.compile(r"^\s*\(([^,]+),(.*)\)\s*$")


class CountEntry(NamedTuple):
    """Occurrences of one word in one document"""
    word: str
    document_id: str
    count: int


class WordPosting(NamedTuple):
    """One word of the index with its ranked (document_id, count) pairs"""
    word: str
    postings: Tuple[Tuple[str, int], ...]


def parse_crawl_line(line: str) -> Tuple[str, str]:
    """
    Parse one '(document_id, text)' crawl line

    Returns:
        (document_id, text) with the id trimmed and the text lower-cased

    Raises:
        MalformedInputLine: If the line does not have the expected shape
    """
    match = LINE_RE.match(line)
    if match is None:
        raise MalformedInputLine(line)
    document_id, text = match.groups()
    document_id = document_id.strip()
    if not document_id:
        raise MalformedInputLine(line)
    return document_id, text.strip().lower()


def read_crawl_record(line: str) -> Tuple[str, str]:
    """
    Parse a crawl line, recovering from malformed input

    A bad line is logged and replaced by an empty record, which yields
    no tokens downstream. Blank lines give the same empty record quietly.
    """
    if not line.strip():
        logger.debug("Skipping blank line")
        return "", ""
    try:
        return parse_crawl_line(line)
    except MalformedInputLine as e:
        logger.error(str(e))
        return "", ""
