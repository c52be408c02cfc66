"""
Tokenizer for crawl document text
"""

import re
from typing import Iterator

# A token is a maximal run of letters, digits and apostrophes, so
# abbreviations like "there's" stay whole. Underscore is a delimiter.
TOKEN_RE = re.compile(r"(?:[^\W_]|')+")


def tokenize(text: str) -> Iterator[str]:
    """
    Lazily split document text into lower-case word tokens

    Args:
        text: Raw document text

    Yields:
        Non-empty tokens in document order
    """
    for match in TOKEN_RE.finditer(text.strip().lower()):
        yield match.group()
