"""
Stop-word set and token filtering
The set is built once per run and only ever read afterwards
"""

import re
import logging
from typing import Iterable, Iterator

from common.errors import ResourceUnavailable

logger = logging.getLogger(__name__)

NUMBER_RE = re.compile(r"\d+")

DEFAULT_STOP_WORDS = (
    "a about above after again against all am an and any are aren't as at "
    "be because been before being below between both but by "
    "can can't cannot could couldn't "
    "did didn't do does doesn't doing don't down during "
    "each few for from further "
    "had hadn't has hasn't have haven't having he he'd he'll he's her here "
    "here's hers herself him himself his how how's "
    "i i'd i'll i'm i've if in into is isn't it it's its itself "
    "let's me more most mustn't my myself "
    "no nor not of off on once only or other ought our ours ourselves out "
    "over own "
    "same shan't she she'd she'll she's should shouldn't so some such "
    "than that that's the their theirs them themselves then there there's "
    "these they they'd they'll they're they've this those through to too "
    "under until up very "
    "was wasn't we we'd we'll we're we've were weren't what what's when "
    "when's where where's which while who who's whom why why's with won't "
    "would wouldn't "
    "you you'd you'll you're you've your yours yourself yourselves"
).split()


class StopWordSet:
    """Immutable set of words excluded from the index"""

    __slots__ = ('_words',)

    def __init__(self, words: Iterable[str] = ()):
        object.__setattr__(self, '_words', frozenset(w.strip().lower() for w in words if w.strip()))

    @classmethod
    def default(cls) -> 'StopWordSet':
        """Built-in English stop words"""
        return cls(DEFAULT_STOP_WORDS)

    @classmethod
    def empty(cls) -> 'StopWordSet':
        return cls()

    @classmethod
    def from_file(cls, path: str) -> 'StopWordSet':
        """
        Load stop words from a file with one word per line

        Blank lines and lines starting with '#' are ignored.

        Raises:
            ResourceUnavailable: If the file cannot be read
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                words = [line for line in f if line.strip() and not line.lstrip().startswith('#')]
        except OSError as e:
            raise ResourceUnavailable(f"Cannot read stop-word file {path}: {e}") from e
        stop_words = cls(words)
        logger.info(f"Loaded {len(stop_words)} stop words from {path}")
        return stop_words

    def contains(self, word: str) -> bool:
        return word in self._words

    def __contains__(self, word) -> bool:
        return word in self._words

    def __len__(self):
        return len(self._words)

    def __iter__(self):
        return iter(sorted(self._words))

    def __setattr__(self, name, value):
        raise AttributeError("StopWordSet is immutable")

    def __repr__(self):
        return f"StopWordSet({len(self._words)} words)"


def is_number(token: str) -> bool:
    """True if the token is one or more decimal digits and nothing else"""
    return NUMBER_RE.fullmatch(token) is not None


class StopWordFilter:
    """
    Accepts tokens that are neither stop words nor pure numbers.

    stop_words can be any object with a contains(word) method, so the
    word source is swappable (StopWordSet, a remote lookup, a test double).
    """

    def __init__(self, stop_words):
        self.stop_words = stop_words

    def is_stop_word(self, token: str) -> bool:
        return self.stop_words.contains(token)

    def accepts(self, token: str) -> bool:
        return bool(token) and not self.is_stop_word(token) and not is_number(token)

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            if self.accepts(token):
                yield token
