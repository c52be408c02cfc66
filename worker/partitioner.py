"""
Partitioners that assign intermediate keys to reduce tasks
"""

import json
import random
import zlib
from bisect import bisect_left
from typing import Any, Iterable, List


def encode_key(key: Any) -> bytes:
    """Stable byte encoding of a key (tuples encode like lists)"""
    return json.dumps(key, ensure_ascii=False, separators=(',', ':')).encode('utf-8')


class HashPartitioner:
    """
    Spreads keys evenly across partitions.

    Uses CRC32 of the encoded key rather than hash(), which is salted per
    interpreter, so partition assignment is the same on every run.
    """

    def __init__(self, num_partitions: int):
        if num_partitions < 1:
            raise ValueError("num_partitions must be at least 1")
        self.num_partitions = num_partitions

    def __call__(self, key: Any) -> int:
        return zlib.crc32(encode_key(key)) % self.num_partitions


class RangePartitioner:
    """
    Assigns ordered key ranges to partitions.

    Partition i holds keys k with boundaries[i-1] < k <= boundaries[i], so
    reading partitions in order yields keys in ascending order.
    """

    def __init__(self, boundaries: List[Any]):
        self.boundaries = list(boundaries)
        self.num_partitions = len(self.boundaries) + 1

    @classmethod
    def from_sample(cls, sample: Iterable[Any], num_partitions: int) -> 'RangePartitioner':
        """Pick num_partitions - 1 boundaries at the quantiles of a key sample"""
        if num_partitions < 1:
            raise ValueError("num_partitions must be at least 1")
        keys = sorted(set(sample))
        boundaries = []
        if keys:
            for i in range(1, num_partitions):
                candidate = keys[(i * len(keys)) // num_partitions]
                # Skewed samples can repeat a quantile
                if not boundaries or candidate > boundaries[-1]:
                    boundaries.append(candidate)
        return cls(boundaries)

    def __call__(self, key: Any) -> int:
        return bisect_left(self.boundaries, key)


def reservoir_sample(items: Iterable[Any], size: int, seed: int = 0) -> List[Any]:
    """
    Uniform sample of at most size items from a stream of unknown length

    The generator is seeded so the same stream always gives the same sample.
    """
    rng = random.Random(seed)
    reservoir: List[Any] = []
    for i, item in enumerate(items):
        if i < size:
            reservoir.append(item)
        else:
            j = rng.randint(0, i)
            if j < size:
                reservoir[j] = item
    return reservoir
