"""
Unit tests for hash and range partitioning
"""

import pytest

from worker.partitioner import HashPartitioner, RangePartitioner, encode_key, reservoir_sample


class TestHashPartitioner:
    """Tests for CRC32 hash partitioning"""

    def test_partition_in_range(self):
        partitioner = HashPartitioner(3)
        for word in ["apple", "banana", "cherry", "date", "elderberry"]:
            assert 0 <= partitioner((word, "doc1")) < 3

    def test_same_key_same_partition(self):
        assert HashPartitioner(7)(("fox", "doc1")) == HashPartitioner(7)(("fox", "doc1"))

    def test_tuple_and_list_keys_agree(self):
        partitioner = HashPartitioner(5)
        assert partitioner(("fox", "doc1")) == partitioner(["fox", "doc1"])

    def test_single_partition(self):
        assert HashPartitioner(1)("anything") == 0

    def test_rejects_zero_partitions(self):
        with pytest.raises(ValueError):
            HashPartitioner(0)

    def test_encode_key_is_compact_utf8(self):
        assert encode_key(("café", "d")) == '["café","d"]'.encode('utf-8')


class TestRangePartitioner:
    """Tests for ordered range partitioning"""

    def test_partitions_are_ordered(self):
        partitioner = RangePartitioner.from_sample(list("abcdefghij"), 3)
        words = sorted("abcdefghijklmnopqrstuvwxyz")
        assignments = [partitioner(w) for w in words]
        assert assignments == sorted(assignments)
        assert max(assignments) < 3

    def test_boundary_key_goes_to_lower_partition(self):
        partitioner = RangePartitioner(["m"])
        assert partitioner("m") == 0
        assert partitioner("ma") == 1
        assert partitioner("a") == 0

    def test_quantile_boundaries(self):
        partitioner = RangePartitioner.from_sample(["a", "b", "c", "d"], 2)
        assert partitioner.boundaries == ["c"]

    def test_skewed_sample_yields_fewer_boundaries(self):
        partitioner = RangePartitioner.from_sample(["x", "x", "x"], 4)
        assert partitioner.boundaries == ["x"]
        assert partitioner.num_partitions == 2

    def test_empty_sample_sends_everything_to_partition_zero(self):
        partitioner = RangePartitioner.from_sample([], 4)
        assert partitioner("anything") == 0

    def test_single_partition_has_no_boundaries(self):
        assert RangePartitioner.from_sample(["a", "b"], 1).boundaries == []

    def test_rejects_zero_partitions(self):
        with pytest.raises(ValueError):
            RangePartitioner.from_sample(["a"], 0)


class TestReservoirSample:
    """Tests for seeded reservoir sampling"""

    def test_short_stream_kept_whole(self):
        assert reservoir_sample(iter(range(5)), 10) == [0, 1, 2, 3, 4]

    def test_sample_size_bounded(self):
        assert len(reservoir_sample(iter(range(1000)), 10)) == 10

    def test_deterministic_for_seed(self):
        assert reservoir_sample(range(1000), 10, seed=3) == reservoir_sample(range(1000), 10, seed=3)

    def test_items_come_from_stream(self):
        assert set(reservoir_sample(range(100), 10)) <= set(range(100))
