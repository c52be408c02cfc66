"""
Unit tests for FunctionLoader
"""

import os
import textwrap

import pytest

from common.broadcast import Broadcast
from common.errors import JobDefinitionError
from common.stage import Stage, RANGE_PARTITIONING, RECORD_INPUT
from indexing.stop_words import StopWordSet
from worker.function_loader import FunctionLoader


def write_job(directory, name, source):
    path = os.path.join(directory, name)
    with open(path, 'w') as f:
        f.write(textwrap.dedent(source))
    return path


class TestFunctionLoaderBasics:
    """Tests for basic loading functionality"""

    def test_raises_error_for_nonexistent_file(self):
        loader = FunctionLoader('/nonexistent/file.py')

        with pytest.raises(FileNotFoundError):
            loader.load_module()

    def test_loads_single_stage_job(self, temp_dir):
        path = write_job(temp_dir, 'wordcount.py', """
            def map_function(key, value):
                for word in value.split():
                    yield (word, 1)

            def reduce_function(key, values):
                yield (key, sum(values))
        """)
        loader = FunctionLoader(path)

        stages = loader.get_stages()

        assert len(stages) == 1
        assert stages[0].name == 'main'
        assert stages[0].combiner_function is None
        assert list(stages[0].map_function(0, "a b")) == [("a", 1), ("b", 1)]

    def test_combiner_is_optional(self, temp_dir):
        path = write_job(temp_dir, 'job.py', """
            def map_function(key, value):
                yield (value, 1)

            def reduce_function(key, values):
                yield (key, sum(values))

            combiner_function = reduce_function
        """)
        assert FunctionLoader(path).get_combiner_function() is not None

    def test_missing_map_function(self, temp_dir):
        path = write_job(temp_dir, 'job.py', """
            def reduce_function(key, values):
                yield (key, values)
        """)
        with pytest.raises(JobDefinitionError, match="map_function"):
            FunctionLoader(path).get_map_function()

    def test_missing_reduce_function(self, temp_dir):
        path = write_job(temp_dir, 'job.py', """
            def map_function(key, value):
                yield (key, value)
        """)
        with pytest.raises(JobDefinitionError, match="reduce_function"):
            FunctionLoader(path).get_reduce_function()


class TestMultiStageJobs:
    """Tests for jobs defining stages(broadcast)"""

    def test_inverted_index_stages(self, inverted_index_job_file):
        stages = FunctionLoader(inverted_index_job_file).get_stages(Broadcast(StopWordSet(["the"])))

        assert [s.name for s in stages] == ['count', 'index']
        assert stages[0].combiner_function is not None
        assert stages[1].partitioning == RANGE_PARTITIONING
        assert stages[1].input_format == RECORD_INPUT

    def test_broadcast_reaches_map_function(self, inverted_index_job_file):
        stages = FunctionLoader(inverted_index_job_file).get_stages(Broadcast(StopWordSet(["the"])))

        pairs = list(stages[0].map_function("crawl@0", "(doc1, the cat)"))

        assert pairs == [(("cat", "doc1"), 1)]

    def test_empty_stage_list_rejected(self, temp_dir):
        path = write_job(temp_dir, 'job.py', """
            def stages(broadcast):
                return []
        """)
        with pytest.raises(JobDefinitionError, match="no stages"):
            FunctionLoader(path).get_stages()

    def test_non_stage_objects_rejected(self, temp_dir):
        path = write_job(temp_dir, 'job.py', """
            def stages(broadcast):
                return ["count"]
        """)
        with pytest.raises(JobDefinitionError, match="Stage objects"):
            FunctionLoader(path).get_stages()

    def test_duplicate_stage_names_rejected(self, temp_dir):
        path = write_job(temp_dir, 'job.py', """
            from common.stage import Stage

            def identity(key, value):
                yield (key, value)

            def stages(broadcast):
                return [Stage('a', identity, identity), Stage('a', identity, identity)]
        """)
        with pytest.raises(JobDefinitionError, match="unique"):
            FunctionLoader(path).get_stages()


class TestStage:
    """Tests for stage validation"""

    def test_unknown_partitioning(self):
        with pytest.raises(ValueError):
            Stage('s', print, print, partitioning='random')

    def test_unknown_input_format(self):
        with pytest.raises(ValueError):
            Stage('s', print, print, input_format='xml')

    def test_broadcast_is_read_only(self):
        handle = Broadcast(StopWordSet(["the"]))
        with pytest.raises(AttributeError):
            handle.value = StopWordSet.empty()
        assert "the" in handle.value
