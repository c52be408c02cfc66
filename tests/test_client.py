"""
Tests for the inverted-index command line client
"""

import json
import os
from unittest.mock import patch

import pytest

from client.client import main


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch('common.config.setup_logging'):
        yield


@pytest.fixture
def crawl_dir(temp_dir, write_crawl):
    directory = os.path.join(temp_dir, 'crawl')
    write_crawl(directory, 'part-00000', ["(doc1, the cat sat)", "(doc2, the dog sat)"])
    return directory


def build(temp_dir, crawl_dir, *extra):
    output = os.path.join(temp_dir, 'index')
    argv = ['build-index', '--input', crawl_dir, '--output', output,
            '--intermediate-dir', os.path.join(temp_dir, 'scratch'), *extra]
    return main(argv), output


class TestBuildIndexCommand:
    """Tests for build-index"""

    def test_builds_index(self, temp_dir, crawl_dir, capsys):
        code, output = build(temp_dir, crawl_dir, '--num-map-tasks', '2', '--num-reduce-tasks', '2')

        assert code == 0
        assert "✓ Index built successfully!" in capsys.readouterr().out
        lines = []
        for name in sorted(os.listdir(output)):
            if name.startswith('part-'):
                with open(os.path.join(output, name)) as f:
                    lines.extend(f.read().splitlines())
        assert lines == ["cat\t(doc1,1)", "dog\t(doc2,1)", "sat\t(doc1,1), (doc2,1)"]

    def test_existing_output_is_an_error(self, temp_dir, crawl_dir, capsys):
        os.makedirs(os.path.join(temp_dir, 'index'))

        code, _ = build(temp_dir, crawl_dir)

        assert code == 1
        assert "already exists" in capsys.readouterr().out

    def test_overwrite_flag(self, temp_dir, crawl_dir):
        os.makedirs(os.path.join(temp_dir, 'index'))

        code, output = build(temp_dir, crawl_dir, '--overwrite')

        assert code == 0
        assert os.path.exists(os.path.join(output, '_SUCCESS'))

    def test_stop_words_file(self, temp_dir, crawl_dir):
        stop_file = os.path.join(temp_dir, 'stop.txt')
        with open(stop_file, 'w') as f:
            f.write("# custom list\nsat\n")

        code, output = build(temp_dir, crawl_dir, '--stop-words', stop_file)

        assert code == 0
        assert main(['lookup', '--index', output, 'sat']) == 1
        assert main(['lookup', '--index', output, 'the']) == 0

    def test_no_stop_words(self, temp_dir, crawl_dir, capsys):
        _, output = build(temp_dir, crawl_dir, '--no-stop-words')
        capsys.readouterr()

        assert main(['lookup', '--index', output, 'the']) == 0
        assert capsys.readouterr().out == "1\tdoc1\n1\tdoc2\n"

    def test_missing_stop_words_file(self, temp_dir, crawl_dir, capsys):
        code, output = build(temp_dir, crawl_dir, '--stop-words', os.path.join(temp_dir, 'missing.txt'))

        assert code == 1
        assert capsys.readouterr().out.startswith("Error:")
        assert not os.path.exists(output)

    def test_metrics_file(self, temp_dir, crawl_dir):
        metrics_file = os.path.join(temp_dir, 'metrics.json')

        code, _ = build(temp_dir, crawl_dir, '--job-id', 'cli-job', '--metrics-file', metrics_file)

        assert code == 0
        with open(metrics_file) as f:
            metrics = json.load(f)
        assert metrics['job_id'] == 'cli-job'
        assert [s['name'] for s in metrics['stages']] == ['count', 'index']

    def test_invalid_task_count(self, temp_dir, crawl_dir, capsys):
        code, _ = build(temp_dir, crawl_dir, '--num-map-tasks', '0')

        assert code == 1
        assert "num_map_tasks" in capsys.readouterr().out


class TestLookupCommand:
    """Tests for lookup"""

    def test_lookup_prints_ranked_postings(self, temp_dir, crawl_dir, capsys):
        _, output = build(temp_dir, crawl_dir)
        capsys.readouterr()

        assert main(['lookup', '--index', output, 'SAT']) == 0
        assert capsys.readouterr().out == "1\tdoc1\n1\tdoc2\n"

    def test_unknown_word(self, temp_dir, crawl_dir, capsys):
        _, output = build(temp_dir, crawl_dir)
        capsys.readouterr()

        assert main(['lookup', '--index', output, 'zebra']) == 1
        assert "not in the index" in capsys.readouterr().out

    def test_missing_index(self, temp_dir, capsys):
        assert main(['lookup', '--index', os.path.join(temp_dir, 'nope'), 'cat']) == 1
        assert capsys.readouterr().out.startswith("Error:")


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "build-index" in capsys.readouterr().out
