"""
Pytest configuration and shared fixtures
"""

import pytest
import os
import tempfile
import shutil

from indexing.stop_words import StopWordSet

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.fixture
def temp_dir():
    """Create temporary directory for test files"""
    dirpath = tempfile.mkdtemp()
    yield dirpath
    shutil.rmtree(dirpath)


@pytest.fixture
def sample_lines():
    """Crawl lines in '(document_id, text)' format"""
    return [
        "(doc1, The quick brown fox jumps over the lazy dog.)",
        "(doc2, The dog was really lazy; the dog slept.)",
        "(doc3, The fox was very quick and brown, there's no doubt.)",
        "(doc4, Quick brown foxes are amazing animals, 42 of them!)",
        "garbage",
        "(doc5, Lazy dogs sleep all day in 2024.)",
    ]


@pytest.fixture
def sample_input_file(temp_dir, sample_lines):
    """Create a sample crawl file for testing"""
    filepath = os.path.join(temp_dir, 'crawl.txt')
    with open(filepath, 'w') as f:
        f.write('\n'.join(sample_lines) + '\n')
    return filepath


@pytest.fixture
def stop_words():
    """Small stop-word set used across tests"""
    return StopWordSet(["the", "was", "over", "and", "are", "of", "in", "all", "no"])


@pytest.fixture
def inverted_index_job_file():
    """Path to the inverted index job file"""
    return os.path.join(PROJECT_ROOT, 'jobs', 'inverted_index.py')


@pytest.fixture
def write_crawl():
    """Factory writing crawl lines to directory/name and returning the path"""
    def _write(directory, name, lines):
        os.makedirs(directory, exist_ok=True)
        path = os.path.join(directory, name)
        with open(path, "w", encoding="utf-8") as f:
            for line in lines:
                f.write(line + "\n")
        return path
    return _write
