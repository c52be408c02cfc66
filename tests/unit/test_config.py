"""
Unit tests for environment configuration
"""

import logging

import pytest

from common import config


class TestEnvironmentDefaults:
    """Tests for INDEX_* environment variables"""

    def test_defaults(self, monkeypatch):
        for name in ('INDEX_NUM_MAP_TASKS', 'INDEX_NUM_REDUCE_TASKS', 'INDEX_MAX_WORKERS',
                     'INDEX_STOP_WORDS_FILE', 'INDEX_LOG_LEVEL'):
            monkeypatch.delenv(name, raising=False)

        assert config.num_map_tasks() == 4
        assert config.num_reduce_tasks() == 2
        assert config.max_workers() == 4
        assert config.stop_words_file() is None
        assert config.log_level() == 'INFO'

    def test_overrides(self, monkeypatch, temp_dir):
        monkeypatch.setenv('INDEX_NUM_MAP_TASKS', '8')
        monkeypatch.setenv('INDEX_NUM_REDUCE_TASKS', '3')
        monkeypatch.setenv('INDEX_INTERMEDIATE_DIR', temp_dir)
        monkeypatch.setenv('INDEX_LOG_LEVEL', 'debug')

        assert config.num_map_tasks() == 8
        assert config.num_reduce_tasks() == 3
        assert config.intermediate_dir() == temp_dir
        assert config.log_level() == 'DEBUG'

    @pytest.mark.parametrize("value", ["four", "0", "-2"])
    def test_invalid_task_count(self, monkeypatch, value):
        monkeypatch.setenv('INDEX_NUM_MAP_TASKS', value)

        with pytest.raises(ValueError, match="INDEX_NUM_MAP_TASKS"):
            config.num_map_tasks()

    def test_setup_logging_accepts_lowercase_level(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: calls.append(kwargs))

        config.setup_logging('warning')

        assert calls == [{'level': 'WARNING', 'format': config.LOG_FORMAT}]
