"""
Configuration from environment
Defaults for the index builder; command line flags override them
"""

import os
import logging
import tempfile

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == '':
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}")
    if parsed < 1:
        raise ValueError(f"{name} must be at least 1, got {parsed}")
    return parsed


def num_map_tasks() -> int:
    return _env_int('INDEX_NUM_MAP_TASKS', 4)


def num_reduce_tasks() -> int:
    return _env_int('INDEX_NUM_REDUCE_TASKS', 2)


def max_workers() -> int:
    return _env_int('INDEX_MAX_WORKERS', 4)


def intermediate_dir() -> str:
    return os.getenv('INDEX_INTERMEDIATE_DIR') or tempfile.gettempdir()


def stop_words_file():
    """Path of a stop-word file, or None for the built-in list"""
    return os.getenv('INDEX_STOP_WORDS_FILE') or None


def log_level() -> str:
    return os.getenv('INDEX_LOG_LEVEL', 'INFO').upper()


def setup_logging(level=None):
    """Configure root logging once for command line entry points"""
    logging.basicConfig(
        level=(level or log_level()).upper(),
        format=LOG_FORMAT
    )
