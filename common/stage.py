"""
Stage definition for multi-stage MapReduce jobs
"""

from dataclasses import dataclass
from typing import Callable, Optional

# Input formats understood by the map executor
TEXT_INPUT = "text"
RECORD_INPUT = "records"

# Partitioning schemes understood by the runner
HASH_PARTITIONING = "hash"
RANGE_PARTITIONING = "range"


@dataclass(frozen=True)
class Stage:
    """
    One map/reduce round of a job.

    map_function(key, value) and reduce_function(key, values) both yield
    (key, value) tuples. combiner_function has the reduce signature and is
    applied to each map task's local output when the job enables combining.
    """
    name: str
    map_function: Callable
    reduce_function: Callable
    combiner_function: Optional[Callable] = None
    partitioning: str = HASH_PARTITIONING
    input_format: str = TEXT_INPUT

    def __post_init__(self):
        if self.partitioning not in (HASH_PARTITIONING, RANGE_PARTITIONING):
            raise ValueError(f"Unknown partitioning for stage {self.name}: {self.partitioning}")
        if self.input_format not in (TEXT_INPUT, RECORD_INPUT):
            raise ValueError(f"Unknown input format for stage {self.name}: {self.input_format}")
