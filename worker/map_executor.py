"""
Map Task Executor
Executes map tasks by reading input splits, applying the stage's map function,
partitioning output, and writing intermediate files
"""

import os
import time
import logging
from collections import defaultdict

from common.errors import ResourceUnavailable
from common.stage import Stage, RECORD_INPUT
from worker.partitioner import HashPartitioner
from worker.record_io import dump_record, load_record

logger = logging.getLogger(__name__)


class MapExecutor:
    """Executes a single map task"""

    def __init__(self, task_id: int, input_path: str, start_offset: int,
                 end_offset: int, num_reduce_tasks: int, stage: Stage,
                 use_combiner: bool, job_id: str, intermediate_dir: str,
                 partitioner=None):
        """
        Initialize the map executor

        Args:
            task_id: Unique ID for this map task within its stage
            input_path: Path to input file
            start_offset: Byte offset where this task should start reading
            end_offset: Byte offset where this task should stop reading
            num_reduce_tasks: Number of reduce tasks (for partitioning)
            stage: Stage whose map (and combiner) function to apply
            use_combiner: Whether to apply combiner function
            job_id: Unique job identifier
            intermediate_dir: Scratch directory of the job
            partitioner: Callable mapping a key to a partition id
                (defaults to hash partitioning)
        """
        self.task_id = task_id
        self.input_path = input_path
        self.start_offset = start_offset
        self.end_offset = end_offset
        self.num_reduce_tasks = num_reduce_tasks
        self.stage = stage
        self.use_combiner = use_combiner
        self.job_id = job_id
        self.intermediate_dir = intermediate_dir
        self.partitioner = partitioner or HashPartitioner(num_reduce_tasks)

    def execute(self) -> dict:
        """
        Execute the map task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            record counters, 'intermediate_files' and 'exception' fields
        """
        start_time = time.time()
        label = f"{self.stage.name} map task {self.task_id}"

        try:
            logger.debug(f"{label}: Reading input split {self.input_path} [{self.start_offset}, {self.end_offset})")
            key_values = self._read_input_split()

            logger.debug(f"{label}: Processing {len(key_values)} key-value pairs")
            intermediate = defaultdict(list)
            for key, value in key_values:
                for out_key, out_value in self.stage.map_function(key, value):
                    partition = self.partitioner(out_key)
                    intermediate[partition].append((out_key, out_value))

            pairs_emitted = sum(len(v) for v in intermediate.values())
            logger.debug(f"{label}: Generated {pairs_emitted} intermediate pairs")

            if self.use_combiner and self.stage.combiner_function is not None:
                intermediate = self._apply_combiner(intermediate)
                logger.debug(f"{label}: After combiner: {sum(len(v) for v in intermediate.values())} pairs")

            files = self._write_intermediate_files(intermediate)

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"{label}: Completed in {execution_time}ms")

            return {
                'success': True,
                'execution_time_ms': execution_time,
                'error_message': '',
                'records_read': len(key_values),
                'pairs_emitted': pairs_emitted,
                'pairs_written': sum(len(v) for v in intermediate.values()),
                'intermediate_files': files,
                'exception': None
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"{label} failed: {e}")
            return {
                'success': False,
                'execution_time_ms': execution_time,
                'error_message': str(e),
                'records_read': 0,
                'pairs_emitted': 0,
                'pairs_written': 0,
                'intermediate_files': [],
                'exception': e
            }

    def map_records(self):
        """Yield the map function's (key, value) output for this split, unpartitioned"""
        for key, value in self._read_input_split():
            yield from self.stage.map_function(key, value)

    def _read_input_split(self):
        """
        Read assigned portion of input file with line boundary alignment

        A split owns every line that starts inside [start_offset, end_offset).

        Returns:
            List of (key, value) tuples; for text input the key is
            '<file>@<byte offset>' and the value the line content
        """
        key_values = []
        source = os.path.basename(self.input_path)

        try:
            with open(self.input_path, 'rb') as f:
                if self.start_offset > 0:
                    # Finish the line that began in the previous split
                    f.seek(self.start_offset - 1)
                    f.readline()

                position = f.tell()
                while position < self.end_offset:
                    raw = f.readline()
                    if not raw:
                        break
                    line = self._decode_line(raw, position).strip()

                    if self.stage.input_format == RECORD_INPUT:
                        if line:
                            key_values.append(self._decode_record(line, position))
                    else:
                        key_values.append((f"{source}@{position}", line))

                    position += len(raw)
        except OSError as e:
            raise ResourceUnavailable(f"Cannot read input {self.input_path}: {e}") from e

        return key_values

    def _decode_line(self, raw: bytes, position: int) -> str:
        """UTF-8 decode; undecodable bytes become U+FFFD, which splits tokens"""
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError:
            logger.warning(f"Invalid UTF-8 in {self.input_path}@{position}, bad bytes replaced")
            return raw.decode('utf-8', errors='replace')

    def _decode_record(self, line: str, position: int):
        try:
            return load_record(line)
        except (ValueError, KeyError) as e:
            raise ValueError(f"Corrupt record at {self.input_path}@{position}: {e}") from e

    def _apply_combiner(self, intermediate: dict) -> dict:
        """
        Apply combiner function to local map output

        Args:
            intermediate: Dictionary mapping partition_id to list of (key, value) pairs

        Returns:
            Dictionary with same structure but with combined values
        """
        combiner_func = self.stage.combiner_function

        combined = {}
        for partition, kv_pairs in intermediate.items():
            key_groups = defaultdict(list)
            for k, v in kv_pairs:
                key_groups[k].append(v)

            combined_pairs = []
            for key, values in key_groups.items():
                for out_key, out_value in combiner_func(key, values):
                    combined_pairs.append((out_key, out_value))

            combined[partition] = combined_pairs

        return combined

    def _write_intermediate_files(self, intermediate: dict) -> list:
        """
        Write intermediate key-value pairs to disk in JSON-lines format

        Args:
            intermediate: Dictionary mapping partition_id to list of (key, value) pairs

        Returns:
            Paths of the files written, one per non-empty partition
        """
        stage_dir = os.path.join(self.intermediate_dir, self.stage.name)
        os.makedirs(stage_dir, exist_ok=True)

        files = []
        for partition in sorted(intermediate):
            filename = os.path.join(stage_dir, f"map-{self.task_id}-reduce-{partition}.jsonl")

            with open(filename, 'w', encoding='utf-8') as f:
                for key, value in intermediate[partition]:
                    f.write(dump_record(key, value) + '\n')
            files.append(filename)

        return files
