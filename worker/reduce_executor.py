"""
Reduce Task Executor
Executes reduce tasks by reading intermediate data, grouping by key,
applying the stage's reduce function, and writing stage output
"""

import os
import time
import logging
from collections import defaultdict

from common.stage import Stage
from worker.record_io import dump_record, load_record

logger = logging.getLogger(__name__)

# Output formats: JSON records feed a following stage, text is final output
RECORD_OUTPUT = "records"
TEXT_OUTPUT = "text"


class ReduceExecutor:
    """Executes a single reduce task"""

    def __init__(self, task_id: int, partition_id: int, intermediate_files: list,
                 stage: Stage, output_path: str, job_id: str,
                 output_format: str = TEXT_OUTPUT):
        """
        Initialize the reduce executor

        Args:
            task_id: Unique ID for this reduce task within its stage
            partition_id: Partition ID this reduce task is responsible for
            intermediate_files: List of intermediate file paths to read
            stage: Stage whose reduce function to apply
            output_path: Directory path where output should be written
            job_id: Unique job identifier
            output_format: TEXT_OUTPUT for 'key<TAB>value' lines,
                RECORD_OUTPUT for JSON records read by the next stage
        """
        if output_format not in (TEXT_OUTPUT, RECORD_OUTPUT):
            raise ValueError(f"Unknown output format: {output_format}")
        self.task_id = task_id
        self.partition_id = partition_id
        self.intermediate_files = intermediate_files
        self.stage = stage
        self.output_path = output_path
        self.job_id = job_id
        self.output_format = output_format

    @property
    def output_file(self) -> str:
        extension = 'txt' if self.output_format == TEXT_OUTPUT else 'jsonl'
        return os.path.join(self.output_path, f"part-{self.partition_id:05d}.{extension}")

    def execute(self) -> dict:
        """
        Execute the reduce task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            'records_written', 'output_file' and 'exception' fields
        """
        start_time = time.time()
        label = f"{self.stage.name} reduce task {self.task_id}"

        try:
            key_groups = self._read_and_group_intermediate()
            logger.debug(f"{label}: Grouped {len(key_groups)} unique keys")

            results = []
            for key in sorted(key_groups.keys()):  # Sort by key for deterministic output
                values = key_groups[key]
                for out_key, out_value in self.stage.reduce_function(key, values):
                    results.append((out_key, out_value))

            self._write_output(results)

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"{label}: Wrote {len(results)} records in {execution_time}ms")

            return {
                'success': True,
                'execution_time_ms': execution_time,
                'error_message': '',
                'records_written': len(results),
                'output_file': self.output_file,
                'exception': None
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"{label} failed: {e}")
            return {
                'success': False,
                'execution_time_ms': execution_time,
                'error_message': str(e),
                'records_written': 0,
                'output_file': None,
                'exception': e
            }

    def _read_and_group_intermediate(self) -> dict:
        """
        Read all intermediate files and group by key

        Returns:
            Dictionary mapping key to list of values

        Raises:
            FileNotFoundError: If an assigned intermediate file is missing
            ValueError: If an intermediate file holds a corrupt record
        """
        key_groups = defaultdict(list)
        lines_processed = 0

        for filepath in self.intermediate_files:
            with open(filepath, 'r', encoding='utf-8') as f:
                for line_num, line in enumerate(f):
                    line = line.strip()
                    if not line:
                        continue

                    try:
                        key, value = load_record(line)
                    except (ValueError, KeyError) as e:
                        raise ValueError(f"Corrupt intermediate record in {filepath}:{line_num}: {e}") from e

                    key_groups[key].append(value)
                    lines_processed += 1

        logger.debug(
            f"{self.stage.name} reduce task {self.task_id}: Read {len(self.intermediate_files)} files, "
            f"processed {lines_processed} records"
        )
        return key_groups

    def _write_output(self, results: list):
        """
        Write reduce output for this partition

        Args:
            results: List of (key, value) tuples to write
        """
        os.makedirs(self.output_path, exist_ok=True)

        with open(self.output_file, 'w', encoding='utf-8') as f:
            for key, value in results:
                if self.output_format == TEXT_OUTPUT:
                    f.write(f"{key}\t{value}\n")
                else:
                    f.write(dump_record(key, value) + '\n')
