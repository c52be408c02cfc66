"""
Local job runner for the index builder.
Runs each stage's map tasks on a thread pool, waits for all of them,
then runs the stage's reduce tasks, chaining stages until the final one
writes the committed output.
"""

import os
import shutil
import logging
import tempfile
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from common import config
from common.broadcast import Broadcast
from common.errors import JobFailedError, ResourceUnavailable
from common.stage import Stage, RANGE_PARTITIONING
from common.storage import (
    OutputCommitter,
    directory_size,
    ensure_output_available,
    list_input_files,
)
from coordinator.job_manager import Job, JobManager, JobSpec, MapTask, TaskStatus
from coordinator.metrics import JobMetrics, MetricsCollector
from indexing.stop_words import StopWordSet
from worker.function_loader import FunctionLoader
from worker.map_executor import MapExecutor
from worker.partitioner import HashPartitioner, RangePartitioner, reservoir_sample
from worker.reduce_executor import ReduceExecutor, RECORD_OUTPUT, TEXT_OUTPUT

logger = logging.getLogger(__name__)


class JobRunner:
    """Runs jobs to completion in the current process"""

    def __init__(self, max_workers: Optional[int] = None, job_manager: Optional[JobManager] = None,
                 metrics: Optional[MetricsCollector] = None, sample_size: int = 10000):
        """
        Args:
            max_workers: Threads shared by map and reduce tasks
            job_manager: Status bookkeeping (a fresh one by default)
            metrics: Metrics collector (a fresh one by default)
            sample_size: Keys sampled to choose range partition boundaries
        """
        self.max_workers = max_workers or config.max_workers()
        self.job_manager = job_manager or JobManager()
        self.metrics = metrics or MetricsCollector()
        self.sample_size = sample_size

    def run(self, job_spec: JobSpec, stop_words=None) -> JobMetrics:
        """
        Run a job and commit its output

        Args:
            job_spec: What to run and where
            stop_words: Object with contains(word); the built-in English list
                when None

        Returns:
            Metrics of the completed run

        Raises:
            ResourceUnavailable: Input unreadable or output unwritable
            OutputAlreadyExists: Output exists and job_spec.overwrite is False
            JobFailedError: A task failed; nothing was committed
        """
        input_files = list_input_files(job_spec.input_path)
        ensure_output_available(job_spec.output_path, overwrite=job_spec.overwrite,
                                input_path=job_spec.input_path)

        if stop_words is None:
            stop_words = StopWordSet.default()
        broadcast = Broadcast(stop_words)
        stages = FunctionLoader(job_spec.job_file).get_stages(broadcast)

        job = self.job_manager.create_job(job_spec)
        input_size = sum(os.path.getsize(path) for path in input_files)
        self.metrics.start_job(job.job_id, job_spec.use_combiner, input_size)

        logger.info(f"Job {job.job_id} started: {len(input_files)} input files ({input_size} bytes), "
                    f"{len(stages)} stages, {job.num_map_tasks} map tasks, {job.num_reduce_tasks} reduce tasks")

        scratch_dir = None
        committer = OutputCommitter(job_spec.output_path)

        try:
            scratch_dir = self._create_scratch_dir(job_spec, job.job_id)
            staging_dir = committer.setup()
            stage_inputs = input_files

            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                for index, stage in enumerate(stages):
                    final = index == len(stages) - 1
                    output_dir = staging_dir if final else os.path.join(scratch_dir, f"{stage.name}-output")
                    stage_inputs = self._run_stage(
                        pool, job, job_spec, stage, len(stages), stage_inputs, scratch_dir, output_dir, final
                    )

            committer.commit()
        except Exception as e:
            committer.abort()
            self.job_manager.mark_job_failed(job.job_id, str(e))
            self.metrics.end_job(job.job_id, succeeded=False)
            logger.error(f"Job {job.job_id} failed: {e}")
            raise
        finally:
            if scratch_dir and job_spec.keep_intermediate:
                logger.info(f"Job {job.job_id}: Intermediate data kept in {scratch_dir}")
            elif scratch_dir:
                shutil.rmtree(scratch_dir, ignore_errors=True)

        self.job_manager.mark_job_completed(job.job_id)
        self.metrics.end_job(job.job_id, succeeded=True,
                             output_size_bytes=directory_size(job_spec.output_path))
        job_metrics = self.metrics.get_metrics(job.job_id)
        logger.info(f"Job {job.job_id} completed successfully in {job_metrics.total_time_seconds:.2f}s")
        return job_metrics

    def _create_scratch_dir(self, job_spec: JobSpec, job_id: str) -> str:
        """Private scratch directory of one run inside the intermediate dir"""
        try:
            os.makedirs(job_spec.intermediate_dir, exist_ok=True)
            return tempfile.mkdtemp(prefix=f"{job_id}-", dir=job_spec.intermediate_dir)
        except OSError as e:
            raise ResourceUnavailable(
                f"Cannot create scratch directory in {job_spec.intermediate_dir}: {e}"
            ) from e

    def _run_stage(self, pool: ThreadPoolExecutor, job: Job, job_spec: JobSpec, stage: Stage,
                   num_stages: int, input_files: List[str], scratch_dir: str, output_dir: str,
                   final: bool) -> List[str]:
        """Run one stage and return the files it wrote"""
        self.job_manager.start_stage(job, stage.name, num_stages)
        map_tasks = self.job_manager.generate_map_tasks(job, input_files)
        partitioner = self._build_partitioner(job, job_spec, stage, map_tasks, scratch_dir)

        logger.info(f"Job {job.job_id} stage {stage.name}: MAP phase with {len(map_tasks)} tasks")
        self.metrics.start_map_phase(job.job_id, stage.name, len(map_tasks))
        map_executors = [
            self._map_executor(job, job_spec, stage, task, scratch_dir, partitioner)
            for task in map_tasks
        ]
        # Every map task must finish before any key can be reduced
        map_results = self._run_tasks(pool, job, stage, 'map', map_executors)

        intermediate_files = [path for result in map_results for path in result['intermediate_files']]
        self.metrics.end_map_phase(
            job.job_id, map_results, sum(os.path.getsize(path) for path in intermediate_files)
        )

        reduce_tasks = self.job_manager.generate_reduce_tasks(job, intermediate_files)
        self.job_manager.start_reduce_phase(job.job_id)
        logger.info(f"Job {job.job_id} stage {stage.name}: REDUCE phase with {len(reduce_tasks)} tasks")
        self.metrics.start_reduce_phase(job.job_id, len(reduce_tasks))

        reduce_executors = [
            ReduceExecutor(
                task_id=task.task_id,
                partition_id=task.partition_id,
                intermediate_files=task.intermediate_files,
                stage=stage,
                output_path=output_dir,
                job_id=job.job_id,
                output_format=TEXT_OUTPUT if final else RECORD_OUTPUT
            )
            for task in reduce_tasks
        ]
        reduce_results = self._run_tasks(pool, job, stage, 'reduce', reduce_executors)
        self.metrics.end_reduce_phase(job.job_id, reduce_results)
        self.job_manager.complete_stage(job.job_id)

        return [result['output_file'] for result in reduce_results]

    def _map_executor(self, job: Job, job_spec: JobSpec, stage: Stage, task: MapTask,
                      scratch_dir: str, partitioner) -> MapExecutor:
        return MapExecutor(
            task_id=task.task_id,
            input_path=task.input_path,
            start_offset=task.start_offset,
            end_offset=task.end_offset,
            num_reduce_tasks=job.num_reduce_tasks,
            stage=stage,
            use_combiner=job_spec.use_combiner,
            job_id=job.job_id,
            intermediate_dir=scratch_dir,
            partitioner=partitioner
        )

    def _build_partitioner(self, job: Job, job_spec: JobSpec, stage: Stage,
                           map_tasks: List[MapTask], scratch_dir: str):
        """Hash partitioning, or range partitioning from a sample of map output keys"""
        if stage.partitioning != RANGE_PARTITIONING:
            return HashPartitioner(job.num_reduce_tasks)

        def map_output_keys():
            for task in map_tasks:
                executor = self._map_executor(job, job_spec, stage, task, scratch_dir, None)
                for out_key, _ in executor.map_records():
                    yield out_key

        sample = reservoir_sample(map_output_keys(), self.sample_size)
        partitioner = RangePartitioner.from_sample(sample, job.num_reduce_tasks)
        logger.debug(f"Job {job.job_id} stage {stage.name}: Range boundaries {partitioner.boundaries}")
        return partitioner

    def _run_tasks(self, pool: ThreadPoolExecutor, job: Job, stage: Stage, kind: str,
                   executors: list) -> List[dict]:
        """
        Run executors on the pool and wait for all of them

        Raises:
            JobFailedError: If any task failed, after all tasks have finished
        """
        mark = self.job_manager.mark_map_task if kind == 'map' else self.job_manager.mark_reduce_task

        futures = []
        for executor in executors:
            mark(job.job_id, executor.task_id, TaskStatus.RUNNING)
            futures.append(pool.submit(executor.execute))

        results = []
        for executor, future in zip(executors, futures):
            result = future.result()
            mark(job.job_id, executor.task_id,
                 TaskStatus.COMPLETED if result['success'] else TaskStatus.FAILED)
            results.append(result)

        for executor, result in zip(executors, results):
            if not result['success']:
                message = f"{stage.name} {kind} task {executor.task_id} failed: {result['error_message']}"
                raise JobFailedError(job.job_id, message) from result['exception']

        return results
