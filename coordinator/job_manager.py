#!/usr/bin/env python3
"""
Job Manager for the index builder
Handles job state management, task generation, and progress tracking
"""

import os
import time
import uuid
import threading
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Dict, Optional

from common import config

DEFAULT_JOB_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'jobs', 'inverted_index.py'
)


class JobStatus(Enum):
    """Status of a MapReduce job"""
    PENDING = "pending"
    MAP_PHASE = "map_phase"
    SHUFFLE_PHASE = "shuffle_phase"
    REDUCE_PHASE = "reduce_phase"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskStatus(Enum):
    """Status of individual map or reduce tasks"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class JobSpec:
    """What to run and where; defaults come from the environment"""
    input_path: str
    output_path: str
    job_file: str = DEFAULT_JOB_FILE
    num_map_tasks: int = field(default_factory=config.num_map_tasks)
    num_reduce_tasks: int = field(default_factory=config.num_reduce_tasks)
    use_combiner: bool = True
    overwrite: bool = False
    intermediate_dir: str = field(default_factory=config.intermediate_dir)
    keep_intermediate: bool = False
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    def __post_init__(self):
        if self.num_map_tasks < 1:
            raise ValueError("num_map_tasks must be at least 1")
        if self.num_reduce_tasks < 1:
            raise ValueError("num_reduce_tasks must be at least 1")


@dataclass
class MapTask:
    """Represents a single map task"""
    task_id: int
    input_path: str
    start_offset: int
    end_offset: int
    status: TaskStatus = TaskStatus.PENDING


@dataclass
class ReduceTask:
    """Represents a single reduce task"""
    task_id: int
    partition_id: int
    intermediate_files: List[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING


@dataclass
class Job:
    """Represents a complete job and the tasks of its current stage"""
    job_id: str
    input_path: str
    output_path: str
    job_file: str
    num_map_tasks: int
    num_reduce_tasks: int
    use_combiner: bool
    status: JobStatus = JobStatus.PENDING
    stage_name: str = ""
    stages_completed: int = 0
    num_stages: int = 0
    map_tasks: List[MapTask] = field(default_factory=list)
    reduce_tasks: List[ReduceTask] = field(default_factory=list)
    error_message: str = ""
    start_time: float = 0.0
    end_time: float = 0.0


class JobManager:
    """Manages all jobs and their lifecycle"""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.lock = threading.Lock()

    def create_job(self, job_spec) -> Job:
        """Create new job from specification"""
        with self.lock:
            if job_spec.job_id in self.jobs:
                raise ValueError(f"Job {job_spec.job_id} already exists")
            job = Job(
                job_id=job_spec.job_id,
                input_path=job_spec.input_path,
                output_path=job_spec.output_path,
                job_file=job_spec.job_file,
                num_map_tasks=job_spec.num_map_tasks,
                num_reduce_tasks=job_spec.num_reduce_tasks,
                use_combiner=job_spec.use_combiner,
                start_time=time.time()
            )
            self.jobs[job.job_id] = job
            return job

    def start_stage(self, job: Job, stage_name: str, num_stages: int):
        """Reset per-stage task lists for the next stage"""
        with self.lock:
            job.stage_name = stage_name
            job.num_stages = num_stages
            job.map_tasks = []
            job.reduce_tasks = []
            job.status = JobStatus.MAP_PHASE

    def generate_map_tasks(self, job: Job, input_files: List[str]) -> List[MapTask]:
        """
        Split input files into about M map tasks

        Each file is cut into byte ranges of roughly total_size / M; small
        files get a single task and empty files none.
        """
        sizes = [(path, os.path.getsize(path)) for path in input_files]
        total_size = sum(size for _, size in sizes)
        chunk_size = max(1, -(-total_size // job.num_map_tasks))

        map_tasks = []
        for path, file_size in sizes:
            start = 0
            while start < file_size:
                end = min(file_size, start + chunk_size)
                map_tasks.append(MapTask(
                    task_id=len(map_tasks),
                    input_path=path,
                    start_offset=start,
                    end_offset=end
                ))
                start = end

        with self.lock:
            job.map_tasks = map_tasks
        return map_tasks

    def generate_reduce_tasks(self, job: Job, intermediate_files: List[str]) -> List[ReduceTask]:
        """Create R reduce tasks with intermediate file assignments"""
        by_partition: Dict[int, List[str]] = {p: [] for p in range(job.num_reduce_tasks)}
        for path in intermediate_files:
            # map-<task>-reduce-<partition>.jsonl
            stem = os.path.splitext(os.path.basename(path))[0]
            partition_id = int(stem.rsplit('-', 1)[1])
            by_partition[partition_id].append(path)

        reduce_tasks = [
            ReduceTask(
                task_id=partition_id,
                partition_id=partition_id,
                intermediate_files=sorted(files)
            )
            for partition_id, files in sorted(by_partition.items())
        ]

        with self.lock:
            job.reduce_tasks = reduce_tasks
            job.status = JobStatus.SHUFFLE_PHASE
        return reduce_tasks

    def start_reduce_phase(self, job_id: str):
        with self.lock:
            job = self.jobs.get(job_id)
            if job:
                job.status = JobStatus.REDUCE_PHASE

    def mark_map_task(self, job_id: str, task_id: int, status: TaskStatus):
        """Record a map task transition"""
        with self.lock:
            job = self.jobs.get(job_id)
            if job and task_id < len(job.map_tasks):
                job.map_tasks[task_id].status = status

    def mark_reduce_task(self, job_id: str, task_id: int, status: TaskStatus):
        """Record a reduce task transition"""
        with self.lock:
            job = self.jobs.get(job_id)
            if job and task_id < len(job.reduce_tasks):
                job.reduce_tasks[task_id].status = status

    def complete_stage(self, job_id: str):
        with self.lock:
            job = self.jobs.get(job_id)
            if job:
                job.stages_completed += 1

    def mark_job_completed(self, job_id: str):
        with self.lock:
            job = self.jobs.get(job_id)
            if job:
                job.status = JobStatus.COMPLETED
                job.end_time = time.time()

    def mark_job_failed(self, job_id: str, error_message: str):
        with self.lock:
            job = self.jobs.get(job_id)
            if job:
                job.status = JobStatus.FAILED
                job.error_message = error_message
                job.end_time = time.time()

    def get_job_status(self, job_id: str) -> Optional[Dict]:
        """Get current job status with progress"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job:
                return None

            map_completed = sum(1 for t in job.map_tasks if t.status == TaskStatus.COMPLETED)
            reduce_completed = sum(1 for t in job.reduce_tasks if t.status == TaskStatus.COMPLETED)
            total_tasks = len(job.map_tasks) + len(job.reduce_tasks)
            stage_progress = (map_completed + reduce_completed) / total_tasks if total_tasks else 0.0

            if job.status == JobStatus.COMPLETED:
                progress = 100
            elif job.num_stages:
                progress = int((job.stages_completed + stage_progress) / job.num_stages * 100)
            else:
                progress = 0

            return {
                'status': job.status.value,
                'stage': job.stage_name,
                'progress': progress,
                'map_completed': map_completed,
                'map_total': len(job.map_tasks),
                'reduce_completed': reduce_completed,
                'reduce_total': len(job.reduce_tasks),
                'error_message': job.error_message
            }
