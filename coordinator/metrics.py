"""
Performance metrics collection for index builds.
"""

import time
import json
import psutil
from dataclasses import dataclass, field, asdict
from typing import Dict, List


@dataclass
class StageMetrics:
    """Metrics for one map/reduce stage of a job."""

    name: str
    num_map_tasks: int = 0
    num_reduce_tasks: int = 0
    map_phase_start: float = 0.0
    map_phase_end: float = 0.0
    reduce_phase_start: float = 0.0
    reduce_phase_end: float = 0.0
    records_read: int = 0
    pairs_emitted: int = 0
    pairs_written: int = 0
    records_output: int = 0
    intermediate_size_bytes: int = 0

    @property
    def map_phase_time_seconds(self) -> float:
        """Map phase execution time in seconds."""
        return self.map_phase_end - self.map_phase_start

    @property
    def reduce_phase_time_seconds(self) -> float:
        """Reduce phase execution time in seconds."""
        return self.reduce_phase_end - self.reduce_phase_start

    @property
    def combiner_reduction_ratio(self) -> float:
        """Share of map output removed by the combiner."""
        if self.pairs_emitted == 0:
            return 0.0
        return 1.0 - (self.pairs_written / self.pairs_emitted)


@dataclass
class JobMetrics:
    """Metrics for a single index build."""

    job_id: str
    start_time: float
    end_time: float = 0.0
    use_combiner: bool = True
    input_size_bytes: int = 0
    output_size_bytes: int = 0
    peak_memory_bytes: int = 0
    succeeded: bool = False
    stages: List[StageMetrics] = field(default_factory=list)

    @property
    def total_time_seconds(self) -> float:
        """Total job execution time in seconds."""
        return self.end_time - self.start_time

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['total_time_seconds'] = self.total_time_seconds
        for stage_data, stage in zip(data['stages'], self.stages):
            stage_data['map_phase_time_seconds'] = stage.map_phase_time_seconds
            stage_data['reduce_phase_time_seconds'] = stage.reduce_phase_time_seconds
            stage_data['combiner_reduction_ratio'] = stage.combiner_reduction_ratio
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class MetricsCollector:
    """Collects and manages metrics for index builds."""

    def __init__(self):
        self.job_metrics: Dict[str, JobMetrics] = {}
        self.process = psutil.Process()

    def _sample_memory(self, job_id: str):
        rss = self.process.memory_info().rss
        metrics = self.job_metrics[job_id]
        metrics.peak_memory_bytes = max(metrics.peak_memory_bytes, rss)

    def start_job(self, job_id: str, use_combiner: bool, input_size_bytes: int):
        """Initialize metrics tracking for a new job."""
        self.job_metrics[job_id] = JobMetrics(
            job_id=job_id,
            start_time=time.time(),
            use_combiner=use_combiner,
            input_size_bytes=input_size_bytes
        )
        self._sample_memory(job_id)

    def start_map_phase(self, job_id: str, stage_name: str, num_map_tasks: int) -> StageMetrics:
        """Open metrics for a stage and mark the start of its map phase."""
        stage = StageMetrics(name=stage_name, num_map_tasks=num_map_tasks, map_phase_start=time.time())
        self.job_metrics[job_id].stages.append(stage)
        return stage

    def end_map_phase(self, job_id: str, map_results: List[dict], intermediate_size_bytes: int):
        """Mark the end of the current stage's map phase."""
        stage = self.job_metrics[job_id].stages[-1]
        stage.map_phase_end = time.time()
        stage.records_read = sum(r['records_read'] for r in map_results)
        stage.pairs_emitted = sum(r['pairs_emitted'] for r in map_results)
        stage.pairs_written = sum(r['pairs_written'] for r in map_results)
        stage.intermediate_size_bytes = intermediate_size_bytes
        self._sample_memory(job_id)

    def start_reduce_phase(self, job_id: str, num_reduce_tasks: int):
        """Mark the start of the current stage's reduce phase."""
        stage = self.job_metrics[job_id].stages[-1]
        stage.num_reduce_tasks = num_reduce_tasks
        stage.reduce_phase_start = time.time()

    def end_reduce_phase(self, job_id: str, reduce_results: List[dict]):
        """Mark the end of the current stage's reduce phase."""
        stage = self.job_metrics[job_id].stages[-1]
        stage.reduce_phase_end = time.time()
        stage.records_output = sum(r['records_written'] for r in reduce_results)
        self._sample_memory(job_id)

    def end_job(self, job_id: str, succeeded: bool, output_size_bytes: int = 0):
        """Mark job completion and record output size."""
        metrics = self.job_metrics[job_id]
        metrics.end_time = time.time()
        metrics.succeeded = succeeded
        metrics.output_size_bytes = output_size_bytes
        self._sample_memory(job_id)

    def get_metrics(self, job_id: str) -> JobMetrics:
        """Retrieve metrics for a specific job."""
        return self.job_metrics.get(job_id)
