#!/usr/bin/env python3
"""
Automated benchmarking script for the index builder.
Runs multiple job configurations and collects performance metrics.
"""

import argparse
import csv
import json
import shutil
import sys
import tempfile
from datetime import datetime
from pathlib import Path

from coordinator.job_manager import JobSpec
from coordinator.runner import JobRunner
from common.errors import InvertedIndexError

# Configuration
RESULTS_DIR = Path("benchmark_results")
INPUT_DIR = Path("shared") / "input"

# Benchmark configurations
BENCHMARKS = [
    # Experiment 1: Input Size Scaling (fixed parallelism)
    {"name": "input_size_small", "input": "crawl_small", "maps": 4, "reduces": 2, "combiner": True,
     "description": "Small corpus (~64KB), baseline"},
    {"name": "input_size_medium", "input": "crawl_medium", "maps": 4, "reduces": 2, "combiner": True,
     "description": "Medium corpus (~1MB)"},
    {"name": "input_size_large", "input": "crawl_large", "maps": 4, "reduces": 2, "combiner": True,
     "description": "Large corpus (~10MB)"},

    # Experiment 2: Map Task Scaling (fixed input)
    {"name": "map_scaling_1", "input": "crawl_medium", "maps": 1, "reduces": 2, "combiner": True,
     "description": "1 map task"},
    {"name": "map_scaling_4", "input": "crawl_medium", "maps": 4, "reduces": 2, "combiner": True,
     "description": "4 map tasks"},
    {"name": "map_scaling_8", "input": "crawl_medium", "maps": 8, "reduces": 2, "combiner": True,
     "description": "8 map tasks"},

    # Experiment 3: Reduce Task Scaling (fixed input)
    {"name": "reduce_scaling_1", "input": "crawl_medium", "maps": 4, "reduces": 1, "combiner": True,
     "description": "1 reduce task"},
    {"name": "reduce_scaling_4", "input": "crawl_medium", "maps": 4, "reduces": 4, "combiner": True,
     "description": "4 reduce tasks"},

    # Experiment 4: Combiner effectiveness
    {"name": "combiner_off", "input": "crawl_medium", "maps": 4, "reduces": 2, "combiner": False,
     "description": "Combiner disabled"},
    {"name": "combiner_on", "input": "crawl_medium", "maps": 4, "reduces": 2, "combiner": True,
     "description": "Combiner enabled"},
]


def run_benchmark(config, work_dir: Path, run_number=1, max_workers=4):
    """
    Build the index of one corpus with one configuration.

    Returns:
        Result row, or None if the corpus has not been generated
    """
    combiner = 'on' if config['combiner'] else 'off'
    print(f"\n[{config['name']} #{run_number}] {config['description']}: "
          f"{config['maps']} maps, {config['reduces']} reduces, combiner {combiner}")

    input_path = INPUT_DIR / config['input']
    if not input_path.exists():
        print(f"  ⚠️  Missing corpus {input_path}; run scripts/generate_benchmark_inputs.py first")
        return None

    row = {
        "benchmark_name": config["name"],
        "description": config["description"],
        "run_number": run_number,
        "timestamp": datetime.now().isoformat(),
        "num_map_tasks": config["maps"],
        "num_reduce_tasks": config["reduces"],
        "use_combiner": config["combiner"],
    }

    output_path = work_dir / f"{config['name']}-{run_number}"
    job_spec = JobSpec(
        input_path=str(input_path),
        output_path=str(output_path),
        num_map_tasks=config['maps'],
        num_reduce_tasks=config['reduces'],
        use_combiner=config['combiner'],
        intermediate_dir=str(work_dir)
    )

    try:
        metrics = JobRunner(max_workers=max_workers).run(job_spec)
    except InvertedIndexError as e:
        print(f"  ❌ Job failed: {e}")
        row["success"] = False
        return row
    finally:
        shutil.rmtree(output_path, ignore_errors=True)

    duration = metrics.total_time_seconds
    input_mb = metrics.input_size_bytes / 1024 / 1024
    count_stage = metrics.stages[0]
    print(f"  ✓ {duration:.2f}s, {count_stage.records_read} lines, "
          f"{metrics.stages[-1].records_output} words indexed")

    row.update({
        "success": True,
        "job_id": metrics.job_id,
        "input_size_bytes": metrics.input_size_bytes,
        "input_size_mb": round(input_mb, 2),
        "total_runtime_seconds": round(duration, 3),
        "throughput_mbps": round(input_mb / duration, 3) if duration > 0 else 0,
        "intermediate_size_bytes": sum(s.intermediate_size_bytes for s in metrics.stages),
        "combiner_reduction_ratio": round(count_stage.combiner_reduction_ratio, 4),
        "peak_memory_mb": round(metrics.peak_memory_bytes / 1024 / 1024, 1),
    })
    return row


def save_results(results, results_dir: Path, timestamp: str):
    """Write results as JSON (for plot_results.py) and CSV (for spreadsheets)."""
    results_dir.mkdir(parents=True, exist_ok=True)
    stem = results_dir / f"benchmark_results_{timestamp}"

    json_file = stem.with_suffix('.json')
    json_file.write_text(json.dumps(results, indent=2), encoding='utf-8')

    csv_file = stem.with_suffix('.csv')
    fieldnames = sorted({key for r in results for key in r})
    with open(csv_file, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(results)

    print(f"\n✓ Results saved to: {json_file} and {csv_file.name}")
    return json_file, csv_file


def print_summary(results):
    """One line per run: configuration, runtime, shuffle reduction and memory."""
    print(f"\n{'='*78}")
    print("BENCHMARK SUMMARY")
    print(f"{'='*78}")
    print(f"{'Benchmark':<22} {'Run':>3} {'Maps':>5} {'Reduces':>7} {'Runtime':>9} "
          f"{'Combined':>9} {'Peak RSS':>9} {'':>3}")
    print('-' * 78)

    for r in results:
        if r['success']:
            detail = (f"{r['total_runtime_seconds']:>8.2f}s {r['combiner_reduction_ratio']:>9.0%} "
                      f"{r['peak_memory_mb']:>7.1f}MB {'✓':>3}")
        else:
            detail = f"{'-':>9} {'-':>9} {'-':>9} {'✗':>3}"
        print(f"{r['benchmark_name']:<22} {r['run_number']:>3} {r['num_map_tasks']:>5} "
              f"{r['num_reduce_tasks']:>7} {detail}")

    failed = [r for r in results if not r['success']]
    print('=' * 78)
    print(f"{len(results)} runs, {len(results) - len(failed)} succeeded, {len(failed)} failed")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Benchmark index builds over generated corpora")
    parser.add_argument('runs', nargs='?', type=int, default=1, help='Runs per benchmark, 1-5 (default: 1)')
    parser.add_argument('--only', metavar='PREFIX', help='Run only benchmarks whose name starts with PREFIX')
    parser.add_argument('--max-workers', type=int, default=4, help='Worker threads per job (default: 4)')
    parser.add_argument('--results-dir', default=str(RESULTS_DIR),
                        help=f'Where to write results (default: {RESULTS_DIR})')
    args = parser.parse_args(argv)

    runs = max(1, min(5, args.runs))
    selected = [b for b in BENCHMARKS if not args.only or b['name'].startswith(args.only)]
    if not selected:
        print(f"❌ No benchmark matches '{args.only}'")
        return 1

    print(f"Running {len(selected)} benchmarks × {runs} runs = {len(selected) * runs} index builds")

    results = []
    work_dir = Path(tempfile.mkdtemp(prefix="index-benchmark-"))
    try:
        for config in selected:
            for run_number in range(1, runs + 1):
                result = run_benchmark(config, work_dir, run_number=run_number, max_workers=args.max_workers)
                if result:
                    results.append(result)
    finally:
        shutil.rmtree(work_dir, ignore_errors=True)

    if not results:
        print("\n❌ No results collected")
        return 1

    json_file, _ = save_results(results, Path(args.results_dir), datetime.now().strftime("%Y%m%d_%H%M%S"))
    print_summary(results)
    print(f"\nNext: python plot_results.py {json_file}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
