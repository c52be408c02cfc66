#!/usr/bin/env python3
"""
Plot index build benchmarks written by benchmark.py.
"""

import argparse
import json
import sys
from collections import defaultdict
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

DEFAULT_PLOTS_DIR = Path("benchmark_results") / "plots"

# (benchmark name prefix, configuration field, x label, title, file name, marker, color)
SCALING_PLOTS = [
    ('input_size_', 'input_size_mb', 'Input Size (MB)',
     'Index Build: Input Size Scaling\n(4 map tasks, 2 reduce tasks)',
     '1_input_size_scaling.png', 'o', None),
    ('map_scaling_', 'num_map_tasks', 'Number of Map Tasks',
     'Index Build: Map Task Parallelism\n(~1MB corpus, 2 reduce tasks)',
     '2_map_task_scaling.png', 's', 'orangered'),
    ('reduce_scaling_', 'num_reduce_tasks', 'Number of Reduce Tasks',
     'Index Build: Reduce Task Parallelism\n(~1MB corpus, 4 map tasks)',
     '3_reduce_task_scaling.png', '^', 'green'),
]


def aggregate_runs(results):
    """
    Collapse repeated runs of each benchmark into mean and spread.

    Failed runs are ignored. Configuration fields are taken from the
    first successful run of a benchmark.
    """
    runs_by_name = defaultdict(list)
    for result in results:
        if result['success']:
            runs_by_name[result['benchmark_name']].append(result)

    aggregated = {}
    for name, runs in runs_by_name.items():
        runtimes = np.array([r['total_runtime_seconds'] for r in runs])
        config = runs[0]
        aggregated[name] = {
            'benchmark_name': name,
            'description': config['description'],
            'num_map_tasks': config['num_map_tasks'],
            'num_reduce_tasks': config['num_reduce_tasks'],
            'use_combiner': config['use_combiner'],
            'input_size_mb': config['input_size_mb'],
            'avg_runtime': runtimes.mean(),
            'std_runtime': runtimes.std(),
            'avg_throughput': np.mean([r['throughput_mbps'] for r in runs]),
            'avg_intermediate_mb': np.mean([r['intermediate_size_bytes'] for r in runs]) / 1024 / 1024,
            'avg_combiner_ratio': np.mean([r['combiner_reduction_ratio'] for r in runs]),
            'max_peak_memory_mb': max(r['peak_memory_mb'] for r in runs),
            'num_runs': len(runs)
        }
    return aggregated


def plot_scaling(aggregated, prefix, x_field, xlabel, title, output_file, marker='o', color=None):
    """Runtime with error bars against one configuration field."""
    points = sorted(
        (entry[x_field], entry['avg_runtime'], entry['std_runtime'])
        for name, entry in aggregated.items()
        if name.startswith(prefix)
    )
    if not points:
        print(f"⚠️  No {prefix}* data found")
        return False

    xs, runtimes, stds = zip(*points)

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.errorbar(xs, runtimes, yerr=stds, marker=marker, capsize=5,
                linewidth=2, markersize=8, color=color)
    ax.set_xlabel(xlabel, fontsize=12)
    ax.set_ylabel('Runtime (seconds)', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    if x_field != 'input_size_mb':
        ax.set_xticks(xs)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(output_file, dpi=300, bbox_inches='tight')
    plt.close(fig)
    print(f"✓ Saved: {output_file}")
    return True


def plot_combiner_effect(aggregated, output_file):
    """Runtime and shuffle volume side by side, combiner off vs on."""
    off = aggregated.get('combiner_off')
    on = aggregated.get('combiner_on')
    if not off or not on:
        print("⚠️  No combiner comparison data found")
        return False

    labels = ['Combiner off', 'Combiner on']
    x = np.arange(len(labels))
    colors = ['gray', 'steelblue']

    fig, (runtime_ax, shuffle_ax) = plt.subplots(1, 2, figsize=(12, 5))
    runtime_ax.bar(x, [off['avg_runtime'], on['avg_runtime']],
                   yerr=[off['std_runtime'], on['std_runtime']], capsize=5, color=colors)
    runtime_ax.set_ylabel('Runtime (seconds)', fontsize=12)
    runtime_ax.set_title('Runtime', fontsize=13, fontweight='bold')

    shuffle_ax.bar(x, [off['avg_intermediate_mb'], on['avg_intermediate_mb']], color=colors)
    shuffle_ax.set_ylabel('Intermediate data (MB)', fontsize=12)
    shuffle_ax.set_title(f"Shuffle volume ({on['avg_combiner_ratio']:.0%} removed by combiner)",
                         fontsize=13, fontweight='bold')

    for ax in (runtime_ax, shuffle_ax):
        ax.set_xticks(x)
        ax.set_xticklabels(labels)

    fig.tight_layout()
    fig.savefig(output_file, dpi=300, bbox_inches='tight')
    plt.close(fig)
    print(f"✓ Saved: {output_file}")
    return True


def write_summary_table(aggregated, output_file):
    """Markdown table with one row per benchmark."""
    rows = [
        "# Index Build Benchmarks\n",
        "| Benchmark | Maps | Reduces | Combiner | Input (MB) | Runtime (s) | Std Dev | MB/s | Peak RSS (MB) |",
        "|-----------|------|---------|----------|------------|-------------|---------|------|---------------|",
    ]
    for name in sorted(aggregated):
        entry = aggregated[name]
        rows.append(
            f"| {name:<21} | {entry['num_map_tasks']:>4} | {entry['num_reduce_tasks']:>7} | "
            f"{'yes' if entry['use_combiner'] else 'no':>8} | {entry['input_size_mb']:>10.2f} | "
            f"{entry['avg_runtime']:>11.2f} | {entry['std_runtime']:>7.3f} | "
            f"{entry['avg_throughput']:>4.2f} | {entry['max_peak_memory_mb']:>13.1f} |"
        )

    Path(output_file).write_text('\n'.join(rows) + '\n', encoding='utf-8')
    print(f"✓ Saved: {output_file}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Plot index build benchmark results")
    parser.add_argument('results', help='JSON file written by benchmark.py')
    parser.add_argument('--output-dir', default=str(DEFAULT_PLOTS_DIR),
                        help=f'Directory for plots (default: {DEFAULT_PLOTS_DIR})')
    args = parser.parse_args(argv)

    results_file = Path(args.results)
    if not results_file.exists():
        print(f"❌ File not found: {results_file}")
        return 1

    results = json.loads(results_file.read_text(encoding='utf-8'))
    aggregated = aggregate_runs(results)
    print(f"✓ {len(results)} runs aggregated into {len(aggregated)} benchmarks")

    plots_dir = Path(args.output_dir)
    plots_dir.mkdir(parents=True, exist_ok=True)

    for prefix, field, xlabel, title, filename, marker, color in SCALING_PLOTS:
        plot_scaling(aggregated, prefix, field, xlabel, title, plots_dir / filename,
                     marker=marker, color=color)
    plot_combiner_effect(aggregated, plots_dir / "4_combiner_effect.png")
    write_summary_table(aggregated, plots_dir / "results_table.md")

    print(f"\nAll plots saved to: {plots_dir}/")
    return 0


if __name__ == "__main__":
    sys.exit(main())
