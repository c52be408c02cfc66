#!/usr/bin/env python3
"""
Inverted Index Client CLI
Provides commands for building an index from a crawl corpus and looking up words
"""

import argparse
import sys
import os

# Add parent directory to path when run as a script
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common import config
from common.errors import InvertedIndexError
from common.storage import format_size, lookup
from coordinator.job_manager import DEFAULT_JOB_FILE, JobSpec
from coordinator.runner import JobRunner
from indexing.stop_words import StopWordSet


def load_stop_words(args):
    """Stop words chosen on the command line or by environment"""
    if args.no_stop_words:
        return StopWordSet.empty()
    path = args.stop_words or config.stop_words_file()
    if path:
        return StopWordSet.from_file(path)
    return StopWordSet.default()


def build_index(args):
    """Build an inverted index from a crawl corpus"""
    try:
        spec_args = {
            'input_path': args.input,
            'output_path': args.output,
            'job_file': args.job_file,
            'num_map_tasks': args.num_map_tasks,
            'num_reduce_tasks': args.num_reduce_tasks,
            'use_combiner': not args.no_combiner,
            'overwrite': args.overwrite,
            'keep_intermediate': args.keep_intermediate,
        }
        if args.job_id:
            spec_args['job_id'] = args.job_id
        if args.intermediate_dir:
            spec_args['intermediate_dir'] = args.intermediate_dir
        job_spec = JobSpec(**spec_args)

        stop_words = load_stop_words(args)
        runner = JobRunner(max_workers=args.max_workers)
        metrics = runner.run(job_spec, stop_words=stop_words)

    except InvertedIndexError as e:
        print(f"Error: {e}")
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    print(f"✓ Index built successfully!")
    print(f"  Job ID: {metrics.job_id}")
    print(f"  Output: {args.output}")
    print(f"  Input size: {format_size(metrics.input_size_bytes)}")
    print(f"  Output size: {format_size(metrics.output_size_bytes)}")
    print(f"  Runtime: {metrics.total_time_seconds:.2f}s")
    for stage in metrics.stages:
        print(f"  Stage {stage.name}: {stage.records_read} records in, {stage.records_output} records out")

    if args.metrics_file:
        metrics.save_to_file(args.metrics_file)
        print(f"  Metrics: {args.metrics_file}")
    return 0


def lookup_word(args):
    """Print the ranked postings of one word"""
    try:
        postings = lookup(args.index, args.word)
    except InvertedIndexError as e:
        print(f"Error: {e}")
        return 1

    if postings is None:
        print(f"'{args.word}' is not in the index")
        return 1

    for document_id, count in postings:
        print(f"{count}\t{document_id}")
    return 0


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description='Inverted Index CLI',
        epilog='Example: %(prog)s build-index --input output/crawl --output output/inverted-index'
    )
    parser.add_argument('--log-level', default=None, help='Logging level (default: $INDEX_LOG_LEVEL or INFO)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # build-index command
    build_parser = subparsers.add_parser(
        'build-index',
        help='Build an inverted index',
        description='Index a corpus of "(document_id, text)" lines'
    )
    build_parser.add_argument('--input', required=True, help='Crawl file or directory of part files')
    build_parser.add_argument('--output', required=True, help='Output directory (must not exist)')
    build_parser.add_argument('--stop-words', help='File with one stop word per line (default: built-in list)')
    build_parser.add_argument('--no-stop-words', action='store_true', help='Index every word')
    build_parser.add_argument('--num-map-tasks', type=int, default=config.num_map_tasks(),
                              help='Number of map tasks (default: $INDEX_NUM_MAP_TASKS or 4)')
    build_parser.add_argument('--num-reduce-tasks', type=int, default=config.num_reduce_tasks(),
                              help='Number of reduce tasks (default: $INDEX_NUM_REDUCE_TASKS or 2)')
    build_parser.add_argument('--max-workers', type=int, default=config.max_workers(),
                              help='Worker threads (default: $INDEX_MAX_WORKERS or 4)')
    build_parser.add_argument('--intermediate-dir', help='Scratch directory (default: $INDEX_INTERMEDIATE_DIR or system temp)')
    build_parser.add_argument('--keep-intermediate', action='store_true', help='Keep intermediate files after the run')
    build_parser.add_argument('--no-combiner', action='store_true', help='Disable map-side combining')
    build_parser.add_argument('--overwrite', action='store_true',
                              help='Delete an existing output directory first (destructive)')
    build_parser.add_argument('--job-file', default=DEFAULT_JOB_FILE, help='Job definition file')
    build_parser.add_argument('--job-id', help='Custom job ID (auto-generated if not provided)')
    build_parser.add_argument('--metrics-file', help='Write run metrics as JSON to this file')
    build_parser.set_defaults(func=build_index)

    # lookup command
    lookup_parser = subparsers.add_parser(
        'lookup',
        help='Look up a word',
        description='Print the documents containing a word, most frequent first'
    )
    lookup_parser.add_argument('--index', required=True, help='Index output directory')
    lookup_parser.add_argument('word', help='Word to look up')
    lookup_parser.set_defaults(func=lookup_word)

    # Parse arguments
    args = parser.parse_args(argv)

    # If no command specified, print help
    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    config.setup_logging(args.log_level)

    # Execute the command
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
