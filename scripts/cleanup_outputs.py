#!/usr/bin/env python3
"""
Cleanup script for index output and intermediate directories.
Deleting a previous index is the explicit opt-in step that lets a new
build write to the same output location.
"""

import os
import glob
import sys
import argparse

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common import config
from common.storage import clear_output, format_size


def intermediate_leftovers(intermediate_dir: str, job_id: str = None):
    """Scratch directories kept by runs with --keep-intermediate"""
    if not os.path.isdir(intermediate_dir):
        return []
    prefix = f"{job_id}-" if job_id else ""
    leftovers = []
    for name in sorted(os.listdir(intermediate_dir)):
        path = os.path.join(intermediate_dir, name)
        # Scratch dirs hold one sub-directory of map output per stage
        if name.startswith(prefix) and glob.glob(os.path.join(path, '*', 'map-*-reduce-*.jsonl')):
            leftovers.append(path)
    return leftovers


def main(argv=None):
    """Main cleanup function."""
    parser = argparse.ArgumentParser(
        description="Clean up index output and intermediate files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s output/inverted-index            # Delete an index (asks first)
  %(prog)s output/inverted-index --yes      # Delete without prompting
  %(prog)s --intermediate                   # Delete kept scratch directories
  %(prog)s output/inverted-index --dry-run  # Show what would be deleted
        """
    )

    parser.add_argument('paths', nargs='*', help='Output directories to delete')
    parser.add_argument(
        '--intermediate', '-i',
        action='store_true',
        help='Also delete scratch directories kept in the intermediate directory'
    )
    parser.add_argument('--intermediate-dir', default=config.intermediate_dir(),
                        help='Intermediate directory (default: $INDEX_INTERMEDIATE_DIR or system temp)')
    parser.add_argument('--job-id', help='Only delete scratch directories of this job')
    parser.add_argument('--yes', '-y', action='store_true', help='Delete without prompting')
    parser.add_argument(
        '--dry-run', '-n',
        action='store_true',
        help='Show what would be deleted without actually deleting'
    )

    args = parser.parse_args(argv)

    targets = list(args.paths)
    if args.intermediate:
        targets.extend(intermediate_leftovers(args.intermediate_dir, args.job_id))

    if not targets:
        print("Nothing selected for cleanup.")
        return 0

    print("=" * 70)
    print("Index Output Cleanup")
    print("=" * 70)

    if args.dry_run:
        print("🔍 DRY RUN MODE - No files will be deleted")

    total_files = 0
    total_bytes = 0

    for path in targets:
        print(f"\n📁 Cleaning: {path}")
        if not os.path.lexists(path):
            print(f"  ⚠️  Does not exist: {path}")
            continue

        if not args.dry_run and not args.yes:
            response = input(f"  Delete {path}? (y/n): ")
            if response.lower() != 'y':
                print("  Skipped.")
                continue

        files, bytes_freed = clear_output(path, dry_run=args.dry_run)
        total_files += files
        total_bytes += bytes_freed
        if args.dry_run:
            print(f"  Would delete {files} files ({format_size(bytes_freed)})")
        else:
            print(f"  ✓ Deleted {files} files ({format_size(bytes_freed)})")

    print("\n" + "=" * 70)
    if args.dry_run:
        print(f"DRY RUN: Would delete {total_files} files ({format_size(total_bytes)})")
    else:
        print(f"✓ Cleanup complete: {total_files} files deleted ({format_size(total_bytes)})")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
