"""
Storage helpers for corpus input and index output locations
Handles input discovery, output pre-checks, atomic commit and index reading
"""

import os
import shutil
import logging
import tempfile
from typing import Iterator, List, Optional, Tuple

from common.errors import OutputAlreadyExists, ResourceUnavailable

logger = logging.getLogger(__name__)

SUCCESS_MARKER = "_SUCCESS"
PART_PREFIX = "part-"


def _is_data_file(name: str) -> bool:
    """Hidden and underscore-prefixed files (_SUCCESS, .crc) are not data"""
    return not (name.startswith('_') or name.startswith('.'))


def list_input_files(input_path: str) -> List[str]:
    """
    Resolve the input location to the list of files to read

    Args:
        input_path: A single crawl file or a directory of part files

    Returns:
        Sorted list of file paths (a directory is read non-recursively)

    Raises:
        ResourceUnavailable: If the location is missing or unreadable
    """
    if not os.path.exists(input_path):
        raise ResourceUnavailable(f"Input path not found: {input_path}")

    if os.path.isfile(input_path):
        files = [input_path]
    else:
        try:
            names = sorted(os.listdir(input_path))
        except OSError as e:
            raise ResourceUnavailable(f"Cannot list input directory {input_path}: {e}") from e
        files = [
            os.path.join(input_path, name) for name in names
            if _is_data_file(name) and os.path.isfile(os.path.join(input_path, name))
        ]

    for path in files:
        if not os.access(path, os.R_OK):
            raise ResourceUnavailable(f"Input file is not readable: {path}")

    return files


def directory_size(path: str) -> int:
    """Total size in bytes of all files below path"""
    if os.path.isfile(path):
        return os.path.getsize(path)
    total = 0
    for root, _, files in os.walk(path):
        for name in files:
            total += os.path.getsize(os.path.join(root, name))
    return total


def format_size(size_bytes: float) -> str:
    """Format bytes into human-readable size."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} TB"


def clear_output(path: str, dry_run: bool = False) -> Tuple[int, int]:
    """
    Delete an output location. Destructive, only called on explicit request.

    Args:
        path: File or directory to remove
        dry_run: If True, only report what would be deleted

    Returns:
        tuple: (files_deleted, bytes_freed)
    """
    if not os.path.lexists(path):
        return 0, 0

    files_deleted = 0
    bytes_freed = 0

    if os.path.isdir(path) and not os.path.islink(path):
        for root, _, files in os.walk(path):
            for name in files:
                files_deleted += 1
                bytes_freed += os.path.getsize(os.path.join(root, name))
        if not dry_run:
            shutil.rmtree(path)
    else:
        files_deleted = 1
        bytes_freed = os.path.getsize(path) if os.path.exists(path) else 0
        if not dry_run:
            os.remove(path)

    if not dry_run:
        logger.info(f"Cleared {path}: {files_deleted} files ({format_size(bytes_freed)})")
    return files_deleted, bytes_freed


def _contains_path(outer: str, inner: str) -> bool:
    """True if inner is outer itself or lies below it"""
    outer = os.path.realpath(outer)
    inner = os.path.realpath(inner)
    return inner == outer or inner.startswith(outer.rstrip(os.sep) + os.sep)


def ensure_output_available(output_path: str, overwrite: bool = False, input_path: Optional[str] = None):
    """
    Check that the output location can be created

    Args:
        output_path: Directory the index will be committed to
        overwrite: Clear an existing location instead of failing
        input_path: Corpus location, which the output must never contain

    Raises:
        OutputAlreadyExists: If the location is occupied and overwrite is False
        ResourceUnavailable: If the output would overwrite the input or the
            parent directory cannot be written
    """
    if input_path is not None and _contains_path(output_path, input_path):
        raise ResourceUnavailable(f"Output location {output_path} contains the input {input_path}")

    if os.path.lexists(output_path):
        if not overwrite:
            raise OutputAlreadyExists(output_path)
        logger.warning(f"Overwriting existing output at {output_path}")
        clear_output(output_path)

    parent = os.path.dirname(os.path.abspath(output_path))
    try:
        os.makedirs(parent, exist_ok=True)
    except OSError as e:
        raise ResourceUnavailable(f"Cannot create output parent {parent}: {e}") from e
    if not os.access(parent, os.W_OK):
        raise ResourceUnavailable(f"Output location is not writable: {parent}")


class OutputCommitter:
    """
    Stages final output next to the destination and moves it into place
    only after every reduce task succeeded.
    """

    def __init__(self, output_path: str):
        self.output_path = os.path.abspath(output_path)
        self.staging_path: Optional[str] = None

    def setup(self) -> str:
        """Create the staging directory and return its path"""
        parent = os.path.dirname(self.output_path)
        name = os.path.basename(self.output_path)
        try:
            self.staging_path = tempfile.mkdtemp(prefix=f".{name}-", suffix=".tmp", dir=parent)
        except OSError as e:
            raise ResourceUnavailable(f"Cannot create staging directory in {parent}: {e}") from e
        return self.staging_path

    def commit(self):
        """Write the success marker and rename staging to the output path"""
        if self.staging_path is None:
            raise RuntimeError("OutputCommitter.setup() was not called")
        if os.path.lexists(self.output_path):
            # Someone created the destination while the job was running
            raise OutputAlreadyExists(self.output_path)

        with open(os.path.join(self.staging_path, SUCCESS_MARKER), 'w', encoding='utf-8'):
            pass
        try:
            os.rename(self.staging_path, self.output_path)
        except OSError as e:
            raise ResourceUnavailable(f"Cannot commit output to {self.output_path}: {e}") from e
        logger.info(f"Committed output to {self.output_path}")
        self.staging_path = None

    def abort(self):
        """Remove anything staged by a failed run"""
        if self.staging_path and os.path.exists(self.staging_path):
            shutil.rmtree(self.staging_path, ignore_errors=True)
            logger.info(f"Discarded partial output {self.staging_path}")
        self.staging_path = None


def part_files(output_path: str) -> List[str]:
    """Part files of an output directory in partition order"""
    return sorted(
        os.path.join(output_path, name) for name in os.listdir(output_path)
        if name.startswith(PART_PREFIX)
    )


def read_index(output_path: str) -> Iterator[str]:
    """
    Yield the records of a committed index in ascending word order

    Raises:
        ResourceUnavailable: If the location is missing or was never committed
    """
    if not os.path.isdir(output_path):
        raise ResourceUnavailable(f"Index not found: {output_path}")
    if not os.path.exists(os.path.join(output_path, SUCCESS_MARKER)):
        raise ResourceUnavailable(f"Index at {output_path} is incomplete (no {SUCCESS_MARKER} marker)")

    for path in part_files(output_path):
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                yield line.rstrip('\n')


def parse_index_record(record: str) -> Tuple[str, List[Tuple[str, int]]]:
    """Split 'word<TAB>(doc,n), (doc,n)' back into the word and its postings"""
    word, _, rendered = record.partition('\t')
    postings = []
    if rendered:
        for entry in rendered[1:-1].split('), ('):
            document_id, _, count = entry.rpartition(',')
            postings.append((document_id, int(count)))
    return word, postings


def lookup(output_path: str, word: str) -> Optional[List[Tuple[str, int]]]:
    """Ranked postings of one word, or None if the word is not indexed"""
    word = word.lower()
    for record in read_index(output_path):
        record_word, postings = parse_index_record(record)
        if record_word == word:
            return postings
        if record_word > word:
            # Records are sorted by word
            break
    return None
