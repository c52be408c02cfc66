"""
Error types for the inverted index builder
Fatal errors abort the whole run; MalformedInputLine is recovered per line
"""


class InvertedIndexError(Exception):
    """Base class for all index build errors"""


class MalformedInputLine(InvertedIndexError, ValueError):
    """A crawl line does not match the '(document_id, text)' shape"""

    def __init__(self, line: str):
        super().__init__(f"Unexpected line: {line}")
        self.line = line


class OutputAlreadyExists(InvertedIndexError, FileExistsError):
    """The output location is occupied and the caller did not opt into clearing it"""

    def __init__(self, path: str):
        super().__init__(f"Output path already exists: {path}")
        self.path = path


class ResourceUnavailable(InvertedIndexError, OSError):
    """Input cannot be read or output cannot be written"""


class JobDefinitionError(InvertedIndexError, AttributeError):
    """A job file does not define the functions the engine needs"""


class JobFailedError(InvertedIndexError):
    """A map or reduce task failed; the run produced no valid output"""

    def __init__(self, job_id: str, message: str):
        super().__init__(f"Job {job_id} failed: {message}")
        self.job_id = job_id
