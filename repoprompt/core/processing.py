# repoprompt/core/processing.py
"""
Reads file content for the repository context under a size limit.
"""
from pathlib import Path
import structlog

from repoprompt.exceptions import ExceedsSizeLimit, FileDecodeError, FileSkipError
from repoprompt.util import strip_utf8_bom

log = structlog.get_logger(__name__)

def read_bounded(file_path: Path, max_size: int) -> str:
    """
    Returns the file's text if it is at most `max_size` bytes.

    The size is checked with stat() before anything is read, so oversized
    files are never loaded. Raises ExceedsSizeLimit, FileDecodeError for
    non-utf-8 content, or FileSkipError for other read failures; all of them
    mean "skip this file".
    """
    try:
        file_size = file_path.stat().st_size
    except OSError as e:
        raise FileSkipError(f"cannot stat '{file_path}': {e}") from e

    if file_size > max_size:
        raise ExceedsSizeLimit(file_path, file_size, max_size)

    try:
        content_bytes = file_path.read_bytes()
    except OSError as e:
        raise FileSkipError(f"cannot read '{file_path}': {e}") from e

    # the file may have grown between stat() and read().
    if len(content_bytes) > max_size:
        raise ExceedsSizeLimit(file_path, len(content_bytes), max_size)

    try:
        return strip_utf8_bom(content_bytes).decode("utf-8")
    except UnicodeDecodeError as e:
        raise FileDecodeError(f"'{file_path}' is not valid utf-8 text: {e}") from e
