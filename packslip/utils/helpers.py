"""
Small helpers shared across the pipeline: paths, timestamps, sizes.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]

_SIZE_UNITS = ('B', 'KB', 'MB', 'GB', 'TB')


def ensure_directory(path: PathLike) -> Path:
    """Create ``path`` (and parents) if missing and return it as a Path."""
    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def get_file_extension(file_name: Optional[PathLike]) -> str:
    """
    Lower-cased suffix of a file name, dot included.

    Upload names are often missing, so None and "" give "".

    Example:
        >>> get_file_extension("SLIP.PDF")
        '.pdf'
    """
    if not file_name:
        return ""
    return Path(file_name).suffix.lower()


def generate_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """Local time formatted for report file names."""
    return datetime.now().strftime(format_str)


def utc_now_iso() -> str:
    """Current UTC time in ISO-8601, used for record timestamps."""
    return datetime.now(timezone.utc).isoformat()


def format_file_size(size_bytes: float) -> str:
    """
    Example:
        >>> format_file_size(1536)
        '1.5 KB'
    """
    size = float(size_bytes)
    for unit in _SIZE_UNITS:
        if size < 1024.0 or unit == _SIZE_UNITS[-1]:
            return f"{size:.1f} {unit}"
        size /= 1024.0
