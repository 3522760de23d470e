"""Utils package for common utilities.

This package provides utility functions for file handling,
logging and timing.
"""

from .common import setup_logging, Timer
from .file_utils import natural_sort_key, volume_index, get_volume_files

__all__ = [
    "setup_logging",
    "Timer",
    "natural_sort_key",
    "volume_index",
    "get_volume_files"
]
