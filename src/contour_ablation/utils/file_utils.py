"""File handling utilities for label volume discovery.

This module provides utility functions for locating segmentation
volumes with proper numeric ordering.
"""

import re
from pathlib import Path
from typing import List, Optional

VOLUME_PATTERNS = ["*.nii", "*.nii.gz"]


def _volume_stem(path: Path) -> str:
    name = path.name
    for suffix in (".nii.gz", ".nii"):
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return path.stem


def natural_sort_key(path: Path) -> tuple:
    """Generate a sort key for natural ordering of filenames.

    This function handles filenames with numbers properly:
    segmentation-1.nii, segmentation-2.nii, ..., segmentation-10.nii
    instead of alphabetical: segmentation-1.nii, segmentation-10.nii, segmentation-2.nii

    Args:
        path: Path object to generate sort key for

    Returns:
        Tuple that can be used for sorting
    """
    def convert_part(text):
        return int(text) if text.isdigit() else text.lower()

    # Split filename into parts (numbers and text)
    parts = re.split(r'(\d+)', _volume_stem(path))
    return tuple(convert_part(part) for part in parts)


def volume_index(path: Path, prefix: str = "segmentation-") -> Optional[int]:
    """Extract the numeric index from a ``{prefix}{index}.nii[.gz]`` filename.

    Returns None when the name does not follow the pattern.
    """
    stem = _volume_stem(path)
    if not stem.startswith(prefix):
        return None
    digits = stem[len(prefix):]
    return int(digits) if digits.isdigit() else None


def get_volume_files(directory: Path, prefix: str = "segmentation-",
                     patterns: List[str] = None) -> List[Path]:
    """Get all label volumes named ``{prefix}{index}.nii[.gz]`` with natural sorting.

    Args:
        directory: Directory to search
        prefix: Filename prefix before the numeric index
        patterns: List of glob patterns (default: NIfTI, plain and gzipped)

    Returns:
        List of Path objects sorted naturally (duplicates removed)
    """
    if patterns is None:
        patterns = VOLUME_PATTERNS

    files = set()
    for pattern in patterns:
        for path in Path(directory).glob(pattern):
            if volume_index(path, prefix) is not None:
                files.add(path)

    return sorted(files, key=natural_sort_key)

__all__ = ["natural_sort_key", "volume_index", "get_volume_files"]
