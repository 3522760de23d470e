"""Label volume source.

Reads LiTS-style segmentation volumes (``segmentation-{index}.nii`` or
``.nii.gz``) with nibabel and turns every slice into a ``BinaryGrid`` by
selecting foreground label values. A volume that cannot be read is
reported as an ``InputError`` and skipped; it never stops the batch.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union

import nibabel as nib
import numpy as np

from ..errors import ConfigurationError, VolumeLoadError
from ..utils.file_utils import get_volume_files, volume_index
from .core import BinaryGrid

logger = logging.getLogger(__name__)

# LiTS label values
LITS_BACKGROUND = 0
LITS_LIVER = 1
LITS_TUMOR = 2


@dataclass(frozen=True)
class InputError:
    """A volume that was excluded from the batch."""
    volume_index: int
    path: str
    reason: str


class VolumeSource:
    """Supplies ``BinaryGrid`` slices from a directory of label volumes.

    Args:
        root: Directory holding the label volumes
        indices: Volume indices to load; None discovers every matching file
        foreground_labels: Label values treated as foreground
        slice_axis: Axis along which 2D slices are taken
        prefix: Filename prefix before the numeric index
        max_volumes: Optional cap on the number of volumes

    Raises:
        ConfigurationError: If the root is not a directory, no foreground
            label is given or the slice axis is not 0, 1 or 2
    """

    def __init__(
        self,
        root: Union[str, Path],
        indices: Optional[Sequence[int]] = None,
        foreground_labels: Iterable[int] = (LITS_LIVER, LITS_TUMOR),
        slice_axis: int = 2,
        prefix: str = "segmentation-",
        max_volumes: Optional[int] = None,
    ):
        self.root = Path(root)
        if not self.root.is_dir():
            raise ConfigurationError(f"Dataset root is not a directory: {self.root}")

        self.foreground_labels = tuple(int(v) for v in foreground_labels)
        if not self.foreground_labels:
            raise ConfigurationError("At least one foreground label is required")

        # Label volumes are 3D
        if slice_axis not in (0, 1, 2):
            raise ConfigurationError(f"Slice axis must be 0, 1 or 2, got {slice_axis}")

        self.slice_axis = slice_axis
        self.prefix = prefix
        self.indices = list(indices) if indices is not None else None
        self.max_volumes = max_volumes

    @classmethod
    def from_config(cls, config, root: Union[str, Path]) -> "VolumeSource":
        """Build a source from a ``DatasetConfig`` and an already-resolved root."""
        return cls(
            root,
            indices=config.indices,
            foreground_labels=config.foreground_labels,
            slice_axis=config.slice_axis,
            prefix=config.prefix,
            max_volumes=config.max_volumes,
        )

    def volume_paths(self) -> List[Tuple[int, Path]]:
        """Resolve ``(index, path)`` pairs in loading order."""
        if self.indices is None:
            pairs = [
                (volume_index(p, self.prefix), p)
                for p in get_volume_files(self.root, prefix=self.prefix)
            ]
        else:
            pairs = [(idx, self._path_for(idx)) for idx in self.indices]

        if self.max_volumes is not None:
            pairs = pairs[: self.max_volumes]
        return pairs

    def _path_for(self, index: int) -> Path:
        compressed = self.root / f"{self.prefix}{index}.nii.gz"
        if compressed.exists():
            return compressed
        return self.root / f"{self.prefix}{index}.nii"

    def load_labels(self, path: Path) -> np.ndarray:
        """Load an integer label volume.

        Raises:
            VolumeLoadError: If the file is missing, undecodable or not 3D
        """
        if not path.exists():
            raise VolumeLoadError(path, "file not found")
        try:
            image = nib.load(str(path))
            labels = np.asanyarray(image.dataobj)
        except Exception as e:
            raise VolumeLoadError(path, str(e)) from e

        if labels.ndim != 3:
            raise VolumeLoadError(path, f"expected 3D volume, got {labels.ndim}D array")
        return labels

    def grids_from_labels(self, labels: np.ndarray, name: str) -> List[BinaryGrid]:
        """Slice a label volume into binary grids."""
        foreground = np.isin(labels, self.foreground_labels)
        grids = []
        for k in range(foreground.shape[self.slice_axis]):
            grids.append(BinaryGrid(
                np.take(foreground, k, axis=self.slice_axis),
                image_id=f"{name}/slice-{k:04d}",
            ))
        return grids

    def iter_volumes(self) -> Iterator[Tuple[int, Union[List[BinaryGrid], InputError]]]:
        """Yield ``(index, grids)`` per volume, or ``(index, InputError)`` on failure."""
        for idx, path in self.volume_paths():
            try:
                labels = self.load_labels(path)
            except VolumeLoadError as e:
                logger.warning(str(e))
                yield idx, InputError(volume_index=idx, path=str(path), reason=e.reason)
                continue

            name = f"{self.prefix}{idx}"
            grids = self.grids_from_labels(labels, name)
            logger.info(f"Loaded {name}: shape={labels.shape}, {len(grids)} slices")
            yield idx, grids


__all__ = [
    "LITS_BACKGROUND",
    "LITS_LIVER",
    "LITS_TUMOR",
    "InputError",
    "VolumeSource",
]
