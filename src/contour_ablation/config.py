"""Configuration settings for the contour ablation harness.

Default batch:
- Dataset: LiTS training labels (segmentation-{index}.nii), liver + tumour as foreground
- Slices: axial (last axis of the NIfTI volume)
- Variants: dense-scan (reference), mulberry, ndimage-erosion, opencv-erosion, skimage-boundaries
- Execution: one thread per variant

The dataset root is never looked up implicitly by the harness. It is
resolved once by ``resolve_dataset_root`` (explicit value, then
``$LITS_TRAIN_LABEL_DIR``, then ``~/dataset/train/label``) and passed on.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .errors import ConfigurationError

LITS_LABEL_DIR_ENV = "LITS_TRAIN_LABEL_DIR"


@dataclass
class DatasetConfig:
    """Configuration for the label volume source."""
    root: Optional[str] = None  # None = environment variable, then home directory
    env_var: str = LITS_LABEL_DIR_ENV
    home_subdir: tuple = ("dataset", "train", "label")
    prefix: str = "segmentation-"  # Files are {prefix}{index}.nii[.gz]
    indices: Optional[tuple] = None  # None = every matching file
    foreground_labels: tuple = (1, 2)  # Liver and tumour
    slice_axis: int = 2
    max_volumes: Optional[int] = None


@dataclass
class HarnessConfig:
    """Configuration for batch execution."""
    mode: str = "concurrent"  # "concurrent" or "sequential"
    parallel_images: bool = False  # Concurrent mode only: one task per (variant, image)
    max_workers: Optional[int] = None
    reference: str = "dense-scan"
    variants: tuple = (
        "dense-scan",
        "mulberry",
        "ndimage-erosion",
        "opencv-erosion",
        "skimage-boundaries",
    )
    keep_contours: bool = False  # Keep full sets in the report, not only size + digest


@dataclass
class ExtractionConfig:
    """Configuration for extractor variants."""
    mulberry_priority: str = "raster"  # raster, reverse-raster or column-major


@dataclass
class AblationConfig:
    """Main ablation configuration."""
    dataset: DatasetConfig = None
    harness: HarnessConfig = None
    extraction: ExtractionConfig = None

    def __post_init__(self):
        if self.dataset is None:
            self.dataset = DatasetConfig()
        if self.harness is None:
            self.harness = HarnessConfig()
        if self.extraction is None:
            self.extraction = ExtractionConfig()

    # Global settings
    verbose: bool = False
    show_progress: bool = True

    @classmethod
    def load_from_file(cls, config_path: str) -> 'AblationConfig':
        """Load configuration from YAML file."""
        try:
            config_file = Path(config_path)
            if not config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")

            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}

            config = cls()

            if 'dataset' in data:
                ds = data['dataset'] or {}
                indices = ds.get('indices')
                config.dataset = DatasetConfig(
                    root=ds.get('root'),
                    env_var=ds.get('env_var', LITS_LABEL_DIR_ENV),
                    home_subdir=tuple(ds.get('home_subdir', ("dataset", "train", "label"))),
                    prefix=ds.get('prefix', "segmentation-"),
                    indices=tuple(indices) if indices is not None else None,
                    foreground_labels=tuple(ds.get('foreground_labels', (1, 2))),
                    slice_axis=ds.get('slice_axis', 2),
                    max_volumes=ds.get('max_volumes'),
                )

            if 'harness' in data:
                hs = data['harness'] or {}
                defaults = HarnessConfig()
                config.harness = HarnessConfig(
                    mode=hs.get('mode', defaults.mode),
                    parallel_images=hs.get('parallel_images', False),
                    max_workers=hs.get('max_workers'),
                    reference=hs.get('reference', defaults.reference),
                    variants=tuple(hs.get('variants', defaults.variants)),
                    keep_contours=hs.get('keep_contours', False),
                )

            if 'extraction' in data:
                ex = data['extraction'] or {}
                config.extraction = ExtractionConfig(
                    mulberry_priority=ex.get('mulberry_priority', "raster"),
                )

            if 'global' in data:
                gl = data['global'] or {}
                config.verbose = gl.get('verbose', config.verbose)
                config.show_progress = gl.get('show_progress', config.show_progress)

            return config

        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration from {config_path}: {e}") from e

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        try:
            config_dict = {
                'dataset': {
                    'root': self.dataset.root,
                    'env_var': self.dataset.env_var,
                    'home_subdir': list(self.dataset.home_subdir),
                    'prefix': self.dataset.prefix,
                    'indices': list(self.dataset.indices) if self.dataset.indices is not None else None,
                    'foreground_labels': list(self.dataset.foreground_labels),
                    'slice_axis': self.dataset.slice_axis,
                    'max_volumes': self.dataset.max_volumes,
                },
                'harness': {
                    'mode': self.harness.mode,
                    'parallel_images': self.harness.parallel_images,
                    'max_workers': self.harness.max_workers,
                    'reference': self.harness.reference,
                    'variants': list(self.harness.variants),
                    'keep_contours': self.harness.keep_contours,
                },
                'extraction': {
                    'mulberry_priority': self.extraction.mulberry_priority,
                },
                'global': {
                    'verbose': self.verbose,
                    'show_progress': self.show_progress,
                }
            }

            # Ensure directory exists
            config_file = Path(config_path)
            config_file.parent.mkdir(parents=True, exist_ok=True)

            with open(config_file, 'w', encoding='utf-8') as f:
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)

        except Exception as e:
            raise ConfigurationError(f"Failed to save configuration to {config_path}: {e}") from e


def resolve_dataset_root(
    config: DatasetConfig,
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Resolve the dataset root directory.

    1. ``config.root`` if set;
    2. otherwise ``$LITS_TRAIN_LABEL_DIR`` (``config.env_var``) if non-empty;
    3. otherwise ``{home}/dataset/train/label``.

    Raises:
        ConfigurationError: If the resolved path is not a directory
    """
    environ = os.environ if environ is None else environ

    if config.root:
        root = Path(config.root).expanduser()
    elif environ.get(config.env_var):
        root = Path(environ[config.env_var]).expanduser()
    else:
        root = (home if home is not None else Path.home()).joinpath(*config.home_subdir)

    if not root.is_dir():
        raise ConfigurationError(f"Dataset root is not a directory: {root}")
    return root


# Default configuration instance
DEFAULT_CONFIG = AblationConfig()
