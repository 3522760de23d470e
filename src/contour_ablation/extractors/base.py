"""Contour extractor interface and variant registry.

Every variant implements ``extract(grid) -> ContourSet`` and must return
exactly the set of foreground pixels that have a background (or
out-of-range) 8-neighbour. Variants are looked up by identifier, so the
harness and the CLI select them from configuration.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, FrozenSet, List, Optional

import numpy as np

from ..errors import ConfigurationError
from ..grid.core import BinaryGrid, Coordinate

logger = logging.getLogger(__name__)

ContourSet = FrozenSet[Coordinate]

EMPTY_CONTOUR: ContourSet = frozenset()


class ContourExtractor(ABC):
    """Abstract interface for contour extraction variants.

    Attributes:
        name: Variant identifier used in reports
    """

    name: str = ""

    @abstractmethod
    def extract(self, grid: BinaryGrid) -> ContourSet:
        """Extracts the contour point set of a binary grid.

        Args:
            grid: Input grid (read-only, may be shared between threads)

        Returns:
            Frozen set of (row, column) contour coordinates.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def contour_from_mask(mask: np.ndarray) -> ContourSet:
    """Convert a dense boolean contour mask into a ContourSet."""
    return frozenset((int(r), int(c)) for r, c in np.argwhere(mask).tolist())


# name -> factory(extraction_config or None)
_REGISTRY: Dict[str, Callable[[Optional[object]], ContourExtractor]] = {}


def register_extractor(name: str):
    """Decorator adding a variant factory to the registry under ``name``."""
    def decorator(factory):
        if name in _REGISTRY:
            raise ValueError(f"Extractor already registered: {name}")
        _REGISTRY[name] = factory
        return factory
    return decorator


def available_extractors() -> List[str]:
    """Registered variant identifiers, sorted."""
    return sorted(_REGISTRY)


def create_extractor(name: str, config=None) -> ContourExtractor:
    """Instantiate a registered variant.

    Args:
        name: Variant identifier
        config: Optional ``ExtractionConfig`` passed to variants that use it

    Raises:
        ConfigurationError: If ``name`` is not registered
    """
    try:
        factory = _REGISTRY[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown extractor '{name}'. Available: {', '.join(available_extractors())}"
        ) from None
    return factory(config)


def create_extractors(names, config=None) -> List[ContourExtractor]:
    return [create_extractor(name, config) for name in names]


__all__ = [
    "ContourSet",
    "EMPTY_CONTOUR",
    "ContourExtractor",
    "contour_from_mask",
    "register_extractor",
    "available_extractors",
    "create_extractor",
    "create_extractors",
]
