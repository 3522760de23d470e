"""Exception types for the contour ablation package.

Only configuration errors are fatal. Input and extraction failures are
turned into report records by the harness and the volume source.
"""


class ContourAblationError(Exception):
    """Base class for all package errors."""


class ConfigurationError(ContourAblationError, ValueError):
    """Raised when a batch cannot start (no variants, no inputs, bad dataset root...)."""


class VolumeLoadError(ContourAblationError):
    """Raised when a label volume cannot be read or decoded."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to load volume {self.path}: {reason}")


__all__ = ["ContourAblationError", "ConfigurationError", "VolumeLoadError"]
