"""Common utilities for the contour ablation harness."""

import logging
import time
from typing import Optional


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Setup consistent logging configuration.

    Args:
        level: Logging level

    Returns:
        Configured logger
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger(__name__)


class Timer:
    """Simple context manager for timing operations.

    The measured wall-clock time is available as ``elapsed`` (seconds)
    once the block has exited.
    """

    def __init__(self, description: str, level: int = logging.INFO,
                 logger: Optional[logging.Logger] = None):
        self.description = description
        self.level = level
        self.logger = logger or logging.getLogger(__name__)
        self.start_time = None
        self.elapsed = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.log(self.level, f"Starting: {self.description}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - self.start_time
        self.logger.log(self.level, f"Completed: {self.description} ({self.elapsed:.2f}s)")
