"""
Run configuration and logging setup.
"""

import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

LOG_FORMAT = '%(asctime)s [%(levelname)s] [%(name)s] %(message)s'


@dataclass
class Config:
    """Pipeline configuration parameters"""

    # PageRank
    damping_factor: float = 0.85
    max_iterations: int = 50
    convergence_threshold: float = 1e-6

    # Link graph: 0 = main (article) namespace
    namespace: int = 0

    # Output
    log_dir: Optional[str] = None
    log_level: str = "INFO"
    show_progress: bool = True

    def __post_init__(self):
        if not 0.0 < self.damping_factor < 1.0:
            raise ValueError(f"damping_factor must be in (0, 1), got {self.damping_factor}")
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")

    @classmethod
    def from_args(cls, args) -> "Config":
        """Build from an argparse namespace, keeping defaults for absent options."""
        fields = {}
        for name, attr in (
            ("damping_factor", "damping"),
            ("max_iterations", "iterations"),
            ("convergence_threshold", "threshold"),
            ("namespace", "namespace"),
            ("log_dir", "log_dir"),
            ("log_level", "log_level"),
        ):
            value = getattr(args, attr, None)
            if value is not None:
                fields[name] = value
        if getattr(args, "no_progress", False):
            fields["show_progress"] = False
        return cls(**fields)


def setup_logging(config: Config, stream=None) -> logging.Logger:
    """Configure logging with console output and, if log_dir is set, a log file"""
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    if config.log_dir:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        file_handler = logging.FileHandler(log_dir / f"sqldump_{timestamp}.log")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logging.getLogger("wiki_sqldump")
