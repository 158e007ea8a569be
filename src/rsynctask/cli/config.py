"""Configuration utilities for the rsynctask CLI.

Options can be kept in a JSON file whose keys are RsyncOptions fields:

    {"delete": true, "exclude": ["*.tmp", ".cache/"], "bwlimit": "10m"}
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from rsynctask.core.config import RsyncOptions

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_options(config_file: Path) -> RsyncOptions:
    """Load rsync options from a JSON config file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a JSON object of known options.
    """
    data = json.loads(config_file.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{config_file}: expected a JSON object")
    return RsyncOptions.from_dict(data)


def setup_logging(verbose: bool = False) -> None:
    """Configure the rsynctask logger to write to stderr.

    Args:
        verbose: Log DEBUG and up instead of WARNING and up.
    """
    root_logger = logging.getLogger("rsynctask")
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(stderr_handler)
