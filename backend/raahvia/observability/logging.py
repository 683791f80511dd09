from __future__ import annotations

import logging
import sys
from typing import Optional

from raahvia.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single stdout handler to the ``raahvia`` logger tree.

    Safe to call more than once; later calls only adjust the level.
    """
    root = logging.getLogger("raahvia")
    resolved = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    root.setLevel(resolved)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
        root.addHandler(handler)

    return root
