"""
Process-wide logging setup.

Modules log through `logging.getLogger(__name__)` with `key=value` messages;
this only installs the root handler and level.
"""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
