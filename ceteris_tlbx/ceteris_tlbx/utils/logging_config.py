"""Logging setup for notebooks and scripts.

Library modules only create loggers; nothing is configured on import.
"""

import logging


def configure_logging(level: str | int = "INFO", fmt: str = "%(levelname)s: %(message)s") -> None:
    """Route toolbox log records to stderr at ``level``."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logging.basicConfig(level=level, format=fmt)
    logging.getLogger("ceteris_tlbx").setLevel(level)
