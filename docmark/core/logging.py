import logging
from logging import Logger
from typing import Optional

from .config import get_settings


def configure_logging(name: Optional[str] = None) -> Logger:
    """Return the engine logger (or a child of it), installing the handler once."""
    settings = get_settings()

    root = logging.getLogger(settings.app_name)
    if not root.handlers:
        root.setLevel(settings.log_level.upper())

        handler = logging.StreamHandler()
        formatter = logging.Formatter("[%(levelname)s] %(asctime)s | %(name)s | %(message)s")
        handler.setFormatter(formatter)

        root.addHandler(handler)
        root.propagate = False

    if name:
        return root.getChild(name)
    return root
