from __future__ import annotations

import logging

LOGGER_NAME = "natureopt"
DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_natureopt_logging(*, level: int = logging.INFO, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """
    Attach a console handler to the ``natureopt`` logger and return it.

    Notes:
        - Opt-in only; library modules never call logging.basicConfig().
        - Nothing is attached when the root logger or the package logger already has handlers,
          so an application's own logging setup always wins.
    """
    root = logging.getLogger()
    package_logger = logging.getLogger(LOGGER_NAME)
    if root.handlers or package_logger.handlers:
        return package_logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False
    return package_logger


__all__ = ["LOGGER_NAME", "configure_natureopt_logging"]
