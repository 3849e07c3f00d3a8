# git_packager/core/logging.py
"""
Logging setup for the packager.

Modules use:
    from git_packager.core.logging import get_logger
    logger = get_logger(__name__)

The CLI and the MCP server call configure_logging() once at startup.
"""

import logging
import sys


DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: int = logging.INFO,
    fmt: str = DEFAULT_FORMAT,
    stream=sys.stderr,
):
    """
    Configure root logging handler.

    Safe to call multiple times: handler duplication is prevented.
    """
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)

    root.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """
    Modules call this to get a logger. Configuration happens in configure_logging().
    """
    return logging.getLogger(name)
