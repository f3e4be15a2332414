"""Process logging for the MCP server.

stdout carries the stdio transport, so every record goes to stderr. Set
logging.level / logging.format in config.yaml or LOGGING_LEVEL /
LOGGING_FORMAT in env. At DEBUG each Bitbucket request is logged with its
query; degraded sub-fetches log at WARNING.
"""

import logging
import sys

from bitbucket_mcp.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty below WARNING (connection pool and per-request MCP notices)
THIRD_PARTY_LOGGERS = ("urllib3", "mcp", "httpx")


def _resolve_level(level: str) -> int:
    """Unknown names fall back to INFO."""
    return LEVELS.get(level.upper().strip(), logging.INFO)


class BitbucketMCPLogging:
    """Installs one stderr handler on the root logger."""

    def __init__(self, config: LoggingConfig) -> None:
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> logging.Handler:
        """Replace root handlers and return the installed one.

        Library loggers in THIRD_PARTY_LOGGERS stay at WARNING unless the
        configured level is DEBUG.
        """
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(self._format))

        root = logging.getLogger()
        for old in list(root.handlers):
            root.removeHandler(old)
        root.addHandler(handler)
        root.setLevel(self._level)

        library_level = logging.DEBUG if self._level == logging.DEBUG else logging.WARNING
        for name in THIRD_PARTY_LOGGERS:
            logging.getLogger(name).setLevel(library_level)
        return handler
