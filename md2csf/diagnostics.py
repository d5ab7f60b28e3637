"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import collections
import logging
from pathlib import Path
from types import TracebackType

LOGGER = logging.getLogger(__name__)


class DiagnosticLog:
    """
    Persistent, append-only log of diagram rendering problems.

    The log outlives a single conversion such that recurring renderer issues can be investigated after the fact.
    Records go to a dedicated logger that is not attached to the logging hierarchy, so they do not reach the console.

    :param path: Path to the log file; created on first write, never truncated.
    """

    path: Path
    _logger: logging.Logger
    _handler: logging.FileHandler | None

    def __init__(self, path: Path) -> None:
        self.path = path
        self._logger = logging.Logger(f"{__name__}.{path.name}", logging.DEBUG)
        self._logger.propagate = False
        self._handler = None

    def __enter__(self) -> "DiagnosticLog":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def _get_logger(self) -> logging.Logger:
        if self._handler is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(self.path, mode="a", encoding="utf-8", delay=True)
            handler.setFormatter(logging.Formatter("[%(asctime)s] %(levelname)s %(message)s"))
            self._logger.addHandler(handler)
            self._handler = handler
        return self._logger

    def record(self, message: str, *args: object) -> None:
        "Appends a timestamped line to the log, or reports the message on the console if the log cannot be written."

        try:
            logger = self._get_logger()
        except OSError as ex:
            LOGGER.error("Unable to write diagnostic log %s: %s", self.path, ex)
            LOGGER.error(message, *args)
            return

        logger.warning(message, *args)
        if self._handler is not None:
            self._handler.flush()

    def tail(self, count: int) -> list[str]:
        "Returns the last lines of the log, oldest first."

        if count < 1 or not self.path.is_file():
            return []
        with open(self.path, "r", encoding="utf-8", errors="replace") as f:
            return [line.rstrip("\n") for line in collections.deque(f, maxlen=count)]

    def close(self) -> None:
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
