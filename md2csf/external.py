"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import re
import subprocess
from typing import Sequence

from .diagram import RendererFailure

LOGGER = logging.getLogger(__name__)


def _decode_output(data: bytes, application: str, stream: str) -> str | None:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        LOGGER.error("%s returned binary data on %s", application, stream)
        return None


def execute_subprocess(
    command: Sequence[str],
    data: bytes,
    *,
    application: str,
    debug: bool = False,
    timeout: float | None = None,
) -> None:
    """
    Executes a subprocess, feeding input to stdin, and waits for it to complete.

    When debugging, the subprocess shares the console with this process. Otherwise, standard output is discarded,
    and standard error is captured only to explain a failure.

    :param command: Full command with arguments to execute.
    :param data: Application input as `bytes`.
    :param application: Human-readable application name for error messages (e.g., "Mermaid", "PlantUML").
    :param debug: Whether to inherit standard output and standard error.
    :param timeout: Time limit in seconds, or `None` to wait indefinitely.
    :raises RendererFailure: If the subprocess cannot be started, times out or fails with non-zero exit code.
    """

    LOGGER.debug("Executing: %s", " ".join(command))

    try:
        proc = subprocess.Popen(
            command,
            stdin=subprocess.PIPE,
            stdout=None if debug else subprocess.DEVNULL,
            stderr=None if debug else subprocess.PIPE,
        )
    except OSError as ex:
        raise RendererFailure(f"failed to start {application}: {ex}") from ex

    try:
        _, stderr = proc.communicate(input=data, timeout=timeout)
    except subprocess.TimeoutExpired as ex:
        proc.kill()
        proc.communicate()
        raise RendererFailure(f"{application} did not finish within {timeout} seconds") from ex

    if proc.returncode:
        LOGGER.error("Failed to execute %s; exit code: %d", application, proc.returncode)
        messages = [f"failed to execute {application}; exit code: {proc.returncode}"]
        if stderr:
            console_error = _decode_output(stderr, application, "stderr")
            if console_error is not None:
                LOGGER.error(console_error)

                # omit Node.js exception stack trace
                console_error = re.sub(r"^\s+at.*:\d+:\d+\)$\n", "", console_error, flags=re.MULTILINE).rstrip()

                messages.append(f"error:\n{console_error}")
        raise RendererFailure("\n".join(messages))
