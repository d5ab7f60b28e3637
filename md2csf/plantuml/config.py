"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import os
from pathlib import Path

import md2csf

LOGGER = logging.getLogger(__name__)


def _candidate_jar_paths(explicit: Path | str | None) -> list[Path]:
    candidates: list[Path] = []

    env_jar = explicit or os.environ.get("PLANTUML_JAR")
    if env_jar:
        candidates.append(Path(env_jar).expanduser())

    # project-local vendor directory, next to the package and in the current directory
    candidates.append(Path(md2csf.__file__).parent.parent / "vendor" / "plantuml.jar")
    candidates.append(Path.cwd() / "vendor" / "plantuml.jar")

    candidates.append(Path.home() / "bin" / "plantuml.jar")
    return candidates


def get_plantuml_jar_path(explicit: Path | str | None = None) -> Path | None:
    """
    Returns the path to `plantuml.jar`, or `None` if not found.

    Priority:

    1. explicitly passed path, or value of environment variable `PLANTUML_JAR` (with `~` expanded)
    2. `vendor/plantuml.jar` in the parent directory of module `md2csf`, or in the current directory
    3. `~/bin/plantuml.jar`

    The first candidate that exists as a file wins.
    """

    for candidate in _candidate_jar_paths(explicit):
        if candidate.is_file():
            LOGGER.debug("Using PlantUML JAR at: %s", candidate)
            return candidate

    return None
