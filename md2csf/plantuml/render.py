"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import errno
import logging
import os
import shutil
import tempfile
from pathlib import Path

from ..diagram import DiagramRenderer, RendererFailure, RendererUnavailable
from ..external import execute_subprocess
from ..extra import override
from .config import get_plantuml_jar_path

LOGGER = logging.getLogger(__name__)


def has_plantuml(jar: Path | str | None = None) -> bool:
    "True if PlantUML JAR is available and Java is installed."

    return get_plantuml_jar_path(jar) is not None and shutil.which("java") is not None


def move_file(source: Path, target: Path) -> None:
    """
    Moves a file, replacing the target if it exists.

    Falls back to copy and delete when source and target are on different file systems.
    """

    try:
        os.replace(source, target)
    except OSError as ex:
        if ex.errno != errno.EXDEV:
            raise
        shutil.copyfile(source, target)
        source.unlink()


class PlantUMLRenderer(DiagramRenderer):
    "Renders PlantUML diagrams into PNG images with the PlantUML JAR."

    jar: Path | None
    work_dir: Path | None
    enabled: bool
    debug: bool
    timeout: float | None

    def __init__(
        self,
        *,
        jar: Path | None = None,
        work_dir: Path | None = None,
        enabled: bool = True,
        debug: bool = False,
        timeout: float | None = None,
    ) -> None:
        self.jar = jar
        self.work_dir = work_dir
        self.enabled = enabled
        self.debug = debug
        self.timeout = timeout

    def _get_command(self) -> list[str]:
        if not self.enabled:
            raise RendererUnavailable("PlantUML rendering is switched off")

        jar_path = get_plantuml_jar_path(self.jar)
        if jar_path is None:
            raise RendererUnavailable("PlantUML JAR not found; set the PLANTUML_JAR environment variable")
        java = shutil.which("java")
        if java is None:
            raise RendererUnavailable("Java runtime not found")

        return [java, "-jar", str(jar_path)]

    @override
    def render(self, code: str, out_file: Path) -> None:
        cmd = self._get_command()

        if self.work_dir is not None:
            self.work_dir.mkdir(parents=True, exist_ok=True)

        with tempfile.TemporaryDirectory(prefix="plantuml-", dir=self.work_dir) as scratch:
            scratch_dir = Path(scratch)
            input_file = scratch_dir / "diagram.puml"
            output_dir = scratch_dir / "out"
            input_file.write_text(code, encoding="utf-8")

            cmd.extend(["-tpng", str(input_file), "-o", str(output_dir)])
            execute_subprocess(cmd, b"", application="PlantUML", debug=self.debug, timeout=self.timeout)

            # output name follows `@startuml <name>` if present
            produced = sorted(output_dir.glob("*.png")) if output_dir.is_dir() else []
            if not produced:
                raise RendererFailure("PlantUML did not produce a PNG image")
            if len(produced) > 1:
                LOGGER.warning("PlantUML produced %d images; using %s", len(produced), produced[0].name)

            try:
                move_file(produced[0], out_file)
            except OSError as ex:
                raise RendererFailure(f"failed to move PlantUML output to {out_file}: {ex}") from ex
