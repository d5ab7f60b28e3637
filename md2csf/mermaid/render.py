"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import os
import os.path
import shutil
from pathlib import Path

from ..diagram import DiagramRenderer, RendererUnavailable
from ..external import execute_subprocess
from ..extra import override
from .config import MermaidConfigProperties

LOGGER = logging.getLogger(__name__)


def _is_docker() -> bool:
    "True if the application is running in a Docker container."

    return os.environ.get("CHROME_BIN") == "/usr/bin/chromium-browser" and os.environ.get("PUPPETEER_SKIP_DOWNLOAD") == "true"


def _executable_name() -> str:
    return "mmdc.cmd" if os.name == "nt" else "mmdc"


def get_mmdc(executable: str | None = None) -> str:
    """
    Path to the Mermaid diagram converter.

    Priority:

    1. explicitly passed executable, or value of environment variable `MD2CSF_MMDC`
    2. project-local installation in `node_modules/.bin` of the current directory
    3. installation in the Docker image
    4. executable on the search path
    """

    explicit = executable or os.getenv("MD2CSF_MMDC")
    if explicit:
        return explicit

    local_path = Path.cwd() / "node_modules" / ".bin" / _executable_name()
    if local_path.is_file():
        return str(local_path)

    if _is_docker():
        full_path = "/home/md2csf/node_modules/.bin/mmdc"
        if os.path.exists(full_path):
            return full_path

    return _executable_name()


def has_mmdc(executable: str | None = None) -> bool:
    "True if Mermaid diagram converter is available on the OS."

    return shutil.which(get_mmdc(executable)) is not None


class MermaidRenderer(DiagramRenderer):
    "Renders Mermaid diagrams into PNG images with the Mermaid CLI."

    config: MermaidConfigProperties
    executable: str | None
    enabled: bool
    debug: bool
    timeout: float | None

    def __init__(
        self,
        config: MermaidConfigProperties | None = None,
        *,
        executable: str | None = None,
        enabled: bool = True,
        debug: bool = False,
        timeout: float | None = None,
    ) -> None:
        self.config = config if config is not None else MermaidConfigProperties.from_environment()
        self.executable = executable
        self.enabled = enabled
        self.debug = debug
        self.timeout = timeout

    def get_command(self, mmdc: str, out_file: Path) -> list[str]:
        cmd = [
            mmdc,
            "--input",
            "-",
            "--output",
            str(out_file),
            "--outputFormat",
            "png",
            "--quiet",
        ]
        cmd.extend(self.config.as_arguments())
        if _is_docker():
            root = os.path.dirname(os.path.dirname(__file__))
            cmd.extend(["-p", os.path.join(root, "puppeteer-config.json")])
        return cmd

    @override
    def render(self, code: str, out_file: Path) -> None:
        if not self.enabled:
            raise RendererUnavailable("Mermaid rendering is switched off")

        mmdc = get_mmdc(self.executable)
        if shutil.which(mmdc) is None:
            raise RendererUnavailable(f"Mermaid diagram converter not found: {mmdc}")

        LOGGER.debug("Rendering Mermaid diagram to %s", out_file)
        execute_subprocess(
            self.get_command(mmdc, out_file),
            code.encode("utf-8"),
            application="Mermaid",
            debug=self.debug,
            timeout=self.timeout,
        )
