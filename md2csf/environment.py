"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import os
import re
import tempfile
from pathlib import Path

_TRUE_PATTERN = re.compile(r"^(1|true|on|yes)$", re.IGNORECASE)
_FALSE_PATTERN = re.compile(r"^(0|false|off|no)$", re.IGNORECASE)

DEFAULT_LOG_LINES = 20
MAX_LOG_LINES = 200


class ArgumentError(ValueError):
    "Raised when wrong arguments are passed to a function call."


def is_on(value: str | None) -> bool:
    "True if an environment variable value switches a feature on."

    if value is None:
        return False
    return _TRUE_PATTERN.match(value.strip()) is not None


def is_off(value: str | None) -> bool:
    "True if an environment variable value switches a feature off."

    if value is None:
        return False
    return _FALSE_PATTERN.match(value.strip()) is not None


def _get_flag(value: bool | None, name: str, default: bool) -> bool:
    if value is not None:
        return value

    env = os.getenv(name)
    if is_on(env):
        return True
    elif is_off(env):
        return False
    else:
        return default


def _get_log_lines(value: int | None) -> int:
    if value is None:
        env = os.getenv("MD2CSF_LOG_LINES")
        try:
            value = int(env) if env else DEFAULT_LOG_LINES
        except ValueError:
            value = DEFAULT_LOG_LINES

    return min(max(value, 1), MAX_LOG_LINES)


def _get_timeout(value: float | None) -> float | None:
    if value is None:
        env = os.getenv("MD2CSF_RENDER_TIMEOUT")
        if not env:
            return None
        try:
            value = float(env)
        except ValueError:
            raise ArgumentError(f"expected: number of seconds for MD2CSF_RENDER_TIMEOUT; got: {env}") from None

    if value <= 0:
        raise ArgumentError(f"render timeout must be positive; got: {value}")
    return value


class ConversionProperties:
    """
    Properties related to converting a Markdown document with embedded diagrams.

    Explicitly passed values take precedence over environment variables.

    :param image_dir: Directory where rendered diagrams are placed as attachments (`MD2CSF_IMAGE_DIR`).
    :param work_dir: Directory for the render cache and the diagnostic log (`MD2CSF_WORK_DIR`).
    :param debug: Whether renderer output is shown on the console (`MD2CSF_DEBUG`).
    :param render_mermaid: Whether Mermaid diagrams are rendered (`MD2CSF_MERMAID`).
    :param render_plantuml: Whether PlantUML diagrams are rendered (`MD2CSF_PLANTUML`).
    :param plantuml_jar: Path to `plantuml.jar` overriding the default lookup (`PLANTUML_JAR`).
    :param mmdc: Mermaid diagram converter executable (`MD2CSF_MMDC`).
    :param log_lines: Number of diagnostic log lines shown in debug mode (`MD2CSF_LOG_LINES`).
    :param render_timeout: Time limit in seconds for a single diagram render (`MD2CSF_RENDER_TIMEOUT`).
    """

    image_dir: Path
    work_dir: Path
    debug: bool
    render_mermaid: bool
    render_plantuml: bool
    plantuml_jar: Path | None
    mmdc: str | None
    log_lines: int
    render_timeout: float | None

    def __init__(
        self,
        *,
        image_dir: Path | None = None,
        work_dir: Path | None = None,
        debug: bool | None = None,
        render_mermaid: bool | None = None,
        render_plantuml: bool | None = None,
        plantuml_jar: Path | None = None,
        mmdc: str | None = None,
        log_lines: int | None = None,
        render_timeout: float | None = None,
    ) -> None:
        opt_image_dir = image_dir or os.getenv("MD2CSF_IMAGE_DIR")
        opt_work_dir = work_dir or os.getenv("MD2CSF_WORK_DIR")
        opt_plantuml_jar = plantuml_jar or os.getenv("PLANTUML_JAR")
        opt_mmdc = mmdc or os.getenv("MD2CSF_MMDC")

        if not opt_image_dir:
            opt_image_dir = Path.cwd() / "images"
        if not opt_work_dir:
            opt_work_dir = Path(tempfile.gettempdir()) / "md2csf-diagrams"

        self.image_dir = Path(opt_image_dir).expanduser()
        self.work_dir = Path(opt_work_dir).expanduser()
        self.debug = _get_flag(debug, "MD2CSF_DEBUG", False)
        self.render_mermaid = _get_flag(render_mermaid, "MD2CSF_MERMAID", True)
        self.render_plantuml = _get_flag(render_plantuml, "MD2CSF_PLANTUML", True)
        self.plantuml_jar = Path(opt_plantuml_jar).expanduser() if opt_plantuml_jar else None
        self.mmdc = opt_mmdc or None
        self.log_lines = _get_log_lines(log_lines)
        self.render_timeout = _get_timeout(render_timeout)

    @property
    def cache_dir(self) -> Path:
        "Directory holding content-addressed rendered diagrams."

        return self.work_dir / "cache"

    @property
    def log_path(self) -> Path:
        "Persistent diagnostic log shared across runs."

        return self.work_dir / "md2csf-diagnostics.log"
