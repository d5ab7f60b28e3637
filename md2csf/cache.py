"""
Content-addressed cache of rendered diagrams.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import os
import uuid
from pathlib import Path

from .diagnostics import DiagnosticLog
from .diagram import DiagramSource, RendererFailure, RendererMap, RendererUnavailable, ValidationFailure
from .png import is_png_file

LOGGER = logging.getLogger(__name__)


def _remove(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as ex:
        LOGGER.warning("Unable to remove file %s: %s", path, ex)


class RenderCache:
    """
    Maps diagram sources to validated PNG images in a cache directory.

    Entries are named after the hash of language and source, and are never expired. An entry is only ever created by
    atomically replacing it with a complete, validated scratch file, so concurrent runs sharing a cache directory
    observe either no entry or a valid one.

    :param cache_dir: Directory holding cache entries; created on demand.
    :param renderers: Renderer to invoke for each diagram language.
    :param log: Diagnostic log that receives renderer problems.
    """

    cache_dir: Path
    renderers: RendererMap
    log: DiagnosticLog

    def __init__(self, cache_dir: Path, renderers: RendererMap, log: DiagnosticLog) -> None:
        self.cache_dir = cache_dir
        self.renderers = renderers
        self.log = log

    def entry_path(self, source: DiagramSource) -> Path:
        return self.cache_dir / source.filename

    def lookup(self, source: DiagramSource) -> Path | None:
        "Returns a valid cache entry, removing an invalid one."

        path = self.entry_path(source)
        if not path.exists():
            return None
        if is_png_file(path):
            return path

        LOGGER.warning("Removing corrupt cache entry: %s", path)
        _remove(path)
        return None

    def ensure_rendered(self, source: DiagramSource) -> Path | None:
        """
        Returns the path to a validated PNG image for the diagram, rendering it on a cache miss.

        :param source: Diagram language and code.
        :returns: Path to the cache entry, or `None` when the diagram cannot be rendered.
        """

        cached = self.lookup(source)
        if cached is not None:
            LOGGER.debug("Cache hit for %s diagram: %s", source.language.value, cached.name)
            return cached

        renderer = self.renderers.get(source.language)
        if renderer is None:
            self._report(source, "no renderer registered")
            return None

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as ex:
            self._report(source, f"cache directory not writable: {ex}")
            return None

        path = self.entry_path(source)
        scratch = self.cache_dir / f".{source.key}.{uuid.uuid4().hex}.png"
        try:
            renderer.render(source.code, scratch)
            if not is_png_file(scratch):
                raise ValidationFailure("renderer output is not a PNG image")
            os.replace(scratch, path)
        except RendererUnavailable as ex:
            self._report(source, f"renderer unavailable: {ex}")
            return None
        except RendererFailure as ex:
            self._report(source, f"render failed: {ex}")
            return None
        except OSError as ex:
            self._report(source, f"cache write failed: {ex}")
            return None
        finally:
            if scratch.exists():
                _remove(scratch)

        # another run may have replaced the entry in the meantime
        if not is_png_file(path):
            self._report(source, "cache entry failed validation after rendering")
            _remove(path)
            return None

        LOGGER.info("Rendered %s diagram: %s", source.language.value, path.name)
        return path

    def _report(self, source: DiagramSource, reason: str) -> None:
        LOGGER.warning("Unable to render %s diagram %s: %s", source.language.value, source.key, reason)
        self.log.record("%s diagram %s: %s", source.language.value, source.key, reason)
