"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import os
import shutil
from pathlib import Path

LOGGER = logging.getLogger(__name__)


class AttachmentError(RuntimeError):
    "Raised when a rendered diagram cannot be placed into the image directory."


class AttachmentDirectory:
    """
    Places rendered diagrams into the directory of images to be uploaded alongside a page.

    Each cached image is materialized at most once during a conversion; the set of handled images belongs to a single
    conversion.

    :param image_dir: Output directory for images; created on demand.
    """

    image_dir: Path
    handled: set[Path]

    def __init__(self, image_dir: Path) -> None:
        self.image_dir = image_dir
        self.handled = set()

    def ensure_available(self, cached_path: Path) -> str:
        """
        Hard-links or copies a cached image into the image directory.

        :param cached_path: Path to the cached image.
        :returns: File name of the image in the image directory.
        :raises AttachmentError: Raised when the directory cannot be created or the file cannot be placed.
        """

        filename = cached_path.name
        if cached_path in self.handled:
            return filename

        target = self.image_dir / filename
        try:
            self.image_dir.mkdir(parents=True, exist_ok=True)
            if not target.exists():
                self._link_or_copy(cached_path, target)
        except OSError as ex:
            raise AttachmentError(f"unable to place image {filename} into {self.image_dir}: {ex}") from ex

        self.handled.add(cached_path)
        return filename

    @staticmethod
    def _link_or_copy(source: Path, target: Path) -> None:
        try:
            os.link(source, target)
            LOGGER.debug("Linked %s to %s", source, target)
        except FileExistsError:
            # created concurrently by another run
            pass
        except OSError as ex:
            LOGGER.debug("Hard link from %s failed (%s); copying instead", source, ex)
            shutil.copyfile(source, target)
