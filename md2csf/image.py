"""
Image dimension extraction for raster and vector images.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import logging
import re
from pathlib import Path
from struct import unpack
from typing import BinaryIO

import lxml.etree as ET

from .png import PNG_SIGNATURE, extract_png_dimensions

LOGGER = logging.getLogger(__name__)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

# JPEG start-of-frame markers that carry image dimensions
_JPEG_SOF_MARKERS = frozenset([0xC0, 0xC1, 0xC2, 0xC3, 0xC5, 0xC6, 0xC7, 0xC9, 0xCA, 0xCB, 0xCD, 0xCE, 0xCF])


def _gif_dimensions(f: BinaryIO) -> tuple[int, int]:
    header = f.read(10)
    if len(header) != 10 or header[:6] not in (b"GIF87a", b"GIF89a"):
        raise ValueError("not a valid GIF file")
    width, height = unpack("<HH", header[6:10])
    return width, height


def _jpeg_dimensions(f: BinaryIO) -> tuple[int, int]:
    if f.read(2) != b"\xff\xd8":
        raise ValueError("not a valid JPEG file")

    while True:
        marker = f.read(2)
        if len(marker) != 2 or marker[0] != 0xFF:
            raise ValueError("corrupt JPEG marker")
        if marker[1] in (0xD8, 0x01) or 0xD0 <= marker[1] <= 0xD7:
            continue

        length_bytes = f.read(2)
        if len(length_bytes) != 2:
            raise ValueError("truncated JPEG segment")
        (length,) = unpack(">H", length_bytes)

        if marker[1] in _JPEG_SOF_MARKERS:
            segment = f.read(5)
            if len(segment) != 5:
                raise ValueError("truncated JPEG frame header")
            height, width = unpack(">HH", segment[1:5])
            return width, height

        f.seek(length - 2, 1)


def _parse_svg_length(value: str) -> int | None:
    "Parses an SVG length given in pixels or without a unit."

    match = re.match(r"^\s*([+]?(?:\d+\.?\d*|\.\d+))\s*(px)?\s*$", value, re.IGNORECASE)
    if not match:
        return None
    return int(round(float(match.group(1))))


def _parse_viewbox(viewbox: str) -> tuple[int | None, int | None]:
    # viewBox format: "min-x min-y width height"
    parts = re.split(r"[\s,]+", viewbox.strip())
    if len(parts) != 4:
        return None, None

    try:
        return int(round(float(parts[2]))), int(round(float(parts[3])))
    except ValueError:
        return None, None


def _svg_dimensions(path: Path) -> tuple[int | None, int | None]:
    root = ET.parse(str(path)).getroot()
    if root.tag != f"{{{SVG_NAMESPACE}}}svg" and root.tag != "svg":
        return None, None

    width_attr = root.get("width")
    height_attr = root.get("height")
    width = _parse_svg_length(width_attr) if width_attr else None
    height = _parse_svg_length(height_attr) if height_attr else None

    if width is None or height is None:
        viewbox = root.get("viewBox")
        if viewbox:
            vb_width, vb_height = _parse_viewbox(viewbox)
            if width is None:
                width = vb_width
            if height is None:
                height = vb_height

    return width, height


def get_image_dimensions(path: Path) -> tuple[int | None, int | None]:
    """
    Extracts the native width and height of a PNG, GIF, JPEG or SVG image.

    Dimensions are best-effort: files that are missing, unreadable or in an unrecognized format yield `(None, None)`.

    :param path: Path to the image file.
    :returns: A tuple of (width, height) in pixels.
    """

    try:
        if path.suffix.lower() == ".svg":
            return _svg_dimensions(path)

        with open(path, "rb") as f:
            head = f.read(8)
            f.seek(0)
            if head == PNG_SIGNATURE:
                return extract_png_dimensions(path)
            elif head.startswith(b"GIF8"):
                return _gif_dimensions(f)
            elif head.startswith(b"\xff\xd8"):
                return _jpeg_dimensions(f)
            else:
                LOGGER.debug("Unrecognized image format: %s", path)
                return None, None

    except (OSError, ValueError, ET.XMLSyntaxError) as ex:
        LOGGER.debug("Unable to read dimensions of image %s: %s", path, ex)
        return None, None
