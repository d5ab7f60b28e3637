"""
Convert Markdown with diagrams to Confluence Storage Format.

Renders Mermaid and PlantUML diagrams embedded in a Markdown file into images, and writes an XHTML-based Confluence
Storage Format document that references the images as attachments.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import argparse
import logging
import os.path
import sys
from io import StringIO
from pathlib import Path

from . import __version__
from .attachment import AttachmentError
from .converter import DocumentConverter
from .csf import ParseError
from .environment import ArgumentError, ConversionProperties


class Arguments(argparse.Namespace):
    mdpath: Path
    output: str | None
    image_dir: str | None
    work_dir: str | None
    loglevel: str
    debug: bool | None
    render_mermaid: bool | None
    render_plantuml: bool | None
    validate: bool


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser()
    parser.prog = os.path.basename(os.path.dirname(__file__))
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("mdpath", help="Path to Markdown file to convert.")
    parser.add_argument(
        "-o",
        "--output",
        help="Output file, or '-' for standard output (default: Markdown file with extension '.csf').",
    )
    parser.add_argument(
        "--image-dir",
        dest="image_dir",
        help="Directory where rendered diagrams are placed (default: 'images' in current directory).",
    )
    parser.add_argument(
        "--work-dir",
        dest="work_dir",
        help="Directory for the render cache and the diagnostic log (default: 'md2csf-diagrams' in temporary directory).",
    )
    parser.add_argument(
        "-l",
        "--loglevel",
        choices=[
            logging.getLevelName(level).lower()
            for level in (
                logging.DEBUG,
                logging.INFO,
                logging.WARN,
                logging.ERROR,
                logging.CRITICAL,
            )
        ],
        default=logging.getLevelName(logging.INFO),
        help="Use this option to set the log verbosity.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Show renderer output on the console, and recent entries of the diagnostic log.",
    )
    parser.add_argument(
        "--render-mermaid",
        dest="render_mermaid",
        action="store_true",
        default=None,
        help="Render Mermaid diagrams as image files. (Installed utility required to convert.)",
    )
    parser.add_argument(
        "--no-render-mermaid",
        dest="render_mermaid",
        action="store_false",
        help="Keep Mermaid diagrams as code blocks.",
    )
    parser.add_argument(
        "--render-plantuml",
        dest="render_plantuml",
        action="store_true",
        default=None,
        help="Render PlantUML diagrams as image files. (Java and plantuml.jar required to convert.)",
    )
    parser.add_argument(
        "--no-render-plantuml",
        dest="render_plantuml",
        action="store_false",
        help="Keep PlantUML diagrams as code blocks.",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        default=False,
        help="Check that the output is well-formed XML.",
    )
    return parser


def get_help() -> str:
    parser = get_parser()
    with StringIO() as buf:
        parser.print_help(file=buf)
        return buf.getvalue()


def main() -> None:
    parser = get_parser()
    args = Arguments()
    parser.parse_args(namespace=args)

    args.mdpath = Path(args.mdpath)

    logging.basicConfig(
        level=getattr(logging, args.loglevel.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
    )

    try:
        properties = ConversionProperties(
            image_dir=Path(args.image_dir) if args.image_dir else None,
            work_dir=Path(args.work_dir) if args.work_dir else None,
            debug=args.debug,
            render_mermaid=args.render_mermaid,
            render_plantuml=args.render_plantuml,
        )
    except ArgumentError as e:
        parser.error(str(e))

    if not args.mdpath.is_file():
        parser.error(f"Markdown file not found: {args.mdpath}")

    converter = DocumentConverter(properties)
    try:
        if args.output == "-":
            content = converter.convert(args.mdpath.read_text(encoding="utf-8"), validate=args.validate)
            sys.stdout.write(content)
            sys.stdout.write("\n")
        else:
            converter.convert_file(args.mdpath, Path(args.output) if args.output else None, validate=args.validate)
    except AttachmentError as err:
        logging.error("Unable to place rendered diagram: %s", err)
        sys.exit(1)
    except ParseError as err:
        logging.error("Output is not well-formed: %s", err)
        sys.exit(1)


if __name__ == "__main__":
    main()
