"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import io
import logging
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from md2csf.__main__ import main
from md2csf.attachment import AttachmentError
from md2csf.converter import DocumentConverter
from md2csf.csf import elements_from_string
from md2csf.diagnostics import DiagnosticLog
from md2csf.diagram import DiagramLanguage
from md2csf.environment import ConversionProperties
from md2csf.mermaid import MermaidRenderer
from tests.utility import AC_ATTR, RI_ATTR, FakeRenderer, TypedTestCase, png_data

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(funcName)s [%(lineno)d] - %(message)s",
)

DOCUMENT = """
# Architecture

```mermaid
graph TD; A-->B;
```

Some text with ![overview](img/overview.png){width=300px} inline.

```plantuml
@startuml
Alice -> Bob: Hello
@enduml
```

* A list item with ![icon](icon.gif)
* <img src="assets/raw.png" width="64">

```mermaid
graph TD; A-->B;
```

~~Obsolete~~ & retired.

---
"""


class TestConversion(TypedTestCase):
    tmp: tempfile.TemporaryDirectory[str]
    image_dir: Path
    properties: ConversionProperties

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        root = Path(self.tmp.name)
        self.image_dir = root / "images"
        self.properties = ConversionProperties(
            image_dir=self.image_dir,
            work_dir=root / "work",
            debug=False,
            render_mermaid=True,
            render_plantuml=True,
        )

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_document(self) -> None:
        self.image_dir.mkdir()
        (self.image_dir / "overview.png").write_bytes(png_data(100, 50))

        mermaid = FakeRenderer(png_data(800, 600))
        plantuml = FakeRenderer(png_data(400, 300))
        converter = DocumentConverter(self.properties, {DiagramLanguage.MERMAID: mermaid, DiagramLanguage.PLANTUML: plantuml})
        content = converter.convert(DOCUMENT)

        self.assertStartsWith(content, '<div xmlns:ac="http://atlassian.com/content"')
        self.assertNotIn("@@ATTACH", content)
        self.assertIn("<hr/>", content)
        self.assertIn('<span style="text-decoration:line-through;">Obsolete</span> &amp; retired.', content)

        # three diagrams (two identical) and three images
        root = elements_from_string(content)
        images = list(root.iter(AC_ATTR("image")))
        self.assertEqual(len(images), 6)
        self.assertEqual(len(mermaid.sources), 1)
        self.assertEqual(len(plantuml.sources), 1)

        # identical diagrams are placed into the image directory once
        filenames = [image.find(RI_ATTR("attachment")).get(RI_ATTR("filename")) for image in images]  # type: ignore[union-attr]
        self.assertEqual(len(set(filenames)), 5)
        self.assertEqual(len([p for p in self.image_dir.iterdir() if p.name.endswith(".png")]), 3)

        overview = images[filenames.index("overview.png")]
        self.assertEqual(overview.get(AC_ATTR("width")), "300")
        self.assertEqual(overview.get(AC_ATTR("thumbnail")), "true")
        self.assertEqual(overview.get(AC_ATTR("original-width")), "100")
        self.assertEqual(overview.get(AC_ATTR("original-height")), "50")

        diagram = images[0]
        self.assertIsNone(diagram.get(AC_ATTR("width")))
        self.assertEqual(diagram.get(AC_ATTR("original-width")), "800")

        raw = images[filenames.index("raw.png")]
        self.assertEqual(raw.get(AC_ATTR("width")), "64")

    def test_cached_across_conversions(self) -> None:
        first = FakeRenderer()
        DocumentConverter(self.properties, {DiagramLanguage.MERMAID: first}).convert("```mermaid\ngraph LR; P-->Q;\n```")

        second = FakeRenderer()
        content = DocumentConverter(self.properties, {DiagramLanguage.MERMAID: second}).convert("```mermaid\ngraph LR; P-->Q;\n```")
        self.assertEqual(len(first.sources), 1)
        self.assertListEqual(second.sources, [])
        self.assertIn("<ac:image", content)

    def test_mermaid_unavailable(self) -> None:
        renderers = {DiagramLanguage.MERMAID: MermaidRenderer(executable="md2csf-no-such-mmdc")}
        content = DocumentConverter(self.properties, renderers).convert("```mermaid\ngraph TD; A-->B;\n```\n")

        self.assertIn('<code class="language-mermaid">graph TD; A--&gt;B;', content)
        self.assertNotIn("<ac:image", content)
        self.assertFalse(self.image_dir.exists())

        with DiagnosticLog(self.properties.log_path) as log:
            lines = log.tail(5)
        self.assertEqual(len(lines), 1)
        self.assertIn("mermaid", lines[0])
        self.assertIn("md2csf-no-such-mmdc", lines[0])

    def test_attachment_error(self) -> None:
        blocker = Path(self.tmp.name) / "blocker"
        blocker.write_text("")
        properties = ConversionProperties(image_dir=blocker / "images", work_dir=Path(self.tmp.name) / "work", debug=False)

        with self.assertRaises(AttachmentError):
            DocumentConverter(properties, {DiagramLanguage.MERMAID: FakeRenderer()}).convert("```mermaid\ngraph TD; A-->B;\n```")

    def test_work_dir_not_writable(self) -> None:
        blocker = Path(self.tmp.name) / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        properties = ConversionProperties(image_dir=self.image_dir, work_dir=blocker / "work", debug=False)
        mermaid = FakeRenderer()

        with self.assertLogs("md2csf.diagnostics", level=logging.ERROR):
            content = DocumentConverter(properties, {DiagramLanguage.MERMAID: mermaid}).convert(
                "```mermaid\ngraph TD; A-->B;\n```\n\ntext"
            )

        self.assertIn('<pre class="highlight"><code class="language-mermaid">graph TD; A--&gt;B;', content)
        self.assertIn("<p>text</p>", content)
        self.assertNotIn("<ac:image", content)
        self.assertListEqual(mermaid.sources, [])

    def test_alt_and_style(self) -> None:
        content = DocumentConverter(self.properties, {}).convert(
            '![Architecture overview](x.png){width=50%}\n\n<img src="y.png" style="width: 200px">\n'
        )
        images = list(elements_from_string(content).iter(AC_ATTR("image")))
        self.assertEqual(len(images), 2)
        self.assertEqual(images[0].get(AC_ATTR("alt")), "Architecture overview")
        self.assertIsNone(images[0].get(AC_ATTR("width")))
        self.assertIsNone(images[0].get(AC_ATTR("thumbnail")))
        self.assertEqual(images[1].get(AC_ATTR("width")), "200")

    def test_boolean_attributes(self) -> None:
        content = DocumentConverter(self.properties, {}).convert('<input type="checkbox" checked> done', validate=True)
        self.assertIn('<input type="checkbox" checked="checked"/>', content)

    def test_debug_shows_log_tail(self) -> None:
        with DiagnosticLog(self.properties.log_path) as log:
            for index in range(5):
                log.record("previous problem %d", index)

        properties = ConversionProperties(
            image_dir=self.image_dir,
            work_dir=self.properties.work_dir,
            debug=True,
            log_lines=2,
        )
        with self.assertLogs("md2csf.converter", level=logging.INFO) as cm:
            DocumentConverter(properties, {}).convert("Plain text.")

        output = "\n".join(cm.output)
        self.assertIn("previous problem 4", output)
        self.assertIn("previous problem 3", output)
        self.assertNotIn("previous problem 2", output)

    def test_convert_file(self) -> None:
        source = Path(self.tmp.name) / "page.md"
        source.write_text("Hello *world*!", encoding="utf-8")

        output = DocumentConverter(self.properties, {}).convert_file(source)
        self.assertEqual(output, source.with_suffix(".csf"))
        self.assertIn("<p>Hello <em>world</em>!</p>", output.read_text(encoding="utf-8"))


class TestCommandLine(TypedTestCase):
    tmp: tempfile.TemporaryDirectory[str]
    dir: Path

    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)
        (self.dir / "page.md").write_text("# Title\n\n```mermaid\ngraph TD; A-->B;\n```\n\nR&D\n", encoding="utf-8")

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def run_main(self, *args: str) -> None:
        argv = ["md2csf", str(self.dir / "page.md"), "--work-dir", str(self.dir / "work"), "--image-dir", str(self.dir / "images"), *args]
        with mock.patch.object(sys, "argv", argv):
            main()

    def test_output(self) -> None:
        output = self.dir / "out.csf"
        self.run_main("--no-render-mermaid", "--validate", "-o", str(output))

        content = output.read_text(encoding="utf-8")
        self.assertStartsWith(content, "<div xmlns:ac=")
        self.assertIn('<code class="language-mermaid">', content)
        self.assertIn("R&amp;D", content)

    def test_default_output(self) -> None:
        with mock.patch("md2csf.__main__.DocumentConverter.convert_file", autospec=True) as convert_file:
            self.run_main("--no-render-mermaid")
        convert_file.assert_called_once()
        self.assertEqual(convert_file.call_args.args[1:], (self.dir / "page.md", None))

        self.run_main("--no-render-mermaid")
        self.assertIn("<h1>Title</h1>", (self.dir / "page.csf").read_text(encoding="utf-8"))

    def test_standard_output(self) -> None:
        with mock.patch.object(sys, "stdout", new_callable=io.StringIO) as stdout:
            self.run_main("--no-render-mermaid", "-o", "-")
        self.assertStartsWith(stdout.getvalue(), "<div xmlns:ac=")
        self.assertFalse((self.dir / "page.csf").exists())

    def test_malformed_output(self) -> None:
        output = self.dir / "out.csf"
        with mock.patch("md2csf.converter.normalize_xhtml", return_value="<div><p>unclosed</div>"):
            with self.assertRaises(SystemExit) as cm:
                self.run_main("--no-render-mermaid", "--validate", "-o", str(output))
        self.assertEqual(cm.exception.code, 1)
        self.assertFalse(output.exists())

    def test_attachment_error(self) -> None:
        with mock.patch("md2csf.__main__.DocumentConverter.convert", side_effect=AttachmentError("disk full")):
            with self.assertRaises(SystemExit) as cm:
                self.run_main()
        self.assertEqual(cm.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
