"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import tempfile
import unittest
from pathlib import Path

from md2csf.diagnostics import DiagnosticLog
from tests.utility import TypedTestCase


class TestDiagnosticLog(TypedTestCase):
    def test_append_across_instances(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "logs" / "diagnostics.log"

            with DiagnosticLog(path) as log:
                log.record("first %s", "run")
            with DiagnosticLog(path) as log:
                log.record("second run")
                lines = log.tail(10)

            self.assertEqual(len(lines), 2)
            self.assertStartsWith(lines[0], "[")
            self.assertTrue(lines[0].endswith("first run"))
            self.assertTrue(lines[1].endswith("second run"))

    def test_tail(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with DiagnosticLog(Path(tmp) / "diagnostics.log") as log:
                self.assertListEqual(log.tail(5), [])
                for index in range(5):
                    log.record("line %d", index)

                lines = log.tail(2)
                self.assertEqual(len(lines), 2)
                self.assertTrue(lines[0].endswith("line 3"))
                self.assertTrue(lines[1].endswith("line 4"))

    def test_unwritable_location(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("not a directory", encoding="utf-8")

            with DiagnosticLog(blocker / "logs" / "diagnostics.log") as log:
                with self.assertLogs("md2csf.diagnostics", level="ERROR") as logs:
                    log.record("renderer %s failed", "mermaid")
                self.assertListEqual(log.tail(5), [])

            self.assertEqual(len(logs.records), 2)
            self.assertEqual(logs.records[1].getMessage(), "renderer mermaid failed")

    def test_nothing_written_without_records(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "diagnostics.log"
            with DiagnosticLog(path):
                pass
            self.assertFalse(path.exists())


if __name__ == "__main__":
    unittest.main()
