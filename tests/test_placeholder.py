"""
Convert Markdown with diagrams to Confluence Storage Format.

Copyright 2022-2026, Levente Hunyadi

:see: https://github.com/hunyadi/md2conf
"""

import html
import unittest

from md2csf.placeholder import Placeholder, PlaceholderProtocol, normalize_size, parse_size_annotation
from tests.utility import TypedTestCase


class TestPlaceholderProtocol(TypedTestCase):
    def test_token(self) -> None:
        protocol = PlaceholderProtocol("abc123")
        token = protocol.encode(Placeholder("diagram.png", {"width": "200px", "height": "100"}))
        self.assertEqual(token, "@@ATTACH:abc123|file=diagram.png|width=200px;height=100@@")
        self.assertEqual(protocol.encode(Placeholder("a.png")), "@@ATTACH:abc123|file=a.png@@")

    def test_token_survives_html_escaping(self) -> None:
        protocol = PlaceholderProtocol("abc123")
        placeholder = Placeholder("R&D <draft> \"v2\".png", {"width": "50%"})
        token = protocol.encode(placeholder)

        self.assertEqual(html.escape(token), token)
        self.assertNotIn(" ", token)

        decoded: list[Placeholder] = []
        protocol.sub(f"<p>{token}</p>", lambda p: decoded.append(p) or "")
        self.assertListEqual(decoded, [placeholder])

    def test_substitution(self) -> None:
        protocol = PlaceholderProtocol("ff00")
        text = "a @@ATTACH:ff00|file=x.png@@ b @@ATTACH:ff00|file=y.png|width=3@@ c"
        result = protocol.sub(text, lambda p: f"[{p.filename}:{p.params.get('width', '-')}]")
        self.assertEqual(result, "a [x.png:-] b [y.png:3] c")
        self.assertEqual(protocol.count(text), 2)

    def test_foreign_nonce_is_literal_text(self) -> None:
        protocol = PlaceholderProtocol("ff00")
        text = "@@ATTACH:ee11|file=x.png@@ and @@ATTACH|file=x.png@@"
        self.assertEqual(protocol.sub(text, lambda p: "REPLACED"), text)

    def test_nonce(self) -> None:
        self.assertNotEqual(PlaceholderProtocol().nonce, PlaceholderProtocol().nonce)
        with self.assertRaises(ValueError):
            PlaceholderProtocol("not-hex")

    def test_invalid_parameters_are_skipped(self) -> None:
        protocol = PlaceholderProtocol("0a")
        token = protocol.encode(Placeholder("a.png", {"Width": "1", "height": "", "alt text": "x", "width": "2"}))
        self.assertEqual(token, "@@ATTACH:0a|file=a.png|width=2@@")


class TestSizeAnnotation(TypedTestCase):
    def test_single_group(self) -> None:
        self.assertEqual(parse_size_annotation("{width=200px}"), ({"width": "200px"}, ""))

    def test_separators(self) -> None:
        params, rest = parse_size_annotation("{width: 300, height=150px; thumbnail=true} trailing text")
        self.assertEqual(params, {"width": "300", "height": "150px", "thumbnail": "true"})
        self.assertEqual(rest, " trailing text")

    def test_adjacent_groups(self) -> None:
        params, rest = parse_size_annotation('{width=100}{Height="80"} and more')
        self.assertEqual(params, {"width": "100", "height": "80"})
        self.assertEqual(rest, " and more")

    def test_not_an_annotation(self) -> None:
        self.assertEqual(parse_size_annotation(" {width=100}"), ({}, " {width=100}"))
        self.assertEqual(parse_size_annotation("{curly braces}"), ({}, "{curly braces}"))
        self.assertEqual(parse_size_annotation("{}"), ({}, "{}"))
        self.assertEqual(parse_size_annotation(None), ({}, ""))

    def test_normalize_size(self) -> None:
        self.assertEqual(normalize_size("450px"), "450")
        self.assertEqual(normalize_size(" 450 PX "), "450")
        self.assertEqual(normalize_size("450"), "450")
        self.assertEqual(normalize_size("75%"), None)
        self.assertEqual(normalize_size("auto"), None)
        self.assertEqual(normalize_size("1.5px"), None)
        self.assertEqual(normalize_size("px"), None)
        self.assertEqual(normalize_size(None), None)


if __name__ == "__main__":
    unittest.main()
