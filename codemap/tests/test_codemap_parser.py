"""
Unit tests for parser.py

Tests grammar selection, byte parsing and syntax error reporting.
"""

import unittest

from codemap.adapters import LanguageAdapter, get_adapter, supported_languages
from codemap.errors import ParseFailure, UnsupportedLanguageError
from codemap.models import Language
from codemap.parser import (
    GRAMMARS,
    count_error_nodes,
    create_parser,
    first_error_line,
    parse_bytes,
    parse_source,
    syntax_failure,
)


class TestParserCreation(unittest.TestCase):
    """Test parser initialization."""

    def test_every_language_has_a_grammar(self):
        """Test that all language tags map to a grammar."""
        self.assertEqual(set(GRAMMARS), set(Language))

    def test_create_from_string_tag(self):
        """Test creating a parser from a string tag."""
        tree = create_parser("go").parse(b"package main\n")
        self.assertEqual(tree.root_node.type, "source_file")

    def test_unknown_language(self):
        """Test that unknown languages are rejected."""
        with self.assertRaises(UnsupportedLanguageError):
            create_parser("cobol")


class TestParsing(unittest.TestCase):
    """Test parsing source text."""

    def test_parse_bytes_requires_bytes(self):
        """Test that str input is rejected by parse_bytes."""
        with self.assertRaises(TypeError):
            parse_bytes("fn main() {}", Language.RUST)

    def test_parse_python(self):
        """Test parsing valid Python."""
        tree = parse_bytes(b"def foo(): pass", Language.PYTHON)
        self.assertEqual(tree.root_node.type, "module")
        self.assertFalse(tree.root_node.has_error)

    def test_parse_source_text(self):
        """Test parsing from a string."""
        tree = parse_source("pub fn main() {}", Language.RUST)
        self.assertEqual(tree.root_node.type, "source_file")

    def test_lone_surrogate_fails(self):
        """Test that text that cannot be encoded raises ParseFailure."""
        with self.assertRaises(ParseFailure):
            parse_source("x = '\ud800'", Language.PYTHON)

    def test_jsx_uses_javascript_grammar(self):
        """Test that JSX is parsed without errors."""
        tree = parse_bytes(b"const a = <div>hi</div>;", Language.JSX)
        self.assertFalse(tree.root_node.has_error)


class TestSyntaxErrors(unittest.TestCase):
    """Test error node reporting."""

    def test_clean_tree(self):
        """Test that a clean parse reports nothing."""
        tree = parse_bytes(b"fn ok() {}\n", Language.RUST)
        self.assertEqual(count_error_nodes(tree), 0)
        self.assertIsNone(first_error_line(tree))
        self.assertIsNone(syntax_failure(tree))

    def test_error_line(self):
        """Test that the first error is located."""
        tree = parse_bytes(b"fn ok() {}\n\nfn broken( { }\n", Language.RUST)
        self.assertGreater(count_error_nodes(tree), 0)
        failure = syntax_failure(tree)
        self.assertIsNotNone(failure)
        self.assertEqual(failure.message, "syntax error")
        self.assertGreaterEqual(failure.line, 3)
        self.assertEqual(failure.describe(), f"syntax error at line {failure.line}")


class TestAdapterRegistry(unittest.TestCase):
    """Test adapter selection by language tag."""

    def test_every_language_has_an_adapter(self):
        """Test that each grammar has an adapter implementing the protocol."""
        self.assertEqual(set(supported_languages()), set(Language))
        for language in Language:
            with self.subTest(language=language):
                adapter = get_adapter(language)
                self.assertIsInstance(adapter, LanguageAdapter)
                self.assertIn(language, adapter.languages)

    def test_shared_adapters(self):
        """Test that TSX and JSX reuse their base language adapters."""
        self.assertIs(get_adapter("tsx"), get_adapter("typescript"))
        self.assertIs(get_adapter("jsx"), get_adapter("javascript"))

    def test_unknown_language(self):
        with self.assertRaises(UnsupportedLanguageError):
            get_adapter("cobol")


if __name__ == "__main__":
    unittest.main()
