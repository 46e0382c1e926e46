"""
Unit tests for signature.py
"""

import unittest

from codemap.models import Language
from codemap.parser import parse_bytes
from codemap.signature import (
    collapse_whitespace,
    format_signature,
    signature_from_text,
    split_signature,
)


class TestWhitespace(unittest.TestCase):
    """Test whitespace normalization."""

    def test_collapse_multiline_parameters(self):
        """Test collapsing a parameter list split across lines."""
        self.assertEqual(collapse_whitespace("fn foo(\n    a: i32,\n) -> i32"), "fn foo(a: i32,) -> i32")

    def test_collapse_brackets(self):
        """Test spacing inside square brackets."""
        self.assertEqual(collapse_whitespace("list: &[ T ]"), "list: &[T]")

    def test_string_literals_kept(self):
        """Test that spacing inside quoted default values is untouched."""
        self.assertEqual(
            collapse_whitespace('def f(sep="( ", end=" )")'),
            'def f(sep="( ", end=" )")',
        )
        self.assertEqual(
            collapse_whitespace("function g(open = '[  ', close = ' ]') "),
            "function g(open = '[  ', close = ' ]')",
        )

    def test_lifetimes_are_not_quotes(self):
        """Test that lifetime parameters do not start a literal."""
        self.assertEqual(
            collapse_whitespace("fn f<'a>( x: &'a str,\n  y: &'a [ u8 ] )"),
            "fn f<'a>(x: &'a str, y: &'a [u8])",
        )

    def test_signature_from_text(self):
        """Test trailing separators are dropped."""
        self.assertEqual(signature_from_text("fn area(&self) -> f64;"), "fn area(&self) -> f64")
        self.assertEqual(signature_from_text("id: number,"), "id: number")


class TestFormatSignature(unittest.TestCase):
    """Test signatures built from syntax nodes."""

    def test_body_removed(self):
        """Test that the body is dropped."""
        source = b"def add(a: int, b: int) -> int:\n    return a + b\n"
        node = parse_bytes(source, Language.PYTHON).root_node.children[0]
        signature = format_signature(node, source, body=node.child_by_field_name("body"), strip_suffixes=(":",))
        self.assertEqual(signature, "def add(a: int, b: int) -> int")

    def test_python_default_values_verbatim(self):
        """Test that string defaults survive formatting."""
        source = b'def f(sep="( ", end=" )"):\n    pass\n'
        node = parse_bytes(source, Language.PYTHON).root_node.children[0]
        signature = format_signature(node, source, body=node.child_by_field_name("body"), strip_suffixes=(":",))
        self.assertEqual(signature, 'def f(sep="( ", end=" )")')

    def test_where_clause_segment(self):
        """Test that the constraint clause becomes a separate segment."""
        source = b"fn a<T>(x: T)\nwhere\n    T: Copy,\n{\n}\n"
        node = parse_bytes(source, Language.RUST).root_node.children[0]
        where = [c for c in node.children if c.type == "where_clause"][0]
        signature = format_signature(node, source, body=node.child_by_field_name("body"), constraint=where)
        self.assertEqual(split_signature(signature), ("fn a<T>(x: T)", "where T: Copy"))


class TestSplitSignature(unittest.TestCase):
    """Test splitting signatures."""

    def test_without_clause(self):
        """Test a signature with no constraint segment."""
        self.assertEqual(split_signature("fn a()"), ("fn a()", None))

    def test_with_clause(self):
        """Test a signature with a constraint segment."""
        self.assertEqual(split_signature("fn a()\nwhere T: X"), ("fn a()", "where T: X"))


if __name__ == "__main__":
    unittest.main()
