"""
Unit tests for visibility.py
"""

import unittest

from codemap.errors import UnsupportedLanguageError
from codemap.models import Language, Visibility
from codemap.visibility import (
    case_visibility,
    export_visibility,
    keyword_visibility,
    resolve_visibility,
    underscore_visibility,
)


class TestKeywordVisibility(unittest.TestCase):
    """Test Rust visibility modifiers."""

    def test_no_modifier(self):
        self.assertEqual(keyword_visibility(None), Visibility.PRIVATE)
        self.assertEqual(keyword_visibility(""), Visibility.PRIVATE)

    def test_pub(self):
        self.assertEqual(keyword_visibility("pub"), Visibility.PUBLIC)

    def test_restricted(self):
        """Test that every restricted scope maps to Crate."""
        for modifier in ("pub(crate)", "pub(super)", "pub(self)", "pub(in crate::a)", "pub( crate )"):
            with self.subTest(modifier=modifier):
                self.assertEqual(keyword_visibility(modifier), Visibility.CRATE)


class TestNameConventions(unittest.TestCase):
    """Test export, underscore and case conventions."""

    def test_export(self):
        self.assertEqual(export_visibility(True), Visibility.PUBLIC)
        self.assertEqual(export_visibility(False), Visibility.PRIVATE)

    def test_underscore(self):
        """Test the Python naming convention."""
        self.assertEqual(underscore_visibility("name"), Visibility.PUBLIC)
        self.assertEqual(underscore_visibility("_helper"), Visibility.PROTECTED)
        self.assertEqual(underscore_visibility("__secret"), Visibility.PRIVATE)
        self.assertEqual(underscore_visibility("__init__"), Visibility.PRIVATE)

    def test_case(self):
        """Test the Go capitalization convention."""
        self.assertEqual(case_visibility("Valid"), Visibility.PUBLIC)
        self.assertEqual(case_visibility("valid"), Visibility.PRIVATE)
        self.assertEqual(case_visibility("_x"), Visibility.PRIVATE)
        self.assertEqual(case_visibility(""), Visibility.PRIVATE)


class TestResolveVisibility(unittest.TestCase):
    """Test dispatch by language."""

    def test_dispatch(self):
        self.assertEqual(resolve_visibility(Language.GO, "Name"), Visibility.PUBLIC)
        self.assertEqual(resolve_visibility("python", "_x"), Visibility.PROTECTED)
        self.assertEqual(resolve_visibility("tsx", True), Visibility.PUBLIC)
        self.assertEqual(resolve_visibility(Language.RUST, "pub(crate)"), Visibility.CRATE)

    def test_unknown_language(self):
        with self.assertRaises(UnsupportedLanguageError):
            resolve_visibility("cobol", "x")


if __name__ == "__main__":
    unittest.main()
