"""
Unit tests for the Rust adapter.

Tests struct/impl merging, visibility modifiers, use-tree imports, and
recovery from malformed items.
"""

import unittest
from unittest import mock

from codemap.adapters.rust import parse_use_tree, split_use_items
from codemap.extractor import extract_codemap
from codemap.models import (
    Const,
    Enum,
    ExtractOptions,
    Field,
    Function,
    Import,
    Language,
    Struct,
    Trait,
    TypeAlias,
    Visibility,
)


def extract(source, options=None):
    return extract_codemap("lib.rs", source, Language.RUST, options, token_counter=len)


class TestStructsAndImpls(unittest.TestCase):
    """Test struct extraction and impl block merging."""

    def test_point_with_impl(self):
        """Test that an impl block merges its methods into the struct."""
        cm = extract(
            "pub struct Point { pub x: i32, y: i32 }\n"
            "impl Point { pub fn norm(&self) -> i32 { 0 } }\n"
        )
        self.assertIsNone(cm.parse_error)
        self.assertEqual(len(cm.declarations), 1)

        point = cm.declarations[0]
        self.assertIsInstance(point, Struct)
        self.assertEqual(point.name, "Point")
        self.assertEqual(point.visibility, Visibility.PUBLIC)
        self.assertEqual(
            point.fields,
            (
                Field("x", "i32", Visibility.PUBLIC),
                Field("y", "i32", Visibility.PRIVATE),
            ),
        )
        self.assertEqual(len(point.methods), 1)
        norm = point.methods[0]
        self.assertEqual(norm.name, "norm")
        self.assertEqual(norm.visibility, Visibility.PUBLIC)
        self.assertFalse(norm.is_async)
        self.assertEqual(norm.signature, "pub fn norm(&self) -> i32")
        self.assertEqual(norm.location.start_line, 2)

    def test_impl_before_struct(self):
        """Test that impl blocks preceding the struct are still merged."""
        cm = extract(
            "impl Counter { fn bump(&mut self) {} }\n"
            "struct Counter { n: u64 }\n"
        )
        self.assertEqual([d.name for d in cm.declarations], ["Counter"])
        self.assertEqual([m.name for m in cm.declarations[0].methods], ["bump"])

    def test_multiple_impls_concatenate_in_order(self):
        """Test that methods from several impl blocks keep source order."""
        cm = extract(
            "pub struct S;\n"
            "impl S { pub fn a(&self) {} pub fn b(&self) {} }\n"
            "impl S { fn c(&self) {} }\n"
        )
        s = cm.declarations[0]
        self.assertEqual([m.name for m in s.methods], ["a", "b", "c"])
        self.assertEqual(s.methods[2].visibility, Visibility.PRIVATE)

    def test_orphan_impl_is_dropped(self):
        """Test that an impl for a type not declared in the file is dropped."""
        cm = extract("impl Missing { pub fn a(&self) {} }\n")
        self.assertEqual(cm.declarations, ())

    def test_generic_impl(self):
        """Test that generic arguments are stripped from the impl target."""
        cm = extract(
            "pub struct Stack<T> { items: Vec<T> }\n"
            "impl<T> Stack<T> { pub fn push(&mut self, item: T) {} }\n"
        )
        stack = cm.declarations[0]
        self.assertEqual(stack.fields[0].type, "Vec<T>")
        self.assertEqual([m.name for m in stack.methods], ["push"])

    def test_trait_impl_merges_into_type(self):
        """Test that `impl Trait for Type` attaches to Type."""
        cm = extract(
            "use std::fmt;\n"
            "pub struct Point;\n"
            "impl fmt::Display for Point {\n"
            "    fn fmt(&self, f: &mut fmt::Formatter) -> fmt::Result { Ok(()) }\n"
            "}\n"
        )
        point = cm.declarations[0]
        self.assertEqual([m.name for m in point.methods], ["fmt"])

    def test_tuple_struct_fields(self):
        """Test that tuple struct fields are named by position."""
        cm = extract("pub struct Meters(pub f64, u8);\n")
        self.assertEqual(
            cm.declarations[0].fields,
            (
                Field("0", "f64", Visibility.PUBLIC),
                Field("1", "u8", Visibility.PRIVATE),
            ),
        )

    def test_multiline_location(self):
        """Test that the location spans the whole struct."""
        cm = extract("pub struct Point {\n    pub x: i32,\n    pub y: i32,\n}\n")
        loc = cm.declarations[0].location
        self.assertEqual((loc.start_line, loc.end_line), (1, 4))


class TestOtherItems(unittest.TestCase):
    """Test functions, enums, traits, aliases and constants."""

    def test_visibility_modifiers(self):
        """Test pub, pub(crate) and private functions."""
        cm = extract(
            "pub fn a() {}\n"
            "pub(crate) fn b() {}\n"
            "fn c() {}\n"
        )
        self.assertEqual(
            [d.visibility for d in cm.declarations],
            [Visibility.PUBLIC, Visibility.CRATE, Visibility.PRIVATE],
        )

    def test_async_function(self):
        """Test async detection and body removal."""
        cm = extract("pub async fn fetch() -> u8 { 0 }\n")
        fetch = cm.declarations[0]
        self.assertIsInstance(fetch, Function)
        self.assertTrue(fetch.is_async)
        self.assertEqual(fetch.signature, "pub async fn fetch() -> u8")

    def test_where_clause_is_separate_segment(self):
        """Test that a where clause is kept after a newline."""
        cm = extract(
            "pub fn largest<T>(list: &[T]) -> T\n"
            "where\n"
            "    T: PartialOrd + Copy,\n"
            "{\n"
            "    list[0]\n"
            "}\n"
        )
        self.assertEqual(
            cm.declarations[0].signature,
            "pub fn largest<T>(list: &[T]) -> T\nwhere T: PartialOrd + Copy",
        )

    def test_enum_variants(self):
        """Test that variants keep their associated data."""
        cm = extract("pub enum Shape { Circle(f64), Rect { w: f64, h: f64 }, Empty }\n")
        shape = cm.declarations[0]
        self.assertIsInstance(shape, Enum)
        self.assertEqual(shape.variants, ("Circle(f64)", "Rect { w: f64, h: f64 }", "Empty"))

    def test_enum_receives_impl_methods(self):
        """Test that impl blocks merge into enums as well."""
        cm = extract(
            "enum Dir { Up, Down }\n"
            "impl Dir { fn flip(self) -> Self { self } }\n"
        )
        self.assertEqual([m.name for m in cm.declarations[0].methods], ["flip"])

    def test_trait_methods(self):
        """Test that required and default trait methods are signatures."""
        cm = extract(
            "pub trait Shape {\n"
            "    fn area(&self) -> f64;\n"
            "    fn name(&self) -> String { String::new() }\n"
            "}\n"
        )
        shape = cm.declarations[0]
        self.assertIsInstance(shape, Trait)
        self.assertEqual(shape.methods, ("fn area(&self) -> f64", "fn name(&self) -> String"))

    def test_const_static_and_type_alias(self):
        """Test constants, statics and type aliases."""
        cm = extract(
            "pub const MAX: usize = 10;\n"
            "static NAME: &str = \"x\";\n"
            "pub type Result<T> = std::result::Result<T, Error>;\n"
        )
        max_const, name_static, alias = cm.declarations
        self.assertEqual(max_const, Const("MAX", Visibility.PUBLIC, max_const.location, "usize"))
        self.assertIsInstance(name_static, Const)
        self.assertEqual(name_static.visibility, Visibility.PRIVATE)
        self.assertEqual(name_static.type, "&str")
        self.assertIsInstance(alias, TypeAlias)
        self.assertEqual(alias.target, "std::result::Result<T, Error>")


class TestDocs(unittest.TestCase):
    """Test documentation comment handling."""

    def test_doc_comment_with_attribute(self):
        """Test that attributes between a doc comment and the item are skipped."""
        source = "/// A point.\n/// In 2D.\n#[derive(Debug)]\npub struct P { }\n"
        cm = extract(source, ExtractOptions.with_docs())
        self.assertEqual(cm.declarations[0].doc, "A point.\nIn 2D.")

    def test_detached_doc_comment(self):
        """Test that a blank line separates a comment from the item."""
        cm = extract("/// Detached.\n\npub fn f() {}\n", ExtractOptions.with_docs())
        self.assertIsNone(cm.declarations[0].doc)

    def test_docs_not_extracted_by_default(self):
        """Test that the doc extractor is never invoked when docs are off."""
        with mock.patch("codemap.adapters.rust.get_preceding_doc") as doc_mock:
            cm = extract("/// Adds one.\npub fn add_one(x: i32) -> i32 { x + 1 }\n")
        doc_mock.assert_not_called()
        self.assertIsNone(cm.declarations[0].doc)


class TestMalformedSource(unittest.TestCase):
    """Test partial extraction from broken input."""

    def test_broken_function(self):
        """Test that a malformed function is reported and not extracted."""
        cm = extract("fn broken( { }")
        self.assertIsNotNone(cm.parse_error)
        self.assertTrue(cm.parse_error.startswith("syntax error"))
        self.assertFalse(any(d.name == "broken" for d in cm.declarations))

    def test_valid_items_survive_errors(self):
        """Test that well-formed items around an error are still extracted."""
        cm = extract("pub fn ok() {}\n\nfn broken( { }\n")
        self.assertIsNotNone(cm.parse_error)
        self.assertIn("ok", [d.name for d in cm.declarations])


class TestUseTrees(unittest.TestCase):
    """Test use declaration parsing."""

    def test_split_use_items(self):
        """Test splitting on top-level commas only."""
        self.assertEqual(split_use_items("a, b::{c, d}, e as f"), ["a", "b::{c, d}", "e as f"])

    def test_simple_path(self):
        """Test that the last segment is the imported item."""
        self.assertEqual(
            parse_use_tree("std::collections::HashMap"),
            Import("std::collections", ("HashMap",)),
        )

    def test_imports_from_file(self):
        """Test imports extracted in source order."""
        cm = extract(
            "use std::io::{self, Read, Write as W};\n"
            "use crate::a::{b::{c, d}, e};\n"
            "use foo::*;\n"
            "use serde;\n"
        )
        self.assertEqual(
            list(cm.imports),
            [
                Import("std::io", ("self", "Read", "Write as W")),
                Import("crate::a", ("b::{c, d}", "e")),
                Import("foo", ("*",)),
                Import("serde"),
            ],
        )


class TestPublicView(unittest.TestCase):
    """Test reduction to the public API."""

    def test_public_only_drops_private_items(self):
        """Test that private fields, methods and items are removed."""
        source = (
            "pub struct Point { pub x: i32, y: i32 }\n"
            "impl Point { pub fn norm(&self) -> i32 { 0 } fn raw(&self) {} }\n"
            "fn helper() {}\n"
        )
        cm = extract(source, ExtractOptions.public_api())
        self.assertEqual([d.name for d in cm.declarations], ["Point"])
        point = cm.declarations[0]
        self.assertEqual([f.name for f in point.fields], ["x"])
        self.assertEqual([m.name for m in point.methods], ["norm"])


if __name__ == "__main__":
    unittest.main()
