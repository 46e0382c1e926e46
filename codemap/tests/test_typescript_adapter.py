"""
Unit tests for the TypeScript adapter.

Tests export-based visibility, arrow-function bindings, classes, interfaces,
enums and ES module imports.
"""

import unittest

from codemap.extractor import extract_codemap
from codemap.models import (
    Class,
    Const,
    Enum,
    ExtractOptions,
    Function,
    Import,
    Interface,
    Language,
    TypeAlias,
    Visibility,
)


def extract(source, options=None, language=Language.TYPESCRIPT):
    path = "app.tsx" if language is Language.TSX else "app.ts"
    return extract_codemap(path, source, language, options, token_counter=len)


class TestFunctions(unittest.TestCase):
    """Test function declarations and function-valued bindings."""

    def test_private_arrow_const(self):
        """Test that a non-exported arrow function is a private Function."""
        cm = extract("const f = (x: number): number => x;\n")
        self.assertEqual(len(cm.declarations), 1)
        f = cm.declarations[0]
        self.assertIsInstance(f, Function)
        self.assertEqual(f.name, "f")
        self.assertEqual(f.visibility, Visibility.PRIVATE)
        self.assertEqual(f.signature, "const f = (x: number): number")

    def test_private_arrow_hidden_from_public_view(self):
        """Test that the public view omits non-exported bindings."""
        cm = extract("const f = (x: number): number => x;\n", ExtractOptions.public_api())
        self.assertEqual(cm.declarations, ())

    def test_exported_function(self):
        """Test an exported function declaration."""
        cm = extract("export function greet(name: string): string { return name; }\n")
        greet = cm.declarations[0]
        self.assertEqual(greet.visibility, Visibility.PUBLIC)
        self.assertEqual(greet.signature, "export function greet(name: string): string")
        self.assertFalse(greet.is_async)

    def test_exported_async_arrow(self):
        """Test an exported async arrow function."""
        cm = extract("export const handler = async (req: Request) => {\n  return 1;\n};\n")
        handler = cm.declarations[0]
        self.assertIsInstance(handler, Function)
        self.assertTrue(handler.is_async)
        self.assertEqual(handler.visibility, Visibility.PUBLIC)
        self.assertEqual(handler.signature, "export const handler = async (req: Request)")
        self.assertEqual((handler.location.start_line, handler.location.end_line), (1, 3))

    def test_tsx_function(self):
        """Test that TSX sources parse with JSX in bodies."""
        cm = extract(
            "export function App(): JSX.Element {\n  return <div />;\n}\n",
            language=Language.TSX,
        )
        self.assertIsNone(cm.parse_error)
        self.assertEqual([d.name for d in cm.declarations], ["App"])


class TestTypes(unittest.TestCase):
    """Test classes, interfaces, aliases and enums."""

    def test_class_members(self):
        """Test member visibility from accessibility modifiers."""
        cm = extract(
            "export class Service {\n"
            "  private cache = new Map();\n"
            "  constructor(private readonly url: string) {}\n"
            "  async fetch(id: string): Promise<string> { return id; }\n"
            "  protected reset(): void {}\n"
            "  private helper(): void {}\n"
            "}\n"
        )
        service = cm.declarations[0]
        self.assertIsInstance(service, Class)
        self.assertEqual(service.visibility, Visibility.PUBLIC)
        self.assertEqual(
            [(m.name, m.visibility) for m in service.members],
            [
                ("constructor", Visibility.PUBLIC),
                ("fetch", Visibility.PUBLIC),
                ("reset", Visibility.PRIVATE),
                ("helper", Visibility.PRIVATE),
            ],
        )
        fetch = service.members[1]
        self.assertTrue(fetch.is_async)
        self.assertEqual(fetch.signature, "async fetch(id: string): Promise<string>")

    def test_abstract_class(self):
        """Test abstract classes and abstract method signatures."""
        cm = extract("export abstract class Base {\n  abstract run(): void;\n}\n")
        base = cm.declarations[0]
        self.assertIsInstance(base, Class)
        self.assertEqual([m.name for m in base.members], ["run"])

    def test_interface_members(self):
        """Test that interface members are captured as written."""
        cm = extract(
            "export interface User {\n"
            "  id: number;\n"
            "  name?: string;\n"
            "  greet(): void;\n"
            "}\n"
        )
        user = cm.declarations[0]
        self.assertIsInstance(user, Interface)
        self.assertEqual(user.members, ("id: number", "name?: string", "greet(): void"))

    def test_type_alias(self):
        """Test that a non-exported type alias is private."""
        cm = extract("type ID = string | number;\n")
        alias = cm.declarations[0]
        self.assertIsInstance(alias, TypeAlias)
        self.assertEqual(alias.visibility, Visibility.PRIVATE)
        self.assertEqual(alias.target, "string | number")

    def test_enum(self):
        """Test enum members including initializers."""
        cm = extract("export enum Color { Red, Green = 2 }\n")
        color = cm.declarations[0]
        self.assertIsInstance(color, Enum)
        self.assertEqual(color.variants, ("Red", "Green = 2"))

    def test_constants(self):
        """Test that const bindings become Consts and let bindings are skipped."""
        cm = extract("export const MAX: number = 5;\nlet counter = 0;\n")
        self.assertEqual(len(cm.declarations), 1)
        max_const = cm.declarations[0]
        self.assertIsInstance(max_const, Const)
        self.assertEqual(max_const.type, "number")
        self.assertEqual(max_const.visibility, Visibility.PUBLIC)


class TestImports(unittest.TestCase):
    """Test ES module imports."""

    def test_import_forms(self):
        """Test default, namespace, named and side-effect imports."""
        cm = extract(
            'import React, { useState } from "react";\n'
            'import * as path from "path";\n'
            "import { a, b as c } from './mod';\n"
            'import "./side-effect";\n'
        )
        self.assertEqual(
            list(cm.imports),
            [
                Import("react", ("default", "useState")),
                Import("path", ("*",)),
                Import("./mod", ("a", "b")),
                Import("./side-effect"),
            ],
        )
        self.assertTrue(cm.imports[0].is_default)
        self.assertTrue(cm.imports[1].is_wildcard)
        self.assertTrue(cm.imports[3].is_module_import)


class TestDocs(unittest.TestCase):
    """Test JSDoc extraction."""

    def test_jsdoc_on_exported_function(self):
        """Test that a JSDoc block above an export statement is captured."""
        cm = extract(
            "/** Adds numbers. */\n"
            "export function add(a: number, b: number): number { return a + b; }\n",
            ExtractOptions.with_docs(),
        )
        self.assertEqual(cm.declarations[0].doc, "Adds numbers.")

    def test_plain_comment_is_not_doc(self):
        """Test that // comments are not documentation."""
        cm = extract("// helper\nfunction h() {}\n", ExtractOptions.with_docs())
        self.assertIsNone(cm.declarations[0].doc)


if __name__ == "__main__":
    unittest.main()
