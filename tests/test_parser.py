"""
Lumos Parser Tests
==================
Statement forms, operator precedence, error reporting and AST dumps.

Usage:
    python -m pytest tests/test_parser.py -v
"""
import sys
import os
import json
import unittest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lumos.errors import ParseError
from lumos.lexer import tokenize
from lumos.parser import (
    Parser, Program, BlockStatement, VariableDeclaration, FunctionDeclaration,
    ClassDeclaration, IfStatement, WhileStatement, ForStatement, ReturnStatement,
    BreakStatement, ThrowStatement, TryStatement, ImportStatement, ExportStatement,
    ExpressionStatement, AssignmentExpression, BinaryExpression, LogicalExpression,
    UnaryExpression, CallExpression, MemberExpression, IndexExpression,
    NewExpression, Identifier, Literal, ArrayExpression, ObjectExpression,
    ThisExpression, dump_ast,
)


def parse(source):
    return Parser(tokenize(source)).parse()


def expr(source):
    """Parse a single expression statement and return its expression."""
    statement = parse(source).body[0]
    assert isinstance(statement, ExpressionStatement)
    return statement.expression


class TestStatements(unittest.TestCase):

    def test_statement_count(self):
        program = parse("let a = 1\nlet b = 2; print(a + b)")
        self.assertIsInstance(program, Program)
        self.assertEqual(len(program.body), 3)

    def test_semicolons_are_optional(self):
        self.assertEqual(len(parse(";;let a = 1;;;").body), 1)

    def test_variable_declaration_kinds(self):
        for kind in ("let", "const", "var"):
            with self.subTest(kind=kind):
                decl = parse(f"{kind} x = 1").body[0]
                self.assertIsInstance(decl, VariableDeclaration)
                self.assertEqual(decl.kind, kind)
                self.assertEqual(decl.name, "x")

    def test_declaration_without_initializer(self):
        self.assertIsNone(parse("let x").body[0].init)

    def test_function_and_def(self):
        for keyword in ("function", "def"):
            fn = parse(f"{keyword} add(a, b) {{ return a + b }}").body[0]
            self.assertIsInstance(fn, FunctionDeclaration)
            self.assertEqual(fn.params, ["a", "b"])
            self.assertIsInstance(fn.body.body[0], ReturnStatement)

    def test_class_members(self):
        source = """
        class Dog extends Animal {
            let sound = "woof"
            constructor(name) { this.name = name }
            function speak() { return this.sound }
            def wag() { }
        }
        """
        cls = parse(source).body[0]
        self.assertIsInstance(cls, ClassDeclaration)
        self.assertEqual(cls.superclass, "Animal")
        self.assertEqual([f.name for f in cls.fields], ["sound"])
        self.assertEqual([m.name for m in cls.methods], ["constructor", "speak", "wag"])

    def test_if_elsif_else_chain(self):
        node = parse("if a { } elsif b { } else if c { } else { }").body[0]
        self.assertIsInstance(node, IfStatement)
        self.assertIsInstance(node.alternate, IfStatement)
        self.assertIsInstance(node.alternate.alternate, IfStatement)
        self.assertIsInstance(node.alternate.alternate.alternate, BlockStatement)

    def test_while(self):
        self.assertIsInstance(parse("while x < 3 { x = x + 1 }").body[0], WhileStatement)

    def test_for_to(self):
        node = parse("for i = 1 to n + 1 { print(i) }").body[0]
        self.assertIsInstance(node, ForStatement)
        self.assertEqual(node.iterator, "i")
        self.assertIsInstance(node.end, BinaryExpression)

    def test_return_without_value(self):
        fn = parse("function f() { return }").body[0]
        self.assertIsNone(fn.body.body[0].argument)

    def test_return_value_must_share_line(self):
        fn = parse("function f() {\n return\n 5\n}").body[0]
        self.assertIsNone(fn.body.body[0].argument)
        self.assertEqual(len(fn.body.body), 2)

    def test_break_and_throw(self):
        body = parse("while true { break }\nthrow 'x'").body
        self.assertIsInstance(body[0].body.body[0], BreakStatement)
        self.assertIsInstance(body[1], ThrowStatement)

    def test_try_catch_finally(self):
        node = parse("try { a() } catch (e) { b() } finally { c() }").body[0]
        self.assertIsInstance(node, TryStatement)
        self.assertEqual(node.handler_param, "e")
        self.assertIsNotNone(node.finalizer)

    def test_try_requires_a_clause(self):
        with self.assertRaises(ParseError):
            parse("try { a() }")

    def test_imports(self):
        single, multi = parse('import math from "./math"\nimport { a, b } from "lib"').body
        self.assertIsInstance(single, ImportStatement)
        self.assertEqual(single.specifiers, ["math"])
        self.assertEqual(multi.specifiers, ["a", "b"])
        self.assertEqual(multi.source, "lib")

    def test_export_wraps_declaration(self):
        node = parse("export function f() { }").body[0]
        self.assertIsInstance(node, ExportStatement)
        self.assertIsInstance(node.declaration, FunctionDeclaration)


class TestExpressions(unittest.TestCase):

    def test_multiplication_binds_tighter(self):
        node = expr("1 + 2 * 3")
        self.assertEqual(node.operator, "+")
        self.assertEqual(node.right.operator, "*")

    def test_left_associative(self):
        node = expr("10 - 4 - 3")
        self.assertEqual(node.operator, "-")
        self.assertIsInstance(node.left, BinaryExpression)
        self.assertEqual(node.right.value, 3.0)

    def test_assignment_is_right_associative(self):
        node = expr("a = b = 1")
        self.assertIsInstance(node, AssignmentExpression)
        self.assertIsInstance(node.value, AssignmentExpression)

    def test_compound_assignment(self):
        self.assertEqual(expr("a += 2").operator, "+=")

    def test_invalid_assignment_target(self):
        with self.assertRaises(ParseError):
            parse("1 = 2")

    def test_logical_words(self):
        node = expr("a and b or not c")
        self.assertIsInstance(node, LogicalExpression)
        self.assertEqual(node.operator, "||")
        self.assertEqual(node.left.operator, "&&")
        self.assertIsInstance(node.right, UnaryExpression)
        self.assertEqual(node.right.operator, "!")

    def test_and_binds_tighter_than_or(self):
        node = expr("a || b && c")
        self.assertEqual(node.operator, "||")
        self.assertEqual(node.right.operator, "&&")

    def test_equality_below_relational(self):
        node = expr("a < b == c > d")
        self.assertEqual(node.operator, "==")

    def test_prefix_and_postfix_update(self):
        pre = expr("++x")
        post = expr("x--")
        self.assertTrue(pre.prefix)
        self.assertFalse(post.prefix)
        self.assertEqual(post.operator, "--")

    def test_call_member_index_chain(self):
        node = expr("a.b(1)[2].c")
        self.assertIsInstance(node, MemberExpression)
        self.assertIsInstance(node.obj, IndexExpression)
        self.assertIsInstance(node.obj.obj, CallExpression)
        self.assertIsInstance(node.obj.obj.callee, MemberExpression)

    def test_keyword_as_member_name(self):
        self.assertEqual(expr("obj.new").property, "new")

    def test_literals(self):
        self.assertEqual(expr("42").value, 42.0)
        self.assertEqual(expr("'hi'").value, "hi")
        self.assertIs(expr("true").value, True)
        self.assertEqual(expr("null").data_type, "null")
        self.assertEqual(expr("undefined").data_type, "undefined")

    def test_array_and_object_literals(self):
        arr = expr("[1, 2, 3]")
        self.assertIsInstance(arr, ArrayExpression)
        self.assertEqual(len(arr.elements), 3)
        obj = parse("let o = { name: 'x', 'quoted': 2 }").body[0].init
        self.assertIsInstance(obj, ObjectExpression)
        self.assertEqual([key for key, _ in obj.properties], ["name", "quoted"])

    def test_new_and_this(self):
        node = expr("new Point(1, 2)")
        self.assertIsInstance(node, NewExpression)
        self.assertEqual(node.class_name, "Point")
        self.assertEqual(len(node.arguments), 2)
        self.assertIsInstance(expr("this"), ThisExpression)

    def test_parenthesised(self):
        node = expr("(1 + 2) * 3")
        self.assertEqual(node.operator, "*")
        self.assertIsInstance(node.left, BinaryExpression)


class TestParseErrors(unittest.TestCase):

    def test_expected_vs_actual(self):
        with self.assertRaises(ParseError) as ctx:
            parse("let = 5")
        err = ctx.exception
        self.assertEqual(err.expected_kind, "IDENTIFIER")
        self.assertEqual(err.actual_kind, "OPERATOR")
        self.assertEqual(err.actual_text, "=")
        self.assertEqual((err.line, err.column), (1, 5))

    def test_eof_inside_block(self):
        with self.assertRaises(ParseError) as ctx:
            parse("function f() { let x = 1")
        self.assertEqual(ctx.exception.actual_kind, "EOF")
        self.assertEqual(ctx.exception.expected_text, "}")

    def test_missing_paren(self):
        with self.assertRaises(ParseError):
            parse("print(1, 2")

    def test_unexpected_token_in_expression(self):
        with self.assertRaises(ParseError) as ctx:
            parse("let x = )")
        self.assertEqual(ctx.exception.expected_kind, "expression")

    def test_error_message_format(self):
        with self.assertRaises(ParseError) as ctx:
            parse("let = 5")
        self.assertEqual(ctx.exception.format(),
                         "ParseError: Expected IDENTIFIER but got OPERATOR '=' (L1:5)")

    def test_deep_nesting_is_a_parse_error(self):
        source = "(" * 5000 + "1" + ")" * 5000
        with self.assertRaises(ParseError):
            parse(source)


class TestDeterminism(unittest.TestCase):

    SOURCE = """
    class Counter {
        let count = 0
        function inc() { this.count += 1; return this.count }
    }
    let c = new Counter()
    for i = 1 to 3 { c.inc() }
    print(c.count)
    """

    def test_same_text_gives_equal_ast(self):
        self.assertEqual(parse(self.SOURCE), parse(self.SOURCE))

    def test_dump_ast_is_json(self):
        data = json.loads(dump_ast(parse("let x = 1")))
        self.assertEqual(data["node_type"], "Program")
        self.assertEqual(data["body"][0]["node_type"], "VariableDeclaration")
        self.assertEqual(data["body"][0]["init"]["value"], 1.0)

    def test_literal_identifier_nodes(self):
        decl = parse("let y = x").body[0]
        self.assertIsInstance(decl.init, Identifier)
        self.assertIsInstance(parse("let y = 1").body[0].init, Literal)


if __name__ == "__main__":
    unittest.main(verbosity=2)
