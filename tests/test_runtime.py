"""
Lumos Runtime Tests
===================
The execute / compile / analyze facade and its configuration.

Usage:
    python -m pytest tests/test_runtime.py -v
"""
import sys
import os
import io
import json
import unittest
from contextlib import redirect_stdout
from unittest import mock

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import lumos
from lumos.builtins import BuiltinRegistry, create_default_registry
from lumos.config import LumosConfig
from lumos.runtime import AnalysisResult, CompileResult, ExecutionResult, Runtime


class TestExecute(unittest.TestCase):

    def setUp(self):
        self.runtime = Runtime()

    def test_success(self):
        result = self.runtime.execute("let x = 2\nprint(x + 3)")
        self.assertIsInstance(result, ExecutionResult)
        self.assertTrue(result.success)
        self.assertEqual(result.output, "5")
        self.assertIsNone(result.error)

    def test_lex_error_reported(self):
        result = self.runtime.execute("let x = 1 @")
        self.assertFalse(result.success)
        self.assertTrue(result.error.startswith("LexError: Unexpected character '@'"))
        self.assertEqual(result.output, "")

    def test_parse_error_reported(self):
        result = self.runtime.execute("print(1)\nlet = 2")
        self.assertFalse(result.success)
        self.assertTrue(result.error.startswith("ParseError:"))
        # Nothing runs when the program does not parse.
        self.assertEqual(result.output, "")

    def test_runtime_error_keeps_output(self):
        result = self.runtime.execute('print("a")\nundefinedThing()')
        self.assertFalse(result.success)
        self.assertEqual(result.output, "a")
        self.assertTrue(result.error.startswith("RuntimeError:"))

    def test_try_catch_success(self):
        result = self.runtime.execute('try { throw "boom" } catch (e) { print(e) }')
        self.assertTrue(result.success)
        self.assertEqual(result.output, "boom")

    def test_custom_builtins(self):
        registry = BuiltinRegistry()
        registry.register("print", lambda interp, *args: interp.write("custom"), needs_context=True)
        registry.register("twice", lambda x: x * 2)
        runtime = Runtime(builtins=registry)
        result = runtime.execute("print(twice(21))")
        self.assertEqual(result.output, "custom")
        self.assertFalse(runtime.execute("len([1])").success)

    def test_default_registry_names(self):
        names = create_default_registry().names()
        for name in ("print", "len", "type", "str", "int", "float", "range", "Math",
                     "abs", "sqrt", "pow", "floor", "ceil", "round", "random", "min", "max"):
            self.assertIn(name, names)

    def test_echo_output(self):
        runtime = Runtime(LumosConfig(echo_output=True))
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            result = runtime.execute("print(1)\nprint(2)")
        self.assertEqual(buffer.getvalue(), "1\n2\n")
        self.assertEqual(result.output, "1\n2")


class TestCompile(unittest.TestCase):

    def setUp(self):
        self.runtime = Runtime()

    def test_compile_python(self):
        result = self.runtime.compile("let x = 5\nprint(x)", "python")
        self.assertIsInstance(result, CompileResult)
        self.assertTrue(result.success)
        self.assertIn("x = 5", result.compiled)
        self.assertIn("print(x)", result.compiled)
        self.assertEqual(result.target, "python")

    def test_unknown_target(self):
        result = self.runtime.compile("print(1)", "cobol")
        self.assertFalse(result.success)
        self.assertIsNone(result.compiled)
        self.assertIn("Unsupported target language: cobol", result.error)

    def test_empty_target_is_unsupported(self):
        result = self.runtime.compile("print(1)", "")
        self.assertFalse(result.success)
        self.assertTrue(result.error.startswith("UnsupportedTargetError:"))

    def test_default_target_from_config(self):
        runtime = Runtime(LumosConfig(default_target="rust"))
        result = runtime.compile("print(1)")
        self.assertEqual(result.target, "rust")
        self.assertIn("println!", result.compiled)

    def test_compile_parse_error(self):
        result = self.runtime.compile("let = 1", "javascript")
        self.assertFalse(result.success)
        self.assertTrue(result.error.startswith("ParseError:"))

    def test_compile_does_not_execute(self):
        result = self.runtime.compile("print(undefinedName)", "javascript")
        self.assertTrue(result.success)

    def test_list_targets(self):
        targets = self.runtime.list_targets()
        self.assertEqual(len(targets), 19)
        self.assertIn("kotlin", targets)


class TestAnalyze(unittest.TestCase):

    def test_token_count_and_dump(self):
        result = Runtime().analyze("let x = 1")
        self.assertIsInstance(result, AnalysisResult)
        self.assertTrue(result.success)
        # let, x, =, 1, EOF
        self.assertEqual(result.token_count, 5)
        self.assertEqual(json.loads(result.ast_dump)["body"][0]["name"], "x")

    def test_analyze_error(self):
        result = Runtime().analyze("let x = (")
        self.assertFalse(result.success)
        self.assertEqual(result.token_count, 0)
        self.assertIsNone(result.ast_dump)


class TestExamplePrograms(unittest.TestCase):

    EXAMPLES = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "examples")

    def load(self, name):
        with open(os.path.join(self.EXAMPLES, name), encoding="utf-8") as f:
            return f.read()

    def test_hello(self):
        result = Runtime().execute(self.load("hello.lumos"))
        self.assertTrue(result.success, result.error)
        self.assertEqual(result.output, "hello world\nsum of 1..10 is 55")

    def test_shapes(self):
        result = Runtime().execute(self.load("shapes.lumos"))
        self.assertTrue(result.success, result.error)
        lines = result.output.split("\n")
        self.assertTrue(lines[0].startswith("c1 (circle) has area 3.14159"))
        self.assertEqual(lines[1], "s1 (square) has area 9")
        self.assertEqual(lines[2:], ["2.5", "caught: division by zero", "done"])

    def test_closures(self):
        result = Runtime().execute(self.load("closures.lumos"))
        self.assertTrue(result.success, result.error)
        self.assertEqual(result.output, "3 1\n[2,4] 2 4")

    def test_every_example_compiles(self):
        runtime = Runtime()
        for name in sorted(os.listdir(self.EXAMPLES)):
            for target in runtime.list_targets():
                with self.subTest(example=name, target=target):
                    self.assertTrue(runtime.compile(self.load(name), target).success)


class TestConfigAndVersion(unittest.TestCase):

    def test_version(self):
        self.assertEqual(Runtime().version, "2.1.0")
        self.assertEqual(lumos.__version__, "2.1.0")

    def test_from_env(self):
        env = {
            "LUMOS_ECHO_OUTPUT": "yes",
            "LUMOS_DEFAULT_TARGET": "go",
            "LUMOS_LOG_LEVEL": "debug",
            "LUMOS_SWEEP_THRESHOLD": "64",
            "LUMOS_INDENT_WIDTH": "2",
        }
        with mock.patch.dict(os.environ, env, clear=False):
            config = LumosConfig.from_env()
        self.assertTrue(config.echo_output)
        self.assertEqual(config.default_target, "go")
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.sweep_threshold, 64)
        self.assertEqual(config.indent_width, 2)

    def test_from_env_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            config = LumosConfig.from_env()
        self.assertEqual(config, LumosConfig())

    def test_bad_integer_env(self):
        with mock.patch.dict(os.environ, {"LUMOS_INDENT_WIDTH": "wide"}):
            with self.assertRaises(ValueError):
                LumosConfig.from_env()

    def test_numeric_log_level(self):
        self.assertEqual(LumosConfig(log_level="INFO").numeric_log_level, 20)
        self.assertEqual(LumosConfig(log_level="nonsense").numeric_log_level, 30)

    def test_indent_width_applies_to_compile(self):
        runtime = Runtime(LumosConfig(indent_width=2))
        result = runtime.compile("while a { b() }", "python")
        self.assertEqual(result.compiled, "while a:\n  b()\n")


if __name__ == "__main__":
    unittest.main(verbosity=2)
