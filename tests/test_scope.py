"""
Lumos Scope Tests
=================
The scope arena: chained lookup, shadowing, pinning, release and the
reachability sweep that reclaims dead scopes.

Usage:
    python -m pytest tests/test_scope.py -v
"""
import sys
import os
import unittest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lumos.config import LumosConfig
from lumos.parser import BlockStatement
from lumos.runtime import Runtime
from lumos.scope import ScopeArena
from lumos.values import BoundMethod, Instance, UserFunction


def closure(scope_id):
    return UserFunction("f", [], BlockStatement(), scope_id)


class TestArena(unittest.TestCase):

    def setUp(self):
        self.arena = ScopeArena()
        self.root = self.arena.create()

    def test_lookup_walks_outward(self):
        self.arena.declare(self.root, "x", 1.0)
        child = self.arena.create(self.root)
        grandchild = self.arena.create(child)
        self.assertEqual(self.arena.lookup(grandchild, "x"), 1.0)

    def test_missing_name_raises_key_error(self):
        with self.assertRaises(KeyError):
            self.arena.lookup(self.root, "nope")

    def test_shadowing(self):
        self.arena.declare(self.root, "x", 1.0)
        child = self.arena.create(self.root)
        self.arena.declare(child, "x", 2.0)
        self.assertEqual(self.arena.lookup(child, "x"), 2.0)
        self.assertEqual(self.arena.lookup(self.root, "x"), 1.0)

    def test_resolve_finds_owner(self):
        self.arena.declare(self.root, "x", 1.0, constant=True)
        child = self.arena.create(self.root)
        owner = self.arena.resolve(child, "x")
        self.assertEqual(owner.scope_id, self.root)
        self.assertIn("x", owner.constants)
        self.assertIsNone(self.arena.resolve(child, "y"))

    def test_release_frees_uncaptured(self):
        child = self.arena.create(self.root)
        self.arena.release(child)
        self.assertNotIn(child, self.arena)

    def test_pinned_scope_survives_release(self):
        child = self.arena.create(self.root)
        inner = self.arena.create(child)
        self.arena.pin(inner)
        self.arena.release(inner)
        self.arena.release(child)
        self.assertIn(inner, self.arena)
        self.assertIn(child, self.arena)

    def test_sweep_keeps_roots_and_ancestors(self):
        child = self.arena.create(self.root)
        orphan = self.arena.create()
        freed = self.arena.sweep([child])
        self.assertEqual(freed, 1)
        self.assertIn(self.root, self.arena)
        self.assertNotIn(orphan, self.arena)

    def test_sweep_follows_closures(self):
        captured = self.arena.create(self.root)
        self.arena.pin(captured)
        self.arena.declare(self.root, "f", closure(captured))
        self.arena.sweep([self.root])
        self.assertIn(captured, self.arena)

    def test_sweep_follows_nested_values(self):
        captured = self.arena.create(self.root)
        instance = Instance("C")
        instance.fields["m"] = BoundMethod(closure(captured), instance)
        self.arena.declare(self.root, "items", [{"obj": instance}])
        self.arena.sweep([self.root])
        self.assertIn(captured, self.arena)

    def test_sweep_reclaims_dropped_closure(self):
        captured = self.arena.create(self.root)
        self.arena.pin(captured)
        self.arena.declare(self.root, "f", closure(captured))
        self.arena.declare(self.root, "f", None)
        self.arena.sweep([self.root])
        self.assertNotIn(captured, self.arena)

    def test_maybe_sweep_respects_threshold(self):
        arena = ScopeArena(sweep_threshold=10)
        root = arena.create()
        for _ in range(5):
            arena.create()
        self.assertEqual(arena.maybe_sweep([root]), 0)
        for _ in range(5):
            arena.create()
        self.assertEqual(arena.maybe_sweep([root]), 10)
        self.assertEqual(len(arena), 1)


class TestRuntimeReclamation(unittest.TestCase):

    def test_closures_survive_sweeps(self):
        runtime = Runtime(LumosConfig(sweep_threshold=4))
        source = """
        function makeAdder(n) { function add(x) { return x + n }; return add }
        let add5 = makeAdder(5)
        for i = 1 to 50 { let tmp = makeAdder(i) }
        for i = 1 to 50 { let tmp = makeAdder(i) }
        print(add5(1))
        """
        result = runtime.execute(source)
        self.assertTrue(result.success, result.error)
        self.assertEqual(result.output, "6")

    def test_dead_scopes_are_reclaimed(self):
        runtime = Runtime(LumosConfig(sweep_threshold=4))
        source = """
        function makeAdder(n) { function add(x) { return x + n }; return add }
        for i = 1 to 200 { makeAdder(i) }
        let done = true
        """
        result = runtime.execute(source)
        self.assertTrue(result.success, result.error)
        self.assertLess(len(runtime.arena), 20)

    def test_call_frames_released(self):
        runtime = Runtime()
        runtime.execute("function f(a) { let b = a * 2; return b }\nfor i = 1 to 100 { f(i) }")
        # root (built-ins) + global only
        self.assertEqual(len(runtime.arena), 2)

    def test_class_methods_survive_sweeps(self):
        runtime = Runtime(LumosConfig(sweep_threshold=4))
        source = """
        function build() {
            let secret = 41
            class Box { function get() { return secret + 1 } }
            return new Box()
        }
        let box = build()
        for i = 1 to 100 { build() }
        print(box.get())
        """
        result = runtime.execute(source)
        self.assertTrue(result.success, result.error)
        self.assertEqual(result.output, "42")

    def test_globals_persist_until_reset(self):
        runtime = Runtime()
        runtime.execute("let kept = 10")
        self.assertEqual(runtime.execute("print(kept)").output, "10")
        runtime.reset()
        self.assertFalse(runtime.execute("print(kept)").success)


if __name__ == "__main__":
    unittest.main(verbosity=2)
