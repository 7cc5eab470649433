"""
Lumos Scopes
============
Lexical scopes stored in an arena and addressed by integer ids.

A closure keeps the id of the scope it captured, never a live reference.
Scopes nobody captured are released as soon as their frame ends; captured
(pinned) scopes survive until a reachability sweep proves them dead.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from .values import iter_scope_refs

logger = logging.getLogger(__name__)


@dataclass
class Scope:
    """A name→value mapping with an optional parent scope."""
    scope_id: int
    parent_id: Optional[int] = None
    bindings: dict[str, Any] = field(default_factory=dict)
    constants: set[str] = field(default_factory=set)
    pinned: bool = False


class ScopeArena:
    """
    Owns every live Scope of one evaluation context.

    Usage:
        arena = ScopeArena()
        global_id = arena.create()
        arena.declare(global_id, "x", 1.0)
        arena.lookup(global_id, "x")
    """

    def __init__(self, sweep_threshold: int = 256):
        self._scopes: dict[int, Scope] = {}
        self._next_id = 0
        self.sweep_threshold = sweep_threshold
        self._next_sweep = sweep_threshold

    def __len__(self) -> int:
        return len(self._scopes)

    def __contains__(self, scope_id: int) -> bool:
        return scope_id in self._scopes

    def create(self, parent_id: Optional[int] = None) -> int:
        """Allocate a new scope chained to `parent_id` and return its id."""
        scope_id = self._next_id
        self._next_id += 1
        self._scopes[scope_id] = Scope(scope_id, parent_id)
        return scope_id

    def get(self, scope_id: int) -> Scope:
        return self._scopes[scope_id]

    def pin(self, scope_id: int):
        """Mark a scope and all of its ancestors as captured."""
        current: Optional[int] = scope_id
        while current is not None:
            scope = self._scopes[current]
            if scope.pinned:
                break
            scope.pinned = True
            current = scope.parent_id

    def release(self, scope_id: int):
        """Drop a scope whose frame has ended, unless a closure captured it."""
        scope = self._scopes.get(scope_id)
        if scope is not None and not scope.pinned:
            del self._scopes[scope_id]

    # ─────────────────────────────────────────────────────────
    #  Bindings
    # ─────────────────────────────────────────────────────────

    def declare(self, scope_id: int, name: str, value: Any, constant: bool = False):
        """Bind `name` in this scope, shadowing any outer binding."""
        scope = self._scopes[scope_id]
        scope.bindings[name] = value
        if constant:
            scope.constants.add(name)
        else:
            scope.constants.discard(name)

    def resolve(self, scope_id: int, name: str) -> Optional[Scope]:
        """Return the nearest scope on the chain that binds `name`, or None."""
        current: Optional[int] = scope_id
        while current is not None:
            scope = self._scopes[current]
            if name in scope.bindings:
                return scope
            current = scope.parent_id
        return None

    def lookup(self, scope_id: int, name: str) -> Any:
        """Value of `name`; raises KeyError when no scope on the chain binds it."""
        scope = self.resolve(scope_id, name)
        if scope is None:
            raise KeyError(name)
        return scope.bindings[name]

    def has(self, scope_id: int, name: str) -> bool:
        return self.resolve(scope_id, name) is not None

    # ─────────────────────────────────────────────────────────
    #  Reclamation
    # ─────────────────────────────────────────────────────────

    def maybe_sweep(self, roots: Iterable[int]) -> int:
        """Sweep once the arena has grown past the current threshold."""
        if len(self._scopes) < self._next_sweep:
            return 0
        freed = self.sweep(roots)
        self._next_sweep = max(self.sweep_threshold, 2 * len(self._scopes))
        return freed

    def sweep(self, roots: Iterable[int]) -> int:
        """Free every scope unreachable from `roots`. Returns the number freed.

        A scope is reachable when it is a root, the parent of a reachable
        scope, or captured by a value bound in a reachable scope.
        """
        marked: set[int] = set()
        seen_values: set[int] = set()
        pending = [scope_id for scope_id in roots if scope_id in self._scopes]

        while pending:
            scope_id = pending.pop()
            if scope_id in marked or scope_id not in self._scopes:
                continue
            marked.add(scope_id)
            scope = self._scopes[scope_id]
            if scope.parent_id is not None:
                pending.append(scope.parent_id)
            for value in scope.bindings.values():
                pending.extend(iter_scope_refs(value, seen_values))

        dead = [scope_id for scope_id in self._scopes if scope_id not in marked]
        for scope_id in dead:
            del self._scopes[scope_id]
        if dead:
            logger.debug("Swept %d scopes, %d live", len(dead), len(self._scopes))
        return len(dead)

    def clear(self):
        self._scopes.clear()
        self._next_sweep = self.sweep_threshold
