"""
Lumos Values
============
Runtime value types produced by the Interpreter, plus the helpers that
give them Lumos semantics: truthiness, strict equality, type names and
display formatting.

Numbers are always Python floats. `null` is None; `undefined` is the
UNDEFINED sentinel.
"""
import json
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from .parser import ASTNode, BlockStatement, FunctionDeclaration


class _Undefined:
    """The `undefined` sentinel. There is exactly one instance."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "undefined"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


@dataclass(eq=False)
class BuiltinFunction:
    """A host-provided primitive.

    When `needs_context` is set, the interpreter is passed as the first argument.
    """
    name: str
    fn: Callable[..., Any]
    needs_context: bool = False

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"


@dataclass(eq=False)
class UserFunction:
    """A user function closed over the scope active at its declaration."""
    name: str
    params: list[str]
    body: BlockStatement
    scope_id: int

    def __repr__(self) -> str:
        return f"<function {self.name}>"


@dataclass(eq=False)
class ClassDescriptor:
    """Everything `new` needs to materialize an instance."""
    name: str
    methods: dict[str, FunctionDeclaration] = field(default_factory=dict)
    fields: dict[str, Optional[ASTNode]] = field(default_factory=dict)
    scope_id: int = 0
    superclass: Optional["ClassDescriptor"] = None

    def lineage(self) -> list["ClassDescriptor"]:
        """Base-most class first, this class last."""
        chain = []
        current: Optional[ClassDescriptor] = self
        while current is not None:
            chain.append(current)
            current = current.superclass
        chain.reverse()
        return chain

    def __repr__(self) -> str:
        return f"<class {self.name}>"


@dataclass(eq=False)
class Instance:
    """A record produced by `new`: field values and per-instance bound methods."""
    class_name: str
    fields: dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        return f"<{self.class_name} instance>"


@dataclass(eq=False)
class BoundMethod:
    """A method wrapper that binds `this` to one instance."""
    function: UserFunction
    instance: Instance

    def __repr__(self) -> str:
        return f"<method {self.instance.class_name}.{self.function.name}>"


CALLABLE_TYPES = (BuiltinFunction, UserFunction, BoundMethod)


# ─────────────────────────────────────────────────────────────
#  Semantics
# ─────────────────────────────────────────────────────────────

def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value: Any) -> bool:
    """null/undefined false; booleans as-is; 0 false; "" false; everything else true."""
    if value is None or value is UNDEFINED:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    if isinstance(value, str):
        return len(value) > 0
    return True


def strict_equals(a: Any, b: Any) -> bool:
    """Equality without coercion. Arrays, objects and instances compare by identity."""
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    if a is None or a is UNDEFINED or b is None or b is UNDEFINED:
        return a is b
    return a is b


def type_name(value: Any) -> str:
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, CALLABLE_TYPES):
        return "function"
    if isinstance(value, ClassDescriptor):
        return "class"
    return "object"


def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


def _to_json(value: Any, seen: set[int]) -> Any:
    """Convert a runtime value into plain JSON data, the way JSON.stringify would."""
    if value is None or value is UNDEFINED:
        return None
    if isinstance(value, bool) or isinstance(value, str):
        return value
    if is_number(value):
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value) if value == int(value) else value
    if isinstance(value, (list, dict, Instance)):
        if id(value) in seen:
            return "[Circular]"
        seen = seen | {id(value)}
        if isinstance(value, list):
            return [_to_json(item, seen) for item in value]
        items = value.fields if isinstance(value, Instance) else value
        return {
            str(key): _to_json(item, seen)
            for key, item in items.items()
            if item is not UNDEFINED and not isinstance(item, CALLABLE_TYPES)
        }
    return None


def format_value(value: Any) -> str:
    """Format a value for display (print, string concatenation, str())."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if is_number(value):
        return format_number(value)
    if isinstance(value, (list, dict, Instance)):
        return json.dumps(_to_json(value, set()), separators=(",", ":"))
    return repr(value)


def iter_scope_refs(value: Any, seen: set[int]) -> Iterator[int]:
    """Yield the ids of every scope a value keeps alive.

    Walks containers, instances, bound methods and class lineages; `seen`
    guards against reference cycles.
    """
    if isinstance(value, (str, int, float, bool)) or value is None or value is UNDEFINED:
        return
    if id(value) in seen:
        return
    seen.add(id(value))

    if isinstance(value, UserFunction):
        yield value.scope_id
    elif isinstance(value, BoundMethod):
        yield value.function.scope_id
        yield from iter_scope_refs(value.instance, seen)
    elif isinstance(value, ClassDescriptor):
        yield value.scope_id
        if value.superclass is not None:
            yield from iter_scope_refs(value.superclass, seen)
    elif isinstance(value, Instance):
        for item in value.fields.values():
            yield from iter_scope_refs(item, seen)
    elif isinstance(value, list):
        for item in value:
            yield from iter_scope_refs(item, seen)
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_scope_refs(item, seen)
