"""
Lumos Built-ins
===============
Host-provided primitives. A BuiltinRegistry is built once, handed to the
Runtime, and installed into the root scope of each evaluation context.

Every numeric result is a float, matching the Lumos number model.
"""
from __future__ import annotations

import math
import random
from typing import Any, Callable, TYPE_CHECKING

from .errors import LumosRuntimeError
from .values import (
    UNDEFINED, BuiltinFunction, Instance, format_value, is_number, type_name,
)

if TYPE_CHECKING:
    from .scope import ScopeArena


# ─────────────────────────────────────────────────────────────
#  Registry
# ─────────────────────────────────────────────────────────────

class BuiltinRegistry:
    """Maps global names to built-in functions and constant objects."""

    def __init__(self):
        self._entries: dict[str, Any] = {}

    def register(self, name: str, fn: Callable[..., Any], needs_context: bool = False):
        """Register a host function under `name`."""
        self._entries[name] = BuiltinFunction(name, fn, needs_context)

    def register_value(self, name: str, value: Any):
        """Register a constant, e.g. the Math object."""
        self._entries[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def get(self, name: str) -> Any:
        return self._entries[name]

    def names(self) -> list[str]:
        return sorted(self._entries)

    def install(self, arena: ScopeArena, scope_id: int):
        """Declare every registered entry in the given scope."""
        for name, value in self._entries.items():
            arena.declare(scope_id, name, value)


# ─────────────────────────────────────────────────────────────
#  Primitive Implementations
# ─────────────────────────────────────────────────────────────

def _number_arg(name: str, value: Any) -> float:
    if not is_number(value):
        raise LumosRuntimeError(f"{name}() expects a number, got {type_name(value)}")
    return float(value)


def _print(interp, *args):
    interp.write(" ".join(format_value(arg) for arg in args))
    return UNDEFINED


def _len(value=UNDEFINED):
    if isinstance(value, (str, list, dict)):
        return float(len(value))
    if isinstance(value, Instance):
        return float(len(value.fields))
    raise LumosRuntimeError(f"len() expects a string, array or object, got {type_name(value)}")


def _type(value=UNDEFINED):
    return type_name(value)


def _str(value=UNDEFINED):
    return format_value(value)


def _parse_number(text: str, integral: bool) -> float:
    """Parse the longest numeric prefix of `text`; NaN when there is none."""
    text = text.strip()
    end = 0
    if end < len(text) and text[end] in "+-":
        end += 1
    digits_start = end
    while end < len(text) and text[end] in "0123456789":
        end += 1
    if not integral and end < len(text) and text[end] == ".":
        end += 1
        while end < len(text) and text[end] in "0123456789":
            end += 1
    candidate = text[:end]
    if end == digits_start or candidate in ("+.", "-.", "."):
        return math.nan
    return float(candidate)


def _int(value=UNDEFINED):
    if is_number(value):
        if math.isnan(value) or math.isinf(value):
            return math.nan
        return float(math.trunc(value))
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, str):
        return _parse_number(value, integral=True)
    return math.nan


def _float(value=UNDEFINED):
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        return _parse_number(value, integral=False)
    return math.nan


def _range(start=UNDEFINED, end=UNDEFINED, step=UNDEFINED):
    """range(end) or range(start, end[, step]); end is exclusive."""
    if end is UNDEFINED:
        start, end = 0.0, start
    lo = _number_arg("range", start)
    hi = _number_arg("range", end)
    inc = 1.0 if step is UNDEFINED else _number_arg("range", step)
    if inc == 0:
        raise LumosRuntimeError("range() step must not be zero")
    items = []
    current = lo
    while (inc > 0 and current < hi) or (inc < 0 and current > hi):
        items.append(current)
        current += inc
    return items


def _abs(value=UNDEFINED):
    return abs(_number_arg("abs", value))


def _sqrt(value=UNDEFINED):
    x = _number_arg("sqrt", value)
    return math.sqrt(x) if x >= 0 else math.nan


def _pow(base=UNDEFINED, exponent=UNDEFINED):
    x = _number_arg("pow", base)
    y = _number_arg("pow", exponent)
    try:
        result = math.pow(x, y)
    except OverflowError:
        return math.inf
    except ValueError:
        return math.nan
    return result


def _floor(value=UNDEFINED):
    x = _number_arg("floor", value)
    return x if math.isinf(x) or math.isnan(x) else float(math.floor(x))


def _ceil(value=UNDEFINED):
    x = _number_arg("ceil", value)
    return x if math.isinf(x) or math.isnan(x) else float(math.ceil(x))


def _round(value=UNDEFINED):
    # Halves round toward +Infinity.
    x = _number_arg("round", value)
    return x if math.isinf(x) or math.isnan(x) else float(math.floor(x + 0.5))


def _trig(name: str, fn: Callable[[float], float]) -> Callable[..., float]:
    def trig(value=UNDEFINED):
        x = _number_arg(name, value)
        return math.nan if math.isinf(x) or math.isnan(x) else fn(x)
    return trig


def _random():
    return random.random()


def _extreme(name: str, pick: Callable[..., float], empty: float) -> Callable[..., float]:
    def extreme(*args):
        if len(args) == 1 and isinstance(args[0], list):
            args = tuple(args[0])
        numbers = [_number_arg(name, arg) for arg in args]
        if not numbers:
            return empty
        if any(math.isnan(n) for n in numbers):
            return math.nan
        return pick(numbers)
    return extreme


MATH_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "abs": _abs,
    "sqrt": _sqrt,
    "pow": _pow,
    "floor": _floor,
    "ceil": _ceil,
    "round": _round,
    "random": _random,
    "sin": _trig("sin", math.sin),
    "cos": _trig("cos", math.cos),
    "tan": _trig("tan", math.tan),
    "min": _extreme("min", min, math.inf),
    "max": _extreme("max", max, -math.inf),
}


def create_default_registry() -> BuiltinRegistry:
    """The standard Lumos global environment."""
    registry = BuiltinRegistry()
    registry.register("print", _print, needs_context=True)
    registry.register("len", _len)
    registry.register("type", _type)
    registry.register("str", _str)
    registry.register("int", _int)
    registry.register("float", _float)
    registry.register("range", _range)
    for name, fn in MATH_FUNCTIONS.items():
        registry.register(name, fn)

    math_object: dict[str, Any] = {"PI": math.pi, "E": math.e}
    for name, fn in MATH_FUNCTIONS.items():
        math_object[name] = BuiltinFunction(f"Math.{name}", fn)
    registry.register_value("Math", math_object)
    return registry
