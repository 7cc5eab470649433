"""
Lumos Interpreter
=================
Tree-walking evaluator for the AST produced by the Parser.

Statements return a Signal describing how control leaves them:

  - NORMAL    fell off the end, carrying the last value
  - RETURN    absorbed by the nearest call frame
  - BREAK     absorbed by the nearest loop
  - CONTINUE  absorbed by the nearest loop
  - RAISED    absorbed by the nearest try/catch, or reported at top level

Expressions fail by raising; `_execute` is the statement boundary that
turns those failures into RAISED signals.
"""
from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Optional

from .builtins import BuiltinRegistry
from .errors import LumosRuntimeError
from .parser import (
    ASTNode, Program, BlockStatement, VariableDeclaration, FunctionDeclaration,
    ClassDeclaration, IfStatement, WhileStatement, ForStatement, ReturnStatement,
    BreakStatement, ContinueStatement, ThrowStatement, TryStatement,
    ImportStatement, ExportStatement, ExpressionStatement, AssignmentExpression,
    BinaryExpression, LogicalExpression, UnaryExpression, CallExpression,
    MemberExpression, IndexExpression, NewExpression, Identifier, Literal,
    ArrayExpression, ObjectExpression, ThisExpression,
)
from .scope import ScopeArena
from .values import (
    UNDEFINED, BoundMethod, BuiltinFunction, ClassDescriptor, Instance,
    UserFunction, format_value, is_number, is_truthy, strict_equals, type_name,
)

logger = logging.getLogger(__name__)

STACK_EXHAUSTED = "Maximum call stack size exceeded"


# ─────────────────────────────────────────────────────────────
#  Signals
# ─────────────────────────────────────────────────────────────

class SignalKind(Enum):
    NORMAL   = auto()
    RETURN   = auto()
    BREAK    = auto()
    CONTINUE = auto()
    RAISED   = auto()


@dataclass(frozen=True)
class Raised:
    """A raised Lumos error: the value `catch` binds and the error reported if uncaught."""
    value: Any
    error: LumosRuntimeError

    @classmethod
    def from_error(cls, error: LumosRuntimeError) -> "Raised":
        return cls(error.message, error)


@dataclass(frozen=True)
class Signal:
    """How control left a statement."""
    kind: SignalKind
    value: Any = UNDEFINED

    @property
    def is_normal(self) -> bool:
        return self.kind is SignalKind.NORMAL

    @classmethod
    def normal(cls, value: Any = UNDEFINED) -> "Signal":
        return cls(SignalKind.NORMAL, value)

    @classmethod
    def raised(cls, raised: Raised) -> "Signal":
        return cls(SignalKind.RAISED, raised)


NORMAL = Signal(SignalKind.NORMAL)
BREAK = Signal(SignalKind.BREAK)
CONTINUE = Signal(SignalKind.CONTINUE)


class RaisedException(Exception):
    """Carries a RAISED signal out of a call frame, up to the next statement boundary."""

    def __init__(self, raised: Raised):
        super().__init__(raised.error.message)
        self.raised = raised


@dataclass
class EvaluationResult:
    """Outcome of one top-level evaluation."""
    value: Any = UNDEFINED
    output: str = ""
    error: Optional[LumosRuntimeError] = None

    @property
    def success(self) -> bool:
        return self.error is None


_NO_THIS = object()


class Interpreter:
    """
    Tree-walking interpreter for Lumos programs.

    Usage:
        arena = ScopeArena()
        root = arena.create()
        registry = create_default_registry()
        registry.install(arena, root)
        interp = Interpreter(registry, arena)
        result = interp.evaluate(program, arena.create(root))
    """

    def __init__(self, builtins: BuiltinRegistry, arena: ScopeArena,
                 output_fn: Callable[[str], None] | None = None):
        self.builtins = builtins
        self.arena = arena
        self.output_fn = output_fn
        self.output: list[str] = []
        self.imports: list[tuple[list[str], str]] = []
        self._frames: list[int] = []

    def write(self, text: str):
        """Append a line to the output buffer (used by `print`)."""
        self.output.append(text)
        if self.output_fn is not None:
            self.output_fn(text)

    def evaluate(self, program: Program, global_scope_id: int) -> EvaluationResult:
        """Run every top-level statement in `global_scope_id`."""
        self.output = []
        self._frames = [global_scope_id]
        result = EvaluationResult()

        for statement in program.body:
            signal = self._execute(statement, global_scope_id)
            match signal.kind:
                case SignalKind.NORMAL:
                    result.value = signal.value
                case SignalKind.RETURN:
                    result.value = signal.value
                    break
                case SignalKind.RAISED:
                    result.error = signal.value.error
                    break
                case SignalKind.BREAK | SignalKind.CONTINUE:
                    result.error = self._stray_loop_signal(signal, statement)
                    break
            freed = self.arena.maybe_sweep(self._frames)
            if freed:
                logger.debug("Reclaimed %d scopes after line %d", freed, statement.line)

        self._frames = []
        result.output = "\n".join(self.output)
        if result.error is not None:
            logger.debug("Evaluation failed: %s", result.error.format())
        return result

    # ─────────────────────────────────────────────────────────
    #  Statement Boundary
    # ─────────────────────────────────────────────────────────

    def _execute(self, node: ASTNode, scope_id: int) -> Signal:
        """Execute one statement, converting expression failures into RAISED."""
        method = getattr(self, f"_exec_{node.node_type.lower()}", None)
        try:
            if method is None:
                raise LumosRuntimeError(f"Cannot execute {node.node_type}",
                                        line=node.line, column=node.col)
            return method(node, scope_id)
        except LumosRuntimeError as exc:
            if exc.line is None:
                exc.line, exc.column = node.line, node.col
            return Signal.raised(Raised.from_error(exc))
        except RaisedException as exc:
            return Signal.raised(exc.raised)
        except RecursionError:
            error = LumosRuntimeError(STACK_EXHAUSTED, line=node.line, column=node.col)
            return Signal.raised(Raised.from_error(error))

    def _execute_body(self, statements: list[ASTNode], scope_id: int) -> Signal:
        """Run statements in order until one completes abnormally."""
        signal = NORMAL
        for statement in statements:
            signal = self._execute(statement, scope_id)
            if not signal.is_normal:
                return signal
        return signal

    def _stray_loop_signal(self, signal: Signal, node: ASTNode) -> LumosRuntimeError:
        keyword = "break" if signal.kind is SignalKind.BREAK else "continue"
        return LumosRuntimeError(f"'{keyword}' outside of a loop", line=node.line, column=node.col)

    # ─────────────────────────────────────────────────────────
    #  Statements
    # ─────────────────────────────────────────────────────────

    def _exec_blockstatement(self, node: BlockStatement, scope_id: int) -> Signal:
        block_scope = self.arena.create(scope_id)
        try:
            return self._execute_body(node.body, block_scope)
        finally:
            self.arena.release(block_scope)

    def _exec_expressionstatement(self, node: ExpressionStatement, scope_id: int) -> Signal:
        return Signal.normal(self._evaluate(node.expression, scope_id))

    def _exec_variabledeclaration(self, node: VariableDeclaration, scope_id: int) -> Signal:
        value = UNDEFINED if node.init is None else self._evaluate(node.init, scope_id)
        self.arena.declare(scope_id, node.name, value, constant=node.kind == "const")
        return Signal.normal(value)

    def _exec_functiondeclaration(self, node: FunctionDeclaration, scope_id: int) -> Signal:
        function = UserFunction(node.name, node.params, node.body, scope_id)
        self.arena.pin(scope_id)
        self.arena.declare(scope_id, node.name, function)
        return Signal.normal(function)

    def _exec_classdeclaration(self, node: ClassDeclaration, scope_id: int) -> Signal:
        superclass = None
        if node.superclass is not None:
            superclass = self._lookup_class(node.superclass, scope_id, node)
        descriptor = ClassDescriptor(
            name=node.name,
            methods={method.name: method for method in node.methods},
            fields={field_node.name: field_node.init for field_node in node.fields},
            scope_id=scope_id,
            superclass=superclass,
        )
        self.arena.pin(scope_id)
        self.arena.declare(scope_id, node.name, descriptor)
        return Signal.normal(descriptor)

    def _exec_ifstatement(self, node: IfStatement, scope_id: int) -> Signal:
        if is_truthy(self._evaluate(node.test, scope_id)):
            return self._execute(node.consequent, scope_id)
        if node.alternate is not None:
            return self._execute(node.alternate, scope_id)
        return NORMAL

    def _exec_whilestatement(self, node: WhileStatement, scope_id: int) -> Signal:
        while is_truthy(self._evaluate(node.test, scope_id)):
            signal = self._execute(node.body, scope_id)
            match signal.kind:
                case SignalKind.BREAK:
                    break
                case SignalKind.RETURN | SignalKind.RAISED:
                    return signal
        return NORMAL

    def _exec_forstatement(self, node: ForStatement, scope_id: int) -> Signal:
        start = self._evaluate(node.start, scope_id)
        end = self._evaluate(node.end, scope_id)
        if not is_number(start) or not is_number(end):
            raise LumosRuntimeError(
                f"for-loop bounds must be numbers, got {type_name(start)} and {type_name(end)}",
                line=node.line, column=node.col,
            )

        counter = float(start)
        while counter <= end:
            iteration_scope = self.arena.create(scope_id)
            try:
                self.arena.declare(iteration_scope, node.iterator, counter)
                signal = self._execute_body(node.body.body, iteration_scope)
            finally:
                self.arena.release(iteration_scope)
            match signal.kind:
                case SignalKind.BREAK:
                    break
                case SignalKind.RETURN | SignalKind.RAISED:
                    return signal
            counter += 1
        return NORMAL

    def _exec_returnstatement(self, node: ReturnStatement, scope_id: int) -> Signal:
        value = UNDEFINED if node.argument is None else self._evaluate(node.argument, scope_id)
        return Signal(SignalKind.RETURN, value)

    def _exec_breakstatement(self, node: BreakStatement, scope_id: int) -> Signal:
        return BREAK

    def _exec_continuestatement(self, node: ContinueStatement, scope_id: int) -> Signal:
        return CONTINUE

    def _exec_throwstatement(self, node: ThrowStatement, scope_id: int) -> Signal:
        value = self._evaluate(node.argument, scope_id)
        error = LumosRuntimeError(f"Uncaught {format_value(value)}", line=node.line, column=node.col)
        return Signal.raised(Raised(value, error))

    def _exec_trystatement(self, node: TryStatement, scope_id: int) -> Signal:
        signal = self._execute(node.block, scope_id)

        if signal.kind is SignalKind.RAISED and node.handler is not None:
            catch_scope = self.arena.create(scope_id)
            try:
                self.arena.declare(catch_scope, node.handler_param, signal.value.value)
                signal = self._execute_body(node.handler.body, catch_scope)
            finally:
                self.arena.release(catch_scope)

        if node.finalizer is not None:
            final_signal = self._execute(node.finalizer, scope_id)
            if not final_signal.is_normal:
                return final_signal
        return signal

    def _exec_importstatement(self, node: ImportStatement, scope_id: int) -> Signal:
        self.imports.append((list(node.specifiers), node.source))
        logger.info("Recorded import of %s from %r", ", ".join(node.specifiers), node.source)
        return NORMAL

    def _exec_exportstatement(self, node: ExportStatement, scope_id: int) -> Signal:
        return self._execute(node.declaration, scope_id)

    # ─────────────────────────────────────────────────────────
    #  Expressions
    # ─────────────────────────────────────────────────────────

    def _evaluate(self, node: ASTNode, scope_id: int) -> Any:
        method = getattr(self, f"_eval_{node.node_type.lower()}", None)
        if method is None:
            raise LumosRuntimeError(f"Cannot evaluate {node.node_type}",
                                    line=node.line, column=node.col)
        return method(node, scope_id)

    def _eval_literal(self, node: Literal, scope_id: int) -> Any:
        if node.data_type == "undefined":
            return UNDEFINED
        return node.value

    def _eval_identifier(self, node: Identifier, scope_id: int) -> Any:
        try:
            return self.arena.lookup(scope_id, node.name)
        except KeyError:
            raise LumosRuntimeError(f"Undefined variable: {node.name}",
                                    line=node.line, column=node.col) from None

    def _eval_thisexpression(self, node: ThisExpression, scope_id: int) -> Any:
        try:
            return self.arena.lookup(scope_id, "this")
        except KeyError:
            raise LumosRuntimeError("'this' used outside of a method",
                                    line=node.line, column=node.col) from None

    def _eval_arrayexpression(self, node: ArrayExpression, scope_id: int) -> list:
        return [self._evaluate(element, scope_id) for element in node.elements]

    def _eval_objectexpression(self, node: ObjectExpression, scope_id: int) -> dict:
        return {key: self._evaluate(value, scope_id) for key, value in node.properties}

    def _eval_binaryexpression(self, node: BinaryExpression, scope_id: int) -> Any:
        left = self._evaluate(node.left, scope_id)
        right = self._evaluate(node.right, scope_id)
        return self._binary_op(node.operator, left, right, node)

    def _eval_logicalexpression(self, node: LogicalExpression, scope_id: int) -> Any:
        left = self._evaluate(node.left, scope_id)
        if node.operator == "&&":
            return self._evaluate(node.right, scope_id) if is_truthy(left) else left
        if node.operator == "||":
            return left if is_truthy(left) else self._evaluate(node.right, scope_id)
        raise LumosRuntimeError(f"Unknown operator: {node.operator}", line=node.line, column=node.col)

    def _eval_unaryexpression(self, node: UnaryExpression, scope_id: int) -> Any:
        match node.operator:
            case "!":
                return not is_truthy(self._evaluate(node.argument, scope_id))
            case "-":
                value = self._evaluate(node.argument, scope_id)
                if not is_number(value):
                    raise LumosRuntimeError(f"Cannot negate {type_name(value)}",
                                            line=node.line, column=node.col)
                return -float(value)
            case "++" | "--":
                get, put = self._reference(node.argument, scope_id)
                old = get()
                if not is_number(old):
                    raise LumosRuntimeError(f"Cannot apply {node.operator} to {type_name(old)}",
                                            line=node.line, column=node.col)
                new = float(old) + (1.0 if node.operator == "++" else -1.0)
                put(new)
                return new if node.prefix else float(old)
        raise LumosRuntimeError(f"Unknown operator: {node.operator}", line=node.line, column=node.col)

    def _eval_assignmentexpression(self, node: AssignmentExpression, scope_id: int) -> Any:
        get, put = self._reference(node.target, scope_id)
        value = self._evaluate(node.value, scope_id)
        if node.operator != "=":
            value = self._binary_op(node.operator[0], get(), value, node)
        put(value)
        return value

    def _eval_callexpression(self, node: CallExpression, scope_id: int) -> Any:
        callee = self._evaluate(node.callee, scope_id)
        args = [self._evaluate(arg, scope_id) for arg in node.arguments]
        return self._call(callee, args, node)

    def _eval_memberexpression(self, node: MemberExpression, scope_id: int) -> Any:
        obj = self._evaluate(node.obj, scope_id)
        return self._get_member(obj, node.property, node)

    def _eval_indexexpression(self, node: IndexExpression, scope_id: int) -> Any:
        obj = self._evaluate(node.obj, scope_id)
        index = self._evaluate(node.index, scope_id)
        return self._get_index(obj, index, node)

    def _eval_newexpression(self, node: NewExpression, scope_id: int) -> Instance:
        descriptor = self._lookup_class(node.class_name, scope_id, node)
        args = [self._evaluate(arg, scope_id) for arg in node.arguments]
        return self._instantiate(descriptor, args, node)

    # ─────────────────────────────────────────────────────────
    #  Operators
    # ─────────────────────────────────────────────────────────

    def _binary_op(self, op: str, left: Any, right: Any, node: ASTNode) -> Any:
        match op:
            case "+":
                if isinstance(left, str) or isinstance(right, str):
                    return format_value(left) + format_value(right)
                self._require_numbers(op, left, right, node)
                return float(left) + float(right)
            case "-":
                self._require_numbers(op, left, right, node)
                return float(left) - float(right)
            case "*":
                self._require_numbers(op, left, right, node)
                return float(left) * float(right)
            case "/":
                self._require_numbers(op, left, right, node)
                return _divide(float(left), float(right))
            case "%":
                self._require_numbers(op, left, right, node)
                return _modulo(float(left), float(right))
            case "==":
                return strict_equals(left, right)
            case "!=":
                return not strict_equals(left, right)
            case "<" | ">" | "<=" | ">=":
                return self._compare(op, left, right, node)
        raise LumosRuntimeError(f"Unknown operator: {op}", line=node.line, column=node.col)

    def _require_numbers(self, op: str, left: Any, right: Any, node: ASTNode):
        if not is_number(left) or not is_number(right):
            raise LumosRuntimeError(
                f"Operator '{op}' expects numbers, got {type_name(left)} and {type_name(right)}",
                line=node.line, column=node.col,
            )

    def _compare(self, op: str, left: Any, right: Any, node: ASTNode) -> bool:
        comparable = (is_number(left) and is_number(right)) or (
            isinstance(left, str) and isinstance(right, str))
        if not comparable:
            raise LumosRuntimeError(
                f"Cannot compare {type_name(left)} with {type_name(right)}",
                line=node.line, column=node.col,
            )
        match op:
            case "<":
                return left < right
            case ">":
                return left > right
            case "<=":
                return left <= right
            case _:
                return left >= right

    # ─────────────────────────────────────────────────────────
    #  References (assignment targets)
    # ─────────────────────────────────────────────────────────

    def _reference(self, target: ASTNode, scope_id: int) -> tuple[Callable[[], Any], Callable[[Any], None]]:
        """Resolve an assignable expression into a getter/setter pair.

        The object and index of a member or index target are evaluated once.
        """
        if isinstance(target, Identifier):
            return (
                lambda: self._eval_identifier(target, scope_id),
                lambda value: self._assign_variable(target, scope_id, value),
            )
        if isinstance(target, MemberExpression):
            obj = self._evaluate(target.obj, scope_id)
            return (
                lambda: self._get_member(obj, target.property, target),
                lambda value: self._set_member(obj, target.property, value, target),
            )
        if isinstance(target, IndexExpression):
            obj = self._evaluate(target.obj, scope_id)
            index = self._evaluate(target.index, scope_id)
            return (
                lambda: self._get_index(obj, index, target),
                lambda value: self._set_index(obj, index, value, target),
            )
        raise LumosRuntimeError(f"Cannot assign to {target.node_type}",
                                line=target.line, column=target.col)

    def _assign_variable(self, target: Identifier, scope_id: int, value: Any):
        scope = self.arena.resolve(scope_id, target.name)
        if scope is None:
            raise LumosRuntimeError(f"Cannot assign to undeclared variable: {target.name}",
                                    line=target.line, column=target.col)
        if target.name in scope.constants:
            raise LumosRuntimeError(f"Assignment to constant variable: {target.name}",
                                    line=target.line, column=target.col)
        scope.bindings[target.name] = value

    # ─────────────────────────────────────────────────────────
    #  Members & Indexing
    # ─────────────────────────────────────────────────────────

    def _get_member(self, obj: Any, name: str, node: ASTNode) -> Any:
        if obj is None or obj is UNDEFINED:
            raise LumosRuntimeError(f"Cannot read property '{name}' of {format_value(obj)}",
                                    line=node.line, column=node.col)
        if isinstance(obj, Instance):
            return obj.fields.get(name, UNDEFINED)
        if isinstance(obj, dict):
            return obj.get(name, UNDEFINED)
        if isinstance(obj, list):
            return self._array_member(obj, name)
        if isinstance(obj, str):
            return self._string_member(obj, name)
        return UNDEFINED

    def _set_member(self, obj: Any, name: str, value: Any, node: ASTNode):
        if isinstance(obj, Instance):
            obj.fields[name] = value
        elif isinstance(obj, dict):
            obj[name] = value
        else:
            raise LumosRuntimeError(f"Cannot set property '{name}' on {type_name(obj)}",
                                    line=node.line, column=node.col)

    def _array_member(self, items: list, name: str) -> Any:
        match name:
            case "length":
                return float(len(items))
            case "push":
                def push(*values):
                    items.extend(values)
                    return float(len(items))
                return BuiltinFunction("push", push)
            case "pop":
                return BuiltinFunction("pop", lambda: items.pop() if items else UNDEFINED)
            case "join":
                def join(separator=","):
                    return format_value(separator).join(
                        "" if item is None or item is UNDEFINED else format_value(item)
                        for item in items
                    )
                return BuiltinFunction("join", join)
            case "includes":
                return BuiltinFunction(
                    "includes", lambda value=UNDEFINED: any(strict_equals(item, value) for item in items))
        return UNDEFINED

    def _string_member(self, text: str, name: str) -> Any:
        match name:
            case "length":
                return float(len(text))
            case "toUpperCase":
                return BuiltinFunction("toUpperCase", lambda: text.upper())
            case "toLowerCase":
                return BuiltinFunction("toLowerCase", lambda: text.lower())
            case "includes":
                return BuiltinFunction("includes", lambda value=UNDEFINED: format_value(value) in text)
        return UNDEFINED

    def _get_index(self, obj: Any, index: Any, node: ASTNode) -> Any:
        if isinstance(obj, (list, str)):
            position = _array_position(index)
            if position is None or position >= len(obj):
                return UNDEFINED
            return obj[position]
        if isinstance(obj, (dict, Instance)):
            return self._get_member(obj, _property_key(index), node)
        if obj is None or obj is UNDEFINED:
            raise LumosRuntimeError(f"Cannot index {format_value(obj)}",
                                    line=node.line, column=node.col)
        return UNDEFINED

    def _set_index(self, obj: Any, index: Any, value: Any, node: ASTNode):
        if isinstance(obj, list):
            position = _array_position(index)
            if position is None or position >= len(obj):
                raise LumosRuntimeError(f"Array index out of range: {format_value(index)}",
                                        line=node.line, column=node.col)
            obj[position] = value
        elif isinstance(obj, (dict, Instance)):
            self._set_member(obj, _property_key(index), value, node)
        else:
            raise LumosRuntimeError(f"Cannot assign by index on {type_name(obj)}",
                                    line=node.line, column=node.col)

    # ─────────────────────────────────────────────────────────
    #  Calls & Classes
    # ─────────────────────────────────────────────────────────

    def _call(self, callee: Any, args: list[Any], node: ASTNode) -> Any:
        if isinstance(callee, BuiltinFunction):
            return self._call_builtin(callee, args, node)
        if isinstance(callee, BoundMethod):
            return self._invoke(callee.function, args, node, this=callee.instance)
        if isinstance(callee, UserFunction):
            return self._invoke(callee, args, node)
        raise LumosRuntimeError(f"{format_value(callee)} is not a function",
                                line=node.line, column=node.col)

    def _call_builtin(self, builtin: BuiltinFunction, args: list[Any], node: ASTNode) -> Any:
        try:
            if builtin.needs_context:
                return builtin.fn(self, *args)
            return builtin.fn(*args)
        except TypeError as exc:
            raise LumosRuntimeError(f"Bad arguments for {builtin.name}(): {exc}",
                                    line=node.line, column=node.col) from None
        except (ValueError, ArithmeticError) as exc:
            raise LumosRuntimeError(f"{builtin.name}() failed: {exc}",
                                    line=node.line, column=node.col) from None

    def _invoke(self, function: UserFunction, args: list[Any], node: ASTNode,
                this: Any = _NO_THIS) -> Any:
        """Run a user function in a fresh scope chained to its captured scope."""
        frame = self.arena.create(function.scope_id)
        self._frames.append(frame)
        try:
            if this is not _NO_THIS:
                self.arena.declare(frame, "this", this, constant=True)
            for position, param in enumerate(function.params):
                self.arena.declare(frame, param, args[position] if position < len(args) else UNDEFINED)
            signal = self._execute_body(function.body.body, frame)
        finally:
            self._frames.pop()
            self.arena.release(frame)

        match signal.kind:
            case SignalKind.RETURN:
                return signal.value
            case SignalKind.RAISED:
                raise RaisedException(signal.value)
            case SignalKind.BREAK | SignalKind.CONTINUE:
                raise self._stray_loop_signal(signal, node)
        return UNDEFINED

    def _lookup_class(self, name: str, scope_id: int, node: ASTNode) -> ClassDescriptor:
        try:
            value = self.arena.lookup(scope_id, name)
        except KeyError:
            value = None
        if not isinstance(value, ClassDescriptor):
            raise LumosRuntimeError(f"Class {name} not found", line=node.line, column=node.col)
        return value

    def _instantiate(self, descriptor: ClassDescriptor, args: list[Any], node: ASTNode) -> Instance:
        """Seed fields base-first, bind methods per instance, then run the constructor."""
        instance = Instance(descriptor.name)
        for cls in descriptor.lineage():
            for name, init in cls.fields.items():
                instance.fields[name] = self._field_default(cls, init, instance)
            for name, method in cls.methods.items():
                function = UserFunction(method.name, method.params, method.body, cls.scope_id)
                instance.fields[name] = BoundMethod(function, instance)

        constructor = instance.fields.get("constructor")
        if isinstance(constructor, BoundMethod):
            self._call(constructor, args, node)
        return instance

    def _field_default(self, cls: ClassDescriptor, init: Optional[ASTNode], instance: Instance) -> Any:
        if init is None:
            return UNDEFINED
        field_scope = self.arena.create(cls.scope_id)
        try:
            self.arena.declare(field_scope, "this", instance, constant=True)
            return self._evaluate(init, field_scope)
        finally:
            self.arena.release(field_scope)


# ─────────────────────────────────────────────────────────────
#  Numeric Helpers
# ─────────────────────────────────────────────────────────────

def _divide(left: float, right: float) -> float:
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _modulo(left: float, right: float) -> float:
    if right == 0 or math.isinf(left) or math.isnan(left) or math.isnan(right):
        return math.nan
    return math.fmod(left, right)


def _array_position(index: Any) -> Optional[int]:
    if not is_number(index) or math.isnan(index) or math.isinf(index):
        return None
    if index != int(index) or index < 0:
        return None
    return int(index)


def _property_key(index: Any) -> str:
    return index if isinstance(index, str) else format_value(index)


def recursion_limit(limit: int):
    """Raise the host recursion limit so deep Lumos call chains fit."""
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)
