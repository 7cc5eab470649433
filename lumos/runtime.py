"""
Lumos Runtime
=============
The facade outer layers talk to. Chains Lexer → Parser → Interpreter for
`execute` and Lexer → Parser → Renderer for `compile`.

No method here raises: every failure comes back as a result object with
`success=False` and a formatted error message.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .builtins import BuiltinRegistry, create_default_registry
from .config import LumosConfig
from .errors import LumosError
from .interpreter import STACK_EXHAUSTED, Interpreter, recursion_limit
from .lexer import tokenize
from .parser import Program, dump_ast, parse
from .renderer import Renderer
from .scope import ScopeArena
from .targets import list_targets

logger = logging.getLogger(__name__)

VERSION = "2.1.0"


@dataclass
class ExecutionResult:
    """Outcome of `Runtime.execute`. `output` holds every printed line, even on failure."""
    success: bool
    output: str = ""
    error: Optional[str] = None
    value: Any = None


@dataclass
class CompileResult:
    success: bool
    compiled: Optional[str] = None
    target: str = ""
    error: Optional[str] = None


@dataclass
class AnalysisResult:
    success: bool
    token_count: int = 0
    ast_dump: Optional[str] = None
    error: Optional[str] = None


class Runtime:
    """
    Lumos engine entry point.

    Usage:
        runtime = Runtime()
        result = runtime.execute('print("hello")')
        result.output   # "hello"

    Top-level bindings persist across `execute` calls on one Runtime;
    `reset()` starts a fresh global scope.
    """

    version = VERSION

    def __init__(self, config: LumosConfig | None = None,
                 builtins: BuiltinRegistry | None = None):
        self.config = config or LumosConfig()
        self.builtins = builtins or create_default_registry()
        recursion_limit(self.config.recursion_limit)
        self.reset()

    def reset(self):
        """Discard every global binding and start from the built-ins alone."""
        self.arena = ScopeArena(self.config.sweep_threshold)
        self.root_scope = self.arena.create()
        self.builtins.install(self.arena, self.root_scope)
        self.global_scope = self.arena.create(self.root_scope)
        self.interpreter = Interpreter(
            self.builtins, self.arena,
            output_fn=print if self.config.echo_output else None,
        )

    def _parse(self, source: str) -> tuple[int, Program]:
        tokens = tokenize(source)
        return len(tokens), parse(tokens)

    def execute(self, source: str) -> ExecutionResult:
        """Evaluate `source` in this runtime's global scope."""
        try:
            _, program = self._parse(source)
        except LumosError as exc:
            logger.debug("execute rejected source: %s", exc.format())
            return ExecutionResult(success=False, error=exc.format())

        result = self.interpreter.evaluate(program, self.global_scope)
        if result.error is not None:
            return ExecutionResult(success=False, output=result.output, error=result.error.format())
        return ExecutionResult(success=True, output=result.output, value=result.value)

    def compile(self, source: str, target: str | None = None) -> CompileResult:
        """Render `source` as `target` code (default from config)."""
        if target is None:
            target = self.config.default_target
        try:
            renderer = Renderer(target, self.config.indent_width)
            _, program = self._parse(source)
            compiled = renderer.render(program)
        except LumosError as exc:
            return CompileResult(success=False, target=target, error=exc.format())
        except RecursionError:
            return CompileResult(success=False, target=target, error=STACK_EXHAUSTED)
        return CompileResult(success=True, compiled=compiled, target=target)

    def analyze(self, source: str) -> AnalysisResult:
        """Token count and JSON AST dump of `source`."""
        try:
            token_count, program = self._parse(source)
            ast_dump = dump_ast(program)
        except LumosError as exc:
            return AnalysisResult(success=False, error=exc.format())
        except RecursionError:
            return AnalysisResult(success=False, error=STACK_EXHAUSTED)
        return AnalysisResult(success=True, token_count=token_count, ast_dump=ast_dump)

    def list_targets(self) -> list[str]:
        return list_targets()
