# Lumos Engine
"""
Lumos: a small scripting language with a tree-walking interpreter and a
source-to-source compiler for nineteen target languages.
"""
from .errors import LumosError, LexError, ParseError, LumosRuntimeError, UnsupportedTargetError
from .lexer import Lexer, Token, TokenType, tokenize
from .parser import Parser, ASTNode, Program, dump_ast, parse
from .scope import Scope, ScopeArena
from .builtins import BuiltinRegistry, create_default_registry
from .interpreter import Interpreter, Signal, SignalKind, EvaluationResult
from .targets import TargetProfile, list_targets
from .renderer import Renderer
from .config import LumosConfig
from .runtime import VERSION, Runtime, ExecutionResult, CompileResult, AnalysisResult

__version__ = VERSION
__all__ = [
    "LumosError", "LexError", "ParseError", "LumosRuntimeError", "UnsupportedTargetError",
    "Lexer", "Token", "TokenType", "tokenize",
    "Parser", "ASTNode", "Program", "dump_ast", "parse",
    "Scope", "ScopeArena",
    "BuiltinRegistry", "create_default_registry",
    "Interpreter", "Signal", "SignalKind", "EvaluationResult",
    "TargetProfile", "list_targets",
    "Renderer",
    "LumosConfig",
    "Runtime", "ExecutionResult", "CompileResult", "AnalysisResult",
]
