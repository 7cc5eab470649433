"""
Lumos Parser
============
Recursive-descent parser that builds an Abstract Syntax Tree (AST)
from the token stream produced by the Lexer.

Expression precedence, lowest to highest:
    assignment → logical-or → logical-and → equality → relational
    → additive → multiplicative → unary → postfix → primary

Parsing stops at the first grammar violation with a ParseError.
"""
import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, NoReturn, Optional

from .errors import ParseError
from .lexer import Token, TokenType

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
#  AST Node Types
# ─────────────────────────────────────────────────────────────

@dataclass
class ASTNode:
    """Base class for all AST nodes."""
    node_type: str = ""
    line: int = 0
    col: int = 0


@dataclass
class Program(ASTNode):
    """Root node containing all top-level statements."""
    body: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "Program"


@dataclass
class BlockStatement(ASTNode):
    """A brace-delimited statement list."""
    body: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "BlockStatement"


@dataclass
class VariableDeclaration(ASTNode):
    """let/const/var name = init."""
    kind: str = "let"
    name: str = ""
    init: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "VariableDeclaration"


@dataclass
class FunctionDeclaration(ASTNode):
    """function name(params) { body }, also used for class methods."""
    name: str = ""
    params: list[str] = field(default_factory=list)
    body: Optional[BlockStatement] = None

    def __post_init__(self):
        self.node_type = "FunctionDeclaration"


@dataclass
class ClassDeclaration(ASTNode):
    """class Name [extends Base] { fields and methods }."""
    name: str = ""
    superclass: Optional[str] = None
    methods: list[FunctionDeclaration] = field(default_factory=list)
    fields: list[VariableDeclaration] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "ClassDeclaration"


@dataclass
class IfStatement(ASTNode):
    """if test { consequent } [else alternate]. The alternate is a block or a nested if."""
    test: Optional[ASTNode] = None
    consequent: Optional[BlockStatement] = None
    alternate: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "IfStatement"


@dataclass
class WhileStatement(ASTNode):
    test: Optional[ASTNode] = None
    body: Optional[BlockStatement] = None

    def __post_init__(self):
        self.node_type = "WhileStatement"


@dataclass
class ForStatement(ASTNode):
    """for iterator = start to end { body }, inclusive on both bounds."""
    iterator: str = ""
    start: Optional[ASTNode] = None
    end: Optional[ASTNode] = None
    body: Optional[BlockStatement] = None

    def __post_init__(self):
        self.node_type = "ForStatement"


@dataclass
class ReturnStatement(ASTNode):
    argument: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "ReturnStatement"


@dataclass
class BreakStatement(ASTNode):

    def __post_init__(self):
        self.node_type = "BreakStatement"


@dataclass
class ContinueStatement(ASTNode):

    def __post_init__(self):
        self.node_type = "ContinueStatement"


@dataclass
class ThrowStatement(ASTNode):
    argument: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "ThrowStatement"


@dataclass
class TryStatement(ASTNode):
    """try { block } [catch (param) { handler }] [finally { finalizer }]."""
    block: Optional[BlockStatement] = None
    handler_param: Optional[str] = None
    handler: Optional[BlockStatement] = None
    finalizer: Optional[BlockStatement] = None

    def __post_init__(self):
        self.node_type = "TryStatement"


@dataclass
class ImportStatement(ASTNode):
    """import a from "src" / import { a, b } from "src" (recorded, never resolved)."""
    specifiers: list[str] = field(default_factory=list)
    source: str = ""

    def __post_init__(self):
        self.node_type = "ImportStatement"


@dataclass
class ExportStatement(ASTNode):
    declaration: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "ExportStatement"


@dataclass
class ExpressionStatement(ASTNode):
    expression: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "ExpressionStatement"


@dataclass
class AssignmentExpression(ASTNode):
    """target op value, with op one of = += -= *= /=."""
    operator: str = "="
    target: Optional[ASTNode] = None
    value: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "AssignmentExpression"


@dataclass
class BinaryExpression(ASTNode):
    operator: str = ""
    left: Optional[ASTNode] = None
    right: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "BinaryExpression"


@dataclass
class LogicalExpression(ASTNode):
    """Short-circuit && / ||."""
    operator: str = ""
    left: Optional[ASTNode] = None
    right: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "LogicalExpression"


@dataclass
class UnaryExpression(ASTNode):
    """Prefix ! - ++ --, or postfix ++ -- when prefix is False."""
    operator: str = ""
    argument: Optional[ASTNode] = None
    prefix: bool = True

    def __post_init__(self):
        self.node_type = "UnaryExpression"


@dataclass
class CallExpression(ASTNode):
    callee: Optional[ASTNode] = None
    arguments: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "CallExpression"


@dataclass
class MemberExpression(ASTNode):
    obj: Optional[ASTNode] = None
    property: str = ""

    def __post_init__(self):
        self.node_type = "MemberExpression"


@dataclass
class IndexExpression(ASTNode):
    obj: Optional[ASTNode] = None
    index: Optional[ASTNode] = None

    def __post_init__(self):
        self.node_type = "IndexExpression"


@dataclass
class NewExpression(ASTNode):
    class_name: str = ""
    arguments: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "NewExpression"


@dataclass
class Identifier(ASTNode):
    name: str = ""

    def __post_init__(self):
        self.node_type = "Identifier"


@dataclass
class Literal(ASTNode):
    """A literal value. data_type is one of number, string, boolean, null, undefined."""
    value: Any = None
    data_type: str = "null"

    def __post_init__(self):
        self.node_type = "Literal"


@dataclass
class ArrayExpression(ASTNode):
    elements: list[ASTNode] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "ArrayExpression"


@dataclass
class ObjectExpression(ASTNode):
    """An object literal: { key: value, ... }."""
    properties: list[tuple[str, ASTNode]] = field(default_factory=list)

    def __post_init__(self):
        self.node_type = "ObjectExpression"


@dataclass
class ThisExpression(ASTNode):

    def __post_init__(self):
        self.node_type = "ThisExpression"


NODE_TYPES: tuple[type, ...] = (
    Program, BlockStatement, VariableDeclaration, FunctionDeclaration,
    ClassDeclaration, IfStatement, WhileStatement, ForStatement,
    ReturnStatement, BreakStatement, ContinueStatement, ThrowStatement,
    TryStatement, ImportStatement, ExportStatement, ExpressionStatement,
    AssignmentExpression, BinaryExpression, LogicalExpression, UnaryExpression,
    CallExpression, MemberExpression, IndexExpression, NewExpression,
    Identifier, Literal, ArrayExpression, ObjectExpression, ThisExpression,
)


def dump_ast(node: ASTNode) -> str:
    """Serialize an AST to indented JSON."""
    return json.dumps(asdict(node), indent=2)


# ─────────────────────────────────────────────────────────────
#  Parser
# ─────────────────────────────────────────────────────────────

ASSIGNMENT_OPERATORS = ("=", "+=", "-=", "*=", "/=")
EQUALITY_OPERATORS = ("==", "!=")
RELATIONAL_OPERATORS = ("<", ">", "<=", ">=")
ADDITIVE_OPERATORS = ("+", "-")
MULTIPLICATIVE_OPERATORS = ("*", "/", "%")
DECLARATION_KEYWORDS = ("let", "const", "var")
FUNCTION_KEYWORDS = ("function", "def")


class Parser:
    """
    Recursive-descent parser for Lumos source.

    Usage:
        parser = Parser(tokens)
        ast = parser.parse()
    """

    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _peek(self, offset: int = 1) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[-1]  # EOF
        return self.tokens[idx]

    def _previous(self) -> Token:
        return self.tokens[self.pos - 1] if self.pos > 0 else self.tokens[0]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def _check(self, token_type: TokenType, value: str | None = None) -> bool:
        token = self._current()
        if token.type != token_type:
            return False
        return value is None or token.value == value

    def _check_any(self, token_type: TokenType, values: tuple[str, ...]) -> bool:
        token = self._current()
        return token.type == token_type and token.value in values

    def _expect(self, token_type: TokenType, value: str | None = None) -> Token:
        if not self._check(token_type, value):
            self._fail(token_type.name, value)
        return self._advance()

    def _fail(self, expected_kind: str, expected_text: str | None = None) -> NoReturn:
        token = self._current()
        raise ParseError(
            expected_kind,
            token.type.name,
            token.value if token.type != TokenType.EOF else None,
            token.line,
            token.col,
            expected_text=expected_text,
        )

    def _skip_semicolons(self):
        while self._check(TokenType.SYMBOL, ";"):
            self._advance()

    # ─────────────────────────────────────────────────────────
    #  Top-Level Parsing
    # ─────────────────────────────────────────────────────────

    def parse(self) -> Program:
        """Parse the token stream into a Program."""
        program = Program(line=1, col=1)
        self._skip_semicolons()
        try:
            while not self._check(TokenType.EOF):
                program.body.append(self._parse_statement())
                self._skip_semicolons()
        except RecursionError:
            self._fail("shallower nesting")
        logger.debug("Parsed %d top-level statements", len(program.body))
        return program

    def _parse_statement(self) -> ASTNode:
        """Parse a single statement."""
        token = self._current()

        if token.type == TokenType.SYMBOL and token.value == "{":
            return self._parse_block()

        if token.type == TokenType.KEYWORD:
            match token.value:
                case "let" | "const" | "var":
                    return self._parse_variable_declaration()
                case "function" | "def":
                    return self._parse_function_declaration()
                case "class":
                    return self._parse_class_declaration()
                case "if" | "elsif":
                    return self._parse_if()
                case "while":
                    return self._parse_while()
                case "for":
                    return self._parse_for()
                case "return":
                    return self._parse_return()
                case "break":
                    self._advance()
                    return BreakStatement(line=token.line, col=token.col)
                case "continue":
                    self._advance()
                    return ContinueStatement(line=token.line, col=token.col)
                case "throw":
                    self._advance()
                    argument = self._parse_expression()
                    return ThrowStatement(argument=argument, line=token.line, col=token.col)
                case "try":
                    return self._parse_try()
                case "import":
                    return self._parse_import()
                case "export":
                    self._advance()
                    declaration = self._parse_statement()
                    return ExportStatement(declaration=declaration, line=token.line, col=token.col)

        expression = self._parse_expression()
        return ExpressionStatement(expression=expression, line=token.line, col=token.col)

    def _parse_block(self) -> BlockStatement:
        """Parse: { statement* }, one closing brace per open."""
        open_brace = self._expect(TokenType.SYMBOL, "{")
        block = BlockStatement(line=open_brace.line, col=open_brace.col)
        self._skip_semicolons()
        while not self._check(TokenType.SYMBOL, "}"):
            if self._check(TokenType.EOF):
                self._fail(TokenType.SYMBOL.name, "}")
            block.body.append(self._parse_statement())
            self._skip_semicolons()
        self._advance()  # consume }
        return block

    # ─────────────────────────────────────────────────────────
    #  Declarations
    # ─────────────────────────────────────────────────────────

    def _parse_variable_declaration(self) -> VariableDeclaration:
        """Parse: let|const|var name [= expression]."""
        keyword = self._advance()
        name = self._expect(TokenType.IDENTIFIER)
        init = None
        if self._check(TokenType.OPERATOR, "="):
            self._advance()
            init = self._parse_expression()
        return VariableDeclaration(
            kind=keyword.value, name=name.value, init=init,
            line=keyword.line, col=keyword.col,
        )

    def _parse_params(self) -> list[str]:
        self._expect(TokenType.SYMBOL, "(")
        params = []
        if not self._check(TokenType.SYMBOL, ")"):
            params.append(self._expect(TokenType.IDENTIFIER).value)
            while self._check(TokenType.SYMBOL, ","):
                self._advance()
                params.append(self._expect(TokenType.IDENTIFIER).value)
        self._expect(TokenType.SYMBOL, ")")
        return params

    def _parse_function_declaration(self, keyword: bool = True) -> FunctionDeclaration:
        """Parse: function|def name(params) { body }. Class methods may omit the keyword."""
        start = self._current()
        if keyword:
            self._advance()
        name = self._expect(TokenType.IDENTIFIER)
        params = self._parse_params()
        body = self._parse_block()
        return FunctionDeclaration(
            name=name.value, params=params, body=body,
            line=start.line, col=start.col,
        )

    def _parse_class_declaration(self) -> ClassDeclaration:
        """Parse: class Name [extends Base] { members }."""
        token = self._advance()  # consume 'class'
        name = self._expect(TokenType.IDENTIFIER)
        node = ClassDeclaration(name=name.value, line=token.line, col=token.col)

        if self._check(TokenType.KEYWORD, "extends"):
            self._advance()
            node.superclass = self._expect(TokenType.IDENTIFIER).value

        self._expect(TokenType.SYMBOL, "{")
        self._skip_semicolons()
        while not self._check(TokenType.SYMBOL, "}"):
            if self._check_any(TokenType.KEYWORD, FUNCTION_KEYWORDS):
                node.methods.append(self._parse_function_declaration())
            elif self._check_any(TokenType.KEYWORD, DECLARATION_KEYWORDS):
                node.fields.append(self._parse_variable_declaration())
            elif (self._check(TokenType.IDENTIFIER)
                    and self._peek().type == TokenType.SYMBOL and self._peek().value == "("):
                node.methods.append(self._parse_function_declaration(keyword=False))
            else:
                self._fail("class member")
            self._skip_semicolons()
        self._expect(TokenType.SYMBOL, "}")
        return node

    # ─────────────────────────────────────────────────────────
    #  Control Flow
    # ─────────────────────────────────────────────────────────

    def _parse_if(self) -> IfStatement:
        """Parse: if|elsif test { } [else { } | else if ... | elsif ...]."""
        token = self._advance()  # consume 'if' or 'elsif'
        test = self._parse_expression()
        consequent = self._parse_block()
        node = IfStatement(test=test, consequent=consequent, line=token.line, col=token.col)

        if self._check(TokenType.KEYWORD, "elsif"):
            node.alternate = self._parse_if()
        elif self._check(TokenType.KEYWORD, "else"):
            self._advance()
            if self._check(TokenType.KEYWORD, "if"):
                node.alternate = self._parse_if()
            else:
                node.alternate = self._parse_block()
        return node

    def _parse_while(self) -> WhileStatement:
        token = self._advance()
        test = self._parse_expression()
        body = self._parse_block()
        return WhileStatement(test=test, body=body, line=token.line, col=token.col)

    def _parse_for(self) -> ForStatement:
        """Parse: for name = start to end { body }."""
        token = self._advance()
        iterator = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.OPERATOR, "=")
        start = self._parse_logical_or()
        self._expect(TokenType.KEYWORD, "to")
        end = self._parse_logical_or()
        body = self._parse_block()
        return ForStatement(
            iterator=iterator.value, start=start, end=end, body=body,
            line=token.line, col=token.col,
        )

    def _parse_return(self) -> ReturnStatement:
        """Parse: return [expression]. The value must start on the same line."""
        token = self._advance()
        nxt = self._current()
        if (nxt.type == TokenType.EOF
                or (nxt.type == TokenType.SYMBOL and nxt.value in ("}", ";"))
                or nxt.line != token.line):
            return ReturnStatement(line=token.line, col=token.col)
        return ReturnStatement(argument=self._parse_expression(), line=token.line, col=token.col)

    def _parse_try(self) -> TryStatement:
        """Parse: try { } [catch (name) { }] [finally { }]."""
        token = self._advance()
        node = TryStatement(block=self._parse_block(), line=token.line, col=token.col)

        if self._check(TokenType.KEYWORD, "catch"):
            self._advance()
            self._expect(TokenType.SYMBOL, "(")
            node.handler_param = self._expect(TokenType.IDENTIFIER).value
            self._expect(TokenType.SYMBOL, ")")
            node.handler = self._parse_block()

        if self._check(TokenType.KEYWORD, "finally"):
            self._advance()
            node.finalizer = self._parse_block()

        if node.handler is None and node.finalizer is None:
            self._fail(TokenType.KEYWORD.name, "catch")
        return node

    def _parse_import(self) -> ImportStatement:
        """Parse: import name from "src" | import { a, b } from "src"."""
        token = self._advance()
        specifiers = []
        if self._check(TokenType.SYMBOL, "{"):
            self._advance()
            while not self._check(TokenType.SYMBOL, "}"):
                specifiers.append(self._expect(TokenType.IDENTIFIER).value)
                if self._check(TokenType.SYMBOL, ","):
                    self._advance()
                elif not self._check(TokenType.SYMBOL, "}"):
                    self._fail(TokenType.SYMBOL.name, "}")
            self._advance()
        else:
            specifiers.append(self._expect(TokenType.IDENTIFIER).value)
        self._expect(TokenType.KEYWORD, "from")
        source = self._expect(TokenType.STRING).value
        return ImportStatement(specifiers=specifiers, source=source, line=token.line, col=token.col)

    # ─────────────────────────────────────────────────────────
    #  Expressions (one method per precedence level)
    # ─────────────────────────────────────────────────────────

    def _parse_expression(self) -> ASTNode:
        return self._parse_assignment()

    def _parse_assignment(self) -> ASTNode:
        """Parse: target (= += -= *= /=) value, right-associative."""
        target = self._parse_logical_or()
        if self._check_any(TokenType.OPERATOR, ASSIGNMENT_OPERATORS):
            if not isinstance(target, (Identifier, MemberExpression, IndexExpression)):
                self._fail("assignable expression")
            op = self._advance()
            value = self._parse_assignment()
            return AssignmentExpression(
                operator=op.value, target=target, value=value,
                line=target.line, col=target.col,
            )
        return target

    def _parse_logical_or(self) -> ASTNode:
        left = self._parse_logical_and()
        while self._check(TokenType.OPERATOR, "||") or self._check(TokenType.KEYWORD, "or"):
            self._advance()
            right = self._parse_logical_and()
            left = LogicalExpression(operator="||", left=left, right=right, line=left.line, col=left.col)
        return left

    def _parse_logical_and(self) -> ASTNode:
        left = self._parse_equality()
        while self._check(TokenType.OPERATOR, "&&") or self._check(TokenType.KEYWORD, "and"):
            self._advance()
            right = self._parse_equality()
            left = LogicalExpression(operator="&&", left=left, right=right, line=left.line, col=left.col)
        return left

    def _parse_binary_level(self, operators: tuple[str, ...], next_level) -> ASTNode:
        left = next_level()
        while self._check_any(TokenType.OPERATOR, operators):
            op = self._advance()
            right = next_level()
            left = BinaryExpression(operator=op.value, left=left, right=right, line=left.line, col=left.col)
        return left

    def _parse_equality(self) -> ASTNode:
        return self._parse_binary_level(EQUALITY_OPERATORS, self._parse_relational)

    def _parse_relational(self) -> ASTNode:
        return self._parse_binary_level(RELATIONAL_OPERATORS, self._parse_additive)

    def _parse_additive(self) -> ASTNode:
        return self._parse_binary_level(ADDITIVE_OPERATORS, self._parse_multiplicative)

    def _parse_multiplicative(self) -> ASTNode:
        return self._parse_binary_level(MULTIPLICATIVE_OPERATORS, self._parse_unary)

    def _parse_unary(self) -> ASTNode:
        """Parse prefix operators: ! not - ++ --."""
        token = self._current()
        if self._check_any(TokenType.OPERATOR, ("!", "-", "++", "--")) or self._check(TokenType.KEYWORD, "not"):
            self._advance()
            operator = "!" if token.value == "not" else token.value
            argument = self._parse_unary()
            if operator in ("++", "--") and not isinstance(
                    argument, (Identifier, MemberExpression, IndexExpression)):
                raise ParseError("assignable expression", argument.node_type, None,
                                 argument.line, argument.col)
            return UnaryExpression(operator=operator, argument=argument, prefix=True,
                                   line=token.line, col=token.col)
        return self._parse_postfix()

    def _parse_postfix(self) -> ASTNode:
        """Parse call, member and index chains, then an optional postfix ++/--."""
        expr = self._parse_primary()

        while True:
            if self._check(TokenType.SYMBOL, "("):
                self._advance()
                expr = CallExpression(callee=expr, arguments=self._parse_arguments(")"),
                                      line=expr.line, col=expr.col)
            elif self._check(TokenType.SYMBOL, "."):
                self._advance()
                prop = self._current()
                if prop.type not in (TokenType.IDENTIFIER, TokenType.KEYWORD):
                    self._fail(TokenType.IDENTIFIER.name)
                self._advance()
                expr = MemberExpression(obj=expr, property=prop.value, line=expr.line, col=expr.col)
            elif self._check(TokenType.SYMBOL, "["):
                self._advance()
                index = self._parse_expression()
                self._expect(TokenType.SYMBOL, "]")
                expr = IndexExpression(obj=expr, index=index, line=expr.line, col=expr.col)
            else:
                break

        if (self._check_any(TokenType.OPERATOR, ("++", "--"))
                and self._current().line == self._previous().line
                and isinstance(expr, (Identifier, MemberExpression, IndexExpression))):
            op = self._advance()
            expr = UnaryExpression(operator=op.value, argument=expr, prefix=False,
                                   line=expr.line, col=expr.col)
        return expr

    def _parse_arguments(self, closing: str) -> list[ASTNode]:
        """Parse a comma-separated expression list up to `closing` (consumed)."""
        items = []
        while not self._check(TokenType.SYMBOL, closing):
            items.append(self._parse_expression())
            if self._check(TokenType.SYMBOL, ","):
                self._advance()
            elif not self._check(TokenType.SYMBOL, closing):
                self._fail(TokenType.SYMBOL.name, closing)
        self._advance()
        return items

    def _parse_primary(self) -> ASTNode:
        token = self._current()

        if token.type == TokenType.NUMBER:
            self._advance()
            return Literal(value=float(token.value), data_type="number", line=token.line, col=token.col)

        if token.type == TokenType.STRING:
            self._advance()
            return Literal(value=token.value, data_type="string", line=token.line, col=token.col)

        if token.type == TokenType.IDENTIFIER:
            self._advance()
            return Identifier(name=token.value, line=token.line, col=token.col)

        if token.type == TokenType.KEYWORD:
            match token.value:
                case "true" | "false":
                    self._advance()
                    return Literal(value=token.value == "true", data_type="boolean",
                                   line=token.line, col=token.col)
                case "null":
                    self._advance()
                    return Literal(value=None, data_type="null", line=token.line, col=token.col)
                case "undefined":
                    self._advance()
                    return Literal(value=None, data_type="undefined", line=token.line, col=token.col)
                case "this":
                    self._advance()
                    return ThisExpression(line=token.line, col=token.col)
                case "new":
                    return self._parse_new()

        if token.type == TokenType.SYMBOL:
            if token.value == "(":
                self._advance()
                inner = self._parse_expression()
                self._expect(TokenType.SYMBOL, ")")
                return inner
            if token.value == "[":
                self._advance()
                elements = self._parse_arguments("]")
                return ArrayExpression(elements=elements, line=token.line, col=token.col)
            if token.value == "{":
                return self._parse_object()

        self._fail("expression")

    def _parse_new(self) -> NewExpression:
        """Parse: new ClassName(args)."""
        token = self._advance()
        class_name = self._expect(TokenType.IDENTIFIER)
        self._expect(TokenType.SYMBOL, "(")
        arguments = self._parse_arguments(")")
        return NewExpression(class_name=class_name.value, arguments=arguments,
                             line=token.line, col=token.col)

    def _parse_object(self) -> ObjectExpression:
        """Parse: { key: value, ... } with identifier or string keys."""
        token = self._advance()  # consume {
        node = ObjectExpression(line=token.line, col=token.col)
        while not self._check(TokenType.SYMBOL, "}"):
            key = self._current()
            if key.type not in (TokenType.IDENTIFIER, TokenType.STRING):
                self._fail(TokenType.IDENTIFIER.name)
            self._advance()
            self._expect(TokenType.SYMBOL, ":")
            node.properties.append((key.value, self._parse_expression()))
            if self._check(TokenType.SYMBOL, ","):
                self._advance()
            elif not self._check(TokenType.SYMBOL, "}"):
                self._fail(TokenType.SYMBOL.name, "}")
        self._advance()
        return node


def parse(tokens: list[Token]) -> Program:
    """Parse a token list with a fresh Parser."""
    return Parser(tokens).parse()
