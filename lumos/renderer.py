"""
Lumos Renderer
==============
Source-to-source compiler: renders a Lumos AST as text in a target
language, using that language's TargetProfile.

Rendering is a direct transliteration, bottom-up and in AST child order.
Statement renderers return a list of already-indented lines; expression
renderers return a single string. A node kind without a `_render_*`
method renders to the empty string.
"""
import logging

from .parser import (
    ASTNode, Program, BlockStatement, VariableDeclaration, FunctionDeclaration,
    ClassDeclaration, IfStatement, WhileStatement, ForStatement, ReturnStatement,
    BreakStatement, ContinueStatement, ThrowStatement, TryStatement,
    ImportStatement, ExportStatement, ExpressionStatement, AssignmentExpression,
    BinaryExpression, LogicalExpression, UnaryExpression, CallExpression,
    MemberExpression, IndexExpression, NewExpression, Identifier, Literal,
    ArrayExpression, ObjectExpression, ThisExpression,
)
from .targets import TargetProfile, get_profile
from .values import format_number

logger = logging.getLogger(__name__)

_STRING_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}


def _quote(text: str) -> str:
    return '"' + "".join(_STRING_ESCAPES.get(ch, ch) for ch in text) + '"'


class Renderer:
    """
    Renders a Program for one target language.

    Usage:
        renderer = Renderer("python")
        code = renderer.render(program)

    Raises UnsupportedTargetError at construction for unknown targets.
    """

    def __init__(self, target: str, indent_width: int = 4):
        self.profile: TargetProfile = get_profile(target)
        self.target = self.profile.name
        self.unit = " " * indent_width

    def render(self, program: Program) -> str:
        """Render a whole program, wrapped in the target's prelude and epilogue."""
        lines = list(self.profile.prelude)
        lines.extend(self._render_body(program.body, self.profile.body_depth))
        lines.extend(self.profile.epilogue)
        logger.debug("Rendered %d statements as %s (%d lines)",
                     len(program.body), self.target, len(lines))
        return "\n".join(lines) + "\n"

    # ─────────────────────────────────────────────────────────
    #  Dispatch
    # ─────────────────────────────────────────────────────────

    def _statement(self, node: ASTNode, depth: int) -> list[str]:
        method = getattr(self, f"_render_{node.node_type.lower()}", None)
        if method is None:
            return []
        result = method(node, depth)
        if isinstance(result, str):
            return [self._indent(depth) + result + self.profile.terminator] if result else []
        return result

    def _expr(self, node: ASTNode) -> str:
        method = getattr(self, f"_render_{node.node_type.lower()}", None)
        if method is None:
            return ""
        result = method(node, 0)
        return result if isinstance(result, str) else " ".join(line.strip() for line in result)

    def _render_body(self, statements: list[ASTNode], depth: int) -> list[str]:
        lines = []
        for statement in statements:
            lines.extend(self._statement(statement, depth))
        return lines

    def _indent(self, depth: int) -> str:
        return self.unit * depth

    # ─────────────────────────────────────────────────────────
    #  Blocks
    # ─────────────────────────────────────────────────────────

    def _open(self, header: str) -> str:
        match self.profile.block_style:
            case "brace":
                return f"{header} {{"
            case "indent":
                return f"{header}:"
        return header

    def _continue(self, header: str) -> str:
        """A header that closes the previous block and opens the next (else, catch)."""
        if self.profile.block_style == "brace":
            return f"}} {header} {{"
        return self._open(header)

    def _close(self) -> list[str]:
        match self.profile.block_style:
            case "brace":
                return ["}"]
            case "end":
                return ["end"]
        return []

    def _block_lines(self, statements: list[ASTNode], depth: int) -> list[str]:
        lines = self._render_body(statements, depth)
        if not lines and self.profile.empty_body:
            lines = [self._indent(depth) + self.profile.empty_body]
        return lines

    def _construct(self, header: str, statements: list[ASTNode], depth: int) -> list[str]:
        """header + body + closer, the shape shared by functions, loops and classes."""
        pad = self._indent(depth)
        lines = [pad + self._open(header)]
        lines.extend(self._block_lines(statements, depth + 1))
        lines.extend(pad + closer for closer in self._close())
        return lines

    # ─────────────────────────────────────────────────────────
    #  Statements
    # ─────────────────────────────────────────────────────────

    def _render_program(self, node: Program, depth: int) -> list[str]:
        return self._render_body(node.body, depth)

    def _render_blockstatement(self, node: BlockStatement, depth: int) -> list[str]:
        if self.profile.block_style != "brace":
            return self._render_body(node.body, depth)
        pad = self._indent(depth)
        return [pad + "{", *self._block_lines(node.body, depth + 1), pad + "}"]

    def _render_expressionstatement(self, node: ExpressionStatement, depth: int) -> str:
        return self._expr(node.expression)

    def _render_variabledeclaration(self, node: VariableDeclaration, depth: int) -> str:
        template = self.profile.const_template if node.kind == "const" else self.profile.var_template
        value = self.profile.null if node.init is None else self._expr(node.init)
        return template.format(name=self.profile.sigil + node.name, value=value)

    def _params(self, params: list[str], method: bool = False) -> str:
        names = [self.profile.sigil + param for param in params]
        if method and self.profile.self_param:
            names.insert(0, self.profile.self_param)
        return ", ".join(names)

    def _render_functiondeclaration(self, node: FunctionDeclaration, depth: int) -> list[str]:
        header = self.profile.function_template.format(name=node.name, params=self._params(node.params))
        return self._construct(header, node.body.body, depth)

    def _render_method(self, node: FunctionDeclaration, depth: int) -> list[str]:
        name = self.profile.constructor_name if node.name == "constructor" else node.name
        header = self.profile.method_template.format(name=name, params=self._params(node.params, method=True))
        return self._construct(header, node.body.body, depth)

    def _render_classdeclaration(self, node: ClassDeclaration, depth: int) -> list[str]:
        header = self.profile.class_template.format(name=node.name)
        if node.superclass is not None:
            header += self.profile.extends_template.format(base=node.superclass)
        pad = self._indent(depth)
        lines = [pad + self._open(header)]
        members = []
        for field_node in node.fields:
            members.extend(self._statement(field_node, depth + 1))
        for method in node.methods:
            members.extend(self._render_method(method, depth + 1))
        if not members and self.profile.empty_body:
            members = [self._indent(depth + 1) + self.profile.empty_body]
        lines.extend(members)
        lines.extend(pad + closer for closer in self._close())
        return lines

    def _render_ifstatement(self, node: IfStatement, depth: int) -> list[str]:
        pad = self._indent(depth)
        lines = [pad + self._open(self.profile.if_template.format(test=self._expr(node.test)))]
        lines.extend(self._block_lines(node.consequent.body, depth + 1))

        alternate = node.alternate
        while isinstance(alternate, IfStatement):
            header = self.profile.elif_template.format(test=self._expr(alternate.test))
            lines.append(pad + self._continue(header))
            lines.extend(self._block_lines(alternate.consequent.body, depth + 1))
            alternate = alternate.alternate
        if alternate is not None:
            lines.append(pad + self._continue(self.profile.else_keyword))
            statements = alternate.body if isinstance(alternate, BlockStatement) else [alternate]
            lines.extend(self._block_lines(statements, depth + 1))

        lines.extend(pad + closer for closer in self._close())
        return lines

    def _render_whilestatement(self, node: WhileStatement, depth: int) -> list[str]:
        header = self.profile.while_template.format(test=self._expr(node.test))
        return self._construct(header, node.body.body, depth)

    def _render_forstatement(self, node: ForStatement, depth: int) -> list[str]:
        header = self.profile.for_template.format(
            var=self.profile.sigil + node.iterator,
            start=self._expr(node.start),
            end=self._expr(node.end),
        )
        return self._construct(header, node.body.body, depth)

    def _render_returnstatement(self, node: ReturnStatement, depth: int) -> str:
        if node.argument is None:
            return "return"
        return f"return {self._expr(node.argument)}"

    def _render_breakstatement(self, node: BreakStatement, depth: int) -> str:
        return self.profile.break_keyword

    def _render_continuestatement(self, node: ContinueStatement, depth: int) -> str:
        return self.profile.continue_keyword

    def _render_throwstatement(self, node: ThrowStatement, depth: int) -> str:
        return self.profile.throw_template.format(value=self._expr(node.argument))

    def _render_trystatement(self, node: TryStatement, depth: int) -> list[str]:
        pad = self._indent(depth)
        profile = self.profile

        if profile.try_keyword is None:
            # No exception syntax: keep the clauses in order, labelled by comments.
            lines = [f"{pad}{profile.comment} try"]
            lines.extend(self._render_body(node.block.body, depth))
            if node.handler is not None:
                lines.append(f"{pad}{profile.comment} catch {node.handler_param}")
                lines.extend(self._render_body(node.handler.body, depth))
            if node.finalizer is not None:
                lines.append(f"{pad}{profile.comment} finally")
                lines.extend(self._render_body(node.finalizer.body, depth))
            return lines

        lines = [pad + self._open(profile.try_keyword)]
        lines.extend(self._block_lines(node.block.body, depth + 1))
        if node.handler is not None:
            header = profile.catch_template.format(name=profile.sigil + node.handler_param)
            lines.append(pad + self._continue(header))
            lines.extend(self._block_lines(node.handler.body, depth + 1))
        if node.finalizer is not None:
            lines.append(pad + self._continue(profile.finally_keyword))
            lines.extend(self._block_lines(node.finalizer.body, depth + 1))
        lines.extend(pad + closer for closer in self._close())
        return lines

    def _render_importstatement(self, node: ImportStatement, depth: int) -> list[str]:
        names = ", ".join(node.specifiers)
        if self.profile.import_template is None:
            text = f'{self.profile.comment} import {names} from "{node.source}"'
        else:
            text = self.profile.import_template.format(names=names, source=node.source)
        return [self._indent(depth) + text]

    def _render_exportstatement(self, node: ExportStatement, depth: int) -> list[str]:
        lines = self._statement(node.declaration, depth)
        if lines and self.profile.export_prefix:
            pad = self._indent(depth)
            lines[0] = pad + self.profile.export_prefix + lines[0][len(pad):]
        return lines

    # ─────────────────────────────────────────────────────────
    #  Expressions
    # ─────────────────────────────────────────────────────────

    def _operand(self, node: ASTNode) -> str:
        """Render a sub-expression, parenthesised when it is itself an operator chain."""
        text = self._expr(node)
        if isinstance(node, (BinaryExpression, LogicalExpression, AssignmentExpression)):
            return f"({text})"
        return text

    def _render_assignmentexpression(self, node: AssignmentExpression, depth: int) -> str:
        return f"{self._expr(node.target)} {node.operator} {self._expr(node.value)}"

    def _render_binaryexpression(self, node: BinaryExpression, depth: int) -> str:
        op = node.operator
        if op == "==":
            op = self.profile.equals_op
        elif op == "!=":
            op = self.profile.not_equals_op
        return f"{self._operand(node.left)} {op} {self._operand(node.right)}"

    def _render_logicalexpression(self, node: LogicalExpression, depth: int) -> str:
        op = self.profile.and_op if node.operator == "&&" else self.profile.or_op
        return f"{self._operand(node.left)} {op} {self._operand(node.right)}"

    def _render_unaryexpression(self, node: UnaryExpression, depth: int) -> str:
        argument = self._operand(node.argument)
        match node.operator:
            case "!":
                return f"{self.profile.not_op}{argument}"
            case "++" | "--":
                if not self.profile.has_increment:
                    sign = "+" if node.operator == "++" else "-"
                    if not self.profile.compound_assign:
                        return f"{argument} = {argument} {sign} 1"
                    return f"{argument} {sign}= 1"
                return f"{node.operator}{argument}" if node.prefix else f"{argument}{node.operator}"
        return f"{node.operator}{argument}"

    def _render_callexpression(self, node: CallExpression, depth: int) -> str:
        args = [self._expr(arg) for arg in node.arguments]
        if isinstance(node.callee, Identifier):
            if node.callee.name == "print":
                return self.profile.print_template.format(args=self.profile.print_separator.join(args))
            callee = node.callee.name
        else:
            callee = self._expr(node.callee)
        return f"{callee}({', '.join(args)})"

    def _render_memberexpression(self, node: MemberExpression, depth: int) -> str:
        return f"{self._operand(node.obj)}{self.profile.member_separator}{node.property}"

    def _render_indexexpression(self, node: IndexExpression, depth: int) -> str:
        return f"{self._operand(node.obj)}[{self._expr(node.index)}]"

    def _render_newexpression(self, node: NewExpression, depth: int) -> str:
        args = ", ".join(self._expr(arg) for arg in node.arguments)
        return self.profile.new_template.format(name=node.class_name, args=args)

    def _render_identifier(self, node: Identifier, depth: int) -> str:
        return self.profile.sigil + node.name

    def _render_literal(self, node: Literal, depth: int) -> str:
        match node.data_type:
            case "number":
                return format_number(node.value)
            case "string":
                return _quote(node.value)
            case "boolean":
                return self.profile.true if node.value else self.profile.false
            case "undefined":
                return self.profile.undefined or self.profile.null
        return self.profile.null

    def _render_arrayexpression(self, node: ArrayExpression, depth: int) -> str:
        items = ", ".join(self._expr(element) for element in node.elements)
        return self.profile.array_template.format(items=items)

    def _render_objectexpression(self, node: ObjectExpression, depth: int) -> str:
        items = ", ".join(
            self.profile.pair_template.format(key=_quote(key), value=self._expr(value))
            for key, value in node.properties
        )
        return self.profile.object_template.format(items=items)

    def _render_thisexpression(self, node: ThisExpression, depth: int) -> str:
        return self.profile.this


def render(program: Program, target: str, indent_width: int = 4) -> str:
    """Render `program` for `target` with a fresh Renderer."""
    return Renderer(target, indent_width).render(program)
