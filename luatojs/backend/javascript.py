"""JavaScript backend: Lua syntax tree → JavaScript source.

Every expression renders fully parenthesized, so the precedence the parser
resolved survives without a precedence table here. Anything outside the
supported subset raises `UnsupportedConstruct`; nothing is written until the
whole tree has rendered.
"""

from __future__ import annotations

import dataclasses
from typing import BinaryIO

from ..ast import (
    AssignStmt,
    BinaryOp,
    Block,
    BoolLit,
    BreakStmt,
    Call,
    CallStmt,
    DoStmt,
    EmptyStmt,
    Expr,
    Field,
    FunctionExpr,
    FunctionStmt,
    GenericForStmt,
    GotoStmt,
    IfStmt,
    Index,
    KeyField,
    LabelStmt,
    LocalFunctionStmt,
    LocalStmt,
    MethodCall,
    Name,
    NameField,
    NilLit,
    NumberLit,
    NumericForStmt,
    Params,
    Paren,
    PositionalField,
    RepeatStmt,
    ReturnStmt,
    Stmt,
    StringLit,
    TableLit,
    UnaryOp,
    Vararg,
    WhileStmt,
)
from .util import format_number, hex_escape_bytes, indent_lines

# Bound implicitly by JavaScript method calls; never usable as a plain name
RECEIVER_NAME = "this"

BINARY_OPS: dict[str, str] = {
    "+": "+",
    "-": "-",
    "*": "*",
    "/": "/",
    "//": "/",  # floor division is not reproduced
    "%": "%",  # truncated, not floored, for mixed signs
    "..": "+",
    "==": "===",
    "~=": "!==",
    ">": ">",
    ">=": ">=",
    "<": "<",
    "<=": "<=",
}

# Every expression and statement variant the backend dispatches on, whether
# it translates or is rejected. Tests compare these against the ast module.
HANDLED_EXPRS: tuple[type, ...] = (
    Name,
    BoolLit,
    NumberLit,
    NilLit,
    StringLit,
    Paren,
    UnaryOp,
    BinaryOp,
    Call,
    MethodCall,
    TableLit,
    Index,
    Vararg,
    FunctionExpr,
)

HANDLED_STMTS: tuple[type, ...] = (
    EmptyStmt,
    AssignStmt,
    LocalStmt,
    IfStmt,
    WhileStmt,
    NumericForStmt,
    BreakStmt,
    DoStmt,
    CallStmt,
    FunctionStmt,
    LocalFunctionStmt,
    RepeatStmt,
    GenericForStmt,
    GotoStmt,
    LabelStmt,
    ReturnStmt,
)


class TranslateError(Exception):
    """Translation failure, carrying the offending node."""

    def __init__(self, msg: str, node: object):
        self.msg: str = msg
        self.node: object = node
        pos = getattr(node, "pos", None)
        self.line: int = pos.line if pos is not None else 0
        self.col: int = pos.col if pos is not None else 0
        super().__init__(msg + " at line " + str(self.line) + " col " + str(self.col))


class UnsupportedConstruct(TranslateError):
    """Syntax form, operator, or arity outside the translated subset."""


class IllegalIdentifier(TranslateError):
    """Identifier that collides with the method receiver name."""


def _check_name(name: str, node: object) -> str:
    if name == RECEIVER_NAME:
        raise IllegalIdentifier("illegal identifier '" + name + "'", node)
    return name


def _unparen(expr: Expr) -> Expr:
    while isinstance(expr, Paren):
        expr = expr.expr
    return expr


def _base(expr: Expr) -> str:
    """Render expr for use before '.', '(' or '['."""
    text = expr_to_js(expr)
    # 5.length is a syntax error; (5).length is not
    if isinstance(_unparen(expr), NumberLit):
        return "(" + text + ")"
    return text


# --- Expressions ---


def expr_to_js(expr: Expr) -> str:
    """Render one expression."""
    match expr:
        case Name(name=name):
            return _check_name(name, expr)
        case BoolLit(value=value):
            return "true" if value else "false"
        case NumberLit(value=value):
            return format_number(value)
        case NilLit():
            return "undefined"
        case StringLit(value=value):
            return '"' + hex_escape_bytes(value) + '"'
        case Paren(expr=inner):
            return expr_to_js(inner)
        case UnaryOp(op=op, operand=operand):
            return _unary_to_js(expr, op, operand)
        case BinaryOp(op=op, left=left, right=right):
            if op not in BINARY_OPS:
                raise UnsupportedConstruct(
                    "unsupported binary operator '" + op + "'", expr
                )
            return "(" + expr_to_js(left) + BINARY_OPS[op] + expr_to_js(right) + ")"
        case Call() | MethodCall():
            return call_to_js(expr)
        case TableLit(fields=fields):
            return _table_to_js(fields)
        case Index(obj=obj, index=index):
            return "(" + _base(obj) + "[" + expr_to_js(index) + "])"
        case Vararg():
            raise UnsupportedConstruct("vararg expression", expr)
        case FunctionExpr():
            raise UnsupportedConstruct("anonymous function", expr)
        case _:
            raise UnsupportedConstruct(
                "unsupported expression: " + type(expr).__name__, expr
            )


def _unary_to_js(expr: UnaryOp, op: str, operand: Expr) -> str:
    if op == "#":
        return "(" + _base(operand) + ".length)"
    if op == "-" or op == "+":
        return "(" + op + expr_to_js(operand) + ")"
    raise UnsupportedConstruct("unsupported unary operator '" + op + "'", expr)


def call_to_js(call: Call | MethodCall) -> str:
    """Render a call; method calls also pass the receiver as first argument."""
    if isinstance(call, MethodCall):
        receiver = expr_to_js(call.obj)
        args = [receiver]
        for arg in call.args:
            args.append(expr_to_js(arg))
        return _base(call.obj) + "." + call.method + "(" + ", ".join(args) + ")"
    callee = _base(call.func)
    args = []
    for arg in call.args:
        args.append(expr_to_js(arg))
    return callee + "(" + ", ".join(args) + ")"


def _table_key(key: Expr) -> str:
    """String and number keys render bare, anything else as a computed key."""
    if isinstance(_unparen(key), (StringLit, NumberLit)):
        return expr_to_js(key)
    return "[" + expr_to_js(key) + "]"


def _table_to_js(fields: tuple[Field, ...]) -> str:
    parts: list[str] = []
    for fld in fields:
        match fld:
            case KeyField(key=key, value=value):
                parts.append(_table_key(key) + ": " + expr_to_js(value))
            case NameField(name=name, value=value):
                parts.append('"' + name + '": ' + expr_to_js(value))
            case PositionalField():
                raise UnsupportedConstruct("table field without a key", fld)
            case _:
                raise UnsupportedConstruct(
                    "unsupported table field: " + type(fld).__name__, fld
                )
    return "({" + ", ".join(parts) + "})"


def _literal_sign(expr: Expr) -> int | None:
    """Sign of a constant numeric step, or None if not a literal."""
    expr = _unparen(expr)
    if isinstance(expr, NumberLit):
        if expr.value > 0:
            return 1
        if expr.value < 0:
            return -1
        return 0
    if isinstance(expr, UnaryOp) and expr.op in ("-", "+"):
        inner = _literal_sign(expr.operand)
        if inner is None or expr.op == "+":
            return inner
        return -inner
    return None


# --- Statements ---


@dataclasses.dataclass(frozen=True)
class _Scope:
    """Where return and break are allowed in the block being written."""

    return_in_iife: bool = False
    break_in_iife: bool = False
    in_loop: bool = False


class BlockWriter:
    """Emit JavaScript for a Block, one construct per line.

    Holds no state between calls. Nested blocks render into their own line
    list; the caller indents them one unit when splicing them in.
    """

    def write_block(self, out: BinaryIO, block: Block, depth: int = 0) -> None:
        """Render block at depth and write it to out in one piece."""
        out.write(self.render_block(block, depth).encode("utf-8"))

    def render_block(self, block: Block, depth: int = 0) -> str:
        lines = indent_lines(self._block_lines(block, _Scope()), depth)
        return "".join(line + "\n" for line in lines)

    def _block_lines(self, block: Block, scope: _Scope) -> list[str]:
        lines: list[str] = []
        for stmt in block.stmts:
            self._emit_stmt(lines, stmt, scope)
        if block.ret is not None:
            lines.append(self._return_line(block.ret, scope))
        return lines

    def _emit_nested(self, lines: list[str], block: Block, scope: _Scope) -> None:
        lines.extend(indent_lines(self._block_lines(block, scope)))

    def _emit_stmt(self, lines: list[str], stmt: Stmt, scope: _Scope) -> None:
        match stmt:
            case EmptyStmt():
                lines.append(";")
            case AssignStmt(targets=targets, values=values):
                if len(targets) != 1 or len(values) != 1:
                    raise UnsupportedConstruct("parallel assignment", stmt)
                lines.append(
                    expr_to_js(targets[0]) + " = " + expr_to_js(values[0]) + ";"
                )
            case LocalStmt():
                lines.append(self._local_line(stmt))
            case IfStmt():
                self._emit_if(lines, stmt, scope)
            case WhileStmt(cond=cond, body=body):
                lines.append("while (" + expr_to_js(cond) + ") {")
                loop_scope = dataclasses.replace(
                    scope, break_in_iife=False, in_loop=True
                )
                self._emit_nested(lines, body, loop_scope)
                lines.append("}")
            case NumericForStmt():
                lines.append(self._numeric_for_header(stmt))
                loop_scope = dataclasses.replace(
                    scope, break_in_iife=False, in_loop=True
                )
                self._emit_nested(lines, stmt.body, loop_scope)
                lines.append("}")
            case BreakStmt():
                if not scope.in_loop:
                    raise UnsupportedConstruct("break outside a loop", stmt)
                if scope.break_in_iife:
                    raise UnsupportedConstruct("break out of a do block", stmt)
                lines.append("break;")
            case DoStmt(body=body):
                lines.append("(function() {")
                self._emit_nested(lines, body, _Scope(True, True, scope.in_loop))
                lines.append("})();")
            case CallStmt(call=call):
                lines.append(call_to_js(call) + ";")
            case ReturnStmt():
                lines.append(self._return_line(stmt, scope))
            case FunctionStmt(name=fname, params=params, body=body):
                if fname.method is not None:
                    raise UnsupportedConstruct("method definition", stmt)
                if len(fname.names) > 1:
                    raise UnsupportedConstruct("dotted function name", stmt)
                name = _check_name(fname.names[0], fname)
                param_list = self._params(params, stmt)
                lines.append("function " + name + "(" + param_list + ") {")
                self._emit_nested(lines, body, _Scope())
                lines.append("}")
            case LocalFunctionStmt(name=name, params=params, body=body):
                name = _check_name(name, stmt)
                param_list = self._params(params, stmt)
                lines.append("var " + name + " = (" + param_list + ") => {")
                self._emit_nested(lines, body, _Scope())
                lines.append("};")
            case RepeatStmt():
                raise UnsupportedConstruct("repeat loop", stmt)
            case GenericForStmt():
                raise UnsupportedConstruct("generic for loop", stmt)
            case GotoStmt():
                raise UnsupportedConstruct("goto", stmt)
            case LabelStmt():
                raise UnsupportedConstruct("label", stmt)
            case _:
                raise UnsupportedConstruct(
                    "unsupported statement: " + type(stmt).__name__, stmt
                )

    def _local_line(self, stmt: LocalStmt) -> str:
        if len(stmt.names) != 1:
            raise UnsupportedConstruct("multiple names in local declaration", stmt)
        if stmt.values is None:
            raise UnsupportedConstruct("local declaration without a value", stmt)
        if len(stmt.values) != 1:
            raise UnsupportedConstruct("multiple values in local declaration", stmt)
        local = stmt.names[0]
        if local.attrib == "close":
            raise UnsupportedConstruct("to-be-closed variable", local)
        # <const> is enforced by the Lua compiler; a JavaScript const cannot
        # be shadowed by a later var of the same name
        name = _check_name(local.name, local)
        return "var " + name + " = " + expr_to_js(stmt.values[0]) + ";"

    def _emit_if(self, lines: list[str], stmt: IfStmt, scope: _Scope) -> None:
        lines.append("if (" + expr_to_js(stmt.cond) + ") {")
        self._emit_nested(lines, stmt.body, scope)
        lines.append("}")
        for branch in stmt.elseifs:
            lines.append("else if (" + expr_to_js(branch.cond) + ") {")
            self._emit_nested(lines, branch.body, scope)
            lines.append("}")
        if stmt.else_body is not None:
            lines.append("else {")
            self._emit_nested(lines, stmt.else_body, scope)
            lines.append("}")

    def _numeric_for_header(self, stmt: NumericForStmt) -> str:
        name = _check_name(stmt.name, stmt)
        start = expr_to_js(stmt.start)
        stop = expr_to_js(stmt.stop)
        up = "(" + name + "<=" + stop + ")"
        down = "(" + name + ">=" + stop + ")"
        if stmt.step is None:
            cond = up
            update = name + "++"
        else:
            step = expr_to_js(stmt.step)
            sign = _literal_sign(stmt.step)
            if sign == 0:
                raise UnsupportedConstruct("for loop step is zero", stmt.step)
            if sign is None:
                cond = "((" + step + ">0) ? " + up + " : " + down + ")"
            elif sign > 0:
                cond = up
            else:
                cond = down
            update = name + " += " + step
        return "for (var " + name + " = " + start + "; " + cond + "; " + update + ") {"

    def _params(self, params: Params, node: Stmt) -> str:
        if params.variadic:
            raise UnsupportedConstruct("variadic function", node)
        names: list[str] = []
        for param in params.names:
            names.append(_check_name(param, node))
        return ", ".join(names)

    def _return_line(self, ret: ReturnStmt, scope: _Scope) -> str:
        if len(ret.values) > 1:
            raise UnsupportedConstruct("multiple return values", ret)
        if scope.return_in_iife:
            raise UnsupportedConstruct("return from inside a do block", ret)
        if len(ret.values) == 0:
            return "return;"
        return "return " + expr_to_js(ret.values[0]) + ";"


def translate(block: Block) -> bytes:
    """Translate a parsed chunk to JavaScript source bytes."""
    return BlockWriter().render_block(block).encode("utf-8")
