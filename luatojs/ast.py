"""Lua syntax tree: parse-time node definitions.

The parser builds these; the backend only reads them. Expression and
statement variants form closed sets: the backend lists every subclass of
`Expr` and `Stmt` it knows about, and the test suite fails when a new one
appears without a translation rule.
"""

from __future__ import annotations

from dataclasses import dataclass


# ============================================================
# POSITION
# ============================================================


@dataclass(frozen=True)
class Pos:
    """Source position, 1-indexed."""

    line: int
    col: int


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(frozen=True)
class Expr:
    """Base for all expressions."""

    pos: Pos


@dataclass(frozen=True)
class Name(Expr):
    """Variable reference."""

    name: str


@dataclass(frozen=True)
class BoolLit(Expr):
    """true or false."""

    value: bool


@dataclass(frozen=True)
class NumberLit(Expr):
    """Integer or float literal. raw is the source spelling."""

    value: int | float
    raw: str


@dataclass(frozen=True)
class NilLit(Expr):
    """nil."""


@dataclass(frozen=True)
class StringLit(Expr):
    """String literal with escapes resolved, as raw bytes."""

    value: bytes


@dataclass(frozen=True)
class Vararg(Expr):
    """..."""


@dataclass(frozen=True)
class Paren(Expr):
    """(expr)."""

    expr: Expr


@dataclass(frozen=True)
class UnaryOp(Expr):
    """op operand. op is one of: - + # not ~."""

    op: str
    operand: Expr


@dataclass(frozen=True)
class BinaryOp(Expr):
    """left op right. op is the Lua operator text (.., ~=, //, and, ...)."""

    op: str
    left: Expr
    right: Expr


@dataclass(frozen=True)
class Call(Expr):
    """func(args)."""

    func: Expr
    args: tuple[Expr, ...]


@dataclass(frozen=True)
class MethodCall(Expr):
    """obj:method(args)."""

    obj: Expr
    method: str
    args: tuple[Expr, ...]


@dataclass(frozen=True)
class Index(Expr):
    """obj[index]; obj.name is parsed as obj["name"]."""

    obj: Expr
    index: Expr


@dataclass(frozen=True)
class Params:
    """Function parameter list."""

    names: tuple[str, ...]
    variadic: bool


@dataclass(frozen=True)
class FunctionExpr(Expr):
    """function(params) body end."""

    params: Params
    body: Block


@dataclass(frozen=True)
class Field:
    """Base for table constructor fields."""

    pos: Pos


@dataclass(frozen=True)
class KeyField(Field):
    """[key] = value."""

    key: Expr
    value: Expr


@dataclass(frozen=True)
class NameField(Field):
    """name = value."""

    name: str
    value: Expr


@dataclass(frozen=True)
class PositionalField(Field):
    """value, with no key."""

    value: Expr


@dataclass(frozen=True)
class TableLit(Expr):
    """{ fields }."""

    fields: tuple[Field, ...]


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(frozen=True)
class Stmt:
    """Base for all statements."""

    pos: Pos


@dataclass(frozen=True)
class Block:
    """Statements plus an optional trailing return."""

    pos: Pos
    stmts: tuple[Stmt, ...]
    ret: ReturnStmt | None


@dataclass(frozen=True)
class EmptyStmt(Stmt):
    """;"""


@dataclass(frozen=True)
class AssignStmt(Stmt):
    """targets = values."""

    targets: tuple[Expr, ...]
    values: tuple[Expr, ...]


@dataclass(frozen=True)
class LocalName:
    """Name in a local declaration, with optional <attrib>."""

    pos: Pos
    name: str
    attrib: str | None


@dataclass(frozen=True)
class LocalStmt(Stmt):
    """local names [= values]."""

    names: tuple[LocalName, ...]
    values: tuple[Expr, ...] | None


@dataclass(frozen=True)
class ElseIf:
    """elseif cond then body."""

    pos: Pos
    cond: Expr
    body: Block


@dataclass(frozen=True)
class IfStmt(Stmt):
    """if cond then body {elseif} [else else_body] end."""

    cond: Expr
    body: Block
    elseifs: tuple[ElseIf, ...]
    else_body: Block | None


@dataclass(frozen=True)
class WhileStmt(Stmt):
    """while cond do body end."""

    cond: Expr
    body: Block


@dataclass(frozen=True)
class RepeatStmt(Stmt):
    """repeat body until cond."""

    body: Block
    cond: Expr


@dataclass(frozen=True)
class NumericForStmt(Stmt):
    """for name = start, stop [, step] do body end."""

    name: str
    start: Expr
    stop: Expr
    step: Expr | None
    body: Block


@dataclass(frozen=True)
class GenericForStmt(Stmt):
    """for names in exprs do body end."""

    names: tuple[str, ...]
    exprs: tuple[Expr, ...]
    body: Block


@dataclass(frozen=True)
class BreakStmt(Stmt):
    """break."""


@dataclass(frozen=True)
class GotoStmt(Stmt):
    """goto label."""

    label: str


@dataclass(frozen=True)
class LabelStmt(Stmt):
    """::label::"""

    label: str


@dataclass(frozen=True)
class DoStmt(Stmt):
    """do body end."""

    body: Block


@dataclass(frozen=True)
class CallStmt(Stmt):
    """Call or method call used as a statement."""

    call: Call | MethodCall


@dataclass(frozen=True)
class FuncName:
    """a.b.c[:m] in a function statement."""

    pos: Pos
    names: tuple[str, ...]
    method: str | None


@dataclass(frozen=True)
class FunctionStmt(Stmt):
    """function funcname(params) body end."""

    name: FuncName
    params: Params
    body: Block


@dataclass(frozen=True)
class LocalFunctionStmt(Stmt):
    """local function name(params) body end."""

    name: str
    params: Params
    body: Block


@dataclass(frozen=True)
class ReturnStmt(Stmt):
    """return [values]."""

    values: tuple[Expr, ...]
