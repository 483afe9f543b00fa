"""Lua parser: recursive descent, one method per grammar production.

Binary expressions use priority climbing over the Lua 5.4 operator table
instead of one method per precedence level.
"""

from __future__ import annotations

from ..ast import (
    AssignStmt,
    BinaryOp,
    Block,
    BoolLit,
    BreakStmt,
    Call,
    CallStmt,
    DoStmt,
    ElseIf,
    EmptyStmt,
    Expr,
    Field,
    FuncName,
    FunctionExpr,
    FunctionStmt,
    GenericForStmt,
    GotoStmt,
    IfStmt,
    Index,
    KeyField,
    LabelStmt,
    LocalFunctionStmt,
    LocalName,
    LocalStmt,
    MethodCall,
    Name,
    NameField,
    NilLit,
    NumberLit,
    NumericForStmt,
    Params,
    Paren,
    Pos,
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
from .tokens import (
    TK_EOF,
    TK_FLOAT,
    TK_INT,
    TK_NAME,
    TK_OP,
    TK_STRING,
    Token,
    tokenize,
)

# (left, right) priority; right < left makes an operator right associative
BINARY_PRIORITY: dict[str, tuple[int, int]] = {
    "or": (1, 1),
    "and": (2, 2),
    "<": (3, 3),
    ">": (3, 3),
    "<=": (3, 3),
    ">=": (3, 3),
    "~=": (3, 3),
    "==": (3, 3),
    "|": (4, 4),
    "~": (5, 5),
    "&": (6, 6),
    "<<": (7, 7),
    ">>": (7, 7),
    "..": (9, 8),
    "+": (10, 10),
    "-": (10, 10),
    "*": (11, 11),
    "/": (11, 11),
    "//": (11, 11),
    "%": (11, 11),
    "^": (14, 13),
}

UNARY_PRIORITY = 12

UNARY_OPS: set[str] = {"not", "-", "#", "~"}

BLOCK_END: set[str] = {"return", "end", "else", "elseif", "until", TK_EOF}

LOCAL_ATTRIBS: set[str] = {"const", "close"}


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Parser:
    """Recursive descent parser for Lua."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.value == value and tok.type != TK_STRING

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def expect(self, value: str) -> Token:
        if not self.at(value):
            raise self.error("'" + value + "' expected near " + self._near())
        return self.advance()

    def expect_match(self, value: str, opener: str, line: int) -> Token:
        """Expect a closing token, naming the opener when it is on another line."""
        if self.at(value):
            return self.advance()
        if line == self.current().line:
            raise self.error("'" + value + "' expected near " + self._near())
        raise self.error(
            "'"
            + value
            + "' expected (to close '"
            + opener
            + "' at line "
            + str(line)
            + ") near "
            + self._near()
        )

    def expect_name(self) -> Token:
        tok = self.current()
        if tok.type != TK_NAME:
            raise self.error("<name> expected near " + self._near())
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def _near(self) -> str:
        tok = self.current()
        if tok.type == TK_EOF:
            return "<eof>"
        return "'" + tok.value + "'"

    def _pos(self) -> Pos:
        tok = self.current()
        return Pos(tok.line, tok.col)

    def _block_follows(self) -> bool:
        tok = self.current()
        if tok.type == TK_EOF:
            return True
        return tok.type == tok.value and tok.value in BLOCK_END

    # ── Top Level ────────────────────────────────────────────

    def parse_chunk(self) -> Block:
        block = self.parse_block()
        if not self.at_type(TK_EOF):
            raise self.error("'<eof>' expected near " + self._near())
        return block

    def parse_block(self) -> Block:
        """Block = { Stmt } [ RetStat ]"""
        pos = self._pos()
        stmts: list[Stmt] = []
        while not self._block_follows():
            stmts.append(self.parse_stmt())
        ret: ReturnStmt | None = None
        if self.at("return"):
            ret = self.parse_return_stmt()
        return Block(pos, tuple(stmts), ret)

    def parse_return_stmt(self) -> ReturnStmt:
        """RetStat = 'return' [ ExpList ] [ ';' ]"""
        pos = self._pos()
        self.expect("return")
        values: list[Expr] = []
        if not self._block_follows() and not self.at(";"):
            values = self.parse_expr_list()
        if self.at(";"):
            self.advance()
        if not self._block_follows() or self.at("return"):
            raise self.error("'<eof>' expected near " + self._near())
        return ReturnStmt(pos, tuple(values))

    # ── Statements ───────────────────────────────────────────

    def parse_stmt(self) -> Stmt:
        tok = self.current()
        if tok.type == TK_OP:
            if tok.value == ";":
                pos = self._pos()
                self.advance()
                return EmptyStmt(pos)
            if tok.value == "::":
                return self.parse_label_stmt()
            return self.parse_expr_stmt()
        if tok.type == "if":
            return self.parse_if_stmt()
        if tok.type == "while":
            return self.parse_while_stmt()
        if tok.type == "do":
            pos = self._pos()
            self.advance()
            body = self.parse_block()
            self.expect_match("end", "do", pos.line)
            return DoStmt(pos, body)
        if tok.type == "for":
            return self.parse_for_stmt()
        if tok.type == "repeat":
            return self.parse_repeat_stmt()
        if tok.type == "function":
            return self.parse_function_stmt()
        if tok.type == "local":
            self.advance()
            if self.at("function"):
                return self.parse_local_function(Pos(tok.line, tok.col))
            return self.parse_local_stmt(Pos(tok.line, tok.col))
        if tok.type == "break":
            pos = self._pos()
            self.advance()
            return BreakStmt(pos)
        if tok.type == "goto":
            pos = self._pos()
            self.advance()
            label = self.expect_name()
            return GotoStmt(pos, label.value)
        return self.parse_expr_stmt()

    def parse_label_stmt(self) -> LabelStmt:
        pos = self._pos()
        self.expect("::")
        name = self.expect_name()
        self.expect("::")
        return LabelStmt(pos, name.value)

    def parse_if_stmt(self) -> IfStmt:
        """If = 'if' Exp 'then' Block { 'elseif' Exp 'then' Block } [ 'else' Block ] 'end'"""
        pos = self._pos()
        self.expect("if")
        cond = self.parse_expr()
        self.expect("then")
        body = self.parse_block()
        elseifs: list[ElseIf] = []
        while self.at("elseif"):
            elif_pos = self._pos()
            self.advance()
            elif_cond = self.parse_expr()
            self.expect("then")
            elseifs.append(ElseIf(elif_pos, elif_cond, self.parse_block()))
        else_body: Block | None = None
        if self.at("else"):
            self.advance()
            else_body = self.parse_block()
        self.expect_match("end", "if", pos.line)
        return IfStmt(pos, cond, body, tuple(elseifs), else_body)

    def parse_while_stmt(self) -> WhileStmt:
        pos = self._pos()
        self.expect("while")
        cond = self.parse_expr()
        self.expect("do")
        body = self.parse_block()
        self.expect_match("end", "while", pos.line)
        return WhileStmt(pos, cond, body)

    def parse_repeat_stmt(self) -> RepeatStmt:
        pos = self._pos()
        self.expect("repeat")
        body = self.parse_block()
        self.expect_match("until", "repeat", pos.line)
        cond = self.parse_expr()
        return RepeatStmt(pos, body, cond)

    def parse_for_stmt(self) -> Stmt:
        """For = 'for' Name '=' Exp ',' Exp [ ',' Exp ] 'do' Block 'end'
        | 'for' NameList 'in' ExpList 'do' Block 'end'"""
        pos = self._pos()
        self.expect("for")
        first = self.expect_name()
        if self.at("="):
            self.advance()
            start = self.parse_expr()
            self.expect(",")
            stop = self.parse_expr()
            step: Expr | None = None
            if self.at(","):
                self.advance()
                step = self.parse_expr()
            self.expect("do")
            body = self.parse_block()
            self.expect_match("end", "for", pos.line)
            return NumericForStmt(pos, first.value, start, stop, step, body)
        if not self.at(",") and not self.at("in"):
            raise self.error("'=' or 'in' expected near " + self._near())
        names: list[str] = [first.value]
        while self.at(","):
            self.advance()
            names.append(self.expect_name().value)
        self.expect("in")
        exprs = self.parse_expr_list()
        self.expect("do")
        body = self.parse_block()
        self.expect_match("end", "for", pos.line)
        return GenericForStmt(pos, tuple(names), tuple(exprs), body)

    def parse_function_stmt(self) -> FunctionStmt:
        """Function = 'function' FuncName FuncBody"""
        pos = self._pos()
        self.expect("function")
        name_pos = self._pos()
        names: list[str] = [self.expect_name().value]
        while self.at("."):
            self.advance()
            names.append(self.expect_name().value)
        method: str | None = None
        if self.at(":"):
            self.advance()
            method = self.expect_name().value
        params, body = self.parse_func_body(pos.line)
        return FunctionStmt(pos, FuncName(name_pos, tuple(names), method), params, body)

    def parse_local_function(self, pos: Pos) -> LocalFunctionStmt:
        self.expect("function")
        name = self.expect_name()
        params, body = self.parse_func_body(pos.line)
        return LocalFunctionStmt(pos, name.value, params, body)

    def parse_local_stmt(self, pos: Pos) -> LocalStmt:
        """Local = 'local' AttNameList [ '=' ExpList ]"""
        names: list[LocalName] = [self.parse_local_name()]
        while self.at(","):
            self.advance()
            names.append(self.parse_local_name())
        values: tuple[Expr, ...] | None = None
        if self.at("="):
            self.advance()
            values = tuple(self.parse_expr_list())
        return LocalStmt(pos, tuple(names), values)

    def parse_local_name(self) -> LocalName:
        """AttName = Name [ '<' Name '>' ]"""
        pos = self._pos()
        name = self.expect_name()
        attrib: str | None = None
        if self.at("<"):
            self.advance()
            attr_tok = self.expect_name()
            if attr_tok.value not in LOCAL_ATTRIBS:
                raise ParseError(
                    "unknown attribute '" + attr_tok.value + "'",
                    attr_tok.line,
                    attr_tok.col,
                )
            attrib = attr_tok.value
            self.expect(">")
        return LocalName(pos, name.value, attrib)

    def parse_func_body(self, line: int) -> tuple[Params, Block]:
        """FuncBody = '(' [ ParList ] ')' Block 'end'"""
        self.expect("(")
        names: list[str] = []
        variadic = False
        if not self.at(")"):
            while True:
                if self.at("..."):
                    self.advance()
                    variadic = True
                    break
                names.append(self.expect_name().value)
                if not self.at(","):
                    break
                self.advance()
        self.expect(")")
        body = self.parse_block()
        self.expect_match("end", "function", line)
        return Params(tuple(names), variadic), body

    def parse_expr_stmt(self) -> Stmt:
        """ExprStat = SuffixedExp ( AssignTail | ε when a call )"""
        pos = self._pos()
        expr = self.parse_suffixed_expr()
        if self.at("=") or self.at(","):
            targets: list[Expr] = [expr]
            while self.at(","):
                self.advance()
                targets.append(self.parse_suffixed_expr())
            for target in targets:
                if not isinstance(target, (Name, Index)):
                    raise ParseError(
                        "syntax error: cannot assign to expression",
                        target.pos.line,
                        target.pos.col,
                    )
            self.expect("=")
            values = self.parse_expr_list()
            return AssignStmt(pos, tuple(targets), tuple(values))
        if not isinstance(expr, (Call, MethodCall)):
            raise self.error("syntax error near " + self._near())
        return CallStmt(pos, expr)

    # ── Expressions ──────────────────────────────────────────

    def parse_expr_list(self) -> list[Expr]:
        exprs: list[Expr] = [self.parse_expr()]
        while self.at(","):
            self.advance()
            exprs.append(self.parse_expr())
        return exprs

    def parse_expr(self, limit: int = 0) -> Expr:
        """SubExpr = ( SimpleExp | UnOp SubExpr ) { BinOp SubExpr }"""
        tok = self.current()
        if tok.value in UNARY_OPS and tok.type != TK_STRING:
            pos = self._pos()
            op = self.advance().value
            operand = self.parse_expr(UNARY_PRIORITY)
            left: Expr = UnaryOp(pos, op, operand)
        else:
            left = self.parse_simple_expr()
        while True:
            tok = self.current()
            if tok.type == TK_STRING or tok.value not in BINARY_PRIORITY:
                break
            left_prio, right_prio = BINARY_PRIORITY[tok.value]
            if left_prio <= limit:
                break
            op = self.advance().value
            right = self.parse_expr(right_prio)
            left = BinaryOp(left.pos, op, left, right)
        return left

    def parse_simple_expr(self) -> Expr:
        """SimpleExp = Number | String | nil | true | false | '...'
        | TableCons | 'function' FuncBody | SuffixedExp"""
        tok = self.current()
        pos = self._pos()
        if tok.type == TK_INT or tok.type == TK_FLOAT:
            self.advance()
            return NumberLit(pos, tok.number_value, tok.value)
        if tok.type == TK_STRING:
            self.advance()
            return StringLit(pos, tok.bytes_value)
        if tok.type == "nil":
            self.advance()
            return NilLit(pos)
        if tok.type == "true":
            self.advance()
            return BoolLit(pos, True)
        if tok.type == "false":
            self.advance()
            return BoolLit(pos, False)
        if self.at("..."):
            self.advance()
            return Vararg(pos)
        if self.at("{"):
            return self.parse_table()
        if tok.type == "function":
            self.advance()
            params, body = self.parse_func_body(pos.line)
            return FunctionExpr(pos, params, body)
        return self.parse_suffixed_expr()

    def parse_primary_expr(self) -> Expr:
        """PrimaryExp = Name | '(' Exp ')'"""
        tok = self.current()
        pos = self._pos()
        if tok.type == TK_NAME:
            self.advance()
            return Name(pos, tok.value)
        if self.at("("):
            self.advance()
            inner = self.parse_expr()
            self.expect_match(")", "(", pos.line)
            return Paren(pos, inner)
        raise self.error("unexpected symbol near " + self._near())

    def parse_suffixed_expr(self) -> Expr:
        """SuffixedExp = PrimaryExp { '.' Name | '[' Exp ']' | ':' Name FuncArgs | FuncArgs }"""
        expr = self.parse_primary_expr()
        while True:
            tok = self.current()
            if self.at("."):
                self.advance()
                name = self.expect_name()
                key = StringLit(Pos(name.line, name.col), name.value.encode("latin-1"))
                expr = Index(expr.pos, expr, key)
            elif self.at("["):
                self.advance()
                index = self.parse_expr()
                self.expect("]")
                expr = Index(expr.pos, expr, index)
            elif self.at(":"):
                self.advance()
                method = self.expect_name()
                args = self.parse_call_args()
                expr = MethodCall(expr.pos, expr, method.value, tuple(args))
            elif self.at("(") or self.at("{") or tok.type == TK_STRING:
                args = self.parse_call_args()
                expr = Call(expr.pos, expr, tuple(args))
            else:
                break
        return expr

    def parse_call_args(self) -> list[Expr]:
        """FuncArgs = '(' [ ExpList ] ')' | TableCons | String"""
        tok = self.current()
        if tok.type == TK_STRING:
            self.advance()
            return [StringLit(Pos(tok.line, tok.col), tok.bytes_value)]
        if self.at("{"):
            return [self.parse_table()]
        if not self.at("("):
            raise self.error("function arguments expected near " + self._near())
        line = tok.line
        self.advance()
        args: list[Expr] = []
        if not self.at(")"):
            args = self.parse_expr_list()
        self.expect_match(")", "(", line)
        return args

    def parse_table(self) -> TableLit:
        """TableCons = '{' [ Field { Sep Field } [ Sep ] ] '}'"""
        pos = self._pos()
        self.expect("{")
        fields: list[Field] = []
        while not self.at("}"):
            fields.append(self.parse_field())
            if self.at(",") or self.at(";"):
                self.advance()
            else:
                break
        self.expect_match("}", "{", pos.line)
        return TableLit(pos, tuple(fields))

    def parse_field(self) -> Field:
        """Field = '[' Exp ']' '=' Exp | Name '=' Exp | Exp"""
        pos = self._pos()
        if self.at("["):
            self.advance()
            key = self.parse_expr()
            self.expect("]")
            self.expect("=")
            return KeyField(pos, key, self.parse_expr())
        tok = self.current()
        nxt = self.peek(1)
        if tok.type == TK_NAME and nxt.type == TK_OP and nxt.value == "=":
            self.advance()
            self.advance()
            return NameField(pos, tok.value, self.parse_expr())
        return PositionalField(pos, self.parse_expr())


def parse(source: bytes | str) -> Block:
    """Parse Lua source into its top-level Block.

    Text is encoded as UTF-8 first; the parser then works one byte per
    character so string literals keep their exact bytes.
    """
    if isinstance(source, str):
        source = source.encode("utf-8")
    tokens = tokenize(source.decode("latin-1"))
    return Parser(tokens).parse_chunk()
