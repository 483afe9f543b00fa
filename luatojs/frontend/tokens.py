"""Lua tokenizer: lexes source into a flat token list.

Source text is handled one byte per character: callers pass bytes decoded
as latin-1, so string literals can carry arbitrary bytes back out.
"""

from __future__ import annotations


# Token type constants
TK_INT = "INT"
TK_FLOAT = "FLOAT"
TK_STRING = "STRING"
TK_NAME = "NAME"
TK_OP = "OP"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "and",
    "break",
    "do",
    "else",
    "elseif",
    "end",
    "false",
    "for",
    "function",
    "goto",
    "if",
    "in",
    "local",
    "nil",
    "not",
    "or",
    "repeat",
    "return",
    "then",
    "true",
    "until",
    "while",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    "...",
    "..",
    "==",
    "~=",
    "<=",
    ">=",
    "<<",
    ">>",
    "//",
    "::",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "^",
    "#",
    "&",
    "~",
    "|",
    "<",
    ">",
    "=",
    "(",
    ")",
    "{",
    "}",
    "[",
    "]",
    ";",
    ":",
    ",",
    ".",
}

ESCAPE_MAP: dict[str, int] = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "\\": 0x5C,
    '"': 0x22,
    "'": 0x27,
    "\n": 0x0A,
}

MAX_INT = (1 << 63) - 1


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and position."""

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col
        self.bytes_value: bytes = b""
        self.number_value: int | float = 0

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r}, {self.line}, {self.col})"


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_hex(c: str) -> bool:
    return (c >= "0" and c <= "9") or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def _utf8_encode(cp: int) -> list[int]:
    """Encode a code point the way Lua's \\u{XXX} does, up to 2^31 - 1."""
    if cp < 0x80:
        return [cp]
    limits = [0x800, 0x10000, 0x200000, 0x4000000, 0x80000000]
    n = 1
    while cp >= limits[n - 1]:
        n += 1
    out: list[int] = []
    i = 0
    while i < n:
        out.append(0x80 | (cp & 0x3F))
        cp >>= 6
        i += 1
    first_mark = (0xFF << (7 - n)) & 0xFF
    out.append(first_mark | cp)
    out.reverse()
    return out


class _Lexer:
    """Cursor over the source; tracks line and column."""

    def __init__(self, source: str):
        self.src: str = source
        self.pos: int = 0
        self.line: int = 1
        self.col: int = 1

    def at_end(self) -> bool:
        return self.pos >= len(self.src)

    def peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx >= len(self.src):
            return ""
        return self.src[idx]

    def advance(self) -> str:
        c = self.src[self.pos]
        self.pos += 1
        if c == "\n":
            self.line += 1
            self.col = 1
        else:
            self.col += 1
        return c

    def error(self, msg: str) -> TokenizeError:
        return TokenizeError(msg, self.line, self.col)

    # ── Long brackets ───────────────────────────────────────

    def long_bracket_level(self) -> int:
        """Level of a long bracket opening at the cursor, or -1 if none."""
        if self.peek() != "[":
            return -1
        level = 0
        while self.peek(1 + level) == "=":
            level += 1
        if self.peek(1 + level) == "[":
            return level
        return -1

    def read_long_bracket(self, level: int, what: str) -> str:
        """Consume [==[ ... ]==] and return the contents."""
        start_line = self.line
        start_col = self.col
        for _ in range(level + 2):
            self.advance()
        # A newline right after the opening bracket is skipped
        if self.peek() == "\r":
            self.advance()
            if self.peek() == "\n":
                self.advance()
        elif self.peek() == "\n":
            self.advance()
            if self.peek() == "\r":
                self.advance()
        close = "]" + "=" * level + "]"
        end = self.src.find(close, self.pos)
        if end < 0:
            raise TokenizeError("unfinished long " + what, start_line, start_col)
        contents = self.src[self.pos : end]
        while self.pos < end + len(close):
            self.advance()
        return contents

    # ── Strings ─────────────────────────────────────────────

    def read_quoted(self, quote: str) -> bytes:
        start_line = self.line
        start_col = self.col
        self.advance()
        out: list[int] = []
        while True:
            if self.at_end():
                raise TokenizeError("unfinished string", start_line, start_col)
            c = self.peek()
            if c == quote:
                self.advance()
                break
            if c == "\n":
                raise TokenizeError("unfinished string", start_line, start_col)
            if c == "\\":
                self.advance()
                self.read_escape(out)
                continue
            out.append(ord(self.advance()))
        return bytes(out)

    def read_escape(self, out: list[int]) -> None:
        if self.at_end():
            raise self.error("unfinished string")
        c = self.peek()
        if c in ESCAPE_MAP:
            self.advance()
            if c == "\n" and self.peek() == "\r":
                self.advance()
            out.append(ESCAPE_MAP[c])
            return
        if c == "\r":
            self.advance()
            if self.peek() == "\n":
                self.advance()
            out.append(0x0A)
            return
        if c == "x":
            self.advance()
            h1 = self.peek()
            h2 = self.peek(1)
            if not _is_hex(h1) or not _is_hex(h2):
                raise self.error("hexadecimal digit expected")
            self.advance()
            self.advance()
            out.append(int(h1 + h2, 16))
            return
        if c == "z":
            self.advance()
            while not self.at_end() and self.peek() in " \t\r\n\f\v":
                self.advance()
            return
        if c == "u":
            self.advance()
            if self.peek() != "{":
                raise self.error("missing '{' in \\u{xxxx}")
            self.advance()
            digits = ""
            while _is_hex(self.peek()):
                digits += self.advance()
            if digits == "":
                raise self.error("hexadecimal digit expected")
            if self.peek() != "}":
                raise self.error("missing '}' in \\u{xxxx}")
            self.advance()
            cp = int(digits, 16)
            if cp > 0x7FFFFFFF:
                raise self.error("UTF-8 value too large")
            out.extend(_utf8_encode(cp))
            return
        if _is_digit(c):
            digits = ""
            while len(digits) < 3 and _is_digit(self.peek()):
                digits += self.advance()
            val = int(digits)
            if val > 255:
                raise self.error("decimal escape too large")
            out.append(val)
            return
        raise self.error("invalid escape sequence '\\" + c + "'")

    # ── Numbers ─────────────────────────────────────────────

    def read_number(self) -> Token:
        start = self.pos
        line = self.line
        col = self.col
        is_float = False
        if self.peek() == "0" and self.peek(1) in ("x", "X"):
            self.advance()
            self.advance()
            exp_chars = ("p", "P")
            digit = _is_hex
        else:
            exp_chars = ("e", "E")
            digit = _is_digit
        while True:
            c = self.peek()
            if c in exp_chars:
                is_float = True
                self.advance()
                if self.peek() in ("+", "-"):
                    self.advance()
            elif c == ".":
                is_float = True
                self.advance()
            elif c != "" and digit(c):
                self.advance()
            else:
                break
        if _is_alnum(self.peek()):
            while _is_alnum(self.peek()):
                self.advance()
            raise TokenizeError(
                "malformed number near '" + self.src[start : self.pos] + "'", line, col
            )
        raw = self.src[start : self.pos]
        value = _number_value(raw, is_float)
        if value is None:
            raise TokenizeError("malformed number near '" + raw + "'", line, col)
        tok = Token(TK_FLOAT if isinstance(value, float) else TK_INT, raw, line, col)
        tok.number_value = value
        return tok


def _number_value(raw: str, is_float: bool) -> int | float | None:
    """Numeric value of a Lua numeral, or None if malformed."""
    is_hex = raw[:2] in ("0x", "0X")
    try:
        if is_hex:
            if not is_float:
                if len(raw) == 2:
                    return None
                # Hex integers wrap around modulo 2^64
                val = int(raw[2:], 16) & ((1 << 64) - 1)
                if val > MAX_INT:
                    val -= 1 << 64
                return val
            body = raw[2:]
            if "p" not in body and "P" not in body:
                body += "p0"
            return float.fromhex("0x" + body)
        if not is_float:
            val = int(raw)
            if val > MAX_INT:
                return float(raw)
            return val
        return float(raw)
    except ValueError:
        return None


def tokenize(source: str) -> list[Token]:
    """Tokenize Lua source into a flat list ending with TK_EOF."""
    lx = _Lexer(source)
    tokens: list[Token] = []

    # Shebang line
    if source.startswith("#"):
        while not lx.at_end() and lx.peek() != "\n":
            lx.advance()

    while not lx.at_end():
        c = lx.peek()

        # Whitespace and newlines
        if c in " \t\r\n\f\v":
            lx.advance()
            continue

        # Comments: --[==[ long ]==] or -- to end of line
        if c == "-" and lx.peek(1) == "-":
            lx.advance()
            lx.advance()
            level = lx.long_bracket_level()
            if level >= 0:
                lx.read_long_bracket(level, "comment")
                continue
            while not lx.at_end() and lx.peek() != "\n":
                lx.advance()
            continue

        line = lx.line
        col = lx.col

        # Long string: [[ ... ]]
        if c == "[":
            level = lx.long_bracket_level()
            if level >= 0:
                text = lx.read_long_bracket(level, "string")
                tok = Token(TK_STRING, text, line, col)
                tok.bytes_value = text.encode("latin-1")
                tokens.append(tok)
                continue
            if lx.peek(1) == "=":
                raise lx.error("invalid long string delimiter")

        # Quoted string
        if c == '"' or c == "'":
            value = lx.read_quoted(c)
            tok = Token(TK_STRING, value.decode("latin-1"), line, col)
            tok.bytes_value = value
            tokens.append(tok)
            continue

        # Number, including a leading-dot float like .5
        if _is_digit(c) or (c == "." and _is_digit(lx.peek(1))):
            tokens.append(lx.read_number())
            continue

        # Name or keyword
        if _is_alpha(c):
            word = ""
            while _is_alnum(lx.peek()):
                word += lx.advance()
            if word in KEYWORDS:
                tokens.append(Token(word, word, line, col))
            else:
                tokens.append(Token(TK_NAME, word, line, col))
            continue

        # Multi-character operators
        matched = False
        for op in MULTI_OPS:
            if lx.src.startswith(op, lx.pos):
                for _ in op:
                    lx.advance()
                tokens.append(Token(TK_OP, op, line, col))
                matched = True
                break
        if matched:
            continue

        # Single-character operators
        if c in SINGLE_OPS:
            lx.advance()
            tokens.append(Token(TK_OP, c, line, col))
            continue

        raise lx.error("unexpected symbol near " + repr(c))

    tokens.append(Token(TK_EOF, "", lx.line, lx.col))
    return tokens
