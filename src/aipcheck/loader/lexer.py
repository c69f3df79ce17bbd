from dataclasses import dataclass
from enum import Enum
from typing import List

from .errors import ParseError

SYMBOLS = frozenset("{}[]()<>;,=:.-+/")
HEX_DIGITS = "0123456789abcdefABCDEF"

_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "?": "?",
}


class TokenKind(str, Enum):
    IDENT = "ident"
    INT = "int"
    FLOAT = "float"
    STRING = "string"
    SYMBOL = "symbol"
    EOF = "eof"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    line: int
    column: int
    # Comment block directly preceding the token (not trailing the previous one).
    comment: str = ""


def _clean_block_comment(body: str) -> List[str]:
    lines = []
    for raw in body.splitlines():
        stripped = raw.strip()
        if stripped.startswith("*"):
            stripped = stripped[1:].strip()
        lines.append(stripped)
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines


class Lexer:
    def __init__(self, text: str, path: str = "<string>"):
        self.text = text
        self.path = path
        self.pos = 0
        self.line = 1
        self.column = 1

    def _error(self, message: str, line: int = 0, column: int = 0) -> ParseError:
        return ParseError(self.path, line or self.line, column or self.column, message)

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def _advance(self, count: int = 1) -> str:
        chunk = self.text[self.pos : self.pos + count]
        for ch in chunk:
            if ch == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += count
        return chunk

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        pending_comment: List[str] = []
        last_token_line = 0

        while True:
            ch = self._peek()
            if not ch:
                break

            if ch.isspace():
                self._advance()
                continue

            if ch == "/" and self._peek(1) == "/":
                start_line = self.line
                end = self.text.find("\n", self.pos)
                end = len(self.text) if end == -1 else end
                body = self._advance(end - self.pos)[2:]
                if start_line == last_token_line:
                    continue  # trailing comment
                text = body[1:] if body.startswith(" ") else body
                pending_comment.append(text.rstrip())
                continue

            if ch == "/" and self._peek(1) == "*":
                start_line, start_col = self.line, self.column
                end = self.text.find("*/", self.pos + 2)
                if end == -1:
                    raise self._error(
                        "Unterminated block comment", start_line, start_col
                    )
                body = self._advance(end + 2 - self.pos)[2:-2]
                if start_line != last_token_line:
                    pending_comment.extend(_clean_block_comment(body))
                continue

            line, column = self.line, self.column
            comment = "\n".join(pending_comment).strip()
            pending_comment = []

            if ch.isalpha() or ch == "_":
                kind, value = TokenKind.IDENT, self._read_ident()
            elif ch.isdigit() or (ch == "." and self._peek(1).isdigit()):
                kind, value = self._read_number()
            elif ch in "\"'":
                kind, value = TokenKind.STRING, self._read_string()
            elif ch in SYMBOLS:
                kind, value = TokenKind.SYMBOL, self._advance()
            else:
                raise self._error(f"Unexpected character {ch!r}")
            tokens.append(Token(kind, value, line, column, comment))
            last_token_line = self.line

        tokens.append(Token(TokenKind.EOF, "", self.line, self.column))
        return tokens

    def _read_ident(self) -> str:
        start = self.pos
        while self._peek() and (self._peek().isalnum() or self._peek() == "_"):
            self._advance()
        return self.text[start : self.pos]

    def _read_number(self):
        start = self.pos
        kind = TokenKind.INT
        if self._peek() == "0" and self._peek(1) in ("x", "X"):
            self._advance(2)
            while self._peek() and self._peek() in HEX_DIGITS:
                self._advance()
            if self.pos - start == 2 or self._peek().isalnum() or self._peek() == "_":
                near = self.text[start : self.pos + 1]
                raise self._error(f"Malformed hex number near {near!r}")
            return kind, self.text[start : self.pos]

        while self._peek().isdigit():
            self._advance()
        if self._peek() == ".":
            kind = TokenKind.FLOAT
            self._advance()
            while self._peek().isdigit():
                self._advance()
        if self._peek() in ("e", "E"):
            kind = TokenKind.FLOAT
            self._advance()
            if self._peek() in ("+", "-"):
                self._advance()
            if not self._peek().isdigit():
                raise self._error("Malformed float exponent")
            while self._peek().isdigit():
                self._advance()
        if self._peek() in ("f", "F") and kind == TokenKind.FLOAT:
            self._advance()
        if self._peek().isalpha() or self._peek() == "_":
            near = self.text[start : self.pos + 1]
            raise self._error(f"Malformed number near {near!r}")
        return kind, self.text[start : self.pos]

    def _read_string(self) -> str:
        line, column = self.line, self.column
        quote = self._advance()
        chars: List[str] = []
        while True:
            ch = self._peek()
            if not ch or ch == "\n":
                raise self._error("Unterminated string literal", line, column)
            self._advance()
            if ch == quote:
                return "".join(chars)
            if ch != "\\":
                chars.append(ch)
                continue

            esc = self._peek()
            if not esc:
                raise self._error("Unterminated string literal", line, column)
            self._advance()
            if esc in _ESCAPES:
                chars.append(_ESCAPES[esc])
            elif esc in ("x", "X"):
                digits = ""
                while len(digits) < 2 and self._peek() and self._peek() in HEX_DIGITS:
                    digits += self._advance()
                if not digits:
                    raise self._error("Invalid hex escape")
                chars.append(chr(int(digits, 16)))
            elif esc in ("u", "U"):
                chars.append(self._read_unicode_escape(esc))
            elif esc in "01234567":
                digits = esc
                while len(digits) < 3 and self._peek() and self._peek() in "01234567":
                    digits += self._advance()
                chars.append(chr(int(digits, 8)))
            else:
                raise self._error(f"Invalid escape sequence '\\{esc}'")


    def _read_hex_digits(self, count: int) -> str:
        digits = ""
        while len(digits) < count and self._peek() and self._peek() in HEX_DIGITS:
            digits += self._advance()
        return digits

    def _read_unicode_escape(self, esc: str) -> str:
        width = 4 if esc == "u" else 8
        digits = self._read_hex_digits(width)
        if len(digits) != width:
            raise self._error(f"Expected {width} hex digits after '\\{esc}'")
        code = int(digits, 16)
        # A \u surrogate pair spells one code point.
        if 0xD800 <= code <= 0xDBFF and self.text.startswith("\\u", self.pos):
            low_text = self.text[self.pos + 2 : self.pos + 6]
            if len(low_text) == 4 and all(c in HEX_DIGITS for c in low_text):
                low = int(low_text, 16)
                if 0xDC00 <= low <= 0xDFFF:
                    self._advance(6)
                    code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
        if code > 0x10FFFF:
            raise self._error(f"Unicode escape out of range: '\\{esc}{digits}'")
        return chr(code)


def tokenize(text: str, path: str = "<string>") -> List[Token]:
    return Lexer(text, path).tokenize()
