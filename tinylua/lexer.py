"""Tokenizer for TinyLua.

The lexer walks the source one character at a time and eagerly produces
the full list of tokens, always terminated by a single ``EOF`` token.
Characters it does not understand are dropped; each one is recorded as a
:class:`~tinylua.errors.Diagnostic` so callers can decide whether to
report it or carry on with the tokens that were produced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from .errors import Diagnostic, LuaSyntaxError


@dataclass(frozen=True)
class Token:
    type: str
    value: Any
    line: int
    column: int

    def __repr__(self) -> str:
        if self.type in ('NUMBER', 'STRING', 'IDENT'):
            return f"{self.type}({self.value!r})"
        return self.type


KEYWORDS = frozenset({
    'and', 'break', 'do', 'else', 'elseif', 'end', 'false', 'for',
    'function', 'if', 'in', 'local', 'nil', 'not', 'or', 'repeat',
    'return', 'then', 'true', 'until', 'while',
})

SINGLE_CHAR_TOKENS = frozenset('+-*/%^#(){}[];:,')

ESCAPES = {
    'n': '\n',
    't': '\t',
    'r': '\r',
    '\\': '\\',
    '"': '"',
    '\'': '\'',
}


def _is_ident_start(c: str) -> bool:
    return c.isascii() and (c.isalpha() or c == '_')


def _is_ident_char(c: str) -> bool:
    return c.isascii() and (c.isalnum() or c == '_')


class Lexer:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.diagnostics: List[Diagnostic] = []

    def peek(self, offset: int = 0) -> Optional[str]:
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return None

    def advance(self) -> str:
        c = self.source[self.pos]
        self.pos += 1
        if c == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        return c

    def match(self, expected: str) -> bool:
        if self.peek() == expected:
            self.advance()
            return True
        return False

    def error(self, message: str, line: int, column: int, found: Optional[str] = None):
        self.diagnostics.append(Diagnostic('lex', message, line, column, found=found))

    def tokenize(self) -> List[Token]:
        while True:
            self.skip_whitespace()
            if self.peek() is None:
                break
            self.scan_token()
        self.tokens.append(Token('EOF', None, self.line, self.column))
        return self.tokens

    def skip_whitespace(self):
        while True:
            c = self.peek()
            if c is None:
                return
            if c in ' \t\r\n':
                self.advance()
            elif c == '-' and self.peek(1) == '-':
                while self.peek() is not None and self.peek() != '\n':
                    self.advance()
            else:
                return

    def add(self, type_: str, value: Any, line: int, column: int):
        self.tokens.append(Token(type_, value, line, column))

    def scan_token(self):
        line, column = self.line, self.column
        c = self.advance()
        if c in SINGLE_CHAR_TOKENS:
            self.add(c, c, line, column)
            return
        if c in '=<>':
            op = c + '=' if self.match('=') else c
            self.add(op, op, line, column)
            return
        if c == '~':
            if self.match('='):
                self.add('~=', '~=', line, column)
            else:
                self.error("unexpected character '~'", line, column, found='~')
            return
        if c == '.':
            if self.match('.'):
                op = '...' if self.match('.') else '..'
            else:
                op = '.'
            self.add(op, op, line, column)
            return
        if c in '"\'':
            self.scan_string(c, line, column)
            return
        if c.isascii() and c.isdigit():
            self.scan_number(c, line, column)
            return
        if _is_ident_start(c):
            self.scan_identifier(c, line, column)
            return
        self.error(f"unexpected character {c!r}", line, column, found=c)

    def scan_string(self, quote: str, line: int, column: int):
        chars: List[str] = []
        while True:
            c = self.peek()
            if c is None:
                self.error('unterminated string literal', line, column)
                return
            self.advance()
            if c == quote:
                break
            if c == '\\':
                escaped = self.peek()
                if escaped is None:
                    continue
                self.advance()
                chars.append(ESCAPES.get(escaped, escaped))
            else:
                chars.append(c)
        self.add('STRING', ''.join(chars), line, column)

    def scan_number(self, first: str, line: int, column: int):
        # Dots are consumed greedily, so "1.2.3" is one (malformed) literal.
        chars = [first]
        while True:
            c = self.peek()
            if c is None or not (c == '.' or (c.isascii() and c.isdigit())):
                break
            chars.append(self.advance())
        text = ''.join(chars)
        if text.count('.') > 1:
            self.error(f"malformed number {text!r}", line, column, found=text)
            return
        self.add('NUMBER', float(text), line, column)

    def scan_identifier(self, first: str, line: int, column: int):
        chars = [first]
        while self.peek() is not None and _is_ident_char(self.peek()):
            chars.append(self.advance())
        name = ''.join(chars)
        if name in KEYWORDS:
            self.add(name, name, line, column)
        else:
            self.add('IDENT', name, line, column)


def tokenize(source: str) -> List[Token]:
    """Tokenize ``source``, raising :class:`LuaSyntaxError` on any lexical problem."""
    lexer = Lexer(source)
    tokens = lexer.tokenize()
    if lexer.diagnostics:
        raise LuaSyntaxError(lexer.diagnostics)
    return tokens
