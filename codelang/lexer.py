"""Lexer for the CODE language.

The lexer walks the source one character at a time with a single character
of lookahead. Tokens are produced lazily by `Lexer.next_token()`; once the
input is exhausted every further call returns an EOF token.
"""

from __future__ import annotations

import re
from typing import Iterator, List

from .errors import LexError
from .token import Position, Token, TokenType, lookup_ident

FLOAT_PATTERN = re.compile(r'\d+\.\d+')

# Single character tokens that never start a two character operator.
SINGLE_CHAR_TOKENS = {
    '*': TokenType.ASTERISK,
    '/': TokenType.SLASH,
    '%': TokenType.PERCENT,
    '!': TokenType.BANG,
    '~': TokenType.TILDE,
    '&': TokenType.CONCAT,
    '$': TokenType.NEWLINE,
    ',': TokenType.COMMA,
    ';': TokenType.SEMICOLON,
    ':': TokenType.COLON,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
}

# First character -> {second character: two character token}, plus the
# fallback single character token.
TWO_CHAR_TOKENS = {
    '=': ({'=': TokenType.EQ}, TokenType.ASSIGN),
    '+': ({'+': TokenType.INCREMENT}, TokenType.PLUS),
    '-': ({'-': TokenType.DECREMENT}, TokenType.MINUS),
    '<': ({'=': TokenType.LT_EQ, '>': TokenType.NOT_EQ}, TokenType.LT),
    '>': ({'=': TokenType.GT_EQ}, TokenType.GT),
}


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def is_letter(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ch == '_'


class Lexer:
    """Turns CODE source text into tokens."""
    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        # Non-fatal notes, e.g. a bare TRUE/FALSE spelled as an identifier.
        self.warnings: List[str] = []

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == TokenType.EOF:
                return

    @property
    def ch(self) -> str:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return ''

    def peek_char(self) -> str:
        if self.pos + 1 < len(self.source):
            return self.source[self.pos + 1]
        return ''

    def position(self) -> Position:
        return Position(self.pos, self.line, self.column)

    def advance(self, n: int = 1) -> None:
        for _ in range(n):
            if self.pos >= len(self.source):
                return
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def skip_whitespace(self) -> None:
        while self.ch and self.ch in ' \t\r\n':
            self.advance()

    def next_token(self) -> Token:
        self.skip_whitespace()
        pos = self.position()
        c = self.ch

        if c == '':
            return Token(TokenType.EOF, '', pos)

        if c in TWO_CHAR_TOKENS:
            pairs, single = TWO_CHAR_TOKENS[c]
            nxt = self.peek_char()
            if nxt and nxt in pairs:
                self.advance(2)
                return Token(pairs[nxt], c + nxt, pos)
            self.advance()
            return Token(single, c, pos)

        if c == '#':
            # `#]` closes the escape form `[#]`; anything else is a comment.
            if self.peek_char() == ']':
                self.advance()
                return Token(TokenType.HASH, c, pos)
            return Token(TokenType.COMMENT, self.read_comment(), pos)

        if c == '"':
            text = self.read_string()
            if text == 'TRUE':
                return Token(TokenType.TRUE, text, pos)
            if text == 'FALSE':
                return Token(TokenType.FALSE, text, pos)
            return Token(TokenType.STRING, text, pos)

        if c == "'":
            return Token(TokenType.CHARACTER, self.read_char_literal(pos), pos)

        if c in SINGLE_CHAR_TOKENS:
            self.advance()
            return Token(SINGLE_CHAR_TOKENS[c], c, pos)

        if is_letter(c):
            literal = self.read_identifier()
            tok_type = lookup_ident(literal)
            if tok_type in (TokenType.TRUE, TokenType.FALSE):
                self.warnings.append(f"Syntax Error: TRUE and FALSE are reserved keywords at {pos}")
            return Token(tok_type, literal, pos)

        if is_digit(c):
            literal = self.read_number()
            if FLOAT_PATTERN.fullmatch(literal):
                return Token(TokenType.FLOATINGPOINT, literal, pos)
            return Token(TokenType.INTEGER, literal, pos)

        self.advance()
        return Token(TokenType.ILLEGAL, c, pos)

    def read_comment(self) -> str:
        self.advance()  # '#'
        start = self.pos
        while self.ch and self.ch not in '\r\n':
            self.advance()
        return self.source[start:self.pos].strip()

    def read_string(self) -> str:
        self.advance()  # opening quote
        start = self.pos
        while self.ch and self.ch != '"':
            self.advance()
        text = self.source[start:self.pos]
        self.advance()  # closing quote, if any
        return text

    def read_char_literal(self, pos: Position) -> str:
        self.advance()  # opening quote
        start = self.pos
        while self.ch and self.ch != "'":
            self.advance()
        if self.ch != "'":
            raise LexError('Syntax Error: Unclosed character literal.', pos)
        text = self.source[start:self.pos]
        self.advance()
        if len(text) > 1:
            raise LexError('Syntax Error: Character literal is too long.', pos)
        if len(text) == 0:
            raise LexError('Syntax Error: Empty character literal.', pos)
        return text

    def read_identifier(self) -> str:
        start = self.pos
        while self.ch and is_letter(self.ch):
            self.advance()
        return self.source[start:self.pos]

    def read_number(self) -> str:
        start = self.pos
        while self.ch and (is_digit(self.ch) or self.ch == '.'):
            self.advance()
        return self.source[start:self.pos]


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF."""
    return list(Lexer(source))
