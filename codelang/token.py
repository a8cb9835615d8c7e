"""Tokens produced by the CODE lexer.

Fixed symbols and keywords use their exact source text as the enum value,
so a token type can be printed directly in diagnostics. The open token
classes (identifiers, literals, comments) use their kind name instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class TokenType(str, Enum):
    ILLEGAL = 'ILLEGAL'
    EOF = 'EOF'

    # Identifiers and literals
    IDENT = 'IDENT'
    INTEGER = 'INTEGER'
    FLOATINGPOINT = 'FLOATINGPOINT'
    STRING = 'STRING'
    CHARACTER = 'CHARACTER'
    COMMENT = 'COMMENT'

    # Operators
    ASSIGN = '='
    PLUS = '+'
    INCREMENT = '++'
    MINUS = '-'
    DECREMENT = '--'
    BANG = '!'
    TILDE = '~'
    ASTERISK = '*'
    SLASH = '/'
    PERCENT = '%'
    LT = '<'
    GT = '>'
    LT_EQ = '<='
    GT_EQ = '>='
    EQ = '=='
    NOT_EQ = '<>'
    CONCAT = '&'
    NEWLINE = '$'

    # Delimiters
    COMMA = ','
    SEMICOLON = ';'
    COLON = ':'
    LPAREN = '('
    RPAREN = ')'
    LBRACE = '{'
    RBRACE = '}'
    LBRACKET = '['
    RBRACKET = ']'
    HASH = '#'

    # Keywords
    AND = 'AND'
    OR = 'OR'
    NOT = 'NOT'
    FUNCTION = 'FUNCTION'
    IF = 'IF'
    ELSE = 'ELSE'
    WHILE = 'WHILE'
    RETURN = 'RETURN'
    BEGIN = 'BEGIN'
    END = 'END'
    CODE = 'CODE'
    DISPLAY = 'DISPLAY'
    SCAN = 'SCAN'
    INT = 'INT'
    FLOAT = 'FLOAT'
    BOOL = 'BOOL'
    CHAR = 'CHAR'
    TRUE = 'TRUE'
    FALSE = 'FALSE'

    def __str__(self) -> str:
        return self.value


KEYWORDS: Dict[str, TokenType] = {
    t.value: t for t in (
        TokenType.AND, TokenType.OR, TokenType.NOT, TokenType.FUNCTION,
        TokenType.IF, TokenType.ELSE, TokenType.WHILE, TokenType.RETURN,
        TokenType.BEGIN, TokenType.END, TokenType.CODE, TokenType.DISPLAY,
        TokenType.SCAN, TokenType.INT, TokenType.FLOAT, TokenType.BOOL,
        TokenType.CHAR, TokenType.TRUE, TokenType.FALSE,
    )
}

# Keywords that may label a BEGIN ... END block.
BLOCK_LABELS = (TokenType.IF, TokenType.WHILE, TokenType.FUNCTION)

# Declaration keywords.
TYPE_KEYWORDS = (TokenType.INT, TokenType.FLOAT, TokenType.BOOL, TokenType.CHAR)


def lookup_ident(ident: str) -> TokenType:
    """Return the keyword type for `ident`, or IDENT if it is not reserved."""
    return KEYWORDS.get(ident, TokenType.IDENT)


@dataclass(frozen=True)
class Position:
    offset: int = 0
    line: int = 1
    column: int = 1

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"


@dataclass(frozen=True)
class Token:
    type: TokenType
    literal: str
    position: Position = Position()

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.literal!r}, {self.position})"
