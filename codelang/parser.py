"""Pratt parser for the CODE language.

Statements are parsed by recursive descent, expressions by precedence
climbing: every token type may register a prefix handler and/or an infix
handler, and the expression loop keeps folding infix operators while the
next token binds tighter than the current precedence.

The parser never raises on bad input. Problems are appended to
`Parser.errors` and parsing carries on, so callers must check that list
before evaluating the returned Program. (The lexer may still raise a
`LexError` for a malformed character literal.)
"""

from __future__ import annotations

import sys
from enum import IntEnum
from typing import Callable, Dict, List, Optional

from .ast import (
    AssignmentStatement, Binding, BlockStatement, BooleanLiteral, CallExpression,
    CharLiteral, Comment, DecrementExpression, DisplayStatement, EscapeLiteral,
    Expression, ExpressionStatement, FloatLiteral, FunctionLiteral, Identifier,
    IfExpression, IncrementExpression, IndexExpression, InfixExpression,
    IntegerLiteral, NewLine, PrefixExpression, Program, ReturnStatement,
    ScanStatement, Statement, StringLiteral, VarDeclaration, WhileLoop,
)
from .config import DEFAULT_MAX_DEPTH
from .lexer import Lexer
from .token import BLOCK_LABELS, TYPE_KEYWORDS, Token, TokenType

# Python frames used per level of expression nesting, with headroom.
FRAMES_PER_DEPTH = 8


class Precedence(IntEnum):
    LOWEST = 1
    OR = 2
    AND = 3
    EQUALITY = 4
    RELATIONAL = 5
    ADDITIVE = 6
    MULTIPLICATIVE = 7
    PREFIX = 8
    CALL = 9


PRECEDENCES: Dict[TokenType, Precedence] = {
    TokenType.OR: Precedence.OR,
    TokenType.AND: Precedence.AND,
    TokenType.EQ: Precedence.EQUALITY,
    TokenType.NOT_EQ: Precedence.EQUALITY,
    TokenType.LT: Precedence.RELATIONAL,
    TokenType.GT: Precedence.RELATIONAL,
    TokenType.LT_EQ: Precedence.RELATIONAL,
    TokenType.GT_EQ: Precedence.RELATIONAL,
    TokenType.PLUS: Precedence.ADDITIVE,
    TokenType.MINUS: Precedence.ADDITIVE,
    TokenType.ASTERISK: Precedence.MULTIPLICATIVE,
    TokenType.SLASH: Precedence.MULTIPLICATIVE,
    TokenType.PERCENT: Precedence.MULTIPLICATIVE,
    TokenType.LPAREN: Precedence.CALL,
    TokenType.LBRACKET: Precedence.CALL,
}

PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Expression], Optional[Expression]]


def default_value(kind: TokenType, at: Token) -> Expression:
    """Zero literal used when a declaration omits its initializer."""
    pos = at.position
    if kind == TokenType.FLOAT:
        return FloatLiteral(Token(TokenType.FLOATINGPOINT, '0.0', pos), 0.0)
    if kind == TokenType.BOOL:
        return BooleanLiteral(Token(TokenType.FALSE, 'FALSE', pos), False)
    if kind == TokenType.CHAR:
        return CharLiteral(Token(TokenType.CHARACTER, '', pos), '')
    return IntegerLiteral(Token(TokenType.INTEGER, '0', pos), 0)


class Parser:
    def __init__(self, lexer: Lexer, require_code_block: bool = True,
                 max_depth: int = DEFAULT_MAX_DEPTH):
        self.lexer = lexer
        self.require_code_block = require_code_block
        self.max_depth = max_depth
        self.depth = 0
        self.errors: List[str] = []
        self.comments: List[str] = []
        self._pending: List[Token] = []

        self.prefix_parse_fns: Dict[TokenType, PrefixParseFn] = {}
        self.infix_parse_fns: Dict[TokenType, InfixParseFn] = {}

        self.register_prefix(TokenType.IDENT, self.parse_identifier)
        self.register_prefix(TokenType.INCREMENT, self.parse_pre_increment)
        self.register_prefix(TokenType.DECREMENT, self.parse_pre_decrement)
        self.register_prefix(TokenType.INTEGER, self.parse_integer_literal)
        self.register_prefix(TokenType.FLOATINGPOINT, self.parse_float_literal)
        self.register_prefix(TokenType.CHARACTER, self.parse_char_literal)
        self.register_prefix(TokenType.STRING, self.parse_string_literal)
        self.register_prefix(TokenType.TRUE, self.parse_boolean)
        self.register_prefix(TokenType.FALSE, self.parse_boolean)
        for tok_type in (TokenType.BANG, TokenType.NOT, TokenType.MINUS, TokenType.TILDE):
            self.register_prefix(tok_type, self.parse_prefix_expression)
        self.register_prefix(TokenType.LPAREN, self.parse_grouped_expression)
        self.register_prefix(TokenType.IF, self.parse_if_expression)
        self.register_prefix(TokenType.FUNCTION, self.parse_function_literal)
        self.register_prefix(TokenType.LBRACKET, self.parse_escape_literal)
        self.register_prefix(TokenType.NEWLINE, self.parse_newline)
        self.register_prefix(TokenType.COMMENT, self.parse_comment)

        for tok_type, precedence in PRECEDENCES.items():
            if precedence < Precedence.CALL:
                self.register_infix(tok_type, self.parse_infix_expression)
        self.register_infix(TokenType.LPAREN, self.parse_call_expression)
        self.register_infix(TokenType.LBRACKET, self.parse_index_expression)

        self.cur_token = self._read()
        self.peek_token = self._read()

    # Token handling
    def register_prefix(self, tok_type: TokenType, fn: PrefixParseFn) -> None:
        self.prefix_parse_fns[tok_type] = fn

    def register_infix(self, tok_type: TokenType, fn: InfixParseFn) -> None:
        self.infix_parse_fns[tok_type] = fn

    def _read(self) -> Token:
        if self._pending:
            return self._pending.pop(0)
        return self.lexer.next_token()

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self._read()

    def peek_second(self) -> Token:
        """The token after `peek_token`, without consuming anything."""
        if not self._pending:
            self._pending.append(self.lexer.next_token())
        return self._pending[0]

    def cur_token_is(self, tok_type: TokenType) -> bool:
        return self.cur_token.type == tok_type

    def peek_token_is(self, tok_type: TokenType) -> bool:
        return self.peek_token.type == tok_type

    def expect_peek(self, tok_type: TokenType) -> bool:
        if self.peek_token_is(tok_type):
            self.next_token()
            return True
        self.peek_error(tok_type)
        return False

    def skip_semicolon(self) -> None:
        if self.peek_token_is(TokenType.SEMICOLON):
            self.next_token()

    def cur_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.cur_token.type, Precedence.LOWEST)

    def peek_precedence(self) -> Precedence:
        return PRECEDENCES.get(self.peek_token.type, Precedence.LOWEST)

    # Diagnostics
    def error(self, tok: Token, msg: str) -> None:
        self.errors.append(f"{msg} at {tok.position}")

    def peek_error(self, tok_type: TokenType) -> None:
        self.error(
            self.peek_token,
            f"expected next token to be {tok_type}, got {self.peek_token.type} instead",
        )

    def no_prefix_parse_fn_error(self, tok: Token) -> None:
        self.error(tok, f"no prefix parse function for {tok.type} found: {tok.literal}")

    # Program and statements
    def parse_program(self) -> Program:
        program = Program()
        needed = self.max_depth * FRAMES_PER_DEPTH + 200
        if sys.getrecursionlimit() < needed:
            sys.setrecursionlimit(needed)
        in_code = False
        reported = False
        while not self.cur_token_is(TokenType.EOF):
            if self.cur_token_is(TokenType.BEGIN) and self.peek_token_is(TokenType.CODE):
                in_code = True
                reported = False
                self.next_token()
                self.next_token()
                continue
            if self.cur_token_is(TokenType.END) and self.peek_token_is(TokenType.CODE):
                in_code = False
                self.next_token()
                self.next_token()
                continue
            if (self.require_code_block and not in_code and not reported
                    and not self.cur_token_is(TokenType.COMMENT)):
                self.error(self.cur_token, 'code outside of BEGIN CODE and END CODE block')
                reported = True
            stmt = self.parse_statement()
            if stmt is not None:
                program.statements.append(stmt)
            self.next_token()
        return program

    def parse_statement(self) -> Optional[Statement]:
        tok_type = self.cur_token.type
        if tok_type in TYPE_KEYWORDS:
            return self.parse_var_declaration()
        if tok_type == TokenType.DISPLAY:
            return self.parse_display_statement()
        if tok_type == TokenType.SCAN:
            return self.parse_scan_statement()
        if tok_type == TokenType.RETURN:
            return self.parse_return_statement()
        if tok_type == TokenType.WHILE:
            return self.parse_while_loop()
        if tok_type == TokenType.COMMENT:
            return self.parse_comment()
        if tok_type == TokenType.IDENT and self.peek_token_is(TokenType.ASSIGN):
            return self.parse_assignment_statement()
        return self.parse_expression_statement()

    def parse_var_declaration(self) -> Optional[VarDeclaration]:
        decl_token = self.cur_token
        bindings: List[Binding] = []
        while True:
            if not self.expect_peek(TokenType.IDENT):
                return None
            ident = Identifier(self.cur_token, self.cur_token.literal)
            if self.peek_token_is(TokenType.ASSIGN):
                self.next_token()
                self.next_token()
                value = self.parse_expression(Precedence.LOWEST)
                if value is None:
                    return None
            else:
                value = default_value(decl_token.type, self.cur_token)
            bindings.append(Binding(ident, value))
            if not self.peek_token_is(TokenType.COMMA):
                break
            self.next_token()
        self.skip_semicolon()
        return VarDeclaration(decl_token, bindings)

    def parse_return_statement(self) -> ReturnStatement:
        tok = self.cur_token
        value = None
        if not (self.peek_token_is(TokenType.SEMICOLON) or self.peek_token_is(TokenType.END)
                or self.peek_token_is(TokenType.RBRACE) or self.peek_token_is(TokenType.EOF)):
            self.next_token()
            value = self.parse_expression(Precedence.LOWEST)
        self.skip_semicolon()
        return ReturnStatement(tok, value)

    def parse_expression_statement(self) -> Optional[ExpressionStatement]:
        tok = self.cur_token
        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None
        self.skip_semicolon()
        return ExpressionStatement(tok, expression)

    def parse_assignment_statement(self) -> Optional[AssignmentStatement]:
        tok = self.cur_token
        name = Identifier(tok, tok.literal)
        self.next_token()  # '='
        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None
        self.skip_semicolon()
        return AssignmentStatement(tok, name, value)

    def parse_display_statement(self) -> Optional[DisplayStatement]:
        tok = self.cur_token
        if not self.expect_peek(TokenType.COLON):
            return None
        arguments: List[Expression] = []
        self.next_token()
        while True:
            part = self.parse_expression(Precedence.LOWEST)
            if part is None:
                return None
            if not isinstance(part, Comment):
                arguments.append(part)
            if not self.peek_token_is(TokenType.CONCAT):
                break
            self.next_token()
            self.next_token()
        self.skip_semicolon()
        return DisplayStatement(tok, arguments)

    def parse_scan_statement(self) -> Optional[ScanStatement]:
        tok = self.cur_token
        if self.peek_token_is(TokenType.COLON):
            self.next_token()
        names: List[Identifier] = []
        while True:
            if not self.expect_peek(TokenType.IDENT):
                return None
            names.append(Identifier(self.cur_token, self.cur_token.literal))
            if not self.peek_token_is(TokenType.COMMA):
                break
            self.next_token()
        self.skip_semicolon()
        return ScanStatement(tok, names)

    def parse_while_loop(self) -> Optional[WhileLoop]:
        tok = self.cur_token
        condition = self.parse_condition()
        if condition is None:
            return None
        body = self.parse_body()
        if body is None:
            return None
        self.skip_semicolon()
        return WhileLoop(tok, condition, body)

    def parse_condition(self) -> Optional[Expression]:
        """`( expression )` following IF or WHILE."""
        if not self.expect_peek(TokenType.LPAREN):
            return None
        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None or not self.expect_peek(TokenType.RPAREN):
            return None
        return condition

    def parse_body(self) -> Optional[BlockStatement]:
        if self.peek_token_is(TokenType.LBRACE) or self.peek_token_is(TokenType.BEGIN):
            self.next_token()
            return self.parse_block_statement()
        self.peek_error(TokenType.BEGIN)
        return None

    def parse_block_statement(self) -> BlockStatement:
        """Parse `BEGIN [label] ... END [label]` or `{ ... }`.

        The current token is the opening BEGIN or `{`. Running out of input
        before the closing token returns what was parsed so far.
        """
        block = BlockStatement(self.cur_token, [])
        label: Optional[TokenType] = None
        if self.cur_token_is(TokenType.LBRACE):
            closer = TokenType.RBRACE
        else:
            closer = TokenType.END
            if self.peek_token.type in BLOCK_LABELS and self.peek_second().type != TokenType.LPAREN:
                self.next_token()
                label = self.cur_token.type
        self.next_token()
        while not self.cur_token_is(closer):
            if self.cur_token_is(TokenType.EOF):
                return block
            stmt = self.parse_statement()
            if stmt is not None:
                block.statements.append(stmt)
            self.next_token()
        if label is not None:
            self.expect_peek(label)
        return block

    def parse_comment(self) -> Comment:
        self.comments.append(self.cur_token.literal)
        return Comment(self.cur_token, self.cur_token.literal)

    # Expressions
    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        self.depth += 1
        try:
            if self.depth > self.max_depth:
                self.error(self.cur_token, 'expression nested too deeply')
                return None
            prefix = self.prefix_parse_fns.get(self.cur_token.type)
            if prefix is None:
                self.no_prefix_parse_fn_error(self.cur_token)
                return None
            left = prefix()
            while (left is not None and not self.peek_token_is(TokenType.SEMICOLON)
                   and precedence < self.peek_precedence()):
                infix = self.infix_parse_fns.get(self.peek_token.type)
                if infix is None:
                    return left
                self.next_token()
                left = infix(left)
            return left
        finally:
            self.depth -= 1

    def parse_identifier(self) -> Expression:
        ident = Identifier(self.cur_token, self.cur_token.literal)
        if self.peek_token_is(TokenType.INCREMENT):
            self.next_token()
            return IncrementExpression(self.cur_token, ident, False)
        if self.peek_token_is(TokenType.DECREMENT):
            self.next_token()
            return DecrementExpression(self.cur_token, ident, False)
        return ident

    def parse_pre_increment(self) -> Optional[Expression]:
        tok = self.cur_token
        if not self.expect_peek(TokenType.IDENT):
            return None
        return IncrementExpression(tok, Identifier(self.cur_token, self.cur_token.literal), True)

    def parse_pre_decrement(self) -> Optional[Expression]:
        tok = self.cur_token
        if not self.expect_peek(TokenType.IDENT):
            return None
        return DecrementExpression(tok, Identifier(self.cur_token, self.cur_token.literal), True)

    def parse_integer_literal(self) -> Optional[Expression]:
        try:
            return IntegerLiteral(self.cur_token, int(self.cur_token.literal))
        except ValueError:
            self.error(self.cur_token, f"could not parse {self.cur_token.literal} as integer")
            return None

    def parse_float_literal(self) -> Optional[Expression]:
        try:
            return FloatLiteral(self.cur_token, float(self.cur_token.literal))
        except ValueError:
            self.error(self.cur_token, f"could not parse {self.cur_token.literal} as float")
            return None

    def parse_char_literal(self) -> Expression:
        return CharLiteral(self.cur_token, self.cur_token.literal)

    def parse_string_literal(self) -> Expression:
        return StringLiteral(self.cur_token, self.cur_token.literal)

    def parse_boolean(self) -> Expression:
        return BooleanLiteral(self.cur_token, self.cur_token_is(TokenType.TRUE))

    def parse_newline(self) -> Expression:
        return NewLine(self.cur_token, '\n')

    def parse_escape_literal(self) -> Optional[Expression]:
        tok = self.cur_token
        self.next_token()
        escaped = self.cur_token.literal
        if not self.expect_peek(TokenType.RBRACKET):
            return None
        return EscapeLiteral(tok, escaped)

    def parse_prefix_expression(self) -> Optional[Expression]:
        tok = self.cur_token
        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None
        return PrefixExpression(tok, tok.literal, right)

    def parse_infix_expression(self, left: Expression) -> Optional[Expression]:
        tok = self.cur_token
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return InfixExpression(tok, left, tok.literal, right)

    def parse_grouped_expression(self) -> Optional[Expression]:
        self.next_token()
        exp = self.parse_expression(Precedence.LOWEST)
        if exp is None or not self.expect_peek(TokenType.RPAREN):
            return None
        return exp

    def parse_if_expression(self) -> Optional[Expression]:
        tok = self.cur_token
        condition = self.parse_condition()
        if condition is None:
            return None
        consequence = self.parse_body()
        if consequence is None:
            return None
        alternative = None
        if self.peek_token_is(TokenType.ELSE):
            self.next_token()
            if self.peek_token_is(TokenType.IF):
                # ELSE IF (...) chains become a block holding the nested IF.
                else_token = self.cur_token
                self.next_token()
                nested = self.parse_if_expression()
                if nested is None:
                    return None
                alternative = BlockStatement(else_token, [ExpressionStatement(nested.token, nested)])
            else:
                alternative = self.parse_body()
                if alternative is None:
                    return None
        return IfExpression(tok, condition, consequence, alternative)

    def parse_function_literal(self) -> Optional[Expression]:
        tok = self.cur_token
        if not self.expect_peek(TokenType.LPAREN):
            return None
        parameters = self.parse_function_parameters()
        if parameters is None:
            return None
        body = self.parse_body()
        if body is None:
            return None
        return FunctionLiteral(tok, parameters, body)

    def parse_function_parameters(self) -> Optional[List[Identifier]]:
        identifiers: List[Identifier] = []
        if self.peek_token_is(TokenType.RPAREN):
            self.next_token()
            return identifiers
        if not self.expect_peek(TokenType.IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.literal))
        while self.peek_token_is(TokenType.COMMA):
            self.next_token()
            if not self.expect_peek(TokenType.IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.literal))
        if not self.expect_peek(TokenType.RPAREN):
            return None
        return identifiers

    def parse_call_expression(self, function: Expression) -> Optional[Expression]:
        tok = self.cur_token
        arguments = self.parse_expression_list(TokenType.RPAREN)
        if arguments is None:
            return None
        return CallExpression(tok, function, arguments)

    def parse_expression_list(self, end: TokenType) -> Optional[List[Expression]]:
        items: List[Expression] = []
        if self.peek_token_is(end):
            self.next_token()
            return items
        self.next_token()
        while True:
            item = self.parse_expression(Precedence.LOWEST)
            if item is None:
                return None
            items.append(item)
            if not self.peek_token_is(TokenType.COMMA):
                break
            self.next_token()
            self.next_token()
        if not self.expect_peek(end):
            return None
        return items

    def parse_index_expression(self, left: Expression) -> Optional[Expression]:
        """`left[i]`, `left[i:]`, `left[:j]` or `left[i:j]`; cur is `[`."""
        tok = self.cur_token
        index = None
        right_index = None
        has_colon = False
        self.next_token()
        if not self.cur_token_is(TokenType.COLON) and not self.cur_token_is(TokenType.RBRACKET):
            index = self.parse_expression(Precedence.LOWEST)
            if index is None:
                return None
            self.next_token()
        if self.cur_token_is(TokenType.COLON):
            has_colon = True
            self.next_token()
            if not self.cur_token_is(TokenType.RBRACKET):
                right_index = self.parse_expression(Precedence.LOWEST)
                if right_index is None:
                    return None
                self.next_token()
        if not self.cur_token_is(TokenType.RBRACKET):
            self.error(self.cur_token, f"expected next token to be ], got {self.cur_token.type} instead")
            return None
        if index is None and not has_colon:
            self.error(tok, 'index expression requires an index')
            return None
        return IndexExpression(tok, left, index, has_colon, right_index)


def parse_program(source: str, require_code_block: bool = True,
                  max_depth: int = DEFAULT_MAX_DEPTH):
    """Parse `source` and return the Program together with the diagnostics."""
    parser = Parser(Lexer(source), require_code_block, max_depth)
    program = parser.parse_program()
    return program, parser.errors
