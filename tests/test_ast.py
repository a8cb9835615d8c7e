import json

from codelang.ast import (
    Binding, BlockStatement, Identifier, IndexExpression, IntegerLiteral, Program,
    VarDeclaration,
)
from codelang.ast_json import ast_to_obj
from codelang.parser import parse_program
from codelang.token import Token, TokenType


def test_program_string():
    program = Program([
        VarDeclaration(
            Token(TokenType.INT, 'INT'),
            [Binding(Identifier(Token(TokenType.IDENT, 'myVar'), 'myVar'),
                     Identifier(Token(TokenType.IDENT, 'anotherVar'), 'anotherVar'))],
        ),
    ])
    assert str(program) == 'INT myVar = anotherVar;'
    assert program.token_literal() == 'INT'


def test_empty_program_token_literal():
    assert Program().token_literal() == ''


def test_index_expression_string_forms():
    s = Identifier(Token(TokenType.IDENT, 's'), 's')
    one = IntegerLiteral(Token(TokenType.INTEGER, '1'), 1)
    two = IntegerLiteral(Token(TokenType.INTEGER, '2'), 2)
    tok = Token(TokenType.LBRACKET, '[')
    assert str(IndexExpression(tok, s, one)) == '(s[1])'
    assert str(IndexExpression(tok, s, one, True, two)) == '(s[1:2])'
    assert str(IndexExpression(tok, s, None, True, two)) == '(s[:2])'
    assert str(IndexExpression(tok, s, one, True)) == '(s[1:])'


def test_block_string_is_concatenated():
    program, _ = parse_program('IF (a) BEGIN x y END', require_code_block=False)
    block = program.statements[0].expression.consequence
    assert isinstance(block, BlockStatement)
    assert str(block) == 'xy'


def test_ast_json_dump():
    program, errors = parse_program('BEGIN CODE\nINT a = 1 + 2\nEND CODE')
    assert errors == []
    obj = ast_to_obj(program)
    # Must be JSON encodable.
    json.dumps(obj)
    decl = obj['statements'][0]
    assert obj['__node__'] == 'Program'
    assert decl['__node__'] == 'VarDeclaration'
    assert decl['token'] == {'type': 'INT', 'literal': 'INT', 'line': 2, 'column': 1}
    binding = decl['bindings'][0]
    assert binding['identifier']['value'] == 'a'
    assert binding['value']['__node__'] == 'InfixExpression'
    assert binding['value']['operator'] == '+'
