from codelang.interpreter import Interpreter
from codelang.parser import parse_program


def test_program_4_else_if_chain(capsys):
    with open('examples/program_4.code', 'r', encoding='utf-8') as f:
        source = f.read()
    ast, errors = parse_program(source)
    assert errors == []
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'B'
