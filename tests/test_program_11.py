from codelang.interpreter import Interpreter
from codelang.parser import parse_program


def test_program_11_assignment_shadows_outer_binding(capsys):
    with open('examples/program_11.code', 'r', encoding='utf-8') as f:
        source = f.read()
    ast, errors = parse_program(source)
    assert errors == []
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    # The function's assignment binds in its own frame; the global stays 1.
    assert out == '11 1'
