from codelang.interpreter import Interpreter
from codelang.parser import parse_program


def test_program_3_logic_and_escapes(capsys):
    with open('examples/program_3.code', 'r', encoding='utf-8') as f:
        source = f.read()
    ast, errors = parse_program(source)
    assert errors == []
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['TRUE', '[x]', '#&']
