from codelang.interpreter import Interpreter
from codelang.parser import parse_program


def test_program_9_hash_lookup(capsys):
    with open('examples/program_9.code', 'r', encoding='utf-8') as f:
        source = f.read()
    ast, errors = parse_program(source)
    # Comments before BEGIN CODE are not code outside the block.
    assert errors == []
    interp = Interpreter()
    interp.run(ast)
    out_lines = capsys.readouterr().out.strip().split('\n')
    assert out_lines == ['2 three 3', 'missing: []']
