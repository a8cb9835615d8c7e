import builtins

from codelang.config import Configuration
from codelang.environment import Environment
from codelang.interpreter import Interpreter
from codelang.parser import parse_program
from codelang.std.io import BasicIO
from codelang.types import NULL


class Recorder:
    """Collects DISPLAY output and feeds SCAN from a list of lines."""
    def __init__(self, *lines):
        self.lines = list(lines)
        self.out = []
        self.err = []

    def io(self):
        return BasicIO(reader=lambda: self.lines.pop(0), writer=self.out.append,
                       error_writer=self.err.append)


def run(source, recorder, config=None):
    program, errors = parse_program(source, require_code_block=False)
    assert errors == []
    env = Environment()
    result = Interpreter(io=recorder.io(), config=config).run(program, env)
    return result, env


def test_display_concatenates_without_separator():
    rec = Recorder()
    result, _ = run('INT a = 1\nDISPLAY: "a=" & a & ", b=" & TRUE', rec)
    assert result is NULL
    assert rec.out == ['a=1, b=TRUE']


def test_display_floats_use_one_decimal():
    rec = Recorder()
    run('DISPLAY: 3.14159 & " " & 2.0 & " " & 0.25', rec)
    assert rec.out == ['3.1 2.0 0.3']


def test_display_negative_float_ties_round_away_from_zero():
    rec = Recorder()
    run('FLOAT f = -1.25\nDISPLAY: f & " " & -0.25', rec)
    assert rec.out == ['-1.3 -0.3']


def test_display_float_division_by_zero():
    rec = Recorder()
    run('DISPLAY: 1.0 / 0 & " " & -1.0 / 0 & " " & 0.0 / 0', rec)
    assert rec.out == ['Infinity -Infinity NaN']


def test_print_builtin_uses_injected_writer():
    rec = Recorder()
    result, _ = run('print("a", 1, TRUE)\nDISPLAY: "b"', rec)
    assert result is NULL
    assert rec.out == ['a1TRUE', 'b']


def test_display_newline_marker():
    rec = Recorder()
    run('DISPLAY: "a" & $ & "b"', rec)
    assert rec.out == ['a\nb']


def test_display_escapes():
    rec = Recorder()
    run('DISPLAY: [[] & "x" & []] & [#] & [$] & [&]', rec)
    assert rec.out == ['[x]#$&']


def test_display_null_and_functions():
    source = 'g = FUNCTION() {}\nf = FUNCTION(x) { x }\nDISPLAY: g() & "|" & f'
    rec = Recorder()
    run(source, rec)
    assert rec.out == ['|function']

    rec = Recorder()
    run(source, rec, Configuration(output_null=True, output_function_body=True))
    assert rec.out == ['null|function(x) {\n  x\n}']


def test_display_error_propagates():
    rec = Recorder()
    result, _ = run('DISPLAY: "a" & missing', rec)
    assert result.message == 'identifier not found: missing at line 1, column 16'
    assert rec.out == []


def test_scan_coerces_by_bound_type():
    rec = Recorder(' 7 , 2.5, true, hello world, xyz ')
    source = 'INT i\nFLOAT f\nBOOL b\ns = ""\nCHAR c = \'a\'\nSCAN: i, f, b, s, c'
    _, env = run(source, rec)
    assert env.get('i').value == 7
    assert env.get('f').value == 2.5
    assert env.get('b').value is True
    assert env.get('s').value == 'hello world'
    assert env.get('c').value == 'x'
    assert rec.err == []


def test_scan_boolean_other_text_is_false():
    rec = Recorder('yes')
    _, env = run('BOOL b = "TRUE"\nSCAN b', rec)
    assert env.get('b').value is False


def test_scan_not_enough_values():
    rec = Recorder('1')
    _, env = run('INT a, b\nSCAN: a, b', rec)
    assert rec.err == ['Not enough input values provided.']
    assert env.get('a').value == 0


def test_scan_unsupported_type():
    rec = Recorder('1')
    _, env = run('SCAN: nothing', rec)
    assert rec.err == ["Unsupported type for variable 'nothing'."]
    assert env.get('nothing') is None


def test_scan_invalid_input():
    rec = Recorder('abc, 5')
    _, env = run('INT a, b\nSCAN: a, b', rec)
    assert rec.err == ["Invalid input for variable 'a': abc"]
    assert env.get('a').value == 0
    assert env.get('b').value == 5


def test_default_io_uses_input_and_print(monkeypatch, capsys):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': '12')
    program, _ = parse_program('INT n\nSCAN n\nDISPLAY: n * 2', require_code_block=False)
    Interpreter().run(program)
    assert capsys.readouterr().out.strip() == '24'


def test_read_line_at_eof(monkeypatch):
    def raise_eof(prompt=''):
        raise EOFError

    monkeypatch.setattr(builtins, 'input', raise_eof)
    assert BasicIO().read_line() == ''
