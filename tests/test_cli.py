import builtins
import getpass
import json

import pytest

from codelang import CodeError, LexError, ParseError, run_program
from codelang.__main__ import main
from codelang.std.io import BasicIO


def write_program(tmp_path, source, name='prog.code'):
    path = tmp_path / name
    path.write_text(source, encoding='utf-8')
    return path


def feed(monkeypatch, *lines):
    pending = list(lines)

    def fake_input(prompt=''):
        if not pending:
            raise EOFError
        return pending.pop(0)

    monkeypatch.setattr(builtins, 'input', fake_input)


def test_runs_program_file(tmp_path, capsys):
    path = write_program(tmp_path, 'BEGIN CODE\nDISPLAY: "hi " & 1 + 2\nEND CODE\n')
    main([str(path)])
    assert capsys.readouterr().out.strip() == 'hi 3'


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        main([str(tmp_path / 'nope.code')])
    assert exc.value.code == 1
    assert 'not found' in capsys.readouterr().err


def test_parse_errors_exit(tmp_path, capsys):
    path = write_program(tmp_path, 'DISPLAY: "outside"\n')
    with pytest.raises(SystemExit) as exc:
        main([str(path)])
    assert exc.value.code == 1
    err = capsys.readouterr().err
    assert 'code outside of BEGIN CODE and END CODE block at line 1, column 1' in err


def test_lex_error_exits(tmp_path, capsys):
    path = write_program(tmp_path, "BEGIN CODE\nCHAR c = 'ab'\nEND CODE\n")
    with pytest.raises(SystemExit):
        main([str(path)])
    assert 'Character literal is too long.' in capsys.readouterr().err


def test_runtime_error_exits(tmp_path, capsys):
    path = write_program(tmp_path, 'BEGIN CODE\nDISPLAY: 5 + "x"\nEND CODE\n')
    with pytest.raises(SystemExit) as exc:
        main([str(path)])
    assert exc.value.code == 1
    assert capsys.readouterr().err.strip() == 'Runtime error: type mismatch: INTEGER + STRING'


def test_loop_limit_flag(tmp_path, capsys):
    path = write_program(tmp_path, 'BEGIN CODE\nWHILE (TRUE) BEGIN END\nEND CODE\n')
    with pytest.raises(SystemExit):
        main(['--loop-limit', '5', str(path)])
    assert 'loop count of 5 exeeded' in capsys.readouterr().err


def test_show_null_flag(tmp_path, capsys):
    path = write_program(tmp_path, 'BEGIN CODE\nf = FUNCTION() {}\nDISPLAY: f()\nEND CODE\n')
    main(['--show-null', str(path)])
    assert capsys.readouterr().out.strip() == 'null'


def test_emit_ast(tmp_path, capsys):
    path = write_program(tmp_path, 'BEGIN CODE\nINT a = 1\nEND CODE\n')
    main(['--emit-ast', str(path)])
    out_path = tmp_path / 'prog.code.ast.json'
    assert capsys.readouterr().out.strip() == str(out_path)
    data = json.loads(out_path.read_text(encoding='utf-8'))
    assert data['statements'][0]['__node__'] == 'VarDeclaration'


def test_debug_file(tmp_path, capsys):
    path = write_program(tmp_path, 'BEGIN CODE\nINT a = 1\nf = FUNCTION() { a }\nf()\nEND CODE\n')
    debug_path = tmp_path / 'trace.txt'
    main(['-vv', '--debug-file', str(debug_path), str(path)])
    trace = debug_path.read_text(encoding='utf-8')
    assert 'declare INT a = 1' in trace
    assert 'call function() with 0 arguments' in trace


def test_repl(monkeypatch, capsys):
    monkeypatch.setattr(getpass, 'getuser', lambda: 'tester')
    feed(monkeypatch, 'INT a = 5', 'a * 2', 'missing', '* 3', 'DISPLAY: "shown"')
    main([])
    captured = capsys.readouterr()
    out_lines = captured.out.strip().split('\n')
    assert out_lines[0] == 'Hello tester! This is the Code programming language!'
    assert out_lines[1] == 'Feel free to type in commands'
    assert '10' in out_lines
    assert 'shown' in out_lines
    assert 'Error: identifier not found: missing at line 1, column 1' in captured.err
    assert 'no prefix parse function for * found: *' in captured.err


def test_run_program_api():
    out = []
    result = run_program('BEGIN CODE\nINT a = 2\nDISPLAY: a\na * 21\nEND CODE',
                         io=BasicIO(writer=out.append))
    assert out == ['2']
    assert result.value == 42


def test_run_program_raises_parse_error():
    with pytest.raises(ParseError) as exc:
        run_program('1 + 1')
    assert exc.value.errors == ['code outside of BEGIN CODE and END CODE block at line 1, column 1']


def test_run_program_raises_code_error():
    with pytest.raises(CodeError) as exc:
        run_program('BEGIN CODE\n1 / 0\nEND CODE')
    assert str(exc.value) == 'division by zero'


def test_run_program_raises_lex_error():
    with pytest.raises(LexError):
        run_program("BEGIN CODE\n''\nEND CODE")
