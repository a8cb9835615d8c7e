import pytest

from codelang.environment import Environment
from codelang.interpreter import Interpreter
from codelang.parser import parse_program
from codelang.std import BuiltinRegistry, check_args, default_registry
from codelang.types import NULL, TRUE, FALSE, ErrorVal, FloatVal, IntegerVal, StringVal


def run(source):
    program, errors = parse_program(source, require_code_block=False)
    assert errors == []
    return Interpreter().run(program, Environment())


@pytest.mark.parametrize('source, expected', [
    ('len("")', 0),
    ('len("four")', 4),
    ('len("hello world")', 11),
    ("len('c')", 1),
    ('len(hash(1, 2, 3, 4))', 2),
    ('number("42")', 42),
    ('string_len("abc")', 3),
    ('string_index_of("hello", "l")', 2),
    ('string_index_of("hello", "z")', -1),
    ('math_abs(-3)', 3),
    ('math_ceil(1.2)', 2),
    ('math_floor(-1.2)', -2),
    ('math_round(2.5)', 3),
    ('math_round(-2.5)', -2),
    ('math_trunc(-2.7)', -2),
    ('math_pow(2, 10)', 1024),
])
def test_integer_results(source, expected):
    result = run(source)
    assert isinstance(result, IntegerVal)
    assert result.value == expected


@pytest.mark.parametrize('source, expected', [
    ('string(12)', '12'),
    ('string(TRUE)', 'TRUE'),
    ('string_concat("ab", "cd")', 'abcd'),
    ('string_lowercase("MiXeD")', 'mixed'),
    ('string_uppercase("MiXeD")', 'MIXED'),
    ('string_repeat("ab", 3)', 'ababab'),
    ('string_repeat("ab", -1)', ''),
    ('string_replace("a-b-c", "-", "+")', 'a+b-c'),
    ('string_reverse("abc")', 'cba'),
    ('string_slice("hello", 1, 3)', 'el'),
    ('string_substring("hello", 3, 1)', 'el'),
    ('string_substring("hello", -2, 2)', 'he'),
    ('string_trim("  padded  ")', 'padded'),
])
def test_string_results(source, expected):
    result = run(source)
    assert isinstance(result, StringVal)
    assert result.value == expected


@pytest.mark.parametrize('source, expected', [
    ('string_contains("hello", "ell")', TRUE),
    ('string_includes("hello", "xyz")', FALSE),
    ('string_starts_with("hello", "he")', TRUE),
    ('string_ends_with("hello", "he")', FALSE),
])
def test_boolean_results(source, expected):
    assert run(source) is expected


@pytest.mark.parametrize('source, expected', [
    ('number("2.5")', 2.5),
    ('math_sqrt(16)', 4.0),
    ('math_abs(-1.5)', 1.5),
    ('math_pow(2, 0.5)', 2 ** 0.5),
    ('math_log(1)', 0.0),
    ('math_sin(0)', 0.0),
    ('math_cos(0)', 1.0),
    ('math_tan(0)', 0.0),
])
def test_float_results(source, expected):
    result = run(source)
    assert isinstance(result, FloatVal)
    assert result.value == pytest.approx(expected)


@pytest.mark.parametrize('source, message', [
    ('len(1)', 'argument to `len` not supported, got INTEGER'),
    ('len("one", "two")', 'wrong number of arguments. got=2, want=1'),
    ('string_len(1)', 'argument to `string_len` not supported, got INTEGER'),
    ('string_concat("a")', 'wrong number of arguments. got=1, want=2'),
    ('number("abc")', 'could not convert "abc" to a number'),
    ('math_sqrt(-1)', 'argument to `math_sqrt` out of domain: -1'),
    ('math_log(0)', 'argument to `math_log` out of domain: 0'),
    ('math_abs("x")', 'argument to `math_abs` not supported, got STRING'),
    ('hash(1)', 'wrong number of arguments. got=1, want=even'),
    ('hash(1.5, 1)', 'unusable as hash key: FLOAT'),
])
def test_builtin_errors(source, message):
    result = run(source)
    assert isinstance(result, ErrorVal)
    assert result.message == message


def test_print_writes_stdout(capsys):
    assert run('print("a", 1, TRUE)') is NULL
    assert capsys.readouterr().out == 'a1TRUE\n'


def test_default_registry_names():
    registry = default_registry()
    for name in ('len', 'print', 'string', 'number', 'hash', 'string_trim', 'math_pow'):
        assert name in registry
    assert registry.names() == sorted(registry.names())


def test_custom_registry():
    registry = BuiltinRegistry()

    def std_answer(env, *args):
        return IntegerVal(42)

    registry.register('answer', std_answer)
    program, _ = parse_program('answer()', require_code_block=False)
    assert Interpreter(builtins=registry).run(program).value == 42
    program, _ = parse_program('len("x")', require_code_block=False)
    assert Interpreter(builtins=registry).run(program).message.startswith('identifier not found: len')


def test_builtin_returning_none_yields_null():
    registry = BuiltinRegistry()
    registry.register('nothing', lambda env, *args: None)
    program, _ = parse_program('nothing()', require_code_block=False)
    assert Interpreter(builtins=registry).run(program) is NULL


def test_check_args():
    assert check_args('f', [IntegerVal(1)], (IntegerVal,)) is None
    err = check_args('f', [StringVal('x')], (IntegerVal,))
    assert err.message == 'argument to `f` not supported, got STRING'
