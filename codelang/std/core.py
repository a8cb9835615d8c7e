from typing import Any, Optional

from codelang.std import BuiltinRegistry, check_args, unsupported, wrong_arg_count
from codelang.std.io import BasicIO
from codelang.types import (
    NULL, CharVal, ErrorVal, FloatVal, HashPair, HashVal, IntegerVal, StringVal,
    Value, is_hashable, type_name, wrap_int64,
)


def populate_core(registry: BuiltinRegistry, io: Optional[BasicIO] = None) -> None:
    if io is None:
        io = BasicIO()

    def std_len(env: Any, *args: Value) -> Value:
        if len(args) != 1:
            return wrong_arg_count(len(args), 1)
        arg = args[0]
        if isinstance(arg, (StringVal, CharVal)):
            return IntegerVal(len(arg.value))
        if isinstance(arg, HashVal):
            return IntegerVal(len(arg.pairs))
        return unsupported('len', arg)

    def std_print(env: Any, *args: Value) -> Value:
        io.write_line(''.join(a.inspect() for a in args))
        return NULL

    def std_string(env: Any, *args: Value) -> Value:
        if len(args) != 1:
            return wrong_arg_count(len(args), 1)
        return StringVal(args[0].inspect())

    def std_number(env: Any, *args: Value) -> Value:
        err = check_args('number', args, (StringVal, CharVal, IntegerVal, FloatVal))
        if err:
            return err
        arg = args[0]
        if isinstance(arg, (IntegerVal, FloatVal)):
            return arg
        text = arg.value.strip()
        try:
            return IntegerVal(wrap_int64(int(text)))
        except ValueError:
            pass
        try:
            return FloatVal(float(text))
        except ValueError:
            return ErrorVal(f'could not convert "{arg.value}" to a number')

    def std_hash(env: Any, *args: Value) -> Value:
        if len(args) % 2 != 0:
            return ErrorVal(f"wrong number of arguments. got={len(args)}, want=even")
        result = HashVal()
        for key, value in zip(args[::2], args[1::2]):
            if not is_hashable(key):
                return ErrorVal(f"unusable as hash key: {type_name(key)}")
            result.pairs[key.hash_key()] = HashPair(key, value)
        return result

    registry.register('len', std_len)
    registry.register('print', std_print)
    registry.register('string', std_string)
    registry.register('number', std_number)
    registry.register('hash', std_hash)
