from typing import Any

from codelang.std import BuiltinRegistry, check_args
from codelang.types import IntegerVal, StringVal, Value, native_bool

STR = (StringVal,)
INT = (IntegerVal,)


def populate_strings(registry: BuiltinRegistry) -> None:

    def std_string_concat(env: Any, *args: Value) -> Value:
        err = check_args('string_concat', args, STR, STR)
        return err or StringVal(args[0].value + args[1].value)

    def std_string_contains(env: Any, *args: Value) -> Value:
        err = check_args('string_contains', args, STR, STR)
        return err or native_bool(args[1].value in args[0].value)

    def std_string_ends_with(env: Any, *args: Value) -> Value:
        err = check_args('string_ends_with', args, STR, STR)
        return err or native_bool(args[0].value.endswith(args[1].value))

    def std_string_starts_with(env: Any, *args: Value) -> Value:
        err = check_args('string_starts_with', args, STR, STR)
        return err or native_bool(args[0].value.startswith(args[1].value))

    def std_string_index_of(env: Any, *args: Value) -> Value:
        err = check_args('string_index_of', args, STR, STR)
        return err or IntegerVal(args[0].value.find(args[1].value))

    def std_string_len(env: Any, *args: Value) -> Value:
        err = check_args('string_len', args, STR)
        return err or IntegerVal(len(args[0].value))

    def std_string_lowercase(env: Any, *args: Value) -> Value:
        err = check_args('string_lowercase', args, STR)
        return err or StringVal(args[0].value.lower())

    def std_string_uppercase(env: Any, *args: Value) -> Value:
        err = check_args('string_uppercase', args, STR)
        return err or StringVal(args[0].value.upper())

    def std_string_repeat(env: Any, *args: Value) -> Value:
        err = check_args('string_repeat', args, STR, INT)
        return err or StringVal(args[0].value * max(args[1].value, 0))

    def std_string_replace(env: Any, *args: Value) -> Value:
        err = check_args('string_replace', args, STR, STR, STR)
        # Replaces the first occurrence only.
        return err or StringVal(args[0].value.replace(args[1].value, args[2].value, 1))

    def std_string_reverse(env: Any, *args: Value) -> Value:
        err = check_args('string_reverse', args, STR)
        return err or StringVal(args[0].value[::-1])

    def std_string_slice(env: Any, *args: Value) -> Value:
        err = check_args('string_slice', args, STR, INT, INT)
        return err or StringVal(args[0].value[args[1].value:args[2].value])

    def std_string_substring(env: Any, *args: Value) -> Value:
        err = check_args('string_substring', args, STR, INT, INT)
        if err:
            return err
        # Negative bounds count as 0 and the bounds may come in either order.
        start, end = sorted(max(i.value, 0) for i in args[1:])
        return StringVal(args[0].value[start:end])

    def std_string_trim(env: Any, *args: Value) -> Value:
        err = check_args('string_trim', args, STR)
        return err or StringVal(args[0].value.strip())

    registry.register('string_concat', std_string_concat)
    registry.register('string_contains', std_string_contains)
    registry.register('string_includes', std_string_contains)
    registry.register('string_ends_with', std_string_ends_with)
    registry.register('string_starts_with', std_string_starts_with)
    registry.register('string_index_of', std_string_index_of)
    registry.register('string_len', std_string_len)
    registry.register('string_lowercase', std_string_lowercase)
    registry.register('string_uppercase', std_string_uppercase)
    registry.register('string_repeat', std_string_repeat)
    registry.register('string_replace', std_string_replace)
    registry.register('string_reverse', std_string_reverse)
    registry.register('string_slice', std_string_slice)
    registry.register('string_substring', std_string_substring)
    registry.register('string_trim', std_string_trim)
