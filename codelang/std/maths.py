import math
from typing import Any

from codelang.std import BuiltinRegistry, check_args
from codelang.types import ErrorVal, FloatVal, IntegerVal, Value, wrap_int64

NUM = (IntegerVal, FloatVal)


def round_half_up(x: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(x + 0.5)


def populate_maths(registry: BuiltinRegistry) -> None:

    def to_integer(name, rounder):
        def fn(env: Any, *args: Value) -> Value:
            err = check_args(name, args, NUM)
            if err:
                return err
            x = args[0].value
            if isinstance(x, float) and (math.isnan(x) or math.isinf(x)):
                return ErrorVal(f"argument to `{name}` out of range: {args[0].inspect()}")
            return IntegerVal(wrap_int64(rounder(x)))
        return fn

    def to_float(name, op, domain=None):
        def fn(env: Any, *args: Value) -> Value:
            err = check_args(name, args, NUM)
            if err:
                return err
            x = float(args[0].value)
            if domain is not None and not domain(x):
                return ErrorVal(f"argument to `{name}` out of domain: {args[0].inspect()}")
            return FloatVal(op(x))
        return fn

    def std_math_abs(env: Any, *args: Value) -> Value:
        err = check_args('math_abs', args, NUM)
        if err:
            return err
        if isinstance(args[0], IntegerVal):
            return IntegerVal(wrap_int64(abs(args[0].value)))
        return FloatVal(abs(args[0].value))

    def std_math_pow(env: Any, *args: Value) -> Value:
        err = check_args('math_pow', args, NUM, NUM)
        if err:
            return err
        base, exp = args[0].value, args[1].value
        if isinstance(base, int) and isinstance(exp, int) and exp >= 0:
            return IntegerVal(wrap_int64(pow(base, exp, 1 << 64)))
        try:
            return FloatVal(math.pow(base, exp))
        except (OverflowError, ValueError) as e:
            return ErrorVal(f"math_pow: {e}")

    registry.register('math_abs', std_math_abs)
    registry.register('math_pow', std_math_pow)
    registry.register('math_ceil', to_integer('math_ceil', math.ceil))
    registry.register('math_floor', to_integer('math_floor', math.floor))
    registry.register('math_round', to_integer('math_round', round_half_up))
    registry.register('math_trunc', to_integer('math_trunc', math.trunc))
    registry.register('math_sqrt', to_float('math_sqrt', math.sqrt, lambda x: x >= 0))
    registry.register('math_log', to_float('math_log', math.log, lambda x: x > 0))
    registry.register('math_sin', to_float('math_sin', math.sin, math.isfinite))
    registry.register('math_cos', to_float('math_cos', math.cos, math.isfinite))
    registry.register('math_tan', to_float('math_tan', math.tan, math.isfinite))
