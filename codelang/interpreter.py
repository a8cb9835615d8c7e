"""Tree-walking evaluator for the CODE language.

`Interpreter.eval` is the single recursive dispatcher over AST nodes.
Runtime failures are `ErrorVal` values rather than Python exceptions: an
error produced anywhere stops evaluation of the enclosing expression, block
and program, in the same way a RETURN unwinds to its function call.
"""

from __future__ import annotations

import math
import sys
from typing import List, Optional

from .ast import (
    AssignmentStatement, BlockStatement, BooleanLiteral, CallExpression, CharLiteral,
    Comment, DecrementExpression, DisplayStatement, EscapeLiteral, ExpressionStatement,
    FloatLiteral, FunctionLiteral, Identifier, IfExpression, IncrementExpression,
    IndexExpression, InfixExpression, IntegerLiteral, NewLine, Node, PrefixExpression,
    Program, ReturnStatement, ScanStatement, StringLiteral, VarDeclaration, WhileLoop,
)
from .builtin_function import BuiltinFunction
from .config import Configuration
from .environment import Environment, new_enclosed_environment
from .errors import CodeError, ParseError
from .lexer import Lexer
from .parser import Parser
from .std import BuiltinRegistry, default_registry
from .std.io import BasicIO
from .types import (
    FALSE, NULL, TRUE, BooleanVal, CharVal, CommentVal, ErrorVal, FloatVal, FunctionVal,
    HashVal, IntegerVal, NewLineVal, ReturnVal, StringVal, Value, format_fixed,
    is_error, is_hashable, native_bool, type_name, wrap_int64,
)

# Python frames used per level of evaluator nesting, with headroom.
FRAMES_PER_DEPTH = 4


def trunc_div(a: int, b: int) -> int:
    """Integer division rounding towards zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def is_truthy(value: Optional[Value]) -> bool:
    # Only NULL and FALSE are false; every other value counts as true.
    return not (value is None or value is NULL or value is FALSE)


class Interpreter:
    """Evaluates CODE programs.

    DISPLAY and SCAN go through `io`. Identifiers that are not bound in any
    scope are resolved through `builtins`. Both default to the standard ones.
    """
    def __init__(self, io: Optional[BasicIO] = None,
                 builtins: Optional[BuiltinRegistry] = None,
                 config: Optional[Configuration] = None):
        self.config = config if config is not None else Configuration()
        self.io = io if io is not None else BasicIO()
        self.builtins = builtins if builtins is not None else default_registry(self.io)
        self.global_env = Environment()
        self.debug_level = self.config.debug_level
        self.debug_fp = None
        self._debug_started = False
        self.depth = 0

    # Debug tracing
    def open_debug(self) -> None:
        if self.debug_level > 0 and self.config.debug_file and self.debug_fp is None:
            mode = 'a' if self._debug_started else 'w'
            self.debug_fp = open(self.config.debug_file, mode, encoding='utf-8')
            self._debug_started = True

    def close_debug(self) -> None:
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def debug(self, msg: str) -> None:
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> Optional[Value]:
        if env is None:
            env = self.global_env
        needed = self.config.max_depth * FRAMES_PER_DEPTH + 200
        if sys.getrecursionlimit() < needed:
            sys.setrecursionlimit(needed)
        self.open_debug()
        self.depth = 0
        try:
            if self.debug_level >= 1:
                self.debug(f"run program with {len(program.statements)} statements")
            result = self.eval_program(program, env)
            if self.debug_level >= 1:
                self.debug(f"program result: {type_name(result)} {result}")
            return result
        finally:
            self.close_debug()

    def eval_program(self, program: Program, env: Environment) -> Optional[Value]:
        result: Optional[Value] = None
        for stmt in program.statements:
            if isinstance(stmt, Comment):
                continue
            result = self.eval(stmt, env)
            if isinstance(result, ReturnVal):
                return result.value
            if isinstance(result, ErrorVal):
                return result
        return result

    def eval_block(self, block: BlockStatement, env: Environment) -> Value:
        result: Value = NULL
        for stmt in block.statements:
            if isinstance(stmt, Comment):
                continue
            result = self.eval(stmt, env)
            # ReturnVal stays wrapped so the enclosing call can unwrap it.
            if isinstance(result, (ReturnVal, ErrorVal)):
                return result
        return result

    def eval(self, node: Node, env: Environment) -> Value:
        self.depth += 1
        try:
            if self.depth > self.config.max_depth:
                return ErrorVal('stack depth exceeded')

            # Statements
            if isinstance(node, ExpressionStatement):
                if node.expression is None:
                    return NULL
                return self.eval(node.expression, env)
            if isinstance(node, BlockStatement):
                return self.eval_block(node, env)
            if isinstance(node, VarDeclaration):
                for binding in node.bindings:
                    value = self.eval(binding.value, env)
                    if is_error(value):
                        return value
                    env.set(binding.identifier.value, value)
                    if self.debug_level >= 2:
                        self.debug(f"declare {node.token_literal()} {binding.identifier.value} = {value.inspect()}")
                return NULL
            if isinstance(node, AssignmentStatement):
                value = self.eval(node.value, env)
                if is_error(value):
                    return value
                env.set(node.name.value, value)
                if self.debug_level >= 2:
                    self.debug(f"assign {node.name.value} = {value.inspect()}")
                return value
            if isinstance(node, ReturnStatement):
                if node.return_value is None:
                    return ReturnVal(NULL)
                value = self.eval(node.return_value, env)
                if is_error(value):
                    return value
                return ReturnVal(value)
            if isinstance(node, DisplayStatement):
                return self.eval_display(node, env)
            if isinstance(node, ScanStatement):
                return self.eval_scan(node, env)
            if isinstance(node, WhileLoop):
                return self.eval_while(node, env)
            if isinstance(node, Comment):
                return CommentVal(node.value)
            if isinstance(node, NewLine):
                return NewLineVal(node.value)

            # Literals
            if isinstance(node, IntegerLiteral):
                return IntegerVal(wrap_int64(node.value))
            if isinstance(node, FloatLiteral):
                return FloatVal(node.value)
            if isinstance(node, BooleanLiteral):
                return native_bool(node.value)
            if isinstance(node, StringLiteral):
                return StringVal(node.value)
            if isinstance(node, (CharLiteral, EscapeLiteral)):
                return CharVal(node.value)
            if isinstance(node, FunctionLiteral):
                return FunctionVal(node.parameters, node.body, env)

            # Expressions
            if isinstance(node, Identifier):
                return self.eval_identifier(node, env)
            if isinstance(node, PrefixExpression):
                right = self.eval(node.right, env)
                if is_error(right):
                    return right
                return self.eval_prefix(node.operator, right)
            if isinstance(node, InfixExpression):
                left = self.eval(node.left, env)
                if is_error(left):
                    return left
                right = self.eval(node.right, env)
                if is_error(right):
                    return right
                return self.eval_infix(node.operator, left, right)
            if isinstance(node, IfExpression):
                return self.eval_if(node, env)
            if isinstance(node, CallExpression):
                function = self.eval(node.function, env)
                if is_error(function):
                    return function
                args = self.eval_expressions(node.arguments, env)
                if len(args) == 1 and is_error(args[0]):
                    return args[0]
                return self.apply_function(function, args, env)
            if isinstance(node, IndexExpression):
                return self.eval_index(node, env)
            if isinstance(node, IncrementExpression):
                return self.eval_step(node.name, node.prefix, 1, '++', env)
            if isinstance(node, DecrementExpression):
                return self.eval_step(node.name, node.prefix, -1, '--', env)
            raise NotImplementedError(f"eval: unexpected node type {type(node).__name__}")
        finally:
            self.depth -= 1

    def eval_expressions(self, exps: List[Node], env: Environment) -> List[Value]:
        result: List[Value] = []
        for exp in exps:
            value = self.eval(exp, env)
            if is_error(value):
                return [value]
            result.append(value)
        return result

    def eval_identifier(self, node: Identifier, env: Environment) -> Value:
        value = env.get(node.value)
        if value is not None:
            return value
        builtin = self.builtins.lookup(node.value)
        if builtin is not None:
            return builtin
        return ErrorVal(f"identifier not found: {node.value} at {node.token.position}")

    def eval_step(self, name: Identifier, prefix: bool, delta: int, op: str,
                  env: Environment) -> Value:
        current = env.get(name.value)
        if current is None:
            return ErrorVal(f"identifier not found: {name.value} at {name.token.position}")
        if isinstance(current, IntegerVal):
            updated: Value = IntegerVal(wrap_int64(current.value + delta))
        elif isinstance(current, FloatVal):
            updated = FloatVal(current.value + delta)
        else:
            return ErrorVal(f"unknown operator: {op}{type_name(current)}")
        env.set(name.value, updated)
        return updated if prefix else current

    # Operators
    def eval_prefix(self, operator: str, right: Value) -> Value:
        if operator in ('!', 'NOT'):
            if right is NULL or right is FALSE:
                return TRUE
            return FALSE
        if operator == '-':
            if isinstance(right, IntegerVal):
                return IntegerVal(wrap_int64(-right.value))
            if isinstance(right, FloatVal):
                return FloatVal(-right.value)
            return ErrorVal(f"unknown operator: -{type_name(right)}")
        if operator == '~':
            if isinstance(right, IntegerVal):
                return IntegerVal(~right.value)
            return ErrorVal(f"unknown operator: ~{type_name(right)}")
        return ErrorVal(f"unknown operator: {operator}{type_name(right)}")

    def eval_infix(self, operator: str, left: Value, right: Value) -> Value:
        if isinstance(left, IntegerVal) and isinstance(right, IntegerVal):
            return self.eval_integer_infix(operator, left, right)
        if isinstance(left, (IntegerVal, FloatVal)) and isinstance(right, (IntegerVal, FloatVal)):
            return self.eval_float_infix(operator, left, right)
        if isinstance(left, StringVal) and isinstance(right, StringVal):
            return self.eval_string_infix(operator, left, right)
        if operator == '==':
            return native_bool(left is right)
        if operator == '<>':
            return native_bool(left is not right)
        if operator == 'AND':
            # Both sides were already evaluated; non-booleans make the result FALSE.
            if not isinstance(left, BooleanVal) or not isinstance(right, BooleanVal):
                return FALSE
            return native_bool(left.value and right.value)
        if operator == 'OR':
            if isinstance(left, BooleanVal) and left.value:
                return TRUE
            if isinstance(right, BooleanVal) and right.value:
                return TRUE
            return FALSE
        if type_name(left) != type_name(right):
            return ErrorVal(f"type mismatch: {type_name(left)} {operator} {type_name(right)}")
        return ErrorVal(f"unknown operator: {type_name(left)} {operator} {type_name(right)}")

    def eval_integer_infix(self, operator: str, left: IntegerVal, right: IntegerVal) -> Value:
        a, b = left.value, right.value
        if operator == '+':
            return IntegerVal(wrap_int64(a + b))
        if operator == '-':
            return IntegerVal(wrap_int64(a - b))
        if operator == '*':
            return IntegerVal(wrap_int64(a * b))
        if operator in ('/', '%'):
            if b == 0:
                return ErrorVal('division by zero')
            q = trunc_div(a, b)
            return IntegerVal(wrap_int64(q if operator == '/' else a - b * q))
        comparison = self.compare(operator, a, b)
        if comparison is not None:
            return comparison
        return ErrorVal(f"unknown operator: {left.type_name} {operator} {right.type_name}")

    def eval_float_infix(self, operator: str, left: Value, right: Value) -> Value:
        a, b = float(left.value), float(right.value)
        if operator == '+':
            return FloatVal(a + b)
        if operator == '-':
            return FloatVal(a - b)
        if operator == '*':
            return FloatVal(a * b)
        if operator == '/':
            if b == 0:
                if a == 0 or math.isnan(a):
                    return FloatVal(math.nan)
                return FloatVal(math.copysign(math.inf, a) * math.copysign(1.0, b))
            return FloatVal(a / b)
        if operator == '%':
            return FloatVal(math.nan if b == 0 else math.fmod(a, b))
        comparison = self.compare(operator, a, b)
        if comparison is not None:
            return comparison
        return ErrorVal(f"unknown operator: {left.type_name} {operator} {right.type_name}")

    def eval_string_infix(self, operator: str, left: StringVal, right: StringVal) -> Value:
        if operator == '+':
            return StringVal(left.value + right.value)
        if operator == '==':
            return native_bool(left.value == right.value)
        if operator == '<':
            return native_bool(left.value < right.value)
        if operator == '>':
            return native_bool(left.value > right.value)
        return ErrorVal(f"unknown operator: {left.type_name} {operator} {right.type_name}")

    @staticmethod
    def compare(operator: str, a, b) -> Optional[BooleanVal]:
        if operator == '<':
            return native_bool(a < b)
        if operator == '>':
            return native_bool(a > b)
        if operator == '<=':
            return native_bool(a <= b)
        if operator == '>=':
            return native_bool(a >= b)
        if operator == '==':
            return native_bool(a == b)
        if operator == '<>':
            return native_bool(a != b)
        return None

    # Control flow
    def eval_if(self, node: IfExpression, env: Environment) -> Value:
        condition = self.eval(node.condition, env)
        if is_error(condition):
            return condition
        if self.debug_level >= 3:
            self.debug(f"if condition {condition.inspect()} -> {is_truthy(condition)}")
        if is_truthy(condition):
            return self.eval(node.consequence, env)
        if node.alternative is not None:
            return self.eval(node.alternative, env)
        return NULL

    def eval_while(self, node: WhileLoop, env: Environment) -> Value:
        limit = self.config.loop_limit
        count = 0
        while True:
            condition = self.eval(node.condition, env)
            count += 1
            if count > limit:
                return ErrorVal(f"loop count of {limit:,} exeeded")
            if is_error(condition):
                return condition
            if self.debug_level >= 3:
                self.debug(f"while condition {condition.inspect()}")
            if condition is not TRUE:
                return condition
            result = self.eval(node.body, env)
            if isinstance(result, (ReturnVal, ErrorVal)):
                return result

    # Functions
    def apply_function(self, function: Value, args: List[Value], env: Environment) -> Value:
        if isinstance(function, FunctionVal):
            if self.debug_level >= 1:
                self.debug(f"call function({', '.join(str(p) for p in function.parameters)}) "
                           f"with {len(args)} arguments")
            call_env = new_enclosed_environment(function.env)
            for i, param in enumerate(function.parameters):
                # Missing arguments bind the unset placeholder.
                call_env.set(param.value, args[i] if i < len(args) else None)
            result = self.eval(function.body, call_env)
            if isinstance(result, ReturnVal):
                return result.value
            return result
        if isinstance(function, BuiltinFunction):
            if self.debug_level >= 1:
                self.debug(f"call builtin {function.name} with {len(args)} arguments")
            result = function.fn(env, *args)
            return NULL if result is None else result
        return ErrorVal(f"not a function: {type_name(function)}")

    # Indexing
    def eval_index(self, node: IndexExpression, env: Environment) -> Value:
        left = self.eval(node.left, env)
        if is_error(left):
            return left
        index = right_index = None
        if node.index is not None:
            index = self.eval(node.index, env)
            if is_error(index):
                return index
        if node.right_index is not None:
            right_index = self.eval(node.right_index, env)
            if is_error(right_index):
                return right_index

        if isinstance(left, StringVal):
            return self.eval_string_index(left, index, node.has_colon, right_index)
        if isinstance(left, HashVal) and not node.has_colon:
            if not is_hashable(index):
                return ErrorVal(f"unusable as hash key: {type_name(index)}")
            pair = left.pairs.get(index.hash_key())
            return NULL if pair is None else pair.value
        return ErrorVal(f"index operator not supported: {type_name(left)}")

    def eval_string_index(self, left: StringVal, index: Optional[Value], has_colon: bool,
                          right_index: Optional[Value]) -> Value:
        for bound in (index, right_index):
            if bound is not None and not isinstance(bound, IntegerVal):
                return ErrorVal(f"index must be INTEGER, got {type_name(bound)}")
        text = left.value
        if not has_colon:
            i = index.value
            if 0 <= i < len(text):
                return CharVal(text[i])
            return NULL
        start = 0 if index is None else max(index.value, 0)
        end = len(text) if right_index is None else max(right_index.value, 0)
        return StringVal(text[start:end])

    # I/O
    def render(self, value: Value) -> str:
        """Text DISPLAY writes for one value."""
        if isinstance(value, FloatVal):
            return format_fixed(value.value, 1)
        if value is NULL and self.config.output_null:
            return 'null'
        if isinstance(value, FunctionVal) and self.config.output_function_body:
            return value.describe()
        return value.inspect()

    def eval_display(self, node: DisplayStatement, env: Environment) -> Value:
        parts: List[str] = []
        for arg in node.arguments:
            value = self.eval(arg, env)
            if is_error(value):
                return value
            parts.append(self.render(value))
        self.io.write_line(''.join(parts))
        return NULL

    def eval_scan(self, node: ScanStatement, env: Environment) -> Value:
        line = self.io.read_line()
        fields = [f.strip() for f in line.split(',')]
        if len(fields) < len(node.names):
            self.io.write_error('Not enough input values provided.')
            return NULL
        for name, text in zip(node.names, fields):
            current = env.get(name.value)
            parsed = self.coerce_input(current, text)
            if parsed is None:
                if isinstance(current, (BooleanVal, IntegerVal, FloatVal, StringVal, CharVal)):
                    self.io.write_error(f"Invalid input for variable '{name.value}': {text}")
                else:
                    self.io.write_error(f"Unsupported type for variable '{name.value}'.")
                continue
            env.set(name.value, parsed)
            if self.debug_level >= 2:
                self.debug(f"scan {name.value} = {parsed.inspect()}")
        return NULL

    @staticmethod
    def coerce_input(current: Optional[Value], text: str) -> Optional[Value]:
        """Convert one SCAN field to the type `current` already has."""
        try:
            if isinstance(current, BooleanVal):
                return native_bool(text.upper() == 'TRUE')
            if isinstance(current, IntegerVal):
                return IntegerVal(wrap_int64(int(text)))
            if isinstance(current, FloatVal):
                return FloatVal(float(text))
        except ValueError:
            return None
        if isinstance(current, StringVal):
            return StringVal(text)
        if isinstance(current, CharVal) and text:
            return CharVal(text[0])
        return None


def run_program(source: str, io: Optional[BasicIO] = None,
                config: Optional[Configuration] = None) -> Optional[Value]:
    """Parse and run `source`.

    Raises ParseError when the parser reports diagnostics and CodeError when
    the program evaluates to an error value.
    """
    interp = Interpreter(io=io, config=config)
    parser = Parser(Lexer(source), max_depth=interp.config.max_depth)
    program = parser.parse_program()
    if parser.errors:
        raise ParseError(parser.errors)
    result = interp.run(program)
    if isinstance(result, ErrorVal):
        raise CodeError(result)
    return result


def compile_module(file_path: str, config: Optional[Configuration] = None) -> Interpreter:
    """Run a CODE source file and return the interpreter holding its globals."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    interp = Interpreter(config=config)
    parser = Parser(Lexer(source), max_depth=interp.config.max_depth)
    program = parser.parse_program()
    if parser.errors:
        raise ParseError(parser.errors)
    result = interp.run(program)
    if isinstance(result, ErrorVal):
        raise CodeError(result)
    return interp
