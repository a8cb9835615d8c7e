"""CLI entry point for the CODE interpreter.

Usage:
    python -m codelang [-v|-vv|-vvv] <program_file>
    python -m codelang [-v...] --emit-ast <program_file>
    python -m codelang

Options:
  -v                    Increase debug verbosity (can be repeated)
  --debug-file FILE     Where debug output goes (default: debug.txt)
  --show-null           DISPLAY renders NULL as `null`
  --show-function-body  DISPLAY renders functions with their body
  --max-depth N         Evaluator nesting limit
  --loop-limit N        Guard evaluations allowed per WHILE loop
  --emit-ast            Parse the program and write its AST as JSON

Without a program file an interactive session is started; every line is
evaluated in the same environment.
"""

import argparse
import getpass
import json
import sys
from pathlib import Path

from .ast_json import ast_to_obj
from .config import DEFAULT_LOOP_LIMIT, DEFAULT_MAX_DEPTH, Configuration
from .errors import LexError
from .interpreter import Interpreter
from .lexer import Lexer
from .parser import Parser
from .types import NULL, ErrorVal

PROMPT = '>> '


def report_warnings(lexer: Lexer, interpreter: Interpreter) -> None:
    if interpreter.debug_level >= 1:
        for warning in lexer.warnings:
            print(warning, file=sys.stderr)


def repl(interpreter: Interpreter) -> None:
    print(f"Hello {getpass.getuser()}! This is the Code programming language!")
    print("Feel free to type in commands")
    env = interpreter.global_env
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            return
        lexer = Lexer(line)
        try:
            parser = Parser(lexer, require_code_block=False,
                            max_depth=interpreter.config.max_depth)
            program = parser.parse_program()
        except LexError as e:
            print(e, file=sys.stderr)
            continue
        report_warnings(lexer, interpreter)
        if parser.errors:
            for msg in parser.errors:
                print(f"\t{msg}", file=sys.stderr)
            continue
        result = interpreter.run(program, env)
        if result is None or result is NULL:
            continue
        if isinstance(result, ErrorVal):
            print(result.inspect(), file=sys.stderr)
        else:
            print(result.inspect())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="CODE language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', default='debug.txt', help='debug output file')
    parser.add_argument('--show-null', action='store_true', help='DISPLAY renders NULL as null')
    parser.add_argument('--show-function-body', action='store_true', help='DISPLAY renders function bodies')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_DEPTH, help='evaluator nesting limit')
    parser.add_argument('--loop-limit', type=int, default=DEFAULT_LOOP_LIMIT, help='WHILE guard evaluation limit')
    parser.add_argument('--emit-ast', action='store_true', help='emit AST JSON for the given program')
    parser.add_argument('program', nargs='?', help='CODE program file to execute')
    args = parser.parse_args(argv)

    config = Configuration(
        output_null=args.show_null,
        output_function_body=args.show_function_body,
        loop_limit=args.loop_limit,
        max_depth=args.max_depth,
        debug_level=args.v,
        debug_file=args.debug_file,
    )
    interpreter = Interpreter(config=config)

    if not args.program:
        if args.emit_ast:
            parser.error('--emit-ast requires a program file')
        repl(interpreter)
        return

    program_file = Path(args.program)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        source = f.read()

    lexer = Lexer(source)
    try:
        code_parser = Parser(lexer, max_depth=config.max_depth)
        ast_program = code_parser.parse_program()
    except LexError as e:
        print(e, file=sys.stderr)
        sys.exit(1)
    report_warnings(lexer, interpreter)
    if code_parser.errors:
        for msg in code_parser.errors:
            print(msg, file=sys.stderr)
        sys.exit(1)

    # Emit AST mode
    if args.emit_ast:
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    result = interpreter.run(ast_program)
    if isinstance(result, ErrorVal):
        print(f"Runtime error: {result.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
