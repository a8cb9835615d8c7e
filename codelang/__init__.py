# CODE language package
# This package provides a lexer, parser and tree-walking interpreter for the
# CODE teaching language.
from .config import Configuration
from .environment import Environment
from .errors import CodeError, LexError, ParseError
from .interpreter import Interpreter, compile_module, run_program
from .lexer import Lexer
from .parser import Parser, parse_program
from .std.io import BasicIO

__all__ = [
    'BasicIO',
    'CodeError',
    'Configuration',
    'Environment',
    'Interpreter',
    'LexError',
    'Lexer',
    'ParseError',
    'Parser',
    'compile_module',
    'parse_program',
    'run_program',
]
