from dataclasses import dataclass
from typing import Optional

DEFAULT_LOOP_LIMIT = 1_000_000
DEFAULT_MAX_DEPTH = 1000


@dataclass
class Configuration:
    """Interpreter settings.

    `output_null` and `output_function_body` only change how DISPLAY renders
    NULL and function values. `loop_limit` caps the number of guard
    evaluations of a single WHILE loop; `max_depth` caps evaluator nesting.
    Debug tracing is written to `debug_file` (stderr when None) once
    `debug_level` is above zero.
    """
    output_null: bool = False
    output_function_body: bool = False
    loop_limit: int = DEFAULT_LOOP_LIMIT
    max_depth: int = DEFAULT_MAX_DEPTH
    debug_level: int = 0
    debug_file: Optional[str] = 'debug.txt'
