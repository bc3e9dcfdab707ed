from .program import OpKind, Program, kind_for
from .lexer import tokenize, tokenize_unfolded
from .validator import Diagnostic, ensure_valid, validate
from .interpreter import Interpreter, Tape, execute
from .emitter import AsmEmitter, compile_program, emit
from .errors import BFJitError, BoilerplateError, BoundsError, StructuralError, ToolchainError
from .api import CompileOptions, RunOptions, compile_file, compile_string, parse, run_file, run_string

__all__ = [
    'OpKind',
    'Program',
    'kind_for',
    'tokenize',
    'tokenize_unfolded',
    'Diagnostic',
    'validate',
    'ensure_valid',
    'Interpreter',
    'Tape',
    'execute',
    'AsmEmitter',
    'emit',
    'compile_program',
    'BFJitError',
    'StructuralError',
    'BoundsError',
    'BoilerplateError',
    'ToolchainError',
    'CompileOptions',
    'RunOptions',
    'parse',
    'run_string',
    'run_file',
    'compile_string',
    'compile_file',
]
