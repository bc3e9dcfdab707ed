from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from .emitter import CompileResult, Runner, compile_program
from .interpreter import DEFAULT_TAPE_SIZE, Interpreter
from .lexer import tokenize
from .program import Program
from .validator import ensure_valid


@dataclass(frozen=True)
class RunOptions:
    tape_size: int = DEFAULT_TAPE_SIZE


@dataclass(frozen=True)
class CompileOptions:
    comments: bool = True
    boilerplate: Optional[str] = None
    assembler: str = "nasm"
    linker: str = "ld"
    assembler_format: str = "elf64"


def default_output_name(source: str | Path) -> str:
    stem = str(Path(source).with_suffix(""))
    # never link over the source itself
    return stem if stem != str(source) else f"{source}.out"


def parse(source: str) -> Program:
    """Tokenize and validate; raises StructuralError listing every bad delimiter."""
    program = tokenize(source)
    ensure_valid(program)
    return program


def run_string(
    source: str,
    *,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    options: Optional[RunOptions] = None,
) -> Interpreter:
    opts = options or RunOptions()
    interpreter = Interpreter(tape_size=opts.tape_size)
    interpreter.execute(parse(source), stdin, stdout)
    return interpreter


def run_file(path: str | Path, *, options: Optional[RunOptions] = None, encoding: str = "utf-8") -> Interpreter:
    p = Path(path)
    return run_string(p.read_text(encoding=encoding), options=options)


def compile_string(
    source: str,
    output_name: str,
    *,
    options: Optional[CompileOptions] = None,
    runner: Optional[Runner] = None,
) -> CompileResult:
    opts = options or CompileOptions()
    return compile_program(
        parse(source),
        output_name,
        comments=opts.comments,
        boilerplate=opts.boilerplate,
        assembler=opts.assembler,
        linker=opts.linker,
        assembler_format=opts.assembler_format,
        runner=runner,
    )


def compile_file(
    path: str | Path,
    output_name: Optional[str] = None,
    *,
    options: Optional[CompileOptions] = None,
    runner: Optional[Runner] = None,
    encoding: str = "utf-8",
) -> CompileResult:
    p = Path(path)
    name = output_name if output_name is not None else default_output_name(p)
    return compile_string(p.read_text(encoding=encoding), name, options=options, runner=runner)
