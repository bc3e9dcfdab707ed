from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import BoilerplateError, make_toolchain_error
from .program import AnyInstruction, Branch, OpKind, Program
from .validator import ensure_valid

PLACEHOLDER = "{{BRAINFUCK_HERE}}"
DEFAULT_BOILERPLATE = Path(__file__).with_name("boilerplate.asm")

PTR = "r12"
INDENT = "    "


@dataclass(frozen=True)
class ProcessResult:
    command: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""


Runner = Callable[[Sequence[str]], ProcessResult]


def run_process(command: Sequence[str]) -> ProcessResult:
    """Run an external program to completion, capturing its output."""
    p = subprocess.run(list(command), text=True, capture_output=True)
    return ProcessResult(command=tuple(command), returncode=p.returncode, stdout=p.stdout, stderr=p.stderr)


@dataclass(frozen=True)
class CompileResult:
    asm_path: str
    binary_path: str
    steps: List[ProcessResult] = field(default_factory=list)


def label_for(index: int) -> str:
    return f"bf_op_{index}"


def _syscall(number: int, fd: int) -> List[str]:
    return [
        f"mov rax, {number}",
        f"mov rdi, {fd}",
        f"mov rsi, {PTR}",
        "mov rdx, 1",
        "syscall",
    ]


class AsmEmitter:
    """Translates a Program into NASM x86-64 lines, one fixed template per instruction."""

    def __init__(self, comments: bool = True):
        self.comments = comments

    def emit(self, program: Program) -> List[str]:
        ensure_valid(program)
        out: List[str] = []
        for index, ins in enumerate(program):
            if self.comments:
                out.append(INDENT + self._comment(index, ins))
            for line in self.template(index, ins):
                # labels stay flush left
                out.append(line if line.endswith(":") else INDENT + line)
        return out

    def template(self, index: int, ins: AnyInstruction) -> List[str]:
        kind = ins.kind
        n = ins.operand

        if kind is OpKind.INC:
            return [f"add byte [{PTR}], {n % 256}"]
        if kind is OpKind.DEC:
            return [f"sub byte [{PTR}], {n % 256}"]
        if kind is OpKind.INCDP:
            return [f"add {PTR}, {n}"]
        if kind is OpKind.DECDP:
            return [f"sub {PTR}, {n}"]
        if kind is OpKind.OUT:
            # no loop construct: the write is duplicated n times
            return _syscall(1, 1) * n
        if kind is OpKind.INP:
            return _syscall(0, 0)
        if kind is OpKind.JZ:
            return [f"cmp byte [{PTR}], 0", f"je {label_for(n)}", f"{label_for(index)}:"]
        return [f"cmp byte [{PTR}], 0", f"jne {label_for(n)}", f"{label_for(index)}:"]

    @staticmethod
    def _comment(index: int, ins: AnyInstruction) -> str:
        if isinstance(ins, Branch):
            return f"; [{index}] {ins.kind.symbol} -> {ins.target}"
        return f"; [{index}] {ins.kind.symbol} x{ins.operand}"


def emit(program: Program, *, comments: bool = True) -> List[str]:
    return AsmEmitter(comments=comments).emit(program)


def load_boilerplate(path: Optional[str | Path] = None) -> Tuple[List[str], List[str]]:
    """Split the boilerplate template into (header, footer) around the placeholder line."""
    p = Path(path) if path is not None else DEFAULT_BOILERPLATE
    try:
        lines = p.read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        raise BoilerplateError(message=f"BoilerplateError: boilerplate file not found: {p}", path=str(p)) from None

    for i, line in enumerate(lines):
        if PLACEHOLDER in line:
            return lines[:i], lines[i + 1:]
    raise BoilerplateError(
        message=f"BoilerplateError: could not find placeholder {PLACEHOLDER} in {p}",
        path=str(p),
    )


def _run_step(step: str, command: Sequence[str], runner: Runner) -> ProcessResult:
    try:
        result = runner(command)
    except FileNotFoundError:
        raise make_toolchain_error(step=step, command=tuple(command), returncode=127, missing=True) from None
    if result.returncode != 0:
        raise make_toolchain_error(
            step=step,
            command=tuple(command),
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


def compile_program(
    program: Program,
    output_name: str,
    *,
    comments: bool = True,
    boilerplate: Optional[str | Path] = None,
    assembler: str = "nasm",
    linker: str = "ld",
    assembler_format: str = "elf64",
    runner: Optional[Runner] = None,
) -> CompileResult:
    """
    Emit assembly for `program`, splice it into the boilerplate, write
    `<output_name>.asm`, then assemble and link it into `<output_name>`.

    The object file is removed once linking succeeds. A failing step raises
    ToolchainError and the later steps are not run.
    """
    if runner is None:
        runner = run_process
    code = emit(program, comments=comments)
    header, footer = load_boilerplate(boilerplate)

    asm_path = f"{output_name}.asm"
    obj_path = f"{output_name}.o"
    with open(asm_path, "w", encoding="utf-8") as f:
        f.write("\n".join(header + code + footer) + "\n")

    steps = [
        _run_step("assemble", [assembler, "-f", assembler_format, "-o", obj_path, asm_path], runner),
        _run_step("link", [linker, "-o", output_name, obj_path], runner),
    ]

    if os.path.exists(obj_path):
        os.remove(obj_path)

    return CompileResult(asm_path=asm_path, binary_path=output_name, steps=steps)
