from __future__ import annotations

from dataclasses import dataclass
from typing import List

from .errors import make_structural_error
from .program import OpKind, Program

MISMATCHED_CLOSING = "Mismatched closing delimiter"
UNCLOSED = "Unclosed delimiter"
UNRESOLVED_TARGET = "Unresolved jump target"


@dataclass(frozen=True)
class Diagnostic:
    instruction_index: int
    source_position: int
    message: str


def source_offset(program: Program, index: int) -> int:
    """
    Reconstruct the source offset of instruction `index` from the folded
    stream: every non-jump contributes its fold count, every jump one
    character. Comments and cancelled +/- pairs are invisible here, so this
    only matches `source_index` for comment-free, non-mixed sources.
    """
    count = 0
    for ins in program.instructions[:index]:
        count += 1 if ins.is_jump else ins.operand
    return count


def validate(program: Program) -> List[Diagnostic]:
    """
    Report every unbalanced delimiter, and every balanced pair whose jump
    targets do not point at each other. An empty list means the program is
    runnable.
    """
    diagnostics: List[Diagnostic] = []
    open_stack: List[int] = []

    for i, ins in enumerate(program):
        if ins.kind is OpKind.JZ:
            open_stack.append(i)
        elif ins.kind is OpKind.JNZ:
            if not open_stack:
                diagnostics.append(Diagnostic(i, ins.source_index, MISMATCHED_CLOSING))
                continue
            opener = open_stack.pop()
            if program[opener].operand != i or ins.operand != opener:
                diagnostics.append(Diagnostic(opener, program[opener].source_index, UNRESOLVED_TARGET))

    for i in open_stack:
        diagnostics.append(Diagnostic(i, program[i].source_index, UNCLOSED))
    return diagnostics


def ensure_valid(program: Program) -> None:
    diagnostics = validate(program)
    if diagnostics:
        raise make_structural_error(diagnostics=diagnostics, source=program.source)
