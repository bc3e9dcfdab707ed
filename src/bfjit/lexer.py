from __future__ import annotations

from typing import List, Tuple

from .program import UNRESOLVED, OpKind, Program, kind_for, make_instruction


def _filter(source: str) -> List[Tuple[int, OpKind]]:
    """Code characters with their offsets; everything else is a comment."""
    out: List[Tuple[int, OpKind]] = []
    for pos, ch in enumerate(source):
        kind = kind_for(ch)
        if kind is not None:
            out.append((pos, kind))
    return out


def tokenize(source: str) -> Program:
    """
    Turn source text into a folded Program with resolved jump targets.

    Runs of +/- are folded into their net delta; a run that cancels out is
    dropped. Runs of >, < and . are folded by length. , [ and ] are never
    folded. Unmatched delimiters keep an UNRESOLVED target; reporting them is
    the validator's job.
    """
    code = _filter(source)
    slots: List[list] = []  # [kind, operand, source_index]
    open_stack: List[int] = []

    i = 0
    while i < len(code):
        pos, kind = code[i]

        if kind in (OpKind.INC, OpKind.DEC):
            delta = 0
            while i < len(code) and code[i][1] in (OpKind.INC, OpKind.DEC):
                delta += 1 if code[i][1] is OpKind.INC else -1
                i += 1
            if delta > 0:
                slots.append([OpKind.INC, delta, pos])
            elif delta < 0:
                slots.append([OpKind.DEC, -delta, pos])
            continue

        if kind in (OpKind.INCDP, OpKind.DECDP, OpKind.OUT):
            run = 0
            while i < len(code) and code[i][1] is kind:
                run += 1
                i += 1
            slots.append([kind, run, pos])
            continue

        if kind is OpKind.JZ:
            open_stack.append(len(slots))
            slots.append([kind, UNRESOLVED, pos])
        elif kind is OpKind.JNZ:
            here = len(slots)
            if open_stack:
                opener = open_stack.pop()
                slots[opener][1] = here
                slots.append([kind, opener, pos])
            else:
                slots.append([kind, UNRESOLVED, pos])
        else:
            slots.append([kind, 1, pos])
        i += 1

    instructions = [make_instruction(k, operand, pos) for k, operand, pos in slots]
    return Program(instructions, source)


def tokenize_unfolded(source: str) -> Program:
    """One instruction per code character, operand 1, jumps left unresolved."""
    instructions = []
    for pos, kind in _filter(source):
        operand = UNRESOLVED if kind in (OpKind.JZ, OpKind.JNZ) else 1
        instructions.append(make_instruction(kind, operand, pos))
    return Program(instructions, source)
