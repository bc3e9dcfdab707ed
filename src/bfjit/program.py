from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple, Union

# Jump target of a delimiter that has no counterpart.
UNRESOLVED = -1


class OpKind(Enum):
    INC = '+'
    DEC = '-'
    INCDP = '>'
    DECDP = '<'
    OUT = '.'
    INP = ','
    JZ = '['
    JNZ = ']'

    @property
    def symbol(self) -> str:
        return self.value


_KINDS = {k.value: k for k in OpKind}


def kind_for(ch: str) -> Optional[OpKind]:
    """Map one source character to its instruction kind, or None for comments."""
    return _KINDS.get(ch)


# ---------------- Instructions ----------------
@dataclass(frozen=True)
class Instruction(ABC):
    kind: OpKind
    source_index: int

    @property
    @abstractmethod
    def operand(self) -> int:
        """
        Raw operand of the instruction.

        For INC/DEC/INCDP/DECDP/OUT/INP this is the fold count: how many source
        symbols the instruction stands for (net of cancelling +/- for INC/DEC).
        For JZ/JNZ it is the index, in the instruction sequence, of the matching
        delimiter (UNRESOLVED when there is none).
        """

    @property
    def is_jump(self) -> bool:
        return self.kind in (OpKind.JZ, OpKind.JNZ)


@dataclass(frozen=True)
class Arithmetic(Instruction):
    amount: int  # net +/- on current cell, always >= 0

    @property
    def operand(self) -> int:
        return self.amount


@dataclass(frozen=True)
class PointerMove(Instruction):
    amount: int

    @property
    def operand(self) -> int:
        return self.amount


@dataclass(frozen=True)
class Io(Instruction):
    repeat: int

    @property
    def operand(self) -> int:
        return self.repeat


@dataclass(frozen=True)
class Branch(Instruction):
    target: int

    @property
    def operand(self) -> int:
        return self.target

    @property
    def resolved(self) -> bool:
        return self.target != UNRESOLVED


AnyInstruction = Union[Arithmetic, PointerMove, Io, Branch]


def make_instruction(kind: OpKind, operand: int, source_index: int) -> AnyInstruction:
    if kind in (OpKind.INC, OpKind.DEC):
        return Arithmetic(kind=kind, source_index=source_index, amount=operand)
    if kind in (OpKind.INCDP, OpKind.DECDP):
        return PointerMove(kind=kind, source_index=source_index, amount=operand)
    if kind in (OpKind.OUT, OpKind.INP):
        return Io(kind=kind, source_index=source_index, repeat=operand)
    return Branch(kind=kind, source_index=source_index, target=operand)


# ---------------- Program ----------------
class Program:
    """
    Ordered, immutable instruction sequence plus the source text it came from.

    Instruction identity is its integer index; jump targets refer to those
    indices. Executor and emitter only ever read a Program.
    """

    __slots__ = ('_instructions', '_source')

    def __init__(self, instructions: Sequence[AnyInstruction], source: str = ''):
        self._instructions: Tuple[AnyInstruction, ...] = tuple(instructions)
        self._source = source

    @property
    def instructions(self) -> Tuple[AnyInstruction, ...]:
        return self._instructions

    @property
    def source(self) -> str:
        return self._source

    def __len__(self) -> int:
        return len(self._instructions)

    def __iter__(self) -> Iterator[AnyInstruction]:
        return iter(self._instructions)

    def __getitem__(self, index: int) -> AnyInstruction:
        return self._instructions[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Program):
            return NotImplemented
        return self._instructions == other._instructions

    def __hash__(self) -> int:
        return hash(self._instructions)

    def __repr__(self) -> str:
        return f"Program({len(self)} instructions)"

    def kinds(self) -> List[OpKind]:
        return [ins.kind for ins in self._instructions]

    def to_source(self) -> str:
        """Compact 8-symbol text equivalent to this program."""
        out: List[str] = []
        for ins in self._instructions:
            if isinstance(ins, Branch):
                out.append(ins.kind.symbol)
            else:
                out.append(ins.kind.symbol * ins.operand)
        return "".join(out)

    def listing(self) -> str:
        """One line per instruction: index, kind, operand and source offset."""
        lines: List[str] = []
        width = len(str(max(len(self) - 1, 0)))
        for i, ins in enumerate(self._instructions):
            if isinstance(ins, Branch):
                target = '?' if not ins.resolved else str(ins.target)
                arg = f"-> {target}"
            else:
                arg = f"x{ins.operand}"
            lines.append(f"{i:>{width}}  {ins.kind.name:<5} {ins.kind.symbol} {arg:<8} @{ins.source_index}")
        return "\n".join(lines)
