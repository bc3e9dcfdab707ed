from __future__ import annotations

import sys
from typing import BinaryIO, Optional, Tuple

import numpy as np
from numba import njit

from .errors import make_bounds_error
from .program import OpKind, Program
from .validator import ensure_valid

DEFAULT_TAPE_SIZE = 32768  # 2^15 cells

# Integer opcodes understood by the compiled loop
OP_INC, OP_DEC, OP_INCDP, OP_DECDP, OP_OUT, OP_INP, OP_JZ, OP_JNZ = range(8)

_OPCODES = {
    OpKind.INC: OP_INC,
    OpKind.DEC: OP_DEC,
    OpKind.INCDP: OP_INCDP,
    OpKind.DECDP: OP_DECDP,
    OpKind.OUT: OP_OUT,
    OpKind.INP: OP_INP,
    OpKind.JZ: OP_JZ,
    OpKind.JNZ: OP_JNZ,
}

# Why the compiled loop handed control back
STOP_END = 0
STOP_OUTPUT = 1
STOP_INPUT = 2
STOP_BOUNDS = 3


@njit(cache=True)
def run_until_io(ops, operands, tape, pc, pointer):
    """
    Run the encoded program from `pc` until it ends, needs I/O, or would move
    the pointer off the tape.

    Returns (pc, pointer, stop_reason). On STOP_OUTPUT/STOP_INPUT/STOP_BOUNDS
    `pc` is the index of the instruction that stopped the loop, which has not
    been executed yet.
    """
    tape_len = len(tape)
    prog_len = len(ops)

    while pc < prog_len:
        op = ops[pc]
        n = operands[pc]

        if op == OP_INC:
            tape[pointer] = (tape[pointer] + n) & 255
        elif op == OP_DEC:
            tape[pointer] = (tape[pointer] - n) & 255
        elif op == OP_INCDP:
            if pointer + n >= tape_len:
                return pc, pointer, STOP_BOUNDS
            pointer += n
        elif op == OP_DECDP:
            if pointer - n < 0:
                return pc, pointer, STOP_BOUNDS
            pointer -= n
        elif op == OP_OUT:
            return pc, pointer, STOP_OUTPUT
        elif op == OP_INP:
            return pc, pointer, STOP_INPUT
        elif op == OP_JZ:
            if tape[pointer] == 0:
                pc = n
        elif op == OP_JNZ:
            if tape[pointer] != 0:
                pc = n

        pc += 1

    return pc, pointer, STOP_END


def encode(program: Program) -> Tuple[np.ndarray, np.ndarray]:
    """Flatten a program into parallel opcode/operand arrays for the compiled loop."""
    ops = np.array([_OPCODES[ins.kind] for ins in program], dtype=np.int64)
    operands = np.array([ins.operand for ins in program], dtype=np.int64)
    return ops, operands


class Tape:
    """Fixed-size byte tape plus the data pointer."""

    def __init__(self, size: int = DEFAULT_TAPE_SIZE):
        if size <= 0:
            raise ValueError(f"tape size must be positive, got {size}")
        self.cells = np.zeros(size, dtype=np.uint8)
        self.pointer = 0

    def __len__(self) -> int:
        return len(self.cells)

    @property
    def current(self) -> int:
        return int(self.cells[self.pointer])

    def dump(self, limit: Optional[int] = None) -> str:
        cells = self.cells if limit is None else self.cells[:limit]
        return "|" + "".join(f"{int(b)}|" for b in cells)


class Interpreter:
    """Runs a validated Program against a fresh tape."""

    def __init__(self, tape_size: int = DEFAULT_TAPE_SIZE):
        self.tape_size = tape_size
        self.tape = Tape(tape_size)

    def execute(self, program: Program, stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None) -> None:
        ensure_valid(program)
        if stdin is None:
            stdin = sys.stdin.buffer
        if stdout is None:
            stdout = sys.stdout.buffer

        self.tape = tape = Tape(self.tape_size)
        ops, operands = encode(program)
        pc = 0

        while True:
            pc, tape.pointer, stop = run_until_io(ops, operands, tape.cells, pc, tape.pointer)
            pc = int(pc)
            tape.pointer = int(tape.pointer)

            if stop == STOP_END:
                return

            ins = program[pc]
            if stop == STOP_OUTPUT:
                stdout.write(bytes([tape.current]) * ins.operand)
                stdout.flush()
            elif stop == STOP_INPUT:
                data = stdin.read(1)
                # End of input stores 0
                tape.cells[tape.pointer] = data[0] if data else 0
            elif stop == STOP_BOUNDS:
                step = ins.operand if ins.kind is OpKind.INCDP else -ins.operand
                raise make_bounds_error(
                    pointer=tape.pointer + step,
                    tape_size=len(tape),
                    instruction_index=pc,
                    source_index=ins.source_index,
                    source=program.source,
                )
            pc += 1

    def dump(self, limit: Optional[int] = 100) -> str:
        return self.tape.dump(limit)


def execute(program: Program, stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None, *, tape_size: int = DEFAULT_TAPE_SIZE) -> Interpreter:
    interpreter = Interpreter(tape_size)
    interpreter.execute(program, stdin, stdout)
    return interpreter
