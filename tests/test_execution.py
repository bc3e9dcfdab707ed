#!/usr/bin/env python3
"""
Test actual execution of Brainfuck programs on the in-process interpreter.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

import io

import pytest

from bfjit import BoundsError, Interpreter, RunOptions, StructuralError, run_string, tokenize, tokenize_unfolded
from bfjit.interpreter import Tape, encode, execute

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


def execute_bf_code_inprocess(bf_code, input_data=b"", tape_size=None):
    stdout = io.BytesIO()
    stdin = io.BytesIO(input_data)
    options = RunOptions() if tape_size is None else RunOptions(tape_size=tape_size)
    interpreter = run_string(bf_code, stdin=stdin, stdout=stdout, options=options)
    return stdout.getvalue(), interpreter


def test_hello_world():
    output, _ = execute_bf_code_inprocess(HELLO_WORLD)
    assert output == b"Hello World!\n"


def test_commented_hello_world():
    commented = "Print a greeting\n" + "\n".join(HELLO_WORLD[i:i + 10] for i in range(0, len(HELLO_WORLD), 10))
    output, _ = execute_bf_code_inprocess(commented)
    assert output == b"Hello World!\n"


def test_cells_wrap_at_256():
    output, _ = execute_bf_code_inprocess("-.")
    assert output == b"\xff"

    output, interpreter = execute_bf_code_inprocess("+" * 256)
    assert interpreter.tape.current == 0

    output, _ = execute_bf_code_inprocess("+" * 300 + "-" * 2 + ".")
    assert output == bytes([42])


def test_output_repeats_fold_count():
    output, _ = execute_bf_code_inprocess("+" * 65 + "....")
    assert output == b"AAAA"


def test_input_reads_one_byte_per_instruction():
    output, _ = execute_bf_code_inprocess(",.>,.", input_data=b"hi!")
    assert output == b"hi"


def test_end_of_input_stores_zero():
    output, interpreter = execute_bf_code_inprocess("+++++,", input_data=b"")
    assert interpreter.tape.current == 0

    output, _ = execute_bf_code_inprocess(",[.,]", input_data=b"echo")
    assert output == b"echo"


def test_zero_entry_loop_skips_body():
    output, interpreter = execute_bf_code_inprocess("[+.>]+.")
    assert output == b"\x01"
    assert interpreter.tape.pointer == 0


def test_nested_loops_multiply():
    # 6 * 7 = 42 into cell 1
    output, interpreter = execute_bf_code_inprocess("++++++[>+++++++<-]>.")
    assert output == b"*"
    assert interpreter.tape.pointer == 1
    assert interpreter.tape.cells[0] == 0


def test_adjacent_and_sequential_loops():
    output, _ = execute_bf_code_inprocess("++[-]++[-]+++[>+<-]>.")
    assert output == b"\x03"


def test_pointer_may_reach_last_cell():
    _, interpreter = execute_bf_code_inprocess(">" * 15 + "+", tape_size=16)
    assert interpreter.tape.pointer == 15
    assert interpreter.tape.cells[15] == 1


def test_moving_past_last_cell_is_fatal():
    with pytest.raises(BoundsError) as excinfo:
        execute_bf_code_inprocess(">" * 16, tape_size=16)
    err = excinfo.value
    assert err.pointer == 16
    assert err.instruction_index == 0
    assert "out of bounds" in str(err)


def test_moving_before_first_cell_is_fatal():
    with pytest.raises(BoundsError) as excinfo:
        execute_bf_code_inprocess("+>.<<")
    err = excinfo.value
    assert err.pointer == -1
    assert err.source_index == 3


def test_bounds_check_inside_loop():
    with pytest.raises(BoundsError):
        execute_bf_code_inprocess("+[>+]", tape_size=64)


def test_unbalanced_program_never_runs():
    stdout = io.BytesIO()
    with pytest.raises(StructuralError):
        Interpreter().execute(tokenize("+.["), io.BytesIO(), stdout)
    assert stdout.getvalue() == b""


def test_unresolved_jumps_never_run():
    stdout = io.BytesIO()
    with pytest.raises(StructuralError):
        Interpreter().execute(tokenize_unfolded("++[-.]"), io.BytesIO(), stdout)
    assert stdout.getvalue() == b""


def test_tape_is_fresh_per_execution():
    interpreter = Interpreter(tape_size=8)
    program = tokenize("+++>")
    interpreter.execute(program, io.BytesIO(), io.BytesIO())
    interpreter.execute(program, io.BytesIO(), io.BytesIO())
    assert interpreter.tape.cells[0] == 3
    assert interpreter.tape.pointer == 1


def test_dump_renders_cells():
    interpreter = Interpreter(tape_size=4)
    interpreter.execute(tokenize("+>++>+++"), io.BytesIO(), io.BytesIO())
    assert interpreter.dump() == "|1|2|3|0|"
    assert interpreter.dump(limit=2) == "|1|2|"


def test_tape_rejects_non_positive_size():
    with pytest.raises(ValueError):
        Tape(0)


def test_encode_uses_jump_targets_as_operands():
    ops, operands = encode(tokenize("[-]"))
    assert list(operands) == [2, 1, 0]
    assert len(ops) == 3


def test_execute_helper_returns_interpreter():
    stdout = io.BytesIO()
    interpreter = execute(tokenize("+++[>++<-]>."), io.BytesIO(), stdout, tape_size=4)
    assert stdout.getvalue() == b"\x06"
    assert interpreter.tape.pointer == 1
