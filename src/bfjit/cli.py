from __future__ import annotations

import argparse
import sys
import time
from typing import List, Optional

from .api import default_output_name
from .emitter import compile_program
from .errors import BFJitError
from .interpreter import DEFAULT_TAPE_SIZE, Interpreter
from .lexer import tokenize, tokenize_unfolded
from .validator import ensure_valid


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfjit",
        description="Brainfuck interpreter and native compiler (NASM x86-64).",
    )
    parser.add_argument("source", help="Brainfuck source file")
    parser.add_argument("--interpret", action="store_true", help="Run in-process instead of compiling")
    parser.add_argument("--no-comments", action="store_true", help="Do not annotate the generated assembly")
    parser.add_argument("-o", "--output", help="Name of the native executable (default: source file stem)")
    parser.add_argument("--boilerplate", help="Assembly template containing {{BRAINFUCK_HERE}}")
    parser.add_argument("--tape-size", type=int, default=DEFAULT_TAPE_SIZE, help=f"Cells on the tape (default {DEFAULT_TAPE_SIZE})")
    parser.add_argument("--dump-ir", action="store_true", help="Print the unfolded and folded instruction listings")
    parser.add_argument("--timing", action="store_true", help="Print how long each phase took")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.tape_size <= 0:
        print(f"--tape-size must be positive, got {args.tape_size}", file=sys.stderr)
        return 1

    try:
        with open(args.source, 'r', encoding='utf-8') as f:
            code = f.read()
    except OSError as e:
        print(f"Couldn't read {args.source}: {e.strerror}", file=sys.stderr)
        return 1

    try:
        start = time.time()
        program = tokenize(code)
        ensure_valid(program)
        end = time.time()
        if args.timing:
            print(f"Tokenizing took {(end - start) * 1000:.2f} ms")

        if args.dump_ir:
            print(tokenize_unfolded(code).listing())
            print("================")
            print(program.listing())
            print("================")

        if args.interpret:
            start = time.time()
            Interpreter(tape_size=args.tape_size).execute(program)
            end = time.time()
            if args.timing:
                print(f"\nExecution took {(end - start) * 1000:.2f} ms")
            return 0

        output = args.output or default_output_name(args.source)
        start = time.time()
        result = compile_program(
            program,
            output,
            comments=not args.no_comments,
            boilerplate=args.boilerplate,
        )
        end = time.time()
        if args.timing:
            print(f"Compilation took {(end - start) * 1000:.2f} ms")
        print(f"Wrote {result.asm_path} and {result.binary_path}")
        return 0
    except BFJitError as e:
        print(str(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
