#!/usr/bin/env python3

import os
import subprocess
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfjit import BFJitError
from bfjit.api import compile_file


def main():
    src = os.path.join(os.path.dirname(__file__), "hello_world.bf")
    try:
        result = compile_file(src)
    except BFJitError as e:
        print(e, file=sys.stderr)
        return 1

    # Needs nasm and ld on PATH
    subprocess.run([os.path.abspath(result.binary_path)], check=True)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
