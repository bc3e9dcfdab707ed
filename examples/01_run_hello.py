#!/usr/bin/env python3

import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfjit.api import run_file


def main():
    interpreter = run_file(os.path.join(os.path.dirname(__file__), "hello_world.bf"))
    print("================")
    print(interpreter.dump(limit=8))


if __name__ == "__main__":
    main()
