from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from .validator import Diagnostic


def _build_context(source: str, position: int, *, window: int = 8) -> Tuple[str, str]:
    start = max(0, position - window)
    end = min(len(source), position + window)
    snippet = source[start:end].replace('\n', ' ').replace('\t', ' ')
    caret = ' ' * (position - start) + '^'
    return snippet, caret


def _hint_for(message: str, *, kind: str) -> Optional[str]:
    msg = message.lower()
    if kind == 'syntax':
        if 'mismatched closing' in msg:
            return 'This "]" has no "[" before it. Remove it or add the missing "[".'
        if 'unclosed' in msg:
            return 'This "[" is never closed. Add the matching "]".'
        if 'unresolved jump' in msg:
            return 'Build runnable programs with tokenize(); tokenize_unfolded() output is for inspection only.'
        return None
    if kind == 'runtime':
        if 'out of bounds' in msg:
            return 'Check the "<" and ">" balance of the surrounding loop, or run with a larger --tape-size.'
        return None
    if kind == 'toolchain':
        if 'not found' in msg:
            return 'Install nasm and binutils (ld), or run with --interpret.'
        return None
    return None


def render_diagnostic(diagnostic: 'Diagnostic', source: str, *, window: int = 8) -> str:
    snippet, caret = _build_context(source, diagnostic.source_position, window=window)
    hint = _hint_for(diagnostic.message, kind='syntax')
    hint_block = f"\nHint: {hint}" if hint else ""
    # Positions are reported 1-based.
    return (
        f"error: {diagnostic.message} at character {diagnostic.source_position + 1}\n"
        f"{snippet}\n"
        f"{caret} {diagnostic.message}{hint_block}\n"
        f"------------"
    )


@dataclass
class BFJitError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class StructuralError(BFJitError):
    diagnostics: List['Diagnostic'] = field(default_factory=list)
    source: str = ''


@dataclass
class BoundsError(BFJitError):
    pointer: int
    instruction_index: int
    source_index: int


@dataclass
class BoilerplateError(BFJitError):
    path: str


@dataclass
class ToolchainError(BFJitError):
    step: str
    command: Tuple[str, ...]
    returncode: int
    stdout: str = ''
    stderr: str = ''


def make_structural_error(*, diagnostics: List['Diagnostic'], source: str) -> StructuralError:
    blocks = [render_diagnostic(d, source) for d in diagnostics]
    return StructuralError(
        message="\n".join(blocks),
        diagnostics=list(diagnostics),
        source=source,
    )


def make_bounds_error(*, pointer: int, tape_size: int, instruction_index: int, source_index: int, source: str) -> BoundsError:
    message = f"pointer out of bounds: {pointer} not in [0, {tape_size})"
    snippet, caret = _build_context(source, source_index)
    hint = _hint_for(message, kind='runtime')
    hint_block = f"\nHint: {hint}" if hint else ""
    return BoundsError(
        message=f"RuntimeError: {message} (instruction {instruction_index}, character {source_index + 1})\n{snippet}\n{caret}{hint_block}",
        pointer=pointer,
        instruction_index=instruction_index,
        source_index=source_index,
    )


def make_toolchain_error(*, step: str, command: Tuple[str, ...], returncode: int, stdout: str = '', stderr: str = '', missing: bool = False) -> ToolchainError:
    if missing:
        message = f"{step} failed: '{command[0]}' not found"
    else:
        message = f"{step} failed with exit code {returncode}: {' '.join(command)}"
    parts = [f"ToolchainError: {message}"]
    if stdout.strip():
        parts.append(f"stdout:\n{stdout.rstrip()}")
    if stderr.strip():
        parts.append(f"stderr:\n{stderr.rstrip()}")
    hint = _hint_for(message, kind='toolchain')
    if hint:
        parts.append(f"Hint: {hint}")
    return ToolchainError(
        message="\n".join(parts),
        step=step,
        command=tuple(command),
        returncode=returncode,
        stdout=stdout,
        stderr=stderr,
    )
