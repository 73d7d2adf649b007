"""Invoke the SWORD ``osis2mod`` compiler on a finished OSIS document."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
import subprocess
from typing import Protocol, runtime_checkable

from step_osis.core.exceptions import SubprocessError


COMPRESS_FLAG = "-z"
CIPHER_FLAG = "-c"


@dataclass(slots=True)
class CompilerResult:
    """Outcome of a module compilation."""

    command: list[str]
    returncode: int
    output: list[str] = field(default_factory=list)


@runtime_checkable
class ModuleCompiler(Protocol):
    """Narrow interface used by the pipeline to package an OSIS file."""

    def compile(
        self,
        module_dir: Path,
        osis_file: Path,
        key: str | None = None,
        *,
        on_line: Callable[[str], None] | None = None,
    ) -> CompilerResult: ...


def build_command(
    executable: Path | str,
    module_dir: Path,
    osis_file: Path,
    key: str | None = None,
) -> list[str]:
    """Return ``osis2mod <module_dir> <osis_file> -z [-c <key>]``."""
    command = [str(executable), str(module_dir), str(osis_file), COMPRESS_FLAG]
    if key:
        command.extend([CIPHER_FLAG, key])
    return command


def stream_process(
    command: Sequence[str],
    *,
    on_line: Callable[[str], None] | None = None,
) -> tuple[int, list[str]]:
    """Run ``command`` relaying each output line as it arrives; block until exit."""
    lines: list[str] = []
    try:
        with subprocess.Popen(
            list(command),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
            encoding="utf-8",
            errors="replace",
        ) as process:
            assert process.stdout is not None
            for raw in process.stdout:
                line = raw.rstrip("\r\n")
                lines.append(line)
                if on_line is not None:
                    on_line(line)
            returncode = process.wait()
    except FileNotFoundError as exc:
        raise SubprocessError(f"Module compiler '{command[0]}' could not be located.") from exc
    except OSError as exc:
        raise SubprocessError(f"Failed to launch module compiler '{command[0]}': {exc}") from exc
    return returncode, lines


class Osis2ModCompiler:
    """Run a local ``osis2mod`` executable."""

    def __init__(self, executable: Path | str) -> None:
        self.executable = Path(executable)

    def compile(
        self,
        module_dir: Path,
        osis_file: Path,
        key: str | None = None,
        *,
        on_line: Callable[[str], None] | None = None,
    ) -> CompilerResult:
        command = build_command(self.executable, module_dir, osis_file, key)
        returncode, lines = stream_process(command, on_line=on_line)
        if returncode != 0:
            message = f"{self.executable.name} failed with exit code {returncode}"
            if lines:
                message = f"{message}: {lines[-1]}"
            raise SubprocessError(message, returncode=returncode)
        return CompilerResult(command=command, returncode=returncode, output=lines)


__all__ = [
    "CIPHER_FLAG",
    "COMPRESS_FLAG",
    "CompilerResult",
    "ModuleCompiler",
    "Osis2ModCompiler",
    "build_command",
    "stream_process",
]
