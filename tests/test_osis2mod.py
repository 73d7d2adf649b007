from pathlib import Path
import sys

import pytest

from step_osis.adapters import osis2mod as osis2mod_mod
from step_osis.adapters.osis2mod import Osis2ModCompiler, build_command
from step_osis.core.exceptions import SubprocessError


pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="Stub compiler is a POSIX script.")


def _stub_compiler(tmp_path: Path, body: str) -> Path:
    script = tmp_path / "osis2mod"
    script.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
    script.chmod(0o755)
    return script


def test_build_command_orders_positional_arguments(tmp_path: Path) -> None:
    command = build_command("osis2mod", tmp_path / "mod", tmp_path / "bible.xml", "secret")
    assert command == [
        "osis2mod",
        str(tmp_path / "mod"),
        str(tmp_path / "bible.xml"),
        "-z",
        "-c",
        "secret",
    ]


def test_build_command_without_key_skips_cipher(tmp_path: Path) -> None:
    command = build_command("osis2mod", tmp_path, tmp_path / "bible.xml")
    assert command[-1] == "-z"


def test_compiler_relays_output_lines(tmp_path: Path) -> None:
    script = _stub_compiler(tmp_path, 'echo "args: $*"\necho "done" >&2\nexit 0')
    seen: list[str] = []

    result = Osis2ModCompiler(script).compile(
        tmp_path / "mod", tmp_path / "bible.xml", "k3y", on_line=seen.append
    )

    assert result.returncode == 0
    assert seen == [f"args: {tmp_path / 'mod'} {tmp_path / 'bible.xml'} -z -c k3y", "done"]
    assert result.output == seen


def test_non_zero_exit_raises_subprocess_error(tmp_path: Path) -> None:
    script = _stub_compiler(tmp_path, 'echo "ERROR: bad osis"\nexit 3')

    with pytest.raises(SubprocessError, match="exit code 3") as excinfo:
        Osis2ModCompiler(script).compile(tmp_path, tmp_path / "bible.xml")

    assert excinfo.value.returncode == 3
    assert "bad osis" in str(excinfo.value)


def test_missing_executable_raises_subprocess_error(tmp_path: Path) -> None:
    with pytest.raises(SubprocessError, match="could not be located"):
        Osis2ModCompiler(tmp_path / "nope").compile(tmp_path, tmp_path / "bible.xml")


def test_launch_failure_raises_subprocess_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    def fake_popen(*_args: object, **_kwargs: object) -> None:
        raise PermissionError("denied")

    monkeypatch.setattr(osis2mod_mod.subprocess, "Popen", fake_popen)

    with pytest.raises(SubprocessError, match="Failed to launch"):
        Osis2ModCompiler("osis2mod").compile(tmp_path, tmp_path / "bible.xml")
