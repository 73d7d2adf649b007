"""Implementation of the `step-osis convert` command."""

from __future__ import annotations

from typing import Any

import click
import typer

from step_osis.api.service import ConversionService
from step_osis.core.config import build_request, load_config
from step_osis.core.exceptions import ConversionError, format_user_friendly_error

from .._options import (
    CompileOption,
    ConfigOption,
    DebugOption,
    DialectOption,
    KeyOption,
    ModuleDirOption,
    NtDirArgument,
    ObfuscationKeyOption,
    Osis2ModOption,
    OtDirArgument,
    OutputOption,
    VerboseOption,
    WorkOption,
)
from ..diagnostics import CliEmitter
from ..state import debug_enabled, emit_error, set_cli_state


_SERVICE = ConversionService()


def convert(
    ot_dir: OtDirArgument = None,
    nt_dir: NtDirArgument = None,
    output: OutputOption = None,
    dialect: DialectOption = None,
    config: ConfigOption = None,
    work: WorkOption = None,
    compile_module: CompileOption = None,
    osis2mod: Osis2ModOption = None,
    module_dir: ModuleDirOption = None,
    key: KeyOption = None,
    obfuscation_key: ObfuscationKeyOption = None,
    verbose: VerboseOption = 0,
    debug: DebugOption = False,
) -> None:
    """Merge the source books, transform them to OSIS and optionally build the module."""

    ctx = click.get_current_context(silent=True)
    typer_ctx = ctx if isinstance(ctx, typer.Context) else None
    state = set_cli_state(ctx=typer_ctx, verbosity=verbose or None, debug=debug or None)

    try:
        settings: dict[str, Any] = load_config(config) if config is not None else {}
    except ConversionError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    overrides: dict[str, Any] = {
        "ot_path": ot_dir,
        "nt_path": nt_dir,
        "output_path": output,
        "dialect": dialect,
        "work_id": work,
        "compile_module": compile_module,
        "osis2mod": osis2mod,
        "module_dir": module_dir,
        "encryption_key": key,
        "obfuscation_key": obfuscation_key,
    }
    settings.update({name: value for name, value in overrides.items() if value is not None})

    if not settings.get("ot_path"):
        raise typer.BadParameter("Provide the source directory (OT_DIR) or set ot_path in --config.")
    if not settings.get("output_path"):
        raise typer.BadParameter("Provide --output or set output_path in --config.")

    emitter = CliEmitter(state=state, debug_enabled=debug_enabled())
    try:
        request = build_request(**settings)
        result = _SERVICE.convert(request, emitter=emitter)
    except ConversionError as exc:
        if debug_enabled():
            raise
        emit_error(format_user_friendly_error(exc), exception=exc)
        raise typer.Exit(code=1) from exc

    if state.verbosity >= 1:
        total = sum(result.timings.values())
        state.console.print(
            f"Converted {len(result.sources)} file(s), moved {result.moved_nodes} "
            f"pre-verse node(s) [{total}ms]",
            highlight=False,
            markup=False,
        )


__all__ = ["convert"]
