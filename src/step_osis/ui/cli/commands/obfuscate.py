"""Implementation of the `step-osis obfuscate` command."""

from __future__ import annotations

from typing import Annotated

import typer

from step_osis.adapters.obfuscation import obfuscate_key, reveal_key
from step_osis.core.exceptions import ConversionError

from ..state import emit_error


def obfuscate(
    value: Annotated[
        str,
        typer.Argument(help="Module cipher key to mask (or masked value with --reveal)."),
    ],
    password: Annotated[
        str,
        typer.Option(
            "--password",
            envvar="STEP_OBFUSCATION_KEY",
            prompt=True,
            hide_input=True,
            help="Obfuscation key shared with the STEP server.",
        ),
    ],
    reveal: Annotated[
        bool,
        typer.Option("--reveal", help="Recover the cipher key from a masked value."),
    ] = False,
) -> None:
    """Print the masked cipher key for a module .conf file."""
    try:
        result = reveal_key(value, password) if reveal else obfuscate_key(value, password)
    except ConversionError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc
    typer.echo(result)


__all__ = ["obfuscate"]
