"""Shared Typer option definitions for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer


INPUTS_PANEL = "Input Handling"
OUTPUT_PANEL = "Output"
MODULE_PANEL = "SWORD Module"
DIAGNOSTICS_PANEL = "Diagnostics"

OtDirArgument = Annotated[
    Path | None,
    typer.Argument(
        metavar="OT_DIR",
        help="Directory holding the Old Testament (or only) source documents.",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        show_default=False,
    ),
]

NtDirArgument = Annotated[
    Path | None,
    typer.Argument(
        metavar="[NT_DIR]",
        help="Optional directory holding the New Testament source documents.",
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
        show_default=False,
    ),
]

DialectOption = Annotated[
    str | None,
    typer.Option(
        "--dialect",
        "-d",
        help="Source schema of the input documents: 'biblica' or 'usx' (default: biblica).",
        rich_help_panel=INPUTS_PANEL,
    ),
]

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="TOML file with a [conversion] table; command-line options take precedence.",
        exists=True,
        dir_okay=False,
        readable=True,
        rich_help_panel=INPUTS_PANEL,
    ),
]

OutputOption = Annotated[
    Path | None,
    typer.Option(
        "--output",
        "-o",
        help="Path of the OSIS document to write.",
        dir_okay=False,
        rich_help_panel=OUTPUT_PANEL,
    ),
]

WorkOption = Annotated[
    str | None,
    typer.Option(
        "--work",
        help="OSIS work identifier (osisIDWork) written into the header.",
        rich_help_panel=OUTPUT_PANEL,
    ),
]

CompileOption = Annotated[
    bool | None,
    typer.Option(
        "--compile/--no-compile",
        help="Run osis2mod on the OSIS document once written (disabled by default).",
        show_default=False,
        rich_help_panel=MODULE_PANEL,
    ),
]

Osis2ModOption = Annotated[
    Path | None,
    typer.Option(
        "--osis2mod",
        help="Path to the osis2mod executable.",
        dir_okay=False,
        rich_help_panel=MODULE_PANEL,
    ),
]

ModuleDirOption = Annotated[
    Path | None,
    typer.Option(
        "--module-dir",
        help="Output directory of the SWORD module (defaults to the OSIS file's directory).",
        file_okay=False,
        rich_help_panel=MODULE_PANEL,
    ),
]

KeyOption = Annotated[
    str | None,
    typer.Option(
        "--key",
        envvar="STEP_MODULE_KEY",
        help="Cipher key passed to osis2mod -c.",
        show_envvar=True,
        rich_help_panel=MODULE_PANEL,
    ),
]

ObfuscationKeyOption = Annotated[
    str | None,
    typer.Option(
        "--obfuscation-key",
        envvar="STEP_OBFUSCATION_KEY",
        help="Password used to mask the cipher key for the module .conf file.",
        show_envvar=True,
        rich_help_panel=MODULE_PANEL,
    ),
]

VerboseOption = Annotated[
    int,
    typer.Option(
        "--verbose",
        "-v",
        count=True,
        help="Increase CLI verbosity. Combine multiple times for additional diagnostics.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Show full tracebacks when an unexpected error occurs.",
        rich_help_panel=DIAGNOSTICS_PANEL,
    ),
]
