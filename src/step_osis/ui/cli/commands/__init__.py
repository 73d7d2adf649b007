"""CLI command implementations exposed via `step_osis.ui.cli`."""

from __future__ import annotations

from .convert import convert
from .obfuscate import obfuscate


__all__ = ["convert", "obfuscate"]
