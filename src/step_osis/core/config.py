"""Configuration models describing a conversion run.

ConversionRequest

`ot_path` (`Path`)
: Directory holding the Old Testament (or only) source documents.

`nt_path` (`Path | None`)
: Optional directory holding the New Testament documents. Blank values are
  treated as absent.

`output_path` (`Path`)
: Destination of the serialized OSIS document.

`dialect` (`Dialect`)
: Source schema, given as `biblica` or `usx`. Unknown tokens fail when the
  request is built, before any file is read.

`compile_module` (`bool`)
: Run `osis2mod` on the OSIS document once it has been written.

`osis2mod` (`Path | None`)
: Path to the `osis2mod` executable. Required when `compile_module` is set.

`module_dir` (`Path | None`)
: Output directory for the SWORD module. Defaults to the directory of
  `output_path`.

`encryption_key` (`SecretStr | None`)
: Key used by `osis2mod -c` to encipher the module.

`obfuscation_key` (`SecretStr | None`)
: Password masking `encryption_key` in the module configuration file.

`work_id` (`str | None`)
: OSIS work identifier (`osisIDWork`). Defaults to the source abbreviation or
  `STEP`.
"""

from __future__ import annotations

from pathlib import Path
import tomllib
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from .dialects import Dialect, resolve_dialect
from .exceptions import ConfigurationError, IoError


class ConversionRequest(BaseModel):
    """Immutable parameter set for one conversion run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    ot_path: Path
    nt_path: Path | None = None
    output_path: Path
    dialect: Dialect = Dialect.BIBLICA
    compile_module: bool = False
    osis2mod: Path | None = None
    module_dir: Path | None = None
    encryption_key: SecretStr | None = Field(default=None)
    obfuscation_key: SecretStr | None = Field(default=None)
    work_id: str | None = None

    @field_validator("dialect", mode="before")
    @classmethod
    def _parse_dialect(cls, value: Any) -> Dialect:
        # ConfigurationError is not a ValueError, so pydantic lets it propagate unchanged.
        return resolve_dialect(value)

    @field_validator("nt_path", "osis2mod", "module_dir", mode="before")
    @classmethod
    def _blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def source_dirs(self) -> list[Path]:
        dirs = [self.ot_path]
        if self.nt_path is not None:
            dirs.append(self.nt_path)
        return dirs

    @property
    def resolved_module_dir(self) -> Path:
        return self.module_dir if self.module_dir is not None else self.output_path.parent


def build_request(**values: Any) -> ConversionRequest:
    """Build a request, converting pydantic validation failures to :class:`ConfigurationError`."""
    cleaned = {key: value for key, value in values.items() if value is not None}
    try:
        return ConversionRequest(**cleaned)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid conversion settings: {exc}") from exc


def load_config(path: Path) -> dict[str, Any]:
    """Return the ``[conversion]`` table of a TOML configuration file."""
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except OSError as exc:
        raise IoError(f"Unable to read configuration file '{path}': {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid configuration file '{path}': {exc}") from exc

    section = data.get("conversion", {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{path}': [conversion] must be a table")

    base = path.parent
    resolved: dict[str, Any] = {}
    for key, value in section.items():
        if key in {"ot_path", "nt_path", "output_path", "osis2mod", "module_dir"} and value:
            candidate = Path(str(value)).expanduser()
            value = candidate if candidate.is_absolute() else base / candidate
        resolved[key] = value
    return resolved


__all__ = ["ConversionRequest", "build_request", "load_config"]
