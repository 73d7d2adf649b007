"""Source dialects understood by the converter."""

from __future__ import annotations

from enum import Enum

from .exceptions import ConfigurationError


class Dialect(Enum):
    """Closed set of source schemas, each bundling its file and merge conventions."""

    BIBLICA = ("biblica", "xml", "/biblicaDocument/scripture")
    USX = ("usx", "usx", "/usx")

    def __init__(self, token: str, extension: str, anchor: str) -> None:
        self.token = token
        self.extension = extension
        self.anchor = anchor

    @property
    def stylesheet(self) -> str:
        """Name of the bundled XSLT resource for this dialect."""
        return f"transform-{self.token}.xsl"

    def matches(self, filename: str) -> bool:
        suffix = filename.rpartition(".")[2] if "." in filename else ""
        return suffix.lower() == self.extension

    def __str__(self) -> str:
        return self.token


def resolve_dialect(value: str | Dialect) -> Dialect:
    """Return the dialect matching ``value`` or raise :class:`ConfigurationError`."""
    if isinstance(value, Dialect):
        return value
    token = str(value or "").strip().lower()
    for dialect in Dialect:
        if dialect.token == token:
            return dialect
    supported = ", ".join(d.token for d in Dialect)
    raise ConfigurationError(f"Conversion type not supported: '{value}' (expected one of {supported})")


__all__ = ["Dialect", "resolve_dialect"]
