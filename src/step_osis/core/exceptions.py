"""Exception hierarchy for the OSIS conversion pipeline."""

from __future__ import annotations


class ConversionError(RuntimeError):
    """Base exception for conversion failures."""


class ConfigurationError(ConversionError):
    """Raised when a conversion request cannot be interpreted (unknown dialect, missing tool)."""


class MergeError(ConversionError):
    """Raised when source documents cannot be merged under their anchor node."""


class TransformError(ConversionError):
    """Raised when a stylesheet is missing or fails to apply."""


class IoError(ConversionError):
    """Raised when reading sources or writing the output fails."""


class SubprocessError(ConversionError):
    """Raised when the external module compiler fails to launch or exits non-zero."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


def format_user_friendly_error(error: BaseException) -> str:
    """Return a concise failure summary suitable for end users."""
    summary = str(error).strip().rstrip(".")
    hint = exception_hint(error)
    if hint and hint.rstrip(".") not in summary:
        summary = f"{summary}: {hint.rstrip('.')}"
    return f"{summary}. Re-run with --debug for technical details."


__all__ = [
    "ConfigurationError",
    "ConversionError",
    "IoError",
    "MergeError",
    "SubprocessError",
    "TransformError",
    "exception_hint",
    "exception_messages",
    "format_user_friendly_error",
]
