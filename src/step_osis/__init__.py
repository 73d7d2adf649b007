"""Merge Biblica XML or USX books into OSIS and package them as SWORD modules."""

from __future__ import annotations

from step_osis.api import ConversionResult, ConversionService, convert
from step_osis.core import (
    ConfigurationError,
    ConversionError,
    ConversionRequest,
    Dialect,
    IoError,
    MergeError,
    SubprocessError,
    TransformError,
)
from step_osis.version import get_version


__version__ = get_version()

__all__ = [
    "ConfigurationError",
    "ConversionError",
    "ConversionRequest",
    "ConversionResult",
    "ConversionService",
    "Dialect",
    "IoError",
    "MergeError",
    "SubprocessError",
    "TransformError",
    "__version__",
    "convert",
    "get_version",
]
