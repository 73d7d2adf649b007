"""Core building blocks of the OSIS conversion pipeline."""

from __future__ import annotations

from .config import ConversionRequest, build_request, load_config
from .dialects import Dialect, resolve_dialect
from .discovery import discover_sources
from .exceptions import (
    ConfigurationError,
    ConversionError,
    IoError,
    MergeError,
    SubprocessError,
    TransformError,
)
from .merge import merge_documents
from .reposition import PendingNodes, reposition_pre_verse_nodes
from .serialize import write_document
from .transform import apply_stylesheet, load_stylesheet


__all__ = [
    "ConfigurationError",
    "ConversionError",
    "ConversionRequest",
    "Dialect",
    "IoError",
    "MergeError",
    "PendingNodes",
    "SubprocessError",
    "TransformError",
    "apply_stylesheet",
    "build_request",
    "discover_sources",
    "load_config",
    "load_stylesheet",
    "merge_documents",
    "reposition_pre_verse_nodes",
    "resolve_dialect",
    "write_document",
]
