"""Programmatic entry points for step-osis."""

from __future__ import annotations

from .service import ConversionResult, ConversionService, convert


__all__ = ["ConversionResult", "ConversionService", "convert"]
