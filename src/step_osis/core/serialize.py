"""Write the final OSIS document to disk."""

from __future__ import annotations

from pathlib import Path

from lxml import etree

from .exceptions import IoError


def write_document(tree: etree._ElementTree | etree._Element, path: Path) -> Path:
    """Serialize ``tree`` without pretty-printing; return the written path."""
    if isinstance(tree, etree._Element):
        tree = tree.getroottree()
    try:
        with path.open("wb") as handle:
            tree.write(handle, encoding="UTF-8", xml_declaration=True, pretty_print=False)
    except OSError as exc:
        raise IoError(f"Unable to write '{path}': {exc}") from exc
    return path


__all__ = ["write_document"]
