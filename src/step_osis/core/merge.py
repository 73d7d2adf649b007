"""Concatenate per-book source documents under a shared anchor node."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path

from lxml import etree

from .exceptions import IoError, MergeError


logger = logging.getLogger(__name__)


def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False)


def _is_layout(text: str | None) -> bool:
    return text is not None and not text.strip() and "\n" in text


def strip_layout_whitespace(root: etree._Element) -> None:
    """Drop indentation between the children of element-only content.

    An element qualifies when none of its text segments carries anything but
    whitespace; of those, only line-broken segments are removed. A single
    space separating two inline elements (``<char>a</char> <char>b</char>``)
    is content and stays.
    """
    for element in root.iter():
        if not isinstance(element.tag, str) or not len(element):
            continue
        segments = [element.text, *(child.tail for child in element)]
        if any(segment and segment.strip() for segment in segments):
            continue
        if _is_layout(element.text):
            element.text = None
        for child in element:
            if _is_layout(child.tail):
                child.tail = None


def parse_source(path: Path, parser: etree.XMLParser | None = None) -> etree._ElementTree:
    """Parse one source document, ignoring layout whitespace."""
    try:
        tree = etree.parse(str(path), parser or _parser())
    except etree.XMLSyntaxError as exc:
        raise IoError(f"{path}: malformed XML: {exc}") from exc
    except OSError as exc:
        raise IoError(f"{path}: unable to read source document: {exc}") from exc
    strip_layout_whitespace(tree.getroot())
    return tree


def find_anchor(expression: etree.XPath, tree: etree._ElementTree, path: Path) -> etree._Element:
    """Resolve the anchor node of ``tree`` or raise :class:`MergeError`."""
    try:
        result = expression(tree)
    except etree.XPathError as exc:
        raise MergeError(f"{path}: unable to evaluate '{expression.path}': {exc}") from exc
    if isinstance(result, list):
        result = next((node for node in result if isinstance(node, etree._Element)), None)
    if not isinstance(result, etree._Element):
        raise MergeError(f"{path}: expression '{expression.path}' does not evaluate to a node")
    return result


def _append_text(target: etree._Element, text: str) -> None:
    if len(target):
        last = target[-1]
        last.tail = (last.tail or "") + text
    else:
        target.text = (target.text or "") + text


def move_children(source: etree._Element, target: etree._Element) -> int:
    """Move every child node of ``source`` to the end of ``target``; return the element count."""
    moved = 0
    if source.text:
        _append_text(target, source.text)
        source.text = None
    for child in list(source):
        # append() detaches the child (and its tail) from the source document.
        target.append(child)
        moved += 1
    return moved


def merge_documents(anchor: str, files: Sequence[Path]) -> etree._ElementTree:
    """Merge ``files`` into the first one, concatenating content under ``anchor``.

    The first file provides the document structure; every later file only
    contributes the children of its own anchor node, appended in order.
    """
    if not files:
        raise MergeError("No source documents to merge.")

    try:
        expression = etree.XPath(anchor)
    except etree.XPathSyntaxError as exc:
        raise MergeError(f"Invalid anchor expression '{anchor}': {exc}") from exc

    parser = _parser()
    base = parse_source(files[0], parser)
    target = find_anchor(expression, base, files[0])

    for path in files[1:]:
        document = parse_source(path, parser)
        source = find_anchor(expression, document, path)
        moved = move_children(source, target)
        logger.debug("merged %d node(s) from %s", moved, path.name)

    return base


__all__ = [
    "find_anchor",
    "merge_documents",
    "move_children",
    "parse_source",
    "strip_layout_whitespace",
]
