"""Move pre-verse annotations in front of the verse they introduce.

Stylesheets cannot always emit a heading inside the paragraph that holds its
verse, so they tag such elements with ``step="pre-verse"``. This pass walks
the transformed document in document order, queues every tagged element and,
at each ``verse`` element, moves the queued elements (oldest first) to sit
immediately before that verse, in the verse's own parent.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from lxml import etree


MARKER_ATTRIBUTE = "step"
MARKER_VALUE = "pre-verse"
VERSE_TAG = "verse"


def _local_name(element: etree._Element) -> str | None:
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def is_pre_verse(element: etree._Element) -> bool:
    return isinstance(element.tag, str) and element.get(MARKER_ATTRIBUTE) == MARKER_VALUE


def is_verse(element: etree._Element) -> bool:
    return _local_name(element) == VERSE_TAG


def _detach(element: etree._Element) -> None:
    """Remove ``element`` from its parent, leaving its tail text behind."""
    parent = element.getparent()
    if parent is None:
        return
    tail = element.tail
    if tail:
        previous = element.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
    element.tail = None
    parent.remove(element)


class PendingNodes:
    """FIFO queue of pre-verse elements awaiting their verse.

    One queue belongs to one repositioning pass; nodes queued in one subtree
    may be consumed by a verse in another.
    """

    def __init__(self) -> None:
        self._queue: deque[etree._Element] = deque()

    def __len__(self) -> int:
        return len(self._queue)

    def __iter__(self) -> Iterator[etree._Element]:
        return iter(self._queue)

    def push(self, element: etree._Element) -> None:
        self._queue.append(element)

    def drain_before(self, verse: etree._Element) -> int:
        """Insert every pending element before ``verse`` and strip its marker."""
        kept: deque[etree._Element] = deque()
        moved = 0
        while self._queue:
            element = self._queue.popleft()
            if element is verse:
                element.attrib.pop(MARKER_ATTRIBUTE, None)
                continue
            if element in verse.iterancestors():
                # An element cannot precede its own descendant; wait for a later verse.
                kept.append(element)
                continue
            _detach(element)
            verse.addprevious(element)
            element.attrib.pop(MARKER_ATTRIBUTE, None)
            moved += 1
        self._queue = kept
        return moved


def _walk(node: etree._Element, pending: PendingNodes) -> int:
    moved = 0
    # Snapshot the children: elements moved during the walk must not shift the iteration.
    for child in list(node):
        if not isinstance(child.tag, str):
            continue
        if is_pre_verse(child):
            pending.push(child)
        if is_verse(child):
            moved += pending.drain_before(child)
        moved += _walk(child, pending)
    return moved


def reposition_pre_verse_nodes(
    root: etree._Element | etree._ElementTree,
    pending: PendingNodes | None = None,
) -> int:
    """Relocate pre-verse elements in place and return how many were moved.

    Elements with no verse after them keep their original position and stay in
    ``pending`` so callers can report them.
    """
    if isinstance(root, etree._ElementTree):
        root = root.getroot()
    queue = pending if pending is not None else PendingNodes()
    return _walk(root, queue)


__all__ = [
    "MARKER_ATTRIBUTE",
    "MARKER_VALUE",
    "PendingNodes",
    "is_pre_verse",
    "is_verse",
    "reposition_pre_verse_nodes",
]
