"""
Path - Generic, copy-on-write access to nested dict/list documents.

A path is a dot-delimited string mixing dict keys and list indices:
- "body.contents.0.text" -> document["body"]["contents"][0]["text"]
- "" -> the root itself

A segment made only of ASCII digits indexes a list; any other segment is a
dict key. All write helpers are pure: they return a new root and only
shallow-copy the containers along the path, so every untouched subtree keeps
its identity. That makes whole-document snapshots cheap to keep in a history.

Unresolvable paths never raise. Reads return the default, writes return the
root unchanged.

Example:
    doc = {"body": {"contents": [{"type": "text", "text": "old"}]}}
    new_doc = set_at_path(doc, "body.contents.0.text", "new")

    get_at_path(new_doc, "body.contents.0.text")   # "new"
    get_at_path(doc, "body.contents.0.text")       # "old"
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Iterator, Union


PathLike = Union[str, "DocPath"]


def _is_index(segment: str) -> bool:
    return segment.isascii() and segment.isdigit()


@dataclass(frozen=True)
class DocPath:
    """
    Immutable, parsed form of a dot-delimited document path.

    Attributes:
        segments: Tuple of raw segments from root to target, e.g. ("body", "contents", "0")

    Example:
        path = DocPath.from_string("body.contents.0")
        print(path.parent)       # "body.contents"
        print(path.last)         # "0"
        print(path.depth)        # 3
        print(path.child(2))     # "body.contents.0.2"
    """

    segments: tuple[str, ...]

    def __init__(self, segments: list[str | int] | tuple[str | int, ...]):
        # Use object.__setattr__ because frozen=True
        object.__setattr__(self, 'segments', tuple(str(s) for s in segments))

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.segments)

    @property
    def depth(self) -> int:
        """Return depth in tree (0 for root)."""
        return len(self.segments)

    @property
    def is_root(self) -> bool:
        return len(self.segments) == 0

    @property
    def last(self) -> str | None:
        """Get the last segment (key or index in the parent container)."""
        return self.segments[-1] if self.segments else None

    @property
    def last_is_index(self) -> bool:
        return self.last is not None and _is_index(self.last)

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    @property
    def parent(self) -> DocPath | None:
        """Get parent path. Returns None for root path."""
        if not self.segments:
            return None
        return DocPath(self.segments[:-1])

    def child(self, segment: str | int) -> DocPath:
        return DocPath(list(self.segments) + [str(segment)])

    def ancestors(self) -> Iterator[DocPath]:
        """Iterate over all ancestor paths, from root to parent. Does not include self."""
        for i in range(len(self.segments)):
            yield DocPath(self.segments[:i])

    def is_ancestor_of(self, other: DocPath) -> bool:
        """
        Check if this path is an ancestor of (or equal to) other.

        Example: "body" is ancestor of "body.contents.0"
        """
        if len(self.segments) > len(other.segments):
            return False
        return other.segments[:len(self.segments)] == self.segments

    def is_strict_ancestor_of(self, other: DocPath) -> bool:
        return self.is_ancestor_of(other) and self != other

    # -------------------------------------------------------------------------
    # String representations
    # -------------------------------------------------------------------------

    def __str__(self) -> str:
        return ".".join(self.segments)

    def __repr__(self) -> str:
        return f"DocPath({list(self.segments)})"

    # -------------------------------------------------------------------------
    # Parsing
    # -------------------------------------------------------------------------

    @classmethod
    def from_string(cls, s: str) -> DocPath:
        if not s:
            return cls([])
        return cls(s.split("."))

    @classmethod
    def root(cls) -> DocPath:
        return cls([])


def _segments(path: PathLike) -> tuple[str, ...]:
    if isinstance(path, DocPath):
        return path.segments
    return DocPath.from_string(path).segments


class _Unresolvable(Exception):
    """Raised internally when a write cannot be applied at the given path."""


_MISSING = object()


def _child(node: Any, segment: str) -> Any:
    if isinstance(node, list):
        if not _is_index(segment):
            return _MISSING
        idx = int(segment)
        return node[idx] if idx < len(node) else _MISSING
    if isinstance(node, dict):
        return node.get(segment, _MISSING)
    return _MISSING


# -------------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------------


def get_at_path(root: Any, path: PathLike, default: Any = None) -> Any:
    """
    Read the value at path.

    Traversing through None, a primitive, an out-of-range index or a
    non-index segment on a list yields default instead of raising.
    """
    current = root
    for segment in _segments(path):
        current = _child(current, segment)
        if current is _MISSING:
            return default
    return current


def _set(node: Any, segments: tuple[str, ...], value: Any) -> Any:
    segment, rest = segments[0], segments[1:]
    if node is None or node is _MISSING:
        node = [] if _is_index(segment) else {}

    if isinstance(node, list):
        if not _is_index(segment):
            raise _Unresolvable(segment)
        idx = int(segment)
        clone = list(node)
        if idx >= len(clone):
            clone.extend([None] * (idx + 1 - len(clone)))
        clone[idx] = _set(clone[idx], rest, value) if rest else value
        return clone

    if isinstance(node, dict):
        clone = dict(node)
        clone[segment] = _set(node.get(segment), rest, value) if rest else value
        return clone

    raise _Unresolvable(segment)


def set_at_path(root: Any, path: PathLike, value: Any) -> Any:
    """
    Return a new root with value written at path.

    Missing (or None) intermediates are created: a list when the next segment
    is an index, otherwise a dict. An empty path replaces the root. If an
    existing intermediate cannot hold the segment the root is returned as is.
    """
    segments = _segments(path)
    if not segments:
        return value
    try:
        return _set(root, segments, value)
    except _Unresolvable:
        return root


def remove_at_path(root: Any, path: PathLike) -> Any:
    """
    Return a new root without the value at path.

    A list element is spliced out (later indices shift down), a dict key is
    deleted. Returns root itself when there is nothing to remove.
    """
    segments = _segments(path)
    if not segments:
        return root
    parent_segments, key = segments[:-1], segments[-1]
    parent = get_at_path(root, DocPath(parent_segments), _MISSING)

    if isinstance(parent, list):
        if not _is_index(key) or int(key) >= len(parent):
            return root
        idx = int(key)
        new_parent = parent[:idx] + parent[idx + 1:]
    elif isinstance(parent, dict):
        if key not in parent:
            return root
        new_parent = {k: v for k, v in parent.items() if k != key}
    else:
        return root
    return set_at_path(root, DocPath(parent_segments), new_parent)


def insert_at_path(root: Any, array_path: PathLike, index: int, element: Any) -> Any:
    """Insert element into the list at array_path. Non-list targets leave root unchanged."""
    target = get_at_path(root, array_path)
    if not isinstance(target, list):
        return root
    new_list = list(target)
    new_list.insert(index, element)
    return set_at_path(root, array_path, new_list)


def move_in_array(root: Any, array_path: PathLike, from_index: int, to_index: int) -> Any:
    """
    Move one element of the list at array_path from from_index to to_index.

    Returns root itself when the target is not a list, the indices are equal,
    or either index is outside [0, len).
    """
    target = get_at_path(root, array_path)
    if not isinstance(target, list):
        return root
    size = len(target)
    if from_index == to_index:
        return root
    if not (0 <= from_index < size and 0 <= to_index < size):
        return root
    new_list = list(target)
    item = new_list.pop(from_index)
    new_list.insert(to_index, item)
    return set_at_path(root, array_path, new_list)


def parent_path(path: str) -> str:
    """Parent of a path string: a.b.c -> a.b, and a single segment -> empty string."""
    idx = path.rfind(".")
    return path[:idx] if idx >= 0 else ""


def last_key(path: str) -> str:
    """Last segment of a path string: a.b.c -> c."""
    return path[path.rfind(".") + 1:]
