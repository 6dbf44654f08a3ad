"""Mutable per-conversion state threaded through the tree walk.

Every scope is a context manager so list, table and indent state is
restored on all exit paths, including exceptions raised by a child.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from rtfexport.errors import NestingTooDeepError


class ListKind(Enum):
    UNORDERED = "unordered"
    ORDERED = "ordered"


@dataclass
class ListContext:
    kind: ListKind
    counter: int = 0


@dataclass
class RenderContext:
    """State for one top-level conversion; never shared between calls."""

    lists: list[ListContext] = field(default_factory=list)
    table_depth: int = 0
    # Left indent in twips applied to block paragraphs
    indent: int = 0
    # Current recursion depth of the walk
    depth: int = 0

    @property
    def current_list(self) -> Optional[ListContext]:
        return self.lists[-1] if self.lists else None

    @contextmanager
    def list_scope(self, kind: ListKind) -> Iterator[ListContext]:
        entry = ListContext(kind=kind)
        self.lists.append(entry)
        try:
            yield entry
        finally:
            self.lists.pop()

    @contextmanager
    def table_scope(self) -> Iterator[int]:
        saved_indent = self.indent
        self.table_depth += 1
        self.indent = 0
        try:
            yield self.table_depth
        finally:
            self.table_depth -= 1
            self.indent = saved_indent

    @contextmanager
    def indented(self, twips: int) -> Iterator[int]:
        self.indent += twips
        try:
            yield self.indent
        finally:
            self.indent -= twips

    @contextmanager
    def descend(self, limit: int) -> Iterator[int]:
        if self.depth >= limit:
            raise NestingTooDeepError(limit)
        self.depth += 1
        try:
            yield self.depth
        finally:
            self.depth -= 1
