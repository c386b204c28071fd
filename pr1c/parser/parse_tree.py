"""
Parse tree for PR1 programs.

The parser builds a concrete parse tree rather than an AST: one rule node
per grammar production it entered and one leaf per terminal it matched.
Rule nodes are opened and closed through a parent stack; ``ParseTree.rule``
is the scoped form that keeps the stack balanced on every exit path.

Author: xwest
"""

import weakref
from contextlib import contextmanager
from typing import Iterator, List, Optional

from ..lexer.tokens import Token


ROOT_NAME = "ROOT"


class ParseTreeNode:
    """A rule node (``value is None``) or a leaf node for a matched terminal."""

    def __init__(self, name: str, value: Optional[str] = None, line: int = -1,
                 filename: Optional[str] = None):
        self.name = name
        self.value = value
        self.line = line
        self.filename = filename
        self.children: List['ParseTreeNode'] = []
        self._parent: Optional[weakref.ref] = None

    @property
    def parent(self) -> Optional['ParseTreeNode']:
        """The owning node, or None for the root."""
        return self._parent() if self._parent is not None else None

    @property
    def is_rule(self) -> bool:
        return self.value is None

    @property
    def is_matched_rule(self) -> bool:
        """A rule node anchored to a real source line."""
        return self.is_rule and self.line > 0

    def add_child(self, child: 'ParseTreeNode'):
        child._parent = weakref.ref(self)
        self.children.append(child)

    def find_all(self, name: str) -> List['ParseTreeNode']:
        """All descendants (pre-order) with the given name."""
        found = []
        for child in self.children:
            if child.name == name:
                found.append(child)
            found.extend(child.find_all(name))
        return found

    def label(self, show_files: bool = False) -> str:
        """Render this node as one tree line without indentation."""
        text = self.name
        if self.value is not None:
            text += f": {self.value}"
        if self.line > 0:
            if show_files and self.filename:
                text += f" (Line {self.line}, File: {self.filename})"
            else:
                text += f" (Line {self.line})"
        return text

    def __repr__(self) -> str:
        return f"ParseTreeNode({self.name!r}, {self.value!r}, line={self.line})"


class ParseTree:
    """
    Owns the root node and every node created under it.

    ``nodes`` lists all non-root nodes in creation order; it only grows.
    """

    def __init__(self):
        self.root = ParseTreeNode(ROOT_NAME)
        self.nodes: List[ParseTreeNode] = []
        self._current = self.root
        self._stack: List[ParseTreeNode] = []

    @property
    def current(self) -> ParseTreeNode:
        """The node new children are attached to."""
        return self._current

    @property
    def depth(self) -> int:
        """Number of rules currently open."""
        return len(self._stack)

    def start_rule(self, name: str, line: int = -1, filename: Optional[str] = None) -> ParseTreeNode:
        node = ParseTreeNode(name, None, line, filename)
        self._current.add_child(node)
        self.nodes.append(node)
        self._stack.append(self._current)
        self._current = node
        return node

    def end_rule(self):
        if not self._stack:
            raise RuntimeError("end_rule() called with no open rule")
        self._current = self._stack.pop()

    @contextmanager
    def rule(self, name: str, line: int = -1, filename: Optional[str] = None) -> Iterator[ParseTreeNode]:
        """Open a rule for the duration of a ``with`` block."""
        node = self.start_rule(name, line, filename)
        try:
            yield node
        finally:
            self.end_rule()

    def add_node(self, token: Token) -> ParseTreeNode:
        node = ParseTreeNode(token.type.description, token.lexeme, token.line, token.filename)
        self._current.add_child(node)
        self.nodes.append(node)
        return node

    def matched_rules(self) -> List[ParseTreeNode]:
        """Rule nodes with a positive line number, in creation order."""
        return [node for node in self.nodes if node.is_matched_rule]

    def render(self, show_files: bool = False) -> str:
        lines: List[str] = []

        def walk(node: ParseTreeNode, depth: int):
            lines.append("  " * depth + node.label(show_files))
            for child in node.children:
                walk(child, depth + 1)

        walk(self.root, 0)
        return "\n".join(lines) + "\n"

    def __str__(self) -> str:
        return self.render()
