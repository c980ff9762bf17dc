"""Localization tree model — tagged Leaf/Node variant over JSON documents.

A translation file is a JSON object whose values are either nested objects
(``Node``) or translatable text (``Leaf``).  Only plain objects are recursed;
arrays, numbers, booleans and ``null`` are carried as opaque leaves.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union


@dataclass(frozen=True)
class Leaf:
    """A single translatable value.  Empty string means untranslated."""
    value: Any = ""

    @property
    def is_empty(self) -> bool:
        return self.value is None or self.value == ""


@dataclass
class Node:
    """An ordered group of named subtrees."""
    children: dict = field(default_factory=dict)  # str -> Leaf | Node

    def __len__(self) -> int:
        return len(self.children)

    def __contains__(self, key: str) -> bool:
        return key in self.children

    def get(self, key: str) -> Optional["Tree"]:
        return self.children.get(key)


Tree = Union[Leaf, Node]


def from_json(data: Any) -> Tree:
    """Convert decoded JSON into a tree (dicts become nodes, the rest leaves)."""
    if isinstance(data, dict):
        return Node({str(k): from_json(v) for k, v in data.items()})
    return Leaf(data)


def to_json(tree: Tree) -> Any:
    """Convert a tree back into plain JSON-serializable data."""
    if isinstance(tree, Node):
        return {k: to_json(v) for k, v in tree.children.items()}
    return tree.value


def empty_mirror(tree: Tree) -> Tree:
    """Return a tree with the same keys and nesting but every leaf blanked.

    Used to bootstrap a new language from the baseline and to rebuild a
    subtree whose type disagrees with the baseline during sync.
    """
    if isinstance(tree, Node):
        return Node({k: empty_mirror(v) for k, v in tree.children.items()})
    return Leaf("")


def leaf_count(tree: Tree) -> int:
    """Number of leaves in the tree (a bare leaf counts as one)."""
    if isinstance(tree, Node):
        return sum(leaf_count(v) for v in tree.children.values())
    return 1


def copy_tree(tree: Tree) -> Tree:
    """Copy every node; leaves are immutable and shared."""
    if isinstance(tree, Node):
        return Node({k: copy_tree(v) for k, v in tree.children.items()})
    return tree


def iter_leaves(tree: Tree, prefix: tuple = ()) -> Iterator[tuple]:
    """Yield ``(key_path, leaf)`` pairs depth-first in document order."""
    if isinstance(tree, Leaf):
        yield prefix, tree
        return
    for key, child in tree.children.items():
        yield from iter_leaves(child, prefix + (key,))


def get_tree(tree: Tree, keys: tuple) -> Optional[Tree]:
    """Return whatever sits at ``keys``, or None if the path is absent."""
    node = tree
    for key in keys:
        if not isinstance(node, Node) or key not in node.children:
            return None
        node = node.children[key]
    return node


def get_leaf(tree: Tree, keys: tuple) -> Optional[Leaf]:
    """Return the leaf at ``keys`` or None if the path does not end in a leaf."""
    node = get_tree(tree, keys)
    return node if isinstance(node, Leaf) else None


def set_leaf(node: Node, keys: tuple, value: Any):
    """Set the leaf at ``keys`` in place, creating intermediate nodes.

    A leaf standing where an intermediate node is needed gets replaced.
    """
    if not keys:
        raise ValueError("Cannot set a leaf at an empty key path")
    current = node
    for key in keys[:-1]:
        child = current.children.get(key)
        if not isinstance(child, Node):
            child = Node()
            current.children[key] = child
        current = child
    current.children[keys[-1]] = Leaf(value)


def join_path(keys: tuple) -> str:
    return ".".join(keys)


def split_path(text: str) -> tuple:
    return tuple(part for part in text.split(".") if part)
