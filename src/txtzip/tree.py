from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass
class TreeNode:
    """A directory or file in the rendered tree.

    Attributes:
        name: the path segment; empty for the root.
        children: child nodes, directories first then files, each by name.
        is_file: True for leaves built from the last segment of a path.
    """

    name: str = ""
    children: list[TreeNode] = field(default_factory=list)
    is_file: bool = False

    def child(self, name: str, *, is_file: bool) -> TreeNode:
        """Return the child named ``name``, creating it on demand."""
        for node in self.children:
            if node.name == name and node.is_file == is_file:
                return node
        node = TreeNode(name=name, is_file=is_file)
        self.children.append(node)
        return node

    def sort(self) -> None:
        """Sort the subtree: directories before files, then case-sensitive by name."""
        self.children.sort(key=lambda n: (n.is_file, n.name))
        for node in self.children:
            node.sort()


def build_tree(rel_paths: Iterable[str]) -> TreeNode:
    """Build a tree from file paths relative to the source root.

    Args:
        rel_paths (Iterable[str]): relative file paths, POSIX or Windows separators

    Returns:
        TreeNode: the unnamed root node, sorted
    """
    root = TreeNode()
    for rp in rel_paths:
        parts = [p for p in rp.replace("\\", "/").split("/") if p]
        cur = root
        for i, part in enumerate(parts):
            cur = cur.child(part, is_file=i == len(parts) - 1)
    root.sort()
    return root


def build_tree_lines(root: TreeNode) -> list[str]:
    """Render a tree as box-drawing lines, one per node (root excluded).

    Args:
        root (TreeNode): the tree to render

    Returns:
        list[str]: lines such as ``├── src/`` and ``│   └── main.py``
    """
    lines: list[str] = []

    def walk(node: TreeNode, prefix: str) -> None:
        for idx, child in enumerate(node.children):
            last = idx == len(node.children) - 1
            branch = "└── " if last else "├── "
            lines.append(prefix + branch + child.name + ("" if child.is_file else "/"))
            if not child.is_file:
                walk(child, prefix + ("    " if last else "│   "))

    walk(root, "")
    return lines


def render_tree(root: TreeNode) -> str:
    """Render a tree as text, newline separated, without a trailing newline."""
    return "\n".join(build_tree_lines(root))
