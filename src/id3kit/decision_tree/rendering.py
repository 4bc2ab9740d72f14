"""Plain-text rendering of ID3 trees."""

from __future__ import annotations

from id3kit.decision_tree.models import DecisionNode, TreeNode

_INDENT = "| "


def render_tree(root: TreeNode | None) -> str:
    """Render a tree as indented text.

    Every decision node writes one line per non-empty branch, prefixed by one
    `"| "` per level of its height, followed by `"<attribute>=0:"` or
    `"<attribute>=1:"`. A leaf branch finishes that line with the class label;
    a decision branch continues on the next lines. A tree that is a single
    leaf renders as its label. An empty tree renders as an empty string.

    Args:
        root (TreeNode | None): Root of the tree.

    Returns:
        str: The rendering, newline-terminated unless empty.

    Examples:
        >>> from id3kit.decision_tree.models import LeafNode
        >>> tree = DecisionNode(
        ...     id=0, height=0, attribute="wesley", label_zero_count=2, label_one_count=1,
        ...     left=LeafNode.from_counts(node_id=1, height=1, label_zero_count=2, label_one_count=0),
        ...     right=LeafNode.from_counts(node_id=2, height=1, label_zero_count=0, label_one_count=1),
        ... )
        >>> print(render_tree(tree), end="")
        wesley=0:0
        wesley=1:1
    """
    if root is None:
        return ""
    if not isinstance(root, DecisionNode):
        return f"{root.class_label}\n"
    lines: list[str] = []
    _render_branches(root, lines)
    return "\n".join(lines) + "\n"


def _render_branches(node: DecisionNode, lines: list[str]) -> None:
    """Append the lines of both branches of `node`.

    Args:
        node (DecisionNode): The node whose branches are rendered.
        lines (list[str]): Output accumulator.
    """
    prefix = _INDENT * node.height
    for value, child in (("0", node.left), ("1", node.right)):
        if child is None:
            continue
        head = f"{prefix}{node.attribute}={value}:"
        if isinstance(child, DecisionNode):
            lines.append(head)
            _render_branches(child, lines)
        else:
            lines.append(f"{head}{child.class_label}")
