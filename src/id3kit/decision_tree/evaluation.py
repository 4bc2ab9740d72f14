"""Prediction, accuracy and size measurement for ID3 trees."""

from __future__ import annotations

from collections import deque
from collections.abc import Mapping, Sequence

from id3kit.dataset import Dataset
from id3kit.decision_tree.models import DecisionNode, LeafNode, NodeCount, TreeNode

# ---------------------------------------------------------------------------
# Public interface -- Prediction
# ---------------------------------------------------------------------------


def predict(
    instance: Sequence[str],
    node: TreeNode | None,
    attribute_positions: Mapping[int, str],
) -> str | None:
    """Walk the tree for one instance and return the predicted class label.

    At a decision node the instance's value in the split attribute's column
    selects the branch: "0" goes left, any other value goes right.

    Args:
        instance (Sequence[str]): Raw field values of the instance.
        node (TreeNode | None): Root of the (sub)tree to walk.
        attribute_positions (Mapping[int, str]): Column index mapped to attribute name.

    Returns:
        str | None: The predicted label, or `None` when the walk cannot finish
            (an attribute missing from `attribute_positions` or an empty subtree).

    Examples:
        >>> tree = DecisionNode(
        ...     id=0, height=0, attribute="A", label_zero_count=1, label_one_count=1,
        ...     left=LeafNode.from_counts(node_id=1, height=1, label_zero_count=1, label_one_count=0),
        ...     right=LeafNode.from_counts(node_id=2, height=1, label_zero_count=0, label_one_count=1),
        ... )
        >>> predict(("1", "1"), tree, {0: "A"})
        '1'
    """
    return _predict(instance, node, _name_to_position(attribute_positions))


def is_correct(
    instance: Sequence[str],
    node: TreeNode | None,
    attribute_positions: Mapping[int, str],
) -> bool:
    """Return whether the tree predicts the instance's true label (its last field).

    A walk that cannot finish counts as a wrong prediction.

    Args:
        instance (Sequence[str]): Raw field values ending in the true class label.
        node (TreeNode | None): Root of the tree.
        attribute_positions (Mapping[int, str]): Column index mapped to attribute name.

    Returns:
        bool: True when the prediction equals `instance[-1]`.
    """
    prediction = predict(instance, node, attribute_positions)
    return prediction is not None and prediction == instance[-1]


def accuracy(
    instances: Sequence[Sequence[str]],
    node: TreeNode | None,
    attribute_positions: Mapping[int, str],
    total_count: int,
) -> float:
    """Compute the fraction of instances the tree classifies correctly.

    Args:
        instances (Sequence[Sequence[str]]): Raw rows, each ending in the true class label.
        node (TreeNode | None): Root of the tree.
        attribute_positions (Mapping[int, str]): Column index mapped to attribute name.
        total_count (int): Denominator, normally `len(instances)`.

    Returns:
        float: `correct / total_count`.

    Raises:
        ValueError: If `total_count` is not positive.
    """
    if total_count <= 0:
        raise ValueError(f"total_count must be positive, got {total_count}")
    positions = _name_to_position(attribute_positions)
    correct = 0
    for instance in instances:
        prediction = _predict(instance, node, positions)
        if prediction is not None and prediction == instance[-1]:
            correct += 1
    return correct / total_count


def evaluate_splits(root: TreeNode | None, splits: Mapping[str, Dataset]) -> dict[str, float]:
    """Compute the tree's accuracy on several named datasets.

    Args:
        root (TreeNode | None): Root of the tree.
        splits (Mapping[str, Dataset]): Split name mapped to its data.

    Returns:
        dict[str, float]: Split name mapped to accuracy, in the order of `splits`.
    """
    return {
        name: accuracy(data.instances, root, data.attribute_positions, data.instance_count)
        for name, data in splits.items()
    }


# ---------------------------------------------------------------------------
# Public interface -- Tree size
# ---------------------------------------------------------------------------


def count_nodes(root: TreeNode | None) -> NodeCount:
    """Count all nodes and leaf nodes reachable from `root`.

    Args:
        root (TreeNode | None): Root of the tree.

    Returns:
        NodeCount: `(total, leaves)`; `(0, 0)` for an empty tree.
    """
    total = 0
    leaves = 0
    queue: deque[TreeNode] = deque([root] if root is not None else [])
    while queue:
        node = queue.popleft()
        total += 1
        if isinstance(node, LeafNode):
            leaves += 1
            continue
        queue.extend(child for child in (node.left, node.right) if child is not None)
    return NodeCount(total=total, leaves=leaves)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _name_to_position(attribute_positions: Mapping[int, str]) -> dict[str, int]:
    """Invert a position map; the first position listed for a name wins.

    Args:
        attribute_positions (Mapping[int, str]): Column index mapped to attribute name.

    Returns:
        dict[str, int]: Attribute name mapped to column index.
    """
    positions: dict[str, int] = {}
    for position, name in attribute_positions.items():
        positions.setdefault(name, position)
    return positions


def _predict(
    instance: Sequence[str],
    node: TreeNode | None,
    positions: Mapping[str, int],
) -> str | None:
    """Walk the tree using a name-to-column lookup.

    Args:
        instance (Sequence[str]): Raw field values of the instance.
        node (TreeNode | None): Current node.
        positions (Mapping[str, int]): Attribute name mapped to column index.

    Returns:
        str | None: The predicted label, or `None` when the walk cannot finish.
    """
    while isinstance(node, DecisionNode):
        position = positions.get(node.attribute)
        if position is None:
            return None
        node = node.left if instance[position] == "0" else node.right
    if node is None:
        return None
    return node.class_label
