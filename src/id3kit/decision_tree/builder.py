"""Recursive ID3 tree construction on binary attributes."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from loguru import logger

from id3kit.decision_tree.entropy import count_labels, dataset_entropy, information_gain
from id3kit.decision_tree.models import AttributeTable, BuiltTree, DecisionNode, LeafNode, TreeNode

# ---------------------------------------------------------------------------
# Build state
# ---------------------------------------------------------------------------


@dataclass
class BuildContext:
    """Counters owned by a single `build_tree` call.

    Attributes:
        next_id (int): Identifier handed to the next node created.
        leaf_count (int): Leaves created so far.
    """

    next_id: int = 0
    leaf_count: int = 0

    def take_id(self) -> int:
        """Return the next node identifier and advance the counter.

        Returns:
            int: A fresh identifier.
        """
        node_id = self.next_id
        self.next_id += 1
        return node_id


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------


def build_tree(attributes: AttributeTable, labels: Sequence[str]) -> BuiltTree:
    """Build an ID3 decision tree from a binary attribute table.

    The input table is never modified. Split selection scans attributes in the
    table's iteration order and keeps the first attribute with the strictly
    greatest positive information gain.

    Args:
        attributes (AttributeTable): Attribute name mapped to its per-instance
            values ("0"/"1"), each aligned with `labels`.
        labels (Sequence[str]): Class label ("0"/"1") of every instance.

    Returns:
        BuiltTree: The root (or `None` for empty input) and the node and leaf
            counts.

    Raises:
        ValueError: If any attribute column length differs from `labels`.

    Examples:
        >>> built = build_tree({"A": ["0", "1"], "B": ["0", "0"]}, ["0", "1"])
        >>> built.root.attribute, built.node_count, built.leaf_count
        ('A', 3, 2)
    """
    misaligned = sorted(name for name, values in attributes.items() if len(values) != len(labels))
    if misaligned:
        raise ValueError(f"attribute columns not aligned with {len(labels)} labels: {misaligned}")

    context = BuildContext()
    table = {name: tuple(values) for name, values in attributes.items()}
    root = _build_node(table, tuple(labels), height=0, context=context)
    logger.info("Tree built", nodes=context.next_id, leaves=context.leaf_count, instances=len(labels))
    return BuiltTree(root=root, node_count=context.next_id, leaf_count=context.leaf_count)


def select_split_attribute(
    attributes: AttributeTable,
    labels: Sequence[str],
    parent_entropy: float,
) -> tuple[str | None, float]:
    """Pick the attribute with the strictly greatest information gain.

    The running maximum starts at 0.0, so an attribute whose gain is zero or
    negative is never chosen and the first attribute wins exact ties.

    Args:
        attributes (AttributeTable): Candidate attributes, scanned in iteration order.
        labels (Sequence[str]): Class labels aligned with every attribute column.
        parent_entropy (float): Entropy of `labels`.

    Returns:
        tuple[str | None, float]: The chosen attribute name (or `None` when no
            attribute has positive gain) and its gain (0.0 when none).
    """
    best_attribute: str | None = None
    best_gain = 0.0
    for name, values in attributes.items():
        gain = information_gain(parent_entropy, values, labels)
        if gain > best_gain:
            best_gain = gain
            best_attribute = name
    return best_attribute, best_gain


def partition_indices(values: Sequence[str]) -> tuple[list[int], list[int]]:
    """Split instance indices by attribute value.

    Args:
        values (Sequence[str]): The split attribute's value for every instance.

    Returns:
        tuple[list[int], list[int]]: Indices whose value is "0" (left) and
            indices with any other value (right).
    """
    left: list[int] = []
    right: list[int] = []
    for index, value in enumerate(values):
        (left if value == "0" else right).append(index)
    return left, right


def narrow_table(attributes: AttributeTable, drop: str, indices: Sequence[int]) -> dict[str, tuple[str, ...]]:
    """Return a new table without one attribute, restricted to the given instances.

    Args:
        attributes (AttributeTable): Source table; left untouched.
        drop (str): Attribute to leave out.
        indices (Sequence[int]): Instance indices to keep, in order.

    Returns:
        dict[str, tuple[str, ...]]: The narrowed table, same attribute order as the source.
    """
    return {name: tuple(values[i] for i in indices) for name, values in attributes.items() if name != drop}


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _build_node(
    attributes: dict[str, tuple[str, ...]],
    labels: tuple[str, ...],
    *,
    height: int,
    context: BuildContext,
) -> TreeNode | None:
    """Build the subtree for one partition of the training data.

    Args:
        attributes (dict[str, tuple[str, ...]]): Attributes still available on this path.
        labels (tuple[str, ...]): Class labels of the partition.
        height (int): Depth of the node being built.
        context (BuildContext): Counters shared by the whole build.

    Returns:
        TreeNode | None: The subtree root, or `None` for an empty partition or
            an exhausted attribute table.
    """
    if not labels or not attributes:
        return None

    parent_entropy = dataset_entropy(labels)
    label_zero_count, label_one_count = count_labels(labels)

    split_attribute: str | None = None
    gain = 0.0
    if parent_entropy != 0.0:
        split_attribute, gain = select_split_attribute(attributes, labels, parent_entropy)

    if split_attribute is None:
        context.leaf_count += 1
        return LeafNode.from_counts(
            node_id=context.take_id(),
            height=height,
            label_zero_count=label_zero_count,
            label_one_count=label_one_count,
        )

    node_id = context.take_id()
    logger.debug("Split selected", node_id=node_id, attribute=split_attribute, gain=round(gain, 6), height=height)

    left_indices, right_indices = partition_indices(attributes[split_attribute])
    left = _build_node(
        narrow_table(attributes, split_attribute, left_indices),
        tuple(labels[i] for i in left_indices),
        height=height + 1,
        context=context,
    )
    right = _build_node(
        narrow_table(attributes, split_attribute, right_indices),
        tuple(labels[i] for i in right_indices),
        height=height + 1,
        context=context,
    )
    return DecisionNode(
        id=node_id,
        height=height,
        attribute=split_attribute,
        label_zero_count=label_zero_count,
        label_one_count=label_one_count,
        left=left,
        right=right,
    )
