"""Tree node types and result models for the ID3 decision tree."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import StrEnum
from typing import Literal, NamedTuple

from pydantic import BaseModel, Field, model_validator

from id3kit.decision_tree.entropy import class_label as majority_class_label

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type BinaryLabel = Literal["0", "1"]

type AttributeTable = Mapping[str, Sequence[str]]

# ---------------------------------------------------------------------------
# Public models -- Tree nodes
# ---------------------------------------------------------------------------


class LeafNode(BaseModel):
    """A terminal node holding the decided class label.

    Attributes:
        kind (Literal["leaf"]): Discriminator field; always `"leaf"`.
        id (int): Identifier assigned in construction order, starting at 0.
        height (int): Depth from the root (root = 0).
        label_zero_count (int): Training instances with label "0" that reached the node.
        label_one_count (int): Training instances with label "1" that reached the node.
        class_label (BinaryLabel): Majority label, ties broken toward "0".

    Examples:
        >>> leaf = LeafNode.from_counts(node_id=3, height=2, label_zero_count=4, label_one_count=4)
        >>> leaf.class_label
        '0'
    """

    kind: Literal["leaf"] = Field(default="leaf", description='Discriminator field. Always "leaf".')
    id: int = Field(ge=0, description="Identifier assigned in construction order.")
    height: int = Field(ge=0, description="Depth from the root; the root has height 0.")
    label_zero_count: int = Field(ge=0, description="Training instances with label 0 at this node.")
    label_one_count: int = Field(ge=0, description="Training instances with label 1 at this node.")
    class_label: BinaryLabel = Field(description="Majority label; ties go to 0.")

    @classmethod
    def from_counts(
        cls,
        *,
        node_id: int,
        height: int,
        label_zero_count: int,
        label_one_count: int,
    ) -> LeafNode:
        """Create a leaf whose class label follows the majority rule.

        Args:
            node_id (int): Identifier of the new leaf.
            height (int): Depth of the new leaf.
            label_zero_count (int): Count of label "0" instances.
            label_one_count (int): Count of label "1" instances.

        Returns:
            LeafNode: The new leaf.
        """
        return cls(
            id=node_id,
            height=height,
            label_zero_count=label_zero_count,
            label_one_count=label_one_count,
            class_label=majority_class_label(label_zero_count, label_one_count),
        )


class DecisionNode(BaseModel):
    """An internal node splitting on one binary attribute.

    Attributes:
        kind (Literal["decision"]): Discriminator field; always `"decision"`.
        id (int): Identifier assigned in construction order, starting at 0.
        height (int): Depth from the root (root = 0).
        attribute (str): Name of the attribute this node splits on.
        label_zero_count (int): Training instances with label "0" that reached
            the node; kept so the node can be turned into a leaf when pruned.
        label_one_count (int): Training instances with label "1" that reached the node.
        left (TreeNode | None): Subtree for attribute value "0". `None` only
            when no training instance had that value.
        right (TreeNode | None): Subtree for attribute value "1".
    """

    kind: Literal["decision"] = Field(default="decision", description='Discriminator field. Always "decision".')
    id: int = Field(ge=0, description="Identifier assigned in construction order.")
    height: int = Field(ge=0, description="Depth from the root; the root has height 0.")
    attribute: str = Field(min_length=1, description="Attribute this node splits on.")
    label_zero_count: int = Field(ge=0, description="Training instances with label 0 at this node.")
    label_one_count: int = Field(ge=0, description="Training instances with label 1 at this node.")
    left: LeafNode | DecisionNode | None = Field(default=None, description="Subtree for attribute value 0.")
    right: LeafNode | DecisionNode | None = Field(default=None, description="Subtree for attribute value 1.")

    def to_leaf(self) -> LeafNode:
        """Return the leaf this node becomes when pruned.

        The leaf keeps the node's id, height and label counts and takes the
        majority label of those counts.

        Returns:
            LeafNode: A new leaf replacing this node.
        """
        return LeafNode.from_counts(
            node_id=self.id,
            height=self.height,
            label_zero_count=self.label_zero_count,
            label_one_count=self.label_one_count,
        )


type TreeNode = LeafNode | DecisionNode

# ---------------------------------------------------------------------------
# Public models -- Results
# ---------------------------------------------------------------------------


class NodeCount(NamedTuple):
    """Size of a tree.

    Attributes:
        total (int): Number of nodes of either kind.
        leaves (int): Number of leaf nodes.
    """

    total: int
    leaves: int


class BuiltTree(BaseModel):
    """A freshly built tree together with the counters kept while building it.

    Attributes:
        root (TreeNode | None): Root of the tree, or `None` when the training
            data had no labels or no attributes.
        node_count (int): Nodes created; also one past the largest node id.
        leaf_count (int): Leaves created.
    """

    root: LeafNode | DecisionNode | None = Field(description="Root of the tree, or None for empty input.")
    node_count: int = Field(ge=0, description="Number of nodes created; ids range over [0, node_count).")
    leaf_count: int = Field(ge=0, description="Number of leaves created.")

    @model_validator(mode="after")
    def _validate_leaf_count_within_node_count(self) -> BuiltTree:
        """Validate that the leaf count does not exceed the node count.

        Returns:
            BuiltTree: The validated model instance.

        Raises:
            ValueError: If `leaf_count > node_count`.
        """
        if self.leaf_count > self.node_count:
            raise ValueError(f"leaf_count ({self.leaf_count}) cannot exceed node_count ({self.node_count})")
        return self


class PruneOutcome(StrEnum):
    """How a pruning search ended.

    Attributes:
        IMPROVED: A pruned tree beat the baseline by at least the required margin.
        IMPROVED_AT_CAP: The iteration cap was reached; the best pruned tree
            beats the baseline, but by less than the margin.
        EXHAUSTED: No pruned tree beat the baseline, or nothing could be pruned.
    """

    IMPROVED = "improved"
    IMPROVED_AT_CAP = "improved_at_cap"
    EXHAUSTED = "exhausted"


class PruneSearchResult(BaseModel):
    """Structured output of the pruning search.

    Attributes:
        outcome (PruneOutcome): Termination reason.
        tree (TreeNode | None): Selected pruned tree: the first tree meeting
            the margin, otherwise the best candidate seen.
        iterations (int): Pruning attempts made.
        baseline_accuracy (float): Validation accuracy of the unpruned tree.
        accuracy (float): Validation accuracy of `tree`.
    """

    outcome: PruneOutcome = Field(description="Termination reason of the search.")
    tree: LeafNode | DecisionNode | None = Field(description="Selected pruned tree.")
    iterations: int = Field(ge=0, description="Number of pruning attempts made.")
    baseline_accuracy: float = Field(ge=0.0, le=1.0, description="Validation accuracy before pruning.")
    accuracy: float = Field(ge=0.0, le=1.0, description="Validation accuracy of the selected tree.")

    @property
    def improvement(self) -> float:
        """Validation accuracy gained over the unpruned tree."""
        return self.accuracy - self.baseline_accuracy

