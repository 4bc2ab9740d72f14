"""Decision tree sub-package: entropy, building, pruning, evaluation and rendering."""

from __future__ import annotations

from id3kit.decision_tree.builder import build_tree
from id3kit.decision_tree.entropy import class_label, count_labels, dataset_entropy, information_gain, split_entropy
from id3kit.decision_tree.evaluation import accuracy, count_nodes, evaluate_splits, is_correct, predict
from id3kit.decision_tree.models import (
    BinaryLabel,
    BuiltTree,
    DecisionNode,
    LeafNode,
    NodeCount,
    PruneOutcome,
    PruneSearchResult,
    TreeNode,
)
from id3kit.decision_tree.pruning import copy_tree, prune_tree, search_pruned_tree
from id3kit.decision_tree.rendering import render_tree

__all__ = [
    "BinaryLabel",
    "BuiltTree",
    "DecisionNode",
    "LeafNode",
    "NodeCount",
    "PruneOutcome",
    "PruneSearchResult",
    "TreeNode",
    "accuracy",
    "build_tree",
    "class_label",
    "copy_tree",
    "count_labels",
    "count_nodes",
    "dataset_entropy",
    "evaluate_splits",
    "information_gain",
    "is_correct",
    "predict",
    "prune_tree",
    "render_tree",
    "search_pruned_tree",
    "split_entropy",
]
