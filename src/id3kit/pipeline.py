"""End-to-end ID3 experiment: build on the training split, prune against validation, report on all three."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from loguru import logger
from pydantic import BaseModel, Field

from id3kit.dataset import Dataset, load_dataset
from id3kit.decision_tree.builder import build_tree
from id3kit.decision_tree.evaluation import count_nodes, evaluate_splits
from id3kit.decision_tree.models import DecisionNode, LeafNode, NodeCount, PruneSearchResult, TreeNode
from id3kit.decision_tree.pruning import search_pruned_tree
from id3kit.settings import ID3Settings

SPLIT_NAMES: tuple[str, str, str] = ("training", "validation", "testing")


class SplitSummary(BaseModel):
    """Size of one data split and the tree's accuracy on it.

    Attributes:
        name (str): "training", "validation" or "testing".
        instance_count (int): Number of instances in the split.
        attribute_count (int): Number of attribute columns in the split.
        accuracy (float): Fraction of instances classified correctly.
    """

    name: str = Field(description="Split name.")
    instance_count: int = Field(ge=1, description="Number of instances.")
    attribute_count: int = Field(ge=1, description="Number of attribute columns.")
    accuracy: float = Field(ge=0.0, le=1.0, description="Fraction classified correctly.")


class TreeReport(BaseModel):
    """A tree with its size and per-split accuracy.

    Attributes:
        tree (TreeNode | None): The evaluated tree.
        node_count (int): Nodes in the tree.
        leaf_count (int): Leaves in the tree.
        splits (list[SplitSummary]): Accuracy on training, validation and testing, in that order.
    """

    tree: LeafNode | DecisionNode | None = Field(description="The evaluated tree.")
    node_count: int = Field(ge=0, description="Nodes in the tree.")
    leaf_count: int = Field(ge=0, description="Leaves in the tree.")
    splits: list[SplitSummary] = Field(description="Per-split accuracy.")

    def accuracy_of(self, name: str) -> float:
        """Return the accuracy recorded for the named split.

        Args:
            name (str): Split name.

        Returns:
            float: The split's accuracy.

        Raises:
            KeyError: If no split has that name.
        """
        for split in self.splits:
            if split.name == name:
                return split.accuracy
        raise KeyError(name)


class ExperimentReport(BaseModel):
    """Both trees of an experiment with their per-split summaries and the search outcome.

    Attributes:
        pre_pruning (TreeReport): The tree as built from the training split.
        post_pruning (TreeReport): The tree selected by the pruning search.
        search (PruneSearchResult): Outcome of the pruning search.
    """

    pre_pruning: TreeReport
    post_pruning: TreeReport
    search: PruneSearchResult


def evaluate_tree(tree: TreeNode | None, splits: dict[str, Dataset], *, size: NodeCount | None = None) -> TreeReport:
    """Measure a tree on every split.

    Args:
        tree (TreeNode | None): Tree to evaluate.
        splits (dict[str, Dataset]): Split name mapped to its data; evaluated in mapping order.
        size (NodeCount | None): Known node and leaf counts. Counted from the
            tree when `None`.

    Returns:
        TreeReport: The tree, its size and per-split accuracy.
    """
    size = size if size is not None else count_nodes(tree)
    accuracies = evaluate_splits(tree, splits)
    summaries = [
        SplitSummary(
            name=name,
            instance_count=data.instance_count,
            attribute_count=data.attribute_count,
            accuracy=accuracies[name],
        )
        for name, data in splits.items()
    ]
    return TreeReport(tree=tree, node_count=size.total, leaf_count=size.leaves, splits=summaries)


def run_experiment(
    train: Dataset,
    validation: Dataset,
    test: Dataset,
    *,
    settings: ID3Settings | None = None,
    rng: np.random.Generator | None = None,
) -> ExperimentReport:
    """Build, evaluate, prune and re-evaluate an ID3 tree.

    Args:
        train (Dataset): Split the tree is built from.
        validation (Dataset): Split the pruning search scores candidates on.
        test (Dataset): Held-out split, only reported.
        settings (ID3Settings | None): Pruning parameters. Read from the
            environment when `None`.
        rng (np.random.Generator | None): Random source for pruning. Seeded
            from `settings.random_state` when `None`.

    Returns:
        ExperimentReport: Pre- and post-pruning reports and the search outcome.
    """
    settings = settings if settings is not None else ID3Settings()
    splits = dict(zip(SPLIT_NAMES, (train, validation, test), strict=True))

    built = build_tree(train.attributes, train.labels)
    pre_pruning = evaluate_tree(built.root, splits, size=NodeCount(total=built.node_count, leaves=built.leaf_count))
    logger.info(
        "Pre-pruning accuracy",
        training=round(pre_pruning.accuracy_of("training"), 6),
        validation=round(pre_pruning.accuracy_of("validation"), 6),
        testing=round(pre_pruning.accuracy_of("testing"), 6),
    )

    search = search_pruned_tree(
        built.root,
        total_node_count=built.node_count,
        validation=validation,
        prune_factor=settings.prune_factor,
        min_improvement=settings.min_improvement,
        max_iterations=settings.max_iterations,
        rng=rng,
        random_state=settings.random_state,
    )
    post_pruning = evaluate_tree(search.tree, splits)
    logger.info(
        "Post-pruning accuracy",
        outcome=search.outcome.value,
        training=round(post_pruning.accuracy_of("training"), 6),
        validation=round(post_pruning.accuracy_of("validation"), 6),
        testing=round(post_pruning.accuracy_of("testing"), 6),
    )
    return ExperimentReport(pre_pruning=pre_pruning, post_pruning=post_pruning, search=search)


def run_experiment_from_files(
    train_path: str | Path,
    validation_path: str | Path,
    test_path: str | Path,
    *,
    settings: ID3Settings | None = None,
) -> ExperimentReport:
    """Load the three splits from CSV files and run the experiment.

    Args:
        train_path (str | Path): Training CSV.
        validation_path (str | Path): Validation CSV.
        test_path (str | Path): Test CSV.
        settings (ID3Settings | None): Pruning parameters.

    Returns:
        ExperimentReport: See `run_experiment`.
    """
    return run_experiment(
        load_dataset(train_path),
        load_dataset(validation_path),
        load_dataset(test_path),
        settings=settings,
    )
