"""Tests for random post-pruning and the capped pruning search."""

from __future__ import annotations

from unittest import mock

import numpy as np
import pytest
from pytest_check import check

from id3kit.dataset import Dataset
from id3kit.decision_tree.builder import build_tree
from id3kit.decision_tree.models import BuiltTree, DecisionNode, LeafNode, PruneOutcome
from id3kit.decision_tree.pruning import (
    copy_tree,
    decision_node_ids,
    find_node,
    prune_count,
    prune_tree,
    search_pruned_tree,
)
from id3kit.exceptions import InvalidPruneFactorError


@pytest.fixture
def and_tree(and_dataset: Dataset) -> BuiltTree:
    """The AND tree: root A (id 0), leaf (1), B (2), leaves (3, 4)."""
    return build_tree(and_dataset.attributes, and_dataset.labels)


class TestTraversal:
    """Tests for `copy_tree`, `find_node` and `decision_node_ids`."""

    def test_copy_is_equal_but_shares_no_nodes(self, and_tree: BuiltTree) -> None:
        """A copy compares equal to the original without sharing any node object."""
        # Act
        copied = copy_tree(and_tree.root)

        # Assert
        with check:
            assert copied == and_tree.root
        with check:
            assert copied is not and_tree.root
        with check:
            assert copied.right is not and_tree.root.right

    def test_copy_of_empty_tree_is_none(self) -> None:
        """Copying no tree gives no tree."""
        assert copy_tree(None) is None

    def test_find_node_locates_by_id(self, and_tree: BuiltTree) -> None:
        """Every id in the tree can be found; unknown ids cannot."""
        # Act
        found = find_node(and_tree.root, 2)

        # Assert
        with check:
            assert isinstance(found, DecisionNode) and found.attribute == "B"
        with check:
            assert find_node(and_tree.root, 99) is None
        with check:
            assert find_node(None, 0) is None

    def test_decision_node_ids(self, and_tree: BuiltTree) -> None:
        """Only decision nodes are listed."""
        assert decision_node_ids(and_tree.root) == {0, 2}


class TestPruneCount:
    """Tests for `prune_count`."""

    @pytest.mark.parametrize(
        ("prune_factor", "total", "expected"),
        [(0.0, 10, 0), (0.1, 10, 1), (0.25, 10, 2), (0.2, 5, 1), (1.0, 7, 7)],
    )
    def test_floor_of_factor_times_total(self, prune_factor: float, total: int, expected: int) -> None:
        """The count is the floor of the product."""
        assert prune_count(prune_factor, total) == expected

    @pytest.mark.parametrize("prune_factor", [-0.1, 1.5])
    def test_out_of_range_factor_raises(self, prune_factor: float) -> None:
        """Factors outside [0, 1] are rejected."""
        with pytest.raises(InvalidPruneFactorError) as exc_info:
            prune_count(prune_factor, 10)

        # Assert
        assert exc_info.value.prune_factor == prune_factor


class TestPruneTree:
    """Tests for `prune_tree`."""

    def test_original_tree_is_left_unchanged(self, and_tree: BuiltTree) -> None:
        """Pruning works on a copy; the input keeps its nodes, children and labels."""
        # Arrange
        before = and_tree.root.model_dump()

        # Act
        for seed in range(10):
            prune_tree(and_tree.root, 0.4, and_tree.node_count, rng=np.random.default_rng(seed))

        # Assert
        assert and_tree.root.model_dump() == before

    def test_single_prune_converts_one_decision_node(self, and_tree: BuiltTree) -> None:
        """With a factor of 0.2 on five nodes exactly one decision node becomes a leaf."""
        # Act
        pruned = prune_tree(and_tree.root, 0.2, and_tree.node_count, rng=np.random.default_rng(0))

        # Assert - either the root (id 0) or the B node (id 2) was drawn
        if isinstance(pruned, LeafNode):
            with check:
                assert (pruned.id, pruned.label_zero_count, pruned.label_one_count) == (0, 3, 1)
        else:
            with check:
                assert decision_node_ids(pruned) == {0}
            with check:
                assert isinstance(pruned.right, LeafNode) and pruned.right.id == 2

    def test_pruned_leaf_keeps_id_and_takes_majority_label(self, and_tree: BuiltTree) -> None:
        """A full prune collapses the tree into its root's leaf form."""
        # Act
        pruned = prune_tree(and_tree.root, 1.0, and_tree.node_count, rng=np.random.default_rng(7))

        # Assert
        with check:
            assert isinstance(pruned, LeafNode)
        with check:
            assert pruned.id == 0
        with check:
            assert pruned.class_label == "0"
        with check:
            assert pruned.height == 0

    def test_zero_factor_returns_equal_copy(self, and_tree: BuiltTree) -> None:
        """Nothing is pruned with a factor of zero."""
        # Act
        pruned = prune_tree(and_tree.root, 0.0, and_tree.node_count, rng=np.random.default_rng(0))

        # Assert
        with check:
            assert pruned == and_tree.root
        with check:
            assert pruned is not and_tree.root

    def test_leaf_only_tree_terminates(self) -> None:
        """A tree with no decision node cannot be pruned and is returned as a copy."""
        # Arrange
        leaf = LeafNode.from_counts(node_id=0, height=0, label_zero_count=1, label_one_count=2)

        # Act
        pruned = prune_tree(leaf, 1.0, 1, rng=np.random.default_rng(0))

        # Assert
        assert pruned == leaf

    def test_pruned_subtree_leaves_the_draw(self, crossed_dataset: Dataset) -> None:
        """Once the root is drawn, no node below it is drawn again and the pass ends."""
        # Arrange
        built = build_tree(crossed_dataset.attributes, crossed_dataset.labels)
        rng = mock.MagicMock(spec=np.random.Generator)
        rng.integers.side_effect = [0, 1, 4]

        # Act
        pruned = prune_tree(built.root, 1.0, built.node_count, rng=rng)

        # Assert
        with check:
            assert isinstance(pruned, LeafNode) and pruned.id == 0
        with check:
            assert rng.integers.call_count == 1

    def test_same_seed_gives_same_result(self, crossed_dataset: Dataset) -> None:
        """An injected generator makes pruning reproducible."""
        # Arrange
        built = build_tree(crossed_dataset.attributes, crossed_dataset.labels)

        # Act
        first = prune_tree(built.root, 0.3, built.node_count, rng=np.random.default_rng(42))
        second = prune_tree(built.root, 0.3, built.node_count, rng=np.random.default_rng(42))

        # Assert
        assert first == second


class TestSearchPrunedTree:
    """Tests for `search_pruned_tree`."""

    def test_improvement_found_on_first_pass(self, and_tree: BuiltTree, pruning_friendly_dataset: Dataset) -> None:
        """Every pruned AND tree scores 1.0 on the friendly split, up from 0.5."""
        # Act
        result = search_pruned_tree(
            and_tree.root,
            total_node_count=and_tree.node_count,
            validation=pruning_friendly_dataset,
            prune_factor=0.2,
            random_state=0,
        )

        # Assert
        with check:
            assert result.outcome is PruneOutcome.IMPROVED
        with check:
            assert result.iterations == 1
        with check:
            assert result.baseline_accuracy == pytest.approx(0.5)
        with check:
            assert result.accuracy == pytest.approx(1.0)
        with check:
            assert result.improvement == pytest.approx(0.5)

    def test_improvement_below_margin_runs_to_cap(
        self,
        and_tree: BuiltTree,
        pruning_friendly_dataset: Dataset,
    ) -> None:
        """An improvement smaller than the margin is reported once the cap is hit."""
        # Act
        result = search_pruned_tree(
            and_tree.root,
            total_node_count=and_tree.node_count,
            validation=pruning_friendly_dataset,
            prune_factor=0.2,
            min_improvement=0.9,
            max_iterations=6,
            rng=np.random.default_rng(3),
        )

        # Assert
        with check:
            assert result.outcome is PruneOutcome.IMPROVED_AT_CAP
        with check:
            assert result.iterations == 6
        with check:
            assert result.accuracy == pytest.approx(1.0)

    def test_no_improvement_keeps_original_tree(self, and_tree: BuiltTree, and_dataset: Dataset) -> None:
        """A search whose candidates all score below the baseline falls back to the unpruned tree."""
        # Act
        result = search_pruned_tree(
            and_tree.root,
            total_node_count=and_tree.node_count,
            validation=and_dataset,
            prune_factor=0.2,
            max_iterations=5,
            rng=np.random.default_rng(1),
        )

        # Assert
        with check:
            assert result.outcome is PruneOutcome.EXHAUSTED
        with check:
            assert result.iterations == 5
        with check:
            assert result.baseline_accuracy == pytest.approx(1.0)
        with check:
            assert result.accuracy == result.baseline_accuracy
        with check:
            assert result.tree == and_tree.root
        with check:
            assert result.tree is not and_tree.root

    def test_nothing_to_prune_returns_immediately(self, and_tree: BuiltTree, and_dataset: Dataset) -> None:
        """A factor that prunes zero nodes ends the search before the first pass."""
        # Act
        result = search_pruned_tree(
            and_tree.root,
            total_node_count=and_tree.node_count,
            validation=and_dataset,
            prune_factor=0.1,
            random_state=0,
        )

        # Assert
        with check:
            assert result.outcome is PruneOutcome.EXHAUSTED
        with check:
            assert result.iterations == 0
        with check:
            assert result.tree == and_tree.root
        with check:
            assert result.tree is not and_tree.root

    def test_search_never_mutates_original(self, and_tree: BuiltTree, pruning_friendly_dataset: Dataset) -> None:
        """The tree handed to the search keeps its structure."""
        # Arrange
        before = and_tree.root.model_dump()

        # Act
        search_pruned_tree(
            and_tree.root,
            total_node_count=and_tree.node_count,
            validation=pruning_friendly_dataset,
            prune_factor=1.0,
            random_state=0,
        )

        # Assert
        assert and_tree.root.model_dump() == before

    def test_invalid_max_iterations_raises(self, and_tree: BuiltTree, and_dataset: Dataset) -> None:
        """At least one pass must be allowed."""
        with pytest.raises(ValueError, match="max_iterations"):
            search_pruned_tree(
                and_tree.root,
                total_node_count=and_tree.node_count,
                validation=and_dataset,
                prune_factor=0.2,
                max_iterations=0,
            )

    def test_invalid_prune_factor_raises(self, and_tree: BuiltTree, and_dataset: Dataset) -> None:
        """The factor is validated before any pruning happens."""
        with pytest.raises(InvalidPruneFactorError):
            search_pruned_tree(
                and_tree.root,
                total_node_count=and_tree.node_count,
                validation=and_dataset,
                prune_factor=2.0,
            )
