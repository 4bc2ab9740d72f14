"""Random post-pruning of ID3 trees and the search for a pruned tree that generalizes better.

A pruning pass works on a deep copy of the tree: it draws node ids uniformly
at random and turns each drawn decision node into a leaf labelled with the
majority class of the training instances that reached it. The search repeats
whole passes against the same original tree until the validation accuracy
improves by a margin or an iteration cap is hit.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Final

import numpy as np
from loguru import logger

from id3kit.dataset import Dataset
from id3kit.decision_tree.evaluation import accuracy
from id3kit.decision_tree.models import DecisionNode, PruneOutcome, PruneSearchResult, TreeNode
from id3kit.exceptions import InvalidPruneFactorError
from id3kit.logging import SEARCH_LEVEL

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

DEFAULT_MIN_IMPROVEMENT: Final[float] = 0.02
DEFAULT_MAX_ITERATIONS: Final[int] = 10_000
_PROGRESS_LOG_INTERVAL: Final[int] = 1_000

# ---------------------------------------------------------------------------
# Public interface -- Tree traversal
# ---------------------------------------------------------------------------


def copy_tree(root: TreeNode | None) -> TreeNode | None:
    """Return an independent deep copy of a tree.

    Args:
        root (TreeNode | None): Root of the tree to copy.

    Returns:
        TreeNode | None: A copy sharing no node with the original, or `None`.
    """
    if root is None:
        return None
    return root.model_copy(deep=True)


def find_node(root: TreeNode | None, node_id: int) -> TreeNode | None:
    """Locate a node by id with a breadth-first search.

    Args:
        root (TreeNode | None): Root of the tree to search.
        node_id (int): Identifier to look for.

    Returns:
        TreeNode | None: The node carrying `node_id`, or `None` when it is not
            reachable from `root`.
    """
    if root is None:
        return None
    queue: deque[TreeNode] = deque([root])
    while queue:
        node = queue.popleft()
        if node.id == node_id:
            return node
        if isinstance(node, DecisionNode):
            queue.extend(child for child in (node.left, node.right) if child is not None)
    return None


def decision_node_ids(root: TreeNode | None) -> set[int]:
    """Collect the ids of every decision node reachable from `root`.

    Args:
        root (TreeNode | None): Root of the tree.

    Returns:
        set[int]: Ids of all reachable decision nodes.
    """
    ids: set[int] = set()
    if root is None:
        return ids
    queue: deque[TreeNode] = deque([root])
    while queue:
        node = queue.popleft()
        if isinstance(node, DecisionNode):
            ids.add(node.id)
            queue.extend(child for child in (node.left, node.right) if child is not None)
    return ids


# ---------------------------------------------------------------------------
# Public interface -- Pruning
# ---------------------------------------------------------------------------


def prune_count(prune_factor: float, total_node_count: int) -> int:
    """Return how many nodes one pruning pass targets.

    Args:
        prune_factor (float): Fraction of nodes to prune, in `[0.0, 1.0]`.
        total_node_count (int): Nodes created when the tree was built.

    Returns:
        int: `floor(prune_factor * total_node_count)`.

    Raises:
        InvalidPruneFactorError: If `prune_factor` is outside `[0.0, 1.0]`.
    """
    if not 0.0 <= prune_factor <= 1.0:
        raise InvalidPruneFactorError(prune_factor)
    return math.floor(prune_factor * total_node_count)


def prune_tree(
    root: TreeNode | None,
    prune_factor: float,
    total_node_count: int,
    *,
    rng: np.random.Generator,
) -> TreeNode | None:
    """Prune a copy of a tree by turning randomly drawn decision nodes into leaves.

    Ids are drawn uniformly from `[0, total_node_count)`. A draw is rejected
    and repeated when the id was already used in this pass, is no longer
    reachable in the copy, or belongs to a leaf. The pass stops early once no
    reachable, unused decision node is left.

    Args:
        root (TreeNode | None): Tree to prune; never modified.
        prune_factor (float): Fraction of `total_node_count` to prune, in `[0.0, 1.0]`.
        total_node_count (int): Nodes created when the tree was built.
        rng (np.random.Generator): Source of the random draws.

    Returns:
        TreeNode | None: The pruned copy. Its root is a leaf when the original
            root was drawn.

    Raises:
        InvalidPruneFactorError: If `prune_factor` is outside `[0.0, 1.0]`.
    """
    target = prune_count(prune_factor, total_node_count)
    pruned_root = copy_tree(root)
    candidates = {i for i in decision_node_ids(pruned_root) if i < total_node_count}

    for pruned in range(target):
        if not candidates:
            logger.debug("No decision node left to prune", pruned=pruned, target=target)
            break

        node_id = int(rng.integers(0, total_node_count))
        while node_id not in candidates:
            node_id = int(rng.integers(0, total_node_count))

        pruned_root, removed = _replace_with_leaf(pruned_root, node_id)
        candidates -= decision_node_ids(removed)

    return pruned_root


def search_pruned_tree(
    root: TreeNode | None,
    *,
    total_node_count: int,
    validation: Dataset,
    prune_factor: float,
    min_improvement: float = DEFAULT_MIN_IMPROVEMENT,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    rng: np.random.Generator | None = None,
    random_state: int | None = None,
) -> PruneSearchResult:
    """Search for a pruned tree whose validation accuracy beats the original.

    Every iteration prunes the same original tree afresh. The search stops as
    soon as a pruned tree gains at least `min_improvement` validation accuracy
    (`IMPROVED`). After `max_iterations` attempts the best candidate seen is
    returned: `IMPROVED_AT_CAP` when it still beats the baseline, `EXHAUSTED`
    otherwise. An exhausted search never returns a tree worse than the
    original; a copy of the original stands in when every candidate scored
    below the baseline. When a pass cannot prune anything the search returns
    `EXHAUSTED` immediately with a copy of the original.

    Args:
        root (TreeNode | None): Tree built from the training data.
        total_node_count (int): Nodes created when the tree was built.
        validation (Dataset): Split used to score candidates; must not be empty.
        prune_factor (float): Fraction of nodes pruned per pass, in `[0.0, 1.0]`.
        min_improvement (float): Accuracy gain that ends the search early.
        max_iterations (int): Maximum number of pruning passes; at least 1.
        rng (np.random.Generator | None): Random source. When `None`, a new
            generator seeded with `random_state` is used.
        random_state (int | None): Seed used only when `rng` is `None`.

    Returns:
        PruneSearchResult: The selected tree, its accuracy and the reason the
            search ended.

    Raises:
        InvalidPruneFactorError: If `prune_factor` is outside `[0.0, 1.0]`.
        ValueError: If `max_iterations` is below 1 or `validation` is empty.
    """
    if max_iterations < 1:
        raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
    if rng is None:
        rng = np.random.default_rng(random_state)

    def score(tree: TreeNode | None) -> float:
        return accuracy(validation.instances, tree, validation.attribute_positions, validation.instance_count)

    baseline = score(root)

    if prune_count(prune_factor, total_node_count) == 0 or not decision_node_ids(root):
        logger.log(SEARCH_LEVEL, "Nothing to prune", prune_factor=prune_factor, nodes=total_node_count)
        return PruneSearchResult(
            outcome=PruneOutcome.EXHAUSTED,
            tree=copy_tree(root),
            iterations=0,
            baseline_accuracy=baseline,
            accuracy=baseline,
        )

    best_tree: TreeNode | None = None
    best_accuracy = -1.0
    iteration = 0
    while iteration < max_iterations:
        iteration += 1
        candidate = prune_tree(root, prune_factor, total_node_count, rng=rng)
        candidate_accuracy = score(candidate)
        if candidate_accuracy > best_accuracy:
            best_tree, best_accuracy = candidate, candidate_accuracy

        if candidate_accuracy - baseline >= min_improvement:
            logger.log(
                SEARCH_LEVEL,
                "Pruned tree found",
                iterations=iteration,
                baseline=round(baseline, 6),
                accuracy=round(candidate_accuracy, 6),
            )
            return PruneSearchResult(
                outcome=PruneOutcome.IMPROVED,
                tree=candidate,
                iterations=iteration,
                baseline_accuracy=baseline,
                accuracy=candidate_accuracy,
            )

        if iteration % _PROGRESS_LOG_INTERVAL == 0:
            logger.log(SEARCH_LEVEL, "Pruning search progress", iterations=iteration, best=round(best_accuracy, 6))

    outcome = PruneOutcome.IMPROVED_AT_CAP if best_accuracy > baseline else PruneOutcome.EXHAUSTED
    if outcome is PruneOutcome.EXHAUSTED:
        logger.warning("Pruning search found no improvement", iterations=iteration, baseline=round(baseline, 6))
        if best_accuracy < baseline:
            best_tree, best_accuracy = copy_tree(root), baseline
    else:
        logger.log(
            SEARCH_LEVEL,
            "Pruning search reached its cap",
            iterations=iteration,
            baseline=round(baseline, 6),
            accuracy=round(best_accuracy, 6),
        )
    return PruneSearchResult(
        outcome=outcome,
        tree=best_tree,
        iterations=iteration,
        baseline_accuracy=baseline,
        accuracy=best_accuracy,
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _replace_with_leaf(root: TreeNode | None, node_id: int) -> tuple[TreeNode | None, DecisionNode | None]:
    """Replace the decision node carrying `node_id` with its leaf form, in place.

    Args:
        root (TreeNode | None): Root of the (copied) tree to modify.
        node_id (int): Id of a reachable decision node.

    Returns:
        tuple[TreeNode | None, DecisionNode | None]: The tree root, which is the
            new leaf when `node_id` was the root's id, and the detached
            decision node (`None` when `node_id` was not found).
    """
    if isinstance(root, DecisionNode) and root.id == node_id:
        return root.to_leaf(), root

    queue: deque[TreeNode] = deque([root] if root is not None else [])
    while queue:
        node = queue.popleft()
        if not isinstance(node, DecisionNode):
            continue
        for side in ("left", "right"):
            child = getattr(node, side)
            if isinstance(child, DecisionNode) and child.id == node_id:
                setattr(node, side, child.to_leaf())
                logger.trace("Node pruned", node_id=node_id, height=child.height)
                return root, child
            if child is not None:
                queue.append(child)
    return root, None
