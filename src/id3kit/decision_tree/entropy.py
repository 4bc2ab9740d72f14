"""Entropy and information gain for binary attributes and binary labels.

All functions treat the string "0" as class/value 0 and anything else as 1.
`log2(0)` is taken as 0, so empty and pure sequences have zero entropy.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from id3kit.decision_tree.models import BinaryLabel


def dataset_entropy(labels: Sequence[str]) -> float:
    """Compute the Shannon entropy, in bits, of a binary label sequence.

    Args:
        labels (Sequence[str]): Class labels of the instances under consideration.

    Returns:
        float: `-p0*log2(p0) - p1*log2(p1)`, in `[0.0, 1.0]`. Returns 0.0 for an
            empty or pure sequence.

    Examples:
        >>> dataset_entropy(["0", "1"])
        1.0
        >>> dataset_entropy(["1", "1", "1"])
        0.0
    """
    is_zero = _zero_mask(labels)
    return _mask_entropy(is_zero)


def split_entropy(attribute_values: Sequence[str], labels: Sequence[str]) -> float:
    """Compute the label entropy remaining after splitting on one binary attribute.

    The result is `P(a=0) * H(labels | a=0) + P(a=1) * H(labels | a=1)`. A
    branch that receives no instances has weight 0 and contributes nothing.

    Args:
        attribute_values (Sequence[str]): The attribute's value for every instance.
        labels (Sequence[str]): Class labels aligned with `attribute_values`.

    Returns:
        float: The weighted conditional entropy. Returns 0.0 when
            `attribute_values` is empty.

    Raises:
        ValueError: If the two sequences have different lengths.
    """
    if len(attribute_values) != len(labels):
        raise ValueError(
            f"attribute_values ({len(attribute_values)}) and labels ({len(labels)}) must have the same length"
        )
    total = len(attribute_values)
    if total == 0:
        return 0.0

    value_is_zero = _zero_mask(attribute_values)
    label_is_zero = _zero_mask(labels)

    result = 0.0
    for branch in (value_is_zero, ~value_is_zero):
        branch_size = int(branch.sum())
        if branch_size == 0:
            continue
        result += (branch_size / total) * _mask_entropy(label_is_zero[branch])
    return result


def information_gain(parent_entropy: float, attribute_values: Sequence[str], labels: Sequence[str]) -> float:
    """Compute the entropy reduction achieved by splitting on an attribute.

    Args:
        parent_entropy (float): Entropy of `labels`, usually from `dataset_entropy`.
        attribute_values (Sequence[str]): The attribute's value for every instance.
        labels (Sequence[str]): Class labels aligned with `attribute_values`.

    Returns:
        float: `parent_entropy - split_entropy(attribute_values, labels)`.
    """
    return parent_entropy - split_entropy(attribute_values, labels)


def count_labels(labels: Sequence[str]) -> tuple[int, int]:
    """Count label "0" and label "1" instances.

    Args:
        labels (Sequence[str]): Class labels.

    Returns:
        tuple[int, int]: `(zero_count, one_count)`.
    """
    zero_count = int(_zero_mask(labels).sum())
    return zero_count, len(labels) - zero_count


def class_label(label_zero_count: int, label_one_count: int) -> BinaryLabel:
    """Return the majority class label, breaking ties toward "0".

    Args:
        label_zero_count (int): Count of label "0" instances.
        label_one_count (int): Count of label "1" instances.

    Returns:
        BinaryLabel: "0" when `label_zero_count >= label_one_count`, else "1".

    Examples:
        >>> class_label(2, 2)
        '0'
        >>> class_label(1, 2)
        '1'
    """
    return "0" if label_zero_count >= label_one_count else "1"


def _zero_mask(values: Sequence[str]) -> np.ndarray:
    """Return a boolean array that is True where the value is the string "0".

    Args:
        values (Sequence[str]): Binary values as strings.

    Returns:
        np.ndarray: 1-D boolean array with one entry per value.
    """
    return np.fromiter((value == "0" for value in values), dtype=bool, count=len(values))


def _mask_entropy(is_zero: np.ndarray) -> float:
    """Compute the binary entropy of a boolean class mask.

    Args:
        is_zero (np.ndarray): True for class 0, False for class 1.

    Returns:
        float: Entropy in bits; 0.0 for an empty mask.
    """
    total = is_zero.size
    if total == 0:
        return 0.0
    zero_count = int(is_zero.sum())
    probabilities = np.array([zero_count, total - zero_count], dtype=float) / total
    nonzero = probabilities[probabilities > 0.0]
    return float(-(nonzero * np.log2(nonzero)).sum()) + 0.0
