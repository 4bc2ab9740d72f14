"""Shared fixtures: small binary datasets whose ID3 trees are known by hand."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from id3kit.dataset import Dataset

# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------

HEADER: list[str] = ["A", "B", "C", "Class"]

# Class = A and B; C is constant so leaves below B still have an attribute left.
# Tree: A=0 -> leaf 0 (id 1); A=1 -> B (id 2); B=0 -> leaf 0 (id 3); B=1 -> leaf 1 (id 4).
AND_ROWS: list[tuple[str, ...]] = [
    ("0", "0", "0", "0"),
    ("0", "1", "0", "0"),
    ("1", "0", "0", "0"),
    ("1", "1", "0", "1"),
]

# Class = A, flipped when B = 1. A has positive gain, B has none at the root,
# so both subtrees of A split on B again.
CROSSED_ROWS: list[tuple[str, ...]] = [
    ("0", "0", "0", "0"),
    ("0", "0", "0", "0"),
    ("0", "0", "0", "0"),
    ("0", "1", "0", "1"),
    ("1", "0", "0", "1"),
    ("1", "0", "0", "1"),
    ("1", "0", "0", "1"),
    ("1", "1", "0", "0"),
]

# Rows the AND tree gets half wrong, while any pruned variant gets all right.
PRUNING_FRIENDLY_ROWS: list[tuple[str, ...]] = [
    ("1", "1", "0", "0"),
    ("0", "0", "0", "0"),
]


@pytest.fixture
def and_dataset() -> Dataset:
    """Training split for the AND tree (5 nodes, 3 leaves)."""
    return Dataset.from_rows(HEADER, AND_ROWS)


@pytest.fixture
def crossed_dataset() -> Dataset:
    """Training split whose tree splits on B under both branches of A (7 nodes, 4 leaves)."""
    return Dataset.from_rows(HEADER, CROSSED_ROWS)


@pytest.fixture
def pruning_friendly_dataset() -> Dataset:
    """Validation split on which every pruned AND tree beats the unpruned one."""
    return Dataset.from_rows(HEADER, PRUNING_FRIENDLY_ROWS)


@pytest.fixture
def write_csv() -> Callable[[Path, list[str], list[tuple[str, ...]]], Path]:
    """Return a helper that writes a header and rows to a CSV file.

    Returns:
        Callable[[Path, list[str], list[tuple[str, ...]]], Path]: Writer
            returning the path it wrote.
    """

    def _write(path: Path, header: list[str], rows: list[tuple[str, ...]]) -> Path:
        lines = [",".join(header), *(",".join(row) for row in rows)]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def split_files(
    tmp_path: Path,
    write_csv: Callable[[Path, list[str], list[tuple[str, ...]]], Path],
) -> tuple[Path, Path, Path]:
    """Write the AND training, pruning-friendly validation and AND test splits to CSV.

    Returns:
        tuple[Path, Path, Path]: Training, validation and test file paths.
    """
    return (
        write_csv(tmp_path / "train.csv", HEADER, AND_ROWS),
        write_csv(tmp_path / "validation.csv", HEADER, PRUNING_FRIENDLY_ROWS),
        write_csv(tmp_path / "test.csv", HEADER, AND_ROWS),
    )
