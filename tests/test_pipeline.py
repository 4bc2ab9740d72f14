"""Tests for the end-to-end build, prune and evaluate experiment."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from pytest_check import check

from id3kit.dataset import Dataset
from id3kit.decision_tree.models import PruneOutcome
from id3kit.exceptions import DatasetFormatError
from id3kit.pipeline import SPLIT_NAMES, evaluate_tree, run_experiment, run_experiment_from_files
from id3kit.settings import ID3Settings


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> ID3Settings:
    """Settings pruning one node of five per pass, seeded."""
    monkeypatch.chdir(tmp_path)
    return ID3Settings(prune_factor=0.2, random_state=0)


class TestRunExperiment:
    """Tests for `run_experiment`."""

    def test_pre_pruning_report(
        self,
        and_dataset: Dataset,
        pruning_friendly_dataset: Dataset,
        settings: ID3Settings,
    ) -> None:
        """The unpruned AND tree is perfect on training and half right on validation."""
        # Act
        report = run_experiment(and_dataset, pruning_friendly_dataset, and_dataset, settings=settings)

        # Assert
        pre = report.pre_pruning
        with check:
            assert (pre.node_count, pre.leaf_count) == (5, 3)
        with check:
            assert [split.name for split in pre.splits] == list(SPLIT_NAMES)
        with check:
            assert pre.accuracy_of("training") == pytest.approx(1.0)
        with check:
            assert pre.accuracy_of("validation") == pytest.approx(0.5)
        with check:
            assert pre.accuracy_of("testing") == pytest.approx(1.0)

    def test_post_pruning_report(
        self,
        and_dataset: Dataset,
        pruning_friendly_dataset: Dataset,
        settings: ID3Settings,
    ) -> None:
        """The pruned tree is smaller and perfect on validation."""
        # Act
        report = run_experiment(and_dataset, pruning_friendly_dataset, and_dataset, settings=settings)

        # Assert
        post = report.post_pruning
        with check:
            assert report.search.outcome is PruneOutcome.IMPROVED
        with check:
            assert post.tree == report.search.tree
        with check:
            assert post.node_count < report.pre_pruning.node_count
        with check:
            assert post.accuracy_of("validation") == pytest.approx(1.0)
        with check:
            assert post.accuracy_of("training") == pytest.approx(0.75)

    def test_fruitless_search_reports_unpruned_tree(self, and_dataset: Dataset, settings: ID3Settings) -> None:
        """When no pruned tree matches a perfect validation score, the built tree is reported after pruning."""
        # Arrange
        capped = settings.model_copy(update={"max_iterations": 5})

        # Act
        report = run_experiment(and_dataset, and_dataset, and_dataset, settings=capped)

        # Assert
        with check:
            assert report.search.outcome is PruneOutcome.EXHAUSTED
        with check:
            assert report.post_pruning.tree == report.pre_pruning.tree
        with check:
            assert (report.post_pruning.node_count, report.post_pruning.leaf_count) == (5, 3)
        with check:
            assert report.post_pruning.accuracy_of("validation") == pytest.approx(1.0)

    def test_injected_generator_is_used(
        self,
        and_dataset: Dataset,
        pruning_friendly_dataset: Dataset,
        settings: ID3Settings,
    ) -> None:
        """Two runs with equally seeded generators select the same tree."""
        # Act
        first = run_experiment(
            and_dataset, pruning_friendly_dataset, and_dataset, settings=settings, rng=np.random.default_rng(9)
        )
        second = run_experiment(
            and_dataset, pruning_friendly_dataset, and_dataset, settings=settings, rng=np.random.default_rng(9)
        )

        # Assert
        assert first.post_pruning.tree == second.post_pruning.tree

    def test_unknown_split_name_raises_key_error(self, and_dataset: Dataset) -> None:
        """Only recorded splits can be looked up."""
        # Arrange
        report = evaluate_tree(None, {"training": and_dataset})

        # Act & Assert
        with pytest.raises(KeyError):
            report.accuracy_of("holdout")


class TestRunExperimentFromFiles:
    """Tests for `run_experiment_from_files`."""

    def test_loads_three_files(self, split_files: tuple[Path, Path, Path], settings: ID3Settings) -> None:
        """CSV splits on disk give the same report as in-memory splits."""
        # Act
        report = run_experiment_from_files(*split_files, settings=settings)

        # Assert
        with check:
            assert report.pre_pruning.splits[1].instance_count == 2
        with check:
            assert report.pre_pruning.splits[0].attribute_count == 3
        with check:
            assert report.search.iterations >= 1

    def test_bad_file_propagates_format_error(
        self,
        tmp_path: Path,
        split_files: tuple[Path, Path, Path],
        settings: ID3Settings,
    ) -> None:
        """Loading errors reach the caller unchanged."""
        # Arrange
        train, _, test = split_files
        broken = tmp_path / "broken.csv"
        broken.write_text("A,B,C,Class\n", encoding="utf-8")

        # Act & Assert
        with pytest.raises(DatasetFormatError, match="no data rows"):
            run_experiment_from_files(train, broken, test, settings=settings)
