"""id3kit: ID3 decision trees with random post-pruning, and gradient descent for linear regression."""

from loguru import logger

from id3kit.dataset import Dataset, load_dataset
from id3kit.gradient_descent import GradientDescent
from id3kit.logging import PACKAGE_NAME, enable_logging
from id3kit.pipeline import ExperimentReport, run_experiment
from id3kit.settings import ID3Settings

logger.disable(PACKAGE_NAME)  # noqa: RUF067 - Disable logging for the id3kit module by default

__all__ = [
    "Dataset",
    "ExperimentReport",
    "GradientDescent",
    "ID3Settings",
    "enable_logging",
    "load_dataset",
    "run_experiment",
]
