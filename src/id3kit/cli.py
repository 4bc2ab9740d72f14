"""Command-line interface.

Two subcommands:

- ``id3``: build an ID3 tree from a training CSV, prune it against a
  validation CSV, and report accuracy on training, validation and test CSVs.
- ``gradient-descent``: run a few gradient steps of one-variable linear
  regression and print the parameters and cost after each.

Run with: python -m id3kit <subcommand> --help
"""

from __future__ import annotations

import argparse
from collections.abc import Sequence

from loguru import logger
from pydantic import ValidationError

from id3kit.decision_tree.rendering import render_tree
from id3kit.exceptions import DatasetFormatError, InvalidPruneFactorError
from id3kit.gradient_descent import GradientDescent
from id3kit.logging import enable_logging
from id3kit.pipeline import ExperimentReport, TreeReport, run_experiment_from_files
from id3kit.settings import ID3Settings

_RULE = "-" * 69


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for both subcommands.

    Returns:
        argparse.ArgumentParser: The configured parser.
    """
    parser = argparse.ArgumentParser(prog="id3kit", description="ID3 decision trees and gradient descent.")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["TRACE", "DEBUG", "INFO", "SEARCH", "WARNING", "ERROR", "CRITICAL"],
        help="Minimum log level (default: ID3KIT_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    id3 = subparsers.add_parser("id3", help="Build, prune and evaluate an ID3 tree")
    id3.add_argument("train", help="Path to the training CSV")
    id3.add_argument("validation", help="Path to the validation CSV")
    id3.add_argument("test", help="Path to the test CSV")
    id3.add_argument("--prune-factor", type=float, default=None, help="Fraction of nodes pruned per pass")
    id3.add_argument("--min-improvement", type=float, default=None, help="Validation gain that ends the search")
    id3.add_argument("--max-iterations", type=int, default=None, help="Cap on pruning attempts")
    id3.add_argument("--seed", type=int, default=None, help="Seed for the pruning random source")

    gd = subparsers.add_parser("gradient-descent", help="Run gradient descent on paired samples")
    gd.add_argument("--x", type=float, nargs="+", default=[3.0, 1.0, 0.0, 4.0], help="Input samples")
    gd.add_argument("--y", type=float, nargs="+", default=[2.0, 2.0, 1.0, 3.0], help="Target samples")
    gd.add_argument("--theta0", type=float, default=0.0, help="Initial intercept")
    gd.add_argument("--theta1", type=float, default=1.0, help="Initial slope")
    gd.add_argument("--step", type=float, default=0.1, help="Learning rate")
    gd.add_argument("--iterations", type=int, default=5, help="Number of gradient steps")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command-line interface.

    Args:
        argv (Sequence[str] | None): Arguments without the program name.
            Defaults to `sys.argv[1:]`.

    Returns:
        int: Process exit status; 0 on success, 1 on invalid input.
    """
    args = build_parser().parse_args(argv)
    overrides = {
        key: value
        for key, value in {
            "prune_factor": getattr(args, "prune_factor", None),
            "min_improvement": getattr(args, "min_improvement", None),
            "max_iterations": getattr(args, "max_iterations", None),
            "random_state": getattr(args, "seed", None),
            "log_level": args.log_level,
        }.items()
        if value is not None
    }

    try:
        settings = ID3Settings(**overrides)
    except ValidationError as exc:
        print(f"Invalid settings: {exc}")
        return 1

    with enable_logging(level=settings.log_level):
        try:
            if args.command == "id3":
                report = run_experiment_from_files(args.train, args.validation, args.test, settings=settings)
                print(format_experiment_report(report))
            else:
                print(_run_gradient_descent(args))
        except (DatasetFormatError, InvalidPruneFactorError, FileNotFoundError, ValueError) as exc:
            logger.error("Run failed", error_type=type(exc).__name__, reason=str(exc))
            return 1
    return 0


def format_experiment_report(report: ExperimentReport) -> str:
    """Format an experiment report for the console.

    Args:
        report (ExperimentReport): The experiment outcome.

    Returns:
        str: The tree before pruning, the pre-pruning summary, the search
            outcome, the pruned tree and the post-pruning summary.
    """
    search = report.search
    sections = [
        render_tree(report.pre_pruning.tree),
        _format_tree_report("Pre-Pruned Accuracy", report.pre_pruning, suffix=" before pruning"),
        (
            f"After {search.iterations} loops ({search.outcome.value}), reach the pruned tree with "
            f"{search.improvement} accuracy improvement."
        ),
        render_tree(report.post_pruning.tree),
        _format_tree_report("Post-Pruned Accuracy", report.post_pruning, suffix=" after pruning"),
    ]
    return "\n".join(sections)


def _format_tree_report(title: str, report: TreeReport, *, suffix: str) -> str:
    """Format one tree summary block.

    Args:
        title (str): Block heading.
        report (TreeReport): Tree size and per-split accuracy.
        suffix (str): Appended to the validation and testing accuracy labels.

    Returns:
        str: The formatted block.
    """
    lines = [
        title,
        _RULE,
        f"Total number of nodes in the tree = {report.node_count}",
        f"Total number of leaf nodes in the tree = {report.leaf_count}",
    ]
    for split in report.splits:
        split_suffix = "" if split.name == "training" else suffix
        lines.extend([
            "",
            f"Number of {split.name} instances = {split.instance_count}",
            f"Number of {split.name} attributes = {split.attribute_count}",
            f"Accuracy of the model on the {split.name} data set{split_suffix} = {split.accuracy}",
        ])
    return "\n".join(lines) + "\n"


def _run_gradient_descent(args: argparse.Namespace) -> str:
    """Run the gradient-descent subcommand and format its trace.

    Args:
        args (argparse.Namespace): Parsed `gradient-descent` arguments.

    Returns:
        str: Initial parameters and cost, then one line per step.
    """
    solver = GradientDescent(args.x, args.y, theta0=args.theta0, theta1=args.theta1, step=args.step)
    lines = [f"initial error is: {solver.error()} initial theta0 is: {solver.theta0} initial theta1 is: {solver.theta1}"]
    lines.extend(
        f"error is: {record.error} theta0 is: {record.theta0} theta1 is: {record.theta1}"
        for record in solver.fit(args.iterations)
    )
    return "\n".join(lines)
