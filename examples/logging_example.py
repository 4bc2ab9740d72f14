"""Demonstrates how to enable and configure logging in id3kit.

id3kit logging is disabled by default. Users opt in by calling ``enable_logging()``,
which returns a ``LoggingHandle`` usable as a context manager or disabled
manually via ``handle.disable()``.

Key concepts shown here:

- ``level``: the custom ``SEARCH`` level (numeric value 25, between INFO and
  WARNING) shows only pruning-search results; ``"DEBUG"`` adds one line per
  split chosen by the tree builder.
- ``log_format``: ``"short"`` shows ``timestamp | level | function - message``;
  ``"full"`` adds the module and line number.
- Structured context: every record carries key/value fields (node counts,
  accuracies, iterations) after the message.
"""

import numpy as np

from id3kit import Dataset, ID3Settings, enable_logging, run_experiment
from id3kit.decision_tree import render_tree

HEADER = ["wesley", "honor", "barclay", "Class"]

train = Dataset.from_rows(
    HEADER,
    [
        ("0", "0", "1", "0"),
        ("0", "1", "1", "0"),
        ("1", "0", "0", "0"),
        ("1", "1", "0", "1"),
        ("1", "1", "1", "1"),
        ("0", "1", "0", "1"),
    ],
)
validation = Dataset.from_rows(
    HEADER,
    [
        ("1", "1", "0", "0"),
        ("0", "0", "0", "0"),
        ("1", "0", "1", "0"),
    ],
)

with enable_logging(level="DEBUG", log_format="full"):
    report = run_experiment(
        train,
        validation,
        validation,
        settings=ID3Settings(prune_factor=0.3, max_iterations=500),
        rng=np.random.default_rng(0),
    )

print(render_tree(report.post_pruning.tree))
print(f"Search outcome: {report.search.outcome} after {report.search.iterations} iterations")

# Logging automatically disabled here
