"""Custom exceptions for id3kit.

The algorithmic core works on pre-validated, in-memory data and reports its
degenerate cases through return values (empty subtrees, failed predictions,
structured pruning outcomes). Exceptions are reserved for the outer surfaces:

- DatasetFormatError: Raised when a CSV file does not match the binary
  attribute table layout.
- InvalidPruneFactorError: Raised when a pruning factor lies outside [0, 1].
"""

from __future__ import annotations


class DatasetFormatError(ValueError):
    """Raised when a dataset file cannot be turned into a binary attribute table.

    Attributes:
        path (str): Path of the offending file.
        reason (str): Human-readable explanation of the problem.

    Examples:
        >>> err = DatasetFormatError(path="train.csv", reason="no data rows")
        >>> str(err)
        'Invalid dataset train.csv: no data rows'
    """

    path: str
    reason: str

    def __init__(self, path: str, reason: str) -> None:
        """Initialize DatasetFormatError.

        Args:
            path (str): Path of the offending file.
            reason (str): Human-readable explanation of the problem.
        """
        super().__init__(f"Invalid dataset {path}: {reason}")
        self.path = path
        self.reason = reason


class InvalidPruneFactorError(ValueError):
    """Raised when a pruning factor is not a fraction in [0, 1].

    Attributes:
        prune_factor (float): The rejected value.

    Examples:
        >>> InvalidPruneFactorError(1.5).prune_factor
        1.5
    """

    prune_factor: float

    def __init__(self, prune_factor: float) -> None:
        """Initialize InvalidPruneFactorError.

        Args:
            prune_factor (float): The rejected value.
        """
        super().__init__(f"prune_factor must be between 0.0 and 1.0, got {prune_factor}")
        self.prune_factor = prune_factor

    def __repr__(self) -> str:
        """Return detailed representation for debugging.

        Returns:
            str: Representation including the rejected factor.
        """
        return f"{self.__class__.__name__}(prune_factor={self.prune_factor!r})"
