"""Loading binary attribute tables from CSV files.

A dataset file has a header row naming every attribute followed by the class
column, then one instance per line. Every attribute value and class label must
be the string "0" or "1".
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Final

import polars as pl
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, model_validator

from id3kit.exceptions import DatasetFormatError

BINARY_VALUES: Final[tuple[str, str]] = ("0", "1")


class Dataset(BaseModel):
    """One split of a binary classification problem, in the shapes the ID3 core consumes.

    Attributes:
        attributes (dict[str, tuple[str, ...]]): Attribute name mapped to its values, one
            per instance, in file column order.
        labels (tuple[str, ...]): Class label of every instance.
        attribute_positions (dict[int, str]): Column index mapped to attribute
            name; the class column is not included.
        instances (list[tuple[str, ...]]): Raw rows, each ending in the true
            class label.

    Examples:
        >>> ds = Dataset.from_rows(["A", "B", "Class"], [("0", "1", "1"), ("1", "1", "0")])
        >>> ds.attributes["A"]
        ('0', '1')
        >>> ds.labels
        ('1', '0')
    """

    model_config = ConfigDict(frozen=True)

    attributes: dict[str, tuple[str, ...]] = Field(description="Attribute name mapped to its per-instance values.")
    labels: tuple[str, ...] = Field(description="Class label of every instance.")
    attribute_positions: dict[int, str] = Field(description="Column index mapped to attribute name.")
    instances: list[tuple[str, ...]] = Field(description="Raw rows, each ending in the class label.")

    @model_validator(mode="after")
    def _validate_alignment(self) -> Dataset:
        """Validate that every attribute column and the instance list line up with the labels.

        Returns:
            Dataset: The validated model instance.

        Raises:
            ValueError: If any attribute column or the instance list has a
                length different from `labels`.
        """
        label_count = len(self.labels)
        misaligned = sorted(name for name, values in self.attributes.items() if len(values) != label_count)
        if misaligned:
            raise ValueError(f"attribute columns not aligned with {label_count} labels: {misaligned}")
        if len(self.instances) != label_count:
            raise ValueError(f"instances length ({len(self.instances)}) must equal labels length ({label_count})")
        return self

    @property
    def instance_count(self) -> int:
        """Number of instances in the split."""
        return len(self.labels)

    @property
    def attribute_count(self) -> int:
        """Number of attribute columns (the class column excluded)."""
        return len(self.attribute_positions)

    @classmethod
    def from_rows(
        cls,
        header: Sequence[str],
        rows: Sequence[Sequence[str]],
        *,
        source: str = "<memory>",
    ) -> Dataset:
        """Build a dataset from a header and string rows.

        Args:
            header (Sequence[str]): Attribute names followed by the class column name.
            rows (Sequence[Sequence[str]]): Instances, each with one value per header column.
            source (str): Name used in error messages.

        Returns:
            Dataset: The assembled dataset.

        Raises:
            DatasetFormatError: If the header has fewer than two columns or a
                blank or repeated name, there are no rows, a row's length
                differs from the header's, or any value is not "0"/"1".
        """
        _validate_header(header, source)
        if not rows:
            raise DatasetFormatError(source, "no data rows")
        ragged = [index for index, row in enumerate(rows) if len(row) != len(header)]
        if ragged:
            raise DatasetFormatError(source, f"rows {ragged} do not have {len(header)} fields")
        try:
            frame = pl.DataFrame(
                [list(row) for row in rows],
                schema=dict.fromkeys(header, pl.String),
                orient="row",
            )
        except pl.exceptions.PolarsError as exc:
            raise DatasetFormatError(source, str(exc)) from exc
        return _dataset_from_frame(frame, source)


def load_dataset(path: str | Path) -> Dataset:
    """Read a CSV file into a `Dataset`.

    Every field is read as a string. Blank lines are skipped.

    Args:
        path (str | Path): Location of the CSV file.

    Returns:
        Dataset: The loaded split.

    Raises:
        FileNotFoundError: If `path` does not exist.
        DatasetFormatError: If the file has no header, a blank or repeated
            column name, no data rows, fewer than two columns, a row whose
            field count differs from the header, or any non-binary value.
    """
    path = Path(path)
    lines = [line for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]
    if not lines:
        raise DatasetFormatError(str(path), "file is empty")

    # Header read as data so repeated names are not silently renamed
    try:
        raw = pl.read_csv("\n".join(lines).encode("utf-8"), has_header=False, infer_schema=False)
    except pl.exceptions.PolarsError as exc:
        raise DatasetFormatError(str(path), str(exc)) from exc

    header = raw.row(0)
    _validate_header(header, str(path))
    frame = raw.slice(1).rename(dict(zip(raw.columns, header, strict=True)))
    if frame.height == 0:
        raise DatasetFormatError(str(path), "no data rows")

    dataset = _dataset_from_frame(frame, str(path))
    logger.info(
        "Dataset loaded",
        path=str(path),
        instances=dataset.instance_count,
        attributes=dataset.attribute_count,
    )
    return dataset


def _validate_header(header: Sequence[str | None], source: str) -> None:
    """Check that a header names at least two distinct, non-blank columns.

    Args:
        header (Sequence[str | None]): Attribute names followed by the class column name.
        source (str): Name used in error messages.

    Raises:
        DatasetFormatError: If the header is too short, has a blank name, or
            repeats a name.
    """
    if len(header) < 2:
        raise DatasetFormatError(source, "header needs at least one attribute and a class column")
    if any(name is None or not name.strip() for name in header):
        raise DatasetFormatError(source, "header has a blank column name")
    repeated = sorted({name for name in header if header.count(name) > 1})
    if repeated:
        raise DatasetFormatError(source, f"repeated column names {repeated}")


def _dataset_from_frame(frame: pl.DataFrame, source: str) -> Dataset:
    """Convert an all-string frame (attributes then class column) into a `Dataset`.

    Args:
        frame (pl.DataFrame): Frame whose last column holds the class label.
        source (str): Name used in error messages.

    Returns:
        Dataset: The assembled dataset.

    Raises:
        DatasetFormatError: If any column holds a value other than "0" or "1".
    """
    non_binary = _non_binary_columns(frame)
    if non_binary:
        raise DatasetFormatError(source, f"non-binary values in columns {non_binary}")

    *attribute_names, class_column = frame.columns
    return Dataset(
        attributes={name: tuple(frame[name].to_list()) for name in attribute_names},
        labels=tuple(frame[class_column].to_list()),
        attribute_positions=dict(enumerate(attribute_names)),
        instances=frame.rows(),
    )


def _non_binary_columns(frame: pl.DataFrame) -> list[str]:
    """Return the columns holding a null or a value other than "0"/"1".

    Args:
        frame (pl.DataFrame): All-string frame to inspect.

    Returns:
        list[str]: Offending column names in frame order.
    """
    allowed = list(BINARY_VALUES)
    checks = frame.select([pl.col(name).is_in(allowed).fill_null(False).all() for name in frame.columns])
    return [name for name in frame.columns if not checks[name].item()]
