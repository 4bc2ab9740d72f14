"""Environment-driven configuration for the ID3 experiment."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from id3kit.logging import LogLevel


class ID3Settings(BaseSettings):
    """Settings for building, pruning and evaluating an ID3 tree.

    Values are read from `ID3KIT_*` environment variables or a `.env` file and
    can be overridden by explicit keyword arguments.

    Attributes:
        prune_factor (float): Fraction of the tree's nodes targeted for
            conversion to leaves in one pruning pass.
        min_improvement (float): Validation accuracy gain over the unpruned
            tree that ends the pruning search early.
        max_iterations (int): Hard cap on pruning attempts.
        random_state (int | None): Seed for the pruning random source.
            `None` means non-deterministic.
        log_level (LogLevel): Minimum level used by the CLI when enabling logging.

    Examples:
        >>> ID3Settings(prune_factor=0.2).prune_factor  # doctest: +SKIP
        0.2
    """

    model_config = SettingsConfigDict(
        env_prefix="ID3KIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    prune_factor: float = Field(default=0.1, ge=0.0, le=1.0, description="Fraction of nodes to prune per pass.")
    min_improvement: float = Field(
        default=0.02,
        ge=0.0,
        description="Validation accuracy gain that ends the pruning search early.",
    )
    max_iterations: int = Field(default=10_000, ge=1, description="Hard cap on pruning attempts.")
    random_state: int | None = Field(default=None, description="Seed for the pruning random source.")
    log_level: LogLevel = Field(default="INFO", description="Minimum level for CLI logging.")
