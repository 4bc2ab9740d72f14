"""Batch gradient descent for one-variable linear regression.

The model is `h(x) = theta0 + theta1 * x`, where theta0 multiplies an implicit
bias feature fixed at 1. The cost is `(1 / 2n) * sum((h(x_i) - y_i) ** 2)`.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from loguru import logger
from pydantic import BaseModel, Field
from sklearn.metrics import mean_squared_error


class GradientStep(BaseModel):
    """Parameters and cost recorded after one gradient step.

    Attributes:
        iteration (int): 1-based step number.
        theta0 (float): Intercept after the step.
        theta1 (float): Slope after the step.
        error (float): Cost evaluated with the new parameters.
    """

    iteration: int = Field(ge=1, description="1-based step number.")
    theta0: float = Field(description="Intercept after the step.")
    theta1: float = Field(description="Slope after the step.")
    error: float = Field(ge=0.0, description="Cost evaluated with the new parameters.")


class GradientDescent:
    """Fit `theta0 + theta1 * x` to paired samples, one step at a time.

    The caller decides how many steps to take; there is no convergence check.

    Args:
        x (Sequence[float]): Input samples.
        y (Sequence[float]): Target samples, aligned with `x`.
        theta0 (float): Initial intercept.
        theta1 (float): Initial slope.
        step (float): Learning rate.

    Raises:
        ValueError: If `x` and `y` are empty, not 1-D, or of different lengths.

    Examples:
        >>> gd = GradientDescent([3, 1, 0, 4], [2, 2, 1, 3], theta0=0.0, theta1=1.0, step=0.1)
        >>> gd.error()
        0.5
        >>> gd.update()
        >>> round(gd.theta1, 10)
        0.85
    """

    def __init__(
        self,
        x: Sequence[float],
        y: Sequence[float],
        theta0: float,
        theta1: float,
        step: float,
    ) -> None:
        self._x = np.asarray(x, dtype=float)
        self._y = np.asarray(y, dtype=float)
        if self._x.ndim != 1 or self._y.ndim != 1:
            raise ValueError("x and y must be one-dimensional")
        if self._x.size == 0:
            raise ValueError("x and y must not be empty")
        if self._x.shape != self._y.shape:
            raise ValueError(f"x ({self._x.size}) and y ({self._y.size}) must have the same length")
        self._bias = np.ones_like(self._x)
        self._theta0 = float(theta0)
        self._theta1 = float(theta1)
        self.step = float(step)

    @property
    def theta0(self) -> float:
        """Current intercept."""
        return self._theta0

    @property
    def theta1(self) -> float:
        """Current slope."""
        return self._theta1

    def hypotheses(self) -> np.ndarray:
        """Return the model's prediction for every sample with the current parameters.

        Returns:
            np.ndarray: `theta0 + theta1 * x`.
        """
        return self._theta0 * self._bias + self._theta1 * self._x

    def error(self) -> float:
        """Return the halved mean squared error of the current parameters.

        Returns:
            float: `(1 / 2n) * sum((h - y) ** 2)`.
        """
        return float(mean_squared_error(self._y, self.hypotheses())) / 2

    def update(self) -> None:
        """Take one simultaneous gradient step on both parameters.

        Both partial derivatives are computed from the same hypotheses, taken
        before either parameter changes.
        """
        residuals = self.hypotheses() - self._y
        gradient0 = float(np.mean(residuals * self._bias))
        gradient1 = float(np.mean(residuals * self._x))
        self._theta0 -= self.step * gradient0
        self._theta1 -= self.step * gradient1

    def fit(self, iterations: int) -> list[GradientStep]:
        """Take `iterations` steps and record the parameters and cost after each.

        Args:
            iterations (int): Number of steps to take; zero or more.

        Returns:
            list[GradientStep]: One record per step, in order.

        Raises:
            ValueError: If `iterations` is negative.
        """
        if iterations < 0:
            raise ValueError(f"iterations must be non-negative, got {iterations}")
        history: list[GradientStep] = []
        for iteration in range(1, iterations + 1):
            self.update()
            record = GradientStep(iteration=iteration, theta0=self._theta0, theta1=self._theta1, error=self.error())
            logger.debug("Gradient step", iteration=iteration, theta0=record.theta0, theta1=record.theta1)
            history.append(record)
        return history
