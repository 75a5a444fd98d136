"""Timing and comparison metrics for matrix operations.

This module provides a ``Timer`` for measuring operation runtime, a
``max_abs_difference`` helper for reporting how far two matrices are apart,
and ``OperationMetrics`` for collecting a run report.
"""

from __future__ import annotations

import logging
import time
from typing import Dict, Optional, Tuple, Union

from matrixlib.errors import DimensionMismatchError, NullSourceError
from matrixlib.matrix import Matrix

logger = logging.getLogger(__name__)


def max_abs_difference(a: Matrix, b: Matrix) -> float:
    """Calculate the largest absolute element-wise difference.

    Args:
        a: First matrix
        b: Second matrix with the same shape

    Returns:
        max |a[i,j] - b[i,j]| over all elements
    """
    if a is None or b is None:
        raise NullSourceError("Both matrices are required")
    if a.shape != b.shape:
        raise DimensionMismatchError(
            f"Cannot compare {a.rows}x{a.cols} with {b.rows}x{b.cols}"
        )

    # Calculate element-wise absolute differences
    diff = abs(a.to_numpy() - b.to_numpy())
    return float(diff.max())


class Timer:
    """Utility class for timing operations with context manager support."""

    def __init__(self, name: str = "Timer", logger: Optional[logging.Logger] = None):
        """Initialize timer.

        Args:
            name: Timer name for logging
            logger: Logger to use (if None, uses module logger)
        """
        self.name = name
        self.logger = logger or logging.getLogger(__name__)
        self.start_time = None
        self.end_time = None
        self._laps = {}
        self._last_lap = None

    def start(self) -> None:
        """Start the timer, clearing any previous laps."""
        self.start_time = time.perf_counter()
        self.end_time = None
        self._laps = {}
        self._last_lap = None

    def stop(self) -> float:
        """Stop the timer and return elapsed time.

        Returns:
            Elapsed time in seconds, 0.0 if the timer was never started
        """
        if self.start_time is None:
            self.logger.warning(f"{self.name}: Timer stopped without being started")
            return 0.0

        self.end_time = time.perf_counter()
        elapsed = self.end_time - self.start_time
        self.logger.debug(f"{self.name}: {elapsed:.6f}s")
        return elapsed

    def __enter__(self) -> "Timer":
        """Start timing when entering context."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Stop timing when exiting context."""
        self.stop()

    def lap(self, name: str) -> float:
        """Record the time since the previous lap (or start) under name.

        Args:
            name: Lap name

        Returns:
            Lap time in seconds
        """
        now = time.perf_counter()
        if self.start_time is None:
            self.start_time = now

        # Measure from the previous lap, or from start for the first one
        previous = self._last_lap if self._last_lap is not None else self.start_time
        lap_time = now - previous
        self._last_lap = now
        self._laps[name] = lap_time

        self.logger.debug(f"{self.name} - {name}: {lap_time:.6f}s")
        return lap_time

    @property
    def timings(self) -> Dict[str, float]:
        """Recorded lap times by name."""
        return dict(self._laps)

    @property
    def elapsed(self) -> float:
        """Elapsed time in seconds.

        Measured up to ``stop()`` if the timer was stopped, otherwise up to now.
        """
        if self.start_time is None:
            return 0.0
        end = self.end_time if self.end_time is not None else time.perf_counter()
        return end - self.start_time


class OperationMetrics:
    """Collects a report for one evaluated matrix operation."""

    def __init__(self, operation: str):
        """Initialize metrics container.

        Args:
            operation: Name of the evaluated operation
        """
        self.metrics = {
            "operation": operation,
            "operand_shapes": [],
            "result_shape": None,
            "max_abs_difference": None,
            "runtime_s": 0.0,
            "stage_timings": {},
        }

    def update(self, metric_name: str, value: Union[int, float, str, Dict, None]) -> None:
        """Update a specific metric.

        Args:
            metric_name: Name of the metric to update
            value: New value for the metric
        """
        self.metrics[metric_name] = value

    def update_stage_timing(self, stage_name: str, time_s: float) -> None:
        """Update timing for a specific stage of the run.

        Args:
            stage_name: Name of the stage
            time_s: Time in seconds
        """
        self.metrics["stage_timings"][stage_name] = time_s

    def record_operands(self, *operands: Matrix) -> None:
        """Store the shapes of the operation's inputs."""
        self.metrics["operand_shapes"] = [list(m.shape) for m in operands]

    def record_result(self, result: Union[Matrix, bool]) -> None:
        """Store the result shape, or the boolean outcome of a comparison."""
        if isinstance(result, Matrix):
            self.metrics["result_shape"] = list(result.shape)
        else:
            self.metrics["result"] = bool(result)

    def to_dict(self) -> Dict:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metrics, with nested containers copied
        """
        return {
            **self.metrics,
            "operand_shapes": [list(s) for s in self.metrics["operand_shapes"]],
            "stage_timings": dict(self.metrics["stage_timings"]),
        }

    def summary(self) -> str:
        """Generate a human-readable summary of the run.

        Returns:
            Summary string
        """
        shapes = ", ".join(_format_shape(s) for s in self.metrics["operand_shapes"])
        lines = [
            f"Operation: {self.metrics['operation']}",
            f"  Operands: {shapes or '-'}",
        ]

        if self.metrics["result_shape"] is not None:
            lines.append(f"  Result: {_format_shape(self.metrics['result_shape'])}")
        if "result" in self.metrics:
            lines.append(f"  Result: {self.metrics['result']}")
        if self.metrics["max_abs_difference"] is not None:
            lines.append(f"  Max abs difference: {self.metrics['max_abs_difference']:.3e}")

        lines.append(f"  Total runtime: {self.metrics['runtime_s']:.6f}s")

        if self.metrics["stage_timings"]:
            lines.append("  Stage timings:")
            for stage, time_s in self.metrics["stage_timings"].items():
                lines.append(f"    {stage}: {time_s:.6f}s")

        return "\n".join(lines)


def _format_shape(shape: Union[Tuple[int, int], list]) -> str:
    return f"{shape[0]}x{shape[1]}"
