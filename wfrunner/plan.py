"""Helpers used when running the stages of a plan."""

from __future__ import annotations

from typing import Iterable, Mapping

DEFAULT_MAX_PARALLEL = 4


def handle_failure(results: Mapping[str, str] | Iterable[tuple[str, str]]) -> None:
    """Raise ``RuntimeError`` for the first run whose result is ``failure``.

    ``results`` maps each run's name to its result, in plan order.
    """
    items = results.items() if isinstance(results, Mapping) else results
    for name, result in items:
        if result == "failure":
            raise RuntimeError(f"Job '{name}' failed")


def job_display_name(name: str, index: int, count: int) -> str:
    """Return a job's name, numbered from 1 when a matrix yields several runs."""
    return f"{name}-{index + 1}" if count > 1 else name


def max_parallel(strategy_max: int | None, matrix_count: int) -> int:
    """Return how many matrix runs may go at once (4 unless a strategy says)."""
    limit = DEFAULT_MAX_PARALLEL if strategy_max is None else strategy_max
    return min(limit, matrix_count)


def padded_job_name(name: str, width: int) -> str:
    """Return ``name`` left-aligned and padded with spaces to ``width``."""
    return name.ljust(width)