"""Builds the ordered pipeline that runs one job's steps."""

from __future__ import annotations

import logging
from concurrent.futures import CancelledError
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from .logger import step_logger

Executor = Callable[["JobErrorContainer"], None]


@dataclass
class JobErrorContainer:
    """Shared state of a running job: its logger, first error and cancellation."""

    logger: logging.Logger | logging.LoggerAdapter = field(
        default_factory=lambda: logging.getLogger("wfrunner")
    )
    error: BaseException | None = None
    cancelled: bool = False


class JobInfo(Protocol):
    """What the job pipeline needs from a job."""

    def matrix(self) -> dict[str, Any]: ...

    def steps(self) -> list[Any]: ...

    def start_container(self) -> Executor: ...

    def stop_container(self) -> Executor: ...

    def close_container(self) -> Executor: ...

    def interpolate_outputs(self) -> Executor: ...

    def result(self, result: str) -> None: ...


class _StepFactory(Protocol):
    def new_step(self, step_model: Any, run_context: Any) -> Any: ...


def _failing(err: Exception) -> Executor:
    def run(ctx: JobErrorContainer) -> None:
        raise err

    return run


def _no_steps(ctx: JobErrorContainer) -> None:
    ctx.logger.debug("No steps found")


def _guarded(step_exec: Executor, step_name: str) -> Executor:
    def run(ctx: JobErrorContainer) -> None:
        logger = step_logger(ctx.logger, step_name)
        try:
            step_exec(ctx)
        except Exception as err:
            logger.error("%s", err)
            ctx.error = err
            return
        if ctx.cancelled:
            err = CancelledError("context canceled")
            logger.error("%s", err)
            ctx.error = err

    return run


def new_job_executor(info: JobInfo, step_factory: _StepFactory, run_context: Any) -> Executor:
    """Return an executor that runs every pre, main and post step of a job.

    Step failures are recorded on the container rather than raised; the
    outputs are interpolated and the container closed whatever happens.
    """
    step_models = info.steps()
    if not step_models:
        return _no_steps

    def log_matrix(ctx: JobErrorContainer) -> None:
        matrix = info.matrix()
        if matrix:
            ctx.logger.info("\U0001F9EA  Matrix: %s", matrix)

    pre_steps: list[Executor] = [info.start_container()]
    main_steps: list[Executor] = [log_matrix]
    post_steps: list[Executor] = []

    for index, step_model in enumerate(step_models):
        if not step_model.id:
            step_model.id = str(index)
        try:
            step = step_factory.new_step(step_model, run_context)
        except Exception as err:
            return _failing(err)

        pre_steps.append(step.pre())
        main_steps.append(_guarded(step.main(), str(step_model)))
        post_steps.insert(0, step.post())

    def conclude(ctx: JobErrorContainer) -> None:
        if ctx.error is not None:
            info.result("failure")
        else:
            info.stop_container()(ctx)
            info.result("success")

    post_steps.append(conclude)
    pipeline = [*pre_steps, *main_steps, *post_steps]

    def run(ctx: JobErrorContainer) -> None:
        try:
            try:
                for executor in pipeline:
                    executor(ctx)
            finally:
                info.interpolate_outputs()(ctx)
        finally:
            info.close_container()(ctx)

    return run