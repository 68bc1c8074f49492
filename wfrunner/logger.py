"""Per-job loggers that prefix, colour and mask their output."""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

RED = 31
GREEN = 32
YELLOW = 33
BLUE = 34
MAGENTA = 35
CYAN = 36
GRAY = 37

_COLORS = (BLUE, YELLOW, GREEN, MAGENTA, RED, GRAY, CYAN)
_color_lock = threading.Lock()
_next_color = 0

Masker = Callable[[str], str]

_FIELDS = ("job", "dryrun", "step", "raw_output")


def value_masker(
    insecure_secrets: bool,
    secrets: Mapping[str, str] | None,
    masks: Iterable[str] | None,
) -> Masker:
    """Return a function that replaces secret values and masks with ``***``.

    ``masks`` is read each time the function is called, so values added to
    it later are masked too.
    """

    def mask(message: str) -> str:
        if insecure_secrets:
            return message
        for value in (secrets or {}).values():
            if value:
                message = message.replace(value, "***")
        for value in masks or ():
            if value:
                message = message.replace(value, "***")
        return message

    return mask


def _is_terminal(stream: Any) -> bool:
    isatty = getattr(stream, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


class JobLogFormatter(logging.Formatter):
    """Formats records as ``[job] message``, coloured on a terminal."""

    def __init__(self, color: int, masker: Masker, stream: Any = None) -> None:
        super().__init__()
        self.color = color
        self.masker = masker
        self.stream = stream

    def format(self, record: logging.LogRecord) -> str:
        message = self.masker(record.getMessage())
        if message.endswith("\n"):
            message = message[:-1]
        job = getattr(record, "job", "")
        raw = getattr(record, "raw_output", False) is True
        dryrun = getattr(record, "dryrun", False) is True

        if self._is_colored():
            if raw:
                return f"\x1b[{self.color}m|\x1b[0m {message}"
            if dryrun:
                return (
                    f"\x1b[1m\x1b[{GRAY}m\x1b[7m*DRYRUN*\x1b[0m "
                    f"\x1b[{self.color}m[{job}] \x1b[0m{message}"
                )
            return f"\x1b[{self.color}m[{job}] \x1b[0m{message}"

        if raw:
            return f"[{job}]   | {message}"
        if dryrun:
            return f"*DRYRUN* [{job}] {message}"
        return f"[{job}] {message}"

    def _is_colored(self) -> bool:
        colored = _is_terminal(self.stream)
        force = os.environ.get("CLICOLOR_FORCE")
        if force is not None and force != "0":
            colored = True
        elif force == "0":
            colored = False
        elif os.environ.get("CLICOLOR") == "0":
            colored = False
        return colored


class JobLogJSONFormatter(logging.Formatter):
    """Formats records as one JSON object per line, with secrets masked."""

    def __init__(self, masker: Masker) -> None:
        super().__init__()
        self.masker = masker

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            name: getattr(record, name) for name in _FIELDS if hasattr(record, name)
        }
        data["level"] = record.levelname.lower()
        data["msg"] = self.masker(record.getMessage())
        data["time"] = (
            datetime.fromtimestamp(record.created).astimezone().isoformat(timespec="seconds")
        )
        return json.dumps(data, sort_keys=True, default=str)


def job_logger(
    job_name: str,
    config: Any,
    masks: list[str] | None = None,
    dryrun: bool = False,
) -> logging.LoggerAdapter:
    """Return a logger for one job that writes to standard output.

    Each new job logger takes the next colour in turn.
    """
    global _next_color
    masker = value_masker(config.insecure_secrets, config.secrets, masks)
    with _color_lock:
        formatter: logging.Formatter
        if config.json_logger:
            formatter = JobLogJSONFormatter(masker)
        else:
            formatter = JobLogFormatter(_COLORS[_next_color % len(_COLORS)], masker, sys.stdout)
        _next_color += 1

    logger = logging.Logger(f"wfrunner.job.{job_name}")
    logger.setLevel(logging.getLogger("wfrunner").getEffectiveLevel())
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logging.LoggerAdapter(logger, {"job": job_name, "dryrun": dryrun})


def step_logger(logger: logging.Logger | logging.LoggerAdapter, step_name: str) -> logging.LoggerAdapter:
    """Return a logger that adds the step name to the job logger's fields."""
    if isinstance(logger, logging.LoggerAdapter):
        extra = dict(logger.extra or {})
        base = logger.logger
    else:
        extra = {}
        base = logger
    extra["step"] = step_name
    return logging.LoggerAdapter(base, extra)