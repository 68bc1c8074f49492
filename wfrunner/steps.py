"""Step results, step environment helpers and shell script preparation."""

from __future__ import annotations

import enum
import logging
import shlex
from dataclasses import dataclass, field
from typing import Iterable, Mapping, MutableMapping

log = logging.getLogger(__name__)

ACT_PATH = "/var/run/act"
DEFAULT_PATH = "/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"

_SHELL_SCRIPTS: dict[str, tuple[str, str, str]] = {
    "bash": (".sh", "", ""),
    "sh": (".sh", "", ""),
    "pwsh": (
        ".ps1",
        "$ErrorActionPreference = 'stop'",
        "if ((Test-Path -LiteralPath variable:/LASTEXITCODE)) { exit $LASTEXITCODE }",
    ),
    "powershell": (
        ".ps1",
        "$ErrorActionPreference = 'stop'",
        "if ((Test-Path -LiteralPath variable:/LASTEXITCODE)) { exit $LASTEXITCODE }",
    ),
    "cmd": (".cmd", "@echo off", ""),
    "python": (".py", "", ""),
}


class StepStatus(str, enum.Enum):
    """Outcome or conclusion of a step."""

    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value


@dataclass
class StepResult:
    """What a step produced: its outputs, outcome and conclusion."""

    outputs: dict[str, str] = field(default_factory=dict)
    conclusion: StepStatus = StepStatus.SUCCESS
    outcome: StepStatus = StepStatus.SUCCESS


def merge_into_map(
    target: MutableMapping[str, str], *args: Mapping[str, str] | None
) -> None:
    """Copy every mapping into ``target`` in turn; later values win."""
    for mapping in args:
        if mapping:
            target.update(mapping)


def prepend_path(env: Mapping[str, str], extra_path: Iterable[str] | None) -> dict[str, str]:
    """Return ``env`` with a default ``PATH`` and ``extra_path`` put in front of it."""
    out = dict(env)
    if not out.get("PATH"):
        out["PATH"] = DEFAULT_PATH
    extra = list(extra_path or ())
    if extra:
        out["PATH"] = ":".join(extra) + ":" + out["PATH"]
    return out


def get_script_name(step_id: str, parent_steps: Iterable[str] = ()) -> str:
    """Return the script name of a step, relative to the runner directory.

    ``parent_steps`` holds the current step of each enclosing composite
    action, nearest first.
    """
    name = step_id
    for parent in parent_steps:
        name = f"{parent}-composite-{name}"
    return f"workflow/{name}"


def shell_script(shell: str, name: str, body: str) -> tuple[str, str]:
    """Return the script's file name and text for the given shell."""
    extension, prepend, append = _SHELL_SCRIPTS.get(shell, ("", "", ""))
    name += extension
    script = f"{prepend}\n{body}\n{append}"
    log.debug("Wrote command \n%s\n to '%s'", script, name)
    return name, script


def split_command(shell_command: str, script_path: str) -> list[str]:
    """Put ``script_path`` in place of the first ``{0}`` and split the command.

    Raises ``ValueError`` when the command's quoting is unbalanced.
    """
    return shlex.split(shell_command.replace("{0}", script_path, 1))