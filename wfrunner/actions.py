"""Classifying steps and preparing remote, local and docker actions."""

from __future__ import annotations

import enum
import re
import shlex
from dataclasses import dataclass
from typing import Mapping

_REMOTE_ACTION = re.compile(r"^([^/@]+)/([^/@]+)(/([^@]*))?(@(.*))?$")
_DOCKER_PREFIX = "docker://"
_LOCAL_PREFIX = "./"

_RUNNER_ENV = (
    ("RUNNER_TOOL_CACHE", "/opt/hostedtoolcache"),
    ("RUNNER_OS", "Linux"),
    ("RUNNER_TEMP", "/tmp"),
)


class StepType(enum.Enum):
    """How a step is to be run."""

    RUN = "run"
    USES_ACTION_LOCAL = "local-action"
    USES_ACTION_REMOTE = "remote-action"
    USES_DOCKER_URL = "docker"


def classify_step(uses: str | None, run: str | None) -> StepType:
    """Return the kind of step described by its ``uses`` and ``run`` keys.

    A step with both keys or with neither raises ``ValueError``.
    """
    uses = uses or ""
    run = run or ""
    if bool(uses) == bool(run):
        raise ValueError(f"Invalid run/uses syntax: uses={uses!r} run={run!r}")
    if run:
        return StepType.RUN
    if uses.startswith(_DOCKER_PREFIX):
        return StepType.USES_DOCKER_URL
    if uses.startswith(_LOCAL_PREFIX):
        return StepType.USES_ACTION_LOCAL
    return StepType.USES_ACTION_REMOTE


@dataclass
class RemoteAction:
    """An action referenced as ``{org}/{repo}[/path]@ref``."""

    org: str
    repo: str
    path: str
    ref: str
    url: str = "github.com"

    @classmethod
    def parse(cls, action: str) -> "RemoteAction":
        """Parse a ``uses`` value; a missing or empty ref raises ``ValueError``."""
        match = _REMOTE_ACTION.match(action)
        if match is None or not match.group(6):
            raise ValueError(
                "Expected format {org}/{repo}[/path]@ref. "
                f"Actual '{action}' Input string was not in a correct format"
            )
        return cls(
            org=match.group(1),
            repo=match.group(2),
            path=match.group(4) or "",
            ref=match.group(6),
        )

    def clone_url(self) -> str:
        """Return the HTTPS URL the action's repository is cloned from."""
        return f"https://{self.url}/{self.org}/{self.repo}"

    def is_checkout(self) -> bool:
        """Return True for the ``actions/checkout`` action."""
        return self.org == "actions" and self.repo == "checkout"


def is_local_checkout(
    uses: str | None,
    with_: Mapping[str, str] | None,
    repository: str,
    ref: str,
) -> bool:
    """Return True if a step checks out the repository already in the workdir."""
    try:
        if classify_step(uses, None) is not StepType.USES_ACTION_REMOTE:
            return False
        action = RemoteAction.parse(uses or "")
    except ValueError:
        return False
    if not action.is_checkout():
        return False

    with_ = with_ or {}
    if "repository" in with_ and with_["repository"] != repository:
        return False
    if "ref" in with_ and with_["ref"] != ref:
        return False
    return True


def docker_image(uses: str) -> str:
    """Return the image named by a ``docker://`` reference."""
    return uses[len(_DOCKER_PREFIX):] if uses.startswith(_DOCKER_PREFIX) else uses


def docker_command(args: str | None, entrypoint: str | None) -> tuple[list[str], list[str]]:
    """Return the command and entrypoint of a docker step.

    ``args`` is split with shell quoting rules; unbalanced quotes raise
    ``ValueError``. An empty entrypoint gives an empty list.
    """
    command = shlex.split(args or "")
    return command, [entrypoint] if entrypoint else []


def step_container_env(env: Mapping[str, str]) -> list[str]:
    """Return ``KEY=value`` entries for a step container, runner variables last."""
    entries = [f"{key}={value}" for key, value in env.items()]
    entries.extend(f"{key}={value}" for key, value in _RUNNER_ENV)
    return entries


def action_cache_path(cache_dir: str, uses: str) -> str:
    """Return the directory a remote action is cloned into."""
    return f"{cache_dir}/{uses.replace('/', '-')}"