"""Job-level context: the github context, container mounts and runner env."""

from __future__ import annotations

import json
import logging
import os
import shlex
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from .config import Config
from .naming import as_string, nested_map_lookup

log = logging.getLogger(__name__)

ACT_PATH = "/var/run/act"
DEFAULT_DOCKER_SOCKET = "/var/run/docker.sock"
DEFAULT_ACTOR = "nektos/act"
DEFAULT_PATH_FILE = ACT_PATH + "/workflow/paths.txt"
DEFAULT_ENV_FILE = ACT_PATH + "/workflow/envs.txt"
EVENT_FILE = ACT_PATH + "/workflow/event.json"


@dataclass
class GithubContext:
    """Values exposed to workflows as the ``github`` context."""

    event: dict[str, Any] = field(default_factory=dict)
    event_path: str = ""
    workflow: str = ""
    run_id: str = ""
    run_number: str = ""
    actor: str = ""
    repository: str = ""
    event_name: str = ""
    sha: str = ""
    ref: str = ""
    head_ref: str = ""
    base_ref: str = ""
    token: str = ""
    workspace: str = ""
    action: str = ""
    action_path: str = ""
    action_ref: str = ""
    action_repository: str = ""
    repository_owner: str = ""
    retention_days: str = ""
    runner_perflog: str = ""
    runner_tracking_id: str = ""

    @classmethod
    def from_config(
        cls,
        config: Config,
        workflow_name: str,
        action: str = "",
        event_json: str = "",
        repository: str | None = None,
    ) -> "GithubContext":
        """Build the context from the runner configuration.

        ``repository`` is the ``owner/name`` of the checked-out repository,
        or None when it could not be determined.
        """
        env = config.env or {}
        secrets = config.secrets or {}
        ghc = cls(
            event_path=EVENT_FILE,
            workflow=workflow_name,
            run_id=env.get("GITHUB_RUN_ID", "") or "1",
            run_number=env.get("GITHUB_RUN_NUMBER", "") or "1",
            actor=config.actor or DEFAULT_ACTOR,
            event_name=config.event_name,
            workspace=config.container_workdir(),
            action=action,
            token=secrets.get("GITHUB_TOKEN", ""),
            repository_owner=env.get("GITHUB_REPOSITORY_OWNER", ""),
            retention_days=env.get("GITHUB_RETENTION_DAYS", "") or "0",
            runner_perflog=env.get("RUNNER_PERFLOG", "") or "/dev/null",
            runner_tracking_id=env.get("RUNNER_TRACKING_ID", ""),
        )

        if repository is None:
            log.warning("unable to get git repo")
        else:
            ghc.repository = repository
            if not ghc.repository_owner:
                ghc.repository_owner = repository.split("/")[0]

        if event_json:
            try:
                event = json.loads(event_json)
            except json.JSONDecodeError as err:
                log.error("Unable to Unmarshal event '%s': %s", event_json, err)
            else:
                if isinstance(event, dict):
                    ghc.event = event
                else:
                    log.error("Unable to Unmarshal event '%s': not an object", event_json)

        if ghc.event_name == "pull_request":
            ghc.base_ref = as_string(nested_map_lookup(ghc.event, "pull_request", "base", "ref"))
            ghc.head_ref = as_string(nested_map_lookup(ghc.event, "pull_request", "head", "ref"))

        return ghc


def _selinux_enabled() -> bool:
    return os.path.exists("/sys/fs/selinux/enforce")


def binds_and_mounts(
    config: Config,
    job_container_name: str,
    volumes: Iterable[str] | None = None,
) -> tuple[list[str], dict[str, str]]:
    """Return the bind specs and named-volume mounts for a job container."""
    socket = config.container_daemon_socket or DEFAULT_DOCKER_SOCKET
    binds = [f"{socket}:{DEFAULT_DOCKER_SOCKET}"]
    mounts = {
        "act-toolcache": "/toolcache",
        f"{job_container_name}-env": ACT_PATH,
    }

    for volume in volumes or ():
        if ":" not in volume or os.path.isabs(volume):
            # An anonymous volume or a host path.
            binds.append(volume)
        else:
            name, target = volume.split(":", 1)
            mounts[name] = target

    if config.bind_workdir:
        modifiers = ""
        if sys.platform == "darwin":
            modifiers = ":delegated"
        if _selinux_enabled():
            modifiers = ":z"
        binds.append(f"{config.workdir}:{config.container_workdir()}{modifiers}")
    else:
        mounts[job_container_name] = config.container_workdir()

    return binds, mounts


def image_os(platform_name: str) -> str:
    """Return the ``ImageOS`` value for a runner label such as ``ubuntu-18.04``."""
    if platform_name == "ubuntu-latest":
        return "ubuntu20"
    return platform_name.replace("-", "", 1).split(".", 1)[0]


def with_github_env(
    env: Mapping[str, str],
    github: GithubContext,
    job_name: str,
    github_instance: str,
    platform_names: Iterable[str] | None = None,
) -> dict[str, str]:
    """Return ``env`` extended with the ``GITHUB_*`` and runner variables."""
    out = dict(env)
    out.update(
        {
            "CI": "true",
            "GITHUB_ENV": DEFAULT_ENV_FILE,
            "GITHUB_PATH": DEFAULT_PATH_FILE,
            "GITHUB_WORKFLOW": github.workflow,
            "GITHUB_RUN_ID": github.run_id,
            "GITHUB_RUN_NUMBER": github.run_number,
            "GITHUB_ACTION": github.action,
            "GITHUB_ACTION_PATH": github.action_path,
            "GITHUB_ACTION_REPOSITORY": github.action_repository,
            "GITHUB_ACTION_REF": github.action_ref,
            "GITHUB_ACTIONS": "true",
            "GITHUB_ACTOR": github.actor,
            "GITHUB_REPOSITORY": github.repository,
            "GITHUB_EVENT_NAME": github.event_name,
            "GITHUB_EVENT_PATH": github.event_path,
            "GITHUB_WORKSPACE": github.workspace,
            "GITHUB_SHA": github.sha,
            "GITHUB_REF": github.ref,
            "GITHUB_TOKEN": github.token,
            "GITHUB_SERVER_URL": "https://github.com",
            "GITHUB_API_URL": "https://api.github.com",
            "GITHUB_GRAPHQL_URL": "https://api.github.com/graphql",
            "GITHUB_BASE_REF": github.base_ref,
            "GITHUB_HEAD_REF": github.head_ref,
            "GITHUB_JOB": job_name,
            "GITHUB_REPOSITORY_OWNER": github.repository_owner,
            "GITHUB_RETENTION_DAYS": github.retention_days,
            "RUNNER_PERFLOG": github.runner_perflog,
            "RUNNER_TRACKING_ID": github.runner_tracking_id,
        }
    )
    if github_instance != "github.com":
        out["GITHUB_SERVER_URL"] = f"https://{github_instance}"
        out["GITHUB_API_URL"] = f"https://{github_instance}/api/v3"
        out["GITHUB_GRAPHQL_URL"] = f"https://{github_instance}/api/graphql"

    for name in platform_names or ():
        if name:
            out["ImageOS"] = image_os(name)

    return out


def action_cache_dir() -> str:
    """Return the directory where downloaded actions are cached."""
    cache = os.environ.get("XDG_CACHE_HOME", "")
    if not cache:
        home = os.path.expanduser("~")
        if home and home != "~":
            cache = os.path.join(home, ".cache")
        else:
            cache = os.path.abspath(".")
    return os.path.join(cache, "act")


def _unparsable(options: str) -> str:
    log.warning("Cannot parse container options: %s", options)
    return ""


def parse_hostname(options: str | None) -> str:
    """Return the ``--hostname``/``-h`` value from container options.

    Options that cannot be split or hold any other flag give an empty string.
    """
    options = options or ""
    try:
        args = shlex.split(options)
    except ValueError:
        return _unparsable(options)

    hostname = ""
    remaining = iter(args)
    for arg in remaining:
        if arg == "--":
            break
        if arg.startswith("--"):
            name, has_value, value = arg[2:].partition("=")
            if name != "hostname":
                return _unparsable(options)
            if not has_value:
                following = next(remaining, None)
                if following is None:
                    return _unparsable(options)
                value = following
            hostname = value
        elif arg.startswith("-") and arg != "-":
            flags = arg[1:]
            if flags[0] != "h":
                return _unparsable(options)
            value = flags[1:]
            if value.startswith("="):
                value = value[1:]
            elif not value:
                following = next(remaining, None)
                if following is None:
                    return _unparsable(options)
                value = following
            hostname = value
    return hostname


def job_status(step_conclusions: Iterable[Any]) -> str:
    """Return ``failure`` if any step concluded with failure, else ``success``."""
    for conclusion in step_conclusions:
        if conclusion == "failure" or getattr(conclusion, "value", None) == "failure":
            return "failure"
    return "success"


def validate_credentials(
    credentials: Mapping[str, str] | None,
    interpolate: Callable[[str], str],
) -> tuple[str, str] | None:
    """Return the interpolated ``(username, password)`` of a job container.

    None is returned when the container declares no credentials; malformed
    or empty credentials raise ``ValueError``.
    """
    if credentials is None:
        return None
    if len(credentials) != 2:
        raise ValueError("invalid property count for key 'credentials:'")

    username = interpolate(credentials.get("username", ""))
    if not username:
        raise ValueError("failed to interpolate container.credentials.username")
    secret = interpolate(credentials.get("password", ""))
    if not secret:
        raise ValueError("failed to interpolate container.credentials.password")

    if not credentials.get("username") or not credentials.get("password"):
        raise ValueError("container.credentials cannot be empty")

    return username, secret