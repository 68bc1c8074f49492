"""Runner configuration."""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

_IS_WINDOWS = sys.platform == "win32"
_WINDOWS_PATH = re.compile(r"^([a-zA-Z]):\\(.+)$")


@dataclass
class Config:
    """Settings that control how workflows are run."""

    actor: str = ""
    workdir: str = ""
    bind_workdir: bool = False
    event_name: str = ""
    event_path: str = ""
    default_branch: str = ""
    reuse_containers: bool = False
    force_pull: bool = False
    force_rebuild: bool = False
    log_output: bool = False
    json_logger: bool = False
    env: dict[str, str] = field(default_factory=dict)
    secrets: dict[str, str] = field(default_factory=dict)
    insecure_secrets: bool = False
    platforms: dict[str, str] = field(default_factory=dict)
    privileged: bool = False
    userns_mode: str = ""
    container_architecture: str = ""
    container_daemon_socket: str = ""
    use_git_ignore: bool = True
    github_instance: str = "github.com"
    container_cap_add: list[str] | None = None
    container_cap_drop: list[str] | None = None
    auto_remove: bool = False
    artifact_server_path: str = ""
    artifact_server_port: str = ""
    no_skip_checkout: bool = False
    remote_name: str = ""

    def container_path(self, path: str) -> str:
        """Return the path a host path has inside a container.

        Windows drive paths become WSL-style ``/mnt/<drive>/...`` paths; an
        empty string is returned when the path cannot be resolved.
        """
        if _IS_WINDOWS and "/" in path:
            log.error(
                "You cannot specify linux style local paths (/mnt/etc) on Windows "
                "as it does not understand them."
            )
            return ""

        try:
            abspath = os.path.abspath(path)
        except (OSError, ValueError) as err:
            log.error("%s", err)
            return ""

        match = _WINDOWS_PATH.match(abspath)
        if match is None:
            return abspath

        drive = match.group(1).lower()
        translated = match.group(2).replace("\\", "/")
        return "/".join(["/mnt", drive, translated])

    def container_workdir(self) -> str:
        """Return the working directory as seen from inside a container."""
        return self.container_path(self.workdir)

    def read_event_json(self) -> str:
        """Return the event payload: the event file's text, or ``{}`` if none is set."""
        if not self.event_path:
            return "{}"
        log.debug("Reading event.json from %s", self.event_path)
        with open(self.event_path, encoding="utf-8") as handle:
            return handle.read()