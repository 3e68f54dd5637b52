"""Finding the ID of the container this process runs in from its cgroup information."""

from __future__ import annotations

import os
import re
from pathlib import Path

_DOCKER_CONTAINER_PATTERN = re.compile(r"[0-9]+:.*:/docker/([a-f|0-9]{64})")
_CGROUP_PATH_TEMPLATE = "/proc/{pid}/cgroup"


def container_id_from_cgroup(text: str) -> str:
    """Return the Docker container ID found in cgroup text, or an empty string."""
    match = _DOCKER_CONTAINER_PATTERN.search(text)
    if match is None:
        return ""
    return match.group(1)


def get_running_container_id() -> str:
    """Return the ID of the container running this process, or an empty string if none is found.

    Raises ``OSError`` when the cgroup information cannot be read.
    """
    path = Path(_CGROUP_PATH_TEMPLATE.format(pid=os.getpid()))
    return container_id_from_cgroup(path.read_text())