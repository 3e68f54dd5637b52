"""Docker containers as seen by watchtower: metadata labels and recreation settings."""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any, Optional

from watchtower.util import (
    slice_equal,
    slice_subtract,
    string_map_subtract,
    struct_map_subtract,
)

WATCHTOWER_LABEL = "com.centurylinklabs.watchtower"
SIGNAL_LABEL = "com.centurylinklabs.watchtower.stop-signal"
ENABLE_LABEL = "com.centurylinklabs.watchtower.enable"
MONITOR_ONLY_LABEL = "com.centurylinklabs.watchtower.monitor-only"
NO_PULL_LABEL = "com.centurylinklabs.watchtower.no-pull"
DEPENDS_ON_LABEL = "com.centurylinklabs.watchtower.depends-on"
ZODIAC_LABEL = "com.centurylinklabs.zodiac.original-image"
SCOPE_LABEL = "com.centurylinklabs.watchtower.scope"
PRE_CHECK_LABEL = "com.centurylinklabs.watchtower.lifecycle.pre-check"
POST_CHECK_LABEL = "com.centurylinklabs.watchtower.lifecycle.post-check"
PRE_UPDATE_LABEL = "com.centurylinklabs.watchtower.lifecycle.pre-update"
POST_UPDATE_LABEL = "com.centurylinklabs.watchtower.lifecycle.post-update"
PRE_UPDATE_TIMEOUT_LABEL = "com.centurylinklabs.watchtower.lifecycle.pre-update-timeout"
POST_UPDATE_TIMEOUT_LABEL = "com.centurylinklabs.watchtower.lifecycle.post-update-timeout"

_SHA256_ALGORITHM = "sha256"
_SHORT_ID_LENGTH = 12
_DEFAULT_HOOK_TIMEOUT = 1

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_INTEGER = re.compile(r"[+-]?[0-9]+")


class ContainerConfigError(Exception):
    """Raised when a container cannot be recreated from its configuration."""


class NoImageInfoError(ContainerConfigError):
    """The image information for the container is missing."""

    def __init__(self, message: str = "no available image info") -> None:
        super().__init__(message)


class NoContainerInfoError(ContainerConfigError):
    """The inspection data for the container is missing."""

    def __init__(self, message: str = "no available container info") -> None:
        super().__init__(message)


class InvalidConfigError(ContainerConfigError):
    """The container configuration is missing or malformed."""

    def __init__(self, message: str = "container configuration missing or invalid") -> None:
        super().__init__(message)


def short_id(identifier: str) -> str:
    """Shorten an image or container ID, dropping a ``sha256:`` prefix but keeping any other."""
    algorithm, separator, digest = identifier.partition(":")
    if not separator:
        return identifier[:_SHORT_ID_LENGTH]
    if algorithm == _SHA256_ALGORITHM:
        return digest[:_SHORT_ID_LENGTH]
    return f"{algorithm}:{digest[:_SHORT_ID_LENGTH]}"


def contains_watchtower_label(labels: Optional[Mapping[str, str]]) -> bool:
    """Return whether the labels mark a watchtower instance."""
    return (labels or {}).get(WATCHTOWER_LABEL) == "true"


def _parse_bool(raw: str) -> Optional[bool]:
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    return None


def _parse_minutes(raw: str) -> int:
    if not _INTEGER.fullmatch(raw):
        return _DEFAULT_HOOK_TIMEOUT
    return int(raw)


class Container:
    """A Docker container, built from its inspection data and that of its image."""

    def __init__(
        self,
        container_info: Optional[dict[str, Any]],
        image_info: Optional[dict[str, Any]] = None,
    ) -> None:
        self.container_info = container_info
        self.image_info = image_info
        self.stale = False
        self.linked_to_restarting = False

    def __repr__(self) -> str:
        name = self.container_info.get("Name") if self.container_info else None
        return f"Container(name={name!r}, stale={self.stale}, linked_to_restarting={self.linked_to_restarting})"

    def _info(self) -> dict[str, Any]:
        if self.container_info is None:
            raise NoContainerInfoError()
        return self.container_info

    def _labels(self) -> dict[str, str]:
        config = self._info().get("Config") or {}
        return config.get("Labels") or {}

    def _label(self, label: str) -> str:
        return self._labels().get(label, "")

    def _label_flag(self, label: str) -> bool:
        raw = self._labels().get(label)
        return raw is not None and _parse_bool(raw) is True

    def id(self) -> str:
        """The Docker container ID."""
        return self._info().get("Id", "")

    def is_running(self) -> bool:
        """Whether the container state reports it as running."""
        return bool((self._info().get("State") or {}).get("Running", False))

    def is_restarting(self) -> bool:
        """Whether the container state reports it as restarting."""
        return bool((self._info().get("State") or {}).get("Restarting", False))

    def name(self) -> str:
        """The Docker container name."""
        return self._info().get("Name", "")

    def image_id(self) -> str:
        """The ID of the image the container was started from."""
        if self.image_info is None:
            raise NoImageInfoError()
        return self.image_info.get("Id", "")

    def safe_image_id(self) -> str:
        """The image ID if image information is available, otherwise an empty string."""
        if self.image_info is None:
            return ""
        return self.image_info.get("Id", "")

    def image_name(self) -> str:
        """The image name the container was started from, with ``latest`` assumed when untagged."""
        labels = self._labels()
        if ZODIAC_LABEL in labels:
            image_name = labels[ZODIAC_LABEL]
        else:
            image_name = (self._info().get("Config") or {}).get("Image", "")
        if ":" not in image_name:
            image_name = f"{image_name}:latest"
        return image_name

    def enabled(self) -> tuple[bool, bool]:
        """The value of the enable label and whether it was set to a valid boolean."""
        raw = self._labels().get(ENABLE_LABEL)
        if raw is None:
            return False, False
        parsed = _parse_bool(raw)
        if parsed is None:
            return False, False
        return parsed, True

    def is_monitor_only(self) -> bool:
        """The value of the monitor-only label, false when unset or invalid."""
        return self._label_flag(MONITOR_ONLY_LABEL)

    def is_no_pull(self) -> bool:
        """The value of the no-pull label, false when unset or invalid."""
        return self._label_flag(NO_PULL_LABEL)

    def scope(self) -> tuple[str, bool]:
        """The scope label value and whether it was set."""
        labels = self._labels()
        if SCOPE_LABEL not in labels:
            return "", False
        return labels[SCOPE_LABEL], True

    def links(self) -> list[str]:
        """Names of the containers this container depends on."""
        depends_on = self._label(DEPENDS_ON_LABEL)
        if depends_on:
            return [link if link.startswith("/") else "/" + link for link in depends_on.split(",")]

        host_config = (self.container_info or {}).get("HostConfig") or {}
        return [link.split(":")[0] for link in host_config.get("Links") or []]

    def to_restart(self) -> bool:
        """Whether the container is stale or linked to one that restarts."""
        return self.stale or self.linked_to_restarting

    def is_watchtower(self) -> bool:
        """Whether this container is a watchtower instance itself."""
        return contains_watchtower_label(self._labels())

    def pre_update_timeout(self) -> int:
        """Minutes the pre-update command may run; 0 means no limit, 1 when unset or invalid."""
        return _parse_minutes(self._label(PRE_UPDATE_TIMEOUT_LABEL))

    def post_update_timeout(self) -> int:
        """Minutes the post-update command may run; 0 means no limit, 1 when unset or invalid."""
        return _parse_minutes(self._label(POST_UPDATE_TIMEOUT_LABEL))

    def stop_signal(self) -> str:
        """The custom stop signal from the labels, or an empty string."""
        return self._label(SIGNAL_LABEL)

    def lifecycle_pre_check_command(self) -> str:
        """The pre-check command from the labels, or an empty string."""
        return self._label(PRE_CHECK_LABEL)

    def lifecycle_post_check_command(self) -> str:
        """The post-check command from the labels, or an empty string."""
        return self._label(POST_CHECK_LABEL)

    def lifecycle_pre_update_command(self) -> str:
        """The pre-update command from the labels, or an empty string."""
        return self._label(PRE_UPDATE_LABEL)

    def lifecycle_post_update_command(self) -> str:
        """The post-update command from the labels, or an empty string."""
        return self._label(POST_UPDATE_LABEL)

    def get_create_config(self) -> dict[str, Any]:
        """The container config holding only what was overridden at run time, ready for re-creation."""
        if self.image_info is None:
            raise NoImageInfoError()
        info = self._info()
        if info.get("Config") is None:
            raise InvalidConfigError()

        config = copy.deepcopy(info["Config"])
        host_config = info.get("HostConfig") or {}
        image_config = self.image_info.get("Config") or {}

        if config.get("WorkingDir", "") == image_config.get("WorkingDir", ""):
            config["WorkingDir"] = ""
        if config.get("User", "") == image_config.get("User", ""):
            config["User"] = ""
        if str(host_config.get("NetworkMode") or "").startswith("container:"):
            config["Hostname"] = ""

        if slice_equal(config.get("Entrypoint") or [], image_config.get("Entrypoint") or []):
            config["Entrypoint"] = None
            if slice_equal(config.get("Cmd") or [], image_config.get("Cmd") or []):
                config["Cmd"] = None

        config["Env"] = slice_subtract(config.get("Env") or [], image_config.get("Env") or [])
        config["Labels"] = string_map_subtract(config.get("Labels") or {}, image_config.get("Labels") or {})
        config["Volumes"] = struct_map_subtract(config.get("Volumes") or {}, image_config.get("Volumes") or {})

        exposed = config.get("ExposedPorts")
        bindings = host_config.get("PortBindings") or {}
        if exposed is not None or bindings:
            image_exposed = image_config.get("ExposedPorts") or {}
            exposed = {port: value for port, value in (exposed or {}).items() if port not in image_exposed}
            for port in bindings:
                exposed[port] = {}
            config["ExposedPorts"] = exposed

        config["Image"] = self.image_name()
        return config

    def get_create_host_config(self) -> dict[str, Any]:
        """The host config with links rewritten so that it can be used for re-creation."""
        host_config = self._info().get("HostConfig")
        if host_config is None:
            raise InvalidConfigError()
        host_config = copy.deepcopy(host_config)

        rewritten = []
        for link in host_config.get("Links") or []:
            if ":" not in link or "/" not in link:
                raise InvalidConfigError(f"malformed container link {link!r}")
            name = link[: link.index(":")]
            alias = link[link.rindex("/"):]
            rewritten.append(f"{name}:{alias}")
        if host_config.get("Links") is not None:
            host_config["Links"] = rewritten
        return host_config

    def has_image_info(self) -> bool:
        """Whether image information is available for the container."""
        return self.image_info is not None

    def verify_configuration(self) -> None:
        """Check that the container can be recreated once removed, raising if it cannot."""
        if self.image_info is None:
            raise NoImageInfoError()
        if self.container_info is None:
            raise NoContainerInfoError()

        config = self.container_info.get("Config")
        if config is None:
            raise InvalidConfigError()
        host_config = self.container_info.get("HostConfig")
        if host_config is None:
            raise InvalidConfigError()

        # Missing exposed ports are tolerated by starting from an empty mapping.
        if host_config.get("PortBindings") and config.get("ExposedPorts") is None:
            config["ExposedPorts"] = {}