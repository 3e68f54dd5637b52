"""Container filters: predicates that decide which containers are considered."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Any, Optional

Filter = Callable[[Any], bool]
"""A predicate over a container exposing name(), enabled(), scope(), image_name() and is_watchtower()."""


def watchtower_containers_filter(container: Any) -> bool:
    """Keep only watchtower containers."""
    return container.is_watchtower()


def no_filter(container: Any) -> bool:
    """Keep every container, whatever it is."""
    del container
    return True


def filter_by_names(names: Sequence[str], base_filter: Optional[Filter]) -> Optional[Filter]:
    """Keep containers whose name equals, or is wholly matched by, one of ``names``."""
    if not names:
        return base_filter

    patterns = list(names)

    def _filter(container: Any) -> bool:
        for name in patterns:
            container_name = container.name()
            if name == container_name or name == container_name[1:]:
                return base_filter(container)
            try:
                match = re.search(name, container_name)
            except re.error:
                continue
            if match is None:
                continue
            if match.start() <= 1 and match.end() >= len(container_name) - 1:
                return base_filter(container)
        return False

    return _filter


def filter_by_enable_label(base_filter: Filter) -> Filter:
    """Keep only containers that have the enable label set at all."""

    def _filter(container: Any) -> bool:
        _, present = container.enabled()
        if not present:
            return False
        return base_filter(container)

    return _filter


def filter_by_disabled_label(base_filter: Filter) -> Filter:
    """Drop containers whose enable label is explicitly set to false."""

    def _filter(container: Any) -> bool:
        enabled, present = container.enabled()
        if present and not enabled:
            return False
        return base_filter(container)

    return _filter


def filter_by_scope(scope: str, base_filter: Filter) -> Filter:
    """Keep only containers in ``scope``; an empty scope keeps everything."""
    if scope == "":
        return base_filter

    def _filter(container: Any) -> bool:
        container_scope, present = container.scope()
        if present and container_scope == scope:
            return base_filter(container)
        return False

    return _filter


def filter_by_image(images: Optional[Sequence[str]], base_filter: Filter) -> Filter:
    """Keep only containers whose image (without tag) is one of ``images``; ``None`` keeps everything."""
    if images is None:
        return base_filter

    targets = list(images)

    def _filter(container: Any) -> bool:
        image = container.image_name().split(":")[0]
        if image in targets:
            return base_filter(container)
        return False

    return _filter


def build_filter(names: Sequence[str], enable_label: bool, scope: str) -> tuple[Filter, str]:
    """Build the combined container filter and a description of what it selects."""
    parts: list[str] = []
    current: Filter = filter_by_names(names, no_filter)

    if names:
        parts.append('which name matches "' + '" or "'.join(names) + '", ')

    if enable_label:
        current = filter_by_enable_label(current)
        parts.append("using enable label, ")

    if scope != "":
        current = filter_by_scope(scope, current)
        parts.append(f'in scope "{scope}", ')

    current = filter_by_disabled_label(current)

    description = "Checking all containers (except explicitly disabled with label)"
    if parts:
        description = ("Only checking containers " + "".join(parts))[:-2]

    return current, description