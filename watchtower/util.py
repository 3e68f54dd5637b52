"""Small helpers shared across the package: collection arithmetic and random identifiers."""

from __future__ import annotations

import random
import string
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

VERSION = "v0.0.0-unknown"
"""Version of this build of Watchtower."""

USER_AGENT = f"Watchtower/{VERSION}"
"""HTTP client identifier derived from the version."""

_NAME_LETTERS = string.ascii_lowercase + string.ascii_uppercase
_NAME_LENGTH = 32
_SHA256_PREFIX = "sha256:"

_V = TypeVar("_V")


def slice_equal(s1: Sequence[str], s2: Sequence[str]) -> bool:
    """Return whether both sequences hold the same items in the same order."""
    return list(s1) == list(s2)


def slice_subtract(a1: Sequence[str], a2: Sequence[str]) -> list[str]:
    """Return the items of ``a1`` that do not occur in ``a2``, keeping their order."""
    excluded = set(a2)
    return [item for item in a1 if item not in excluded]


def string_map_subtract(m1: Mapping[str, str], m2: Mapping[str, str]) -> dict[str, str]:
    """Return the entries of ``m1`` whose key is missing from ``m2`` or maps to another value."""
    return {key: value for key, value in m1.items() if key not in m2 or m2[key] != value}


def struct_map_subtract(m1: Mapping[str, _V], m2: Mapping[str, Any]) -> dict[str, _V]:
    """Return the entries of ``m1`` whose key does not occur in ``m2``."""
    return {key: value for key, value in m1.items() if key not in m2}


def rand_name() -> str:
    """Generate a random 32 letter name that is valid as a container name."""
    return "".join(random.choice(_NAME_LETTERS) for _ in range(_NAME_LENGTH))


def generate_random_prefixed_sha256() -> str:
    """Generate a random 64 digit hex SHA-256 string prefixed with ``sha256:``."""
    return _SHA256_PREFIX + random.randbytes(32).hex()


def generate_random_sha256() -> str:
    """Generate a random 64 digit hex SHA-256 string."""
    return generate_random_prefixed_sha256()[len(_SHA256_PREFIX):]