"""Product flavor registry.

The registry is fixed at import time. ``standard`` ships the Google
services SDK and per-ABI APKs for the Play Store; ``foss`` is built without
any proprietary SDK as a single universal APK.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from .result import Err, Ok, Result

__all__ = [
    "ALL_FLAVORS_SELECTOR",
    "DEFAULT_SELECTOR",
    "FLAVORS",
    "FLAVOR_ORDER",
    "FlavorSpec",
    "FlavorSelectorError",
    "needs_tree_reset",
    "resolve_flavors",
    "valid_selectors",
]


@dataclass(frozen=True, slots=True)
class FlavorSpec:
    name: str
    display_name: str
    env_marker: str
    artifact_suffix: str
    include_google_services: bool
    split_by_abi: bool


FLAVORS: Final[Mapping[str, FlavorSpec]] = MappingProxyType(
    {
        "standard": FlavorSpec(
            name="standard",
            display_name="Standard",
            env_marker="standard",
            artifact_suffix="",
            include_google_services=True,
            split_by_abi=True,
        ),
        "foss": FlavorSpec(
            name="foss",
            display_name="FOSS",
            env_marker="foss",
            artifact_suffix="-foss",
            include_google_services=False,
            split_by_abi=False,
        ),
    }
)

# Flavors carrying the SDK build first; the reset before the next flavor
# then wipes every SDK block.
FLAVOR_ORDER: Final[tuple[str, ...]] = ("standard", "foss")

ALL_FLAVORS_SELECTOR = "both"
DEFAULT_SELECTOR = "standard"


@dataclass(frozen=True, slots=True)
class FlavorSelectorError:
    selector: str
    available: tuple[str, ...]


def valid_selectors() -> tuple[str, ...]:
    return (*FLAVOR_ORDER, ALL_FLAVORS_SELECTOR)


def resolve_flavors(selector: str) -> Result[tuple[FlavorSpec, ...], FlavorSelectorError]:
    """Map a target selector (``standard``, ``foss`` or ``both``) to flavors in build order."""
    key = selector.strip().lower()
    if key == ALL_FLAVORS_SELECTOR:
        return Ok(tuple(FLAVORS[name] for name in FLAVOR_ORDER))
    spec = FLAVORS.get(key)
    if spec is None:
        return Err(FlavorSelectorError(selector=selector, available=valid_selectors()))
    return Ok((spec,))


def needs_tree_reset(previous: FlavorSpec | None, current: FlavorSpec) -> bool:
    """Whether the native tree must be deleted before building ``current``.

    With no previous flavor in this run the tree on disk may still carry SDK
    blocks from an earlier run, so an SDK-free flavor always starts clean.
    """
    if previous is None:
        return not current.include_google_services
    return previous.include_google_services != current.include_google_services
