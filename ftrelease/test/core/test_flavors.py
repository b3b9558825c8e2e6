"""Tests for ftrelease.core.flavors module."""

from __future__ import annotations

import pytest

from ftrelease.core.flavors import (
    FLAVORS,
    FlavorSelectorError,
    needs_tree_reset,
    resolve_flavors,
    valid_selectors,
)
from ftrelease.core.result import Err, Ok


class TestRegistry:
    def test_standard_ships_sdk_and_splits(self) -> None:
        standard = FLAVORS["standard"]
        assert standard.include_google_services is True
        assert standard.split_by_abi is True
        assert standard.artifact_suffix == ""

    def test_foss_is_sdk_free_universal(self) -> None:
        foss = FLAVORS["foss"]
        assert foss.include_google_services is False
        assert foss.split_by_abi is False
        assert foss.artifact_suffix == "-foss"
        assert foss.env_marker == "foss"

    def test_registry_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            FLAVORS["beta"] = FLAVORS["foss"]  # type: ignore[index]


class TestResolveFlavors:
    def test_single(self) -> None:
        assert resolve_flavors("foss") == Ok((FLAVORS["foss"],))

    def test_both_in_build_order(self) -> None:
        assert resolve_flavors("both") == Ok((FLAVORS["standard"], FLAVORS["foss"]))

    def test_case_and_whitespace_insensitive(self) -> None:
        assert resolve_flavors(" Standard ") == Ok((FLAVORS["standard"],))

    def test_unknown(self) -> None:
        result = resolve_flavors("beta")
        assert result == Err(FlavorSelectorError(selector="beta", available=valid_selectors()))
        assert valid_selectors() == ("standard", "foss", "both")


class TestNeedsTreeReset:
    """The native tree is deleted whenever SDK integration changes."""

    def test_first_sdk_flavor_keeps_tree(self) -> None:
        assert needs_tree_reset(None, FLAVORS["standard"]) is False

    def test_first_sdk_free_flavor_resets(self) -> None:
        assert needs_tree_reset(None, FLAVORS["foss"]) is True

    def test_switch_resets(self) -> None:
        assert needs_tree_reset(FLAVORS["standard"], FLAVORS["foss"]) is True
        assert needs_tree_reset(FLAVORS["foss"], FLAVORS["standard"]) is True

    def test_same_integration_keeps_tree(self) -> None:
        assert needs_tree_reset(FLAVORS["foss"], FLAVORS["foss"]) is False
