"""Tests for ftrelease.core.result module."""

import pytest

from ftrelease.core.result import Err, Ok, Result


def test_ok_repr() -> None:
    assert repr(Ok("1.2.3")) == "Ok('1.2.3')"


def test_err_repr() -> None:
    assert repr(Err("bad")) == "Err('bad')"


def test_variants_compare_by_payload() -> None:
    assert Ok(1) == Ok(1)
    assert Ok(1) != Err(1)


def test_pattern_matching() -> None:
    result: Result[int, str] = Err("bad")
    match result:
        case Ok(value):
            pytest.fail(f"unexpected Ok({value})")
        case Err(error):
            assert error == "bad"
