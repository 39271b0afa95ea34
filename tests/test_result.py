"""Unit tests for the lightweight Result utilities."""

from __future__ import annotations

import pytest

from termsnap.core.result import Err, Ok, Result, err, ok


def test_ok_map_and_flat_map() -> None:
    """`Ok` should map/flat_map and keep values typed."""
    r: Result[int, str] = ok(10)
    r2 = r.map(lambda x: x + 5).flat_map(lambda x: ok(x * 2))
    assert r2.is_ok() and r2.unwrap() == 30
    assert isinstance(r2, Ok)


def test_err_propagation() -> None:
    """`Err` should pass through map/flat_map untouched."""
    r: Result[int, str] = err("boom")
    assert r.is_err()
    assert r.map(lambda x: x + 1).unwrap_err() == "boom"
    assert isinstance(r.flat_map(lambda x: ok(x)), Err)


def test_unwrap_on_wrong_variant_raises() -> None:
    with pytest.raises(RuntimeError):
        err("e").unwrap()
    with pytest.raises(RuntimeError):
        ok(1).unwrap_err()
