"""Tests for the Result type."""
import pytest

from fpl_sync.core.result import Err, Ok, UnwrapError, collect


class TestResult:
    """Ok/Err combinators."""

    # map / map_error
    # ─────────────────────────────────────────────────────────────

    def test_map_transforms_ok_only(self):
        assert Ok(2).map(lambda v: v * 3) == Ok(6)
        assert Err("boom").map(lambda v: v * 3) == Err("boom")

    def test_map_error_transforms_err_only(self):
        assert Err("boom").map_error(str.upper) == Err("BOOM")
        assert Ok(1).map_error(str.upper) == Ok(1)

    # and_then
    # ─────────────────────────────────────────────────────────────

    def test_and_then_chains_and_short_circuits(self):
        def half(v):
            return Ok(v // 2) if v % 2 == 0 else Err(f"{v} is odd")

        assert Ok(8).and_then(half).and_then(half) == Ok(2)
        assert Ok(6).and_then(half).and_then(half) == Err("3 is odd")
        assert Err("first").and_then(half) == Err("first")

    async def test_and_then_async(self):
        async def fetch(v):
            return Ok(v + 1)

        assert await Ok(1).and_then_async(fetch) == Ok(2)
        assert await Err("no").and_then_async(fetch) == Err("no")

    # unwrap
    # ─────────────────────────────────────────────────────────────

    def test_unwrap_on_err_raises(self):
        with pytest.raises(UnwrapError):
            Err("boom").unwrap()
        with pytest.raises(UnwrapError):
            Ok(1).unwrap_err()

    def test_unwrap_or(self):
        assert Ok(1).unwrap_or(0) == 1
        assert Err("boom").unwrap_or(0) == 0

    def test_value_and_error_accessors(self):
        assert Ok(1).value == 1 and Ok(1).error is None
        assert Err("e").error == "e" and Err("e").value is None

    # collect
    # ─────────────────────────────────────────────────────────────

    def test_collect_all_ok(self):
        assert collect([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])

    def test_collect_first_error_wins(self):
        assert collect([Ok(1), Err("a"), Err("b")]) == Err("a")

    def test_collect_empty(self):
        assert collect([]) == Ok([])
