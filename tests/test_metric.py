"""Tests for graphite_client.metric."""

from __future__ import annotations

import dataclasses
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from graphite_client import Metric, render_value


class TestRenderValue:
    @pytest.mark.parametrize(
        ("value", "token"),
        [
            (123.03, "123.03"),
            (123, "123"),
            (0, "0"),
            ("123.03", "123.03"),
            (Decimal("1.50"), "1.50"),
            (-2.5, "-2.5"),
        ],
    )
    def test_natural_token(self, value, token) -> None:
        assert render_value(value) == token

    def test_float_token_round_trips(self) -> None:
        assert float(render_value(0.1 + 0.2)) == 0.1 + 0.2


class TestMetric:
    def test_defaults(self) -> None:
        m = Metric()
        assert m.path == ""
        assert m.value == 0
        assert m.timestamp is None

    def test_frozen(self) -> None:
        m = Metric("abc", 1, datetime.now(timezone.utc))
        with pytest.raises(dataclasses.FrozenInstanceError):
            m.path = "other"  # type: ignore[misc]

    def test_structural_equality(self) -> None:
        t = datetime(2009, 2, 13, 23, 31, 30, tzinfo=timezone.utc)
        assert Metric("abc", 1.5, t) == Metric("abc", 1.5, t)

    def test_unix_seconds_truncates_subseconds(self) -> None:
        t = datetime.fromtimestamp(1234567890.987, tz=timezone.utc)
        assert Metric("abc", 1, t).unix_seconds == 1234567890

    def test_unix_seconds_requires_timestamp(self) -> None:
        with pytest.raises(ValueError):
            _ = Metric("abc", 1).unix_seconds

    def test_str_uses_utc_rfc3339(self) -> None:
        t = datetime.fromtimestamp(1234567890, tz=timezone.utc)
        assert str(Metric("abc", 123.03, t)) == "abc 123.03 2009-02-13T23:31:30Z"

    def test_min_datetime_counts_as_unset(self) -> None:
        m = Metric("abc", 1, datetime.min)
        assert not m.has_timestamp
        assert str(m) == "abc 1 <unset>"
        with pytest.raises(ValueError):
            _ = m.unix_seconds

    def test_str_without_timestamp(self) -> None:
        assert str(Metric("abc", 1)) == "abc 1 <unset>"
