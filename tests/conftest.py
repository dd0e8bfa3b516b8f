"""Shared fixtures for graphite_client tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from graphite_client import GraphiteClient, GraphiteClientConfig, Metric, ProtocolServer


def ts(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


SPECIMEN = Metric("abc", 123.03, ts(1234567890))

SPECIMENS = [
    Metric("abc", 123.03, ts(1234567890)),
    Metric("abc", "123.03", ts(1234567891)),
    Metric("abc", 123, ts(1234567892)),
    Metric("abc", Decimal("0.5"), ts(1234567893)),
]


def as_float(value: object) -> float:
    return float(value)  # type: ignore[arg-type]


def assert_same_metrics(sent: list[Metric], received: list[Metric], prefix: str = "") -> None:
    """Compare what was sent with what the server decoded.

    Values are compared numerically and paths after prefix application.
    """
    assert len(received) == len(sent)
    for s, r in zip(sent, received):
        assert r.path == prefix + s.path
        assert r.value == pytest.approx(as_float(s.value))
        assert r.timestamp is not None and s.timestamp is not None
        assert int(r.timestamp.timestamp()) == int(s.timestamp.timestamp())


@pytest.fixture
def server() -> Iterator[ProtocolServer]:
    with ProtocolServer() as srv:
        yield srv


@pytest.fixture
def client_for():
    """Factory for clients pointed at a server; every client is closed on teardown."""
    clients: list[GraphiteClient] = []

    def make(srv: ProtocolServer, **cfg) -> GraphiteClient:
        c = GraphiteClient(f"127.0.0.1:{srv.port}", GraphiteClientConfig(**cfg))
        clients.append(c)
        return c

    yield make
    for c in clients:
        c.close()
