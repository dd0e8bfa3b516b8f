from __future__ import annotations

import enum
import logging
import socket
import threading
from dataclasses import dataclass

from .exceptions import (
    AddressError,
    ConnectError,
    ConnectTimeoutError,
    ValidationError,
    WriteError,
    WriteTimeoutError,
)
from .metric import Metric
from .protocol import encode_metrics, normalize_prefix

logger = logging.getLogger(__name__)

DEFAULT_DIAL_TIMEOUT_S = 5.0
DEFAULT_WRITE_TIMEOUT_S = 5.0
DEFAULT_PORT = 2003


@dataclass(frozen=True)
class GraphiteClientConfig:
    dial_timeout_s: float = DEFAULT_DIAL_TIMEOUT_S
    write_timeout_s: float = DEFAULT_WRITE_TIMEOUT_S
    # Prepended to every path; a trailing "." is added when missing.
    prefix: str = ""


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


def _parse_port(raw: str, address: str) -> int:
    if not (raw.isascii() and raw.isdigit()):
        raise AddressError(f"invalid port {raw!r} in address {address!r}")
    port = int(raw)
    if port > 65535:
        raise AddressError(f"port out of range in address {address!r}")
    return port


def parse_address(address: str, default_port: int = DEFAULT_PORT) -> tuple[str, int]:
    """Split ``host``, ``host:port``, ``[v6]`` or ``[v6]:port``.

    A missing port falls back to ``default_port``; every other malformed
    address raises ``AddressError``.
    """
    if not address:
        raise AddressError("empty address")

    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise AddressError(f"missing ']' in address {address!r}")
        host, rest = address[1:end], address[end + 1 :]
        if not host:
            raise AddressError(f"empty host in address {address!r}")
        if not rest:
            return host, default_port
        if not rest.startswith(":"):
            raise AddressError(f"unexpected {rest!r} after host in address {address!r}")
        return host, _parse_port(rest[1:], address)

    colons = address.count(":")
    if colons == 0:
        return address, default_port
    if colons > 1:
        raise AddressError(f"too many colons in address {address!r}")
    host, raw_port = address.split(":")
    if not host:
        raise AddressError(f"empty host in address {address!r}")
    return host, _parse_port(raw_port, address)


class GraphiteClient:
    """Plaintext-protocol client owning at most one TCP connection.

    ``send`` connects lazily and reuses the connection across calls. Any connect
    or write failure drops the connection so the next ``send`` redials; nothing
    is retried internally. All operations are serialized by one lock.
    """

    def __init__(self, address: str, cfg: GraphiteClientConfig | None = None):
        self._cfg = cfg or GraphiteClientConfig()
        self._host, self._port = parse_address(address)
        self._prefix = normalize_prefix(self._cfg.prefix)
        self._lock = threading.Lock()
        self._sock: socket.socket | None = None

    @property
    def address(self) -> tuple[str, int]:
        return self._host, self._port

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return ConnectionState.DISCONNECTED if self._sock is None else ConnectionState.CONNECTED

    def send(self, *metrics: Metric) -> None:
        """Send all metrics in one write, or none of them.

        Raises ``ValidationError`` (connection untouched) if any metric is
        invalid, ``ConnectError`` or ``WriteError`` otherwise.
        """
        with self._lock:
            was_connected = self._sock is not None
            sock = self._connect()
            try:
                payload = encode_metrics(metrics, self._prefix)
            except ValidationError:
                # Leave the client as it was before this call.
                if not was_connected:
                    self._close()
                raise
            if not payload:
                return
            try:
                sock.settimeout(self._cfg.write_timeout_s)
                sock.sendall(payload)
            except TimeoutError as e:
                self._drop("write timed out")
                raise WriteTimeoutError(f"timed out sending {len(metrics)} metrics to {self._host}:{self._port}") from e
            except OSError as e:
                self._drop("write failed")
                raise WriteError(f"error sending metrics to {self._host}:{self._port}: {e}") from e
            logger.debug(f"Sent {len(metrics)} metrics ({len(payload)} bytes) to {self._host}:{self._port}")

    def _connect(self) -> socket.socket:
        if self._sock is not None:
            return self._sock

        try:
            sock = socket.create_connection((self._host, self._port), timeout=self._cfg.dial_timeout_s)
        except TimeoutError as e:
            logger.warning(f"Timed out connecting to {self._host}:{self._port}")
            raise ConnectTimeoutError(f"timed out connecting to {self._host}:{self._port}") from e
        except (OSError, ValueError) as e:
            # ValueError covers hosts the resolver cannot encode (IDNA, NUL).
            logger.warning(f"Could not connect to {self._host}:{self._port}: {e}")
            raise ConnectError(f"error connecting to {self._host}:{self._port}: {e}") from e

        logger.debug(f"Connected to {self._host}:{self._port}")
        self._sock = sock
        return sock

    def _drop(self, reason: str) -> None:
        logger.warning(f"Dropping connection to {self._host}:{self._port}: {reason}")
        self._close()

    def close(self) -> None:
        with self._lock:
            self._close()

    def _close(self) -> None:
        if self._sock is None:
            return
        sock, self._sock = self._sock, None
        try:
            sock.close()
        except OSError as e:
            logger.debug(f"Error closing connection to {self._host}:{self._port}: {e}")
        else:
            logger.debug(f"Closed connection to {self._host}:{self._port}")

    def __enter__(self) -> GraphiteClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
