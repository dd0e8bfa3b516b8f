"""In-process plaintext-protocol server for verifying what clients put on the wire.

Every accepted connection gets its own reader thread. Decoded metrics and any
decode or socket errors are appended to two separately locked logs, which
tests inspect through snapshot accessors. Errors are never raised to the
caller since many connections are handled at once.
"""

from __future__ import annotations

import logging
import socket
import threading
import time

from .exceptions import DecodeError
from .metric import Metric
from .protocol import decode_line

logger = logging.getLogger(__name__)

ACCEPT_POLL_S = 0.05


class ProtocolServer:
    def __init__(self, port: int = 0, host: str = "127.0.0.1"):
        self._host = host
        self._port = port
        self._listener: socket.socket | None = None
        self._accept_thread: threading.Thread | None = None
        self._closed = threading.Event()

        self._conns_lock = threading.Lock()
        self._conns: set[socket.socket] = set()

        self._metrics_lock = threading.Lock()
        self._metrics: list[Metric] = []

        self._errors_lock = threading.Lock()
        self._errors: list[Exception] = []

    @property
    def address(self) -> tuple[str, int]:
        return self._host, self._port

    @property
    def port(self) -> int:
        return self._port

    def start(self) -> ProtocolServer:
        if self._listener is not None:
            raise RuntimeError("server already started")
        family = socket.AF_INET6 if ":" in self._host else socket.AF_INET
        listener = socket.socket(family, socket.SOCK_STREAM)
        listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            listener.bind((self._host, self._port))
            listener.listen()
        except OSError:
            listener.close()
            raise
        # accept() wakes periodically so close() from another thread is noticed.
        listener.settimeout(ACCEPT_POLL_S)
        self._listener = listener
        self._port = listener.getsockname()[1]

        self._accept_thread = threading.Thread(
            target=self._accept_loop, args=(listener,), name=f"graphite-accept-{self._port}", daemon=True
        )
        self._accept_thread.start()
        logger.info(f"Server started. Listening on {self._host}:{self._port}")
        return self

    def _accept_loop(self, listener: socket.socket) -> None:
        while not self._closed.is_set():
            try:
                conn, addr = listener.accept()
            except TimeoutError:
                continue
            except OSError as e:
                if self._closed.is_set():
                    break
                self._append_error(e)
                break

            logger.debug(f"New connection from {addr[0]}:{addr[1]}")
            conn.settimeout(None)
            with self._conns_lock:
                self._conns.add(conn)
            threading.Thread(
                target=self._handle_conn,
                args=(conn,),
                name=f"graphite-conn-{addr[1]}",
                daemon=True,
            ).start()
        logger.debug("Accept loop exited")

    def _handle_conn(self, conn: socket.socket) -> None:
        try:
            with conn.makefile("rb") as reader:
                for line in reader:
                    if not line.endswith(b"\n"):
                        logger.debug(f"Discarding unterminated line at EOF: {line!r}")
                        break
                    self._append_metric(decode_line(line))
        except DecodeError as e:
            self._append_error(e)
        except OSError as e:
            if not self._closed.is_set():
                self._append_error(e)
        finally:
            with self._conns_lock:
                self._conns.discard(conn)
            conn.close()

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        if self._listener is not None:
            self._listener.close()
        if self._accept_thread is not None:
            self._accept_thread.join()

        with self._conns_lock:
            conns = list(self._conns)
        for conn in conns:
            try:
                conn.shutdown(socket.SHUT_RDWR)
            except OSError:
                # Peer already gone.
                pass
        logger.info(f"Server on {self._host}:{self._port} stopped")

    def __enter__(self) -> ProtocolServer:
        if self._listener is None:
            self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _append_metric(self, metric: Metric) -> None:
        with self._metrics_lock:
            self._metrics.append(metric)

    def _append_error(self, err: Exception) -> None:
        logger.warning(f"Recorded server error: {err}")
        with self._errors_lock:
            self._errors.append(err)

    def metrics(self) -> list[Metric]:
        with self._metrics_lock:
            return list(self._metrics)

    def errors(self) -> list[Exception]:
        with self._errors_lock:
            return list(self._errors)

    def has_errors(self) -> bool:
        with self._errors_lock:
            return bool(self._errors)

    def wait_for_metrics(self, count: int, timeout_s: float = 2.0) -> list[Metric]:
        """Poll until at least ``count`` metrics arrived or ``timeout_s`` elapses.

        Returns the snapshot either way; callers assert on its length.
        """
        deadline = time.monotonic() + timeout_s
        while True:
            metrics = self.metrics()
            if len(metrics) >= count or time.monotonic() >= deadline:
                return metrics
            time.sleep(0.01)

    def wait_for_errors(self, count: int = 1, timeout_s: float = 2.0) -> list[Exception]:
        deadline = time.monotonic() + timeout_s
        while True:
            errors = self.errors()
            if len(errors) >= count or time.monotonic() >= deadline:
                return errors
            time.sleep(0.01)
