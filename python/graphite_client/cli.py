from __future__ import annotations

import argparse
import logging
import time
from datetime import datetime, timezone

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.table import Table

from .client import DEFAULT_PORT, GraphiteClient, GraphiteClientConfig
from .exceptions import GraphiteError
from .metric import Metric, render_value
from .server import ProtocolServer

MAX_ROWS = 20


def _received_table(server: ProtocolServer) -> Table:
    metrics = server.metrics()
    errors = server.errors()

    t = Table(title=f"Received on {server.address[0]}:{server.port}")
    t.add_column("Path", style="bold")
    t.add_column("Value")
    t.add_column("Timestamp")
    for m in metrics[-MAX_ROWS:]:
        ts = m.timestamp.isoformat() if m.timestamp is not None else ""
        t.add_row(escape(m.path), render_value(m.value), ts)
    t.caption = f"{len(metrics)} metrics, {len(errors)} errors"
    if errors:
        t.caption += f" (last: {escape(str(errors[-1]))})"
    return t


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="graphite-client")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", default=DEFAULT_PORT, type=int)
    p.add_argument("--timeout", default=5.0, type=float, help="Dial and write timeout (s)")
    p.add_argument("--prefix", default="")
    p.add_argument("-v", "--verbose", action="store_true")

    sub = p.add_subparsers(dest="cmd", required=True)

    send = sub.add_parser("send", help="Send one metric")
    send.add_argument("path")
    send.add_argument("value")
    send.add_argument("--timestamp", type=int, help="Unix seconds (default: now)")

    listen = sub.add_parser("listen", help="Accept metrics and display them")
    listen.add_argument("--interval", default=0.5, type=float)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(threadName)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console = Console()

    if args.cmd == "send":
        if args.timestamp is None:
            ts = datetime.now(timezone.utc)
        else:
            ts = datetime.fromtimestamp(args.timestamp, tz=timezone.utc)
        cfg = GraphiteClientConfig(dial_timeout_s=args.timeout, write_timeout_s=args.timeout, prefix=args.prefix)
        try:
            with GraphiteClient(f"[{args.host}]:{args.port}", cfg) as client:
                client.send(Metric(args.path, args.value, ts))
        except GraphiteError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            return 1
        console.print(f"sent {escape(client.prefix + args.path)} {escape(args.value)} to {args.host}:{args.port}")
        return 0

    if args.cmd == "listen":
        interval = float(args.interval)
        with ProtocolServer(port=args.port, host=args.host) as server:
            with Live(_received_table(server), refresh_per_second=4, console=console) as live:
                try:
                    while True:
                        live.update(_received_table(server))
                        time.sleep(max(0.05, interval))
                except KeyboardInterrupt:
                    return 1 if server.has_errors() else 0

    console.print("[red]Unknown command[/red]")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
