"""Graphite plaintext line protocol: ``<path> <value> <unix-seconds>\\n``."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime, timezone

from .exceptions import DecodeError, ValidationError
from .metric import Metric, render_value

SEPARATOR = "."

# Plain decimal or exponent notation, or inf/nan; no digit separators.
_VALUE_RE = re.compile(r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan)", re.IGNORECASE | re.ASCII)
_TIMESTAMP_RE = re.compile(r"[+-]?\d+", re.ASCII)


def normalize_prefix(prefix: str) -> str:
    if prefix and not prefix.endswith(SEPARATOR):
        return prefix + SEPARATOR
    return prefix


def encode_metric(metric: Metric, prefix: str = "") -> bytes:
    """Encode one metric as a protocol line.

    ``prefix`` is expected to be normalized already. Raises ``ValidationError``
    when the path is empty or the timestamp is unset. The value is not checked:
    a zero value is legal and sent as ``0``.
    """
    if not metric.path:
        raise ValidationError(f"no path supplied for metric: {metric}", metric=metric)
    if not metric.has_timestamp:
        raise ValidationError(f"timestamp for metric is unset: {metric}", metric=metric)
    try:
        seconds = metric.unix_seconds
    except (ValueError, OverflowError, OSError) as e:
        raise ValidationError(f"timestamp for metric is out of range: {metric}", metric=metric) from e
    line = f"{prefix}{metric.path} {render_value(metric.value)} {seconds}\n"
    return line.encode("utf-8")


def encode_metrics(metrics: Iterable[Metric], prefix: str = "") -> bytes:
    buf = bytearray()
    for i, m in enumerate(metrics):
        try:
            buf += encode_metric(m, prefix)
        except ValidationError as e:
            raise ValidationError(f"metrics[{i}]: {e}", index=i, metric=m) from e
    return bytes(buf)


def decode_line(line: bytes) -> Metric:
    """Parse one received line back into a Metric.

    The value comes back as a float and the timestamp as an aware UTC datetime.
    """
    text = line.decode("utf-8", errors="replace").rstrip("\r\n")
    tokens = text.split()
    if len(tokens) != 3:
        raise DecodeError(f"expected 3 fields, got {len(tokens)}: {text!r}", line=line)
    path, raw_value, raw_ts = tokens

    if not _VALUE_RE.fullmatch(raw_value):
        raise DecodeError(f"invalid value: {raw_value!r}", line=line)
    value = float(raw_value)

    if not _TIMESTAMP_RE.fullmatch(raw_ts):
        raise DecodeError(f"invalid timestamp: {raw_ts!r}", line=line)
    try:
        seconds = int(raw_ts)
        timestamp = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (ValueError, OverflowError, OSError) as e:
        raise DecodeError(f"invalid timestamp: {raw_ts!r}", line=line) from e

    return Metric(path, value, timestamp)
