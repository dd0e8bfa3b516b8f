"""graphite_client: a Graphite plaintext-protocol client.

Client:
    GraphiteClient, GraphiteClientConfig, ConnectionState, parse_address

Wire format:
    Metric, MetricValue, render_value, encode_metric, encode_metrics,
    decode_line, normalize_prefix

Testing:
    ProtocolServer

Exceptions:
    GraphiteError, AddressError, ValidationError, ConnectError,
    ConnectTimeoutError, WriteError, WriteTimeoutError, DecodeError
"""

from importlib.metadata import PackageNotFoundError, version

from .client import (
    DEFAULT_DIAL_TIMEOUT_S,
    DEFAULT_PORT,
    DEFAULT_WRITE_TIMEOUT_S,
    ConnectionState,
    GraphiteClient,
    GraphiteClientConfig,
    parse_address,
)
from .exceptions import (
    AddressError,
    ConnectError,
    ConnectTimeoutError,
    DecodeError,
    GraphiteError,
    ValidationError,
    WriteError,
    WriteTimeoutError,
)
from .metric import Metric, MetricValue, render_value
from .protocol import decode_line, encode_metric, encode_metrics, normalize_prefix
from .server import ProtocolServer

try:
    __version__ = version("graphite-client")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "DEFAULT_DIAL_TIMEOUT_S",
    "DEFAULT_PORT",
    "DEFAULT_WRITE_TIMEOUT_S",
    "AddressError",
    "ConnectError",
    "ConnectTimeoutError",
    "ConnectionState",
    "DecodeError",
    "GraphiteClient",
    "GraphiteClientConfig",
    "GraphiteError",
    "Metric",
    "MetricValue",
    "ProtocolServer",
    "ValidationError",
    "WriteError",
    "WriteTimeoutError",
    "__version__",
    "decode_line",
    "encode_metric",
    "encode_metrics",
    "normalize_prefix",
    "parse_address",
    "render_value",
]
