"""Startup configuration. Built once from the command line, never changed after."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from pf_exporter.collector.pfctl_fetcher import DEFAULT_DEVICE
from pf_exporter.errors import ConfigError

DEFAULT_LISTEN_ADDRESS = ":9107"
DEFAULT_METRICS_PATH = "/metrics"


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split host:port. The host is "" for ":9107", meaning every interface."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ConfigError("listen address must be host:port", details=address)
    host = host.strip("[]")
    try:
        port_num = int(port)
    except ValueError:
        raise ConfigError("invalid port in listen address", details=address) from None
    if not 0 <= port_num <= 65535:
        raise ConfigError("port out of range", details=address)
    return host, port_num


@dataclass(frozen=True)
class ExporterConfig:
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    metrics_path: str = DEFAULT_METRICS_PATH
    device: str = DEFAULT_DEVICE
    fd: Optional[int] = None
    queues: Optional[bool] = None   # None = decide by platform
    mock: bool = False

    def validate(self) -> "ExporterConfig":
        parse_listen_address(self.listen_address)
        if not self.metrics_path.startswith("/"):
            raise ConfigError("telemetry path must start with '/'", details=self.metrics_path)
        if self.metrics_path == "/":
            raise ConfigError("telemetry path can't be the landing page", details=self.metrics_path)
        if self.fd is not None:
            # pfctl opens the pf device by path; a passed-in descriptor would go unused
            raise ConfigError("--pf.fd is not supported, pfctl opens the pf device itself",
                              details=self.fd)
        return self

    @property
    def bind(self) -> Tuple[str, int]:
        return parse_listen_address(self.listen_address)
