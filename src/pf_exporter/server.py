"""
HTTP endpoint for Prometheus scrapes.

Serves the registry in text exposition format on the telemetry path and a
small landing page on /. Each request gets its own thread, so concurrent
scrapes reach the collector in parallel and are serialized there.
"""

from __future__ import annotations

import logging
import socket
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Tuple, Type

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

log = logging.getLogger(__name__)

LANDING_PAGE = """<html>
<head><title>pf Exporter</title></head>
<body>
<h1>pf Exporter</h1>
<p><a href='{path}'>Metrics</a></p>
</body>
</html>
"""


def make_handler(registry: CollectorRegistry, metrics_path: str = "/metrics"):
    """Build a request handler class bound to one registry and path."""

    class _MetricsHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            path = self.path.split("?", 1)[0]
            if path == metrics_path:
                self._send(200, CONTENT_TYPE_LATEST, generate_latest(registry))
            elif path == "/":
                body = LANDING_PAGE.format(path=metrics_path).encode()
                self._send(200, "text/html; charset=utf-8", body)
            else:
                self._send(404, "text/plain; charset=utf-8", b"404 page not found\n")

        def _send(self, status: int, content_type: str, body: bytes):
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            log.debug("%s - %s", self.address_string(), format % args)

    return _MetricsHandler


class _IPv6Server(ThreadingHTTPServer):
    address_family = socket.AF_INET6

    def server_bind(self):
        # The wildcard address also takes IPv4 clients, like ":9107" does in Go
        if self.server_address[0] == "::":
            self.socket.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_V6ONLY, 0)
        super().server_bind()


def _resolve_bind(host: str) -> Tuple[Type[ThreadingHTTPServer], str]:
    """Pick the server class for a listen host. "" means every interface."""
    if host == "":
        if socket.has_dualstack_ipv6():
            return _IPv6Server, "::"
        return ThreadingHTTPServer, "0.0.0.0"
    if ":" in host:
        return _IPv6Server, host
    return ThreadingHTTPServer, host


def create_server(
    registry: CollectorRegistry,
    host: str = "",
    port: int = 9107,
    metrics_path: str = "/metrics",
) -> ThreadingHTTPServer:
    server_class, bind_host = _resolve_bind(host)
    server = server_class((bind_host, port), make_handler(registry, metrics_path))
    server.daemon_threads = True
    return server


def serve(registry: CollectorRegistry, host: str, port: int, metrics_path: str):
    server = create_server(registry, host, port, metrics_path)
    log.info("Starting server on %s port %d, metrics at %s",
             server.server_address[0], server.server_port, metrics_path)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        log.info("Server stopped")
