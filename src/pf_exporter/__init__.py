"""pf-exporter: Prometheus exporter for pf firewall statistics."""

__version__ = "0.3.0"
