"""
Exception hierarchy for pf-exporter.

OpenError is fatal and only raised while starting up. FetchError is raised
per scrape and absorbed by the collector. LabelMismatchError means the
catalog and the emitter disagree, which is a bug.
"""

from __future__ import annotations

from typing import Any, Optional


class PfExporterError(Exception):
    """Base class for all pf-exporter errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigError(PfExporterError):
    """Invalid startup configuration."""


class OpenError(PfExporterError):
    """The pf device could not be opened."""

    def __init__(self, device: str, details: Optional[Any] = None):
        super().__init__(f"cannot open pf device {device}", details=details)
        self.device = device


class FetchError(PfExporterError):
    """Reading statistics from pf failed for this cycle."""


class LabelMismatchError(PfExporterError):
    """A sample carried a different number of label values than its descriptor."""

    def __init__(self, metric_id: str, expected: int, got: int):
        super().__init__(
            f"label mismatch for {metric_id}",
            details=f"expected {expected} label values, got {got}",
        )
        self.metric_id = metric_id
        self.expected = expected
        self.got = got
