"""
Fetcher for a live pf. Holds the pf device open for the life of the process
and reads counters through pfctl on every fetch.

Opening the device happens in the constructor so a missing device or a
permission problem stops the exporter before it serves anything. The open
handle is only that check: pfctl opens the device itself on every read, so
a pre-opened descriptor can't stand in for it and is refused by the config.

Queue statistics are read separately; if that read fails the snapshot still
carries state and loginterface counters, just without a queue section.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from typing import Callable, List, Optional

from pf_exporter.collector.base import SnapshotFetcher
from pf_exporter.collector.pfctl_parser import parse_info, parse_queues
from pf_exporter.errors import FetchError, OpenError
from pf_exporter.metrics import StatisticsSnapshot

log = logging.getLogger(__name__)

DEFAULT_DEVICE = "/dev/pf"

Runner = Callable[[List[str]], str]


def platform_has_queues(platform: str = sys.platform) -> bool:
    # The FreeBSD pf interface doesn't report queue statistics
    return platform.startswith("openbsd")


def _run_pfctl(argv: List[str]) -> str:
    result = subprocess.run(argv, capture_output=True, text=True, check=True)
    return result.stdout


def _describe_failure(exc: Exception) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = (exc.stderr or "").strip()
        return f"exit status {exc.returncode}" + (f" ({stderr})" if stderr else "")
    return str(exc)


class PfctlFetcher(SnapshotFetcher):

    def __init__(
        self,
        device: str = DEFAULT_DEVICE,
        queues: Optional[bool] = None,
        pfctl: str = "pfctl",
        runner: Optional[Runner] = None,
    ):
        self._pfctl = pfctl
        self._run = runner or _run_pfctl
        self._queues = platform_has_queues() if queues is None else queues

        # Only proves access at startup; pfctl opens the device on its own
        try:
            self._fd = os.open(device, os.O_RDONLY)
        except OSError as e:
            raise OpenError(device, details=e.strerror) from e
        self._device = device

        log.debug("opened pf device %s (queues=%s)", self._device, self._queues)

    def _pfctl_output(self, *args: str) -> str:
        return self._run([self._pfctl, *args])

    def fetch(self) -> StatisticsSnapshot:
        """Run pfctl and parse its output into a snapshot."""
        if self._fd is None:
            raise FetchError("pf device is closed", details=self._device)

        try:
            info = parse_info(self._pfctl_output("-s", "info"))
        except (OSError, subprocess.CalledProcessError, ValueError) as e:
            raise FetchError("failed to get pf stats", details=_describe_failure(e)) from e

        queues = None
        if self._queues:
            try:
                queues = parse_queues(self._pfctl_output("-s", "queue", "-v"))
            except (OSError, subprocess.CalledProcessError) as e:
                log.warning("failed to get queue stats: %s", _describe_failure(e))

        return StatisticsSnapshot(
            state=info.state,
            interface=info.interface,
            ipv4=info.ipv4,
            ipv6=info.ipv6,
            queues=queues,
        )

    def name(self) -> str:
        return f"pf ({self._device})"

    def close(self):
        if self._fd is not None:
            os.close(self._fd)
        self._fd = None
