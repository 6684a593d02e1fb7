"""
Base fetcher interface.

A fetcher is anything that can produce a StatisticsSnapshot. This keeps the
collector decoupled from where the counters actually come from (pfctl on
OpenBSD or FreeBSD, the simulator, a test double).
"""

from abc import ABC, abstractmethod

from pf_exporter.metrics import StatisticsSnapshot


class SnapshotFetcher(ABC):
    """Interface for all pf statistics sources."""

    @abstractmethod
    def fetch(self) -> StatisticsSnapshot:
        """Read one snapshot of current counters. Raises FetchError on failure."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...

    def close(self):
        pass
