"""
Fetcher that reads from the pf simulator.
Used for local development on machines without pf.
"""

from pf_exporter.collector.base import SnapshotFetcher
from pf_exporter.metrics import StatisticsSnapshot
from pf_exporter.mock.generator import SimulatedPf


class MockFetcher(SnapshotFetcher):
    """Wraps the simulator as a standard fetcher."""

    def __init__(self, seed: int = 42, with_queues: bool = True):
        self._pf = SimulatedPf(seed=seed)
        self._with_queues = with_queues

    def fetch(self) -> StatisticsSnapshot:
        snapshot = self._pf.snapshot()
        if not self._with_queues:
            snapshot.queues = None
        return snapshot

    def name(self) -> str:
        return "Simulated pf (em0 loginterface)"
