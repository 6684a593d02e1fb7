"""
Core data types for pf-exporter.

A StatisticsSnapshot is one read of pf's counters. The interface and queue
sections are optional: pf only keeps per-protocol counters for the configured
loginterface, and only some platforms expose queue statistics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

GAUGE = "gauge"
COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    """Static metadata for one exported metric."""

    id: str
    name: str                       # fully qualified, e.g. pf_state_total
    help_text: str
    kind: str                       # GAUGE or COUNTER
    label_names: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetricSample:
    descriptor_id: str
    value: float
    label_values: Tuple[str, ...] = ()


@dataclass
class StateCounters:
    total: int = 0          # current entries
    searches: int = 0
    inserts: int = 0
    removals: int = 0


@dataclass
class ProtocolCounters:
    """Loginterface counters for a single address family."""

    bytes_in: int = 0
    bytes_out: int = 0
    packets_in_passed: int = 0
    packets_in_blocked: int = 0
    packets_out_passed: int = 0
    packets_out_blocked: int = 0


@dataclass
class QueueEntry:
    name: str
    interface: str
    transmit_packets: int = 0
    transmit_bytes: int = 0
    dropped_packets: int = 0
    dropped_bytes: int = 0

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.interface)


@dataclass
class StatisticsSnapshot:
    """A single point-in-time reading of pf statistics."""

    state: StateCounters = field(default_factory=StateCounters)

    # Empty when no loginterface is set; ipv4/ipv6 are meaningless then
    interface: str = ""
    ipv4: ProtocolCounters = field(default_factory=ProtocolCounters)
    ipv6: ProtocolCounters = field(default_factory=ProtocolCounters)

    # None when queues are unsupported or could not be read this cycle
    queues: Optional[List[QueueEntry]] = None

    @property
    def has_interface(self) -> bool:
        return self.interface != ""

    @property
    def has_queues(self) -> bool:
        return self.queues is not None

    def summary(self) -> dict:
        """Return a plain dict for display or logging."""
        return {
            "states": self.state.total,
            "searches": self.state.searches,
            "inserts": self.state.inserts,
            "removals": self.state.removals,
            "interface": self.interface or None,
            "queues": len(self.queues) if self.queues is not None else None,
        }
