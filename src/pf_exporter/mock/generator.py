"""
Simulated pf statistics.

Produces fake but plausible counters so the exporter can be developed and
demoed on machines without pf. Numbers are loosely based on a small office
gateway: a few hundred states, one loginterface, a handful of queues.
"""

import math
import random

from pf_exporter.metrics import (
    ProtocolCounters,
    QueueEntry,
    StateCounters,
    StatisticsSnapshot,
)

DEFAULT_QUEUES = [("std", "em0"), ("ssh", "em0"), ("bulk", "em0"), ("std", "em1")]


class SimulatedPf:

    def __init__(self, seed: int = 42, interface: str = "em0", queues=None):
        self._rng = random.Random(seed)
        self._tick = 0
        self.interface = interface
        self._queue_keys = list(DEFAULT_QUEUES if queues is None else queues)

        self._searches = 0
        self._inserts = 0
        self._removals = 0
        self._ipv4 = ProtocolCounters()
        self._ipv6 = ProtocolCounters()
        self._queues = {key: QueueEntry(name=key[0], interface=key[1]) for key in self._queue_keys}

    def _advance_protocol(self, counters: ProtocolCounters, scale: float):
        pkts_in = int(self._rng.uniform(200, 800) * scale)
        pkts_out = int(self._rng.uniform(150, 600) * scale)
        blocked_in = int(pkts_in * self._rng.uniform(0.0, 0.05))
        blocked_out = int(pkts_out * self._rng.uniform(0.0, 0.01))

        counters.packets_in_passed += pkts_in - blocked_in
        counters.packets_in_blocked += blocked_in
        counters.packets_out_passed += pkts_out - blocked_out
        counters.packets_out_blocked += blocked_out
        counters.bytes_in += (pkts_in - blocked_in) * self._rng.randint(60, 1400)
        counters.bytes_out += (pkts_out - blocked_out) * self._rng.randint(60, 1400)

    def snapshot(self) -> StatisticsSnapshot:
        """Generate one reading, advancing the simulation clock."""
        self._tick += 1
        t = self._tick

        # Connection churn follows a slow daily-ish wave
        new_states = max(0, int(40 + 25 * math.sin(t * 0.05) + self._rng.gauss(0, 5)))
        self._inserts += new_states
        self._removals += max(0, new_states - self._rng.randint(-3, 3))
        self._removals = min(self._removals, self._inserts)
        self._searches += new_states * self._rng.randint(20, 40)

        self._advance_protocol(self._ipv4, 1.0)
        self._advance_protocol(self._ipv6, 0.2)

        for queue in self._queues.values():
            pkts = self._rng.randint(0, 300)
            dropped = pkts // 100 if self._rng.random() > 0.8 else 0
            queue.transmit_packets += pkts - dropped
            queue.transmit_bytes += (pkts - dropped) * self._rng.randint(60, 1400)
            queue.dropped_packets += dropped
            queue.dropped_bytes += dropped * 1400

        def copy(c: ProtocolCounters) -> ProtocolCounters:
            return ProtocolCounters(**vars(c))

        return StatisticsSnapshot(
            state=StateCounters(
                total=self._inserts - self._removals,
                searches=self._searches,
                inserts=self._inserts,
                removals=self._removals,
            ),
            interface=self.interface,
            ipv4=copy(self._ipv4),
            ipv6=copy(self._ipv6),
            queues=[QueueEntry(**vars(q)) for q in self._queues.values()],
        )
