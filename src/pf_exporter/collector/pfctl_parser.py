"""
Parsers for `pfctl -s info` and `pfctl -s queue -v` output.

Covers the layouts printed by OpenBSD and FreeBSD pfctl. Only the sections
the exporter needs are read; everything else is skipped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List

from pf_exporter.metrics import ProtocolCounters, QueueEntry, StateCounters

# Interface Stats for em0               IPv4             IPv6
_IFACE_HEADER_RE = re.compile(r"^Interface Stats for (\S+)")

# "  Bytes In     12345     0" / "    Passed     12     0"
_PAIR_RE = re.compile(r"^\s+([A-Za-z][A-Za-z ]*?)\s+(-?\d+)\s+(-?\d+)\s*$")

# "  searches     301468    259.4/s"
_STATE_RE = re.compile(r"^\s+([a-z][a-z -]*?)\s+(-?\d+)(?:\s+\S+)?\s*$")

# queue rootq on em0 bandwidth 1G max 1G qlimit 50
# queue ssh parent rootq bandwidth 10M qlimit 50
_QUEUE_RE = re.compile(r"^queue\s+(\S+)\s+(?:on\s+(\S+)|parent\s+(\S+))")

# [ pkts:  1234  bytes:  567890  dropped pkts:  0 bytes:  0 ]
_QUEUE_STATS_RE = re.compile(
    r"pkts:\s*(-?\d+)\s+bytes:\s*(-?\d+)\s+dropped pkts:\s*(-?\d+)\s+bytes:\s*(-?\d+)"
)

_STATE_FIELDS = {
    "current entries": "total",
    "searches": "searches",
    "inserts": "inserts",
    "removals": "removals",
}


@dataclass
class PfInfo:
    state: StateCounters
    interface: str = ""
    ipv4: ProtocolCounters = field(default_factory=ProtocolCounters)
    ipv6: ProtocolCounters = field(default_factory=ProtocolCounters)


def _interface_field(label: str, direction: str) -> str:
    label = label.lower()
    if label == "bytes in":
        return "bytes_in"
    if label == "bytes out":
        return "bytes_out"
    if label in ("passed", "blocked") and direction:
        return f"packets_{direction}_{label}"
    return ""


def parse_info(text: str) -> PfInfo:
    """Parse `pfctl -s info`. Raises ValueError if there is no state table."""
    state = StateCounters()
    info = PfInfo(state=state)
    seen_state_table = False

    section = None
    direction = ""

    for line in text.splitlines():
        if not line.strip():
            continue

        # Non-indented lines start a new section
        if not line[0].isspace():
            direction = ""
            match = _IFACE_HEADER_RE.match(line)
            if match:
                section = "interface"
                info.interface = match.group(1)
            elif line.startswith("State Table"):
                section = "state"
                seen_state_table = True
            else:
                section = None
            continue

        if section == "interface":
            stripped = line.strip()
            if stripped in ("Packets In", "Packets Out"):
                direction = stripped.split()[1].lower()
                continue
            match = _PAIR_RE.match(line)
            if not match:
                continue
            field_name = _interface_field(match.group(1), direction)
            if field_name:
                setattr(info.ipv4, field_name, int(match.group(2)))
                setattr(info.ipv6, field_name, int(match.group(3)))

        elif section == "state":
            match = _STATE_RE.match(line)
            if not match:
                continue
            attr = _STATE_FIELDS.get(match.group(1))
            if attr:
                setattr(state, attr, int(match.group(2)))

    if not seen_state_table:
        raise ValueError("no State Table section in pfctl output")
    return info


def parse_queues(text: str) -> List[QueueEntry]:
    """Parse `pfctl -s queue -v`. Queues without a stats line read as zero.

    Root queues name their interface ("on em0"); child queues only name
    their parent and take the parent's interface.
    """
    queues: List[QueueEntry] = []
    interfaces: Dict[str, str] = {}
    current = None

    for line in text.splitlines():
        if line.startswith("queue"):
            current = None
            match = _QUEUE_RE.match(line)
            if not match:
                continue
            name, ifname, parent = match.groups()
            if ifname is None:
                ifname = interfaces.get(parent)
                if ifname is None:
                    continue
            # pfctl prints parents before children, so the latest name wins
            interfaces[name] = ifname
            current = QueueEntry(name=name, interface=ifname)
            queues.append(current)
            continue

        if current is None:
            continue

        match = _QUEUE_STATS_RE.search(line)
        if match:
            current.transmit_packets = int(match.group(1))
            current.transmit_bytes = int(match.group(2))
            current.dropped_packets = int(match.group(3))
            current.dropped_bytes = int(match.group(4))

    return queues
