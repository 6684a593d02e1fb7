"""
Descriptor catalog for the exported pf metrics.

Built once when the collector is constructed. Every descriptor is advertised
on every platform, including queue metrics on systems without queue support;
those descriptors just never produce samples there.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, List, Mapping, Tuple

from pf_exporter.metrics import COUNTER, GAUGE, MetricDescriptor

DEFAULT_NAMESPACE = "pf"

QUEUE_LABELS = ("queue", "interface")

# (id, subsystem, name, kind, help)
_STATE_METRICS = [
    ("state_total", "state", "total", GAUGE, "Number of pf states."),
    ("state_searches", "state", "searches_total", COUNTER, "Number of pf state searches."),
    ("state_inserts", "state", "inserts_total", COUNTER, "Number of pf state inserts."),
    ("state_removals", "state", "removals_total", COUNTER, "Number of pf state removals."),
]

# Field on ProtocolCounters -> help text fragment
INTERFACE_FIELDS = [
    ("bytes_in", "bytes in"),
    ("bytes_out", "bytes out"),
    ("packets_in_passed", "packets passed in"),
    ("packets_in_blocked", "packets blocked in"),
    ("packets_out_passed", "packets passed out"),
    ("packets_out_blocked", "packets blocked out"),
]

PROTOCOLS = [("ipv4", "IPv4"), ("ipv6", "IPv6")]

# id, name, help fragment, QueueEntry field
QUEUE_METRICS = [
    ("queue_xmit_packets", "queue_transmitted_packets_total", "transmitted packets", "transmit_packets"),
    ("queue_xmit_bytes", "queue_transmitted_bytes_total", "transmitted bytes", "transmit_bytes"),
    ("queue_dropped_packets", "queue_dropped_packets_total", "dropped packets", "dropped_packets"),
    ("queue_dropped_bytes", "queue_dropped_bytes_total", "dropped bytes", "dropped_bytes"),
]


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores, like Prometheus client libraries do."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


def _interface_metrics(namespace: str) -> List[MetricDescriptor]:
    descs = []
    for proto, proto_label in PROTOCOLS:
        for field_name, what in INTERFACE_FIELDS:
            descs.append(MetricDescriptor(
                id=f"{proto}_{field_name}",
                name=build_fq_name(namespace, proto, f"{field_name}_total"),
                help_text=f"Number of {what} on the pf loginterface over {proto_label}.",
                kind=COUNTER,
            ))
    return descs


def _queue_metrics(namespace: str) -> List[MetricDescriptor]:
    return [
        MetricDescriptor(
            id=metric_id,
            name=build_fq_name(namespace, "stats", name),
            help_text=f"Number of {what} in a queue partitioned by queue name and interface.",
            kind=COUNTER,
            label_names=QUEUE_LABELS,
        )
        for metric_id, name, what, _ in QUEUE_METRICS
    ]


def build_catalog(namespace: str = DEFAULT_NAMESPACE) -> Mapping[str, MetricDescriptor]:
    """Build the read-only id -> descriptor mapping. Deterministic, no I/O."""
    descs = [
        MetricDescriptor(
            id=metric_id,
            name=build_fq_name(namespace, subsystem, name),
            help_text=help_text,
            kind=kind,
        )
        for metric_id, subsystem, name, kind, help_text in _STATE_METRICS
    ]
    descs += _interface_metrics(namespace)
    descs += _queue_metrics(namespace)

    catalog = {}
    for desc in descs:
        if desc.id in catalog:
            raise ValueError(f"duplicate metric id: {desc.id}")
        catalog[desc.id] = desc
    return MappingProxyType(catalog)


def describe(catalog: Mapping[str, MetricDescriptor]) -> Iterator[MetricDescriptor]:
    yield from catalog.values()


def interface_metric_ids() -> List[Tuple[str, str, str]]:
    """(metric id, protocol attribute, counter field) for every interface metric."""
    return [
        (f"{proto}_{field_name}", proto, field_name)
        for proto, _ in PROTOCOLS
        for field_name, _ in INTERFACE_FIELDS
    ]
