"""
Turns a StatisticsSnapshot into metric samples.

Pure: no I/O, no state. The collector calls it with a freshly fetched
snapshot and the catalog it built at startup.
"""

from __future__ import annotations

from typing import Iterator, Mapping

from pf_exporter.catalog import QUEUE_METRICS, interface_metric_ids
from pf_exporter.errors import LabelMismatchError
from pf_exporter.metrics import MetricDescriptor, MetricSample, StatisticsSnapshot


def check_labels(sample: MetricSample, catalog: Mapping[str, MetricDescriptor]) -> MetricSample:
    desc = catalog[sample.descriptor_id]
    if len(sample.label_values) != len(desc.label_names):
        raise LabelMismatchError(
            sample.descriptor_id, len(desc.label_names), len(sample.label_values)
        )
    return sample


def _state_samples(snapshot: StatisticsSnapshot) -> Iterator[MetricSample]:
    state = snapshot.state
    yield MetricSample("state_total", state.total)
    yield MetricSample("state_searches", state.searches)
    yield MetricSample("state_inserts", state.inserts)
    yield MetricSample("state_removals", state.removals)


def _interface_samples(snapshot: StatisticsSnapshot) -> Iterator[MetricSample]:
    if not snapshot.has_interface:
        return
    for metric_id, proto, field_name in interface_metric_ids():
        counters = getattr(snapshot, proto)
        yield MetricSample(metric_id, getattr(counters, field_name))


def _queue_samples(snapshot: StatisticsSnapshot) -> Iterator[MetricSample]:
    if not snapshot.has_queues:
        return
    for queue in snapshot.queues:
        for metric_id, _, _, field_name in QUEUE_METRICS:
            yield MetricSample(metric_id, getattr(queue, field_name), queue.key)


def emit(
    snapshot: StatisticsSnapshot,
    catalog: Mapping[str, MetricDescriptor],
) -> Iterator[MetricSample]:
    """Yield every sample for one snapshot.

    Always 4 state samples, then 12 loginterface samples if an interface is
    set, then 4 per queue. Values are passed through as read from pf.
    """
    for samples in (_state_samples, _interface_samples, _queue_samples):
        for sample in samples(snapshot):
            yield check_labels(sample, catalog)
