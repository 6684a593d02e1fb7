"""
The pf collector: bridges a SnapshotFetcher to a prometheus_client registry.

Every scrape fetches a fresh snapshot; nothing is cached between scrapes.
The pf handle is not safe for concurrent use, so a lock is held from the
start of the fetch until all samples for that snapshot are built. A scrape
that arrives meanwhile waits, then does its own fetch.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Iterator, List, Mapping, Optional

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from pf_exporter.catalog import DEFAULT_NAMESPACE, build_catalog, describe
from pf_exporter.collector.base import SnapshotFetcher
from pf_exporter.emitter import emit
from pf_exporter.errors import FetchError
from pf_exporter.metrics import GAUGE, MetricDescriptor, MetricSample

log = logging.getLogger(__name__)


def new_family(desc: MetricDescriptor) -> Metric:
    cls = GaugeMetricFamily if desc.kind == GAUGE else CounterMetricFamily
    return cls(desc.name, desc.help_text, labels=list(desc.label_names))


class PfCollector:
    """Custom collector for prometheus_client. Register it once per process."""

    def __init__(self, fetcher: SnapshotFetcher, namespace: str = DEFAULT_NAMESPACE):
        self._fetcher = fetcher
        self._catalog = build_catalog(namespace)
        self._lock = threading.Lock()

    @property
    def catalog(self) -> Mapping[str, MetricDescriptor]:
        return self._catalog

    def descriptors(self) -> Iterator[MetricDescriptor]:
        return describe(self._catalog)

    def describe(self) -> Iterator[Metric]:
        """Empty families for every descriptor. Never touches pf."""
        for desc in self.descriptors():
            yield new_family(desc)

    def collect_samples(self) -> List[MetricSample]:
        """Fetch and emit one cycle. Returns no samples if pf couldn't be read."""
        with self._lock:
            try:
                snapshot = self._fetcher.fetch()
            except FetchError as e:
                log.error("failed to get pf stats: %s", e)
                return []
            samples = list(emit(snapshot, self._catalog))

        log.debug("collected %d samples from %s: %s",
                  len(samples), self._fetcher.name(), snapshot.summary())
        return samples

    def collect(self) -> Iterator[Metric]:
        families: "OrderedDict[str, Metric]" = OrderedDict()
        for sample in self.collect_samples():
            family: Optional[Metric] = families.get(sample.descriptor_id)
            if family is None:
                family = new_family(self._catalog[sample.descriptor_id])
                families[sample.descriptor_id] = family
            family.add_metric(list(sample.label_values), sample.value)

        # Catalog order keeps the exposition output stable between scrapes
        for metric_id in self._catalog:
            if metric_id in families:
                yield families[metric_id]

    def close(self):
        self._fetcher.close()
