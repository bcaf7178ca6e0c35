"""
Custom prometheus_client collector that polls the modem every time /metrics is scraped.
"""

from typing import Iterator

import structlog
from coda56.metrics import ALL_METRICS, MetricDef
from coda56.scrape import Snapshot, SnapshotAggregator
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

log = structlog.get_logger(__name__)


def _family(metric: MetricDef) -> GaugeMetricFamily:
    return GaugeMetricFamily(metric.name, metric.documentation, labels=list(metric.labelnames))


def snapshot_to_families(snapshot: Snapshot) -> list[GaugeMetricFamily]:
    """One GaugeMetricFamily per known metric, even if the snapshot has no samples for it."""
    families = []
    for metric in ALL_METRICS:
        family = _family(metric)
        for labels, value in snapshot.samples(metric):
            family.add_metric(list(labels), value)
        families.append(family)
    return families


class ModemCollector(Collector):
    """Everything is a gauge.

    Even the error 'totals'; the modem resets them whenever it feels like it so treating them
    as counters would produce garbage rates.
    """

    def __init__(self, aggregator: SnapshotAggregator):
        self.aggregator = aggregator

    def describe(self) -> Iterator[GaugeMetricFamily]:
        # Without describe(), registering the collector would call collect() and hit the modem
        for metric in ALL_METRICS:
            yield _family(metric)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        log.debug("Scrape requested; polling modem")
        snapshot = self.aggregator.collect()
        yield from snapshot_to_families(snapshot)
