"""
Implementation of the scrape: fetch every endpoint, decode it and fold the values into a snapshot.
"""

import asyncio
from typing import Any, Callable, Iterator, NamedTuple

import structlog
from aiohttp import ClientSession
from coda56 import metrics, normalize, parse
from coda56.client import ModemClient
from coda56.err.exceptions import DecodeError, TransportError
from coda56.metrics import MetricDef
from coda56.util.const import (
    DS_OFDM_ENDPOINT,
    DS_QAM_ENDPOINT,
    LINK_STATUS_ENDPOINT,
    SYS_INFO_ENDPOINT,
    US_OFDM_ENDPOINT,
    US_QAM_ENDPOINT,
)

log = structlog.get_logger(__name__)


class Observation(NamedTuple):
    metric: MetricDef
    labels: tuple[str, ...]
    value: float


class Snapshot:
    """Every labeled value produced by one pass over the modem.

    Keyed by (metric, label values). Adding the same key twice keeps the last value, so there is
    exactly one value per metric x label combination no matter what the modem sends.
    """

    def __init__(self):
        self._values: dict[tuple[MetricDef, tuple[str, ...]], float] = {}

    def add(self, metric: MetricDef, labels: tuple[str, ...] | list[str], value: float) -> None:
        labels = tuple(labels)
        if len(labels) != len(metric.labelnames):
            raise ValueError(
                f"{metric.name} takes {len(metric.labelnames)} labels, got {len(labels)}"
            )
        self._values[(metric, labels)] = float(value)

    def get(self, metric: MetricDef, *labels: str) -> float | None:
        return self._values.get((metric, tuple(labels)))

    def samples(self, metric: MetricDef) -> list[tuple[tuple[str, ...], float]]:
        """(labels, value) pairs for one metric, in the order they were added"""
        return [(k[1], v) for k, v in self._values.items() if k[0] == metric]

    def __iter__(self) -> Iterator[Observation]:
        for (metric, labels), value in self._values.items():
            yield Observation(metric, labels, value)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Snapshot({len(self)} observations)"


##
# Per endpoint: turn decoded records into observations.
# All the unit conversion / error tolerant parsing happens here via normalize.*
##
def observe_downstream(snapshot: Snapshot, channels: list[parse.DownstreamChannel]) -> None:
    for ch in channels:
        labels = (ch.channel_id, ch.frequency, ch.modulation)
        snapshot.add(metrics.DS_POWER, labels, normalize.to_float(ch.signal_strength))
        snapshot.add(metrics.DS_SNR, labels, normalize.to_float(ch.snr))
        snapshot.add(
            metrics.DS_FREQUENCY,
            (ch.channel_id, ch.modulation),
            normalize.to_float(ch.frequency),
        )
        snapshot.add(metrics.DS_CORRECTABLES, labels, normalize.to_int(ch.correcteds))
        snapshot.add(metrics.DS_UNCORRECTABLES, labels, normalize.to_int(ch.uncorrectables))
        # e.g. '53 * 2e32 + 4142950845'; see normalize.parse_large_counter
        snapshot.add(metrics.DS_OCTETS, labels, normalize.parse_large_counter(ch.octets))


def observe_upstream(snapshot: Snapshot, channels: list[parse.UpstreamChannel]) -> None:
    for ch in channels:
        labels = (ch.channel_id, ch.frequency, ch.modulation)
        snapshot.add(metrics.US_POWER, labels, normalize.to_float(ch.signal_strength))
        snapshot.add(
            metrics.US_FREQUENCY,
            (ch.channel_id, ch.modulation),
            normalize.to_float(ch.frequency),
        )
        snapshot.add(metrics.US_SYMBOL_RATE, labels, normalize.to_float(ch.bandwidth))


def observe_ofdm_downstream(
    snapshot: Snapshot, channels: list[parse.OfdmDownstreamChannel]
) -> None:
    for ch in channels:
        frequency = normalize.clean_label(ch.frequency)
        labels = (ch.receive, frequency, ch.fft_type)

        snapshot.add(metrics.OFDM_DS_POWER, labels, normalize.to_float(ch.plc_power))
        snapshot.add(metrics.OFDM_DS_SNR, labels, normalize.to_float(ch.snr))
        snapshot.add(
            metrics.OFDM_DS_FREQUENCY,
            (ch.receive, ch.fft_type),
            normalize.to_float(frequency),
        )
        snapshot.add(metrics.OFDM_DS_CORRECTABLES, labels, normalize.to_int(ch.correcteds))
        snapshot.add(
            metrics.OFDM_DS_UNCORRECTABLES, labels, normalize.to_int(ch.uncorrectables)
        )
        # Unlike QAM, OFDM octets are a plain integer
        snapshot.add(metrics.OFDM_DS_OCTETS, labels, normalize.parse_counter(ch.octets))

        # Three independent locks, one series each
        for lock_type, raw in (
            ("plc", ch.plc_lock),
            ("ncp", ch.ncp_lock),
            ("mdc1", ch.mdc1_lock),
        ):
            snapshot.add(
                metrics.OFDM_DS_LOCKS,
                (ch.receive, frequency, lock_type),
                normalize.token_flag(raw, "YES"),
            )


def observe_ofdm_upstream(snapshot: Snapshot, channels: list[parse.OfdmUpstreamChannel]) -> None:
    for ch in channels:
        state = normalize.clean_label(ch.state)
        frequency = normalize.to_float(ch.frequency)

        # Modem always reports a fixed number of OFDMA slots; unused ones have frequency 0.
        # No point in publishing power/bandwidth for a channel that isn't there.
        if frequency > 0:
            labels = (ch.usch_index, ch.frequency, state)
            snapshot.add(
                metrics.OFDM_US_POWER, labels, normalize.to_float(ch.rep_power.strip())
            )
            snapshot.add(metrics.OFDM_US_FREQUENCY, (ch.usch_index, state), frequency)
            snapshot.add(
                metrics.OFDM_US_BANDWIDTH, labels, normalize.to_float(ch.channel_bw.strip())
            )

        # State is always published, active or not
        snapshot.add(
            metrics.OFDM_US_STATE,
            (ch.usch_index, ch.frequency),
            normalize.token_flag(ch.state, "OPERATE"),
        )


def observe_link_status(snapshot: Snapshot, link_status: parse.LinkStatus) -> None:
    duplex = (link_status.duplex,)
    snapshot.add(metrics.LINK_STATUS, duplex, normalize.token_flag(link_status.status, "Up"))
    # '2500Mbps' -> 2500
    snapshot.add(
        metrics.LINK_SPEED, duplex, normalize.strip_suffix_float(link_status.speed, "Mbps")
    )


def observe_system_info(snapshot: Snapshot, sys_info: parse.SystemInfo) -> None:
    snapshot.add(
        metrics.SYSTEM_INFO,
        (sys_info.hw_version, sys_info.sw_version, sys_info.serial_number),
        1,
    )


# Endpoint -> (decoder, observer)
# Order here is the order results are folded into the snapshot.
ENDPOINTS: tuple[tuple[str, Callable[[bytes], Any], Callable[[Snapshot, Any], None]], ...] = (
    (DS_QAM_ENDPOINT, parse.decode_downstream, observe_downstream),
    (US_QAM_ENDPOINT, parse.decode_upstream, observe_upstream),
    (DS_OFDM_ENDPOINT, parse.decode_ofdm_downstream, observe_ofdm_downstream),
    (US_OFDM_ENDPOINT, parse.decode_ofdm_upstream, observe_ofdm_upstream),
    (LINK_STATUS_ENDPOINT, parse.decode_link_status, observe_link_status),
    (SYS_INFO_ENDPOINT, parse.decode_system_info, observe_system_info),
)


class SnapshotAggregator:
    """Builds a complete Snapshot from scratch every time collect() is called.

    Holds no state of its own beyond the client, so concurrent scrapes don't step on each other.
    """

    def __init__(self, client: ModemClient):
        self.client = client

    def collect(self) -> Snapshot:
        """Synchronous entry point; prometheus_client calls collectors from its server thread."""
        return asyncio.run(self.collect_async())

    async def collect_async(self) -> Snapshot:
        """Fetch + decode every endpoint concurrently, then fold into a snapshot in a fixed order.

        Never raises for modem problems. An endpoint that fails to fetch or decode is logged and left out.
        """
        async with self.client.session() as cs:
            results = await asyncio.gather(
                *(self._fetch_and_decode(cs, endpoint, decoder) for endpoint, decoder, _ in ENDPOINTS)
            )

        snapshot = Snapshot()
        for (_, _, observer), decoded in zip(ENDPOINTS, results):
            if decoded is None:
                continue
            observer(snapshot, decoded)

        log.info("Collected snapshot", observations=len(snapshot))
        return snapshot

    async def _fetch_and_decode(
        self, cs: ClientSession, endpoint: str, decoder: Callable[[bytes], Any]
    ) -> Any | None:
        try:
            raw = await self.client.fetch(cs, endpoint)
        except TransportError as e:
            log.error("Failed to get endpoint; skipping", endpoint=endpoint, error=e.message)
            metrics.c_meta_parse_result.labels(endpoint, False).inc()
            return None

        try:
            decoded = decoder(raw)
        except DecodeError as e:
            log.error("Failed to decode endpoint; skipping", endpoint=endpoint, error=e.message)
            metrics.c_meta_parse_result.labels(endpoint, False).inc()
            return None

        metrics.c_meta_parse_result.labels(endpoint, True).inc()
        return decoded
