"""All the boiler plate / init code for defining metrics.

Modem metrics are NOT prometheus_client Gauge objects that we .set() between scrapes.
The modem is polled on demand whenever /metrics is hit so each scrape builds a fresh snapshot and
the collector turns that into metric families. What lives here is just the schema: name, help text
and label names for each metric. It's built once at import and never touched again.

The meta metrics (how long is the modem taking, how often does it fail) ARE regular
prometheus_client objects on the default registry; those accumulate over the life of the process.
"""

from dataclasses import dataclass

from prometheus_client import Counter, Summary, disable_created_metrics

# By default, client will automatically create a "_created" meta metric for
#   each metric defined below.
# Having the unix epoch time of when the metric was created isn't that useful for us
#   so we'll disable it.
disable_created_metrics()


METRICS_NS = "hitron"
META_NS = "meta"


@dataclass(frozen=True)
class MetricDef:
    """Name, help text and label names for a modem metric"""

    name: str
    documentation: str
    labelnames: tuple[str, ...]


##
# Meta Metrics
##
# summary comes with both a count and a sum so we don't need to count the number of scrapes ourselves
s_meta_scrape_time = Summary(
    f"{META_NS}_request_duration_seconds",
    "Time spent waiting for modem to respond",
    # One label value per endpoint; bounded
    labelnames=["scrape_target"],
)

# We count the number of successful vs failed requests for each endpoint
c_meta_scrape_result = Counter(
    f"{META_NS}_scrape_result",
    "Count of successful vs failed scrapes",
    # http_code is 'error' if the request never got a response
    labelnames=["http_code", "scrape_target"],
)

c_meta_parse_result = Counter(
    f"{META_NS}_parse_result",
    "Count of successful vs failed parse attempts",
    labelnames=["parse_target", "parse_result"],
)


##
# Downstream (QAM) metrics
##
# channel_id + frequency + modulation identify a channel.
# Frequency is left off the frequency metric itself, it'd be redundant.
##
_DS_LABELS = ("channel_id", "frequency", "modulation")

DS_POWER = MetricDef(
    f"{METRICS_NS}_downstream_power_dbmv",
    "Downstream channel power level in dBmV",
    _DS_LABELS,
)
DS_SNR = MetricDef(
    f"{METRICS_NS}_downstream_snr_db",
    "Downstream channel signal-to-noise ratio in dB",
    _DS_LABELS,
)
DS_FREQUENCY = MetricDef(
    f"{METRICS_NS}_downstream_frequency_hz",
    "Downstream channel frequency in Hz",
    ("channel_id", "modulation"),
)
# Modem resets these on reboot (and sometimes for no reason at all) so they're exposed
#   as gauges holding whatever the modem reported, not counters we add to.
DS_CORRECTABLES = MetricDef(
    f"{METRICS_NS}_downstream_correctables_total",
    "Total number of correctable errors on downstream channel",
    _DS_LABELS,
)
DS_UNCORRECTABLES = MetricDef(
    f"{METRICS_NS}_downstream_uncorrectables_total",
    "Total number of uncorrectable errors on downstream channel",
    _DS_LABELS,
)
DS_OCTETS = MetricDef(
    f"{METRICS_NS}_downstream_octets_bytes",
    "Number of octets (bytes) received on downstream channel",
    _DS_LABELS,
)

##
# Upstream (QAM) metrics
##
_US_LABELS = ("channel_id", "frequency", "modulation")

US_POWER = MetricDef(
    f"{METRICS_NS}_upstream_power_dbmv",
    "Upstream channel power level in dBmV",
    _US_LABELS,
)
US_FREQUENCY = MetricDef(
    f"{METRICS_NS}_upstream_frequency_hz",
    "Upstream channel frequency in Hz",
    ("channel_id", "modulation"),
)
# The modem calls this 'bandwidth' but it's the symbol rate
US_SYMBOL_RATE = MetricDef(
    f"{METRICS_NS}_upstream_symbol_rate",
    "Upstream channel symbol rate",
    _US_LABELS,
)

##
# OFDM downstream metrics
##
_OFDM_DS_LABELS = ("receive", "frequency", "fft_type")

OFDM_DS_POWER = MetricDef(
    f"{METRICS_NS}_ofdm_downstream_power_dbmv",
    "OFDM downstream channel power level in dBmV",
    _OFDM_DS_LABELS,
)
OFDM_DS_SNR = MetricDef(
    f"{METRICS_NS}_ofdm_downstream_snr_db",
    "OFDM downstream channel signal-to-noise ratio in dB",
    _OFDM_DS_LABELS,
)
OFDM_DS_FREQUENCY = MetricDef(
    f"{METRICS_NS}_ofdm_downstream_frequency_hz",
    "OFDM downstream channel frequency in Hz",
    ("receive", "fft_type"),
)
OFDM_DS_CORRECTABLES = MetricDef(
    f"{METRICS_NS}_ofdm_downstream_correctables_total",
    "Total number of correctable errors on OFDM downstream channel",
    _OFDM_DS_LABELS,
)
OFDM_DS_UNCORRECTABLES = MetricDef(
    f"{METRICS_NS}_ofdm_downstream_uncorrectables_total",
    "Total number of uncorrectable errors on OFDM downstream channel",
    _OFDM_DS_LABELS,
)
OFDM_DS_OCTETS = MetricDef(
    f"{METRICS_NS}_ofdm_downstream_octets_bytes",
    "Number of octets (bytes) received on OFDM downstream channel",
    _OFDM_DS_LABELS,
)
# One series per lock type: plc, ncp, mdc1
OFDM_DS_LOCKS = MetricDef(
    f"{METRICS_NS}_ofdm_downstream_locks",
    "OFDM downstream channel lock status (1 = locked, 0 = unlocked)",
    ("receive", "frequency", "lock_type"),
)

##
# OFDM upstream metrics
##
_OFDM_US_LABELS = ("usch_index", "frequency", "state")

OFDM_US_POWER = MetricDef(
    f"{METRICS_NS}_ofdm_upstream_power_dbmv",
    "OFDM upstream channel power level in dBmV",
    _OFDM_US_LABELS,
)
OFDM_US_FREQUENCY = MetricDef(
    f"{METRICS_NS}_ofdm_upstream_frequency_hz",
    "OFDM upstream channel frequency in Hz",
    ("usch_index", "state"),
)
OFDM_US_BANDWIDTH = MetricDef(
    f"{METRICS_NS}_ofdm_upstream_bandwidth_mhz",
    "OFDM upstream channel bandwidth in MHz",
    _OFDM_US_LABELS,
)
OFDM_US_STATE = MetricDef(
    f"{METRICS_NS}_ofdm_upstream_state",
    "OFDM upstream channel state (1 = operate, 0 = disabled)",
    ("usch_index", "frequency"),
)

##
# Link / general hardware info
##
LINK_STATUS = MetricDef(
    f"{METRICS_NS}_link_status",
    "Link status (1 = up, 0 = down)",
    ("duplex",),
)
LINK_SPEED = MetricDef(
    f"{METRICS_NS}_link_speed_mbps",
    "Link speed in Mbps",
    ("duplex",),
)

# Always 1; the interesting part is the labels.
# These are not expected to change often so cardinality isn't a concern.
SYSTEM_INFO = MetricDef(
    f"{METRICS_NS}_system_info",
    "System information",
    ("hardware_version", "software_version", "serial_number"),
)

# Order here is the order metric families are exposed in
ALL_METRICS: tuple[MetricDef, ...] = (
    DS_POWER,
    DS_SNR,
    DS_FREQUENCY,
    DS_CORRECTABLES,
    DS_UNCORRECTABLES,
    DS_OCTETS,
    US_POWER,
    US_FREQUENCY,
    US_SYMBOL_RATE,
    OFDM_DS_POWER,
    OFDM_DS_SNR,
    OFDM_DS_FREQUENCY,
    OFDM_DS_CORRECTABLES,
    OFDM_DS_UNCORRECTABLES,
    OFDM_DS_OCTETS,
    OFDM_DS_LOCKS,
    OFDM_US_POWER,
    OFDM_US_FREQUENCY,
    OFDM_US_BANDWIDTH,
    OFDM_US_STATE,
    LINK_STATUS,
    LINK_SPEED,
    SYSTEM_INFO,
)
