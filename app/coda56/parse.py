"""
Decoders for the JSON the CODA56 hands back from each of its `/data/*.asp` endpoints.

Every endpoint replies with a JSON array of flat objects; one object per channel (or a single
object for system info / link status). Values are almost always strings, even the numeric ones.

Decoders here only care about shape. They don't convert anything; that happens in normalize.py
once we know which metric a value is going into.
"""

import json
from dataclasses import dataclass, field, fields

import structlog
from coda56.err.exceptions import DecodeError, EmptyResponseError

log = structlog.get_logger(__name__)


def _key(name: str):
    """Maps a dataclass field onto the JSON key the modem uses for it"""
    return field(default="", metadata={"json": name})


@dataclass(frozen=True)
class DownstreamChannel:
    port_id: str = _key("portId")
    frequency: str = _key("frequency")
    modulation: str = _key("modulation")
    signal_strength: str = _key("signalStrength")
    snr: str = _key("snr")
    octets: str = _key("dsoctets")
    correcteds: str = _key("correcteds")
    uncorrectables: str = _key("uncorrect")
    channel_id: str = _key("channelId")


@dataclass(frozen=True)
class UpstreamChannel:
    port_id: str = _key("portId")
    frequency: str = _key("frequency")
    bandwidth: str = _key("bandwidth")
    modulation: str = _key("modtype")
    scdma_mode: str = _key("scdmaMode")
    signal_strength: str = _key("signalStrength")
    channel_id: str = _key("channelId")


@dataclass(frozen=True)
class OfdmDownstreamChannel:
    receive: str = _key("receive")
    fft_type: str = _key("ffttype")
    # Frequency of the first subcarrier; the modem pads this one with spaces
    frequency: str = _key("Subcarr0freqFreq")
    plc_lock: str = _key("plclock")
    ncp_lock: str = _key("ncplock")
    mdc1_lock: str = _key("mdc1lock")
    plc_power: str = _key("plcpower")
    snr: str = _key("SNR")
    octets: str = _key("dsoctets")
    correcteds: str = _key("correcteds")
    uncorrectables: str = _key("uncorrect")


@dataclass(frozen=True)
class OfdmUpstreamChannel:
    usch_index: str = _key("uschindex")
    state: str = _key("state")
    frequency: str = _key("frequency")
    dig_atten: str = _key("digAtten")
    dig_atten_bo: str = _key("digAttenBo")
    channel_bw: str = _key("channelBw")
    rep_power: str = _key("repPower")
    rep_power_1_6: str = _key("repPower1_6")
    fft_val: str = _key("fftVal")


@dataclass(frozen=True)
class LinkStatus:
    status: str = _key("LinkStatus")
    duplex: str = _key("LinkDuplex")
    speed: str = _key("LinkSpeed")


@dataclass(frozen=True)
class SystemInfo:
    hw_version: str = _key("hwVersion")
    sw_version: str = _key("swVersion")
    serial_number: str = _key("serialNumber")
    rf_mac: str = _key("rfMac")
    wan_ip: str = _key("wanIp")
    system_uptime: str = _key("systemUptime")
    system_time: str = _key("systemTime")
    timezone: str = _key("timezone")
    wan_rx_packets: str = _key("WRecPkt")
    wan_tx_packets: str = _key("WSendPkt")
    lan_ip: str = _key("lanIp")
    lan_rx_packets: str = _key("LRecPkt")
    lan_tx_packets: str = _key("LSendPkt")


def _as_text(value) -> str:
    """The modem *usually* quotes everything but we'll take a bare number too."""
    if value is None:
        return ""
    if isinstance(value, bool):
        # json.dumps so True -> 'true' like it was on the wire
        return json.dumps(value)
    if isinstance(value, str):
        return value
    return str(value)


def _to_record(record_type, obj: dict):
    kwargs = {f.name: _as_text(obj.get(f.metadata["json"])) for f in fields(record_type)}
    return record_type(**kwargs)


def _decode_array(raw: bytes, record_type, what: str) -> list:
    """Parse the raw body into a list of `record_type`.

    Raises DecodeError if the body isn't a JSON array of objects.
    """
    try:
        parsed = json.loads(raw)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise DecodeError(f"failed to parse {what} JSON: {e}", payload=raw) from e

    if not isinstance(parsed, list):
        raise DecodeError(
            f"failed to parse {what} JSON: expected array, got {type(parsed).__name__}",
            payload=raw,
        )

    records = []
    for idx, obj in enumerate(parsed):
        if not isinstance(obj, dict):
            raise DecodeError(
                f"failed to parse {what} JSON: element {idx} is {type(obj).__name__}, not object",
                payload=raw,
            )
        records.append(_to_record(record_type, obj))
    return records


def _decode_single(raw: bytes, record_type, what: str):
    records = _decode_array(raw, record_type, what)
    if len(records) == 0:
        raise EmptyResponseError(f"empty {what} response", payload=raw)
    # Only ever seen one element here; ignore anything extra
    return records[0]


def decode_downstream(raw: bytes) -> list[DownstreamChannel]:
    """QAM downstream channels from dsinfo.asp"""
    channels = _decode_array(raw, DownstreamChannel, "downstream info")
    log.debug("Parsed downstream channels", count=len(channels))
    return channels


def decode_upstream(raw: bytes) -> list[UpstreamChannel]:
    """QAM upstream channels from usinfo.asp"""
    channels = _decode_array(raw, UpstreamChannel, "upstream info")
    log.debug("Parsed upstream channels", count=len(channels))
    return channels


def decode_ofdm_downstream(raw: bytes) -> list[OfdmDownstreamChannel]:
    """Wrapper"""
    channels = _decode_array(raw, OfdmDownstreamChannel, "OFDM downstream info")
    log.debug("Parsed OFDM downstream channels", count=len(channels))
    return channels


def decode_ofdm_upstream(raw: bytes) -> list[OfdmUpstreamChannel]:
    """Wrapper"""
    channels = _decode_array(raw, OfdmUpstreamChannel, "OFDM upstream info")
    log.debug("Parsed OFDM upstream channels", count=len(channels))
    return channels


def decode_link_status(raw: bytes) -> LinkStatus:
    """Single record; zero records is an EmptyResponseError"""
    link_status = _decode_single(raw, LinkStatus, "link status")
    log.debug("Parsed link status", status=link_status.status, duplex=link_status.duplex)
    return link_status


def decode_system_info(raw: bytes) -> SystemInfo:
    """Single record; zero records is an EmptyResponseError

    Only the hardware/software version and serial number make it into a metric but the
    rest is kept around since it's in the payload anyway.
    """
    sys_info = _decode_single(raw, SystemInfo, "system info")
    log.debug(
        "Parsed system info",
        hw=sys_info.hw_version,
        sw=sys_info.sw_version,
        sn=sys_info.serial_number,
    )
    return sys_info
