import logging
from enum import Enum

# The modem's own status page fetches these with XHR; mimic that just in case the firmware cares.
REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64; rv:123.4) Gecko/20100101 Firefox/123.4",
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "Accept-Language": "en-US,en;q=0.5",
    "X-Requested-With": "XMLHttpRequest",
    "Pragma": "no-cache",
    "Cache-Control": "no-cache",
}

# Every telemetry endpoint lives under this path on the modem
DATA_PATH = "data"

DS_QAM_ENDPOINT = "dsinfo.asp"
DS_OFDM_ENDPOINT = "dsofdminfo.asp"
US_QAM_ENDPOINT = "usinfo.asp"
US_OFDM_ENDPOINT = "usofdminfo.asp"
SYS_INFO_ENDPOINT = "getSysInfo.asp"
LINK_STATUS_ENDPOINT = "getLinkStatus.asp"

# Roughly int64 max. Anything above this in the octet counter encoding is treated as garbage.
LARGE_COUNTER_LIMIT = 9.223372036854775e18


class LogLevel(Enum):
    """Simple enum of supported log levels for easy validation"""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL
