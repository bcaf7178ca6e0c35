"""
Thin HTTP client for the modem's `/data/*.asp` endpoints.
"""

import asyncio
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from aiohttp import ClientError, ClientSession, ClientTimeout
from coda56 import metrics
from coda56.err.exceptions import TransportError
from coda56.util.const import DATA_PATH, REQUEST_HEADERS

log = structlog.get_logger(__name__)


class ModemClient:
    """Knows where the modem is and how to GET things from it.

    Built once at startup. Sessions are not held on to; each collection pass opens its own with
    `session()` since a ClientSession is tied to the event loop it was created in.
    """

    def __init__(self, base_url: str, timeout: float):
        self.base_url = base_url.rstrip("/")
        self.timeout = ClientTimeout(total=timeout)

        # Modem ships a self-signed cert and there's no way to replace it, so don't bother verifying.
        ##
        # pylint: disable = protected-access / W0212
        self._ssl_context = ssl._create_unverified_context(
            purpose=ssl.Purpose.SERVER_AUTH,
            check_hostname=False,
        )

    def url_for(self, endpoint: str) -> str:
        """E.G.: dsinfo.asp -> https://192.168.100.1/data/dsinfo.asp"""
        return f"{self.base_url}/{DATA_PATH}/{endpoint}"

    @asynccontextmanager
    async def session(self) -> AsyncIterator[ClientSession]:
        """A ClientSession configured for talking to the modem"""
        async with ClientSession(headers=REQUEST_HEADERS, timeout=self.timeout) as cs:
            yield cs

    async def fetch(self, cs: ClientSession, endpoint: str) -> bytes:
        """GET a single endpoint and return the raw body.

        Raises TransportError if the request could not be sent, timed out, came back with
        anything other than 200/OK or the body could not be read in full.
        """
        url = self.url_for(endpoint)
        log.info("Requesting", url=url)

        with metrics.s_meta_scrape_time.labels(endpoint).time():
            try:
                async with cs.get(url, ssl=self._ssl_context) as resp:
                    metrics.c_meta_scrape_result.labels(resp.status, endpoint).inc()
                    if resp.status != 200:
                        _e = f"unexpected status code {resp.status} for {endpoint}"
                        log.error(_e, url=url, status=resp.status)
                        raise TransportError(_e, status_code=resp.status)

                    try:
                        return await resp.read()
                    except (ClientError, asyncio.TimeoutError) as e:
                        _e = f"failed to read response body for {endpoint}"
                        log.error(_e, url=url, error=e)
                        raise TransportError(_e, status_code=resp.status) from e

            except (ClientError, asyncio.TimeoutError) as e:
                # Never got a response; nothing to report for the status code
                metrics.c_meta_scrape_result.labels("error", endpoint).inc()
                _e = f"failed to get {endpoint}"
                log.error(_e, url=url, error=e)
                raise TransportError(_e) from e
