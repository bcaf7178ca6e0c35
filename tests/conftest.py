"""Shared fixtures: raw modem responses and a stand-in for the modem client."""

from contextlib import asynccontextmanager

import pytest
from coda56.err.exceptions import TransportError
from coda56.scrape import SnapshotAggregator
from coda56.util.const import (
    DS_OFDM_ENDPOINT,
    DS_QAM_ENDPOINT,
    LINK_STATUS_ENDPOINT,
    SYS_INFO_ENDPOINT,
    US_OFDM_ENDPOINT,
    US_QAM_ENDPOINT,
)

from tests.payloads import DS_OFDM, DS_QAM, LINK_STATUS, SYS_INFO, US_OFDM, US_QAM, encode


class FakeModemClient:
    """Hands back canned bodies instead of talking to a modem.

    A value that is an Exception gets raised from fetch(); an endpoint with no entry is a 404.
    """

    def __init__(self, responses: dict[str, bytes | Exception]):
        self.responses = responses
        self.requested: list[str] = []

    @asynccontextmanager
    async def session(self):
        yield None

    async def fetch(self, cs, endpoint: str) -> bytes:
        self.requested.append(endpoint)
        if endpoint not in self.responses:
            raise TransportError(f"unexpected status code 404 for {endpoint}", status_code=404)
        value = self.responses[endpoint]
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def modem_responses() -> dict[str, bytes]:
    """Raw bodies for every endpoint, as the modem would send them."""
    return {
        DS_QAM_ENDPOINT: encode(DS_QAM),
        US_QAM_ENDPOINT: encode(US_QAM),
        DS_OFDM_ENDPOINT: encode(DS_OFDM),
        US_OFDM_ENDPOINT: encode(US_OFDM),
        LINK_STATUS_ENDPOINT: encode(LINK_STATUS),
        SYS_INFO_ENDPOINT: encode(SYS_INFO),
    }


@pytest.fixture
def make_aggregator(modem_responses):
    """Build an aggregator over a FakeModemClient; overrides replace individual endpoints."""

    def _make(overrides: dict | None = None) -> tuple[SnapshotAggregator, FakeModemClient]:
        responses = dict(modem_responses)
        for endpoint, value in (overrides or {}).items():
            if value is None:
                responses.pop(endpoint, None)
            else:
                responses[endpoint] = value
        client = FakeModemClient(responses)
        return SnapshotAggregator(client), client

    return _make
