"""Tests for the modem HTTP client against a local aiohttp server standing in for the modem."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientPayloadError, test_utils, web
from coda56 import metrics
from coda56.client import ModemClient
from coda56.err.exceptions import TransportError
from coda56.scrape import SnapshotAggregator
from coda56.util.const import DS_QAM_ENDPOINT, SYS_INFO_ENDPOINT, US_QAM_ENDPOINT
from prometheus_client import REGISTRY


def fake_modem(responses: dict[str, bytes], status: int = 200, delay: float = 0) -> web.Application:
    """Serves `responses` under /data/<endpoint>; anything else is a 404."""

    async def handler(request: web.Request) -> web.Response:
        endpoint = request.match_info["endpoint"]
        if delay:
            await asyncio.sleep(delay)
        if endpoint not in responses:
            return web.Response(status=404)
        return web.Response(status=status, body=responses[endpoint], content_type="text/html")

    app = web.Application()
    app.router.add_get("/data/{endpoint}", handler)
    return app


def run_against(app: web.Application, scenario, timeout: float = 5):
    """Start `app`, point a ModemClient at it and hand the client to `scenario`."""

    async def _run():
        async with test_utils.TestServer(app) as server:
            client = ModemClient(str(server.make_url("/")), timeout=timeout)
            return await scenario(client)

    return asyncio.run(_run())


@pytest.mark.unit
class TestModemClientConfig:
    def test_url_for(self):
        client = ModemClient("https://192.168.100.1", timeout=10)

        assert client.url_for("dsinfo.asp") == "https://192.168.100.1/data/dsinfo.asp"

    def test_trailing_slash_is_dropped(self):
        client = ModemClient("https://192.168.100.1/", timeout=10)

        assert client.url_for("getSysInfo.asp") == "https://192.168.100.1/data/getSysInfo.asp"

    def test_timeout(self):
        client = ModemClient("https://192.168.100.1", timeout=2.5)

        assert client.timeout.total == 2.5


@pytest.mark.integration
class TestFetch:
    def test_returns_raw_body(self):
        body = b'[{"channelId": "1"}]'

        async def scenario(client):
            async with client.session() as cs:
                return await client.fetch(cs, DS_QAM_ENDPOINT)

        assert run_against(fake_modem({DS_QAM_ENDPOINT: body}), scenario) == body

    def test_non_ok_status(self):
        async def scenario(client):
            async with client.session() as cs:
                return await client.fetch(cs, DS_QAM_ENDPOINT)

        with pytest.raises(TransportError) as exc_info:
            run_against(fake_modem({DS_QAM_ENDPOINT: b"oops"}, status=500), scenario)

        assert exc_info.value.status_code == 500
        assert "500" in exc_info.value.message

    def test_missing_endpoint(self):
        async def scenario(client):
            async with client.session() as cs:
                return await client.fetch(cs, "nope.asp")

        with pytest.raises(TransportError) as exc_info:
            run_against(fake_modem({}), scenario)

        assert exc_info.value.status_code == 404

    def test_timeout(self):
        async def scenario(client):
            async with client.session() as cs:
                return await client.fetch(cs, DS_QAM_ENDPOINT)

        with pytest.raises(TransportError) as exc_info:
            run_against(fake_modem({DS_QAM_ENDPOINT: b"[]"}, delay=1), scenario, timeout=0.2)

        assert exc_info.value.status_code is None

    def test_connection_refused(self):
        async def scenario():
            # Nothing listens on port 1
            client = ModemClient("http://127.0.0.1:1", timeout=2)
            async with client.session() as cs:
                return await client.fetch(cs, DS_QAM_ENDPOINT)

        with pytest.raises(TransportError, match="failed to get dsinfo.asp"):
            asyncio.run(scenario())

    def test_truncated_body(self):
        resp = MagicMock(status=200)
        resp.read = AsyncMock(side_effect=ClientPayloadError("Response payload is not completed"))
        request_ctx = MagicMock()
        request_ctx.__aenter__ = AsyncMock(return_value=resp)
        request_ctx.__aexit__ = AsyncMock(return_value=False)
        cs = MagicMock()
        cs.get.return_value = request_ctx

        client = ModemClient("https://192.168.100.1", timeout=10)

        with pytest.raises(TransportError, match="failed to read response body") as exc_info:
            asyncio.run(client.fetch(cs, DS_QAM_ENDPOINT))

        assert exc_info.value.status_code == 200

    def test_request_is_counted(self):
        def scrape_result():
            value = REGISTRY.get_sample_value(
                "meta_scrape_result_total",
                {"http_code": "200", "scrape_target": SYS_INFO_ENDPOINT},
            )
            return value or 0.0

        before = scrape_result()

        async def scenario(client):
            async with client.session() as cs:
                return await client.fetch(cs, SYS_INFO_ENDPOINT)

        run_against(fake_modem({SYS_INFO_ENDPOINT: b"[]"}), scenario)

        assert scrape_result() == before + 1


@pytest.mark.integration
class TestAggregatorOverHttp:
    def test_one_endpoint_down(self, modem_responses):
        responses = dict(modem_responses)
        del responses[US_QAM_ENDPOINT]

        async def scenario(client):
            return await SnapshotAggregator(client).collect_async()

        snapshot = run_against(fake_modem(responses), scenario)

        assert snapshot.samples(metrics.US_POWER) == []
        assert snapshot.get(metrics.DS_POWER, "11", "483000000", "QAM256") == 3.9
        assert snapshot.get(metrics.LINK_SPEED, "Full") == 2500.0
        assert snapshot.samples(metrics.SYSTEM_INFO) == [
            (("1A", "7.1.1.2.2b9", "ABC123456789"), 1.0)
        ]

    def test_same_payloads_same_snapshot(self, modem_responses):
        async def scenario(client):
            aggregator = SnapshotAggregator(client)
            return await aggregator.collect_async(), await aggregator.collect_async()

        first, second = run_against(fake_modem(modem_responses), scenario)

        assert first == second
        assert len(first) > 0
