import asyncio

import httpx

from raahvia.config import ClientConfig
from raahvia.services.status_prober import StatusProber


def _probe(handler, base_url="http://gateway.test/api"):
    async def go():
        async with StatusProber(ClientConfig(base_url=base_url, timeout_ms=200), transport=httpx.MockTransport(handler)) as p:
            return await p.check_status()

    return asyncio.run(go())


def test_online_merges_health_payload():
    urls = []

    def handler(request):
        urls.append(str(request.url))
        return httpx.Response(200, json={"status": "ONLINE", "uptime": 12.5})

    result = _probe(handler)
    assert urls == ["http://gateway.test/health"]
    assert result["online"] is True
    assert result["status"] == "ONLINE"
    assert result["uptime"] == 12.5


def test_unreachable_backend_reports_offline():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    result = _probe(handler)
    assert result["online"] is False
    assert "fallback" in result["message"]
    assert result["note"]


def test_error_status_reports_offline():
    result = _probe(lambda request: httpx.Response(500, json={"success": False}))
    assert result["online"] is False


def test_garbage_body_reports_offline():
    result = _probe(lambda request: httpx.Response(200, text="not json"))
    assert result["online"] is False


def test_slow_backend_reports_offline():
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={"status": "ONLINE"})

    assert _probe(handler)["online"] is False


def test_health_url_without_api_suffix():
    assert ClientConfig(base_url="http://h:5000/api/").health_url == "http://h:5000/health"
    assert ClientConfig(base_url="http://h:5000").health_url == "http://h:5000/health"


def test_malformed_base_url_reports_offline():
    async def go():
        async with StatusProber(ClientConfig(base_url="http://[::1/api", timeout_ms=200)) as p:
            return await p.check_status()

    result = asyncio.run(go())
    assert result["online"] is False
    assert "fallback" in result["message"]
