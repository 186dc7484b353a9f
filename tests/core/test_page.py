import httpx
import pytest

from hostaudit.core.http import USER_AGENT
from hostaudit.core.page import fetch_page


@pytest.mark.asyncio
async def test_fetch_page_success():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["user-agent"] == USER_AGENT
        return httpx.Response(200, text="<title>Hi</title>", headers={"X-Cache": "HIT"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        page = await fetch_page("https://seaside.com", client=client)

    assert page.error is None
    assert page.status_code == 200
    assert page.html == "<title>Hi</title>"
    assert page.headers["x-cache"] == "HIT"
    assert page.content_length == len("<title>Hi</title>")
    assert page.load_time_ms >= 0


@pytest.mark.asyncio
async def test_fetch_page_reports_received_bytes():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content="café".encode("latin-1"),
            headers={"Content-Type": "text/html; charset=latin-1"},
        )

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        page = await fetch_page("https://seaside.com", client=client)

    assert page.html == "café"
    assert page.content_length == 4


@pytest.mark.asyncio
async def test_fetch_page_follows_redirects():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/":
            return httpx.Response(301, headers={"Location": "https://seaside.com/home"})
        return httpx.Response(200, text="home")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        page = await fetch_page("https://seaside.com/", client=client)

    assert page.status_code == 200
    assert page.html == "home"


@pytest.mark.asyncio
async def test_fetch_page_keeps_error_status_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="maintenance")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        page = await fetch_page("https://seaside.com", client=client)

    assert page.error is None
    assert page.status_code == 503
    assert page.html == "maintenance"


@pytest.mark.asyncio
async def test_fetch_page_transport_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        page = await fetch_page("https://seaside.com", client=client)

    assert page.status_code == 0
    assert page.html == ""
    assert page.error == "Connection refused"
