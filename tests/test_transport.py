import httpx
import pytest

from sejm_sync.adapters.transport import FetchError


@pytest.mark.asyncio
async def test_fetch_json_returns_body(api, transport) -> None:
    api.add("/sejm/term10/MP", [{"id": 1}])

    assert await transport.fetch_json("/sejm/term10/MP") == [{"id": 1}]
    assert transport.metrics.requests == 1


@pytest.mark.asyncio
async def test_fetch_text_returns_none_on_404(api, transport) -> None:
    assert await transport.fetch_text("/sejm/term10/proceedings/1/2024-01-01/transcripts/1") is None
    assert transport.metrics.not_found == 1
    assert transport.metrics.failures == 0


@pytest.mark.asyncio
async def test_fetch_json_raises_on_404(api, transport) -> None:
    with pytest.raises(FetchError) as exc_info:
        await transport.fetch_json("/sejm/term10/missing")

    assert exc_info.value.is_not_found


@pytest.mark.asyncio
async def test_server_errors_are_retried(api, transport) -> None:
    responses = [httpx.Response(503), httpx.Response(200, json={"ok": True})]
    api.add("/flaky", lambda request: responses.pop(0))

    assert await transport.fetch_json("/flaky") == {"ok": True}
    assert api.count("/flaky") == 2
    assert transport.metrics.retries == 1


@pytest.mark.asyncio
async def test_exhausted_retries_raise_fetch_error(api, transport) -> None:
    api.add("/down", lambda request: httpx.Response(500))

    with pytest.raises(FetchError) as exc_info:
        await transport.fetch_json("/down")

    assert exc_info.value.status == 500
    assert api.count("/down") == transport.config.max_attempts
    assert transport.metrics.failures == 1


@pytest.mark.asyncio
async def test_rate_limit_waits_do_not_consume_attempts(api, transport) -> None:
    responses = [httpx.Response(429) for _ in range(4)] + [httpx.Response(200, json=[])]
    api.add("/busy", lambda request: responses.pop(0))

    assert await transport.fetch_json("/busy") == []
    assert transport.metrics.rate_limit_waits == 4
    assert transport.metrics.retries == 0


@pytest.mark.asyncio
async def test_invalid_json_is_a_fetch_error(api, transport) -> None:
    api.add("/broken", httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(FetchError):
        await transport.fetch_json("/broken")


@pytest.mark.asyncio
async def test_timeouts_are_retried(api, transport) -> None:
    attempts = []

    def slow_then_ok(request: httpx.Request) -> httpx.Response:
        attempts.append(request.url.path)
        if len(attempts) <= 2:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, json={"ok": True})

    api.add("/slow", slow_then_ok)

    assert await transport.fetch_json("/slow") == {"ok": True}
    assert len(attempts) == 3
    assert transport.metrics.retries == 2
    assert transport.metrics.failures == 0
