"""Tests for the agent API dispatch client."""

import httpx
import pytest

from domains.reminders.dispatch import DispatchClient
from domains.reminders.errors import ConfigurationError, DispatchError

BATCH = [
    {"targetId": "1", "userName": "chris", "description": "bins", "contextPrompt": "cheeky"},
    {"targetId": "2", "userName": "abby", "description": "call mum"},
]


def _response(status_code, url="https://agent.example/reminders"):
    return httpx.Response(status_code, text="", request=httpx.Request("POST", url))


@pytest.mark.asyncio
async def test_single_post_with_whole_batch(mock_httpx_client):
    mock_httpx_client.post.return_value = _response(200)
    client = DispatchClient("https://agent.example/", "secret", timeout=5)

    assert await client.dispatch(BATCH) is True

    mock_httpx_client.post.assert_called_once()
    args, kwargs = mock_httpx_client.post.call_args
    assert args[0] == "https://agent.example/reminders"
    assert kwargs["headers"] == {"x-api-key": "secret"}
    assert kwargs["json"] == BATCH
    assert kwargs["timeout"] == 5


@pytest.mark.asyncio
async def test_non_2xx_is_logged_and_swallowed(mock_httpx_client):
    mock_httpx_client.post.return_value = _response(500)
    client = DispatchClient("https://agent.example", "secret")

    assert await client.dispatch(BATCH) is False
    assert mock_httpx_client.post.call_count == 1  # No retry


@pytest.mark.asyncio
async def test_transport_error_is_swallowed(mock_httpx_client):
    mock_httpx_client.post.side_effect = httpx.ConnectTimeout("timed out")
    client = DispatchClient("https://agent.example", "secret")

    assert await client.dispatch(BATCH) is False


@pytest.mark.asyncio
async def test_send_raises_dispatch_error(mock_httpx_client):
    mock_httpx_client.post.return_value = _response(401)
    client = DispatchClient("https://agent.example", "wrong")

    with pytest.raises(DispatchError) as exc_info:
        await client.send(BATCH)

    assert exc_info.value.status_code == 401
    assert exc_info.value.rejected


@pytest.mark.asyncio
async def test_transport_error_is_not_a_rejection(mock_httpx_client):
    mock_httpx_client.post.side_effect = httpx.ConnectError("refused")
    client = DispatchClient("https://agent.example", "secret")

    with pytest.raises(DispatchError) as exc_info:
        await client.send(BATCH)

    assert exc_info.value.status_code is None
    assert not exc_info.value.rejected


@pytest.mark.asyncio
async def test_empty_batch_makes_no_call(mock_httpx_client):
    client = DispatchClient("https://agent.example", "secret")

    assert await client.dispatch([]) is True
    mock_httpx_client.post.assert_not_called()


@pytest.mark.parametrize("base_url,api_key", [
    ("", "secret"),
    (None, "secret"),
    ("https://agent.example", ""),
    ("https://agent.example", None),
])
def test_missing_settings_fail_fast(base_url, api_key):
    with pytest.raises(ConfigurationError):
        DispatchClient(base_url, api_key)
