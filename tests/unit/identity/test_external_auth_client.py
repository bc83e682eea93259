import json

import httpx
import pytest

from adminportal.identity.infrastructure.external_auth_client import HttpExternalIdentityProvider

LOGIN_URL = "https://auth.example.test/api/login"


def _provider(handler):
    return HttpExternalIdentityProvider(login_url=LOGIN_URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_success_status_authenticates():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    assert await _provider(handler).authenticate("a@example.com", "pw")
    assert seen["body"] == {"email": "a@example.com", "password": "pw"}


@pytest.mark.asyncio
async def test_rejection_status_does_not_authenticate():
    assert not await _provider(lambda request: httpx.Response(401)).authenticate("a@example.com", "pw")


@pytest.mark.asyncio
async def test_transport_failure_does_not_authenticate():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert not await _provider(handler).authenticate("a@example.com", "pw")
