from __future__ import annotations

import httpx

from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


class HttpExternalIdentityProvider:
    """
    Checks credentials against the external identity provider's login endpoint.

    A 2xx answer means the credentials are valid. Any other status, or a
    transport failure, is treated as "not authenticated".
    """

    def __init__(self, *, login_url: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._login_url = login_url
        self._timeout = timeout
        self._transport = transport

    async def authenticate(self, email: str, password: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.post(self._login_url, json={"email": email, "password": password})
        except httpx.HTTPError as exc:
            logger.warning("external_auth_unreachable", error_type=exc.__class__.__name__)
            return False
        if r.is_success:
            return True
        logger.info("external_auth_rejected", status_code=r.status_code)
        return False
