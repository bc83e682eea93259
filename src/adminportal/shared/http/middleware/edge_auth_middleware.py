from __future__ import annotations

from typing import Any, Callable, Sequence

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from adminportal.shared.exceptions import problem_response
from adminportal.shared.http.public_paths import is_external_api_path, is_public_path
from adminportal.shared.logging import get_logger

log = get_logger(__name__)


class EdgeAuthMiddleware(BaseHTTPMiddleware):
    """
    Coarse gate every /api/ request passes before routing.

    - Public paths and the machine-to-machine surface pass through (the latter
      is checked by the API key gate inside its handlers).
    - A legacy session cookie lets the request through; the session itself is
      resolved later by the credential resolver.
    - Otherwise the primary session cookie must be present (401 "Not
      authenticated") and carry a valid signature and expiry (401
      "Authentication failed").

    This middleware only screens; it never builds an identity or checks roles.
    """

    def __init__(
        self,
        app,
        *,
        session_cookie_name: str,
        legacy_cookie_names: Sequence[str],
        verify_token: Callable[[str], Any],
    ) -> None:
        super().__init__(app)
        self.session_cookie_name = session_cookie_name
        self.legacy_cookie_names = tuple(legacy_cookie_names)
        self.verify_token = verify_token

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not path.startswith("/api/") or is_public_path(path) or is_external_api_path(path):
            return await call_next(request)

        if any(request.cookies.get(name) for name in self.legacy_cookie_names):
            return await call_next(request)

        token = request.cookies.get(self.session_cookie_name)
        if not token:
            return problem_response("unauthenticated", request=request)

        try:
            self.verify_token(token)
        except Exception as exc:  # noqa: BLE001 - any verification failure is a 401 here
            log.info("edge_token_rejected", path=path, error_type=exc.__class__.__name__)
            return problem_response("authentication_failed", request=request)

        return await call_next(request)
