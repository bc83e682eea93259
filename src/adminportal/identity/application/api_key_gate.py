"""
External API Key Gate

Single shared secret guarding the machine-to-machine surface. Same contract
shape as the other gates: ``None`` means proceed, a response means stop.
"""
from __future__ import annotations

import hmac
from typing import Optional

from starlette.requests import Request
from starlette.responses import JSONResponse

from adminportal.shared.exceptions import problem_response
from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


class ExternalApiKeyGate:
    def __init__(
        self,
        api_key: Optional[str],
        *,
        header_name: str = "x-api-key",
        query_param: str = "apiKey",
        allow_query_param: bool = True,
    ) -> None:
        self._api_key = api_key
        self._header_name = header_name
        self._query_param = query_param
        self._allow_query_param = allow_query_param

    def _provided_key(self, request: Request) -> Optional[str]:
        header_value = request.headers.get(self._header_name)
        if header_value:
            return header_value
        if not self._allow_query_param:
            return None
        query_value = request.query_params.get(self._query_param)
        if query_value:
            logger.warning(
                "api_key_query_param_deprecated",
                path=request.url.path,
                message=f"API key provided via query parameter. Use the {self._header_name} header instead.",
            )
            return query_value
        return None

    def authenticate(self, request: Request) -> Optional[JSONResponse]:
        """
        Returns:
            None when the request carries the configured key, otherwise the
            denial response to send back
        """
        if not self._api_key:
            logger.error("api_key_not_configured")
            return problem_response("server_configuration_error", request=request)

        provided = self._provided_key(request)
        if not provided:
            return problem_response(
                "api_key_required",
                f"API key is required. Please provide your API key in the {self._header_name} header.",
                details={"header": self._header_name},
                request=request,
            )

        if not hmac.compare_digest(provided.encode("utf-8"), self._api_key.encode("utf-8")):
            logger.info("api_key_rejected", path=request.url.path)
            return problem_response(
                "invalid_api_key",
                details={"header": self._header_name},
                request=request,
            )
        return None
