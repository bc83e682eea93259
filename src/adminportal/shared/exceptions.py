from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from adminportal.shared.error_codes import ERROR_CODES
from adminportal.shared.logging import get_logger

logger = get_logger(__name__)


# ───────────────────────── Base & Domain Exceptions ─────────────────────────
class DomainError(Exception):
    """Base class for domain-level errors. Services should raise these, never HTTPException."""
    code: str = "domain_error"
    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str
    details: Optional[Dict[str, Any]]

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.message = message or _msg_for(self.code, default=self.__class__.__name__)
        self.details = details
        super().__init__(self.message)


class UnauthenticatedError(DomainError):
    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(DomainError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(DomainError):
    # generic; set a specific code via constructor if needed (e.g., "tenant_not_found")
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class ValidationError(DomainError):
    code = "validation_error"
    status_code = 422


class TransactionFailureError(DomainError):
    code = "transaction_failed"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# ───────────────────────────── Helpers ──────────────────────────────────────

def problem(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    correlation_id: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    if correlation_id:
        body["correlation_id"] = correlation_id
    return body


def problem_response(
    code: str,
    message: Optional[str] = None,
    *,
    details: Optional[Dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> JSONResponse:
    """Problem body as a ready response, for middleware/gates that answer outside the router."""
    return JSONResponse(
        status_code=_http_for(code),
        content=problem(
            code,
            message or _msg_for(code),
            details,
            _extract_correlation_id(request) if request is not None else None,
        ),
    )


def _extract_correlation_id(req: Request) -> Optional[str]:
    return getattr(getattr(req, "state", None), "request_id", None)


def _http_for(code: str) -> int:
    return int(ERROR_CODES.get(code, {}).get("http", status.HTTP_500_INTERNAL_SERVER_ERROR))


def _msg_for(code: str, default: Optional[str] = None) -> str:
    return str(ERROR_CODES.get(code, {}).get("message", default or code))


# first code wins for shared statuses (401 → unauthenticated)
_CODE_BY_STATUS: Dict[int, str] = {}
for _code, _entry in ERROR_CODES.items():
    _CODE_BY_STATUS.setdefault(int(_entry["http"]), _code)


# ─────────────────────────── Registration ───────────────────────────

def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainError)
    async def handle_domain_error(req: Request, exc: DomainError):
        return JSONResponse(
            status_code=exc.status_code,
            content=problem(exc.code, exc.message, exc.details, _extract_correlation_id(req)),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(req: Request, exc: RequestValidationError):
        code = "validation_error"
        return JSONResponse(
            status_code=_http_for(code),
            content=problem(
                code,
                _msg_for(code),
                {"errors": jsonable_errors(exc.errors())},
                _extract_correlation_id(req),
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(req: Request, exc: StarletteHTTPException):
        code = _CODE_BY_STATUS.get(exc.status_code, "internal_error")
        detail = exc.detail
        message = detail if isinstance(detail, str) else _msg_for(code)
        details = detail if isinstance(detail, dict) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=problem(code, message, details, _extract_correlation_id(req)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unhandled(req: Request, exc: Exception):
        code = "internal_error"
        logger.error("unhandled_exception", error_type=exc.__class__.__name__, exc_info=exc)
        return JSONResponse(
            status_code=_http_for(code),
            content=problem(code, _msg_for(code), {"type": exc.__class__.__name__}, _extract_correlation_id(req)),
        )


def jsonable_errors(errors: Any) -> list:
    """Pydantic error dicts may carry exception objects under 'ctx'; keep them JSON safe."""
    cleaned = []
    for err in errors:
        item = dict(err)
        if "ctx" in item:
            item["ctx"] = {k: str(v) for k, v in item["ctx"].items()}
        item.pop("url", None)
        cleaned.append(item)
    return cleaned
