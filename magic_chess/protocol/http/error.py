from __future__ import annotations

import logging
from typing import Any, Dict, Optional, cast

from fastapi import Request
from fastapi import HTTPException as FastAPIHTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status

from ...engine.types import Refusal, Verdict


logger = logging.getLogger(__name__)


class RuleRefusalError(Exception):
    """Raised by route handlers when the rules engine refuses a request.

    Rendered as 409 with the refusal kind in ``error.reason``.
    """

    def __init__(self, reason: Refusal, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message

    @classmethod
    def from_verdict(cls, verdict: Verdict) -> "RuleRefusalError":
        if verdict.reason is None:
            raise ValueError("accepted verdict is not a refusal")
        return cls(verdict.reason, verdict.message)


def error_envelope(
    *,
    code: str,
    message: str,
    err_type: str,
    request_id: str,
    reason: Optional[str] = None,
    field_errors: list[dict[str, str]] | None = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": {
            "code": code,
            "message": message,
            "type": err_type,
            "request_id": request_id,
        }
    }
    if reason:
        payload["error"]["reason"] = reason
    if field_errors:
        payload["error"]["field_errors"] = field_errors
    return payload


def _http_error_response(exc: FastAPIHTTPException, request_id: str) -> JSONResponse:
    status_code = exc.status_code
    payload = error_envelope(
        code=_status_to_code(status_code),
        message=exc.detail if isinstance(exc.detail, str) else str(exc.detail),
        err_type="client_error" if 400 <= status_code < 500 else "server_error",
        request_id=request_id,
    )
    return JSONResponse(status_code=status_code, content=payload)


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    if isinstance(exc, FastAPIHTTPException):
        return _http_error_response(exc, request_id)
    return await exception_handler(request, exc)


async def rule_refusal_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    refusal = cast(RuleRefusalError, exc)
    logger.debug(
        "rule refusal",
        extra={"request_id": request_id, "reason": refusal.reason.value},
    )
    payload = error_envelope(
        code=_status_to_code(status.HTTP_409_CONFLICT),
        message=refusal.message,
        err_type="client_error",
        request_id=request_id,
        reason=refusal.reason.value,
    )
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=payload)


async def exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    if isinstance(exc, FastAPIHTTPException):
        return _http_error_response(exc, request_id)
    # Anything else is a defect: log it and hide the details
    logger.exception("Unhandled exception", extra={"request_id": request_id})
    payload = error_envelope(
        code="internal_error",
        message="Internal Server Error",
        err_type="server_error",
        request_id=request_id,
    )
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


async def request_validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    request_id = getattr(request.state, "request_id", "")
    errors = []
    rve = cast(RequestValidationError, exc)
    for e in rve.errors():
        loc = ".".join(str(p) for p in e.get("loc", []) if p is not None)
        msg = e.get("msg", "invalid value")
        typ = e.get("type", "value_error")
        errors.append({"field": loc, "code": typ, "message": msg})
    payload = error_envelope(
        code="unprocessable_entity",
        message="Validation error",
        err_type="client_error",
        request_id=request_id,
        field_errors=errors or None,
    )
    return JSONResponse(status_code=422, content=payload)


def _status_to_code(status_code: int) -> str:
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code == status.HTTP_400_BAD_REQUEST:
        return "bad_request"
    if status_code == status.HTTP_409_CONFLICT:
        return "conflict"
    if status_code == 422:
        return "unprocessable_entity"
    if 500 <= status_code < 600:
        return "internal_error"
    return "error"
