# =============================================================================
# app/envelope.py - Response Envelope Normalizer
# =============================================================================
# Every response leaving a route has the same shape:
#
#   {"code": int, "message": str, "data": any | null}
#
# EnvelopeRoute is installed as the route class of the app router and of
# every APIRouter. For each request it wraps body parsing, dependency
# resolution (including the auth guard) and the handler in a single
# failure boundary:
#
#   PENDING -> handler runs -> one of
#       HANDLER_SET_BODY     returned ApiResponse  -> emitted unchanged
#                            returned anything else -> wrapped as `data`
#       HANDLER_SET_NOTHING  returned None          -> data: null
#       HANDLER_THREW        raised                 -> error envelope
#   -> NORMALIZED
#
# The HTTP status is chosen by ENVELOPE_STATUS_MODE: always 200 by
# default, or derived from `code` in "mirror_code" mode.
#
# Teardown of yield dependencies runs after the response is sent and is
# outside the boundary, so those teardowns must not raise. Anything raised
# in middleware is enveloped by the app-level catch-all handler.
#
# Usage:
#   router = APIRouter(route_class=EnvelopeRoute)
# =============================================================================

import inspect
import logging
from enum import Enum
from typing import Any, Callable

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from app.exceptions import TrackFlowException
from core.models.response import ApiResponse, ResponseCode, ResponseMessage

logger = logging.getLogger(__name__)

ALWAYS_OK = "always_ok"
MIRROR_CODE = "mirror_code"


class HandlerOutcome(str, Enum):
    """How the downstream handler finished."""
    SET_BODY = "HANDLER_SET_BODY"
    SET_NOTHING = "HANDLER_SET_NOTHING"
    THREW = "HANDLER_THREW"


# HTTP status used for each code in mirror_code mode
_MIRRORED_STATUS = {
    ResponseCode.SUCCESS: 200,
    ResponseCode.INVALID_PARAMS: 400,
    ResponseCode.UNAUTHORIZED: 401,
    ResponseCode.FORBIDDEN: 403,
    ResponseCode.NOT_FOUND: 404,
    ResponseCode.BUSINESS_ERROR: 409,
    ResponseCode.INTERNAL_ERROR: 500,
    ResponseCode.DATABASE_ERROR: 500,
}

# Envelope code used for each framework-raised HTTP status
_HTTP_STATUS_CODES = {
    400: ResponseCode.INVALID_PARAMS,
    401: ResponseCode.UNAUTHORIZED,
    403: ResponseCode.FORBIDDEN,
    404: ResponseCode.NOT_FOUND,
    422: ResponseCode.INVALID_PARAMS,
}


def http_status_for(code: int, mode: str = ALWAYS_OK) -> int:
    """
    HTTP status for an envelope with the given code.

    Args:
        code: Envelope code
        mode: "always_ok" or "mirror_code"

    Returns:
        200 in always_ok mode; the mirrored status otherwise
    """
    if mode != MIRROR_CODE:
        return 200
    return _MIRRORED_STATUS.get(code, 500)


# =============================================================================
# Normalization
# =============================================================================

def normalize_result(value: Any) -> tuple[ApiResponse, HandlerOutcome]:
    """
    Turn a handler's return value into an envelope.

    An ApiResponse is already an envelope and passes through unchanged.
    Any other value is raw data and becomes `data` verbatim, even if it
    happens to have code/message/data keys of its own.
    """
    if value is None:
        return ApiResponse.success(None), HandlerOutcome.SET_NOTHING
    if isinstance(value, ApiResponse):
        return value, HandlerOutcome.SET_BODY
    return ApiResponse.success(value), HandlerOutcome.SET_BODY


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ResponseMessage.INVALID_PARAMS
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "invalid value")
    if location:
        return f"{ResponseMessage.INVALID_PARAMS}: {location}: {detail}"
    return f"{ResponseMessage.INVALID_PARAMS}: {detail}"


def _http_exception_envelope(exc: StarletteHTTPException) -> ApiResponse:
    code = _HTTP_STATUS_CODES.get(exc.status_code)
    if code is None:
        code = ResponseCode.INVALID_PARAMS if 400 <= exc.status_code < 500 else ResponseCode.INTERNAL_ERROR
    message = exc.detail if isinstance(exc.detail, str) and exc.detail else None
    return ApiResponse.error(code, message)


def normalize_error(exc: Exception) -> ApiResponse:
    """
    Turn any exception into an error envelope.

    Application exceptions keep their own code, message and data.
    Unexpected exceptions are logged with their traceback but only the
    generic internal-error message reaches the client.
    """
    if isinstance(exc, TrackFlowException):
        logger.info(f"Request failed: {exc}")
        return exc.to_envelope()

    if isinstance(exc, RequestValidationError):
        message = _validation_message(exc)
        logger.info(f"Request validation failed: {message}")
        return ApiResponse.invalid_params(message)

    if isinstance(exc, StarletteHTTPException):
        return _http_exception_envelope(exc)

    if isinstance(exc, SQLAlchemyError):
        logger.exception(f"Database error: {exc}")
        return ApiResponse.database_error()

    logger.exception(f"Unexpected error: {exc}")
    return ApiResponse.error(ResponseCode.INTERNAL_ERROR, ResponseMessage.INTERNAL_ERROR)


# =============================================================================
# Response & Route
# =============================================================================

class EnvelopeResponse(JSONResponse):
    """JSON response that remembers the envelope and outcome it was built from."""

    def __init__(
        self,
        envelope: ApiResponse,
        outcome: HandlerOutcome,
        status_code: int = 200,
    ):
        self.envelope = envelope
        self.outcome = outcome
        super().__init__(content=jsonable_encoder(envelope), status_code=status_code)


def _status_mode(request: Request) -> str:
    app_settings = getattr(request.app.state, "settings", None)
    return getattr(app_settings, "ENVELOPE_STATUS_MODE", ALWAYS_OK)


def envelope_endpoint(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """
    Wrap a route handler so its return value is enveloped.

    The wrapper keeps the handler's signature so FastAPI still resolves
    parameters and dependencies from it. Sync handlers keep running in the
    threadpool. A Response returned by the handler is passed through.
    """
    if getattr(endpoint, "__envelope_wrapped__", False):
        return endpoint

    is_async = inspect.iscoroutinefunction(endpoint)

    async def wrapper(**kwargs: Any) -> Response:
        if is_async:
            result = await endpoint(**kwargs)
        else:
            result = await run_in_threadpool(endpoint, **kwargs)

        if isinstance(result, Response):
            return result

        envelope, outcome = normalize_result(result)
        return EnvelopeResponse(envelope, outcome)

    wrapper.__signature__ = inspect.signature(endpoint, eval_str=True)
    wrapper.__name__ = endpoint.__name__
    wrapper.__qualname__ = endpoint.__qualname__
    wrapper.__doc__ = endpoint.__doc__
    wrapper.__module__ = endpoint.__module__
    wrapper.__envelope_wrapped__ = True
    return wrapper


class EnvelopeRoute(APIRoute):
    """
    Route class that normalizes every outcome into an envelope.

    The handler's return value is enveloped by envelope_endpoint(); any
    exception raised while parsing, resolving dependencies or running the
    handler is caught here.
    """

    def __init__(self, path: str, endpoint: Callable[..., Any], **kwargs: Any):
        super().__init__(path, envelope_endpoint(endpoint), **kwargs)

    def get_route_handler(self) -> Callable[[Request], Any]:
        route_handler = super().get_route_handler()

        async def envelope_route_handler(request: Request) -> Response:
            try:
                response = await route_handler(request)
            except Exception as exc:
                response = EnvelopeResponse(normalize_error(exc), HandlerOutcome.THREW)

            if isinstance(response, EnvelopeResponse):
                response.status_code = http_status_for(response.envelope.code, _status_mode(request))
                request.state.handler_outcome = response.outcome
                request.state.response_code = response.envelope.code
            return response

        return envelope_route_handler


# =============================================================================
# Exception Handlers
# =============================================================================

async def envelope_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Envelope errors raised outside a routed handler.

    Covers unknown paths (404), wrong methods (405) and anything raised
    by middleware around a route. Starlette still re-raises an exception
    that reaches the catch-all handler after this response is sent, so the
    server logs it.
    """
    envelope = normalize_error(exc)
    request.state.handler_outcome = HandlerOutcome.THREW
    request.state.response_code = envelope.code
    return EnvelopeResponse(
        envelope,
        HandlerOutcome.THREW,
        status_code=http_status_for(envelope.code, _status_mode(request)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install envelope rendering for framework-level errors on `app`."""
    app.add_exception_handler(StarletteHTTPException, envelope_exception_handler)
    app.add_exception_handler(RequestValidationError, envelope_exception_handler)
    app.add_exception_handler(TrackFlowException, envelope_exception_handler)
    app.add_exception_handler(Exception, envelope_exception_handler)
