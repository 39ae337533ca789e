# app/core/errors.py
"""
Application error taxonomy and the JSON renderer.

Every error leaves the API as ``{"err": "<message>"}`` with a status code:

  - ValidationError   400  malformed input / missing parameters / empty cart
  - UnauthorizedError 401  missing or invalid credentials
  - ForbiddenError    403  role not allowed
  - NotFoundError     404  referenced row absent
  - ConflictError     409  uniqueness violation (email, cart line, rating)
  - GatewayError      500  payment provider failure
  - InternalError     500  email delivery or database commit failure
"""
import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code_default, detail=detail)


class ValidationError(AppError):
    status_code_default = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    status_code_default = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AppError):
    status_code_default = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code_default = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    status_code_default = status.HTTP_409_CONFLICT


class GatewayError(AppError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR


class InternalError(AppError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the handlers that render every failure as {"err": ...}.

    - HTTPException (AppError subclasses, routing 404/405): status kept.
    - RequestValidationError: body / query validation, rendered as 400.
    - Anything else: logged with traceback, rendered as 500.
    """

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"err": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"err": _first_validation_message(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"err": "internal server error"},
        )
