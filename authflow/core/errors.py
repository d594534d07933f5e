"""Operational errors and the centralized error responder."""

import logging

import jwt
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """An expected failure that carries a user-facing message and HTTP status.

    Anything raised during a request that is not an ``AppError`` (or one of the
    token errors mapped below) is treated as a programming error.
    """

    is_operational = True

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def status(self) -> str:
        return "fail" if 400 <= self.status_code < 500 else "error"

    def to_dict(self) -> dict:
        return {"status": self.status, "message": self.message}


def validation_error(messages: list[str]) -> AppError:
    return AppError(f"Invalid input data. {'. '.join(messages)}", status.HTTP_400_BAD_REQUEST)


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_error_handlers(app: FastAPI, *, expose_details: bool = False) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(_request: Request, exc: AppError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(jwt.ExpiredSignatureError)
    async def handle_expired_token(_request: Request, _exc: jwt.ExpiredSignatureError) -> JSONResponse:
        return _error_response(
            AppError("Your token has expired! Please log in again.", status.HTTP_401_UNAUTHORIZED)
        )

    @app.exception_handler(jwt.InvalidTokenError)
    async def handle_invalid_token(_request: Request, _exc: jwt.InvalidTokenError) -> JSONResponse:
        return _error_response(
            AppError("Invalid token. Please log in again!", status.HTTP_401_UNAUTHORIZED)
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_request: Request, exc: RequestValidationError) -> JSONResponse:
        messages = [error.get("msg", "Invalid value") for error in exc.errors()]
        return _error_response(validation_error(messages))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        content = {"status": "error", "message": "Something went very wrong!"}
        if expose_details:
            content["error"] = str(exc)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
