"""
Exception handlers.

Request validation failures are rendered in the same field-keyed shape as
domain validation errors, so clients handle a single error format:

    {"email": ["value is not a valid email address: ..."]}
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

_ENVELOPE_KEYS = ("body", "query", "path")


def field_errors(exc: RequestValidationError | ValidationError) -> dict[str, list[str]]:
    """Group pydantic error messages by the offending user attribute."""
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _ENVELOPE_KEYS:
            loc = loc[1:]
        # {"user": {"email": ...}} reports as "email"; a missing "user" key stays "user"
        if len(loc) > 1 and loc[0] == "user":
            loc = loc[1:]
        field = loc[0] if loc else "base"
        errors.setdefault(field, []).append(error["msg"])
    return errors


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=field_errors(exc),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
