"""Maps every failure to a `{message, errorCode, errors?}` JSON response."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from storefront.shared.exceptions import ErrorCode, StorefrontError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def error_body(message: str, error_code: ErrorCode, errors=None) -> dict:
    body = {"message": message, "errorCode": int(error_code)}
    if errors is not None:
        body["errors"] = errors
    return body


def _first_message(messages) -> str:
    for values in (messages or {}).values():
        if isinstance(values, list) and values:
            return str(values[0])
        if values:
            return str(values)
    return "Bad request"


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.error_code, exc.errors),
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=error_body(_first_message(exc.messages), ErrorCode.BAD_REQUEST, exc.messages),
    )


async def object_not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=error_body("Not found", ErrorCode.NOT_FOUND))


async def expected_version_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("write_conflict", path=request.url.path, detail=str(exc))
    return JSONResponse(
        status_code=409,
        content=error_body("The resource was modified concurrently, please retry", ErrorCode.CONFLICT),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    issues = [
        {"path": ".".join(str(part) for part in error["loc"]), "message": error["msg"]} for error in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=error_body("Unprocessable entity", ErrorCode.UNPROCESSABLE_ENTITY, issues),
    )


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=error_body("Something went wrong", ErrorCode.INTERNAL_EXCEPTION),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, object_not_found_handler)
    app.add_exception_handler(ExpectedVersionError, expected_version_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, internal_error_handler)
