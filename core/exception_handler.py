import logging

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from fastapi.exceptions import RequestValidationError

from core.exceptions import BaseCustomException

logger = logging.getLogger("chain_query")


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Handler for request validation errors.

    Parameters
    ----------
    request : Request
        FastAPI request
    exc : RequestValidationError
        Validation error

    Returns
    -------
    JSONResponse
        Error response with one entry per invalid field
    """
    errors = []
    for error in exc.errors():
        field_path = ".".join(
            str(x) for x in error["loc"] if not isinstance(x, int) and x != "body"
        )
        errors.append({
            "field": field_path or "body",
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content={
            "status": "error",
            "message": "Validation error",
            "errors": errors
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "status": "error",
            "message": exc.detail
        }
    )


async def starlette_exception_handler(request: Request, exc: StarletteHTTPException):
    return await http_exception_handler(request, HTTPException(status_code=exc.status_code, detail=exc.detail))


async def custom_exception_handler(request: Request, exc: Exception):
    """
    Handler for query resolution errors.

    Typed errors keep their status code and message and report their class
    as ``error``; anything else becomes a 500.

    Parameters
    ----------
    request : Request
        FastAPI request
    exc : Exception
        Exception

    Returns
    -------
    JSONResponse
        Error response
    """
    if isinstance(exc, BaseCustomException):
        status_code = exc.get_status_code()
        if status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content={
                "status": "error",
                "error": type(exc).__name__,
                "message": exc.message
            }
        )

    logger.exception(f"Unhandled error on {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={
            "status": "error",
            "message": "Internal server error"
        }
    )
