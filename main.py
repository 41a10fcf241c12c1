from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from dishka.integrations.fastapi import setup_dishka

from core.container import container
from core.exception_handler import (
    validation_exception_handler,
    http_exception_handler,
    starlette_exception_handler,
    custom_exception_handler
)
from core.exceptions import BaseCustomException
from resolver.chains import Chain
from resolver.router import router as query_router

VERSION = "0.1.0"

app = FastAPI(
    title="Chain Query Resolver",
    version=VERSION,
    description="Resolves account and transaction queries against EVM chains",
)

setup_dishka(container, app)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, starlette_exception_handler)
app.add_exception_handler(BaseCustomException, custom_exception_handler)
app.add_exception_handler(Exception, custom_exception_handler)

app.include_router(query_router)


@app.get("/")
async def root():
    """
    Root endpoint.

    Returns
    -------
    dict
        Application information
    """
    return {
        "name": "Chain Query Resolver",
        "version": VERSION,
        "chains": [chain.value for chain in Chain],
        "endpoints": {
            "accounts": "/api/query/accounts",
            "transactions": "/api/query/transactions",
            "docs": "/docs"
        }
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}
