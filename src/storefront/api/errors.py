"""Error responses shared by every Storefront app.

Protean's handlers map ValidationError to 400 and ObjectNotFoundError to 404.
Anything else is logged with its traceback and answered with a generic 500
body, so internal messages never reach the client.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

logger = structlog.get_logger(__name__)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)
    app.add_exception_handler(Exception, unhandled_exception_handler)
