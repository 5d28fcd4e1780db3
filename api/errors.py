"""Exception handlers for the FastAPI app"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.errors import GatewayError, StoreUnavailable
from core.validation import RequestValidationFailed

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
        if isinstance(exc, StoreUnavailable):
            logger.error("Store unavailable on %s: %s", request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content=exc.to_response_body())

    @app.exception_handler(RequestValidationFailed)
    async def body_validation_error_handler(
        request: Request, exc: RequestValidationFailed
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content=exc.to_response_body())

    @app.exception_handler(RequestValidationError)
    async def query_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request"})
