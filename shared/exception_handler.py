import logging

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from shared.helpers.json_response_helper import failure_result
from shared.utils.app_status_code import AppStatusCode
from lease_service.app.core.exceptions import LeaseServiceError

logger = logging.getLogger(__name__)


def setup_exception_handlers(app: FastAPI):

    @app.exception_handler(LeaseServiceError)
    async def lease_exception_handler(request: Request, exc: LeaseServiceError):
        wrapped = failure_result(exc.message, exc.status_code)
        if exc.details is not None:
            wrapped["data"] = exc.details
        return JSONResponse(content=wrapped, status_code=exc.http_status)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        # error_response() already packs a JsonOutResult into detail
        if isinstance(exc.detail, dict) and "status_code" in exc.detail:
            wrapped = exc.detail
        else:
            wrapped = failure_result(str(exc.detail), str(exc.status_code))
        return JSONResponse(content=wrapped, status_code=exc.status_code or 400)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        wrapped = failure_result(str(exc), AppStatusCode.INVALID_INPUT)
        return JSONResponse(content=wrapped, status_code=422)

    # Catch all unhandled exceptions
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception on %s", request.url.path)
        wrapped = failure_result(str(exc), AppStatusCode.OPERATION_FAILED)
        return JSONResponse(content=wrapped, status_code=500)
