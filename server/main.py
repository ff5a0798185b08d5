"""Entry point for the partial store server."""

import time
import uuid

import uvicorn
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from common.constants import PARTIALS_ROOT
from common.exceptions import (
    SPFEException,
    InvalidInputError,
    StoreUnavailableError
)
from common.logging_config import setup_logging
from server.config import FALLBACK_DIR, PRIMARY_DB_PATH, PRIMARY_ENABLED, SERVER_HOST, SERVER_PORT
from server.routes import chunk_router
from server.schemas import ErrorResponse
from server.service_locator import get_partial_store
from store.partial_store import PartialStore

logger = setup_logging('server')
setup_logging('store')

app = FastAPI(
    title="SPFE Partial Store",
    description="Stores per-chunk partial records and merges them into ordered manifests",
    version="1.0.0"
)


def _error_response(status_code: int, error: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code).model_dump()
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Build the partial store from configuration on application startup.
    """
    logger.info("Partial store server starting up...")
    if PRIMARY_ENABLED:
        logger.info(f"Primary backend: sqlite at {PRIMARY_DB_PATH}")
    else:
        logger.warning("Primary backend disabled, all partials go to the fallback")
    logger.info(f"Fallback backend: filesystem at {FALLBACK_DIR}")
    get_partial_store()


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    fields = ", ".join(
        ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        for err in exc.errors()
    )
    logger.warning(
        f"Invalid request: {fields} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, f"invalid or missing fields: {fields}", "INVALID_INPUT")


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid input error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc), "INVALID_INPUT")


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Store unavailable error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "STORE_UNAVAILABLE")


@app.exception_handler(SPFEException)
async def spfe_exception_handler(request: Request, exc: SPFEException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"SPFE exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "INTERNAL_ERROR")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Unhandled error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "INTERNAL_ERROR")


app.include_router(chunk_router)


@app.get("/")
async def root():
    """
    Root endpoint for health check.
    """
    return {"message": "SPFE Partial Store API", "status": "running"}


@app.get("/health")
async def health_check():
    """
    Health check endpoint for container healthchecks.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": "server"}


@app.get("/ready")
async def ready_check(store: PartialStore = Depends(get_partial_store)):
    """
    Readiness check endpoint.
    Probes both backends; ready while at least one can enumerate partials.
    """
    backends = store.probe(f"{PARTIALS_ROOT}/")
    ready = any(state == "ok" for state in backends.values())
    status_code = status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={"ready": ready, **backends}
    )


def main() -> None:
    """
    Start the FastAPI server with uvicorn.
    """
    uvicorn.run(
        "server.main:app",
        host=SERVER_HOST,
        port=SERVER_PORT
    )


if __name__ == "__main__":
    main()
