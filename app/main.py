import logging
from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import JSONResponse, Response

from app.api.deps import build_http_client
from app.api.routes import router as api_router
from app.core.config import get_settings
from app.core.errors import PintervalError, UpstreamError
from app.core.observability import REQUEST_COUNT, REQUEST_LATENCY, configure_logging
from app.core.responses import error_response

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    if settings.observability_enabled:
        FastAPIInstrumentor.instrument_app(app)
    if getattr(app.state, "http_client", None) is None:
        app.state.http_client = build_http_client()
    yield
    await app.state.http_client.aclose()
    app.state.http_client = None


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.include_router(api_router)


def _trace_id(request: Request) -> str:
    return getattr(request.state, "trace_id", "missing-trace-id")


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    trace_id = request.headers.get("X-Trace-Id", str(uuid4()))
    request.state.trace_id = trace_id

    start = perf_counter()
    response = await call_next(request)
    elapsed = perf_counter() - start

    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    REQUEST_COUNT.labels(request.method, path, str(response.status_code)).inc()
    REQUEST_LATENCY.labels(request.method, path).observe(elapsed)
    response.headers["X-Trace-Id"] = trace_id
    return response


@app.exception_handler(PintervalError)
async def pinterval_exception_handler(request: Request, exc: PintervalError):
    details = {}
    if isinstance(exc, UpstreamError) and exc.upstream_status is not None:
        details["status"] = exc.upstream_status
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    payload, status = error_response(
        code=exc.code,
        message=exc.message,
        trace_id=_trace_id(request),
        status=exc.status_code,
        details=details,
    )
    return JSONResponse(payload, status_code=status)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log("%s %s failed: %s (HTTP_ERROR %s)", request.method, request.url.path, exc.detail, exc.status_code)
    payload, status = error_response(
        code="HTTP_ERROR",
        message=str(exc.detail),
        trace_id=_trace_id(request),
        status=exc.status_code,
    )
    return JSONResponse(payload, status_code=status)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("%s %s failed: unhandled %s", request.method, request.url.path, type(exc).__name__)
    payload, status = error_response(
        code="INTERNAL_ERROR",
        message=str(exc),
        trace_id=_trace_id(request),
        status=500,
    )
    return JSONResponse(payload, status_code=status)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.errors())
    payload, status = error_response(
        code="VALIDATION_ERROR",
        message="Request validation failed",
        trace_id=_trace_id(request),
        status=422,
        details={"errors": exc.errors()},
    )
    return JSONResponse(payload, status_code=status)


@app.get("/healthz")
def healthz() -> dict:
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
