from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from api import employees
from core.config import settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestLoggingMiddleware, UpstreamBackoffMiddleware
from core.errors import register_error_handlers
from services.employees import EmployeeService

# Initialize logging before anything else
configure_logging(level=settings.LOG_LEVEL, json_logs=settings.LOG_JSON)

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    upstream = settings.upstream_config()
    log.info(
        "startup",
        upstream=upstream.base_url,
        max_attempts=upstream.max_attempts,
        initial_delay_ms=upstream.initial_delay_ms,
    )

    async with httpx.AsyncClient() as client:
        app.state.employee_service = EmployeeService.from_client(client, upstream)
        yield

    log.info("shutdown", message="Employee gateway shutting down")


app = FastAPI(
    title="Employee Gateway",
    description="Resilient facade over the upstream employee API with rate-limit aware retries",
    version="0.1.0",
    lifespan=lifespan,
)

register_error_handlers(app)

# Middleware (order matters: last added = first executed)
app.add_middleware(UpstreamBackoffMiddleware)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(employees.router, prefix="/api/v1/employee", tags=["employees"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": "0.1.0"}


if __name__ == "__main__":
    import uvicorn

    log.info("server_config", host=settings.BACKEND_HOST, port=settings.BACKEND_PORT, debug=settings.APP_DEBUG)
    uvicorn.run(
        "main:app",
        host=settings.BACKEND_HOST,
        port=settings.BACKEND_PORT,
        reload=settings.APP_DEBUG,
        log_config=None,  # Logging is configured by configure_logging
    )
