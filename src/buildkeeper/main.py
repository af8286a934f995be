from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from buildkeeper import __version__
from buildkeeper.exceptions import AppBaseError
from buildkeeper.logger import get_logger
from buildkeeper.routers import builds_api as builds_router
from buildkeeper.routers import repositories_api as repositories_router
from buildkeeper.routers import templates_api as templates_router
from buildkeeper.routers.dependencies import get_services
from buildkeeper.services.container import ServiceContainer

logger = get_logger(__name__)

app = FastAPI(title="buildkeeper", version=__version__)


@app.exception_handler(AppBaseError)
async def app_error_handler(request: Request, exc: AppBaseError) -> JSONResponse:
    """Translate application errors into JSON responses."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message_key,
            "detail": str(exc),
            "retriable": exc.retriable,
        },
    )


@app.get("/api/hello", operation_id="hello_api_hello_get")
async def hello_get() -> dict[str, str]:
    """Return a simple hello message with version info."""
    return {"message": "Hello from buildkeeper!", "version": __version__}


# Register routers
app.include_router(templates_router.router)
app.include_router(builds_router.router)
app.include_router(repositories_router.router)


def run_server(services: ServiceContainer, host: str | None = None, port: int | None = None) -> None:
    """Run the buildkeeper API server.

    Args:
        services: Services built from the loaded configuration
        host: Optional host overriding config
        port: Optional port overriding config
    """
    import uvicorn

    app.dependency_overrides[get_services] = lambda: services

    host = host or services.config.server.host
    port = port or services.config.server.port
    logger.info("Starting API server", host=host, port=port)
    uvicorn.run(app, host=host, port=port)
