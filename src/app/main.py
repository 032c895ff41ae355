from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.checkout import router as checkout_router
from app.config import ConfigurationError, settings
from app.database import engine

# Configure structlog
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        (
            structlog.dev.ConsoleRenderer()
            if settings.APP_ENV == "development"
            else structlog.processors.JSONRenderer()
        ),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(0),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: refuse to serve webhooks without a signing secret
    log.info("starting_up", env=settings.APP_ENV)
    app.state.webhook_secret = settings.require_webhook_secret()

    yield

    # Shutdown
    log.info("shutting_down")
    await engine.dispose()


app = FastAPI(
    title="Product Checkout",
    lifespan=lifespan,
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    log.error("configuration_error", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"detail": "Service misconfigured"})


app.include_router(checkout_router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
