import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.deps import engine
from app.api.errors import domain_error_handler
from app.api.routers.bookings import router as bookings_router
from app.api.routers.health import router as health_router
from app.api.routers.stripe import router as stripe_router
from app.api.routers.webhooks import router as webhooks_router
from app.config import get_settings
from app.domain.errors import DomainError
from app.infrastructure.db.tables import metadata

# Configure structured logging
logging.basicConfig(
    level=get_settings().log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize DB tables (for dev/demo purposes)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield
    await engine.dispose()

app = FastAPI(
    title="Bookings API",
    version="0.1.0",
    lifespan=lifespan
)

app.add_exception_handler(DomainError, domain_error_handler)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Unhandled exceptions are logged with an error_id and answered with a
    generic 500 so stack traces never reach clients.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(bookings_router, prefix="/api", tags=["Bookings"])
app.include_router(stripe_router, prefix="/api", tags=["Stripe"])
app.include_router(webhooks_router, prefix="/api", tags=["Webhooks"])
