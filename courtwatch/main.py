"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from courtwatch.api import (
    admin,
    admin_database,
    admin_pages,
    availability,
    channels,
    cron,
    health,
    register,
    robots,
    telegram,
    users,
    watches,
)
from courtwatch.api.admin_pages import PageRedirect
from courtwatch.api.register import limiter as register_limiter
from courtwatch.core.config import settings
from courtwatch.core.database import AsyncSessionLocal, engine, init_db
from courtwatch.core.middleware import BotBlockMiddleware
from courtwatch.services.availability_service import availability_service
from courtwatch.services.scheduler import scrape_scheduler

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Time for Tennis")
    logger.info(f"Debug mode: {settings.DEBUG}")

    await init_db()
    async with AsyncSessionLocal() as db:
        await availability_service.ensure_venues_exist(db)

    if settings.SCRAPER_ENABLED:
        await scrape_scheduler.start()
    else:
        logger.info("Scraper disabled, scheduler not started")

    yield

    # Shutdown
    logger.info("Shutting down Time for Tennis")
    await scrape_scheduler.stop()
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Time for Tennis",
    description="London public tennis court availability and alerts",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.BASE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(BotBlockMiddleware)

# Setup rate limiter
app.state.limiter = register_limiter


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"error": message}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {request.url.path}: {exc.detail}")
    return JSONResponse(status_code=429, content={"error": exc.detail})


@app.exception_handler(PageRedirect)
async def page_redirect_handler(request: Request, exc: PageRedirect):
    return RedirectResponse(url=exc.location, status_code=303)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log anything a route let escape and answer with a JSON 500."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Include routers
app.include_router(health.router)
app.include_router(availability.router)
app.include_router(users.router)
app.include_router(watches.router)
app.include_router(channels.router)
app.include_router(register.router)
app.include_router(admin.router)
app.include_router(admin_database.router)
app.include_router(admin_pages.router)
app.include_router(cron.router)
app.include_router(telegram.router)
app.include_router(robots.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("courtwatch.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
