"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from sa_tax.api.routes import router
from sa_tax.calculators.errors import InvalidInputError
from sa_tax.calculators.tax_data import DEFAULT_TAX_YEAR, TAX_YEARS

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: configure logging and report the loaded tax years."""
    logging.basicConfig(level=settings.log_level.upper())
    logger.info(
        "Starting up with tax years %s (default %s)",
        ", ".join(sorted(TAX_YEARS)),
        DEFAULT_TAX_YEAR,
    )

    yield

    logger.info("Shutting down...")


async def invalid_input_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report caller input problems as 422 with the reason."""
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse({"error": str(exc)}, status_code=422)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="SA Tax Calculator", lifespan=lifespan)
    app.add_exception_handler(InvalidInputError, invalid_input_handler)
    app.include_router(router)
    return app
