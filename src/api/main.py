"""FastAPI application entry point."""

import warnings
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import customers_router, health_router, invoices_router
from core import config

ROUTERS = (health_router, customers_router, invoices_router)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check the invoice template and the request log database at startup."""
    if not config.TEMPLATE_PATH.is_file():
        warnings.warn(
            f"Invoice template not found at {config.TEMPLATE_PATH} "
            "(create one with scripts/create_template.py)"
        )
    if not config.DB_PATH.is_file():
        warnings.warn(
            f"Request log database not found at {config.DB_PATH} (run scripts/init_db.py)"
        )

    yield


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Answer unexpected exceptions with the standard error body."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
        ).model_dump(),
    )


def create_app() -> FastAPI:
    """Build the API application with all routers."""
    application = FastAPI(
        title="Court Booking Invoice API",
        description=(
            "Lists the customers of a weekly court booking plan and generates "
            "their invoices from an Excel template"
        ),
        version=config.API_VERSION,
        debug=config.API_DEBUG,
        lifespan=lifespan,
    )

    if config.API_DEBUG:
        application.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    application.add_exception_handler(Exception, unexpected_error_handler)
    for router in ROUTERS:
        application.include_router(router)
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=config.API_DEBUG,
    )
