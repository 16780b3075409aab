"""
Main application file for the PDF Render Service API.

This file initializes the FastAPI application, sets up logging, manages the
shared browser through the application lifespan, registers global exception
handlers, and includes the API routers.
"""
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse

from pdf_render_service.api.auth import require_api_key
from pdf_render_service.api.deps import get_rendering_manager, shutdown_rendering_manager
from pdf_render_service.api.routes import pdf_routes
from pdf_render_service.core.config import config_manager
from pdf_render_service.core.exceptions import (
    AuthenticationError,
    InvalidRequestError,
    PdfRenderServiceError,
    RendererError,
)
from pdf_render_service.core.logger import setup_logging, get_logger

# --- Logging Setup ---
# Initialize logging before anything else logs; configuration comes from APP_ENV.
setup_logging(config_manager)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Optionally warms up the shared browser on startup and always closes it on shutdown."""
    logger.info(f"PDF Render Service starting (environment: {config_manager.current_environment}).")
    if config_manager.get("components.playwright_manager.launch_on_startup", False):
        manager = await get_rendering_manager()
        try:
            await manager.playwright_manager.ensure_started()
        except RendererError as e:
            # The service still starts; the launch is retried on the first request.
            logger.error(f"Browser launch on startup failed: {e.message}")
    yield
    logger.info("PDF Render Service shutting down.")
    await shutdown_rendering_manager()


# --- FastAPI Application Initialization ---
docs_enabled = bool(config_manager.get("api.docs_enabled", False))

app = FastAPI(
    title=config_manager.get("api.title", "PDF Render Service"),
    description="Renders a URL or HTML content to an A4 PDF, optionally hiding elements "
                "and overlaying a watermark and a stamp.",
    version=str(config_manager.get("api.version", "0.1.0")),
    docs_url="/docs" if docs_enabled else None,
    redoc_url="/redoc" if docs_enabled else None,
    openapi_url="/openapi.json" if docs_enabled else None,
    lifespan=lifespan,
)

# --- Global Exception Handlers ---

@app.exception_handler(InvalidRequestError)
async def invalid_request_exception_handler(request: Request, exc: InvalidRequestError):
    """Maps an invalid render request to HTTP 400 with the message as plain text."""
    logger.info(f"Invalid request for {request.method} {request.url.path}: {exc.message}")
    return PlainTextResponse(exc.message, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(AuthenticationError)
async def authentication_exception_handler(request: Request, exc: AuthenticationError):
    """Maps a missing or wrong API key to HTTP 401 with the message as plain text."""
    return PlainTextResponse(exc.message, status_code=status.HTTP_401_UNAUTHORIZED)


@app.exception_handler(PdfRenderServiceError)
async def pdf_render_service_exception_handler(request: Request, exc: PdfRenderServiceError):
    """
    Handles all other custom exceptions, including engine failures (`RendererError`).

    Returns:
        JSONResponse: A standardized JSON error response with HTTP 500.
    """
    logger.error(
        f"PdfRenderServiceError caught: {exc.__class__.__name__} - {exc.message} "
        f"for request: {request.method} {request.url}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"An application error occurred: {exc.message}"},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handles malformed form input with an HTTP 422 listing the validation failures."""
    logger.warning(f"RequestValidationError caught for: {request.method} {request.url}. Errors: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": "Request validation failed", "errors": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError):
    # Validation errors may carry raw bytes (uploads) that JSONResponse cannot encode.
    return jsonable_encoder(exc.errors(), custom_encoder={bytes: lambda b: f"<{len(b)} bytes>"})


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Catch-all so clients always receive a JSON body for unexpected server errors."""
    logger.critical(
        f"Generic unhandled exception caught: {exc.__class__.__name__} - {str(exc)} "
        f"for request: {request.method} {request.url}",
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An unexpected server error occurred. Please contact support if the issue persists."},
    )


# --- API Router Inclusion ---
app.include_router(pdf_routes.router, tags=["PDF Generation"])


# --- Root Endpoint ---
@app.get("/", tags=["General"], summary="API Root Endpoint", dependencies=[Depends(require_api_key)])
async def read_root():
    """Provides basic information about the API and the shared browser."""
    manager = await get_rendering_manager()
    return {
        "message": "Welcome to the PDF Render Service",
        "version": app.version,
        "environment": config_manager.current_environment,
        "browser_started": manager.playwright_manager.is_started,
        "active_renders": manager.playwright_manager.active_renders,
        "documentation_url": app.docs_url,
    }


if __name__ == "__main__":
    # Local development entry point; deployments run `uvicorn pdf_render_service.api.main:app`.
    import uvicorn

    logger.info("Starting Uvicorn server directly for local development.")
    uvicorn.run(app, host="0.0.0.0", port=8000)
