"""
Pastebin Vault - Main FastAPI application.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pastebin.config import settings
from pastebin.database import create_store
from pastebin.errors import PasteError
from pastebin.routes import health, pastes

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(store=None) -> FastAPI:
    """
    Build the application.

    Args:
        store: PasteStore to serve from; created from settings at startup when omitted
    """
    app = FastAPI(
        title="Pastebin Vault",
        description="Short-lived, optionally encrypted, optionally burn-after-read text pastes",
        version="1.0.0",
    )

    # Add CORS middleware (optional, for cross-origin requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(pastes.router)

    @app.exception_handler(PasteError)
    async def paste_error_handler(request: Request, exc: PasteError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.on_event("startup")
    async def startup_event():
        """Startup event handler."""
        logger.info("Pastebin Vault application starting...")
        app.state.store = store or create_store()

        # Log database status
        if app.state.store.using_fallback:
            logger.warning("DATABASE: Using IN-MEMORY storage (Redis not available)")
            logger.warning("   Data will NOT persist across server restarts!")
        else:
            logger.info("DATABASE: Connected to Redis")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Shutdown event handler."""
        logger.info("Pastebin Vault application shutting down...")
        app.state.store.close()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pastebin.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
