"""FastAPI application entry point for Yume TV."""

import asyncio
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from yume.api import routers
from yume.config import settings
from yume.core.errors import NotFoundError, PermissionDeniedError
from yume.core.logging import setup_logging
from yume.services.document_store import RemoteDocumentStore
from yume.services.email_service import VerificationMailer
from yume.services.state_sync import StateSynchronizer


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan - startup and shutdown."""
    # Startup
    setup_logging()
    logger.info("Starting Yume TV Backend...")

    store = RemoteDocumentStore(settings.document_store_url, timeout=settings.document_store_timeout)
    synchronizer = StateSynchronizer(store, debounce_seconds=settings.save_debounce_seconds)
    mailer = VerificationMailer(settings)
    app.state.synchronizer = synchronizer
    app.state.mailer = mailer

    retry_task = None
    await synchronizer.load()
    if synchronizer.loaded:
        logger.info("Remote document loaded")
    else:
        logger.warning("Remote document unavailable, retrying in the background")
        retry_task = asyncio.create_task(
            synchronizer.retry_load(settings.load_retry_seconds, settings.load_retry_max_seconds)
        )

    yield

    # Shutdown
    logger.info("Shutting down Yume TV Backend...")
    if retry_task is not None:
        retry_task.cancel()
    await synchronizer.flush()
    await mailer.aclose()
    await store.aclose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Yume TV API",
    description="Media streaming catalog, accounts and community forum",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in routers:
    app.include_router(router)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError) -> JSONResponse:
    return JSONResponse(status_code=403, content={"detail": str(exc)})


@app.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    synchronizer = getattr(request.app.state, "synchronizer", None)
    return {
        "status": "healthy",
        "documentLoaded": bool(synchronizer and synchronizer.loaded),
        "pendingSave": bool(synchronizer and synchronizer.pending_save),
    }


if __name__ == "__main__":
    import uvicorn

    try:
        uvicorn.run(app, host=settings.host, port=settings.port, reload=False)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
