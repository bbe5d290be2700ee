"""
Application entry-point.

Run locally:
    uvicorn main:app --reload
"""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.cors import CORSMiddleware

from core.config import settings
from core.logging import configure_logging
from api import router as api_router
from services.email_dispatch import EmailDispatcher, build_email_dispatcher
from services.storage import Storage, build_storage
from services.summarizer import Summarizer, build_summarizer

STATIC_DIR = Path(__file__).resolve().parent / "static"


def create_app(
    storage: Optional[Storage] = None,
    summarizer: Optional[Summarizer] = None,
    email_dispatcher: Optional[EmailDispatcher] = None,
) -> FastAPI:
    app = FastAPI(
        title="Meeting Notes AI",
        version="0.1.0",
        openapi_url="/openapi.json",
        docs_url="/docs" if settings.ENV != "production" else None,
    )

    app.state.storage = storage or build_storage()
    app.state.summarizer = summarizer or build_summarizer()
    app.state.email_dispatcher = email_dispatcher or build_email_dispatcher()

    # CORS – open in dev, tighten in prod
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount versioned routes
    app.include_router(api_router, prefix="/api/v1")

    @app.on_event("startup")
    async def _startup() -> None:
        await app.state.storage.init()

    @app.get("/health", tags=["Health"])
    async def healthcheck() -> dict[str, str]:
        """Kubernetes / Docker health check."""
        return {"status": "ok"}

    # Browser client; mounted last so it doesn't shadow the API
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")
    return app


configure_logging()  # sets loguru as global logger

app = create_app()
