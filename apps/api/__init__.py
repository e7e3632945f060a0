"""FastAPI application factory."""
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.routes.scoring import router as scoring_router
from core.config import get_settings
from core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Metroscore API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(scoring_router)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok", "supabase_configured": bool(settings.supabase_url and settings.supabase_key)}

    logger.info("Metroscore API ready")
    return app


__all__ = ["create_app"]
