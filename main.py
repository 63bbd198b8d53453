from typing import Optional

from fastapi import FastAPI
from studbud.core.config import settings
from studbud.core.logging import setup_logging
from studbud.apis.study import router as study_router
from studbud.modules.generation.orchestrator import GenerationOrchestrator
from studbud.modules.generation.providers import ProviderAdapter, build_adapter
from studbud.modules.generation.session import SessionManager

import uvicorn
from fastapi.middleware.cors import CORSMiddleware


def create_app(adapter: Optional[ProviderAdapter] = None) -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app.name, version=settings.app.version)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    orchestrator = GenerationOrchestrator(adapter or build_adapter(settings.generation))
    app.state.sessions = SessionManager(
        orchestrator, default_count=settings.generation.default_item_count
    )

    app.include_router(study_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
            "provider": orchestrator.provider,
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        print(f"An error occurred when starting the server: {e}.")
