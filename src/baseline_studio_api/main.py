"""FastAPI application entrypoint for Baseline Studio."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes_baselines import router as baselines_router
from .routes_meta import router as meta_router
from .routes_thresholds import router as thresholds_router
from .services import AppServices
from .settings import AppSettings


def create_app() -> FastAPI:
    settings = AppSettings.load()
    settings.ensure_paths()
    logging.getLogger("baseline_selection").setLevel(settings.log_level)

    app = FastAPI(
        title="Probcheck Baseline Studio API",
        version="0.1.0",
        description="Covariate-aware baseline selection and threshold derivation backend.",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = AppServices.build(settings)

    @app.get("/api/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(baselines_router)
    app.include_router(thresholds_router)
    app.include_router(meta_router)

    return app


app = create_app()
