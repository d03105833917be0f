"""Off-Grid Designer — electrical analysis backend

Stateless responsibilities:
  1. Device catalog lookups
  2. Wire current inference and gauge sizing
  3. Load, battery and runtime calculators
  4. Design validation, scoring and auto-correction

Nothing is persisted; every request carries the full design.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from offgrid.config import get_settings
from offgrid.routers import devices, sizing, validation

VERSION = "0.1.0"


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title=settings.app_name,
        version=VERSION,
        description=(
            "Electrical network analysis for RV, marine and off-grid "
            "DC/AC systems.\n\n"
            "Wire sizing, current inference, and design validation "
            "against ABYC/NEC practice."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── Device catalog ───
    application.include_router(
        devices.router, prefix="/api/devices", tags=["Devices"]
    )

    # ─── Calculators (stateless) ───
    application.include_router(sizing.router, prefix="/api", tags=["Sizing"])

    # ─── Validation + correction (stateless) ───
    application.include_router(
        validation.router, prefix="/api", tags=["Validation"]
    )

    @application.get("/health")
    async def health_check():
        return {"status": "ok", "service": "offgrid-designer", "version": VERSION}

    return application


app = create_app()
