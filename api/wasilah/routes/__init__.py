from fastapi import APIRouter, FastAPI

from .admin import router as admin_router, scaffold_router as admin_scaffold_router
from .participant import router as participant_router, scaffold_router as participant_scaffold_router

API_PREFIX = "/api"


def include_modular_routers(app: FastAPI) -> None:
    app.include_router(participant_router, prefix=API_PREFIX, tags=["participant"])
    app.include_router(admin_router, prefix=API_PREFIX, tags=["admin"])

    app.include_router(participant_scaffold_router, prefix="/_scaffold/participant", tags=["scaffold-participant"])
    app.include_router(admin_scaffold_router, prefix="/_scaffold/admin", tags=["scaffold-admin"])


__all__ = ["include_modular_routers", "APIRouter"]
