"""Master API router — mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from cutplanner.api import calculate, diagram, health, history

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(calculate.router)
api_router.include_router(history.router)
api_router.include_router(diagram.router)
