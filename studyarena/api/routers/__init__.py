"""Aggregate API routers."""

from fastapi import APIRouter

from .ranking import router as ranking_router
from .system import router as system_router
from .users import router as users_router

ALL_ROUTERS: tuple[APIRouter, ...] = (
    system_router,
    ranking_router,
    users_router,
)

__all__ = ["ALL_ROUTERS"]
