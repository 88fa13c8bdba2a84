"""System-level API endpoints."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core import DEFAULT_NICKNAME, RANKING_LIMIT, UNSET_NICKNAME_LABEL

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> Dict[str, bool]:
    """Simple readiness probe."""

    return {"ok": True}


@router.get("/healthz")
def healthz() -> JSONResponse:
    """Kubernetes-style readiness endpoint."""

    return JSONResponse({"ok": True})


@router.get("/config")
def get_config() -> Dict[str, Any]:
    """Expose frontend configuration values."""

    return {
        "default_nickname": DEFAULT_NICKNAME,
        "unset_nickname_label": UNSET_NICKNAME_LABEL,
        "ranking_limit": RANKING_LIMIT,
    }


__all__ = ["router"]
