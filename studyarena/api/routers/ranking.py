"""Ranking endpoints."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from ...core import RANKING_LIMIT, get_session
from ...services.errors import PersistenceError
from ...services.ranking import SessionRankingProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["ranking"])


@router.get("/ranking")
async def get_ranking(limit: Optional[int] = None, session: Session = Depends(get_session)):
    """Get users ordered by experience with their 1-based rank."""

    if limit is not None and limit < 1:
        raise HTTPException(400, "Limit must be positive")

    provider = SessionRankingProvider(session, limit=limit or RANKING_LIMIT)
    try:
        entries = await provider.current_ranking()
    except PersistenceError as exc:
        logger.warning("Ranking unavailable: %s", exc, exc_info=True)
        raise HTTPException(503, "Ranking is temporarily unavailable") from exc

    return {
        "entries": [
            {
                "rank": index + 1,
                "id": entry.user_id,
                "nickname": entry.nickname,
                "experience": entry.experience,
            }
            for index, entry in enumerate(entries)
        ],
    }


__all__ = ["router"]
