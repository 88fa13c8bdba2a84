"""User profile endpoints."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from ...core import RANKING_LIMIT, get_session
from ...services.errors import EmptyNickname, PersistenceError
from ...services.profile import ProfileSnapshot, profile_to_dict, validate_nickname
from ...services.ranking import SessionRankingProvider, find_rank
from ...services.store import SessionProfileStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def get_profile_store(session: Session = Depends(get_session)) -> SessionProfileStore:
    return SessionProfileStore(session)


def get_ranking_provider(session: Session = Depends(get_session)) -> SessionRankingProvider:
    return SessionRankingProvider(session, limit=RANKING_LIMIT)


async def _current_rank(provider: SessionRankingProvider, user_id: str) -> Optional[int]:
    try:
        ranking = await provider.current_ranking()
    except PersistenceError as exc:
        logger.warning("Ranking unavailable for %s: %s", user_id, exc, exc_info=True)
        return None
    return find_rank(ranking, user_id)


async def _load_or_404(store: SessionProfileStore, user_id: str) -> ProfileSnapshot:
    try:
        profile = await store.load(user_id)
    except PersistenceError as exc:
        logger.warning("Profile unavailable for %s: %s", user_id, exc, exc_info=True)
        raise HTTPException(503, "Profile is temporarily unavailable") from exc
    if profile is None:
        raise HTTPException(404, "User not found")
    return profile


@router.post("/users")
async def register_user(
    body: Dict[str, Any],
    store: SessionProfileStore = Depends(get_profile_store),
    provider: SessionRankingProvider = Depends(get_ranking_provider),
):
    """Register a user, or return the existing profile for that id."""

    user_id = str(body.get("id") or "").strip()
    if not user_id:
        raise HTTPException(400, "User id is required")

    try:
        profile = await store.register(user_id)
    except PersistenceError as exc:
        logger.warning("Registration failed for %s: %s", user_id, exc, exc_info=True)
        raise HTTPException(503, "Failed to register user") from exc

    return profile_to_dict(profile, await _current_rank(provider, user_id))


@router.get("/users/{user_id}/profile")
async def get_user_profile(
    user_id: str,
    store: SessionProfileStore = Depends(get_profile_store),
    provider: SessionRankingProvider = Depends(get_ranking_provider),
):
    """Get a user's stats together with their current rank."""

    profile = await _load_or_404(store, user_id)
    return profile_to_dict(profile, await _current_rank(provider, user_id))


@router.patch("/users/{user_id}/profile")
async def update_user_profile(
    user_id: str,
    body: Dict[str, Any],
    store: SessionProfileStore = Depends(get_profile_store),
    provider: SessionRankingProvider = Depends(get_ranking_provider),
):
    """Change a user's nickname.

    The nickname is trimmed and must not be empty. Store failures are
    reported once and never retried.
    """

    candidate = body.get("nickname")
    if candidate is not None and not isinstance(candidate, str):
        raise HTTPException(400, "Nickname must be a string")

    try:
        nickname = validate_nickname(candidate or "")
    except EmptyNickname as exc:
        raise HTTPException(400, str(exc)) from exc

    profile = await _load_or_404(store, user_id)
    updated = profile.with_nickname(nickname)
    try:
        await store.save(updated)
    except PersistenceError as exc:
        logger.warning("Failed to save profile %s: %s", user_id, exc, exc_info=True)
        raise HTTPException(503, "Failed to save profile") from exc

    return profile_to_dict(updated, await _current_rank(provider, user_id))


__all__ = ["router", "get_profile_store", "get_ranking_provider"]
