from __future__ import annotations

import logging
from typing import Any, Dict, List, Tuple

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..store import get_store
from ..users import PERSONAS, badge_board, find_user, history_summary, leaderboard, record_result
from .auth import User, require_candidate

router = APIRouter(tags=["profile"])

logger = logging.getLogger(__name__)


class PersonaRequest(BaseModel):
    persona: str


class ProfilePicRequest(BaseModel):
    profile_pic: str


def load_profile(user: User) -> Dict[str, Any]:
    profile = find_user(get_store().load(), user.username)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found; please log in again")
    return profile


def update_profile(user: User, mutate) -> Any:
    """Apply ``mutate(profile)`` inside a store update and return its result."""

    def _apply(doc: Dict[str, Any]) -> Any:
        profile = find_user(doc, user.username)
        if profile is None:
            raise HTTPException(status_code=404, detail="Profile not found; please log in again")
        return mutate(profile)

    return get_store().update(_apply)


def save_result(user: User, test_type: str, entry: Dict[str, Any], feedback: Dict[str, Any]) -> Tuple[Dict[str, Any], List[str]]:
    record, badges = update_profile(user, lambda profile: record_result(profile, test_type, entry, feedback))
    logger.info("Recorded %s result for %s (+%s)", test_type, user.username, record["score"])
    return record, badges


@router.get("/me")
def get_me(user: User = Depends(require_candidate)):
    return load_profile(user)


@router.put("/me/persona")
def set_persona(req: PersonaRequest, user: User = Depends(require_candidate)):
    if req.persona not in PERSONAS:
        raise HTTPException(status_code=400, detail=f"persona must be one of {', '.join(PERSONAS)}")

    def _set(profile: Dict[str, Any]) -> Dict[str, Any]:
        profile["persona"] = req.persona
        return dict(profile)

    return update_profile(user, _set)


@router.put("/me/profile-pic")
def set_profile_pic(req: ProfilePicRequest, user: User = Depends(require_candidate)):
    pic = req.profile_pic.strip()
    if not pic.startswith(("http://", "https://", "data:image/")):
        raise HTTPException(status_code=400, detail="profile_pic must be an image URL or data URL")

    def _set(profile: Dict[str, Any]) -> Dict[str, Any]:
        profile["profile_pic"] = pic
        return dict(profile)

    return update_profile(user, _set)


@router.get("/me/history")
def get_history(user: User = Depends(require_candidate)):
    profile = load_profile(user)
    return {"score": profile.get("score") or 0, "tests": history_summary(profile)}


@router.get("/me/badges")
def get_badges(user: User = Depends(require_candidate)):
    return badge_board(load_profile(user))


@router.get("/leaderboard")
def get_leaderboard(user: User = Depends(require_candidate)):
    return leaderboard(get_store().load()["users"])
