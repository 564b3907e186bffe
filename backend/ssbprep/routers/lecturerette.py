from __future__ import annotations

import logging
import random

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..exercises import LecturetteSession, PhaseError, drop_session, get_session, register
from ..settings import settings
from ..store import get_store
from .auth import User, require_candidate
from .psych import assess_and_record

router = APIRouter(prefix="/lecturerette", tags=["lecturerette"])

logger = logging.getLogger(__name__)

TOPIC_CHOICES = 4


class ChooseRequest(BaseModel):
    topic: str


class SubmitRequest(BaseModel):
    transcript: str


def _get(session_id: str, user: User) -> LecturetteSession:
    session = get_session(session_id, user.username, kind=LecturetteSession.kind)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/start")
def start(user: User = Depends(require_candidate)):
    topics = get_store().load()["content"].get("lecturerette_topics") or []
    if not topics:
        raise HTTPException(status_code=409, detail="No lecturerette topics available")
    candidates = random.sample(topics, min(TOPIC_CHOICES, len(topics)))
    session = register(
        LecturetteSession(user.username, candidates, settings.lecturerette_prep_seconds, settings.lecturerette_speech_seconds)
    )
    return session.snapshot()


@router.post("/{session_id}/choose")
def choose(session_id: str, req: ChooseRequest, user: User = Depends(require_candidate)):
    session = _get(session_id, user)
    try:
        session.choose(req.topic)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PhaseError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.snapshot()


@router.post("/{session_id}/speak")
def start_speaking(session_id: str, user: User = Depends(require_candidate)):
    session = _get(session_id, user)
    try:
        session.start_speaking()
    except PhaseError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.snapshot()


@router.get("/{session_id}")
def state(session_id: str, user: User = Depends(require_candidate)):
    return _get(session_id, user).snapshot()


@router.post("/{session_id}/submit")
async def submit(session_id: str, req: SubmitRequest, user: User = Depends(require_candidate)):
    session = _get(session_id, user)
    phase, _ = session.phase()
    if phase not in ("speak", "overtime"):
        raise HTTPException(status_code=409, detail=f"Cannot submit during {phase}")
    transcript = req.transcript.strip()
    if not transcript:
        raise HTTPException(status_code=400, detail="Transcript is empty")
    duration = round(session.speaking_time(), 1)
    session.finished = True
    drop_session(session_id)
    data = {
        "topic": session.topic,
        "transcript": transcript,
        "duration_seconds": duration,
        "allotted_seconds": settings.lecturerette_speech_seconds,
    }
    entry = {**data, "overtime": phase == "overtime"}
    result = await assess_and_record(user, "Lecturerette", data, entry)
    return {"topic": session.topic, "duration_seconds": duration, "overtime": entry["overtime"], **result}
