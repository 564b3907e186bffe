from __future__ import annotations

import logging
import random
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..exercises import GpeSession, drop_session, get_session, register
from ..settings import settings
from ..store import get_store
from .auth import User, require_candidate
from .psych import assess_and_record

router = APIRouter(prefix="/gpe", tags=["gpe"])

logger = logging.getLogger(__name__)


class StartRequest(BaseModel):
    # Index into the scenario bank; random when omitted
    scenario_index: Optional[int] = None


class PlanRequest(BaseModel):
    plan: str


def _get(session_id: str, user: User) -> GpeSession:
    session = get_session(session_id, user.username, kind=GpeSession.kind)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.get("/scenarios")
def list_scenarios(user: User = Depends(require_candidate)):
    scenarios = get_store().load()["content"].get("gpe_scenarios") or []
    return [{"index": i, "title": s.get("title")} for i, s in enumerate(scenarios)]


@router.post("/start")
def start(req: StartRequest = StartRequest(), user: User = Depends(require_candidate)):
    scenarios = get_store().load()["content"].get("gpe_scenarios") or []
    if not scenarios:
        raise HTTPException(status_code=409, detail="No GPE scenarios available")
    if req.scenario_index is None:
        scenario = random.choice(scenarios)
    elif 0 <= req.scenario_index < len(scenarios):
        scenario = scenarios[req.scenario_index]
    else:
        raise HTTPException(status_code=404, detail="No scenario at that index")
    session = register(GpeSession(user.username, scenario, settings.gpe_read_seconds, settings.gpe_plan_seconds))
    return session.snapshot()


@router.get("/{session_id}")
def state(session_id: str, user: User = Depends(require_candidate)):
    return _get(session_id, user).snapshot()


@router.post("/{session_id}/submit")
async def submit(session_id: str, req: PlanRequest, user: User = Depends(require_candidate)):
    session = _get(session_id, user)
    phase, _ = session.timer.state()
    if phase == "read":
        raise HTTPException(status_code=409, detail="Planning has not started yet")
    plan = req.plan.strip()
    if not plan:
        raise HTTPException(status_code=400, detail="Plan is empty")
    session.finished = True
    drop_session(session_id)
    scenario = session.scenario
    data = {"title": scenario.get("title"), "problem_statement": scenario.get("problem_statement"), "plan": plan}
    entry = {"title": data["title"], "plan": plan, "overtime": phase == "overtime"}
    result = await assess_and_record(user, "GPE", data, entry)
    return {"title": data["title"], "overtime": entry["overtime"], **result}
