from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..assessment import get_ai_assessment
from ..exercises import OirSession, PhaseError, drop_session, get_session, register
from ..settings import settings
from ..store import get_store
from .auth import User, require_candidate
from .profile import load_profile, save_result

router = APIRouter(prefix="/oir", tags=["oir"])

logger = logging.getLogger(__name__)


class AnswerRequest(BaseModel):
	index: int
	choice: str


def _get(session_id: str, user: User) -> OirSession:
	session = get_session(session_id, user.username, kind=OirSession.kind)
	if session is None:
		raise HTTPException(status_code=404, detail="Session not found")
	return session


@router.post("/start")
def start(user: User = Depends(require_candidate)):
	content = get_store().load()["content"]
	try:
		session = OirSession.sample(
			user.username,
			content.get("oir_verbal_questions") or [],
			content.get("oir_non_verbal_questions") or [],
			settings.oir_question_count,
			settings.oir_seconds,
		)
	except ValueError as e:
		raise HTTPException(status_code=409, detail=str(e))
	register(session)
	return session.snapshot()


@router.get("/{session_id}")
def state(session_id: str, user: User = Depends(require_candidate)):
	return _get(session_id, user).snapshot()


@router.post("/{session_id}/answer")
def answer(session_id: str, req: AnswerRequest, user: User = Depends(require_candidate)):
	session = _get(session_id, user)
	try:
		session.answer(req.index, req.choice)
	except PhaseError as e:
		raise HTTPException(status_code=409, detail=str(e))
	except IndexError:
		raise HTTPException(status_code=404, detail="No question at that index")
	except ValueError as e:
		raise HTTPException(status_code=400, detail=str(e))
	return {"answered": len(session.answers), "time_left": round(session.time_left(), 1)}


@router.post("/{session_id}/finish")
async def finish(session_id: str, user: User = Depends(require_candidate)):
	session = _get(session_id, user)
	session.finished = True
	drop_session(session_id)
	score = session.score()
	persona = load_profile(user).get("persona") or "psychologist"
	feedback = await get_ai_assessment("OIR", score, persona)
	if not feedback.get("error"):
		# The local tally is authoritative
		feedback["score_percentage"] = score["score_percentage"]
	record, new_badges = save_result(user, "OIR", score, feedback)
	review = [
		{**q, "chosen": session.answers.get(i), "correct": session.answers.get(i) == q.get("answer")}
		for i, q in enumerate(session.questions)
	]
	return {**score, "feedback": feedback, "record": record, "new_badges": new_badges, "review": review}
