from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ConfigDict

from .. import live_interview
from ..db import SessionLocal
from ..live_interview import InterviewRelay, Transcript
from .auth import CANDIDATE, User, require_candidate, user_from_token
from .profile import load_profile, update_profile
from .psych import assess_and_record

router = APIRouter(prefix="/interview", tags=["interview"])

logger = logging.getLogger(__name__)


class PiqData(BaseModel):
	model_config = ConfigDict(extra="allow")

	education: Optional[str] = None
	hobbies: Optional[str] = None
	sports: Optional[str] = None
	achievements: Optional[str] = None


class TranscriptEntry(BaseModel):
	sender: str
	text: str


class FinishRequest(BaseModel):
	transcript: List[TranscriptEntry]


async def assess_interview(user: User, piq_data: Dict[str, Any], transcript: List[Dict[str, str]]) -> Dict[str, Any]:
	data = {"piq_data": piq_data, "transcript": transcript}
	return await assess_and_record(user, "Interview", data, {"transcript": transcript})


@router.get("/piq")
def get_piq(user: User = Depends(require_candidate)):
	return load_profile(user).get("piq_data") or {}


@router.put("/piq")
def save_piq(piq: PiqData, user: User = Depends(require_candidate)):
	data = piq.model_dump(exclude_none=True)

	def _set(profile: Dict[str, Any]) -> Dict[str, Any]:
		profile["piq_data"] = data
		return data

	return update_profile(user, _set)


@router.get("/history")
def history(user: User = Depends(require_candidate)):
	return (load_profile(user).get("test_results") or {}).get("Interview") or []


@router.post("/finish")
async def finish(req: FinishRequest, user: User = Depends(require_candidate)):
	transcript = [entry.model_dump() for entry in req.transcript if entry.text.strip()]
	if len(transcript) <= 1:
		raise HTTPException(status_code=400, detail="Interview too short to assess")
	piq_data = load_profile(user).get("piq_data") or {}
	return await assess_interview(user, piq_data, transcript)


def _authenticate_ws(token: str) -> Optional[User]:
	with SessionLocal() as db:
		try:
			user = user_from_token(token, db)
		except HTTPException:
			return None
	return user if user.role == CANDIDATE else None


async def _safe_send(websocket: WebSocket, message: Dict[str, Any]) -> None:
	try:
		await websocket.send_json(message)
	except (WebSocketDisconnect, RuntimeError):
		logger.debug("Interview socket already closed")


@router.websocket("/live")
async def live(websocket: WebSocket, token: str = Query(...)):
	user = _authenticate_ws(token)
	if user is None:
		await websocket.close(code=1008)
		return
	await websocket.accept()
	try:
		piq_data = load_profile(user).get("piq_data") or {}
	except HTTPException:
		await websocket.close(code=1008)
		return
	transcript = Transcript()
	connected = True
	try:
		async with live_interview.open_live_session(piq_data) as session:
			await InterviewRelay(websocket, session, transcript).run()
	except WebSocketDisconnect:
		connected = False
		logger.info("Interview socket closed by %s", user.username)
	except Exception:
		logger.exception("Live interview failed for %s", user.username)
		await _safe_send(websocket, {"type": "status", "status": "Error. Please refresh."})
	if len(transcript) > 1:
		result = await assess_interview(user, piq_data, transcript.to_list())
		if connected:
			await _safe_send(websocket, {"type": "feedback", **result})
	if connected:
		await _safe_send(websocket, {"type": "status", "status": "Session ended."})
		try:
			await websocket.close()
		except RuntimeError:
			logger.debug("Interview socket already closed")
