"""
Psychology tests: TAT, WAT and SRT run item by item against a per-item clock;
SDT is a single form of five paragraphs. Finished runs are assessed and added
to the candidate's history.
"""

from __future__ import annotations
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel

from ..assessment import get_ai_assessment, get_written_assessment
from ..content import SDT_PROMPTS
from ..exercises import PhaseError, TimedSequence, drop_session, get_session, register
from ..settings import settings
from ..store import get_store
from .auth import User, require_candidate
from .profile import load_profile, save_result

router = APIRouter(prefix="/psych", tags=["psychology"])

logger = logging.getLogger(__name__)

# test type -> (content bank, per-item seconds setting)
SEQUENCE_TESTS: Dict[str, tuple] = {
	"TAT": ("tat_images", "tat_seconds"),
	"WAT": ("wat_words", "wat_seconds"),
	"SRT": ("srt_scenarios", "srt_seconds"),
}


class AnswerRequest(BaseModel):
	text: str = ""


class SdtRequest(BaseModel):
	responses: List[str]


def _check_test(test_type: str) -> str:
	if test_type not in SEQUENCE_TESTS:
		raise HTTPException(status_code=404, detail=f"Unknown test: {test_type}")
	return test_type


def _get_sequence(session_id: str, user: User) -> TimedSequence:
	session = get_session(session_id, user.username, kind=TimedSequence.kind)
	if session is None:
		raise HTTPException(status_code=404, detail="Session not found")
	return session


async def assess_and_record(user: User, test_type: str, data: Dict[str, Any], entry: Dict[str, Any]) -> Dict[str, Any]:
	"""Run the AI assessment and store the attempt; failed feedback scores 0."""
	persona = load_profile(user).get("persona") or "psychologist"
	feedback = await get_ai_assessment(test_type, data, persona)
	record, new_badges = save_result(user, test_type, entry, feedback)
	return {"feedback": feedback, "record": record, "new_badges": new_badges}


# ============================================================================
# TIMED RUNS (TAT / WAT / SRT)
# ============================================================================

@router.post("/{test_type}/start")
def start_test(test_type: str, user: User = Depends(require_candidate)):
	bank, limit_setting = SEQUENCE_TESTS[_check_test(test_type)]
	items = get_store().load()["content"].get(bank) or []
	try:
		session = TimedSequence(user.username, test_type, items, getattr(settings, limit_setting))
	except ValueError as e:
		raise HTTPException(status_code=409, detail=str(e))
	register(session)
	logger.info("Started %s run %s for %s", test_type, session.session_id, user.username)
	return session.snapshot()


@router.get("/sessions/{session_id}")
def get_test_state(session_id: str, user: User = Depends(require_candidate)):
	return _get_sequence(session_id, user).snapshot()


@router.post("/sessions/{session_id}/answer")
def answer_item(session_id: str, req: AnswerRequest, user: User = Depends(require_candidate)):
	session = _get_sequence(session_id, user)
	try:
		session.submit(req.text)
	except PhaseError as e:
		raise HTTPException(status_code=409, detail=str(e))
	return session.snapshot()


@router.post("/sessions/{session_id}/finish")
async def finish_test(session_id: str, user: User = Depends(require_candidate)):
	session = _get_sequence(session_id, user)
	responses = session.finish()
	drop_session(session_id)
	if not responses:
		raise HTTPException(status_code=400, detail="No responses to assess")
	result = await assess_and_record(user, session.test_type, {"responses": responses}, {"responses": responses})
	return {"test_type": session.test_type, "responses": responses, **result}


# ============================================================================
# SDT
# ============================================================================

@router.post("/sdt")
async def submit_sdt(req: SdtRequest, user: User = Depends(require_candidate)):
	answers = [a.strip() for a in req.responses]
	if len(answers) != len(SDT_PROMPTS) or not all(answers):
		raise HTTPException(status_code=400, detail="Please answer all five questions.")
	result = await assess_and_record(user, "SDT", {"responses": answers}, {"responses": answers})
	return {"test_type": "SDT", "responses": answers, **result}


# ============================================================================
# WRITTEN ANSWER SHEETS
# ============================================================================

def _parse_json_field(raw: Optional[str], name: str) -> Any:
	if raw is None or raw == "":
		return None
	try:
		return json.loads(raw)
	except ValueError:
		raise HTTPException(status_code=400, detail=f"{name} must be valid JSON")


@router.post("/{test_type}/written")
async def written_assessment(
	test_type: str,
	typed: Optional[str] = Form(None),
	questions: Optional[str] = Form(None),
	file: Optional[UploadFile] = File(None),
	user: User = Depends(require_candidate),
):
	"""Free-text evaluation of typed answers or a handwritten sheet; not scored."""
	bank, _ = SEQUENCE_TESTS[_check_test(test_type)]
	question_list = _parse_json_field(questions, "questions")
	if question_list is None:
		question_list = get_store().load()["content"].get(bank) or []
	if not isinstance(question_list, list):
		raise HTTPException(status_code=400, detail="questions must be a list")
	if file is not None:
		raw = await file.read()
		if not raw:
			raise HTTPException(status_code=400, detail="Empty file")
		text = await get_written_assessment(test_type, question_list, file_bytes=raw, mime_type=file.content_type)
		return {"test_type": test_type, "assessment": text}
	answers = _parse_json_field(typed, "typed")
	expected = list if test_type == "TAT" else dict
	if not answers or not isinstance(answers, expected):
		raise HTTPException(status_code=400, detail="Provide typed answers or upload an answer sheet")
	text = await get_written_assessment(test_type, question_list, typed=answers)
	return {"test_type": test_type, "assessment": text}
