from fastapi import APIRouter

from ..content import BADGES, OLQ_LIST, SDT_PROMPTS
from ..settings import settings
from ..users import PERSONAS

router = APIRouter(prefix="/catalog", tags=["catalog"])


def _exercises():
	return [
		{
			"id": "TAT",
			"name": "Thematic Apperception Test",
			"stage": "psychology",
			"description": "Write a story for each picture shown.",
			"per_item_seconds": settings.tat_seconds,
		},
		{
			"id": "WAT",
			"name": "Word Association Test",
			"stage": "psychology",
			"description": "Write the first sentence that comes to mind for each word.",
			"per_item_seconds": settings.wat_seconds,
		},
		{
			"id": "SRT",
			"name": "Situation Reaction Test",
			"stage": "psychology",
			"description": "Write your reaction to each situation.",
			"per_item_seconds": settings.srt_seconds,
		},
		{
			"id": "SDT",
			"name": "Self-Description Test",
			"stage": "psychology",
			"description": "Describe yourself as others see you, and as you see yourself.",
			"prompts": SDT_PROMPTS,
		},
		{
			"id": "Lecturerette",
			"name": "Lecturerette",
			"stage": "gto",
			"description": "Pick one of four topics, prepare, then speak.",
			"phases": {"prepare": settings.lecturerette_prep_seconds, "speak": settings.lecturerette_speech_seconds},
		},
		{
			"id": "GPE",
			"name": "Group Planning Exercise",
			"stage": "gto",
			"description": "Read the situation and the map, then write your plan.",
			"phases": {"read": settings.gpe_read_seconds, "plan": settings.gpe_plan_seconds},
		},
		{
			"id": "OIR",
			"name": "Officer Intelligence Rating",
			"stage": "screening",
			"description": "Verbal and non-verbal reasoning questions against one overall clock.",
			"questions": settings.oir_question_count,
			"total_seconds": settings.oir_seconds,
		},
		{
			"id": "Interview",
			"name": "Personal Interview",
			"stage": "interview",
			"description": "Live voice interview with an AI Interviewing Officer based on your PIQ.",
		},
	]


@router.get("")
def get_catalog():
	return {
		"exercises": _exercises(),
		"olqs": OLQ_LIST,
		"badges": BADGES,
		"personas": list(PERSONAS),
		"sdt_prompts": SDT_PROMPTS,
	}
