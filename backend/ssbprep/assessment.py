"""
AI assessment of candidate responses.

Two flavours are offered:

- ``get_ai_assessment`` asks the model for structured JSON feedback framed
  around the 15 Officer-Like Qualities (OLQs). Its ``olqs_demonstrated`` list
  drives scoring.
- ``get_written_assessment`` returns a plain-text, per-question evaluation of
  typed answers or an uploaded handwritten answer sheet (image/PDF).

Neither function raises on AI failure: structured feedback degrades to an
``{"error": ...}`` dict and written feedback to an ``Error: ...`` string.
"""

from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

from .content import OLQ_LIST, SDT_PROMPTS
from .gemini_client import GeminiClient

logger = logging.getLogger(__name__)

FEEDBACK_ERROR = "Failed to get feedback. Please try again."

PERSONA_PROMPTS: Dict[str, str] = {
	"psychologist": "Act as an expert SSB psychologist",
	"coach": "Act as a strict but fair SSB coaching expert",
	"friend": "Act as a supportive and encouraging friend who is also preparing for the SSB",
}

# ============================================================================
# RESPONSE SCHEMA
# ============================================================================

_STRING = {"type": "STRING"}
_STRING_LIST = {"type": "ARRAY", "items": _STRING}
_POINT_LIST = {
	"type": "ARRAY",
	"items": {"type": "OBJECT", "properties": {"point": _STRING, "example_olq": _STRING}},
}


def feedback_schema(test_type: str) -> Dict[str, Any]:
	olqs = ", ".join(OLQ_LIST)
	properties: Dict[str, Any] = {
		"overall_summary": {"type": "STRING", "description": "A brief summary of the performance."},
		"olqs_demonstrated": {**_STRING_LIST, "description": f"A list of OLQs demonstrated from this list: {olqs}"},
		"strengths": {**_POINT_LIST, "description": "List 2-3 key strengths with examples and the OLQ they relate to."},
		"weaknesses": {**_POINT_LIST, "description": "List 2-3 key weaknesses with examples and the OLQ they relate to."},
		"detailed_olq_assessment": {
			"type": "ARRAY",
			"items": {"type": "OBJECT", "properties": {"olq": _STRING, "assessment": _STRING}},
		},
		"actionable_advice": {
			"type": "OBJECT",
			"properties": {
				"what_to_practice": _STRING_LIST,
				"how_to_improve": _STRING_LIST,
				"what_to_avoid": _STRING_LIST,
			},
		},
	}
	required = ["overall_summary", "olqs_demonstrated", "strengths", "weaknesses", "detailed_olq_assessment", "actionable_advice"]
	if test_type == "Lecturerette":
		properties["content_feedback"] = {"type": "STRING", "description": "Feedback on structure, relevance and depth of content."}
		properties["delivery_feedback"] = {"type": "STRING", "description": "Feedback on fluency, pace, confidence and use of time."}
		required += ["content_feedback", "delivery_feedback"]
	elif test_type == "Interview":
		properties["confidence_level"] = {"type": "STRING"}
		properties["power_of_expression"] = {"type": "STRING"}
		properties["areas_for_improvement"] = _STRING_LIST
		required += ["confidence_level", "power_of_expression", "areas_for_improvement"]
	elif test_type == "OIR":
		properties["score_percentage"] = {"type": "NUMBER"}
		properties["struggled_topics"] = _STRING_LIST
		properties["improvement_topics"] = _STRING_LIST
		required += ["struggled_topics", "improvement_topics"]
	return {"type": "OBJECT", "properties": properties, "required": required}


# ============================================================================
# PROMPT CONSTRUCTION
# ============================================================================

def _content_for(test_type: str, data: Dict[str, Any]) -> str:
	responses = data.get("responses") or []
	if test_type == "TAT":
		stories = "\n\n".join(f"Story {i + 1}: \"{story}\"" for i, story in enumerate(responses))
		return f"Analyze these stories from a Thematic Apperception Test. Evaluate structure, protagonist's traits, and overall theme.\n\n{stories}"
	if test_type == "WAT":
		lines = "\n".join(f"{r.get('word')}: {r.get('sentence')}" for r in responses)
		return f"Analyze these sentences from a Word Association Test. Evaluate positivity, maturity, and thought process.\n\nResponses:\n{lines}"
	if test_type == "SRT":
		lines = "\n".join(f"{r.get('situation')}: {r.get('reaction')}" for r in responses)
		return f"Analyze these reactions from a Situation Reaction Test. Evaluate problem-solving, decision-making, and emotional stability.\n\nReactions:\n{lines}"
	if test_type == "SDT":
		blocks = "\n".join(f"{prompt}\n{answer}\n" for prompt, answer in zip(SDT_PROMPTS, responses))
		return f"Analyze these Self-Description Test paragraphs. Summarize self-awareness, honesty, and personality. Identify key strengths and weaknesses.\n\n{blocks}"
	if test_type == "Interview":
		return (
			"Analyze this personal interview transcript, keeping the candidate's detailed PIQ data in mind. "
			"Evaluate for OLQs like self-confidence, power of expression, social adaptability, honesty, and determination. "
			"Also rate the candidate's confidence level and power of expression and list areas for improvement. "
			f"PIQ Data: {json.dumps(data.get('piq_data') or {})}. Transcript: {json.dumps(data.get('transcript') or [])}."
		)
	if test_type == "Lecturerette":
		return (
			"Analyze this lecturerette (a short individual talk given to the group). "
			"Evaluate both the content (structure, relevance, depth, examples) and the delivery (fluency, confidence, pace, use of the allotted time). "
			f"Topic: \"{data.get('topic')}\". Speaking time used: {data.get('duration_seconds')} seconds of {data.get('allotted_seconds')}.\n\n"
			f"Transcript:\n{data.get('transcript')}"
		)
	if test_type == "GPE":
		return (
			"Analyze this Group Planning Exercise solution. Evaluate prioritisation of tasks, use of available resources, "
			"time management, practicality, and concern for the safety of everyone involved.\n\n"
			f"Scenario: {data.get('title')}\n{data.get('problem_statement')}\n\nCandidate's plan:\n{data.get('plan')}"
		)
	if test_type == "OIR":
		categories = "\n".join(
			f"{name}: {tally.get('correct', 0)}/{tally.get('total', 0)} correct"
			for name, tally in (data.get("by_category") or {}).items()
		)
		return (
			"Analyze this Officer Intelligence Rating test result. Identify the topics the candidate struggled with "
			"and the topics they should work on to improve.\n\n"
			f"Score: {data.get('correct')}/{data.get('total')} ({data.get('score_percentage')}%). "
			f"Questions left unanswered: {data.get('unanswered', 0)}.\n\nResults by category:\n{categories}"
		)
	raise ValueError(f"Unsupported test type: {test_type}")


def build_assessment_prompt(test_type: str, data: Dict[str, Any], persona: str = "psychologist") -> str:
	persona_prompt = PERSONA_PROMPTS.get(persona, PERSONA_PROMPTS["psychologist"])
	olqs = ", ".join(OLQ_LIST)
	content = _content_for(test_type, data)
	return (
		f"{persona_prompt} providing detailed, structured feedback. Your analysis must be encouraging, constructive, and professional, "
		f"referencing the 15 Officer-Like Qualities (OLQs): {olqs}. {content}. "
		"Your response must be a JSON object conforming to the provided schema. Analyze the candidate's responses holistically to provide: "
		"1. An overall summary. 2. A list of OLQs clearly demonstrated (for scoring). 3. Specific strengths with related OLQs. "
		"4. Specific weaknesses with related OLQs. 5. A detailed assessment for several key OLQs. "
		"6. Highly specific, actionable advice broken down into what to practice, how to improve, and what to avoid."
	)


def extract_json_object(text: str) -> Dict[str, Any]:
	try:
		data = json.loads(text)
		if isinstance(data, dict):
			return data
	except (TypeError, ValueError):
		pass
	code_block = re.search(r"```(?:json)?\s*([\s\S]*?)\s*```", text or "")
	if code_block:
		try:
			data = json.loads(code_block.group(1))
			if isinstance(data, dict):
				return data
		except ValueError:
			pass
	first = (text or "").find("{")
	last = (text or "").rfind("}")
	if first != -1 and last > first:
		try:
			data = json.loads(text[first : last + 1])
			if isinstance(data, dict):
				return data
		except ValueError:
			pass
	raise ValueError("Failed to parse JSON from Gemini output")


def _new_client() -> GeminiClient:
	return GeminiClient()


async def get_ai_assessment(test_type: str, data: Dict[str, Any], persona: str = "psychologist") -> Dict[str, Any]:
	try:
		prompt = build_assessment_prompt(test_type, data, persona)
		client = _new_client()
		try:
			raw = await client.generate(prompt, response_schema=feedback_schema(test_type), thinking_budget=0)
		finally:
			await client.aclose()
		feedback = extract_json_object(raw)
	except Exception:
		logger.exception("AI feedback generation failed for %s", test_type)
		return {"error": FEEDBACK_ERROR}
	if not isinstance(feedback.get("olqs_demonstrated"), list):
		feedback["olqs_demonstrated"] = []
	# Keep only recognised OLQs so scoring cannot be inflated by free text
	feedback["olqs_demonstrated"] = normalize_olqs(feedback["olqs_demonstrated"])
	return feedback


def normalize_olqs(values: Sequence[Any]) -> List[str]:
	canonical = {olq.lower(): olq for olq in OLQ_LIST}
	seen: List[str] = []
	for value in values:
		olq = canonical.get(str(value).strip().lower())
		if olq and olq not in seen:
			seen.append(olq)
	return seen


# ============================================================================
# WRITTEN (TYPED OR HANDWRITTEN) ASSESSMENT
# ============================================================================

WRITTEN_SYSTEM_INSTRUCTION = """You are an assessment evaluator for user-submitted answers for the SSB {test_type}. Users can either type their answers directly or upload an image/PDF of their handwritten answer sheet. Your task is to assess the answers based on the provided questions.

Strict Rules:
1. If the user typed the answers, read and assess the typed responses.
2. If the user uploaded a handwritten answer sheet, read the text from the image/file and assess those answers.
3. Do NOT rewrite, rephrase, or correct any part of the user's answers, whether typed or handwritten. Maintain all content exactly as you see it.
4. Provide your assessment clearly and consistently for each question.
5. Handle either input mode (typed or uploaded) automatically.

Return your entire output as a single block of text in the following format:

Question Number: [Number]
Original Answer: [Exact text as typed or recognized from handwriting]
Assessment: [Your assessment based on meaning and content only]

... (repeat for all questions) ...

After listing all:
Final Summary: [Brief overall assessment of OLQs demonstrated, strengths, and weaknesses.]"""


def question_context(test_type: str, questions: Sequence[str]) -> str:
	if test_type == "TAT":
		return f"The user was shown {len(questions)} standard Thematic Apperception Test pictures and wrote a story for each."
	if test_type == "WAT":
		return "The user was given the following words to write sentences for:\n" + ", ".join(questions)
	if test_type == "SRT":
		numbered = "\n".join(f"{i + 1}. {q}" for i, q in enumerate(questions))
		return f"The user was given the following situations to react to:\n{numbered}"
	raise ValueError(f"Written assessment is not available for {test_type}")


def format_typed_answers(test_type: str, typed: Any) -> str:
	if test_type == "TAT":
		return "\n---\n".join(f"Story {i + 1}:\n{story}\n" for i, story in enumerate(typed))
	if test_type == "WAT":
		return "\n".join(f"{word}: {sentence}" for word, sentence in typed.items())
	if test_type == "SRT":
		return "\n---\n".join(f"Situation: {situation}\nResponse: {response}\n" for situation, response in typed.items())
	raise ValueError(f"Written assessment is not available for {test_type}")


def build_written_parts(
	test_type: str,
	questions: Sequence[str],
	*,
	typed: Any = None,
	file_bytes: Optional[bytes] = None,
	mime_type: Optional[str] = None,
) -> List[Dict[str, Any]]:
	context = question_context(test_type, questions)
	if file_bytes is not None:
		prompt = (
			f"Here are the questions/context:\n{context}\n\n"
			"Please analyze the provided file containing the user's handwritten answers and provide your assessment according to the rules."
		)
		return [
			{"text": prompt},
			{"inline_data": {"mime_type": mime_type or "application/octet-stream", "data": base64.b64encode(file_bytes).decode("ascii")}},
		]
	answers = format_typed_answers(test_type, typed)
	prompt = (
		f"Here are the questions/context:\n{context}\n\n"
		f"Here are the user's typed answers:\n{answers}\n\n"
		"Please provide your assessment according to the rules."
	)
	return [{"text": prompt}]


async def get_written_assessment(
	test_type: str,
	questions: Sequence[str],
	*,
	typed: Any = None,
	file_bytes: Optional[bytes] = None,
	mime_type: Optional[str] = None,
) -> str:
	try:
		parts = build_written_parts(test_type, questions, typed=typed, file_bytes=file_bytes, mime_type=mime_type)
		client = _new_client()
		try:
			return await client.generate_multimodal(
				parts,
				system_instruction=WRITTEN_SYSTEM_INSTRUCTION.format(test_type=test_type),
				thinking_budget=0,
			)
		finally:
			await client.aclose()
	except Exception as e:
		logger.exception("Written assessment error for %s", test_type)
		return f"Error: Failed to get AI assessment. {e}"
