from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from .content import BADGES, DEFAULT_PROFILE_PIC


PERSONAS = ("psychologist", "coach", "friend")
TEST_TYPES = ("TAT", "WAT", "SRT", "SDT", "Lecturerette", "GPE", "OIR", "Interview")
PSYCH_TESTS = ("TAT", "WAT", "SRT", "SDT")
POINTS_PER_OLQ = 10


def new_user(name: str, roll_number: str) -> Dict[str, Any]:
	return {
		"name": name,
		"roll_number": roll_number,
		"test_results": {},
		"score": 0,
		"piq_data": {},
		"persona": "psychologist",
		"unlocked_badges": [],
		"profile_pic": DEFAULT_PROFILE_PIC,
		"practice_dates": [],
	}


def find_user(doc: Dict[str, Any], roll_number: str) -> Optional[Dict[str, Any]]:
	for user in doc.get("users", []):
		if user.get("roll_number") == roll_number:
			return user
	return None


def login_user(doc: Dict[str, Any], name: str, roll_number: str) -> Dict[str, Any]:
	user = find_user(doc, roll_number)
	if user is None:
		user = new_user(name, roll_number)
		doc.setdefault("users", []).append(user)
	else:
		# Name may have been corrected since the last visit
		user["name"] = name
	return user


def score_gain(feedback: Dict[str, Any]) -> int:
	if not isinstance(feedback, dict) or feedback.get("error"):
		return 0
	olqs = feedback.get("olqs_demonstrated")
	if not isinstance(olqs, list):
		return 0
	return len(olqs) * POINTS_PER_OLQ


def _has_streak(practice_dates: List[str], length: int) -> bool:
	days = sorted({date.fromisoformat(d) for d in practice_dates})
	run = 1
	for prev, cur in zip(days, days[1:]):
		run = run + 1 if cur - prev == timedelta(days=1) else 1
		if run >= length:
			return True
	return length <= 1 and bool(days)


def earned_badges(user: Dict[str, Any]) -> List[str]:
	results = user.get("test_results") or {}

	def count(test_type: str) -> int:
		entries = results.get(test_type)
		return len(entries) if isinstance(entries, list) else 0

	earned: List[str] = []
	if any(isinstance(v, list) and v for v in results.values()):
		earned.append("first_step")
	if all(count(t) > 0 for t in PSYCH_TESTS):
		earned.append("psych_initiate")
	if _has_streak(user.get("practice_dates") or [], 3):
		earned.append("consistent_cadet")
	if count("TAT") >= 5:
		earned.append("story_weaver")
	if count("WAT") >= 5:
		earned.append("word_warrior")
	if count("Lecturerette") >= 1:
		earned.append("orator_apprentice")
	if count("Interview") >= 1:
		earned.append("interviewer_ace")
	if count("GPE") >= 1:
		earned.append("group_strategist")
	if any(entry.get("score_percentage") == 100 for entry in results.get("OIR") or []):
		earned.append("perfect_oir")
	return earned


def check_and_award_badges(user: Dict[str, Any]) -> List[str]:
	"""Merge newly earned badges into the user; returns the ones just unlocked."""
	current = list(user.get("unlocked_badges") or [])
	fresh = [b for b in earned_badges(user) if b not in current]
	user["unlocked_badges"] = current + fresh
	return fresh


def record_result(
	user: Dict[str, Any],
	test_type: str,
	entry: Dict[str, Any],
	feedback: Dict[str, Any],
	*,
	now: Optional[datetime] = None,
) -> Tuple[Dict[str, Any], List[str]]:
	"""Append a scored attempt; returns the stored record and any badges it unlocked."""
	now = now or datetime.now(timezone.utc)
	gain = score_gain(feedback)
	record = {**entry, "feedback": feedback, "score": gain, "date": now.isoformat()}
	user.setdefault("test_results", {}).setdefault(test_type, []).append(record)
	user["score"] = (user.get("score") or 0) + gain
	today = now.date().isoformat()
	dates = user.setdefault("practice_dates", [])
	if today not in dates:
		dates.append(today)
	return record, check_and_award_badges(user)


def leaderboard(users: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
	ranked = sorted(users, key=lambda u: u.get("score") or 0, reverse=True)
	return [
		{
			"rank": index + 1,
			"name": u.get("name"),
			"roll_number": u.get("roll_number"),
			"score": u.get("score") or 0,
			"profile_pic": u.get("profile_pic") or DEFAULT_PROFILE_PIC,
		}
		for index, u in enumerate(ranked)
	]


def history_summary(user: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
	results = user.get("test_results") or {}
	summary: Dict[str, Dict[str, Any]] = {}
	for test_type in TEST_TYPES:
		entries = results.get(test_type) or []
		latest = entries[-1] if entries else None
		summary[test_type] = {
			"attempts": len(entries),
			"latest": {"date": latest.get("date"), "score": latest.get("score"), "feedback": latest.get("feedback")} if latest else None,
		}
	return summary


def badge_board(user: Dict[str, Any]) -> List[Dict[str, Any]]:
	unlocked = set(user.get("unlocked_badges") or [])
	return [{"id": badge_id, **badge, "unlocked": badge_id in unlocked} for badge_id, badge in BADGES.items()]
