"""
Timed exercise sessions.

Timers are deadlines compared against a clock on every access, so a session
never needs a background thread: reading its state "ticks" it forward. The
clock is injectable (``time.monotonic`` by default) to keep the logic testable.
"""

from __future__ import annotations

import random
import time
import uuid
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

Clock = Callable[[], float]


class PhaseError(RuntimeError):
	"""Raised when an action is attempted in a phase that does not allow it."""


class _Session:
	kind = "session"

	def __init__(self, owner: str, *, clock: Clock = time.monotonic) -> None:
		self.session_id: str = uuid.uuid4().hex
		self.owner = owner
		self.clock = clock
		self.created_at: float = clock()
		self.finished = False


# ============================================================================
# TEST RUNNER (TAT / WAT / SRT)
# ============================================================================

class TimedSequence(_Session):
	"""Shows bank items one at a time, each with its own time limit.

	When an item's time runs out, an empty response is recorded and the next
	item starts, exactly as if the candidate had pressed "Next".
	"""

	kind = "sequence"

	def __init__(self, owner: str, test_type: str, items: Sequence[str], time_limit: float, *, clock: Clock = time.monotonic) -> None:
		super().__init__(owner, clock=clock)
		if not items:
			raise ValueError("No items available for this test")
		self.test_type = test_type
		self.items = list(items)
		self.time_limit = float(time_limit)
		self.index = 0
		self.responses: List[Any] = []
		self.item_started_at = self.created_at

	def _shape(self, item: str, text: str) -> Any:
		if self.test_type == "WAT":
			return {"word": item, "sentence": text}
		if self.test_type == "SRT":
			return {"situation": item, "reaction": text}
		return text

	def _advance(self, text: str, started_next_at: float) -> None:
		self.responses.append(self._shape(self.items[self.index], text))
		if self.index < len(self.items) - 1:
			self.index += 1
			self.item_started_at = started_next_at
		else:
			self.finished = True

	def tick(self) -> None:
		now = self.clock()
		while not self.finished and now - self.item_started_at >= self.time_limit:
			self._advance("", self.item_started_at + self.time_limit)

	def time_left(self) -> float:
		self.tick()
		if self.finished:
			return 0.0
		return max(0.0, self.time_limit - (self.clock() - self.item_started_at))

	def current_item(self) -> Optional[str]:
		self.tick()
		return None if self.finished else self.items[self.index]

	def submit(self, text: str) -> None:
		self.tick()
		if self.finished:
			raise PhaseError("Test already finished")
		self._advance(text.strip(), self.clock())

	def finish(self) -> List[Any]:
		"""End early; items never reached are left out."""
		self.tick()
		self.finished = True
		return self.responses

	def snapshot(self) -> Dict[str, Any]:
		item = self.current_item()
		return {
			"session_id": self.session_id,
			"test_type": self.test_type,
			"item": item,
			"index": self.index,
			"total": len(self.items),
			"time_left": round(self.time_left(), 1),
			"time_limit": self.time_limit,
			"answered": len(self.responses),
			"finished": self.finished,
		}


# ============================================================================
# PHASED TIMER (LECTURERETTE / GPE)
# ============================================================================

class PhasedTimer:
	"""Ordered phases of fixed length, started on demand; after the last phase comes "overtime"."""

	OVERTIME = "overtime"

	def __init__(self, phases: Sequence[Tuple[str, float]], *, clock: Clock = time.monotonic) -> None:
		self.phases = [(name, float(seconds)) for name, seconds in phases]
		self.clock = clock
		self.started_at: Optional[float] = None

	def start(self) -> None:
		self.started_at = self.clock()

	def elapsed(self) -> float:
		if self.started_at is None:
			return 0.0
		return self.clock() - self.started_at

	def elapsed_in(self, phase: str) -> float:
		"""Seconds spent so far in the named phase."""
		offset = 0.0
		elapsed = self.elapsed()
		for name, seconds in self.phases:
			if name == phase:
				return min(seconds, max(0.0, elapsed - offset))
			offset += seconds
		raise KeyError(phase)

	def state(self) -> Tuple[Optional[str], float]:
		"""Current phase and seconds left in it; ``(None, 0)`` before start."""
		if self.started_at is None:
			return None, 0.0
		elapsed = self.elapsed()
		for name, seconds in self.phases:
			if elapsed < seconds:
				return name, seconds - elapsed
			elapsed -= seconds
		return self.OVERTIME, 0.0


class LecturetteSession(_Session):
	kind = "lecturerette"

	CHOOSE = "choose"

	def __init__(self, owner: str, candidates: Sequence[str], prep_seconds: float, speech_seconds: float, *, clock: Clock = time.monotonic) -> None:
		super().__init__(owner, clock=clock)
		self.candidates = list(candidates)
		self.topic: Optional[str] = None
		self.timer = PhasedTimer([("prepare", prep_seconds), ("speak", speech_seconds)], clock=clock)

	def phase(self) -> Tuple[str, float]:
		if self.topic is None:
			return self.CHOOSE, 0.0
		name, left = self.timer.state()
		return name or self.CHOOSE, left

	def choose(self, topic: str) -> None:
		if self.topic is not None:
			raise PhaseError("Topic already chosen")
		if topic not in self.candidates:
			raise ValueError("Topic must be one of the offered candidates")
		self.topic = topic
		self.timer.start()

	def start_speaking(self) -> None:
		"""Skip the rest of preparation."""
		name, _ = self.phase()
		if name != "prepare":
			raise PhaseError(f"Cannot start speaking during {name}")
		prep_seconds = self.timer.phases[0][1]
		self.timer.started_at = self.clock() - prep_seconds

	def speaking_time(self) -> float:
		return self.timer.elapsed_in("speak") + max(0.0, self.timer.elapsed() - sum(s for _, s in self.timer.phases))

	def snapshot(self) -> Dict[str, Any]:
		name, left = self.phase()
		return {
			"session_id": self.session_id,
			"candidates": self.candidates,
			"topic": self.topic,
			"phase": name,
			"time_left": round(left, 1),
			"finished": self.finished,
		}


class GpeSession(_Session):
	kind = "gpe"

	def __init__(self, owner: str, scenario: Dict[str, Any], read_seconds: float, plan_seconds: float, *, clock: Clock = time.monotonic) -> None:
		super().__init__(owner, clock=clock)
		self.scenario = dict(scenario)
		self.timer = PhasedTimer([("read", read_seconds), ("plan", plan_seconds)], clock=clock)
		self.timer.start()

	def snapshot(self) -> Dict[str, Any]:
		name, left = self.timer.state()
		return {
			"session_id": self.session_id,
			"scenario": self.scenario,
			"phase": name,
			"time_left": round(left, 1),
			"finished": self.finished,
		}


# ============================================================================
# OIR
# ============================================================================

class OirSession(_Session):
	kind = "oir"

	def __init__(self, owner: str, questions: Sequence[Dict[str, Any]], time_limit: float, *, clock: Clock = time.monotonic) -> None:
		super().__init__(owner, clock=clock)
		if not questions:
			raise ValueError("No OIR questions available")
		self.questions = [dict(q) for q in questions]
		self.time_limit = float(time_limit)
		self.answers: Dict[int, str] = {}

	@classmethod
	def sample(
		cls,
		owner: str,
		verbal: Sequence[Dict[str, Any]],
		non_verbal: Sequence[Dict[str, Any]],
		count: int,
		time_limit: float,
		*,
		rng: Optional[random.Random] = None,
		clock: Clock = time.monotonic,
	) -> "OirSession":
		rng = rng or random.Random()
		want_verbal = min(len(verbal), (count + 1) // 2)
		want_non_verbal = min(len(non_verbal), count - want_verbal)
		# Top up from the verbal bank when the non-verbal one runs short
		want_verbal = min(len(verbal), count - want_non_verbal)
		picked = rng.sample(list(verbal), want_verbal) + rng.sample(list(non_verbal), want_non_verbal)
		rng.shuffle(picked)
		return cls(owner, picked, time_limit, clock=clock)

	def time_left(self) -> float:
		return max(0.0, self.time_limit - (self.clock() - self.created_at))

	def expired(self) -> bool:
		return self.time_left() <= 0

	def answer(self, index: int, choice: str) -> None:
		if self.finished:
			raise PhaseError("Test already finished")
		if self.expired():
			raise PhaseError("Time is up")
		if index < 0 or index >= len(self.questions):
			raise IndexError(index)
		if choice not in self.questions[index].get("options", []):
			raise ValueError("Choice is not one of the options")
		self.answers[index] = choice

	def score(self) -> Dict[str, Any]:
		correct = 0
		by_category: Dict[str, Dict[str, int]] = {}
		for index, question in enumerate(self.questions):
			tally = by_category.setdefault(question.get("category") or "General", {"correct": 0, "total": 0})
			tally["total"] += 1
			if self.answers.get(index) == question.get("answer"):
				correct += 1
				tally["correct"] += 1
		total = len(self.questions)
		return {
			"correct": correct,
			"total": total,
			"unanswered": total - len(self.answers),
			"score_percentage": round(100 * correct / total) if total else 0,
			"by_category": by_category,
		}

	def public_questions(self) -> List[Dict[str, Any]]:
		return [{k: v for k, v in q.items() if k != "answer"} for q in self.questions]

	def snapshot(self) -> Dict[str, Any]:
		return {
			"session_id": self.session_id,
			"questions": self.public_questions(),
			"answers": {str(k): v for k, v in self.answers.items()},
			"time_left": round(self.time_left(), 1),
			"finished": self.finished,
		}


# ============================================================================
# SESSION REGISTRY
# ============================================================================

_sessions: Dict[str, _Session] = {}


def register(session: _Session) -> _Session:
	_sessions[session.session_id] = session
	return session


def get_session(session_id: str, owner: str, kind: Optional[str] = None) -> Optional[_Session]:
	session = _sessions.get(session_id)
	if session is None or session.owner != owner:
		return None
	if kind is not None and session.kind != kind:
		return None
	return session


def drop_session(session_id: str) -> None:
	_sessions.pop(session_id, None)


def purge_stale_sessions(max_age_seconds: float, *, clock: Clock = time.monotonic) -> int:
	now = clock()
	stale = [sid for sid, s in _sessions.items() if now - s.created_at > max_age_seconds]
	for sid in stale:
		del _sessions[sid]
	return len(stale)
