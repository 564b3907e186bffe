import random

import pytest

from ssbprep import exercises
from ssbprep.content import OIR_NON_VERBAL_QUESTIONS_BANK, OIR_VERBAL_QUESTIONS_BANK
from ssbprep.exercises import (
    GpeSession,
    LecturetteSession,
    OirSession,
    PhasedTimer,
    PhaseError,
    TimedSequence,
    get_session,
    purge_stale_sessions,
    register,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


def test_wat_submit_shapes_and_advances(clock):
    run = TimedSequence("SSB001", "WAT", ["Army", "Fear"], 15, clock=clock)
    assert run.current_item() == "Army"
    run.submit("  The army protects the nation. ")
    assert run.responses == [{"word": "Army", "sentence": "The army protects the nation."}]
    assert run.current_item() == "Fear"
    run.submit("Fear can be overcome.")
    assert run.finished
    with pytest.raises(PhaseError):
        run.submit("late")


def test_expired_items_record_empty_responses(clock):
    run = TimedSequence("SSB001", "SRT", ["S1", "S2", "S3", "S4"], 30, clock=clock)
    clock.advance(65)
    assert run.current_item() == "S3"
    assert run.responses == [{"situation": "S1", "reaction": ""}, {"situation": "S2", "reaction": ""}]
    assert run.time_left() == pytest.approx(25)


def test_every_item_expiring_finishes_the_run(clock):
    run = TimedSequence("SSB001", "TAT", ["img1", "img2"], 240, clock=clock)
    clock.advance(500)
    snap = run.snapshot()
    assert snap["finished"] is True
    assert snap["item"] is None
    assert run.responses == ["", ""]


def test_finish_early_keeps_answered_items(clock):
    run = TimedSequence("SSB001", "TAT", ["img1", "img2", "img3"], 240, clock=clock)
    run.submit("A story")
    assert run.finish() == ["A story"]
    assert run.finished


def test_empty_bank_is_rejected(clock):
    with pytest.raises(ValueError):
        TimedSequence("SSB001", "WAT", [], 15, clock=clock)


def test_phased_timer(clock):
    timer = PhasedTimer([("read", 10), ("plan", 20)], clock=clock)
    assert timer.state() == (None, 0.0)
    timer.start()
    assert timer.state() == ("read", 10)
    clock.advance(15)
    assert timer.state() == ("plan", 15)
    assert timer.elapsed_in("read") == 10
    assert timer.elapsed_in("plan") == 5
    clock.advance(20)
    assert timer.state() == ("overtime", 0.0)


def test_lecturerette_phases(clock):
    session = LecturetteSession("SSB001", ["A", "B", "C", "D"], 180, 180, clock=clock)
    assert session.phase() == ("choose", 0.0)
    with pytest.raises(ValueError):
        session.choose("Z")
    session.choose("B")
    assert session.phase() == ("prepare", 180)
    with pytest.raises(PhaseError):
        session.choose("C")
    clock.advance(60)
    session.start_speaking()
    assert session.phase() == ("speak", 180)
    with pytest.raises(PhaseError):
        session.start_speaking()
    clock.advance(200)
    assert session.phase()[0] == "overtime"
    assert session.speaking_time() == pytest.approx(200)


def test_gpe_starts_reading_immediately(clock):
    session = GpeSession("SSB001", {"title": "Flood"}, 300, 600, clock=clock)
    assert session.snapshot()["phase"] == "read"
    clock.advance(301)
    assert session.snapshot()["phase"] == "plan"


def test_oir_sample_splits_verbal_and_non_verbal():
    session = OirSession.sample("SSB001", OIR_VERBAL_QUESTIONS_BANK, OIR_NON_VERBAL_QUESTIONS_BANK, 40, 1200, rng=random.Random(7))
    kinds = [q["type"] for q in session.questions]
    assert len(kinds) == 40
    assert kinds.count("verbal") == 20
    assert kinds.count("non-verbal") == 20


def test_oir_sample_tops_up_from_verbal_bank():
    session = OirSession.sample("SSB001", OIR_VERBAL_QUESTIONS_BANK, OIR_NON_VERBAL_QUESTIONS_BANK[:3], 10, 1200)
    kinds = [q["type"] for q in session.questions]
    assert kinds.count("non-verbal") == 3
    assert kinds.count("verbal") == 7


def test_oir_answer_and_score(clock):
    questions = [
        {"category": "Analogy", "question": "q1", "options": ["a", "b"], "answer": "a"},
        {"category": "Analogy", "question": "q2", "options": ["a", "b"], "answer": "b"},
        {"category": "Series", "question": "q3", "options": ["x", "y"], "answer": "y"},
    ]
    session = OirSession("SSB001", questions, 60, clock=clock)
    session.answer(0, "a")
    session.answer(1, "a")
    with pytest.raises(ValueError):
        session.answer(2, "z")
    with pytest.raises(IndexError):
        session.answer(3, "a")
    score = session.score()
    assert score["correct"] == 1
    assert score["total"] == 3
    assert score["unanswered"] == 1
    assert score["score_percentage"] == 33
    assert score["by_category"] == {"Analogy": {"correct": 1, "total": 2}, "Series": {"correct": 0, "total": 1}}
    assert all("answer" not in q for q in session.public_questions())


def test_oir_refuses_answers_after_deadline(clock):
    session = OirSession("SSB001", [{"question": "q", "options": ["a", "b"], "answer": "a"}], 60, clock=clock)
    clock.advance(61)
    assert session.expired()
    with pytest.raises(PhaseError):
        session.answer(0, "a")


def test_registry_scopes_sessions_to_owner(clock):
    session = register(GpeSession("SSB001", {"title": "Flood"}, 300, 600, clock=clock))
    assert get_session(session.session_id, "SSB001") is session
    assert get_session(session.session_id, "SSB002") is None
    assert get_session(session.session_id, "SSB001", kind="oir") is None


def test_purge_stale_sessions(clock):
    old = register(GpeSession("SSB001", {"title": "Old"}, 300, 600, clock=clock))
    clock.advance(3600)
    fresh = register(GpeSession("SSB001", {"title": "New"}, 300, 600, clock=clock))
    clock.advance(100)
    assert purge_stale_sessions(1800, clock=clock) == 1
    assert old.session_id not in exercises._sessions
    assert fresh.session_id in exercises._sessions
