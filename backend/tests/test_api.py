import json

from conftest import login
from ssbprep import exercises
from ssbprep.settings import settings
from ssbprep.store import StoreError, get_store


def test_health_and_catalog(client):
    assert client.get("/health").json() == {"status": "ok"}
    catalog = client.get("/catalog").json()
    assert len(catalog["olqs"]) == 15
    assert [e["id"] for e in catalog["exercises"]][:3] == ["TAT", "WAT", "SRT"]
    assert catalog["personas"] == ["psychologist", "coach", "friend"]


# ---- auth ----

def test_login_requires_name_and_roll_number(client):
    r = client.post("/auth/login", json={"name": " ", "roll_number": "SSB001"})
    assert r.status_code == 400


def test_login_me_logout(client):
    r = client.post("/auth/login", json={"name": "Asha", "roll_number": "SSB001"})
    body = r.json()
    assert body["user"]["roll_number"] == "SSB001"
    headers = {"Authorization": f"Bearer {body['access_token']}"}
    assert client.get("/auth/me", headers=headers).json()["username"] == "SSB001"
    assert client.post("/auth/logout", headers=headers).json() == {"ok": True}
    assert client.get("/auth/me", headers=headers).status_code == 401


def test_admin_token_rejects_bad_password(client):
    r = client.post("/auth/admin/token", data={"username": "admin", "password": "wrong"})
    assert r.status_code == 401


def test_store_failure_maps_to_503(client, monkeypatch):
    store = get_store()

    def broken_save(data):
        raise StoreError("Failed to save data")

    monkeypatch.setattr(store, "save", broken_save)
    r = client.post("/auth/login", json={"name": "Asha", "roll_number": "SSB001"})
    assert r.status_code == 503


# ---- profile ----

def test_persona_and_profile_pic(client, auth_headers):
    assert client.put("/me/persona", json={"persona": "guru"}, headers=auth_headers).status_code == 400
    assert client.put("/me/persona", json={"persona": "coach"}, headers=auth_headers).json()["persona"] == "coach"
    r = client.put("/me/profile-pic", json={"profile_pic": "data:image/png;base64,AAAA"}, headers=auth_headers)
    assert r.json()["profile_pic"] == "data:image/png;base64,AAAA"
    assert client.put("/me/profile-pic", json={"profile_pic": "ftp://x"}, headers=auth_headers).status_code == 400


def test_leaderboard_and_badges(client):
    first = login(client, "Asha", "SSB001")
    login(client, "Vikram", "SSB002")
    board = client.get("/leaderboard", headers=first).json()
    assert {e["roll_number"] for e in board} == {"SSB001", "SSB002"}
    badges = client.get("/me/badges", headers=first).json()
    assert len(badges) == 9
    assert not any(b["unlocked"] for b in badges)


# ---- content ----

def test_content_requires_admin(client, auth_headers):
    assert client.get("/content/wat_words", headers=auth_headers).status_code == 403


def test_content_crud(client, admin_headers):
    assert len(client.get("/content/wat_words", headers=admin_headers).json()["items"]) == 50
    assert client.get("/content/nonsense", headers=admin_headers).status_code == 404
    assert client.post("/content/wat_words", json={"item": "  Valour "}, headers=admin_headers).json()["total"] == 51
    assert client.post("/content/wat_words", json={"item": ""}, headers=admin_headers).status_code == 400
    r = client.post("/content/wat_words/bulk", json={"items": ["Duty", "Honour"]}, headers=admin_headers)
    assert r.json() == {"bank": "wat_words", "added": 2, "total": 53}
    r = client.delete("/content/wat_words/50", headers=admin_headers)
    assert r.json()["removed"] == "Valour"
    assert client.delete("/content/wat_words/999", headers=admin_headers).status_code == 404


def test_content_upload_text_and_image(client, admin_headers):
    files = {"file": ("words.txt", b"Alpha\n\n  Bravo  \nCharlie\n", "text/plain")}
    r = client.post("/content/wat_words/upload", files=files, headers=admin_headers)
    assert r.json()["added"] == 3
    items = client.get("/content/wat_words", headers=admin_headers).json()["items"]
    assert items[-3:] == ["Alpha", "Bravo", "Charlie"]
    files = {"file": ("pic.png", b"\x89PNG", "image/png")}
    client.post("/content/tat_images/upload", files=files, headers=admin_headers)
    images = client.get("/content/tat_images", headers=admin_headers).json()["items"]
    assert images[-1].startswith("data:image/png;base64,")


def test_content_records_are_validated(client, admin_headers):
    question = {"question": "2, 4, 8, ?", "options": ["16", "12"], "answer": "16"}
    r = client.post("/content/oir_verbal_questions", json={"item": question}, headers=admin_headers)
    assert r.status_code == 201
    last = client.get("/content/oir_verbal_questions", headers=admin_headers).json()["items"][-1]
    assert last["type"] == "verbal"
    bad = {**question, "answer": "32"}
    assert client.post("/content/oir_verbal_questions", json={"item": bad}, headers=admin_headers).status_code == 400
    files = {"file": ("gpe.json", json.dumps([{"title": "Fire", "problem_statement": "A fire broke out."}]).encode(), "application/json")}
    assert client.post("/content/gpe_scenarios/upload", files=files, headers=admin_headers).json()["added"] == 1
    files = {"file": ("gpe.json", b"not json", "application/json")}
    assert client.post("/content/gpe_scenarios/upload", files=files, headers=admin_headers).status_code == 400


# ---- psychology ----

def test_wat_run_is_assessed_and_recorded(client, auth_headers):
    snap = client.post("/psych/WAT/start", headers=auth_headers).json()
    assert snap["item"] == "Duty"
    assert snap["time_limit"] == settings.wat_seconds
    sid = snap["session_id"]
    snap = client.post(f"/psych/sessions/{sid}/answer", json={"text": "The army serves the nation."}, headers=auth_headers).json()
    assert snap["answered"] == 1
    result = client.post(f"/psych/sessions/{sid}/finish", headers=auth_headers).json()
    assert result["responses"] == [{"word": "Duty", "sentence": "The army serves the nation."}]
    assert result["feedback"]["olqs_demonstrated"] == ["Initiative", "Courage", "Cooperation"]
    assert result["record"]["score"] == 30
    assert result["new_badges"] == ["first_step"]
    assert client.get(f"/psych/sessions/{sid}", headers=auth_headers).status_code == 404
    history = client.get("/me/history", headers=auth_headers).json()
    assert history["score"] == 30
    assert history["tests"]["WAT"]["attempts"] == 1


def test_failed_feedback_is_recorded_with_zero_score(client, auth_headers, fake_gemini):
    fake_gemini.fail = True
    sid = client.post("/psych/SRT/start", headers=auth_headers).json()["session_id"]
    client.post(f"/psych/sessions/{sid}/answer", json={"text": "Call for help"}, headers=auth_headers)
    result = client.post(f"/psych/sessions/{sid}/finish", headers=auth_headers).json()
    assert "error" in result["feedback"]
    assert result["record"]["score"] == 0
    profile = client.get("/me", headers=auth_headers).json()
    assert profile["score"] == 0
    assert len(profile["test_results"]["SRT"]) == 1


def test_sessions_belong_to_their_owner(client, auth_headers):
    sid = client.post("/psych/TAT/start", headers=auth_headers).json()["session_id"]
    other = login(client, "Vikram", "SSB002")
    assert client.get(f"/psych/sessions/{sid}", headers=other).status_code == 404


def test_unknown_psych_test(client, auth_headers):
    assert client.post("/psych/PPDT/start", headers=auth_headers).status_code == 404


def test_sdt_requires_all_answers(client, auth_headers):
    r = client.post("/psych/sdt", json={"responses": ["a", "b", "", "d", "e"]}, headers=auth_headers)
    assert r.status_code == 400
    r = client.post("/psych/sdt", json={"responses": ["a", "b", "c", "d", "e"]}, headers=auth_headers)
    assert r.json()["record"]["responses"] == ["a", "b", "c", "d", "e"]


def test_written_assessment_is_not_scored(client, auth_headers, fake_gemini):
    r = client.post("/psych/WAT/written", data={"typed": json.dumps({"Army": "Serves"})}, headers=auth_headers)
    assert r.json()["assessment"].startswith("Question Number: 1")
    files = {"file": ("sheet.png", b"\x89PNG", "image/png")}
    r = client.post("/psych/SRT/written", files=files, headers=auth_headers)
    assert r.status_code == 200
    assert fake_gemini.calls[-1]["parts"][1]["inline_data"]["mime_type"] == "image/png"
    assert client.post("/psych/TAT/written", data={"typed": "{}"}, headers=auth_headers).status_code == 400
    assert client.get("/me", headers=auth_headers).json()["score"] == 0


# ---- lecturerette / GPE ----

def test_lecturerette_flow(client, auth_headers):
    snap = client.post("/lecturerette/start", headers=auth_headers).json()
    assert len(snap["candidates"]) == 4
    assert snap["phase"] == "choose"
    sid = snap["session_id"]
    assert client.post(f"/lecturerette/{sid}/choose", json={"topic": "Not offered"}, headers=auth_headers).status_code == 400
    topic = snap["candidates"][0]
    assert client.post(f"/lecturerette/{sid}/choose", json={"topic": topic}, headers=auth_headers).json()["phase"] == "prepare"
    assert client.post(f"/lecturerette/{sid}/submit", json={"transcript": "Early"}, headers=auth_headers).status_code == 409
    assert client.post(f"/lecturerette/{sid}/speak", headers=auth_headers).json()["phase"] == "speak"
    result = client.post(f"/lecturerette/{sid}/submit", json={"transcript": "My talk."}, headers=auth_headers).json()
    assert result["topic"] == topic
    assert result["overtime"] is False
    assert result["record"]["allotted_seconds"] == settings.lecturerette_speech_seconds


def test_gpe_flow(client, auth_headers):
    assert client.get("/gpe/scenarios", headers=auth_headers).json() == [{"index": 0, "title": "Flood Rescue Mission"}]
    snap = client.post("/gpe/start", json={"scenario_index": 0}, headers=auth_headers).json()
    assert snap["phase"] == "read"
    sid = snap["session_id"]
    assert client.post(f"/gpe/{sid}/submit", json={"plan": "Go"}, headers=auth_headers).status_code == 409
    exercises._sessions[sid].timer.started_at -= settings.gpe_read_seconds + 1
    assert client.get(f"/gpe/{sid}", headers=auth_headers).json()["phase"] == "plan"
    result = client.post(f"/gpe/{sid}/submit", json={"plan": "Rescue the injured first."}, headers=auth_headers).json()
    assert result["record"]["plan"] == "Rescue the injured first."
    assert "group_strategist" in result["new_badges"]


# ---- OIR ----

def test_oir_flow(client, auth_headers):
    snap = client.post("/oir/start", headers=auth_headers).json()
    assert len(snap["questions"]) == settings.oir_question_count
    assert all("answer" not in q for q in snap["questions"])
    sid = snap["session_id"]
    first = snap["questions"][0]
    r = client.post(f"/oir/{sid}/answer", json={"index": 0, "choice": first["options"][0]}, headers=auth_headers)
    assert r.json()["answered"] == 1
    assert client.post(f"/oir/{sid}/answer", json={"index": 0, "choice": "nope"}, headers=auth_headers).status_code == 400
    assert client.post(f"/oir/{sid}/answer", json={"index": 999, "choice": "x"}, headers=auth_headers).status_code == 404
    result = client.post(f"/oir/{sid}/finish", headers=auth_headers).json()
    assert result["total"] == settings.oir_question_count
    assert result["unanswered"] == settings.oir_question_count - 1
    assert result["record"]["score_percentage"] == result["score_percentage"]
    assert result["feedback"]["score_percentage"] == result["score_percentage"]
    assert len(result["review"]) == settings.oir_question_count


# ---- interview ----

def test_piq_and_interview_finish(client, auth_headers):
    assert client.get("/interview/piq", headers=auth_headers).json() == {}
    client.put("/interview/piq", json={"education": "B.Tech", "hobbies": "Chess"}, headers=auth_headers)
    assert client.get("/interview/piq", headers=auth_headers).json() == {"education": "B.Tech", "hobbies": "Chess"}
    short = {"transcript": [{"sender": "AI", "text": "Hello"}]}
    assert client.post("/interview/finish", json=short, headers=auth_headers).status_code == 400
    full = {"transcript": [{"sender": "AI", "text": "Hello"}, {"sender": "User", "text": "Good morning sir"}]}
    result = client.post("/interview/finish", json=full, headers=auth_headers).json()
    assert "interviewer_ace" in result["new_badges"]
    assert len(client.get("/interview/history", headers=auth_headers).json()) == 1


# ---- chats ----

def test_chats(client):
    asha = login(client, "Asha", "SSB001")
    vikram = login(client, "Vikram", "SSB002")
    assert client.post("/chats/SSB001", json={"text": "hi"}, headers=asha).status_code == 400
    assert client.post("/chats/SSB999", json={"text": "hi"}, headers=asha).status_code == 404
    r = client.post("/chats/SSB002", json={"text": "Ready for the GTO?"}, headers=asha)
    assert r.status_code == 201
    assert r.json()["sender"] == "SSB001"
    client.post("/chats/SSB001", json={"text": "Yes!"}, headers=vikram)
    thread = client.get("/chats/SSB001", headers=vikram).json()
    assert [m["text"] for m in thread] == ["Ready for the GTO?", "Yes!"]
    threads = client.get("/chats", headers=asha).json()
    assert threads[0]["thread_id"] == "SSB001__SSB002"
    assert threads[0]["peer_name"] == "Vikram"
    assert threads[0]["count"] == 2
