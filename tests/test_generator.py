"""Unit tests for prompt composition and the generation gateway."""

import pytest
from bson import ObjectId

from pymongo.errors import PyMongoError

from conftest import bearer, signup
from errors import InternalError, UpstreamError, ValidationError
from generator import build_prompt, clean_request, SYSTEM_PROMPT

USER_ID = str(ObjectId())


@pytest.mark.unit
def test_clean_request_sanitizes_and_applies_defaults():
    req = clean_request({"skills": "  C++ <script> & Go ", "role": "<b>Lead</b>"})
    assert req == {
        "skills": "C++ script & Go",
        "role": "bLead/b",
        "tone": "professional",
        "experience": "student",
        "length": 4,
    }


@pytest.mark.unit
def test_clean_request_truncates_skills_and_role():
    req = clean_request({"skills": "s" * 700, "role": "r" * 100})
    assert len(req["skills"]) == 500
    assert len(req["role"]) == 80


@pytest.mark.unit
@pytest.mark.parametrize("skills", ["", "   ", "<>", "<<>>", None])
def test_clean_request_rejects_empty_skills(skills):
    with pytest.raises(ValidationError, match="Please provide skills."):
        clean_request({"skills": skills})


@pytest.mark.unit
def test_build_prompt_with_role():
    prompt = build_prompt("Python, Rust", "Backend Engineer", "professional", "senior", 3)
    assert prompt.startswith(SYSTEM_PROMPT + "\n\n")
    assert "Skills & facts: Python, Rust." in prompt
    assert "Target role: Backend Engineer." in prompt
    assert "Tone: professional." in prompt
    assert "Experience level: senior." in prompt
    assert "Length: 3 sentences." in prompt


@pytest.mark.unit
def test_build_prompt_omits_empty_role():
    assert "Target role" not in build_prompt("Python", "", "friendly", "student", 4)


@pytest.mark.unit
def test_system_prompt_constraints():
    low = SYSTEM_PROMPT.lower()
    assert "expert resume writer" in low
    assert "first-person" in low
    assert "buzzwords" in low
    assert "no bullet points" in low


@pytest.mark.unit
def test_generate_persists_record(services, llm_session):
    llm_session.reply(200, {"response": "Built scalable systems."})

    summary = services.generator.generate(USER_ID, {
        "skills": "Python, Rust, systems design",
        "tone": "professional",
        "experience": "senior",
        "length": 3,
        "role": "Backend Engineer",
    })

    assert summary == "Built scalable systems."
    records = services.generator.list_for_user(USER_ID)
    assert len(records) == 1
    rec = records[0]
    assert rec["user_id"] == USER_ID
    assert rec["skills"] == "Python, Rust, systems design"
    assert rec["role"] == "Backend Engineer"
    assert rec["length"] == 3
    assert rec["summary"] == "Built scalable systems."
    assert rec["created_at"]


@pytest.mark.unit
def test_empty_skills_never_reach_the_service(services, llm_session):
    with pytest.raises(ValidationError):
        services.generator.generate(USER_ID, {"skills": "<>"})
    assert llm_session.calls == []
    assert services.generator.list_for_user(USER_ID) == []


@pytest.mark.unit
@pytest.mark.parametrize("length, stored", [(0, 2), (10, 6), ("lots", 4), (None, 4), (5, 5)])
def test_stored_length_is_clamped(services, llm_session, length, stored):
    llm_session.reply(200, {"response": "Summary."})
    services.generator.generate(USER_ID, {"skills": "Go", "length": length})

    assert services.generator.list_for_user(USER_ID)[0]["length"] == stored
    assert f"Length: {stored} sentences." in llm_session.calls[0]["json"]["prompt"]


@pytest.mark.unit
def test_upstream_failure_stores_nothing(services, llm_session):
    llm_session.reply(503, text="busy")
    with pytest.raises(UpstreamError):
        services.generator.generate(USER_ID, {"skills": "Go"})
    assert services.generator.list_for_user(USER_ID) == []


@pytest.mark.unit
def test_list_is_newest_first_and_scoped_to_owner(services, llm_session):
    other = str(ObjectId())
    for text in ("first", "second", "third"):
        llm_session.reply(200, {"response": text})
        services.generator.generate(USER_ID, {"skills": "Go"})
    llm_session.reply(200, {"response": "not mine"})
    services.generator.generate(other, {"skills": "Go"})

    assert [r["summary"] for r in services.generator.list_for_user(USER_ID)] == ["third", "second", "first"]
    assert services.generator.list_for_user(str(ObjectId())) == []


@pytest.mark.unit
def test_long_tone_and_experience_are_kept_whole():
    tone = "warm but precise, " * 4
    req = clean_request({"skills": "Go", "tone": tone, "experience": "<i>" + "x" * 60})
    assert req["tone"] == tone.strip()
    assert req["experience"] == "i" + "x" * 60


@pytest.mark.unit
@pytest.mark.parametrize("skills", [["Go"], {"lang": "Go"}, 42])
def test_non_string_skills_count_as_empty(skills):
    with pytest.raises(ValidationError):
        clean_request({"skills": skills})


def _db_down(*args, **kwargs):
    raise PyMongoError("connection refused")


@pytest.mark.unit
def test_store_failure_after_generation_is_internal_error(services, llm_session, monkeypatch):
    llm_session.reply(200, {"response": "Summary."})
    monkeypatch.setattr(services.resumes, "insert", _db_down)
    with pytest.raises(InternalError, match="Generation failed"):
        services.generator.generate(USER_ID, {"skills": "Go"})


@pytest.mark.unit
def test_list_failure_is_internal_error(services, monkeypatch):
    monkeypatch.setattr(services.resumes.collection, "find", _db_down)
    with pytest.raises(InternalError, match="Failed to fetch resumes"):
        services.generator.list_for_user(USER_ID)


@pytest.mark.integration
def test_generate_store_failure_answers_500_without_summary(client, services, llm_session, monkeypatch):
    token = signup(client).get_json()["token"]
    llm_session.reply(200, {"response": "Summary."})
    monkeypatch.setattr(services.resumes, "insert", _db_down)

    resp = client.post("/generate", headers=bearer(token), json={"skills": "Go"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Generation failed"}


@pytest.mark.integration
def test_resumes_store_failure_answers_500(client, services, monkeypatch):
    token = signup(client).get_json()["token"]
    monkeypatch.setattr(services.resumes, "list_for_user", _db_down)

    resp = client.get("/resumes", headers=bearer(token))
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to fetch resumes"}
