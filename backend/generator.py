# generator.py
from __future__ import annotations
import logging
from typing import Any, Dict, List

from pymongo.errors import PyMongoError

from errors import InternalError, ValidationError
from helpers import sanitize, coerce_length
from llm_client import OllamaClient
from storage import ResumeStore

LOG = logging.getLogger(__name__)

MAX_SKILLS = 500
MAX_ROLE = 80
DEFAULT_TONE = "professional"
DEFAULT_EXPERIENCE = "student"

SYSTEM_PROMPT = (
    "You are an expert resume writer.\n"
    "Write a tight, results-focused resume summary in US English.\n"
    "Avoid buzzwords, avoid fluff, avoid first-person pronouns.\n"
    "Include credible specifics (skills, domains, tools) and quantified impact when possible.\n"
    "No more than one line per sentence; no bullet points."
)

def clean_request(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Sanitize and normalise a raw /generate body. Raises ValidationError on empty skills."""
    payload = payload or {}
    skills = sanitize(payload.get("skills"), MAX_SKILLS)
    if not skills:
        raise ValidationError("Please provide skills.")
    return {
        "skills": skills,
        "role": sanitize(payload.get("role"), MAX_ROLE),
        "tone": sanitize(payload.get("tone")) or DEFAULT_TONE,
        "experience": sanitize(payload.get("experience")) or DEFAULT_EXPERIENCE,
        "length": coerce_length(payload.get("length")),
    }

def build_prompt(skills: str, role: str, tone: str, experience: str, length: int) -> str:
    lines = [f"Skills & facts: {skills}."]
    if role:
        lines.append(f"Target role: {role}.")
    lines += [
        f"Tone: {tone}.",
        f"Experience level: {experience}.",
        f"Length: {length} sentences.",
        "Return ONLY the summary text, nothing else.",
    ]
    return SYSTEM_PROMPT + "\n\n" + "\n".join(lines)


class GenerationGateway:
    def __init__(self, client: OllamaClient, resumes: ResumeStore):
        self.client = client
        self.resumes = resumes

    def generate(self, user_id: str, payload: Dict[str, Any]) -> str:
        req = clean_request(payload)
        summary = self.client.generate(build_prompt(**req))
        try:
            self.resumes.insert(user_id, summary=summary, **req)
        except PyMongoError as e:
            LOG.exception("could not store resume for user %s", user_id)
            raise InternalError("Generation failed") from e
        return summary

    def list_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            return self.resumes.list_for_user(user_id)
        except PyMongoError as e:
            LOG.exception("could not list resumes for user %s", user_id)
            raise InternalError("Failed to fetch resumes") from e
