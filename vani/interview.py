"""
Mock interview function: generates interview questions with Gemini.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .gemini import JSON_ARRAY_PATTERN, call_gemini, extract_json
from .middleware.rate_limiter import enforce_rate_limit
from .middleware.validator import validate_interview_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mock-interview", tags=["mock-interview"])

QUESTION_COUNT = 5

# Used when Gemini is unavailable or returns nothing usable
FALLBACK_QUESTIONS = {
    "behavioral": [
        "Tell me about a time you had to meet a tight deadline.",
        "Describe a conflict with a teammate and how you resolved it.",
        "Give an example of a mistake you made and what you learned from it.",
        "Tell me about a time you took the lead without being asked.",
        "Describe a situation where you had to adapt to a major change.",
    ],
    "technical": [
        "Walk me through a technical problem you solved recently.",
        "How do you decide between two competing technical approaches?",
        "Explain a complex concept from your field to a non-expert.",
        "How do you test and validate your work before delivering it?",
        "Which tools do you rely on most in this role, and why?",
    ],
    "situational": [
        "What would you do if a key stakeholder rejected your plan at the last minute?",
        "How would you handle two urgent tasks arriving at the same time?",
        "What would you do if you noticed a colleague cutting corners?",
        "How would you approach your first 30 days in this role?",
        "What would you do if you disagreed with your manager's decision?",
    ],
    "general": [
        "Tell me about yourself.",
        "Why are you interested in this position?",
        "What are your greatest strengths?",
        "Where do you see yourself in five years?",
        "Why should we hire you?",
    ],
}


class InterviewRequest(BaseModel):
    role: str = Field(..., min_length=1)
    difficulty: Optional[str] = Field(default="medium")
    type: Optional[str] = Field(default="behavioral")
    action: Optional[str] = None


class InterviewQuestion(BaseModel):
    question: str
    category: str


class InterviewResponse(BaseModel):
    questions: list[InterviewQuestion]


def build_question_prompt(role: str, difficulty: str, interview_type: str) -> str:
    return f"""Generate {QUESTION_COUNT} {difficulty} difficulty {interview_type} interview questions for a {role} position.

Format as a JSON array of objects with "question" and "category" fields."""


def parse_questions(content: str, default_category: str) -> list[InterviewQuestion]:
    """Keep the well-formed question objects from a model reply."""
    parsed = extract_json(content, JSON_ARRAY_PATTERN)
    if not isinstance(parsed, list):
        return []

    questions = []
    for item in parsed:
        if not isinstance(item, dict):
            continue
        question = item.get("question")
        if not isinstance(question, str) or not question.strip():
            continue
        category = item.get("category")
        if not isinstance(category, str) or not category.strip():
            category = default_category
        questions.append(InterviewQuestion(question=question.strip(), category=category.strip()))
    return questions


def fallback_questions(interview_type: str) -> list[InterviewQuestion]:
    bank = FALLBACK_QUESTIONS.get(interview_type, FALLBACK_QUESTIONS["general"])
    return [InterviewQuestion(question=q, category=interview_type) for q in bank[:QUESTION_COUNT]]


@router.post("", response_model=InterviewResponse, dependencies=[Depends(enforce_rate_limit)])
async def mock_interview(body: InterviewRequest):
    """
    Generate interview questions for a role.

    Args:
        body: InterviewRequest with role, difficulty, type and action

    Returns:
        InterviewResponse with the generated questions
    """
    validation = validate_interview_request(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    difficulty = body.difficulty or "medium"
    interview_type = body.type or "behavioral"

    logger.info(f"Interview questions request: role={body.role}, difficulty={difficulty}, type={interview_type}")

    content = call_gemini(build_question_prompt(body.role, difficulty, interview_type))
    questions = parse_questions(content, interview_type) if content else []

    if not questions:
        logger.warning("No usable questions from Gemini, serving fallback question bank")
        questions = fallback_questions(interview_type)

    return InterviewResponse(questions=questions)


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "mock-interview"}
