"""
Speech analysis function: scored feedback on a transcript.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .gemini import call_gemini, extract_score
from .middleware.rate_limiter import enforce_rate_limit
from .middleware.validator import validate_analysis_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyze-speech", tags=["analyze-speech"])


class AnalysisRequest(BaseModel):
    text: str
    topic: Optional[str] = ""
    type: str = Field(default="speech")


class AnalysisResponse(BaseModel):
    feedback: str
    score: int


def build_analysis_prompt(text: str, topic: str, analysis_type: str) -> str:
    if analysis_type == "interview":
        return f"""Evaluate this interview answer:

Question context: {topic}
Answer: {text}

Provide:
1. Strengths of the answer
2. Areas for improvement
3. Communication clarity
4. Score out of 100"""

    if analysis_type == "presentation":
        return f"""Analyze this presentation transcript for "{topic}" and provide constructive feedback:

Transcript: {text}

Provide feedback on:
1. Structure and flow between points
2. Clarity of the key message
3. Delivery, pacing and filler words
4. Top 3 improvement tips

Give a score out of 100 and detailed feedback."""

    return f"""Analyze this speech about "{topic}" and provide constructive feedback:

Text: {text}

Provide feedback on:
1. Content quality and relevance
2. Clarity and coherence
3. Vocabulary and language use
4. Areas for improvement

Give a score out of 100 and detailed feedback."""


@router.post("", response_model=AnalysisResponse, dependencies=[Depends(enforce_rate_limit)])
async def analyze_speech(body: AnalysisRequest):
    """
    Score a transcript and return written feedback.

    Args:
        body: AnalysisRequest with transcript text, topic and analysis type

    Returns:
        AnalysisResponse with feedback text and a 0-100 score
    """
    validation = validate_analysis_request(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    topic = body.topic or ""
    logger.info(f"Analysis request: type={body.type}, topic={topic}, {len(body.text)} chars")

    feedback = call_gemini(build_analysis_prompt(body.text, topic, body.type))
    if not feedback:
        raise HTTPException(status_code=502, detail="Feedback generation failed")

    return AnalysisResponse(feedback=feedback, score=extract_score(feedback))


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "analyze-speech"}
