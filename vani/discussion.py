"""
Group discussion function: simulates the next turn from an AI participant.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .gemini import JSON_OBJECT_PATTERN, call_gemini, extract_json
from .middleware.rate_limiter import enforce_rate_limit
from .middleware.validator import validate_discussion_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/group-discussion", tags=["group-discussion"])

HISTORY_WINDOW = 5
DEFAULT_PARTICIPANT = "AI Participant 1"
DEFAULT_STYLE = "moderate"

# The client labels styles polite/balanced/competitive
DISCUSSION_STYLES = {
    "friendly": "friendly and supportive",
    "polite": "friendly and supportive",
    "moderate": "moderately challenging",
    "balanced": "moderately challenging",
    "intense": "highly competitive and challenging",
    "competitive": "highly competitive and challenging",
}

FALLBACK_TURNS = {
    "friendly and supportive": "That's a fair point. I'd like to build on it and hear how others see it.",
    "moderately challenging": "I see where that comes from, but have we considered the other side of this?",
    "highly competitive and challenging": "I have to disagree. That argument ignores the practical realities here.",
}


class DiscussionMessage(BaseModel):
    name: str = ""
    message: str


class DiscussionRequest(BaseModel):
    topic: str = Field(..., min_length=1)
    participants: int = Field(default=3)
    aggression: Optional[str] = Field(default="balanced")
    history: list[DiscussionMessage] = Field(default_factory=list)


class DiscussionTurn(BaseModel):
    participant: str
    message: str


def describe_style(aggression: Optional[str]) -> str:
    return DISCUSSION_STYLES.get((aggression or "").strip().lower(), DEFAULT_STYLE)


def build_discussion_prompt(
    topic: str,
    participants: int,
    aggression: str,
    history: list[DiscussionMessage],
) -> str:
    transcript = "\n".join(f"{h.name}: {h.message}" for h in history[-HISTORY_WINDOW:])

    return f"""You are simulating {participants} AI participants in a group discussion about "{topic}".
The discussion style should be {describe_style(aggression)}.

Previous discussion:
{transcript}

Generate the next response from one of the AI participants. The response should:
1. Be natural and conversational
2. Reference previous points made
3. Add new insights or perspectives
4. Match the {aggression} discussion style

Format as JSON: {{ "participant": "AI Participant X", "message": "response text" }}"""


def parse_turn(content: str) -> DiscussionTurn:
    """Read a turn from model output, keeping the raw text when it is not JSON."""
    parsed = extract_json(content, JSON_OBJECT_PATTERN)
    if not isinstance(parsed, dict):
        return DiscussionTurn(participant=DEFAULT_PARTICIPANT, message=content)

    participant = parsed.get("participant")
    message = parsed.get("message")
    return DiscussionTurn(
        participant=participant if isinstance(participant, str) and participant.strip() else DEFAULT_PARTICIPANT,
        message=message if isinstance(message, str) and message.strip() else content,
    )


@router.post("", response_model=DiscussionTurn, dependencies=[Depends(enforce_rate_limit)])
async def group_discussion(body: DiscussionRequest):
    """
    Generate the next AI participant turn.

    Args:
        body: DiscussionRequest with topic, participant count, style and recent history

    Returns:
        DiscussionTurn naming the speaker and their message
    """
    validation = validate_discussion_request(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    aggression = body.aggression or "balanced"
    logger.info(
        f"Discussion turn request: topic={body.topic}, participants={body.participants}, "
        f"style={aggression}, history={len(body.history)}"
    )

    content = call_gemini(build_discussion_prompt(body.topic, body.participants, aggression, body.history))

    if not content:
        return DiscussionTurn(
            participant=DEFAULT_PARTICIPANT,
            message=FALLBACK_TURNS.get(describe_style(aggression), FALLBACK_TURNS["moderately challenging"]),
        )

    return parse_turn(content)


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "group-discussion"}
