"""
Practice session history and the progress dashboard.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from .database import SESSIONS_TABLE, CurrentUser, get_current_user
from .middleware.validator import validate_session_record
from .progress import summarize_sessions

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions"])


class SessionRecord(BaseModel):
    sessionType: str
    topic: Optional[str] = None
    score: Optional[float] = None
    feedback: Optional[str] = None
    durationSeconds: Optional[int] = None


class PracticeSession(BaseModel):
    id: str
    sessionType: str
    topic: Optional[str] = None
    score: Optional[float] = None
    feedback: Optional[str] = None
    durationSeconds: Optional[int] = None
    completedAt: str


class ProgressResponse(BaseModel):
    totalSessions: int
    avgScore: int
    thisWeekSessions: int
    weeklyActivity: list[int]


def _to_session(row: dict) -> PracticeSession:
    return PracticeSession(
        id=str(row["id"]),
        sessionType=row["session_type"],
        topic=row.get("topic"),
        score=row.get("score"),
        feedback=row.get("feedback"),
        durationSeconds=row.get("duration_seconds"),
        completedAt=str(row["completed_at"]),
    )


@router.post("/sessions", response_model=PracticeSession, status_code=201)
def record_session(body: SessionRecord, user: CurrentUser = Depends(get_current_user)):
    """Store a finished practice session for the caller."""
    validation = validate_session_record(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    row = {
        "user_id": user.id,
        "session_type": body.sessionType,
        "topic": body.topic,
        "score": body.score,
        "feedback": body.feedback,
        "duration_seconds": body.durationSeconds,
        "completed_at": datetime.now(timezone.utc).isoformat(),
    }
    response = user.client.table(SESSIONS_TABLE).insert(row).execute()
    if not response.data:
        raise HTTPException(status_code=500, detail="Session could not be saved")

    logger.info(f"Session recorded: user={user.id}, type={body.sessionType}, score={body.score}")
    return _to_session(response.data[0])


@router.get("/sessions", response_model=list[PracticeSession])
def list_sessions(
    limit: int = Query(default=50, ge=1, le=500),
    user: CurrentUser = Depends(get_current_user),
):
    """The caller's sessions, newest first."""
    response = (
        user.client.table(SESSIONS_TABLE)
        .select("*")
        .eq("user_id", user.id)
        .order("completed_at", desc=True)
        .limit(limit)
        .execute()
    )
    return [_to_session(row) for row in response.data or []]


@router.get("/progress", response_model=ProgressResponse)
def get_progress(user: CurrentUser = Depends(get_current_user)):
    response = (
        user.client.table(SESSIONS_TABLE)
        .select("score, completed_at")
        .eq("user_id", user.id)
        .order("completed_at", desc=True)
        .execute()
    )
    summary = summarize_sessions(response.data or [])
    return ProgressResponse(
        totalSessions=summary.total_sessions,
        avgScore=summary.avg_score,
        thisWeekSessions=summary.this_week_sessions,
        weeklyActivity=summary.weekly_activity,
    )
