"""Middleware components for request validation and rate limiting."""

from .rate_limiter import RateLimiter, enforce_rate_limit
from .validator import (
    validate_analysis_request,
    validate_discussion_request,
    validate_interview_request,
    validate_login_request,
    validate_profile_update,
    validate_session_record,
    validate_signup_request,
    validate_stt_request,
    validate_tts_request,
)

__all__ = [
    "RateLimiter",
    "enforce_rate_limit",
    "validate_analysis_request",
    "validate_discussion_request",
    "validate_interview_request",
    "validate_login_request",
    "validate_profile_update",
    "validate_session_record",
    "validate_signup_request",
    "validate_stt_request",
    "validate_tts_request",
]
