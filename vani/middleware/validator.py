"""
Request validation for the VANI functions.

Each ``validate_*`` function takes the decoded request body and returns a
ValidationResult; routers turn failures into HTTP errors.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)

# Constants
MAX_TEXT_LENGTH = 5000
MAX_TRANSCRIPT_LENGTH = 20000
MAX_AUDIO_SIZE_BYTES = 10 * 1024 * 1024  # 10MB
MAX_ROLE_LENGTH = 100
MAX_TOPIC_LENGTH = 200
MAX_DISPLAY_NAME_LENGTH = 100
MIN_PASSWORD_LENGTH = 6
MIN_PARTICIPANTS = 1
MAX_PARTICIPANTS = 4

DIFFICULTIES = {"easy", "medium", "hard"}
INTERVIEW_TYPES = {"behavioral", "technical", "situational", "general"}
INTERVIEW_ACTIONS = {"generate_questions"}
ANALYSIS_TYPES = {"speech", "interview", "presentation"}
SESSION_TYPES = {"interview", "group_discussion", "presentation"}

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Error code mapping
ERROR_CODES = {
    "bad_request": 400,
}


@dataclass
class ValidationResult:
    """Result of request validation."""
    valid: bool
    error_code: Optional[int] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None


def log_validation_error(error_type: str, message: str, data: dict[str, Any] = None) -> None:
    """Log validation errors for monitoring."""
    logger.warning(f"Validation error [{error_type}]: {message}", extra={"request_data": data})


def _reject(message: str, data: dict[str, Any] = None, error_type: str = "bad_request") -> ValidationResult:
    log_validation_error(error_type, message, data)
    return ValidationResult(
        valid=False,
        error_code=ERROR_CODES[error_type],
        error_message=message,
        error_type=error_type,
    )


def _check_required_text(data: dict[str, Any], field: str, max_length: int) -> Optional[ValidationResult]:
    value = data.get(field)
    if value is None or value == "":
        return _reject(f"Field '{field}' is required", data)
    if not isinstance(value, str):
        return _reject(f"Field '{field}' must be a string", data)
    if not value.strip():
        return _reject(f"Field '{field}' cannot be empty or whitespace only", data)
    if len(value) > max_length:
        return _reject(f"Field '{field}' exceeds maximum length of {max_length} characters", data)
    return None


def _check_choice(data: dict[str, Any], field: str, choices: set[str]) -> Optional[ValidationResult]:
    value = data.get(field)
    if value is not None and value not in choices:
        return _reject(
            f"Unsupported {field} '{value}'. Supported: {', '.join(sorted(choices))}",
            data,
        )
    return None


def validate_tts_request(data: dict[str, Any]) -> ValidationResult:
    """
    Validate a text-to-speech request.

    Args:
        data: Request body containing text and an optional voice name.

    Returns:
        ValidationResult with valid status or error details.
    """
    if not data:
        return _reject("Request body is required")

    text = data.get("text")
    if not text:
        return _reject("No text provided", data)
    if not isinstance(text, str):
        return _reject("Field 'text' must be a string", data)
    if len(text) > MAX_TEXT_LENGTH:
        return _reject(f"Text exceeds maximum length of {MAX_TEXT_LENGTH} characters", data)
    if not text.strip():
        return _reject("Field 'text' cannot be empty or whitespace only", data)

    voice = data.get("voice")
    if voice is not None and (not isinstance(voice, str) or not re.fullmatch(r"[A-Za-z0-9:_\-]+", voice)):
        return _reject("Field 'voice' must be a voice name", data)

    return ValidationResult(valid=True)


def validate_stt_request(data: dict[str, Any]) -> ValidationResult:
    """
    Validate a transcription request carrying base64 audio.

    Only the encoded size is checked here; decoding happens in the router.
    """
    if not data:
        return _reject("Request body is required")

    audio = data.get("audioBase64")
    if not audio:
        return _reject("No audio data provided", data)
    if not isinstance(audio, str):
        return _reject("Field 'audioBase64' must be a base64 encoded string", data)

    # base64 is ~4/3 of the original size
    estimated_size = len(audio) * 3 // 4
    if estimated_size > MAX_AUDIO_SIZE_BYTES:
        return _reject(f"Audio exceeds maximum size of {MAX_AUDIO_SIZE_BYTES // (1024 * 1024)}MB", data)

    return ValidationResult(valid=True)


def validate_interview_request(data: dict[str, Any]) -> ValidationResult:
    """Validate a mock interview question request."""
    if not data:
        return _reject("Request body is required")

    action = data.get("action")
    if action is None:
        return _reject("Field 'action' is required", data)
    if action not in INTERVIEW_ACTIONS:
        return _reject(f"Unsupported action '{action}'", data)

    error = _check_required_text(data, "role", MAX_ROLE_LENGTH)
    if error:
        return error

    for field, choices in (("difficulty", DIFFICULTIES), ("type", INTERVIEW_TYPES)):
        error = _check_choice(data, field, choices)
        if error:
            return error

    return ValidationResult(valid=True)


def validate_discussion_request(data: dict[str, Any]) -> ValidationResult:
    """Validate a group discussion turn request."""
    if not data:
        return _reject("Request body is required")

    error = _check_required_text(data, "topic", MAX_TOPIC_LENGTH)
    if error:
        return error

    participants = data.get("participants")
    if isinstance(participants, bool) or not isinstance(participants, int):
        return _reject("Field 'participants' must be an integer", data)
    if not MIN_PARTICIPANTS <= participants <= MAX_PARTICIPANTS:
        return _reject(
            f"Field 'participants' must be between {MIN_PARTICIPANTS} and {MAX_PARTICIPANTS}",
            data,
        )

    history = data.get("history")
    if history is not None:
        if not isinstance(history, list):
            return _reject("Field 'history' must be an array", data)
        for entry in history:
            if not isinstance(entry, dict) or not isinstance(entry.get("message"), str):
                return _reject("Each history entry needs a 'name' and a 'message'", data)

    return ValidationResult(valid=True)


def validate_analysis_request(data: dict[str, Any]) -> ValidationResult:
    """Validate a feedback scoring request."""
    if not data:
        return _reject("Request body is required")

    error = _check_required_text(data, "text", MAX_TRANSCRIPT_LENGTH)
    if error:
        return error

    if data.get("type") not in ANALYSIS_TYPES:
        return _reject(
            f"Unsupported type '{data.get('type')}'. Supported: {', '.join(sorted(ANALYSIS_TYPES))}",
            data,
        )

    topic = data.get("topic")
    if topic is not None and not isinstance(topic, str):
        return _reject("Field 'topic' must be a string", data)
    if topic and len(topic) > MAX_TOPIC_LENGTH:
        return _reject(f"Field 'topic' exceeds maximum length of {MAX_TOPIC_LENGTH} characters", data)

    return ValidationResult(valid=True)


def _check_credentials(data: dict[str, Any]) -> Optional[ValidationResult]:
    email = data.get("email")
    if not isinstance(email, str) or not EMAIL_PATTERN.match(email):
        return _reject("Invalid email address", {"email": email})
    password = data.get("password")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        return _reject(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            {"email": email},
        )
    return None


def validate_login_request(data: dict[str, Any]) -> ValidationResult:
    """Validate email/password sign in. Passwords are never logged."""
    if not data:
        return _reject("Request body is required")
    return _check_credentials(data) or ValidationResult(valid=True)


def validate_signup_request(data: dict[str, Any]) -> ValidationResult:
    """Validate sign up: credentials plus a display name."""
    if not data:
        return _reject("Request body is required")

    error = _check_credentials(data)
    if error:
        return error

    display_name = data.get("displayName")
    if not isinstance(display_name, str) or not display_name.strip():
        return _reject("Display name is required", {"email": data.get("email")})
    if len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        return _reject(
            f"Display name exceeds maximum length of {MAX_DISPLAY_NAME_LENGTH} characters",
            {"email": data.get("email")},
        )

    return ValidationResult(valid=True)


def validate_profile_update(data: dict[str, Any]) -> ValidationResult:
    """Validate a profile edit."""
    if not data:
        return _reject("Request body is required")

    display_name = data.get("displayName")
    if display_name is not None and not isinstance(display_name, str):
        return _reject("Field 'displayName' must be a string", data)
    if display_name and len(display_name) > MAX_DISPLAY_NAME_LENGTH:
        return _reject(
            f"Display name exceeds maximum length of {MAX_DISPLAY_NAME_LENGTH} characters",
            data,
        )

    avatar_url = data.get("avatarUrl")
    if avatar_url is not None and not isinstance(avatar_url, str):
        return _reject("Field 'avatarUrl' must be a string", data)
    if avatar_url and not re.match(r"^https?://", avatar_url):
        return _reject("Field 'avatarUrl' must be an http(s) URL", data)

    return ValidationResult(valid=True)


def validate_session_record(data: dict[str, Any]) -> ValidationResult:
    """Validate a completed practice session before it is stored."""
    if not data:
        return _reject("Request body is required")

    if data.get("sessionType") not in SESSION_TYPES:
        return _reject(
            f"Unsupported sessionType '{data.get('sessionType')}'. "
            f"Supported: {', '.join(sorted(SESSION_TYPES))}",
            data,
        )

    score = data.get("score")
    if score is not None:
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return _reject("Field 'score' must be a number", data)
        if not 0 <= score <= 100:
            return _reject("Field 'score' must be between 0 and 100", data)

    for field, max_length in (("topic", MAX_TOPIC_LENGTH), ("feedback", MAX_TRANSCRIPT_LENGTH)):
        value = data.get(field)
        if value is None:
            continue
        if not isinstance(value, str):
            return _reject(f"Field '{field}' must be a string", data)
        if len(value) > max_length:
            return _reject(f"Field '{field}' exceeds maximum length of {max_length} characters", data)

    duration = data.get("durationSeconds")
    if duration is not None and (not isinstance(duration, int) or duration < 0):
        return _reject("Field 'durationSeconds' must be a non-negative integer", data)

    return ValidationResult(valid=True)
