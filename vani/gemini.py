"""
Gemini access shared by the coaching functions.

The model answers in free text; the helpers here pull JSON payloads and
"NN/100" scores back out of it.
"""

import json
import logging
import os
import re
from typing import Any, Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash-001"
DEFAULT_SCORE = 75

FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")
JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")
JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")
SCORE_PATTERN = re.compile(r"(\d+)\s*/\s*100")


def call_gemini(prompt: str) -> Optional[str]:
    """
    Call Gemini with the given prompt.

    Returns the generated text or None if the call fails.
    """
    try:
        project_id = os.getenv("GOOGLE_CLOUD_PROJECT")
        location = os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")

        if not project_id:
            logger.error("GOOGLE_CLOUD_PROJECT not configured")
            return None

        from google.cloud import aiplatform
        from vertexai.generative_models import GenerativeModel

        aiplatform.init(project=project_id, location=location)

        model = GenerativeModel(os.getenv("GEMINI_MODEL", DEFAULT_MODEL))
        response = model.generate_content(prompt)

        text = (response.text or "").strip()
        if not text:
            logger.warning("Gemini returned an empty reply")
            return None
        return text

    except Exception as e:
        logger.error(f"Gemini API error: {e}")
        return None


def extract_json(content: str, fallback_pattern: re.Pattern) -> Optional[Any]:
    """
    Pull a JSON value out of model output.

    A ```json fenced block wins; otherwise the widest span matched by
    ``fallback_pattern`` is tried. Returns None when nothing parses.
    """
    fenced = FENCED_JSON_PATTERN.search(content)
    if fenced:
        raw = fenced.group(1)
    else:
        match = fallback_pattern.search(content)
        if not match:
            return None
        raw = match.group(0)

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Model output held unparseable JSON: {e}")
        return None


def extract_score(feedback: str, default: int = DEFAULT_SCORE) -> int:
    """First "NN/100" in the feedback, clamped to 0-100."""
    match = SCORE_PATTERN.search(feedback)
    if not match:
        return default
    return max(0, min(100, int(match.group(1))))
