"""
ElevenLabs speech provider.

Alternative to AssemblyAI / Azure, selected with STT_PROVIDER=elevenlabs or
TTS_PROVIDER=elevenlabs.
"""

import io
import logging
import os
from typing import Optional

from .errors import ProviderError, ProviderNotConfiguredError

logger = logging.getLogger(__name__)

# Rachel; see https://elevenlabs.io/docs/api-reference/voices
DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
DEFAULT_TTS_MODEL = "eleven_multilingual_v2"
DEFAULT_STT_MODEL = "scribe_v1"


def _client():
    api_key = os.getenv("ELEVENLABS_API_KEY")
    if not api_key:
        logger.error("ELEVENLABS_API_KEY not configured")
        raise ProviderNotConfiguredError("ELEVENLABS_API_KEY not configured")

    from elevenlabs import ElevenLabs

    return ElevenLabs(api_key=api_key)


def resolve_voice_id(voice: Optional[str]) -> str:
    """Azure neural voice names do not exist on ElevenLabs; use the configured voice instead."""
    if voice and not voice.endswith("Neural"):
        return voice
    return os.getenv("ELEVENLABS_VOICE_ID", DEFAULT_VOICE_ID)


def synthesize(text: str, voice: Optional[str] = None) -> bytes:
    """Convert text to mp3 bytes."""
    client = _client()
    voice_id = resolve_voice_id(voice)

    try:
        audio_generator = client.text_to_speech.convert(
            voice_id=voice_id,
            text=text,
            model_id=os.getenv("ELEVENLABS_MODEL_ID", DEFAULT_TTS_MODEL),
            output_format="mp3_44100_128",
        )
        return b"".join(audio_generator)
    except Exception as e:
        logger.error(f"ElevenLabs TTS API error: {e}")
        raise ProviderError(f"ElevenLabs TTS error: {e}") from e


def transcribe(audio: bytes, language: str = "en") -> str:
    """Convert recorded audio to text."""
    client = _client()

    try:
        result = client.speech_to_text.convert(
            file=io.BytesIO(audio),
            model_id=DEFAULT_STT_MODEL,
            language_code=language,
        )
        return result.text
    except Exception as e:
        logger.error(f"ElevenLabs STT API error: {e}")
        raise ProviderError(f"ElevenLabs STT error: {e}") from e
