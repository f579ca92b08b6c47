"""
Text-to-speech function used for spoken feedback.

Azure neural voices are the default; audio comes back as base64 mp3.
"""

import base64
import logging
import os
from typing import Optional
from xml.sax.saxutils import escape

import httpx
from dotenv import load_dotenv
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from . import elevenlabs
from .errors import ProviderError, ProviderNotConfiguredError
from .middleware.rate_limiter import enforce_rate_limit
from .middleware.validator import validate_tts_request

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/text-to-speech", tags=["text-to-speech"])

DEFAULT_VOICE = "en-IN-NeerjaNeural"
AZURE_OUTPUT_FORMAT = "audio-16khz-128kbitrate-mono-mp3"


class SynthesisRequest(BaseModel):
    text: Optional[str] = None
    voice: Optional[str] = DEFAULT_VOICE


class SynthesisResponse(BaseModel):
    audioContent: str


def build_ssml(text: str, voice: str) -> str:
    return (
        "<speak version='1.0' xml:lang='en-IN'>"
        f"<voice xml:lang='en-IN' name='{voice}'>{escape(text)}</voice>"
        "</speak>"
    )


async def synthesize_with_azure(
    text: str,
    voice: str,
    api_key: str,
    region: str,
    client: httpx.AsyncClient,
) -> bytes:
    """Render text through Azure Cognitive Services TTS and return mp3 bytes."""
    response = await client.post(
        f"https://{region}.tts.speech.microsoft.com/cognitiveservices/v1",
        headers={
            "Ocp-Apim-Subscription-Key": api_key,
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": AZURE_OUTPUT_FORMAT,
        },
        content=build_ssml(text, voice).encode("utf-8"),
    )
    if not response.is_success:
        raise ProviderError(f"Azure TTS error: {response.status_code}")
    return response.content


async def _synthesize_default(text: str, voice: str) -> bytes:
    api_key = os.getenv("AZURE_TTS_KEY")
    region = os.getenv("AZURE_REGION")
    if not api_key or not region:
        logger.error("AZURE_TTS_KEY / AZURE_REGION not configured")
        raise ProviderNotConfiguredError("AZURE_TTS_KEY / AZURE_REGION not configured")

    async with httpx.AsyncClient(timeout=30.0) as client:
        return await synthesize_with_azure(text, voice, api_key, region, client)


@router.post("", response_model=SynthesisResponse, dependencies=[Depends(enforce_rate_limit)])
async def text_to_speech(body: SynthesisRequest):
    """
    Convert text to speech.

    Args:
        body: SynthesisRequest with text and an optional voice name

    Returns:
        SynthesisResponse with base64 encoded mp3 audio
    """
    validation = validate_tts_request(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    voice = body.voice or DEFAULT_VOICE
    provider = os.getenv("TTS_PROVIDER", "azure").lower()
    logger.info(f"TTS request: {len(body.text)} chars, voice={voice}, provider={provider}")

    try:
        if provider == "elevenlabs":
            audio = elevenlabs.synthesize(body.text, voice)
        else:
            audio = await _synthesize_default(body.text, voice)
    except ProviderNotConfiguredError:
        raise HTTPException(status_code=500, detail="Service not configured")
    except ProviderError as e:
        logger.error(f"Text-to-speech failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except httpx.HTTPError as e:
        logger.error(f"Azure TTS transport error: {e}")
        raise HTTPException(status_code=500, detail="Text-to-speech conversion failed")

    return SynthesisResponse(audioContent=base64.b64encode(audio).decode("utf-8"))


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "text-to-speech"}
