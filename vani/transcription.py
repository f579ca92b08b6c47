"""
Speech-to-text function.

Audio arrives base64 encoded from the browser recorder. AssemblyAI is the
default provider: upload, create a transcript job, then poll it until it
settles.
"""

import asyncio
import base64
import binascii
import logging
import os
import time
from typing import Optional

import httpx
from dotenv import load_dotenv
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from . import elevenlabs
from .errors import ProviderError, ProviderNotConfiguredError, ProviderTimeoutError
from .middleware.rate_limiter import enforce_rate_limit
from .middleware.validator import MAX_AUDIO_SIZE_BYTES, validate_stt_request

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transcribe-speech", tags=["transcribe-speech"])

ASSEMBLYAI_BASE_URL = "https://api.assemblyai.com/v2"
TRANSCRIPT_LANGUAGE = "en"


class TranscribeRequest(BaseModel):
    audioBase64: Optional[str] = None


class TranscribeResponse(BaseModel):
    text: str


async def transcribe_with_assemblyai(
    audio: bytes,
    api_key: str,
    client: httpx.AsyncClient,
    poll_interval: float = 1.0,
    timeout: float = 120.0,
) -> str:
    """
    Run an AssemblyAI transcription job to completion.

    Raises:
        ProviderError: the job finished with status ``error``.
        ProviderTimeoutError: the job was still running after ``timeout`` seconds.
        httpx.HTTPError: transport failure or non-2xx response.
    """
    headers = {"authorization": api_key}

    upload = await client.post(
        f"{ASSEMBLYAI_BASE_URL}/upload",
        headers={**headers, "content-type": "application/octet-stream"},
        content=audio,
    )
    upload.raise_for_status()
    upload_url = upload.json()["upload_url"]

    created = await client.post(
        f"{ASSEMBLYAI_BASE_URL}/transcript",
        headers=headers,
        json={"audio_url": upload_url, "language_code": TRANSCRIPT_LANGUAGE},
    )
    created.raise_for_status()
    transcript_id = created.json()["id"]
    logger.info(f"AssemblyAI transcript {transcript_id} queued")

    deadline = time.monotonic() + timeout
    while True:
        polled = await client.get(f"{ASSEMBLYAI_BASE_URL}/transcript/{transcript_id}", headers=headers)
        polled.raise_for_status()
        transcript = polled.json()

        status = transcript.get("status")
        if status == "completed":
            return transcript.get("text") or ""
        if status == "error":
            raise ProviderError(transcript.get("error") or "Transcription failed")
        if time.monotonic() >= deadline:
            raise ProviderTimeoutError(f"Transcript {transcript_id} still {status} after {timeout:.0f}s")

        await asyncio.sleep(poll_interval)


async def _transcribe_default(audio: bytes) -> str:
    api_key = os.getenv("ASSEMBLYAI_API_KEY")
    if not api_key:
        logger.error("ASSEMBLYAI_API_KEY not configured")
        raise ProviderNotConfiguredError("ASSEMBLYAI_API_KEY not configured")

    async with httpx.AsyncClient(timeout=30.0) as client:
        return await transcribe_with_assemblyai(
            audio,
            api_key,
            client,
            poll_interval=float(os.getenv("ASSEMBLYAI_POLL_INTERVAL", "1")),
            timeout=float(os.getenv("ASSEMBLYAI_TIMEOUT_SECONDS", "120")),
        )


@router.post("", response_model=TranscribeResponse, dependencies=[Depends(enforce_rate_limit)])
async def transcribe_speech(body: TranscribeRequest):
    """
    Convert recorded speech to text.

    Args:
        body: TranscribeRequest with base64 audio

    Returns:
        TranscribeResponse with the transcript
    """
    validation = validate_stt_request(body.model_dump())
    if not validation.valid:
        raise HTTPException(status_code=validation.error_code, detail=validation.error_message)

    try:
        audio = base64.b64decode(body.audioBase64, validate=True)
    except (binascii.Error, ValueError) as e:
        logger.error(f"Failed to decode audio: {e}")
        raise HTTPException(status_code=400, detail="Invalid base64 audio data")

    if len(audio) > MAX_AUDIO_SIZE_BYTES:
        raise HTTPException(status_code=400, detail="Audio exceeds maximum size")

    provider = os.getenv("STT_PROVIDER", "assemblyai").lower()
    logger.info(f"STT request: {len(audio)} bytes, provider={provider}")

    try:
        if provider == "elevenlabs":
            text = elevenlabs.transcribe(audio, TRANSCRIPT_LANGUAGE)
        else:
            text = await _transcribe_default(audio)
    except ProviderNotConfiguredError:
        raise HTTPException(status_code=500, detail="Service not configured")
    except ProviderTimeoutError as e:
        logger.error(f"Transcription timed out: {e}")
        raise HTTPException(status_code=504, detail="Transcription timed out")
    except ProviderError as e:
        logger.error(f"Transcription failed: {e}")
        raise HTTPException(status_code=500, detail=f"Transcription failed: {e}")
    except httpx.HTTPError as e:
        logger.error(f"AssemblyAI API error: {e}")
        raise HTTPException(status_code=500, detail="Speech-to-text conversion failed")

    return TranscribeResponse(text=text)


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "transcribe-speech"}
