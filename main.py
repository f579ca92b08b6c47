"""
FastAPI application entry point for the VANI speech coach backend.

Combines the coaching functions and the account/progress routers into a
single FastAPI application.
"""

import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mangum import Mangum

from vani import __version__
from vani.analysis import router as analysis_router
from vani.auth import router as auth_router
from vani.discussion import router as discussion_router
from vani.interview import router as interview_router
from vani.profiles import router as profiles_router
from vani.sessions import router as sessions_router
from vani.synthesis import router as synthesis_router
from vani.transcription import router as transcription_router

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="VANI Speech Coach API",
    description="Interview, group discussion and presentation practice backed by Gemini, AssemblyAI and Azure TTS",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

# Include routers
app.include_router(interview_router)
app.include_router(discussion_router)
app.include_router(analysis_router)
app.include_router(transcription_router)
app.include_router(synthesis_router)
app.include_router(auth_router)
app.include_router(profiles_router)
app.include_router(sessions_router)


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    """Anything a router did not turn into an HTTP error becomes a 500 envelope."""
    logger.error(f"Error in {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": str(exc) or "Unknown error"})


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "VANI Speech Coach API",
        "version": __version__,
        "endpoints": {
            "mock-interview": "/mock-interview",
            "group-discussion": "/group-discussion",
            "analyze-speech": "/analyze-speech",
            "transcribe-speech": "/transcribe-speech",
            "text-to-speech": "/text-to-speech",
            "auth": "/auth",
            "profiles": "/profiles/me",
            "sessions": "/sessions",
            "progress": "/progress",
        },
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {"status": "healthy", "service": "vani-backend"}


# AWS Lambda / Google Cloud Functions handler
handler = Mangum(app)
