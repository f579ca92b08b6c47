"""
VANI Backend - Speech Coach Functions

This package provides the API endpoints behind the practice screens:
- Gemini question generation, discussion turns and scored feedback
- AssemblyAI / ElevenLabs speech-to-text and Azure / ElevenLabs text-to-speech
- Supabase-backed accounts, profiles and practice history
"""

__version__ = "1.0.0"
