"""
Property-based tests for request validation.

Covers the text/audio size limits and the choice fields of the coaching
functions.
"""

import base64

from hypothesis import given, settings, strategies as st

from vani.middleware.validator import (
    ANALYSIS_TYPES,
    DIFFICULTIES,
    INTERVIEW_TYPES,
    MAX_AUDIO_SIZE_BYTES,
    MAX_PARTICIPANTS,
    MAX_TEXT_LENGTH,
    validate_analysis_request,
    validate_discussion_request,
    validate_interview_request,
    validate_stt_request,
    validate_tts_request,
)


class TestTextLengthBoundaryValidation:
    """Text-to-speech text must be 1..MAX_TEXT_LENGTH characters and not blank."""

    @given(st.integers(min_value=MAX_TEXT_LENGTH + 1, max_value=MAX_TEXT_LENGTH + 100))
    @settings(max_examples=50)
    def test_text_exceeding_max_length_is_rejected(self, length: int):
        result = validate_tts_request({"text": "a" * length})

        assert not result.valid
        assert result.error_code == 400
        assert "maximum length" in result.error_message.lower()

    @given(st.text(min_size=1, max_size=MAX_TEXT_LENGTH).filter(lambda t: t.strip()))
    @settings(max_examples=100)
    def test_text_within_max_length_is_accepted(self, text: str):
        assert validate_tts_request({"text": text}).valid

    def test_text_at_exact_max_length_is_accepted(self):
        assert validate_tts_request({"text": "a" * MAX_TEXT_LENGTH}).valid

    def test_text_one_over_max_length_is_rejected(self):
        result = validate_tts_request({"text": "a" * (MAX_TEXT_LENGTH + 1)})
        assert not result.valid
        assert result.error_code == 400

    @given(st.text(alphabet=" \t\n", min_size=1, max_size=20))
    def test_whitespace_only_text_is_rejected(self, text: str):
        result = validate_tts_request({"text": text})
        assert not result.valid
        assert "empty" in result.error_message.lower()

    def test_missing_text_message(self):
        result = validate_tts_request({"voice": "en-IN-NeerjaNeural"})
        assert result.error_message == "No text provided"

    @given(st.sampled_from(["en-IN-NeerjaNeural", "en-IN-PrabhatNeural", "21m00Tcm4TlvDq8ikWAM"]))
    def test_voice_names_are_accepted(self, voice: str):
        assert validate_tts_request({"text": "Hello", "voice": voice}).valid

    @given(st.sampled_from(["en'IN", "<voice>", "a b", ""]))
    def test_voice_names_with_markup_are_rejected(self, voice: str):
        result = validate_tts_request({"text": "Hello", "voice": voice})
        assert not result.valid
        assert result.error_code == 400


class TestAudioValidation:
    """Transcription requests must carry base64 audio under the size limit."""

    @given(st.binary(min_size=1, max_size=2048))
    @settings(max_examples=50)
    def test_small_audio_is_accepted(self, audio: bytes):
        data = {"audioBase64": base64.b64encode(audio).decode()}
        assert validate_stt_request(data).valid

    def test_missing_audio_message(self):
        result = validate_stt_request({"audioBase64": ""})
        assert not result.valid
        assert result.error_message == "No audio data provided"

    def test_oversized_audio_is_rejected(self):
        encoded_length = (MAX_AUDIO_SIZE_BYTES // 3 + 1) * 4 + 4
        result = validate_stt_request({"audioBase64": "A" * encoded_length})
        assert not result.valid
        assert "maximum size" in result.error_message

    @given(st.one_of(st.integers(), st.lists(st.integers(), min_size=1)))
    def test_non_string_audio_is_rejected(self, audio):
        assert not validate_stt_request({"audioBase64": audio}).valid


class TestInterviewValidation:

    @given(
        st.text(min_size=1, max_size=100).filter(lambda t: t.strip()),
        st.sampled_from(sorted(DIFFICULTIES)),
        st.sampled_from(sorted(INTERVIEW_TYPES)),
    )
    @settings(max_examples=100)
    def test_valid_requests_are_accepted(self, role: str, difficulty: str, interview_type: str):
        data = {"role": role, "difficulty": difficulty, "type": interview_type, "action": "generate_questions"}
        result = validate_interview_request(data)
        assert result.valid, result.error_message

    @given(st.text(min_size=1, max_size=12).filter(lambda t: t not in DIFFICULTIES))
    def test_unknown_difficulty_is_rejected(self, difficulty: str):
        data = {"role": "Data Analyst", "difficulty": difficulty, "action": "generate_questions"}
        result = validate_interview_request(data)
        assert not result.valid
        assert "difficulty" in result.error_message

    def test_unknown_action_is_rejected(self):
        result = validate_interview_request({"role": "Data Analyst", "action": "grade_answers"})
        assert not result.valid
        assert "action" in result.error_message


class TestDiscussionValidation:

    @given(st.integers(min_value=1, max_value=MAX_PARTICIPANTS))
    def test_participant_counts_in_range_are_accepted(self, participants: int):
        data = {"topic": "Impact of AI on Jobs", "participants": participants, "history": []}
        assert validate_discussion_request(data).valid

    @given(st.integers(max_value=0) | st.integers(min_value=MAX_PARTICIPANTS + 1))
    def test_participant_counts_out_of_range_are_rejected(self, participants: int):
        data = {"topic": "Impact of AI on Jobs", "participants": participants}
        result = validate_discussion_request(data)
        assert not result.valid
        assert "participants" in result.error_message

    def test_malformed_history_is_rejected(self):
        data = {"topic": "Remote Work", "participants": 3, "history": [{"name": "Rahul"}]}
        assert not validate_discussion_request(data).valid


class TestAnalysisValidation:

    @given(st.sampled_from(sorted(ANALYSIS_TYPES)))
    def test_known_types_are_accepted(self, analysis_type: str):
        data = {"text": "I led the migration project.", "topic": "Leadership", "type": analysis_type}
        assert validate_analysis_request(data).valid

    @given(st.text(min_size=1, max_size=12).filter(lambda t: t not in ANALYSIS_TYPES))
    def test_unknown_types_are_rejected(self, analysis_type: str):
        data = {"text": "Hello everyone.", "type": analysis_type}
        result = validate_analysis_request(data)
        assert not result.valid
        assert result.error_code == 400
