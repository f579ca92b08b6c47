"""
Property-based tests for error handling middleware.

Bad requests map to 400 with a readable message, and clients over their
call budget get 429 with retry information.
"""

from hypothesis import given, settings, strategies as st

from vani.middleware.rate_limiter import RateLimiter
from vani.middleware.validator import (
    ERROR_CODES,
    MAX_TOPIC_LENGTH,
    MAX_TRANSCRIPT_LENGTH,
    MIN_PASSWORD_LENGTH,
    SESSION_TYPES,
    validate_login_request,
    validate_profile_update,
    validate_session_record,
    validate_signup_request,
    validate_tts_request,
)

emails = st.from_regex(r"[a-z]{1,10}@[a-z]{1,10}\.(com|in|org)", fullmatch=True)
passwords = st.text(min_size=MIN_PASSWORD_LENGTH, max_size=40)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestBadRequestMapping:

    def test_empty_body_returns_400(self):
        result = validate_tts_request({})
        assert not result.valid
        assert result.error_code == 400
        assert result.error_type == "bad_request"

    def test_validators_only_produce_bad_request(self):
        assert ERROR_CODES == {"bad_request": 400}

    @given(st.one_of(st.integers(), st.lists(st.text(), min_size=1), st.dictionaries(st.text(), st.text(), min_size=1)))
    @settings(max_examples=50)
    def test_wrong_type_for_text_returns_400(self, wrong_type):
        result = validate_tts_request({"text": wrong_type})
        assert not result.valid
        assert result.error_code == 400

    @given(emails, passwords, st.text(min_size=1, max_size=50).filter(lambda t: t.strip()))
    @settings(max_examples=50)
    def test_valid_signup_is_accepted(self, email: str, password: str, display_name: str):
        data = {"email": email, "password": password, "displayName": display_name}
        assert validate_signup_request(data).valid

    @given(st.text(max_size=30).filter(lambda t: "@" not in t))
    def test_invalid_email_is_rejected(self, email: str):
        result = validate_login_request({"email": email, "password": "secret123"})
        assert not result.valid
        assert result.error_message == "Invalid email address"

    @given(emails, st.text(max_size=MIN_PASSWORD_LENGTH - 1))
    def test_short_password_is_rejected(self, email: str, password: str):
        result = validate_login_request({"email": email, "password": password})
        assert not result.valid
        assert result.error_message == f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    @given(emails, st.text(alphabet=" \t", max_size=5))
    def test_blank_display_name_is_rejected(self, email: str, display_name: str):
        data = {"email": email, "password": "secret123", "displayName": display_name}
        result = validate_signup_request(data)
        assert not result.valid
        assert result.error_message == "Display name is required"

    @given(st.sampled_from(["ftp://x/y.png", "javascript:alert(1)", "avatar.png"]))
    def test_non_http_avatar_is_rejected(self, url: str):
        result = validate_profile_update({"displayName": None, "avatarUrl": url})
        assert not result.valid

    @given(st.sampled_from(sorted(SESSION_TYPES)), st.floats(min_value=0, max_value=100))
    def test_session_scores_in_range_are_accepted(self, session_type: str, score: float):
        assert validate_session_record({"sessionType": session_type, "score": score}).valid

    @given(st.floats(max_value=-0.01) | st.floats(min_value=100.01, allow_infinity=False, allow_nan=False))
    def test_session_scores_out_of_range_are_rejected(self, score: float):
        result = validate_session_record({"sessionType": "interview", "score": score})
        assert not result.valid
        assert "score" in result.error_message

    @given(st.sampled_from([("topic", MAX_TOPIC_LENGTH), ("feedback", MAX_TRANSCRIPT_LENGTH)]), st.integers(min_value=1, max_value=50))
    @settings(max_examples=30)
    def test_session_text_over_limit_is_rejected(self, field_limit, extra: int):
        field, limit = field_limit
        result = validate_session_record({"sessionType": "presentation", field: "x" * (limit + extra)})
        assert not result.valid
        assert result.error_code == 400
        assert field in result.error_message

    def test_session_text_at_limit_is_accepted(self):
        data = {"sessionType": "interview", "topic": "t" * MAX_TOPIC_LENGTH, "feedback": "f" * MAX_TRANSCRIPT_LENGTH}
        assert validate_session_record(data).valid


class TestRateLimiting:

    def test_rate_limit_exceeded_returns_retry_after(self):
        limiter = RateLimiter(requests_per_minute=5, window_seconds=60, clock=FakeClock())

        for _ in range(5):
            assert limiter.check("client").allowed

        result = limiter.check("client")
        assert not result.allowed
        assert result.remaining == 0
        assert result.retry_after is not None and result.retry_after > 0

    @given(st.integers(min_value=1, max_value=10))
    @settings(max_examples=30)
    def test_rate_limit_tracks_per_client(self, limit: int):
        limiter = RateLimiter(requests_per_minute=limit, window_seconds=60, clock=FakeClock())

        for _ in range(limit):
            assert limiter.check("client_a").allowed

        assert not limiter.check("client_a").allowed
        assert limiter.check("client_b").allowed

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(requests_per_minute=2, window_seconds=60, clock=clock)

        assert limiter.check("client").allowed
        clock.now += 30
        assert limiter.check("client").allowed
        assert not limiter.check("client").allowed

        clock.now += 31
        assert limiter.check("client").allowed

    @given(st.integers(min_value=1, max_value=50))
    @settings(max_examples=20)
    def test_idle_clients_are_forgotten(self, clients: int):
        clock = FakeClock()
        limiter = RateLimiter(requests_per_minute=5, window_seconds=60, clock=clock)

        for i in range(clients):
            limiter.check(f"10.0.0.{i}")
        assert limiter.tracked_clients() == clients

        clock.now += 61
        limiter.check("10.0.1.1")
        assert limiter.tracked_clients() == 1

    def test_endpoint_returns_429(self, client, monkeypatch):
        monkeypatch.setattr(
            "vani.middleware.rate_limiter._rate_limiter",
            RateLimiter(requests_per_minute=1, clock=FakeClock()),
        )
        body = {"text": "Hello everyone.", "type": "speech"}
        monkeypatch.setattr("vani.analysis.call_gemini", lambda prompt: "Good. Score: 80/100")

        assert client.post("/analyze-speech", json=body).status_code == 200
        response = client.post("/analyze-speech", json=body)
        assert response.status_code == 429
        assert response.json()["detail"]["retry_after"] > 0
