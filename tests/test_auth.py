"""Tests for session cookie signing and verification."""

import pytest
from itsdangerous import URLSafeTimedSerializer

from opcc.auth import (
    SESSION_SALT,
    Identity,
    get_current_user,
    issue_session_token,
    read_session_token,
)
from opcc.config import settings
from opcc.models.failure import AuthenticationError, FailureKind


def _sign(payload: object) -> str:
    return URLSafeTimedSerializer(settings.session_secret, salt=SESSION_SALT).dumps(payload)


class TestReadSessionToken:
    def test_round_trip(self, identity: Identity) -> None:
        assert read_session_token(issue_session_token(identity)) == identity

    def test_wrong_secret(self, identity: Identity) -> None:
        """Tokens signed with another key are rejected."""
        forged = URLSafeTimedSerializer("other-secret", salt=SESSION_SALT).dumps(
            {"id": 1, "email": "nami@example.com", "name": "nami", "role": "Admin"}
        )

        with pytest.raises(AuthenticationError) as excinfo:
            read_session_token(forged)

        assert excinfo.value.code == "MALFORMED_TOKEN"
        assert excinfo.value.status_code == 401
        assert excinfo.value.kind == FailureKind.UNAUTHENTICATED

    def test_garbage(self) -> None:
        with pytest.raises(AuthenticationError) as excinfo:
            read_session_token("not-a-token")

        assert excinfo.value.code == "MALFORMED_TOKEN"

    def test_expired(self, identity: Identity, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "session_max_age", -1)

        with pytest.raises(AuthenticationError) as excinfo:
            read_session_token(issue_session_token(identity))

        assert excinfo.value.code == "TOKEN_EXPIRED"

    @pytest.mark.parametrize(
        "payload",
        [
            ["not", "a", "dict"],
            {"email": "nami@example.com", "role": "Admin"},
            {"id": 1, "role": "Admin"},
            {"id": 1, "email": "nami@example.com"},
            {"id": "abc", "email": "nami@example.com", "role": "Admin"},
        ],
    )
    def test_invalid_payload(self, payload: object) -> None:
        """Correctly signed but incomplete payloads are still rejected."""
        with pytest.raises(AuthenticationError) as excinfo:
            read_session_token(_sign(payload))

        assert excinfo.value.code == "INVALID_TOKEN_PAYLOAD"

    def test_string_id_is_coerced(self) -> None:
        identity = read_session_token(
            _sign({"id": "7", "email": "zoro@example.com", "role": "Normal User"})
        )

        assert identity.id == 7
        assert identity.name == ""

    def test_zero_id_is_valid(self) -> None:
        identity = read_session_token(
            _sign({"id": 0, "email": "root@example.com", "role": "Admin"})
        )

        assert identity.id == 0


class TestGetCurrentUser:
    async def test_missing_cookie(self) -> None:
        with pytest.raises(AuthenticationError) as excinfo:
            await get_current_user(None)

        assert excinfo.value.code == "NO_TOKEN"

    async def test_valid_cookie(self, identity: Identity) -> None:
        assert await get_current_user(issue_session_token(identity)) == identity
