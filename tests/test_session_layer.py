"""Test the Redis session layer."""

import json
from unittest.mock import MagicMock, patch

import pytest

from marketplace.session import session_layer
from marketplace.session.session_layer import extract_token, get_session, get_session_user_id


class TestExtractToken:
    """Test cases for extract_token."""

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Bearer abc123", "abc123"),
            ("bearer abc123", "abc123"),
            (None, None),
            ("", None),
            ("Basic abc123", None),
            ("Bearer", None),
            ("Bearer a b", None),
        ],
    )
    def test_extract_token(self, header, expected) -> None:
        """Test that only well-formed bearer headers yield a token."""
        # Assert
        assert extract_token(header) == expected


class TestGetSession:
    """Test cases for get_session."""

    def setup_method(self) -> None:
        """Set up a mocked Redis client."""
        self.mock_client = MagicMock()

    def test_returns_decoded_session(self) -> None:
        """Test that a stored session is read from session:<token> and decoded."""
        # Arrange
        self.mock_client.get.return_value = json.dumps({"user_id": 7, "username": "buyer"})

        # Act
        with patch.object(session_layer, "_redis_client", self.mock_client):
            session = get_session("tok")

        # Assert
        self.mock_client.get.assert_called_once_with("session:tok")
        assert session == {"user_id": 7, "username": "buyer"}

    def test_missing_session_is_none(self) -> None:
        """Test that an unknown token yields None."""
        # Arrange
        self.mock_client.get.return_value = None

        # Act
        with patch.object(session_layer, "_redis_client", self.mock_client):
            session = get_session("unknown")

        # Assert
        assert session is None

    @pytest.mark.parametrize(
        "stored, expected",
        [
            ({"user_id": 7}, 7),
            ({"user_id": "7"}, 7),
            ({"username": "buyer"}, None),
            ({"user_id": "abc"}, None),
        ],
    )
    def test_session_user_id(self, stored, expected) -> None:
        """Test that the bound user id is read and coerced to int."""
        # Arrange
        self.mock_client.get.return_value = json.dumps(stored)

        # Act
        with patch.object(session_layer, "_redis_client", self.mock_client):
            user_id = get_session_user_id("tok")

        # Assert
        assert user_id == expected

    def test_uninitialized_client_raises(self) -> None:
        """Test that using the layer before init_redis raises RuntimeError."""
        # Act / Assert
        with patch.object(session_layer, "_redis_client", None):
            with pytest.raises(RuntimeError):
                get_session("tok")


class TestSessionMiddleware:
    """Test cases for session loading on HTTP requests."""

    def test_valid_token_authenticates(self, client, seed, monkeypatch) -> None:
        """Test that a bearer token with a stored session reaches the chat API."""
        # Arrange
        monkeypatch.setattr(
            "marketplace.core.middleware.get_session", lambda token: {"user_id": seed["buyer"]}
        )

        # Act
        response = client.get("/api/chats/unread", headers={"Authorization": "Bearer good"})

        # Assert
        assert response.status_code == 200
        assert response.json() == {"count": 0}

    def test_unknown_token_is_session_expired(self, client, monkeypatch) -> None:
        """Test that a token without a session is reported as expired."""
        # Arrange
        monkeypatch.setattr("marketplace.core.middleware.get_session", lambda token: None)

        # Act
        response = client.get("/api/chats/unread", headers={"Authorization": "Bearer stale"})

        # Assert
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "SESSION_EXPIRED"
