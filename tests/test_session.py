"""
Unit tests for the Supabase session provider.

The Supabase client is replaced by a MagicMock; the session cache lives in
a temporary directory.
"""

import json
from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock
from supabase import AuthApiError, AuthError

from teacher_dashboard.session import AuthenticationError, FileSessionStorage, SessionError, SupabaseSessionProvider
from teacher_dashboard.session.provider import SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED

USER = SimpleNamespace(
    id="teacher-uuid-1",
    email="ms.frizzle@school.example",
    user_metadata={"first_name": "Valerie", "last_name": "Frizzle"},
)


@pytest.fixture
def session_path(tmp_path):
    return tmp_path / "data" / "session.json"


@pytest.fixture
def auth_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def provider(session_path, auth_client, events) -> SupabaseSessionProvider:
    provider = SupabaseSessionProvider(
        "https://project.supabase.test/", "anon-key", session_path, client=auth_client
    )
    provider.on_auth_change(lambda event, identity: events.append((event, identity)))
    return provider


def _state_callback(auth_client):
    """The listener the provider registered with the auth client."""
    return auth_client.auth.on_auth_state_change.call_args.args[0]


class TestSignIn:
    def test_sign_in_returns_identity(self, provider, auth_client):
        auth_client.auth.sign_in_with_password.return_value = SimpleNamespace(
            user=USER, session=SimpleNamespace(user=USER)
        )

        identity = provider.sign_in_with_password("ms.frizzle@school.example", "pw")

        auth_client.auth.sign_in_with_password.assert_called_once_with(
            {"email": "ms.frizzle@school.example", "password": "pw"}
        )
        assert identity.id == "teacher-uuid-1"
        assert identity.display_name == "Valerie"

    def test_rejected_credentials(self, provider, auth_client):
        auth_client.auth.sign_in_with_password.side_effect = AuthApiError(
            "Invalid login credentials", 400, None
        )

        with pytest.raises(AuthenticationError) as exc_info:
            provider.sign_in_with_password("ms.frizzle@school.example", "wrong")

        assert exc_info.value.status_code == 400
        assert "Invalid login credentials" in str(exc_info.value)

    def test_unreachable_provider(self, provider, auth_client):
        auth_client.auth.sign_in_with_password.side_effect = AuthError("connection refused", None)

        with pytest.raises(SessionError) as exc_info:
            provider.sign_in_with_password("ms.frizzle@school.example", "pw")

        assert not isinstance(exc_info.value, AuthenticationError)

    def test_missing_user_is_rejected(self, provider, auth_client):
        auth_client.auth.sign_in_with_password.return_value = SimpleNamespace(user=None, session=None)

        with pytest.raises(AuthenticationError):
            provider.sign_in_with_password("ms.frizzle@school.example", "pw")


class TestStateChanges:
    def test_sign_in_event_carries_identity(self, provider, auth_client, events):
        _state_callback(auth_client)(SIGNED_IN, SimpleNamespace(user=USER))

        assert len(events) == 1
        event, identity = events[0]
        assert event == SIGNED_IN
        assert identity.email == "ms.frizzle@school.example"

    def test_sign_out_event_has_no_identity(self, provider, auth_client, events):
        _state_callback(auth_client)(SIGNED_OUT, None)

        assert events == [(SIGNED_OUT, None)]

    def test_refresh_event_forwarded(self, provider, auth_client, events):
        _state_callback(auth_client)(TOKEN_REFRESHED, SimpleNamespace(user=USER))

        assert events[0][0] == TOKEN_REFRESHED

    def test_failing_listener_does_not_block_others(self, provider, auth_client, events):
        def broken(event, identity):
            raise RuntimeError("boom")

        provider.on_auth_change(broken)
        seen = []
        provider.on_auth_change(lambda event, identity: seen.append(event))

        _state_callback(auth_client)(SIGNED_OUT, None)

        assert seen == [SIGNED_OUT]

    def test_unsubscribe(self, provider, auth_client, events):
        calls = []
        unsubscribe = provider.on_auth_change(lambda event, identity: calls.append(event))
        unsubscribe()

        _state_callback(auth_client)(SIGNED_OUT, None)

        assert calls == []
        assert events == [(SIGNED_OUT, None)]


class TestCurrentUser:
    def test_signed_in(self, provider, auth_client):
        auth_client.auth.get_session.return_value = SimpleNamespace(user=USER)

        identity = provider.get_current_user()

        assert identity.teacher_name == "Valerie Frizzle"

    def test_signed_out(self, provider, auth_client):
        auth_client.auth.get_session.return_value = None

        assert provider.get_current_user() is None

    def test_rejected_refresh_clears_session(self, provider, auth_client):
        auth_client.auth.get_session.side_effect = AuthApiError("Invalid Refresh Token", 400, None)

        assert provider.get_current_user() is None
        auth_client.auth.sign_out.assert_called_once_with({"scope": "local"})

    def test_unreachable_provider_keeps_session(self, provider, auth_client):
        auth_client.auth.get_session.side_effect = AuthError("connection refused", None)

        assert provider.get_current_user() is None
        auth_client.auth.sign_out.assert_not_called()


class TestSignOut:
    def test_sign_out(self, provider, auth_client):
        provider.sign_out()

        auth_client.auth.sign_out.assert_called_once_with()

    def test_failed_sign_out_clears_cache(self, provider, auth_client, session_path, events):
        provider.storage.set_item("sb-project-auth-token", "{}")
        auth_client.auth.sign_out.side_effect = AuthError("connection refused", None)

        provider.sign_out()

        assert not session_path.exists()
        assert events == [(SIGNED_OUT, None)]

    def test_close_unsubscribes(self, provider, auth_client):
        subscription = auth_client.auth.on_auth_state_change.return_value

        provider.close()

        subscription.unsubscribe.assert_called_once()


class TestFileSessionStorage:
    def test_set_and_get(self, session_path):
        storage = FileSessionStorage(session_path)

        storage.set_item("sb-project-auth-token", '{"access_token": "a"}')

        assert storage.get_item("sb-project-auth-token") == '{"access_token": "a"}'
        assert session_path.stat().st_mode & 0o777 == 0o600

    def test_missing_file(self, session_path):
        assert FileSessionStorage(session_path).get_item("sb-project-auth-token") is None

    def test_unreadable_file_ignored(self, session_path):
        session_path.parent.mkdir(parents=True)
        session_path.write_text("not json")

        assert FileSessionStorage(session_path).get_item("sb-project-auth-token") is None

    def test_remove_last_item_deletes_file(self, session_path):
        storage = FileSessionStorage(session_path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")

        storage.remove_item("a")
        assert json.loads(session_path.read_text()) == {"b": "2"}

        storage.remove_item("b")
        assert not session_path.exists()


def test_repr_has_no_secrets(session_path, auth_client):
    provider = SupabaseSessionProvider("https://project.supabase.test", "anon-key", session_path, client=auth_client)

    assert "anon-key" not in repr(provider)
