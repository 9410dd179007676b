"""
Unit tests for the profile view-model.
"""

import pytest

from teacher_dashboard.gateway.client import GatewayError
from teacher_dashboard.gateway.models import TokenStatus
from teacher_dashboard.profile import ProfileViewModel


@pytest.fixture
def profile(gateway, identity, notifier) -> ProfileViewModel:
    return ProfileViewModel(gateway, identity, notifier)


def test_connect_token_end_to_end(profile, gateway, notifier):
    profile.load()

    assert profile.connection_badge == "Not connected"
    assert profile.action_label == "Connect token"
    assert profile.masked_token is None

    gateway.save_token.return_value = TokenStatus(has_token=True, last4="1234")
    assert profile.save_token("canvas-token-1234") is True

    gateway.save_token.assert_called_once_with("teacher-uuid-1", "canvas-token-1234")
    assert profile.connection_badge == "Canvas connected"
    assert profile.masked_token == "****...1234"
    assert profile.action_label == "Update token"
    assert notifier.last.description == "Token saved successfully."


def test_update_existing_token(profile, gateway, notifier):
    gateway.get_token_status.return_value = TokenStatus(has_token=True, last4="0000")
    profile.load()
    gateway.save_token.return_value = TokenStatus(has_token=True, last4="9999")

    profile.save_token("new-token")

    assert profile.dialog_title == "Update Canvas Token"
    assert notifier.last.description == "Token updated successfully."


@pytest.mark.parametrize("token", ["", "   "])
def test_blank_token_refused(profile, gateway, token):
    assert profile.can_save(token) is False
    assert profile.save_token(token) is False
    gateway.save_token.assert_not_called()


def test_save_failure_keeps_status(profile, gateway, notifier):
    gateway.get_token_status.return_value = TokenStatus(has_token=True, last4="0000")
    profile.load()
    gateway.save_token.side_effect = GatewayError("Token rejected by Canvas")

    assert profile.save_token("bad-token") is False

    assert profile.masked_token == "****...0000"
    assert profile.saving is False
    assert notifier.last.description == "Could not save token. Please try again."


def test_status_failure(profile, gateway, notifier):
    gateway.get_token_status.side_effect = GatewayError("down")

    assert profile.load() is None

    assert profile.loading is False
    assert profile.connection_badge == "Not connected"
    assert notifier.last.is_error


def test_signed_out_does_nothing(gateway, notifier):
    profile = ProfileViewModel(gateway, None, notifier)

    assert profile.load() is None
    assert profile.save_token("token") is False
    gateway.get_token_status.assert_not_called()
