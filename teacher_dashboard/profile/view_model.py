"""
Teacher profile view-model.

Shows the teacher's personal information and manages the Canvas access
token stored with the backend. The token itself is never logged or kept
after it has been submitted.
"""

import logging
from typing import Optional

from ..gateway.client import DashboardGateway, GatewayError
from ..gateway.models import TokenStatus
from ..notifications import Notifier
from ..session.models import Identity

logger = logging.getLogger(__name__)


class ProfileViewModel:
    """
    State of the profile page.

    Usage:
        profile = ProfileViewModel(gateway, identity, notifier)
        profile.load()
        print(profile.connection_badge, profile.masked_token)
        profile.save_token(token)
    """

    def __init__(self, gateway: DashboardGateway, identity: Optional[Identity], notifier: Notifier):
        self.gateway = gateway
        self.identity = identity
        self.notifier = notifier

        self.token_status: Optional[TokenStatus] = None
        self.loading = True
        self.saving = False

    @property
    def has_token(self) -> bool:
        return bool(self.token_status and self.token_status.has_token)

    @property
    def connection_badge(self) -> str:
        return "Canvas connected" if self.has_token else "Not connected"

    @property
    def masked_token(self) -> Optional[str]:
        if self.has_token and self.token_status.last4:
            return f"****...{self.token_status.last4}"
        return None

    @property
    def action_label(self) -> str:
        return "Update token" if self.has_token else "Connect token"

    @property
    def dialog_title(self) -> str:
        return "Update Canvas Token" if self.has_token else "Connect Canvas Token"

    def load(self) -> Optional[TokenStatus]:
        """Fetch the current token status."""
        if self.identity is None:
            self.loading = False
            return None

        try:
            self.token_status = self.gateway.get_token_status(self.identity.id)
        except GatewayError as e:
            logger.error(f"Failed to fetch token status: {e}")
            self.notifier.error("Error", "Could not fetch token status. Please try again.")
        finally:
            self.loading = False

        return self.token_status

    @staticmethod
    def can_save(canvas_token: str) -> bool:
        return bool(canvas_token.strip())

    def save_token(self, canvas_token: str) -> bool:
        """
        Store a new Canvas token.

        Blank tokens are refused without contacting the backend.

        Returns:
            True if the backend accepted the token
        """
        if self.identity is None or not self.can_save(canvas_token) or self.saving:
            return False

        had_token = self.has_token
        self.saving = True
        try:
            self.token_status = self.gateway.save_token(self.identity.id, canvas_token)
        except GatewayError as e:
            logger.error(f"Failed to save token: {e}")
            self.notifier.error("Error", "Could not save token. Please try again.")
            return False
        finally:
            self.saving = False

        self.notifier.success(
            "Success",
            "Token updated successfully." if had_token else "Token saved successfully.",
        )
        return True
