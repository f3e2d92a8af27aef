"""
Mattermost Connector for the OnOff Engine.

Posts notifications to a Mattermost (or any Slack-compatible) incoming
webhook with a fixed bot identity.
"""

import logging
from typing import List, Optional

from slack_sdk.errors import SlackClientError
from slack_sdk.webhook import WebhookClient

from ..config import NotifierSettings
from ..errors import NotificationError
from .base_connector import ConnectorResult, MockConnector, NotificationConnector

logger = logging.getLogger(__name__)


class MattermostConnector(NotificationConnector):
    """Incoming-webhook notifier."""

    def __init__(self, settings: Optional[NotifierSettings] = None,
                 client: Optional[WebhookClient] = None):
        super().__init__(settings or NotifierSettings(), mock_mode=False)
        self._client = client

    def validate_config(self):
        if not self.settings.webhook_url:
            return ["MATTERMOST_HOOK"]
        return []

    @property
    def client(self) -> WebhookClient:
        if self._client is None:
            # No retry handlers: a failed post is reported, not repeated
            self._client = WebhookClient(
                self.settings.webhook_url, timeout=self.settings.timeout, retry_handlers=[]
            )
        return self._client

    def notify(self, message: str) -> ConnectorResult:
        """Post ``message`` to the webhook as the bot user."""
        payload = {"text": message, "username": self.settings.username}

        try:
            response = self.client.send_dict(payload)
        except (SlackClientError, OSError, ValueError) as e:
            error = NotificationError(f"Failed to post notification: {e}")
            logger.error(str(error))
            return ConnectorResult.failed(error)

        if response.status_code >= 300:
            error = NotificationError(
                f"Notification webhook returned HTTP {response.status_code}: {response.body}"
            )
            logger.error(str(error))
            return ConnectorResult.failed(error)

        logger.info("Posted notification to chat webhook")
        return ConnectorResult.ok("Notification sent")


class MattermostMockConnector(MockConnector, NotificationConnector):
    """Mock notifier collecting messages in memory."""

    def __init__(self, settings: Optional[NotifierSettings] = None):
        super().__init__(settings or NotifierSettings())
        self.messages: List[str] = []

    def notify(self, message: str) -> ConnectorResult:
        self._record("notify", message)
        self.messages.append(message)
        logger.info(f"Mock notification: {message}")
        return ConnectorResult.ok("Notification recorded")
