"""
OneLogin Connector for the OnOff Engine.

Resolves identity provider users through the OneLogin API v2 and turns
them into UserRecord objects.
"""

import logging
import time
from typing import Any, Dict, Iterable, Optional

import requests

from ..config import MockUser, OneLoginSettings
from ..errors import ResolutionError
from ..models import UserRecord
from .base_connector import ConnectorResult, IdentityConnector, MockConnector

logger = logging.getLogger(__name__)

# Seconds before expiry at which a cached access token is renewed
TOKEN_REFRESH_MARGIN = 60


class OneLoginConnector(IdentityConnector):
    """OneLogin connector for reading user attributes."""

    def __init__(self, settings: Optional[OneLoginSettings] = None,
                 session: Optional[requests.Session] = None):
        super().__init__(settings or OneLoginSettings(), mock_mode=False)
        self.session = session or requests.Session()
        self._access_token: Optional[str] = None
        self._token_expires_at: Optional[float] = None

    @property
    def base_url(self) -> str:
        return f"https://{self.settings.subdomain}.onelogin.com"

    def validate_config(self):
        missing = []
        if not self.settings.client_id:
            missing.append("ONELOGIN_CLIENT")
        if not self.settings.client_secret:
            missing.append("ONELOGIN_CLIENTSECRET")
        if not self.settings.subdomain:
            missing.append("ONELOGIN_SUBDOMAIN")
        return missing

    def get_user(self, user_id: int) -> ConnectorResult:
        """Fetch a OneLogin user and map it to a UserRecord."""
        try:
            response = self._request_user(user_id)
            if response.status_code in (401, 403):
                # Token revoked or expired early; authenticate again once
                logger.warning(f"OneLogin rejected the access token (HTTP {response.status_code}), renewing")
                self._invalidate_token()
                response = self._request_user(user_id)
        except requests.RequestException as e:
            error = ResolutionError(f"Failed to reach OneLogin for user {user_id}: {e}", user_id=user_id)
            logger.error(str(error))
            return ConnectorResult.failed(error)
        except ResolutionError as e:
            e.user_id = user_id
            logger.error(str(e))
            return ConnectorResult.failed(e)

        if response.status_code == 404:
            return ConnectorResult.failed(
                ResolutionError(f"OneLogin user {user_id} not found", user_id=user_id, status_code=404)
            )
        if response.status_code >= 400:
            error = ResolutionError(
                f"OneLogin returned HTTP {response.status_code} for user {user_id}",
                user_id=user_id,
                status_code=response.status_code,
            )
            logger.error(str(error))
            return ConnectorResult.failed(error)

        try:
            user = self._to_user_record(user_id, response.json())
        except (ValueError, TypeError) as e:
            error = ResolutionError(f"Unexpected OneLogin response for user {user_id}: {e}", user_id=user_id)
            logger.error(str(error))
            return ConnectorResult.failed(error)

        logger.info(f"Resolved OneLogin user {user_id} ({user.display_name})")
        return ConnectorResult.ok(f"Found OneLogin user {user_id}", user)

    def _request_user(self, user_id: int) -> requests.Response:
        token = self._get_access_token()
        return self.session.get(
            f"{self.base_url}/api/2/users/{user_id}",
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.settings.timeout,
        )

    def _get_access_token(self) -> str:
        """Return the cached access token, requesting a new one when missing or about to expire."""
        if self._access_token and not self._token_expired():
            return self._access_token

        response = self.session.post(
            f"{self.base_url}/auth/oauth2/v2/token",
            auth=(self.settings.client_id, self.settings.client_secret),
            json={"grant_type": "client_credentials"},
            timeout=self.settings.timeout,
        )
        if response.status_code >= 400:
            raise ResolutionError(
                f"OneLogin authentication failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        payload = response.json()
        token = payload.get("access_token")
        if not token:
            raise ResolutionError("OneLogin authentication response had no access_token")

        expires_in = payload.get("expires_in")
        self._access_token = token
        self._token_expires_at = time.monotonic() + float(expires_in) if expires_in else None
        logger.info("Obtained OneLogin access token")
        return token

    def _token_expired(self) -> bool:
        if self._token_expires_at is None:
            return False
        return time.monotonic() >= self._token_expires_at - TOKEN_REFRESH_MARGIN

    def _invalidate_token(self):
        self._access_token = None
        self._token_expires_at = None

    def _to_user_record(self, user_id: int, payload: Any) -> UserRecord:
        if not isinstance(payload, dict):
            raise ValueError("user payload is not an object")

        # API v1 wraps users as {"data": [...]}; v2 returns the user itself
        if isinstance(payload.get("data"), list):
            if not payload["data"]:
                raise ValueError("empty data list")
            payload = payload["data"][0]

        attributes: Dict[str, Any] = payload.get("custom_attributes") or {}
        handle = attributes.get(self.settings.handle_attribute)

        return UserRecord(
            user_id=payload.get("id") or user_id,
            first_name=payload.get("firstname") or "",
            last_name=payload.get("lastname") or "",
            external_handle=handle.strip() if isinstance(handle, str) and handle.strip() else None,
            role_ids=[int(r) for r in payload.get("role_ids") or []],
        )


class OneLoginMockConnector(MockConnector, IdentityConnector):
    """Mock implementation of the OneLogin connector for testing and dry runs."""

    def __init__(self, settings: Optional[OneLoginSettings] = None,
                 users: Iterable[MockUser] = ()):
        super().__init__(settings or OneLoginSettings())
        self.users: Dict[int, UserRecord] = {}
        self.seed(users)

    def seed(self, users: Iterable[MockUser]):
        """Load configured mock identities."""
        for user in users:
            self.add_user(
                UserRecord(
                    user_id=user.user_id,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    external_handle=user.handle,
                    role_ids=user.role_ids,
                )
            )

    def add_user(self, user: UserRecord):
        self.users[user.user_id] = user

    def get_user(self, user_id: int) -> ConnectorResult:
        self._record("get_user", user_id)
        user = self.users.get(user_id)
        if user is None:
            return ConnectorResult.failed(
                ResolutionError(f"Mock user {user_id} not found", user_id=user_id, status_code=404)
            )

        logger.info(f"Mock resolved user {user_id}")
        return ConnectorResult.ok(f"Found mock user {user_id}", user.model_copy(deep=True))
