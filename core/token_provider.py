"""
Static token provider

Returns one pre-issued access token for every user. Suitable for scripts and
tests where the token is obtained out of band (e.g. Graph Explorer, az cli).
"""

import logging
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from onedrive_graph.config import OneDriveSettings

logger = logging.getLogger(__name__)


class StaticTokenProvider:
    """TokenProviderProtocol implementation backed by a fixed token"""

    def __init__(self, access_token: Optional[str]):
        self._access_token = access_token or None

    @classmethod
    def from_settings(cls, settings: "OneDriveSettings") -> "StaticTokenProvider":
        """Build a provider from the ONEDRIVE_ACCESS_TOKEN setting"""
        token = settings.get("access_token")
        if not token:
            logger.warning("ONEDRIVE_ACCESS_TOKEN is not set; Graph requests will fail")
        return cls(token)

    async def validate_and_refresh_token(self, user_email: str) -> Optional[str]:
        # A static token cannot be refreshed; expiry surfaces as a 401 from Graph.
        return self._access_token

    async def close(self) -> None:
        self._access_token = None
