from __future__ import annotations

import logging

from werkzeug.security import check_password_hash

from ..core.constants import ACCESS_KEY_CONFIG_KEY
from ..core.exceptions import AuthenticationError
from .repository import ConfigRepository

logger = logging.getLogger(__name__)


class AccessService:
    """Shared access key gate in front of the whole app.

    The key is stored hashed; an unset key locks everyone out.
    """

    def __init__(self, config_repo: ConfigRepository):
        self._config = config_repo

    def login(self, access_key: str) -> None:
        access_key = (access_key or "").strip()
        if not access_key:
            raise AuthenticationError("Access key is required")

        stored = self._config.get_value(ACCESS_KEY_CONFIG_KEY)
        if not stored:
            logger.warning("login attempted but no access key is configured")
            raise AuthenticationError("Access key is not configured")
        if not check_password_hash(stored, access_key):
            raise AuthenticationError("Invalid access key")
