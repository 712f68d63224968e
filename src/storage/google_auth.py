import logging
import os
from typing import Optional
from datetime import timezone

from cryptography.fernet import Fernet, InvalidToken
from google.oauth2.credentials import Credentials

from storage.db import get_pool

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URI = "https://oauth2.googleapis.com/token"
GOOGLE_TASKS_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/tasks",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]


class GoogleAuthStore:
    """Delegated Google credentials, encrypted at rest with Fernet."""

    def __init__(self, key: Optional[str] = None):
        key = key or os.getenv("GOOGLE_TOKEN_ENCRYPTION_KEY")
        if not key:
            # Tokens stored with a temporary key are unreadable after restart
            logger.warning(
                "GOOGLE_TOKEN_ENCRYPTION_KEY not set. Generating a temporary key."
            )
            key = Fernet.generate_key().decode()

        self.fernet = Fernet(key.encode() if isinstance(key, str) else key)

    def _encrypt(self, data: Optional[str]) -> Optional[str]:
        if not data:
            return None
        return self.fernet.encrypt(data.encode()).decode()

    def _decrypt(self, token: Optional[str]) -> Optional[str]:
        if not token:
            return None
        try:
            return self.fernet.decrypt(token.encode()).decode()
        except InvalidToken:
            logger.error("Failed to decrypt stored Google token (key changed?)")
            return None

    async def save_credentials(
        self, user_id: str, credentials: Credentials, email: Optional[str] = None
    ) -> None:
        """Upsert the user's tokens; a missing refresh token keeps the stored one."""
        pool = get_pool()

        query = """
            INSERT INTO google_credentials (user_id, access_token, refresh_token, token_expiry, email)
            VALUES ($1, $2, $3, $4, $5)
            ON CONFLICT (user_id) DO UPDATE SET
                access_token = EXCLUDED.access_token,
                refresh_token = COALESCE(EXCLUDED.refresh_token, google_credentials.refresh_token),
                token_expiry = EXCLUDED.token_expiry,
                email = COALESCE(EXCLUDED.email, google_credentials.email),
                updated_at = NOW()
        """
        await pool.execute(
            query,
            user_id,
            self._encrypt(credentials.token),
            self._encrypt(credentials.refresh_token),
            credentials.expiry,
            email,
        )

        logger.info(f"Saved Google credentials for user {user_id}")

    async def get_credentials(self, user_id: str) -> Optional[Credentials]:
        """Rebuild the stored credential; google-auth refreshes it on use."""
        pool = get_pool()

        row = await pool.fetchrow(
            "SELECT access_token, refresh_token, token_expiry FROM google_credentials WHERE user_id = $1",
            user_id,
        )

        if not row:
            return None

        access_token = self._decrypt(row["access_token"])
        if not access_token:
            return None

        expiry = row["token_expiry"]
        # google-auth compares against naive UTC
        if expiry and expiry.tzinfo:
            expiry = expiry.astimezone(timezone.utc).replace(tzinfo=None)

        return Credentials(
            token=access_token,
            refresh_token=self._decrypt(row["refresh_token"]),
            token_uri=GOOGLE_TOKEN_URI,
            client_id=os.getenv("GOOGLE_CLIENT_ID"),
            client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
            scopes=GOOGLE_TASKS_SCOPES,
            expiry=expiry,
        )

    async def get_email(self, user_id: str) -> Optional[str]:
        pool = get_pool()
        return await pool.fetchval(
            "SELECT email FROM google_credentials WHERE user_id = $1", user_id
        )

    async def delete_credentials(self, user_id: str) -> None:
        pool = get_pool()
        await pool.execute("DELETE FROM google_credentials WHERE user_id = $1", user_id)
        logger.info(f"Deleted Google credentials for user {user_id}")
