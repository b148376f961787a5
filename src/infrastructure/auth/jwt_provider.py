"""JWT authentication provider implementation.

Tokens are issued by the external identity provider and signed with a
shared HS256 secret. Payload structure:
    {
        "sub": "42",
        "username": "jdoe",
        "role": "Admin",
        "exp": 1234567890
    }
"""

from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from core.config import settings
from infrastructure.auth.provider import TokenUser


class JWTAuthProvider:
    """JWT-based identity resolution (HS256)."""

    def __init__(
        self,
        secret_key: str = settings.jwt_secret_key,
        algorithm: str = settings.jwt_algorithm,
        expire_minutes: int = settings.jwt_expire_minutes,
    ) -> None:
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._expire_minutes = expire_minutes

    async def validate_token(self, token: str) -> Optional[TokenUser]:
        """
        Validate a JWT and extract the acting user.

        Args:
            token: The JWT to validate

        Returns:
            TokenUser if valid, None if invalid, expired, or missing an
            integer subject
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_aud": False},
            )
        except JWTError:
            return None

        try:
            user_id = int(payload.get("sub") or "")
        except ValueError:
            return None

        return TokenUser(
            id=user_id,
            username=payload.get("username"),
            role=payload.get("role"),
        )

    def create_token(self, user: TokenUser) -> str:
        """
        Create a JWT for a user (used by tests and local tooling).

        Args:
            user: The user to create a token for

        Returns:
            The generated JWT string
        """
        expire = datetime.utcnow() + timedelta(minutes=self._expire_minutes)

        payload: dict = {
            "sub": str(user.id),
            "username": user.username,
            "role": user.role,
            "exp": expire,
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
