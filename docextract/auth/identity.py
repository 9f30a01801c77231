"""
Bearer token identity provider.

Tokens are HS256 JWTs issued elsewhere; the ``sub`` claim (or ``id`` for
tokens minted by older clients) is the owner key for every document.
"""
import time

from jose import JWTError, jwt

from docextract.auth.exceptions import AuthenticationError
from docextract.config.settings import Settings


class TokenIdentityProvider:
    """Validates bearer tokens and yields the caller's user ID."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", token_ttl_seconds: int = 86400):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._token_ttl_seconds = token_ttl_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIdentityProvider":
        return cls(
            secret_key=settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
            token_ttl_seconds=settings.auth_token_ttl_seconds,
        )

    def authenticate(self, authorization: str | None) -> str:
        """Resolve the user ID from an ``Authorization`` header value."""
        if not authorization:
            raise AuthenticationError("Missing Authorization header")

        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("Invalid Authorization header. Use: Bearer <token>")

        try:
            payload = jwt.decode(token.strip(), self._secret_key, algorithms=[self._algorithm])
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e

        user_id = payload.get("sub") or payload.get("id")
        if not user_id:
            raise AuthenticationError("Token missing subject claim")
        return str(user_id)

    def issue_token(self, user_id: str, ttl_seconds: int | None = None) -> str:
        """Mint a token for ``user_id``. Used by development tooling and tests."""
        now = int(time.time())
        ttl = self._token_ttl_seconds if ttl_seconds is None else ttl_seconds
        claims = {"sub": user_id, "iat": now, "exp": now + ttl}
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
