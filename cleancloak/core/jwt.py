# cleancloak/core/jwt.py

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError, ExpiredSignatureError
from cleancloak.core.config import Settings, settings


class TokenError(Exception):
    pass


class InvalidTokenError(TokenError):
    """Signature, expiry or payload check failed."""


class TokenConfigError(TokenError):
    """No signing secret is available."""


class TokenService:
    def __init__(
        self,
        secret: Optional[str],
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(days=7),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    @classmethod
    def from_settings(cls, cfg: Settings) -> "TokenService":
        return cls(
            secret=cfg.JWT_SECRET,
            algorithm=cfg.JWT_ALGORITHM,
            expires_delta=timedelta(days=cfg.JWT_EXPIRE_DAYS),
        )

    def ensure_configured(self) -> None:
        if not self.secret:
            raise TokenConfigError(
                "JWT_SECRET environment variable is required. Application cannot start without it."
            )

    def issue(self, user_id: str) -> str:
        self.ensure_configured()
        now = datetime.now(timezone.utc)
        to_encode = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + self.expires_delta,
        }
        return jwt.encode(to_encode, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the user id carried by ``token`` or raise a TokenError."""
        self.ensure_configured()
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired") from e
        except JWTError as e:
            raise InvalidTokenError("Token signature or format is invalid") from e

        user_id = payload.get("sub")
        if not user_id:
            raise InvalidTokenError("Token has no subject")
        return user_id


token_service = TokenService.from_settings(settings)


def get_token_service() -> TokenService:
    return token_service
