import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from notehub.core.config import Settings
from notehub.core.errors import AuthExpired, AuthInvalid, AuthMissing
from notehub.domains.identity.entities import ANONYMOUS, Claims, Identity, User

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72

REQUIRED_CLAIMS = ("sub", "email", "name", "iat", "exp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordHasher:
    """Хеширование паролей bcrypt"""

    def __init__(self, rounds: int = 12):
        self._pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds
        )

    def hash(self, password: str) -> str:
        """Хеширование пароля"""
        return self._pwd_context.hash(self._truncate(password))

    def verify(self, password: str, password_hash: str) -> bool:
        """Проверка пароля"""
        try:
            return self._pwd_context.verify(self._truncate(password), password_hash)
        except ValueError:
            logger.warning("Stored password hash has an unrecognised format")
            return False

    @staticmethod
    def _truncate(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class SessionTokenService:
    """Выдача и проверка JWT токенов сессии.

    На сервере ничего не хранится: токен действует до истечения срока,
    даже после выхода пользователя.
    """

    def __init__(
        self,
        secret: str,
        ttl: timedelta = timedelta(hours=24),
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow
    ):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock
        self.ttl = ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionTokenService":
        return cls(
            secret=settings.jwt_secret,
            ttl=settings.token_ttl,
            algorithm=settings.jwt_algorithm
        )

    def issue(self, user: User) -> str:
        """Создание JWT токена доступа"""
        issued_at = int(self._clock().timestamp())
        payload: Dict[str, Any] = {
            "sub": str(user.id),
            "email": user.email,
            "name": user.name,
            "iat": issued_at,
            "exp": issued_at + int(self.ttl.total_seconds())
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate(self, token: str) -> Claims:
        """Проверка подписи, набора claims и срока действия.

        Raises:
            AuthInvalid: неверная подпись или неполные claims
            AuthExpired: срок действия токена истек
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                # expiry is checked below against the injected clock, with no leeway
                options={"verify_exp": False, "verify_iat": False, "verify_aud": False}
            )
        except JWTError as e:
            logger.debug(f"Token rejected: {e}")
            raise AuthInvalid()

        claims = self._to_claims(payload)
        if self._clock() >= claims.expiry:
            raise AuthExpired()
        return claims

    def identify(self, authorization: Optional[str], allow_anonymous: bool = False) -> Identity:
        """Идентификация по заголовку Authorization.

        Без заголовка вызывающий считается гостем, если маршрут это разрешает.
        Заголовок не вида ``Bearer <token>`` гостем не считается.
        """
        if authorization is None:
            if allow_anonymous:
                return ANONYMOUS
            raise AuthMissing()

        token = extract_token_from_header(authorization)
        if token is None:
            raise AuthMissing()

        return self.validate(token).to_identity()

    @staticmethod
    def _to_claims(payload: Dict[str, Any]) -> Claims:
        missing = [claim for claim in REQUIRED_CLAIMS if claim not in payload]
        if missing:
            logger.debug(f"Token rejected: missing claims {missing}")
            raise AuthInvalid()

        subject = payload["sub"]
        if not isinstance(subject, str) or not subject.isascii() or not subject.isdigit():
            raise AuthInvalid()

        for claim in ("iat", "exp"):
            value = payload[claim]
            if isinstance(value, bool) or not isinstance(value, int):
                raise AuthInvalid()

        if not isinstance(payload["email"], str) or not isinstance(payload["name"], str):
            raise AuthInvalid()

        return Claims(
            subject=int(subject),
            email=payload["email"],
            name=payload["name"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expiry=datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        )


def extract_token_from_header(authorization: str) -> Optional[str]:
    """Извлечение токена из заголовка Authorization"""
    if not authorization:
        return None

    parts = authorization.split()

    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    return parts[1]
