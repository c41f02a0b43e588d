import logging
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from logistics.domain.models import User, Principal, UserRole
from logistics.domain.exceptions import UnauthorizedError, ValidationError
from logistics.application.interfaces import PasswordHasher, TokenService

logger = logging.getLogger(__name__)

# canonical claim first, the rest are accepted from older tokens
SUBJECT_CLAIMS = ("sub", "_id", "userId", "id")

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


class BcryptPasswordHasher(PasswordHasher):
    def __init__(self, rounds: int = 10):
        self._rounds = rounds

    def hash(self, plain: str) -> str:
        encoded = plain.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            # malformed stored hash
            return False


def principal_from_claims(claims: dict) -> Principal:
    """Normalise token claims into a Principal"""
    subject = None
    for name in SUBJECT_CLAIMS:
        if claims.get(name):
            subject = str(claims[name])
            break
    if subject is None:
        raise UnauthorizedError("Could not determine the authenticated user")

    try:
        role = UserRole(claims.get("role") or UserRole.USER.value)
    except ValueError:
        role = UserRole.USER
    return Principal(id=subject, role=role)


class JWTTokenService(TokenService):
    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60):
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(minutes=expires_minutes)

    def issue(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.id,
            "email": user.email,
            "role": user.role.value,
            "iat": now,
            "exp": now + self._expires
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> Principal:
        try:
            claims = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected token: {e}")
            raise UnauthorizedError("Invalid token")
        return principal_from_claims(claims)
