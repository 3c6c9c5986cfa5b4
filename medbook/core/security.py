from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from medbook.core.config import settings

ROLE_PATIENT = "patient"
ROLE_DOCTOR = "doctor"


def create_access_token(subject: str | int, role: str) -> str:
    """Issue an access token; the identity provider and tests use this."""
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode = {"sub": str(subject), "role": role, "exp": expire, "type": "access"}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> tuple[str | None, str | None]:
    """Returns (subject, role) or (None, None)."""
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
        if payload.get("type") != "access":
            return None, None
        sub = payload.get("sub")
        role = payload.get("role")
        if not sub or role not in (ROLE_PATIENT, ROLE_DOCTOR):
            return None, None
        return str(sub), role
    except JWTError:
        return None, None
