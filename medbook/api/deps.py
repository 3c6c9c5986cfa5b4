from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from medbook.core.db import get_session
from medbook.core.security import ROLE_DOCTOR, ROLE_PATIENT, decode_access_token
from medbook.models import Doctor, Patient
from medbook.store.gateway import DOCTORS, USERS, SqlStoreGateway

security = HTTPBearer(auto_error=False)


def get_gateway(session: AsyncSession = Depends(get_session)) -> SqlStoreGateway:
    return SqlStoreGateway(session)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _current_actor(
    gateway: SqlStoreGateway,
    credentials: HTTPAuthorizationCredentials | None,
    role: str,
) -> Patient | Doctor:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing or invalid authorization header")
    subject, token_role = decode_access_token(credentials.credentials)
    if not subject:
        raise _unauthorized("Invalid or expired token")
    if token_role != role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only a {role} can do this",
        )
    try:
        uid = int(subject)
    except ValueError:
        raise _unauthorized("Invalid token")
    actor = await gateway.get(USERS if role == ROLE_PATIENT else DOCTORS, uid)
    if not actor:
        raise _unauthorized("User not found")
    return actor


async def get_current_patient(
    gateway: SqlStoreGateway = Depends(get_gateway),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Patient:
    return await _current_actor(gateway, credentials, ROLE_PATIENT)


async def get_current_doctor(
    gateway: SqlStoreGateway = Depends(get_gateway),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Doctor:
    return await _current_actor(gateway, credentials, ROLE_DOCTOR)
