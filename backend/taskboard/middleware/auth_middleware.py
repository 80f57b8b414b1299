from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from taskboard.config import settings
from taskboard.schemas.user import Identity

security = HTTPBearer(auto_error=False)


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.TOKEN_ALGORITHM])
        return payload
    except JWTError:
        raise _unauthenticated("Invalid or expired token")


def verify_identity(token: str) -> Identity:
    payload = decode_token(token)
    email = payload.get("email")
    if not isinstance(email, str) or not email.strip():
        raise _unauthenticated("Invalid token payload")
    raw_id = payload.get("id")
    return Identity(
        email=email.strip(),
        id=str(raw_id) if raw_id is not None else None,
        name=payload.get("name"),
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise _unauthenticated("No token")
    return verify_identity(credentials.credentials)
