import secrets
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.orm import Session

from .database import get_session
from .errors import Unauthorized
from .models import User

# Bearer-token authentication. Resolving the token yields the current actor
# (or None); route handlers pass that actor explicitly into the services.


def new_api_token() -> str:
    return secrets.token_hex(32)


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_actor(session: Session, authorization: Optional[str]) -> Optional[User]:
    token = _bearer_token(authorization)
    if token is None:
        return None
    return session.scalar(select(User).where(User.api_token == token))


def get_current_user(
    authorization: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> Optional[User]:
    return resolve_actor(session, authorization)


def require_actor(action: str):
    """Dependency for write routes: 401 before the request body is validated."""

    def _require(actor: Optional[User] = Depends(get_current_user)) -> User:
        if actor is None:
            raise Unauthorized(action)
        return actor

    return _require
