# app/deps/auth.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Callable

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError

from app.security.jwt import decode_token
from app.services.authz import ROLE_RANK, has_role

# Reusable HTTP bearer scheme (non-fatal if header is missing)
_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentActor:
    id: str
    role: str


# -----------------------------
# Helpers
# -----------------------------
def _actor_from_token(token: str) -> CurrentActor:
    try:
        payload = decode_token(token)
    except ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    sub = payload.get("sub")
    role = payload.get("role")
    if not sub or role not in ROLE_RANK:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing subject or role")
    return CurrentActor(id=str(sub), role=str(role))


# -----------------------------
# Public dependencies
# -----------------------------
def get_current_actor(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> CurrentActor:
    if not creds or not creds.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return _actor_from_token(creds.credentials)


def require_role(min_role: str) -> Callable[..., CurrentActor]:
    """
    Dependency factory: viewer < editor < admin.
    """
    def _dep(actor: CurrentActor = Depends(get_current_actor)) -> CurrentActor:
        if not has_role(actor.role, min_role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role '{min_role}'",
            )
        return actor

    return _dep
