from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from core.database import open_session
from core.security import decode_token
from scheduling.draft import DraftStore
from scheduling.ports import Identity
from services.draft_registry import DraftRegistry
from services.schedule_backend import SqlScheduleBackend


bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(request: Request, creds: HTTPAuthorizationCredentials | None) -> str | None:
    if creds is not None and creds.credentials:
        return creds.credentials
    cookie_token = request.cookies.get("access_token")
    return cookie_token or None


def get_optional_identity(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity | None:
    cached = getattr(request.state, "identity", None)
    if isinstance(cached, Identity):
        return cached

    token = _extract_token(request, creds)
    if not token:
        return None
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="INVALID_TOKEN")

    identity = Identity(user_id=str(user_id))
    request.state.identity = identity
    request.state.auth_payload = payload
    return identity


def require_identity(identity: Identity | None = Depends(get_optional_identity)) -> Identity:
    if identity is None:
        raise HTTPException(status_code=401, detail="NOT_AUTHENTICATED")
    return identity


def get_backend(identity: Identity | None = Depends(get_optional_identity)) -> SqlScheduleBackend:
    return SqlScheduleBackend(open_session, identity)


def get_registry(request: Request) -> DraftRegistry:
    return request.app.state.draft_registry


def get_draft(
    identity: Identity = Depends(require_identity),
    registry: DraftRegistry = Depends(get_registry),
) -> DraftStore:
    return registry.draft_for(identity)
