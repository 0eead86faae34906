from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Request, Response

from api.deps import get_registry, require_identity
from core.config import settings
from core.security import create_access_token
from schemas.auth import GuestLoginResponse, MeResponse
from scheduling.ports import Identity
from services.draft_registry import DraftRegistry


router = APIRouter()

logger = logging.getLogger(__name__)


def _set_auth_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.environment.lower() == "production",
        max_age=int(settings.access_token_expire_minutes) * 60,
        path="/",
    )


@router.post("/guest", response_model=GuestLoginResponse)
def guest_login(response: Response) -> GuestLoginResponse:
    user_id = str(uuid.uuid4())
    token = create_access_token(user_id=user_id, is_guest=True)
    _set_auth_cookie(response, token)
    logger.info("Issued guest session user_id=%s", user_id)
    return GuestLoginResponse(user_id=user_id, access_token=token)


@router.get("/me", response_model=MeResponse)
def me(request: Request, identity: Identity = Depends(require_identity)) -> MeResponse:
    payload = getattr(request.state, "auth_payload", None) or {}
    return MeResponse(
        user_id=identity.user_id,
        email=payload.get("email"),
        is_guest=bool(payload.get("is_guest", False)),
    )


@router.post("/logout")
def logout(
    response: Response,
    identity: Identity = Depends(require_identity),
    registry: DraftRegistry = Depends(get_registry),
) -> dict:
    # Drafts do not outlive the session.
    registry.forget(identity)
    response.delete_cookie("access_token", path="/")
    return {"ok": True}
