from __future__ import annotations

from pydantic import BaseModel


class GuestLoginResponse(BaseModel):
    ok: bool = True
    user_id: str
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    user_id: str
    email: str | None = None
    is_guest: bool = False
