from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import require_identity
from api.routes import auth, classes, draft, schedules


api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# The catalogue is public; everything that touches a user's schedules needs an identity.
_protected = [Depends(require_identity)]
api_router.include_router(classes.router, prefix="/classes", tags=["classes"])
api_router.include_router(schedules.router, prefix="/schedules", tags=["schedules"], dependencies=_protected)
api_router.include_router(draft.router, prefix="/draft", tags=["draft"], dependencies=_protected)
