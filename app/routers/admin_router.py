# /app/routers/admin_router.py

import secrets
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .. import config
from ..services.cache_service import SnapshotStore, get_snapshot_stores, reset_all_caches

router = APIRouter()
bearer_scheme = HTTPBearer(auto_error=False)


def require_dashboard_token(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)) -> None:
    """Rejects the request unless it carries `Bearer <DASHBOARD_PASSWORD>`."""
    expected = config.DASHBOARD_PASSWORD
    if not expected or credentials is None or not secrets.compare_digest(credentials.credentials, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


@router.post("/reset-cache", summary="Repopulate All In-Memory Caches", dependencies=[Depends(require_dashboard_token)])
async def reset_cache(stores: List[SnapshotStore] = Depends(get_snapshot_stores)):
    await reset_all_caches(stores)
    return {"status": "success"}
