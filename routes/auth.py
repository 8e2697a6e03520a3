"""
PMS - Routes Auth
Bearer session resolution and role gates. Session issuance lives elsewhere.
"""

from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from config import now_iso
from models import Actor, Role
from services.store import get_store

security = HTTPBearer(auto_error=False)


# ==================== HELPERS ====================

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    store=Depends(get_store),
) -> Actor:
    """Resolve the Bearer token to the acting user."""
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    session = await store.sessions.get_active(credentials.credentials, now_iso())
    if not session:
        raise HTTPException(status_code=401, detail="Session expired")

    user = await store.users.get(session["user_id"])
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if not user.get("is_active", True):
        raise HTTPException(status_code=403, detail="Account deactivated")

    return Actor.from_user(user)


def require_roles(*roles: Role):
    """Dependency factory: 403 unless the current user has one of roles."""
    async def dependency(user: Actor = Depends(get_current_user)) -> Actor:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Access denied.")
        return user
    return dependency
