from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from timesheet.models.user import Actor
from timesheet.services.auth_service import decode_access_token
from timesheet.services.user_store import UserStore, get_user_store
import logging

# ---------------------------------------------------------------------------
# Logger setup – using module namespace helps identify origin in aggregated logs
# ---------------------------------------------------------------------------
logger = logging.getLogger(__name__)

security = HTTPBearer()

async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    users: UserStore = Depends(get_user_store),
) -> Actor:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise credentials_exception

    user_id = payload.get("sub")
    logger.debug("Validating token with jti: %s", payload.get("jti"))
    if user_id is None:
        raise credentials_exception

    user = await users.find_user(user_id)
    if user is None:
        raise credentials_exception

    if not user.get("isActive", True):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is inactive"
        )

    return Actor.from_user_doc(user)

async def require_manager_or_admin(current_user: Actor = Depends(get_current_user)) -> Actor:
    if not current_user.is_manager_or_admin:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return current_user
