"""
API Dependencies

Reusable FastAPI dependencies that authenticate the caller and hand the
endpoints an explicit CallerContext. Nothing below the HTTP layer looks
at the request; the context is passed into every Data-Access API call.
"""
from typing import Optional
from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from agencyhub.database import get_db
from agencyhub.models.user import User
from agencyhub.core.context import CallerContext
from agencyhub.core.security import decode_access_token
from agencyhub.core.exceptions import AuthenticationError
from agencyhub.services.data_access import DataAccessAPI
from agencyhub.utils.logging import get_logger

logger = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer()


def get_data_access(db: Session = Depends(get_db)) -> DataAccessAPI:
    return DataAccessAPI(db)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user.

    1. Validates JWT token
    2. Loads user from database (role and agency come from the row, not
       from the token, so changes apply immediately)
    3. Checks user is active
    """
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise AuthenticationError("Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    user = db.get(User, user_id)
    if not user:
        logger.warning(f"Token for unknown user: {user_id}")
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthenticationError("User account is inactive")

    return user


async def get_caller_context(current_user: User = Depends(get_current_user)) -> CallerContext:
    return CallerContext.for_user(current_user)


async def get_target_agency_id(
    x_agency_id: Optional[str] = Header(None, alias="X-Agency-Id")
) -> Optional[str]:
    """
    Agency a super_admin wants to act on.

    Regular users may send it too, but only their own agency is accepted.
    """
    return x_agency_id or None
