"""
Authentication Endpoints

Agency signup and login. Signup creates the agency and its first
agency_admin in one go; everyone else joins through POST /users.
"""
from fastapi import APIRouter, Depends, status

from agencyhub.api.deps import get_data_access
from agencyhub.core.security import create_user_token
from agencyhub.schemas.auth import LoginRequest, SignupRequest, Token
from agencyhub.services.data_access import DataAccessAPI
from agencyhub.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
async def signup(
    registration: SignupRequest,
    api: DataAccessAPI = Depends(get_data_access)
):
    """
    Register a new agency.

    The caller becomes its agency_admin and is logged in right away.
    A taken slug or email is a 409.
    """
    agency, user = api.register_agency(
        {
            "name": registration.agency_name,
            "slug": registration.agency_slug,
            "industry": registration.industry,
        },
        {
            "email": registration.email,
            "password": registration.password,
            "full_name": registration.full_name,
        },
    )

    return Token(access_token=create_user_token(user))


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    api: DataAccessAPI = Depends(get_data_access)
):
    """
    Authenticate user and return JWT token.

    Unknown email and wrong password give the same answer, so the
    endpoint cannot be used to discover accounts.
    """
    user = api.authenticate(credentials.email, credentials.password)
    logger.info(f"Successful login: user={user.id}", extra={"agency_id": user.agency_id})
    return Token(access_token=create_user_token(user))
