"""
Authentication endpoints - email + password sign-up/sign-in with session tokens.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from ecolink.core.errors import AuthenticationRequired, EcoLinkError
from ecolink.models.user import AuthResponse, SignInRequest, SignUpRequest, UserIdentity
from ecolink.routes.dependencies import get_current_identity
from ecolink.services.auth_service import get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/sign-up", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(request: SignUpRequest):
    """
    Create an account and sign in.

    Args:
        request: Sign-up form

    Returns:
        AuthResponse with the new identity and a session token
    """
    try:
        identity, token = get_auth_service().sign_up(request)
        return AuthResponse(
            success=True,
            message="Compte créé avec succès",
            user=identity,
            token=token
        )

    except (HTTPException, EcoLinkError):
        raise
    except Exception as e:
        logger.error(f"Failed to sign up: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to sign up: {str(e)}"
        )


@router.post("/sign-in", response_model=AuthResponse)
async def sign_in(request: SignInRequest):
    try:
        identity, token = get_auth_service().sign_in(request)
        return AuthResponse(
            success=True,
            message=f"Bienvenue {identity.display_name}",
            user=identity,
            token=token
        )

    except (HTTPException, EcoLinkError):
        raise
    except Exception as e:
        logger.error(f"Failed to sign in: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to sign in: {str(e)}"
        )


@router.post("/sign-out")
async def sign_out(
    session_token: Optional[str] = Header(None, alias="X-Session-Token")
):
    closed = get_auth_service().sign_out(session_token)
    return {"success": True, "signed_out": closed}


@router.get("/me", response_model=UserIdentity)
async def get_me(identity: Optional[UserIdentity] = Depends(get_current_identity)):
    """Current identity, 401 when the token is missing or expired."""
    if identity is None:
        raise AuthenticationRequired()
    return identity
