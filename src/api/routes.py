"""
API routes - Verification endpoints.

This module defines the HTTP endpoints:
- POST /send-verification - Email a verification link
- GET /verify - Confirm an email address from the link
- GET /check-verification - Report verification status

Handlers are synchronous so FastAPI runs them in its threadpool;
store and SMTP calls block.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_verification_service
from src.api.models import (
    ErrorResponse,
    MessageResponse,
    SendVerificationRequest,
    VerificationStatusResponse,
)
from src.domain.exceptions import ConflictError, DispatchError, StorageError, ValidationError
from src.domain.verification import VerificationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


@router.post(
    "/send-verification",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email missing or malformed body"},
        409: {"model": ErrorResponse, "description": "Email already verified"},
        500: {"model": ErrorResponse, "description": "Email could not be sent"},
    },
    summary="Send a verification email",
    description="Email a verification link to an address that is not yet verified.",
)
def send_verification(
    request_data: SendVerificationRequest,
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    """
    Send a verification link.

    - **email**: Address to verify (compared exactly, no normalization)
    """
    email = request_data.email
    try:
        service.request_verification(email)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already verified",
        ) from None
    except DispatchError as e:
        logger.error("Failed to send verification email to %s: %s", email, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send verification email",
        ) from None
    except StorageError as e:
        logger.error("Failed to check verification status of %s: %s", email, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check verification status",
        ) from None
    return MessageResponse(message="Verification email sent successfully")


@router.get(
    "/verify",
    response_model=MessageResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email missing"},
        409: {"model": ErrorResponse, "description": "Email already verified"},
        500: {"model": ErrorResponse, "description": "Verification store failure"},
    },
    summary="Verify an email address",
    description="Target of the emailed link. Records the address as verified.",
)
def verify_email(
    email: str = Query("", description="Email address from the verification link"),
    service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    try:
        service.confirm_verification(email)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already verified",
        ) from None
    except StorageError as e:
        logger.error("Failed to verify %s: %s", email, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to verify email",
        ) from None
    return MessageResponse(message="Email verified successfully")


@router.get(
    "/check-verification",
    response_model=VerificationStatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Email missing"},
        500: {"model": ErrorResponse, "description": "Verification store failure"},
    },
    summary="Check verification status",
)
def check_verification(
    email: str = Query("", description="Email address to look up"),
    service: VerificationService = Depends(get_verification_service),
) -> VerificationStatusResponse:
    try:
        verified = service.query_status(email)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from None
    except StorageError as e:
        # An unreadable store is not the same as "not verified"
        logger.error("Failed to check verification status of %s: %s", email, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to check verification status",
        ) from None
    return VerificationStatusResponse(email=email, verified=verified)
