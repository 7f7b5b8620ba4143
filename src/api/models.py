"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, Field


class SendVerificationRequest(BaseModel):
    """Request model for sending a verification email."""

    # Plain str, not EmailStr: addresses are opaque keys and must not be normalized.
    # A missing field reads as "" so the domain reports it as a 400.
    email: str = Field("", description="Email address to verify")


class MessageResponse(BaseModel):
    """Response model for successful send and verify actions."""

    message: str


class VerificationStatusResponse(BaseModel):
    """Response model for verification status queries."""

    email: str
    verified: bool


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
