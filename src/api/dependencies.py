"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Request

from src.config.settings import get_settings
from src.domain.ports import NotificationDispatcher, VerificationStore
from src.domain.verification import VerificationService


def get_store(request: Request) -> VerificationStore:
    """
    Get verification store from app state.

    The store is created during app lifespan startup and stored in app.state.
    It is shared by all requests; its lock or pool serializes writers.
    """
    return request.app.state.store


def get_dispatcher(request: Request) -> NotificationDispatcher:
    """Get notification dispatcher from app state."""
    return request.app.state.dispatcher


def get_verification_service(request: Request) -> VerificationService:
    """
    Create verification service with injected dependencies.

    Wires together the store and dispatcher for the domain service.
    """
    return VerificationService(
        store=get_store(request),
        dispatcher=get_dispatcher(request),
        base_url=get_settings().verification_base_url,
    )
