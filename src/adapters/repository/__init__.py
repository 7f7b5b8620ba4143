"""Repository adapters - Verification store implementations."""

from .file import FileVerificationStore
from .postgres import PostgresVerificationStore, run_migrations

__all__ = ["FileVerificationStore", "PostgresVerificationStore", "run_migrations"]
