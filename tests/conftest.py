"""
Shared test fixtures and configuration.

This module provides pytest fixtures for a file-backed verification
store in a temporary directory.
"""

from pathlib import Path

import pytest

from src.adapters.repository.file import FileVerificationStore


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Location of the verified emails file for one test."""
    return tmp_path / "verified_emails.txt"


@pytest.fixture
def file_store(store_path: Path) -> FileVerificationStore:
    """File-backed store with a short lock timeout."""
    return FileVerificationStore(store_path, lock_timeout=2.0)
