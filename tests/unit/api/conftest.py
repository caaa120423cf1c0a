"""Shared fixtures for API route tests."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from queryiq.api.main import app
from queryiq.models.database import DatabaseKind
from queryiq.models.schema import DatabaseSummary, TableColumn, TableSummary
from queryiq.projects.models import Project
from queryiq.security.encryption import CredentialCipher

DB_URL = "postgresql://reader:pw@localhost:5432/shop"


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def cipher(encryption_key):
    return CredentialCipher(encryption_key)


@pytest.fixture
def project(cipher):
    return Project(
        name="Shop",
        db_type=DatabaseKind.POSTGRESQL,
        connection_secret=cipher.encrypt(DB_URL),
        database_summary=DatabaseSummary(
            summary=[TableSummary(table="orders", columns=[TableColumn(name="id", type="integer")])],
            db_type="postgresql",
        ),
    )


@pytest.fixture
def store(project):
    store = AsyncMock()
    store.get_project.return_value = project
    store.list_projects.return_value = [project]
    return store
