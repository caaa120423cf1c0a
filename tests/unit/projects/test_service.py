"""Unit tests for ProjectService."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest
from pydantic import ValidationError

from queryiq.connectors.base import ConnectionError, SchemaError
from queryiq.introspection.engine import DatabaseConnectionError, DatabaseIntrospectionError
from queryiq.models.database import DatabaseKind
from queryiq.models.schema import DatabaseSummary
from queryiq.projects.models import Project, ProjectCreate
from queryiq.projects.service import (
    CONNECTION_FAILED_MESSAGE,
    SCHEMA_READ_FAILED_MESSAGE,
    UNEXPECTED_FAILURE_MESSAGE,
    ProjectCreationError,
    ProjectService,
)
from queryiq.security.encryption import CredentialCipher

DB_URL = "mysql://reader:pw@localhost:3306/shop"


@pytest.fixture
def cipher(encryption_key):
    return CredentialCipher(encryption_key)


@pytest.fixture
def store():
    store = AsyncMock()
    store.create_project.side_effect = lambda project: project
    store.update_summary.side_effect = lambda project_id, summary: Project(
        id=project_id,
        name="Shop",
        db_type=DatabaseKind.MYSQL,
        connection_secret="secret",
        database_summary=summary,
    )
    return store


@pytest.fixture
def service(store, cipher):
    return ProjectService(store, cipher)


def _payload(**overrides):
    data = {"name": " Shop ", "dbUrl": DB_URL, "dbType": " MySQL ", "description": "  "}
    data.update(overrides)
    return ProjectCreate.model_validate(data)


class TestProjectCreate:
    def test_normalizes_fields(self):
        payload = _payload()
        assert payload.name == "Shop"
        assert payload.db_type == "mysql"
        assert payload.description is None

    @pytest.mark.parametrize("field", ["name", "dbUrl", "dbType"])
    def test_rejects_blank(self, field):
        with pytest.raises(ValidationError):
            _payload(**{field: "   "})


class TestCreateProject:
    @pytest.mark.asyncio
    async def test_encrypts_url_and_stores_summary(self, service, cipher):
        summary = DatabaseSummary(summary=[], db_type="mysql")
        with patch(
            "queryiq.projects.service.introspect_database",
            new=AsyncMock(return_value=summary),
        ) as introspect:
            project = await service.create_project(_payload())

        introspect.assert_awaited_once()
        assert introspect.await_args.args[:2] == (DB_URL, "mysql")
        assert project.db_type is DatabaseKind.MYSQL
        assert project.database_summary is summary
        assert project.connection_secret != DB_URL
        assert cipher.decrypt(project.connection_secret) == DB_URL

    @pytest.mark.asyncio
    async def test_unsupported_type(self, service, store):
        with pytest.raises(ProjectCreationError, match="Unsupported database type: oracle"):
            await service.create_project(_payload(dbType="oracle"))
        store.create_project.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "message"),
        [
            (DatabaseConnectionError("MySQL", ConnectionError("refused")), CONNECTION_FAILED_MESSAGE),
            (DatabaseIntrospectionError("MySQL", SchemaError("denied")), SCHEMA_READ_FAILED_MESSAGE),
            (RuntimeError("boom"), UNEXPECTED_FAILURE_MESSAGE),
        ],
    )
    async def test_failures_map_to_user_messages(self, service, store, error, message):
        with patch(
            "queryiq.projects.service.introspect_database",
            new=AsyncMock(side_effect=error),
        ):
            with pytest.raises(ProjectCreationError) as exc_info:
                await service.create_project(_payload())

        assert exc_info.value.message == message
        store.create_project.assert_not_awaited()


class TestRefreshSummary:
    @pytest.mark.asyncio
    async def test_reintrospects_with_decrypted_url(self, service, store, cipher):
        project_id = uuid4()
        store.get_project.return_value = Project(
            id=project_id,
            name="Shop",
            db_type=DatabaseKind.MYSQL,
            connection_secret=cipher.encrypt(DB_URL),
        )
        summary = DatabaseSummary(summary=[], db_type="mysql")

        with patch(
            "queryiq.projects.service.introspect_database",
            new=AsyncMock(return_value=summary),
        ) as introspect:
            project = await service.refresh_project_summary(project_id)

        assert introspect.await_args.args[0] == DB_URL
        store.update_summary.assert_awaited_once_with(project_id, summary)
        assert project.database_summary is summary
