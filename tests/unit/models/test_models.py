"""Unit tests for shared data models."""

import pytest
from pydantic import ValidationError

from queryiq.models.database import (
    DatabaseKind,
    DatabaseTarget,
    MongoOperation,
    MongoQuerySpec,
    SqlQuerySpec,
    UnsupportedDatabaseError,
    normalize_database_kind,
)
from queryiq.models.schema import (
    CollectionSchema,
    CollectionSummary,
    DatabaseSummary,
    RelationalSchema,
    TableColumn,
    TableSummary,
)


class TestDatabaseKind:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("postgres", DatabaseKind.POSTGRESQL),
            ("PostgreSQL", DatabaseKind.POSTGRESQL),
            (" mysql ", DatabaseKind.MYSQL),
            ("MONGODB", DatabaseKind.MONGODB),
        ],
    )
    def test_normalize(self, value, expected):
        assert normalize_database_kind(value) is expected

    def test_unsupported_type_names_supported_set(self):
        with pytest.raises(UnsupportedDatabaseError) as exc_info:
            normalize_database_kind("oracle")
        message = str(exc_info.value)
        assert "oracle" in message
        assert "postgres, postgresql, mysql, mongodb" in message

    def test_unsupported_is_value_error(self):
        assert issubclass(UnsupportedDatabaseError, ValueError)

    def test_labels_and_relational_flag(self):
        assert DatabaseKind.POSTGRESQL.label == "PostgreSQL"
        assert DatabaseKind.MONGODB.is_relational is False
        assert DatabaseKind.MYSQL.is_relational is True


class TestDatabaseTarget:
    def test_secret_is_hidden_from_repr(self):
        target = DatabaseTarget(connection_secret="postgresql://u:hunter2@h/db", kind="postgres")
        assert target.kind is DatabaseKind.POSTGRESQL
        assert "hunter2" not in repr(target)
        assert target.url == "postgresql://u:hunter2@h/db"

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValidationError):
            DatabaseTarget(connection_secret="x://", kind="sqlite")


class TestQuerySpecs:
    def test_sql_spec_requires_text(self):
        with pytest.raises(ValidationError):
            SqlQuerySpec(text="")

    def test_find_builder(self):
        spec = MongoQuerySpec.find("orders", {"status": "A"}, limit=10, skip=20, sort={"at": -1})
        assert spec.operation == MongoOperation.FIND
        assert spec.options.limit == 10
        assert spec.options.skip == 20
        assert spec.options.sort == {"at": -1}

    def test_count_and_aggregate_builders(self):
        assert MongoQuerySpec.count("orders").filter == {}
        pipeline = [{"$match": {}}]
        assert MongoQuerySpec.aggregate("orders", pipeline).pipeline == pipeline

    @pytest.mark.parametrize("name", ["", "  ", "bad$name", "system.users"])
    def test_invalid_collection_names(self, name):
        with pytest.raises(ValidationError):
            MongoQuerySpec.count(name)


class TestSchemaModels:
    def test_relational_schema_groups_rows_in_order(self):
        rows = [
            {"table_name": "users", "column_name": "id", "data_type": "integer",
             "is_nullable": "NO", "column_default": "nextval('users_id_seq')"},
            {"table_name": "users", "column_name": "email", "data_type": "text",
             "is_nullable": "YES", "column_default": None},
            {"table_name": "orders", "column_name": "id", "data_type": "integer",
             "is_nullable": "NO", "column_default": None},
        ]

        schema = RelationalSchema.from_column_rows(rows)

        assert schema.tables == ["users", "orders"]
        assert schema.table_count == 2
        assert [c.name for c in schema.columns["users"]] == ["id", "email"]
        assert schema.columns["users"][1].nullable is True
        assert schema.to_payload()["tableCount"] == 2

    def test_collection_schema_serializes_schema_key(self):
        schema = CollectionSchema(collection="events", schema="Empty collection", document_count=0)
        payload = schema.to_payload()
        assert payload["schema"] == "Empty collection"
        assert payload["documentCount"] == 0
        assert schema.is_empty is True

    def test_database_summary_round_trips_collections(self):
        summary = DatabaseSummary(
            summary=[CollectionSummary(collection="events", document_count=3, storage_size=512)],
            db_type="mongodb",
        )
        restored = DatabaseSummary.model_validate_json(summary.model_dump_json(by_alias=True))
        assert isinstance(restored.summary[0], CollectionSummary)
        assert restored.summary[0].document_count == 3

    def test_render_for_prompt(self):
        summary = DatabaseSummary(
            summary=[
                TableSummary(
                    table="users",
                    columns=[TableColumn(name="id", type="integer"), TableColumn(name="email", type="text")],
                )
            ],
            db_type="postgresql",
        )
        assert summary.render_for_prompt() == "- users: id (integer), email (text)"

    def test_render_empty_summary(self):
        summary = DatabaseSummary(summary=[], db_type="mysql")
        assert summary.render_for_prompt() == "No tables or collections found."
