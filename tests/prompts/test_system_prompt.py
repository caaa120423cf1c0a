import pytest

from queryiq.models.database import DatabaseKind
from queryiq.models.results import PaginationConfig
from queryiq.models.schema import (
    CollectionSummary,
    DatabaseSummary,
    TableColumn,
    TableSummary,
)
from queryiq.prompts.builder import build_system_prompt


def test_sql_prompt_embeds_summary_and_thresholds():
    summary = DatabaseSummary(
        summary=[
            TableSummary(
                table="users",
                columns=[TableColumn(name="id", type="integer"), TableColumn(name="email", type="text")],
            )
        ],
        db_type="postgresql",
    )

    prompt = build_system_prompt(
        summary,
        DatabaseKind.POSTGRESQL,
        PaginationConfig(max_rows_per_page=40, max_rows_before_export=400),
    )

    assert "POSTGRESQL database" in prompt
    assert "- users: id (integer), email (text)" in prompt
    assert "over 400 rows" in prompt
    assert "SQL-SPECIFIC RULES" in prompt
    assert "max 40 rows" in prompt
    assert "MONGODB-SPECIFIC RULES" not in prompt


def test_mongo_prompt():
    summary = DatabaseSummary(
        summary=[CollectionSummary(collection="events", document_count=12, storage_size=2048)],
        db_type="mongodb",
    )

    prompt = build_system_prompt(summary, DatabaseKind.MONGODB)

    assert "MONGODB database" in prompt
    assert "- events: 12 documents, 2048 bytes" in prompt
    assert "MONGODB-SPECIFIC RULES" in prompt
    assert "max 50 documents" in prompt
    assert "SQL-SPECIFIC RULES" not in prompt


def test_mysql_uses_sql_rules():
    prompt = build_system_prompt("- orders: id (int)", DatabaseKind.MYSQL)
    assert "MYSQL database" in prompt
    assert "- orders: id (int)" in prompt
    assert "SQL-SPECIFIC RULES" in prompt


@pytest.mark.parametrize("summary", [None, ""])
def test_missing_summary(summary):
    assert "No summary available." in build_system_prompt(summary, DatabaseKind.POSTGRESQL)


def test_empty_introspection():
    summary = DatabaseSummary(summary=[], db_type="mysql")
    assert "No tables or collections found." in build_system_prompt(summary, DatabaseKind.MYSQL)
