"""Unit tests for export routes."""

import io
from unittest.mock import AsyncMock, patch

from openpyxl import load_workbook

from queryiq.api.main import app_state
from queryiq.config import QuerySettings
from queryiq.connectors.base import QueryExecutionError, QueryResult
from queryiq.export import ExportService


def _rows(n):
    return QueryResult(rows=[{"id": i} for i in range(n)], row_count=n, execution_time_ms=1.0)


class TestExportRoutes:
    def _state(self, store, cipher, max_rows=50000):
        return {
            "project_store": store,
            "cipher": cipher,
            "export_service": ExportService(QuerySettings(max_export_rows=max_rows)),
        }

    def test_export_json(self, client, store, cipher, project):
        with (
            patch.dict(app_state, self._state(store, cipher, max_rows=3)),
            patch("queryiq.export.execute_query", new=AsyncMock(return_value=_rows(3))) as execute,
        ):
            response = client.post(
                "/api/v1/chat/execute-export",
                json={"projectId": str(project.id), "query": "SELECT id FROM orders"},
            )

        assert response.status_code == 200
        assert response.json() == {
            "data": [{"id": 0}, {"id": 1}, {"id": 2}],
            "rowCount": 3,
            "capped": True,
        }
        assert execute.await_args.args[1].text == "SELECT id FROM orders LIMIT 3"

    def test_export_rejects_non_select(self, client, store, cipher, project):
        with patch.dict(app_state, self._state(store, cipher)):
            response = client.post(
                "/api/v1/chat/execute-export",
                json={"projectId": str(project.id), "query": "DELETE FROM orders"},
            )

        assert response.status_code == 400
        assert response.json() == {"error": "validation_error", "message": "Only SELECT queries are allowed"}

    def test_export_timeout(self, client, store, cipher, project):
        with (
            patch.dict(app_state, self._state(store, cipher)),
            patch(
                "queryiq.export.execute_query",
                new=AsyncMock(side_effect=QueryExecutionError("Query timeout (300s)")),
            ),
        ):
            response = client.post(
                "/api/v1/chat/execute-export",
                json={"projectId": str(project.id), "query": "SELECT * FROM orders"},
            )

        assert response.status_code == 500
        assert response.json()["message"] == "Query timeout (300s)"

    def test_export_requires_query(self, client, store, cipher, project):
        with patch.dict(app_state, self._state(store, cipher)):
            response = client.post(
                "/api/v1/chat/execute-export",
                json={"projectId": str(project.id), "query": "   "},
            )

        assert response.status_code == 422

    def test_export_xlsx(self, client, store, cipher, project):
        with (
            patch.dict(app_state, self._state(store, cipher)),
            patch("queryiq.export.execute_query", new=AsyncMock(return_value=_rows(2))),
        ):
            response = client.post(
                "/api/v1/chat/execute-export/xlsx",
                json={
                    "projectId": str(project.id),
                    "query": "SELECT id FROM orders",
                    "sheetName": "Orders",
                    "filename": "orders",
                },
            )

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="orders.xlsx"'
        assert response.headers["x-row-count"] == "2"
        assert response.headers["x-capped"] == "false"
        sheet = load_workbook(io.BytesIO(response.content)).active
        assert sheet.title == "Orders"
        assert list(sheet.values) == [("id",), (0,), (1,)]
