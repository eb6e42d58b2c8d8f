"""
Name Registry - HTTP API Tests
===============================

What:  End-to-end tests through FastAPI against a real SQLite file.
How:   `test_client` runs the app lifespan (connect + create table) and talks
       to the app in-process over HTTPX's ASGITransport.

What we test:
    ✅ Store → Get round trip with trimming
    ✅ Idempotent store, overwrite semantics, created_at preserved
    ✅ Listing order and count
    ✅ 400 for every validation failure, with nothing written
    ✅ 404 for unknown ids, 400 for non-numeric ids
    ✅ 500 with a generic body when the datastore fails
    ✅ /health independent of the datastore
    ✅ Landing page, request id propagation, startup failure
"""

import logging
from datetime import datetime
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from name_registry.config import Settings
from name_registry.exceptions import StartupError
from name_registry.main import create_app
from name_registry.models.name_record import NameRecord


async def _store(client, record_id, name):
    return await client.post("/api/store", json={"id": record_id, "name": name})


class TestStoreAndGet:

    @pytest.mark.asyncio
    async def test_store_then_get_returns_trimmed_name(self, test_client):
        response = await _store(test_client, 1, "  Alice  ")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Name stored successfully",
            "id": 1,
            "name": "Alice",
        }

        response = await test_client.get("/api/get/1")
        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["id"] == 1
        assert body["name"] == "Alice"
        assert body["created_at"]

    @pytest.mark.asyncio
    async def test_store_is_idempotent(self, test_client):
        await _store(test_client, 1, "Alice")
        await _store(test_client, 1, "Alice")

        body = (await test_client.get("/api/all")).json()
        assert body["count"] == 1
        assert body["data"][0]["name"] == "Alice"

    @pytest.mark.asyncio
    async def test_overwrite_replaces_name(self, test_client):
        await _store(test_client, 1, "Alice")
        await _store(test_client, 1, "Bob")

        assert (await test_client.get("/api/get/1")).json()["name"] == "Bob"
        data = (await test_client.get("/api/all")).json()["data"]
        assert [record["id"] for record in data] == [1]

    @pytest.mark.asyncio
    async def test_overwrite_keeps_original_created_at(self, test_app, test_client):
        await _store(test_client, 1, "Alice")
        async with test_app.state.database.session() as session:
            await session.execute(
                update(NameRecord)
                .where(NameRecord.id == 1)
                .values(created_at=datetime(2000, 1, 1))
            )
            await session.commit()

        await _store(test_client, 1, "Bob")

        body = (await test_client.get("/api/get/1")).json()
        assert body["name"] == "Bob"
        assert body["created_at"].startswith("2000-01-01")

    @pytest.mark.asyncio
    async def test_get_unknown_id_is_not_found(self, test_client):
        response = await test_client.get("/api/get/12345")

        assert response.status_code == 404
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "not_found"
        assert body["message"] == "No name found for this ID"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("segment", ["abc", "12abc", "1.5"])
    async def test_get_non_numeric_id_is_client_error(self, test_client, segment):
        response = await test_client.get(f"/api/get/{segment}")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid ID format"

    @pytest.mark.asyncio
    async def test_negative_id_round_trip(self, test_client):
        await _store(test_client, -3, "Neg")
        assert (await test_client.get("/api/get/-3")).json()["name"] == "Neg"


class TestList:

    @pytest.mark.asyncio
    async def test_empty_registry(self, test_client):
        response = await test_client.get("/api/all")

        assert response.status_code == 200
        assert response.json() == {"success": True, "count": 0, "data": []}

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_id(self, test_client):
        for record_id, name in [(3, "Carol"), (1, "Alice"), (2, "Bob")]:
            await _store(test_client, record_id, name)

        body = (await test_client.get("/api/all")).json()

        assert body["count"] == 3
        assert [record["id"] for record in body["data"]] == [1, 2, 3]
        assert [record["name"] for record in body["data"]] == ["Alice", "Bob", "Carol"]
        assert all(record["created_at"] for record in body["data"])


class TestStoreValidation:

    @pytest.mark.asyncio
    async def test_name_over_limit_is_rejected_and_not_written(self, test_client):
        response = await _store(test_client, 1, "x" * 101)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "validation_error"
        assert body["message"] == "Name too long (max 100 characters)"
        assert (await test_client.get("/api/get/1")).status_code == 404

    @pytest.mark.asyncio
    async def test_padding_counts_toward_the_limit(self, test_client):
        response = await _store(test_client, 5, "x" * 100 + "   ")

        assert response.status_code == 400
        assert response.json()["message"] == "Name too long (max 100 characters)"
        assert (await test_client.get("/api/get/5")).status_code == 404

    @pytest.mark.asyncio
    async def test_name_over_limit_does_not_modify_existing(self, test_client):
        await _store(test_client, 1, "Alice")

        response = await _store(test_client, 1, "y" * 101)

        assert response.status_code == 400
        assert (await test_client.get("/api/get/1")).json()["name"] == "Alice"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"name": "Alice"},
            {"id": 0, "name": "Alice"},
            {"id": None, "name": "Alice"},
            {"id": 1},
            {"id": 1, "name": ""},
            {"id": 1, "name": "   "},
            {},
        ],
    )
    async def test_missing_fields_are_rejected(self, test_client, payload):
        response = await test_client.post("/api/store", json=payload)

        assert response.status_code == 400
        assert response.json()["message"] == "ID and name are required"
        assert (await test_client.get("/api/all")).json()["count"] == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"id": "abc", "name": "Alice"},
            {"id": 1.5, "name": "Alice"},
            {"id": 1, "name": 42},
        ],
    )
    async def test_wrong_types_are_client_errors(self, test_client, payload):
        response = await test_client.post("/api/store", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_malformed_json_is_client_error(self, test_client):
        response = await test_client.post(
            "/api/store",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"


class TestStorageFailures:

    @pytest.mark.asyncio
    async def test_list_failure_is_generic_server_error(self, test_app, test_client):
        test_app.state.name_service.store.list_all = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("disk I/O error"))
        )

        response = await test_client.get("/api/all")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "server_error"
        assert "disk I/O" not in response.text

    @pytest.mark.asyncio
    async def test_store_failure_is_server_error(self, test_app, test_client):
        test_app.state.name_service.store.upsert = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("database is locked"))
        )

        response = await _store(test_client, 1, "Alice")

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to store data"

    @pytest.mark.asyncio
    async def test_unexpected_failure_keeps_request_id_header(self, test_app, test_client):
        test_app.state.name_service.store.list_all = AsyncMock(side_effect=ValueError("boom"))
        transport = ASGITransport(app=test_app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/all", headers={"X-Request-ID": "abc"})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_server_error"
        assert body["request_id"] == "abc"
        assert response.headers["X-Request-ID"] == "abc"
        assert "boom" not in response.text

    @pytest.mark.asyncio
    async def test_get_unknown_id_never_reports_storage_error(self, test_client):
        response = await test_client.get("/api/get/777")
        assert response.status_code == 404


class TestHealthAndPages:

    @pytest.mark.asyncio
    async def test_health_ok(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["timestamp"]

    @pytest.mark.asyncio
    async def test_health_ok_without_datastore(self, test_app, test_client):
        await test_app.state.database.dispose()

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"

    @pytest.mark.asyncio
    async def test_landing_page(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Name Registry" in response.text

    @pytest.mark.asyncio
    async def test_static_asset(self, test_client):
        response = await test_client.get("/style.css")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_request_id_is_propagated(self, test_client):
        response = await test_client.get("/api/get/404", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, test_client):
        response = await test_client.get("/api/all")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    @pytest.mark.parametrize("header", ["has space", "x" * 65, "semi;colon"])
    async def test_unsafe_request_id_is_replaced(self, test_client, header):
        response = await test_client.get("/api/all", headers={"X-Request-ID": header})

        rid = response.headers["X-Request-ID"]
        assert rid != header
        assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_access_log_names_the_looked_up_id(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="name_registry.access")

        await test_client.get("/api/get/77", headers={"X-Request-ID": "trace-77"})

        lines = [r for r in caplog.records if r.name == "name_registry.access"]
        assert len(lines) == 1
        assert lines[0].levelno == logging.WARNING
        assert lines[0].getMessage().endswith(" id=77")
        assert lines[0].record_id == "77"
        assert lines[0].request_id == "trace-77"


class TestStartup:

    @pytest.mark.asyncio
    async def test_unreachable_datastore_aborts_startup(self, tmp_path):
        app = create_app(Settings(
            database_url=f"sqlite+aiosqlite:///{(tmp_path / 'missing' / 'names.db').as_posix()}",
            log_level="WARNING",
        ))

        with pytest.raises(StartupError):
            async with app.router.lifespan_context(app):
                pass

    @pytest.mark.asyncio
    async def test_unsupported_backend_aborts_startup(self):
        app = create_app(Settings(database_url="mysql+aiomysql://u:p@db/names", log_level="WARNING"))

        with pytest.raises(StartupError, match="Unsupported"):
            async with app.router.lifespan_context(app):
                pass

    @pytest.mark.asyncio
    async def test_table_name_override_after_import_aborts_startup(self, tmp_path):
        app = create_app(Settings(
            database_url=f"sqlite+aiosqlite:///{(tmp_path / 'names.db').as_posix()}",
            table_name="people",
            log_level="WARNING",
        ))

        with pytest.raises(StartupError, match="TABLE_NAME") as exc_info:
            async with app.router.lifespan_context(app):
                pass

        assert exc_info.value.context == {"requested": "people", "bound": "names"}
        assert not (tmp_path / "names.db").exists()

    @pytest.mark.asyncio
    async def test_production_mode_creates_data_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        app = create_app(Settings(
            environment="production",
            data_dir=str(tmp_path / "data"),
            log_level="WARNING",
        ))

        async with app.router.lifespan_context(app):
            assert (tmp_path / "data").is_dir()

        assert (tmp_path / "data" / "test_names.db").exists()
