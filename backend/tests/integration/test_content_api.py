"""
Integration Tests for the content and task reference endpoints
"""
from uuid import uuid4

from httpx import AsyncClient

from standuphub.content.chips import render_user_chip


class TestHealthAPI:
    """Test health endpoints"""

    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "X-Request-ID" in response.headers

    async def test_readiness(self, client: AsyncClient):
        response = await client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["checks"]["database"] == "healthy"

    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"


class TestRenderAPI:
    """Test POST /content/render"""

    async def test_render_resolves_references(self, client: AsyncClient, test_task, test_user):
        response = await client.post(
            "/api/v1/content/render",
            json={"content": f"Fixed #TASK-99\n- Paired with @{test_user.id}"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is False
        assert data["task_ids"] == [str(test_task.id)]
        assert data["user_ids"] == [str(test_user.id)]
        assert ">#99: Publish release notes</span>" in data["markup"]
        assert render_user_chip(str(test_user.id), test_user.name, test_user.avatar_url) in data["markup"]
        assert "<ul><li>Paired with " in data["markup"]

    async def test_render_editor_mode(self, client: AsyncClient, test_user):
        response = await client.post(
            "/api/v1/content/render",
            json={"content": f"@{test_user.id}", "mode": "editor"},
        )

        assert response.status_code == 200
        assert response.json()["markup"] == (
            "<p>" + render_user_chip(str(test_user.id), test_user.name, mode="editor") + "</p>"
        )

    async def test_render_unresolved(self, client: AsyncClient):
        response = await client.post("/api/v1/content/render", json={"content": "#TASK-12"})

        assert response.status_code == 200
        data = response.json()
        assert ">#12</span>" in data["markup"]
        assert data["task_ids"] == ["12"]

    async def test_render_empty(self, client: AsyncClient):
        response = await client.post("/api/v1/content/render", json={"content": None})

        assert response.status_code == 200
        assert response.json() == {"markup": "", "degraded": False, "task_ids": [], "user_ids": []}

    async def test_render_invalid_mode(self, client: AsyncClient):
        response = await client.post("/api/v1/content/render", json={"content": "x", "mode": "print"})
        assert response.status_code == 422


class TestSerializeAPI:
    """Test POST /content/serialize"""

    async def test_serialize_document(self, client: AsyncClient):
        task_id = str(uuid4())
        document = {
            "type": "doc",
            "content": [
                {"type": "paragraph", "content": [
                    {"type": "text", "text": "Shipped "},
                    {"type": "taskMention", "attrs": {"id": task_id}},
                ]},
                {"type": "bulletList", "content": [
                    {"type": "listItem", "content": [
                        {"type": "paragraph", "content": [{"type": "text", "text": "follow up"}]},
                    ]},
                ]},
            ],
        }
        response = await client.post("/api/v1/content/serialize", json={"document": document})

        assert response.status_code == 200
        assert response.json() == {"content": f"Shipped #TASK-{task_id}\n- follow up"}

    async def test_serialize_plain_string(self, client: AsyncClient):
        response = await client.post("/api/v1/content/serialize", json={"document": "already text"})
        assert response.json() == {"content": "already text"}

    async def test_serialize_nothing(self, client: AsyncClient):
        response = await client.post("/api/v1/content/serialize", json={})
        assert response.json() == {"content": ""}


class TestShortIdAPI:
    """Test GET /content/short-ids/{full_id}"""

    async def test_short_id(self, client: AsyncClient):
        response = await client.get("/api/v1/content/short-ids/BBECEEFB-5AB1-471B-B531-63ADDC51D41B")

        assert response.status_code == 200
        assert response.json() == {
            "full_id": "bbeceefb-5ab1-471b-b531-63addc51d41b",
            "short_id": "12315886",
            "prefix": "bbecee",
        }

    async def test_malformed_full_id(self, client: AsyncClient):
        response = await client.get("/api/v1/content/short-ids/12315886")
        assert response.status_code == 400


class TestResolveTaskAPI:
    """Test GET /tasks/resolve/{token}"""

    async def test_resolve_short_id(self, client: AsyncClient, test_task):
        response = await client.get("/api/v1/tasks/resolve/99")

        assert response.status_code == 200
        assert response.json() == {
            "id": str(test_task.id),
            "short_id": "99",
            "title": "Publish release notes",
        }

    async def test_resolve_full_id(self, client: AsyncClient, test_task):
        response = await client.get(f"/api/v1/tasks/resolve/{test_task.id}")

        assert response.status_code == 200
        assert response.json()["short_id"] == "99"

    async def test_resolve_not_found(self, client: AsyncClient, test_task):
        response = await client.get("/api/v1/tasks/resolve/12")

        assert response.status_code == 404
        assert response.json()["detail"] == "Task #12 not found"

    async def test_resolve_malformed(self, client: AsyncClient):
        response = await client.get("/api/v1/tasks/resolve/not-a-task")
        assert response.status_code == 400
