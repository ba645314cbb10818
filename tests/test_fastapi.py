"""
Tests for the FastAPI integration.
"""
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from conftest import ScriptedAdapter

from fetch_facade.config import ClientConfig
from fetch_facade.core.client import HttpClient
from fetch_facade.integrations import HttpClientService, create_lifespan, get_client
from fetch_facade.plugins import create_retry_plugin


class TestHttpClientService:
    @pytest.mark.asyncio
    async def test_register_and_get(self):
        service = HttpClientService()
        client = await service.register(
            "users",
            ClientConfig(adapter=ScriptedAdapter(), base_url="https://users.internal"),
            plugins=[create_retry_plugin()],
        )

        assert service.get("users") is client
        assert service.has("users") is True
        assert client.has_plugin("retry") is True

    @pytest.mark.asyncio
    async def test_get_unknown_raises(self):
        with pytest.raises(KeyError, match="not registered"):
            HttpClientService().get("missing")

    @pytest.mark.asyncio
    async def test_register_replaces_and_closes_previous(self, caplog):
        service = HttpClientService()
        old_adapter = ScriptedAdapter()
        old = await service.register("users", ClientConfig(adapter=old_adapter))

        new = await service.register("users", ClientConfig(adapter=ScriptedAdapter()))

        assert service.get("users") is new
        assert old.closed is True
        assert old_adapter.closed is True
        assert "replacing client 'users'" in caplog.text

    @pytest.mark.asyncio
    async def test_close_all(self):
        service = HttpClientService()
        adapters = [ScriptedAdapter(), ScriptedAdapter()]
        await service.register("a", ClientConfig(adapter=adapters[0]))
        await service.register("b", ClientConfig(adapter=adapters[1]))

        await service.close_all()

        assert service.clients == {}
        assert all(adapter.closed for adapter in adapters)


class TestLifespan:
    def test_clients_available_to_routes_and_closed_on_shutdown(self):
        adapter = ScriptedAdapter((200, {"id": 7, "name": "Ann"}))

        async def setup(service: HttpClientService):
            await service.register(
                "users", ClientConfig(adapter=adapter, base_url="https://users.internal")
            )

        app = FastAPI(lifespan=create_lifespan(setup))

        @app.get("/proxy/users/{user_id}")
        async def read_user(user_id: int, client: HttpClient = Depends(get_client("users"))):
            response = await client.get(f"/users/{user_id}")
            return response.data

        with TestClient(app) as http:
            result = http.get("/proxy/users/7")

        assert result.status_code == 200
        assert result.json() == {"id": 7, "name": "Ann"}
        assert adapter.calls[0].url == "/users/7"
        assert adapter.calls[0].base_url == "https://users.internal"
        assert adapter.closed is True

    def test_lifespan_without_setup(self):
        app = FastAPI(lifespan=create_lifespan())

        with TestClient(app):
            assert app.state.http_clients.clients == {}
