import asyncio

import httpx
import pytest

from springanim.app.client import SpringAnimAPIError, SpringAnimClient
from springanim.app.dependencies import get_app_settings, get_database
from springanim.app.main import app
from springanim.core.physics import sample
from springanim.database import close_db


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def asgi_app(db, settings):
    app.dependency_overrides[get_app_settings] = lambda: settings
    app.dependency_overrides[get_database] = lambda: db
    try:
        yield app
    finally:
        app.dependency_overrides.clear()
        run(close_db())


def in_process(asgi_app):
    return SpringAnimClient("http://testserver", transport=httpx.ASGITransport(app=asgi_app))


class TestAgainstApp:
    def test_sample(self, asgi_app):
        async def scenario():
            async with in_process(asgi_app).session() as client:
                return await client.sample(x=10, stiffness=1, damping=0.1)

        assert run(scenario()) == sample(10, 0, 1, 1, 0.1)

    def test_animation(self, asgi_app):
        async def scenario():
            async with in_process(asgi_app).session() as client:
                return await client.animation(100, preset="wobbly", mapper={"kind": "opacity"}, prefixes=["-moz-", ""])

        plan = run(scenario())
        assert plan["css"].startswith(f"@-moz-keyframes {plan['name']} {{0%{{opacity:")
        assert plan["preset_name"] == "wobbly"

    def test_live(self, asgi_app):
        async def scenario():
            async with in_process(asgi_app).session() as client:
                return [x async for x in client.live(10, stiffness=1, damping=0.1, fps=1000)]

        assert run(scenario()) == sample(10, 0, 1, 1, 0.1)

    def test_live_error(self, asgi_app):
        async def scenario():
            async with in_process(asgi_app).session() as client:
                return [x async for x in client.live(1, stiffness=170, damping=26)]

        with pytest.raises(SpringAnimAPIError) as error:
            run(scenario())
        assert error.value.status_code == 400

    def test_presets(self, asgi_app):
        async def scenario():
            async with in_process(asgi_app).session() as client:
                presets = await client.list_presets()
                slow = await client.get_preset("slow", include_preview=True)
                return presets, slow

        presets, slow = run(scenario())
        assert len(presets) == 5
        assert slow["mass"] == 2.0
        assert slow["preview"]

    def test_not_found_message(self, asgi_app):
        async def scenario():
            async with in_process(asgi_app).session() as client:
                await client.sample(x=1, preset="nope")

        with pytest.raises(SpringAnimAPIError, match="Preset 'nope' not found") as error:
            run(scenario())
        assert error.value.status_code == 404

    def test_health(self, asgi_app):
        async def scenario():
            async with in_process(asgi_app).session() as client:
                return await client.health_check()

        health = run(scenario())
        assert health["connected"] is True
        assert health["status"] == "healthy"


class TestRetries:
    def test_network_errors_are_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        async def scenario():
            client = SpringAnimClient(max_retries=3, backoff=0, transport=httpx.MockTransport(handler))
            async with client.session():
                await client.list_presets()

        with pytest.raises(SpringAnimAPIError, match="after 3 attempts"):
            run(scenario())
        assert len(calls) == 3

    def test_recovers_after_network_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json={"presets": [{"preset_name": "default"}]})

        async def scenario():
            client = SpringAnimClient(backoff=0, transport=httpx.MockTransport(handler))
            async with client.session():
                return await client.list_presets()

        assert run(scenario()) == [{"preset_name": "default"}]
        assert len(calls) == 2

    def test_client_errors_are_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"detail": "Spring diverged"})

        async def scenario():
            client = SpringAnimClient(backoff=0, transport=httpx.MockTransport(handler))
            async with client.session():
                await client.sample(x=1, stiffness=170, damping=26)

        with pytest.raises(SpringAnimAPIError, match="HTTP 400: Spring diverged"):
            run(scenario())
        assert len(calls) == 1

    def test_health_check_reports_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async def scenario():
            client = SpringAnimClient(max_retries=1, transport=httpx.MockTransport(handler))
            async with client.session():
                return await client.health_check()

        health = run(scenario())
        assert health["connected"] is False
        assert "Network error" in health["error"]
