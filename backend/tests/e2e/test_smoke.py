from httpx import ASGITransport, AsyncClient

from hourlog.main import create_app


async def test_health_endpoint(client: AsyncClient):
    r = await client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "backend": "embedded"}


async def test_root_redirects_to_docs(client: AsyncClient):
    r = await client.get("/")
    assert r.status_code in (302, 307)
    assert r.headers["location"] == "/docs"


async def test_app_without_backend_answers_503(test_settings):
    app = create_app(settings=test_settings)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        r = await ac.get("/records")
    assert r.status_code == 503
