from contextlib import suppress
from typing import AsyncIterator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from hourlog.backends.embedded import EmbeddedBackend
from hourlog.backends.remote import RemoteBackend
from hourlog.core.config import RemoteConfig, Settings
from hourlog.core.storage import SnapshotStore
from hourlog.main import create_app

from fake_postgrest import FakePostgrest


@pytest.fixture
def snapshot_store(tmp_path) -> SnapshotStore:
    return SnapshotStore(tmp_path / "data")


@pytest.fixture
async def embedded_backend(snapshot_store) -> AsyncIterator[EmbeddedBackend]:
    backend = await EmbeddedBackend(snapshot_store).initialize()
    try:
        yield backend
    finally:
        with suppress(Exception):
            await backend.close()


@pytest.fixture
def fake_postgrest() -> FakePostgrest:
    return FakePostgrest()


@pytest.fixture
async def remote_backend(fake_postgrest) -> AsyncIterator[RemoteBackend]:
    config = RemoteConfig(url=fake_postgrest.url, key=fake_postgrest.key, source="test")
    backend = await RemoteBackend(config, transport=fake_postgrest.transport).initialize()
    try:
        yield backend
    finally:
        await backend.close()


@pytest.fixture(params=["embedded", "remote"])
async def backend(request, snapshot_store, fake_postgrest):
    """Every contract test runs once per backend."""
    if request.param == "embedded":
        instance = await EmbeddedBackend(snapshot_store).initialize()
    else:
        config = RemoteConfig(url=fake_postgrest.url, key=fake_postgrest.key, source="test")
        instance = await RemoteBackend(config, transport=fake_postgrest.transport).initialize()
    try:
        yield instance
    finally:
        await instance.close()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        backend="embedded",
        data_dir=tmp_path / "data",
        runtime_config_url=None,
        local_config_path=tmp_path / "config.local.json",
        env_file_path=tmp_path / ".env",
    )


@pytest.fixture
def test_app(embedded_backend, test_settings) -> FastAPI:
    return create_app(backend=embedded_backend, settings=test_settings)


@pytest.fixture
async def client(test_app: FastAPI) -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
