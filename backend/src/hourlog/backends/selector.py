from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Awaitable, Callable, List, Mapping, Optional, Tuple

import httpx
from dotenv import dotenv_values

from hourlog.core.config import RemoteConfig, Settings, get_settings
from hourlog.core.errors import ConfigurationError, InitializationError
from hourlog.core.storage import SnapshotStore

from .base import TrackerBackend
from .embedded import EmbeddedBackend
from .remote import RemoteBackend

logger = logging.getLogger(__name__)

URL_NAMES = ("SUPABASE_URL", "VITE_SUPABASE_URL")
KEY_NAMES = ("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY")


def _clean(value) -> str:
    # strip whitespace and stray quotes copied from dashboards
    return str(value or "").strip().strip('"').strip("'")


def pick_credentials(values: Optional[Mapping], source: str) -> Optional[RemoteConfig]:
    """Return a config only if ``values`` carries both an endpoint and a key."""
    if not values:
        return None
    url = next((_clean(values.get(name)) for name in URL_NAMES if _clean(values.get(name))), "")
    key = next((_clean(values.get(name)) for name in KEY_NAMES if _clean(values.get(name))), "")
    if url and key:
        return RemoteConfig(url=url, key=key, source=source)
    return None


# -------------------- config sources --------------------

async def from_runtime_endpoint(
    url: Optional[str], transport: Optional[httpx.AsyncBaseTransport] = None
) -> Optional[Mapping]:
    if not url:
        return None
    try:
        async with httpx.AsyncClient(timeout=5.0, transport=transport) as client:
            response = await client.get(url)
    except httpx.HTTPError as exc:
        logger.info("Could not fetch runtime config from %s: %s", url, exc)
        return None
    if response.status_code != 200:
        logger.info("Runtime config endpoint %s answered HTTP %s", url, response.status_code)
        return None
    try:
        body = response.json()
    except ValueError:
        logger.info("Runtime config endpoint %s returned invalid JSON", url)
        return None
    return body if isinstance(body, dict) else None


def from_local_file(path: Path) -> Optional[Mapping]:
    path = Path(path)
    if not path.exists():
        logger.debug("No local config at %s", path)
        return None
    try:
        body = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable local config %s: %s", path, exc)
        return None
    return body if isinstance(body, dict) else None


def from_env_file(path: Path) -> Optional[Mapping]:
    path = Path(path)
    if not path.exists():
        return None
    # read only; values are not exported into os.environ
    return dotenv_values(path)


def from_process_env() -> Mapping:
    return os.environ


async def resolve_remote_config(
    settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None
) -> RemoteConfig:
    """Check the config sources in priority order; first complete pair wins."""

    async def runtime():
        return await from_runtime_endpoint(settings.runtime_config_url, transport)

    async def local():
        return from_local_file(settings.local_config_path)

    async def env_file():
        return from_env_file(settings.env_file_path)

    async def process_env():
        return from_process_env()

    sources: List[Tuple[str, Callable[[], Awaitable[Optional[Mapping]]]]] = [
        ("runtime endpoint", runtime),
        ("local config", local),
        ("env file", env_file),
        ("process env", process_env),
    ]
    for source, load in sources:
        config = pick_credentials(await load(), source)
        if config is not None:
            logger.info("Remote store credentials loaded from %s", source)
            return config

    raise ConfigurationError(
        "Missing SUPABASE_URL / SUPABASE_ANON_KEY. Set them in config.local.json, "
        "the .env file, the process environment, or serve them from the runtime config endpoint."
    )


async def create_backend(
    settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None
) -> TrackerBackend:
    """Build and initialize the one backend this process will use."""
    settings = settings or get_settings()
    if settings.backend == "embedded":
        backend: TrackerBackend = EmbeddedBackend(SnapshotStore(settings.data_dir), slot=settings.snapshot_slot)
    else:
        config = await resolve_remote_config(settings, transport)
        backend = RemoteBackend(config, timeout=settings.remote_timeout, transport=transport)
    try:
        return await backend.initialize()
    except InitializationError:
        await backend.close()
        raise
