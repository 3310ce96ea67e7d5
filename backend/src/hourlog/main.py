from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.responses import RedirectResponse
from starlette.requests import Request

from hourlog.backends.base import TrackerBackend
from hourlog.backends.selector import create_backend
from hourlog.core.config import Settings, get_settings
from hourlog.routers import env, records, statistics, today

logger = logging.getLogger(__name__)

CORE_ROUTERS = (
    (today.router, {}),
    (records.router, {}),
    (statistics.router, {}),
    (env.router, {}),
)


def create_app(backend: Optional[TrackerBackend] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API. Pass ``backend`` to serve an already initialized store;
    otherwise the selector builds one on startup and closes it on shutdown.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
    )
    application.state.backend = backend

    @application.middleware("http")
    async def enforce_utf8_json(request: Request, call_next):
        response = await call_next(request)
        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=utf-8"
        return response

    @application.get("/favicon.ico", include_in_schema=False)
    def favicon():
        return Response(status_code=204)

    for router, include_kwargs in CORE_ROUTERS:
        application.include_router(router, **include_kwargs)

    @application.get("/", include_in_schema=False)
    def root():
        target = settings.docs_url or "/docs"
        return RedirectResponse(target)

    @application.get("/health", tags=["health"])
    def health():
        current = application.state.backend
        return {"ok": current is not None, "backend": getattr(current, "name", None)}

    @application.on_event("startup")
    async def _startup():
        if application.state.backend is None:
            application.state.backend = await create_backend(settings)
            application.state.owns_backend = True
            logger.info("Serving with the %s backend", application.state.backend.name)

    @application.on_event("shutdown")
    async def _shutdown():
        if getattr(application.state, "owns_backend", False):
            await application.state.backend.close()
            application.state.backend = None

    return application


app = create_app()
