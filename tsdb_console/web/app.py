"""
FastAPI front for the console controller.

Every route drives one controller operation and answers with the full
view-state snapshot, so a browser (or any other renderer) only has to
draw what it receives.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field
from starlette.middleware.base import BaseHTTPMiddleware

from tsdb_console import __version__
from tsdb_console.controller.view_state import ViewStateController
from tsdb_console.core.constants import BusinessTab, ConfigTab, Section
from tsdb_console.core.logging import EventType, get_logger, log_event

logger = get_logger(__name__)


# ============================================================================
# Request bodies
# ============================================================================


class ConfigSubmission(BaseModel):
    """Submitted form fields as ordered [dotted key, value] pairs."""

    fields: list[tuple[str, str | None]] = Field(default_factory=list)


class PageRequest(BaseModel):
    page: int


class PageSizeRequest(BaseModel):
    page_size: int = Field(..., gt=0)


class FilterRequest(BaseModel):
    search: str = ""
    tag_type: str = ""


class CreateInstanceBody(BaseModel):
    instance_id: str
    business_type: str


# ============================================================================
# Access logging
# ============================================================================


def _view_scope(controller: ViewStateController) -> str:
    """Section (and tab) the console is showing, e.g. ``business/instances``."""
    section = controller.active_section
    if section is Section.CONFIG:
        return f"{section.value}/{controller.config_tab.value}"
    if section is Section.BUSINESS:
        return f"{section.value}/{controller.business_tab.value}"
    return section.value


class ConsoleAccessLogMiddleware(BaseHTTPMiddleware):
    """One REQUEST event per call, scoped to the view the call left active."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        log_event(
            logger, logging.INFO, EventType.REQUEST, _view_scope(request.app.state.controller),
            f"{request.method} {path} {response.status_code}",
            client=request.client.host if request.client else "-",
            ms=f"{duration_ms:.1f}",
        )
        return response


# ============================================================================
# Application factory
# ============================================================================


def create_app(controller: ViewStateController, access_log: bool = False) -> FastAPI:
    """Build the console app around an explicitly constructed controller."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await controller.start()
        try:
            yield
        finally:
            controller.api.close()

    app = FastAPI(title="TSDB Management Console", version=__version__, lifespan=lifespan)
    app.state.controller = controller

    if access_log:
        app.add_middleware(ConsoleAccessLogMiddleware)

    def state() -> dict[str, Any]:
        return controller.snapshot()

    # ---- navigation ---------------------------------------------------------

    @app.get("/console/state")
    async def get_state():
        """Current view state."""
        return state()

    @app.post("/console/sections/{name}")
    async def switch_section(name: str):
        """Activate a section and (re)load it."""
        if Section.parse(name) is None:
            raise HTTPException(status_code=404, detail=f"Unknown section: {name}")
        await controller.switch_section(name)
        return state()

    @app.post("/console/config/tabs/{tab}")
    async def switch_config_tab(tab: str):
        if not controller.switch_config_tab(tab):
            raise HTTPException(
                status_code=404,
                detail=f"Unknown config tab: {tab} (expected one of {[t.value for t in ConfigTab]})",
            )
        return state()

    @app.post("/console/business/tabs/{tab}")
    async def switch_business_tab(tab: str):
        if not await controller.switch_business_tab(tab):
            raise HTTPException(
                status_code=404,
                detail=f"Unknown business tab: {tab} (expected one of {[t.value for t in BusinessTab]})",
            )
        return state()

    # ---- configuration --------------------------------------------------------

    @app.post("/console/config/{key}")
    async def save_config(key: str, submission: ConfigSubmission):
        """Merge submitted fields into the record ``key`` and store it."""
        await controller.save_config(key, submission.fields)
        return state()

    @app.delete("/console/config/instances/{instance_id}")
    async def delete_instance_config(instance_id: str):
        await controller.delete_instance_config(instance_id)
        return state()

    # ---- pagination and filtering --------------------------------------------

    @app.post("/console/business/pages/next")
    async def next_page():
        await controller.next_page()
        return state()

    @app.post("/console/business/pages/previous")
    async def previous_page():
        await controller.previous_page()
        return state()

    @app.put("/console/business/page")
    async def go_to_page(body: PageRequest):
        await controller.go_to_page(body.page)
        return state()

    @app.put("/console/business/page-size")
    async def change_page_size(body: PageSizeRequest):
        await controller.change_page_size(body.page_size)
        return state()

    @app.put("/console/business/filter")
    async def apply_filter(body: FilterRequest):
        await controller.apply_filter(body.search, body.tag_type)
        return state()

    @app.delete("/console/business/filter")
    async def reset_filter():
        await controller.reset_filter()
        return state()

    # ---- instances ------------------------------------------------------------

    @app.post("/console/instances")
    async def create_instance(body: CreateInstanceBody):
        await controller.create_instance(body.instance_id, body.business_type)
        return state()

    @app.post("/console/instances/refresh")
    async def refresh_instances():
        await controller.refresh_instances()
        return state()

    @app.post("/console/instances/{instance_id}/start")
    async def start_instance(instance_id: str):
        await controller.start_instance(instance_id)
        return state()

    @app.post("/console/instances/{instance_id}/stop")
    async def stop_instance(instance_id: str):
        await controller.stop_instance(instance_id)
        return state()

    @app.delete("/console/instances/{instance_id}")
    async def delete_instance(instance_id: str):
        await controller.delete_instance(instance_id)
        return state()

    # ---- notifications --------------------------------------------------------

    @app.get("/console/notification")
    async def get_notification():
        """The visible notification, or null."""
        current = controller.notifier.current
        return {"notification": current.to_dict() if current else None}

    @app.delete("/console/notification")
    async def dismiss_notification():
        return {"dismissed": controller.notifier.dismiss()}

    return app
