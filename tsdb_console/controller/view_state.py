"""
View-state controller for the management console.

Tracks the active section and its sub-tabs, runs the loader each
transition requires, and keeps the last successfully loaded contents of
every view. Loaders are idempotent: re-running one re-fetches from the API
and rebuilds the same views. A failed load leaves the previous contents in
place; the API client has already surfaced the error.

All methods are coroutines meant to run on a single event loop. Within one
action the fetches are strictly sequential.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import replace
from typing import Any

from tsdb_console.api.client import ConsoleApiClient
from tsdb_console.api.models import ConfigSnapshot
from tsdb_console.controller.views import (
    BusinessOverview,
    ClusterView,
    ConfigManagerView,
    DashboardView,
    MetadataView,
    TableView,
    build_business_overview,
    build_cluster_view,
    build_config_manager,
    build_data_rows,
    build_instance_rows,
    build_metadata_view,
    build_plugin_rows,
    to_plain,
)
from tsdb_console.core.config import ConsoleConfig, get_config
from tsdb_console.core.constants import (
    DATA_TYPE_OPTIONS,
    BusinessTab,
    ConfigTab,
    NotificationSeverity,
    Section,
    instance_config_key,
)
from tsdb_console.core.exceptions import APIError, PaginationError
from tsdb_console.core.logging import EventType, get_logger, log_event
from tsdb_console.engine.merge import DELETE_SENTINEL, FormEntries, flatten_form_to_config
from tsdb_console.engine.pagination import FilterCriteria, PaginationState, paginate
from tsdb_console.notifications.channel import NotificationChannel

logger = get_logger(__name__)

# Load sequence key shared by all paginated business tabs
BUSINESS_PAGE_VIEW = "business-page"


class ViewStateController:
    """Owns navigation state and the last-good contents of every view."""

    def __init__(
        self,
        api: ConsoleApiClient,
        notifier: NotificationChannel,
        config: ConsoleConfig | None = None,
    ) -> None:
        self._config = config or get_config()
        self.api = api
        self.notifier = notifier

        self.active_section = Section(self._config.controller.initial_section)
        self.config_tab = ConfigTab.BUSINESS
        self.business_tab = BusinessTab.OVERVIEW
        self.pagination = PaginationState(page_size=self._config.pagination.default_page_size)
        self.filter = FilterCriteria()
        # Unsaved form input per config key, kept after a failed save
        self.form_drafts: dict[str, list[tuple[str, str]]] = {}

        self.dashboard = DashboardView()
        self.config_snapshot: ConfigSnapshot | None = None
        self.metadata_view: MetadataView | None = None
        self.cluster_view: ClusterView | None = None
        self.business_overview: BusinessOverview | None = None
        self.business_tables: dict[BusinessTab, TableView] = {}

        self._load_sequence: dict[str, int] = defaultdict(int)
        self._loaders: dict[Section, Callable[[], Awaitable[bool]]] = {
            Section.DASHBOARD: self.load_dashboard,
            Section.CONFIG: self._enter_config,
            Section.METADATA: self.load_metadata_viewer,
            Section.CLUSTER: self.load_cluster_status,
            Section.BUSINESS: self._enter_business,
        }

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    async def start(self) -> bool:
        """Announce readiness and load the initial section."""
        self.notifier.notify("Console initialized", NotificationSeverity.SUCCESS)
        return await self.switch_section(self.active_section)

    async def switch_section(self, name: str | Section) -> bool:
        """Activate a section and run its loader.

        Unknown names are ignored. Switching to the already active section
        re-runs its loader.

        Returns:
            False if the name was not a section, otherwise True.
        """
        section = Section.parse(name)
        if section is None:
            log_event(logger, logging.DEBUG, EventType.SECTION_UNKNOWN, str(name), "ignored")
            return False

        previous = self.active_section
        self.active_section = section
        log_event(
            logger, logging.INFO, EventType.SECTION_SWITCHED, section.value,
            f"{previous.value} -> {section.value}",
        )
        await self._loaders[section]()
        return True

    def switch_config_tab(self, tab: str | ConfigTab) -> bool:
        """Select a configuration editor tab. Unknown tabs are ignored."""
        try:
            self.config_tab = ConfigTab(tab)
        except ValueError:
            return False
        log_event(logger, logging.DEBUG, EventType.TAB_SWITCHED, Section.CONFIG.value, self.config_tab.value)
        return True

    async def switch_business_tab(self, tab: str | BusinessTab) -> bool:
        """Select a business sub-tab, return to page 1 and load it."""
        parsed = BusinessTab.parse(tab)
        if parsed is None:
            return False

        self.business_tab = parsed
        self.pagination.reset()
        log_event(logger, logging.DEBUG, EventType.TAB_SWITCHED, Section.BUSINESS.value, parsed.value)
        await self.load_page_data()
        return True

    # -------------------------------------------------------------------------
    # Load bookkeeping
    # -------------------------------------------------------------------------

    def _begin_load(self, view: str) -> int:
        self._load_sequence[view] += 1
        token = self._load_sequence[view]
        log_event(logger, logging.DEBUG, EventType.LOAD_STARTED, view, "loading", seq=token)
        return token

    def _is_stale(self, view: str, token: int) -> bool:
        """True if a newer load of the same view was started after ``token``."""
        if not self._config.controller.discard_stale_loads:
            return False
        if token == self._load_sequence[view]:
            return False
        log_event(
            logger, logging.INFO, EventType.LOAD_DISCARDED, view,
            "superseded by a newer load", seq=token, latest=self._load_sequence[view],
        )
        return True

    def _load_failed(self, view: str, error: APIError) -> bool:
        log_event(logger, logging.WARNING, EventType.LOAD_FAILED, view, error.message)
        return False

    def _load_complete(self, view: str) -> bool:
        log_event(logger, logging.DEBUG, EventType.LOAD_COMPLETE, view, "done")
        return True

    # -------------------------------------------------------------------------
    # Section loaders
    # -------------------------------------------------------------------------

    async def load_dashboard(self) -> bool:
        """Fetch stats, metadata, then cluster info, updating cards as they arrive."""
        view = Section.DASHBOARD.value
        token = self._begin_load(view)
        try:
            stats = await self.api.get_stats()
            metadata = await self.api.get_metadata()
            if self._is_stale(view, token):
                return False
            self.dashboard = DashboardView(
                config_count=metadata.config_count,
                business_count=len(metadata.business_types),
                cluster_nodes=None,
                total_points=stats.storage.total_points,
            )

            cluster = await self.api.get_cluster()
            if self._is_stale(view, token):
                return False
            self.dashboard = replace(self.dashboard, cluster_nodes=len(cluster.nodes))
        except APIError as e:
            return self._load_failed(view, e)
        return self._load_complete(view)

    async def _enter_config(self) -> bool:
        self.config_tab = ConfigTab.BUSINESS
        return await self.load_config_manager()

    async def load_config_manager(self) -> bool:
        view = Section.CONFIG.value
        token = self._begin_load(view)
        try:
            snapshot = await self.api.get_config_snapshot()
        except APIError as e:
            return self._load_failed(view, e)
        if self._is_stale(view, token):
            return False
        self.config_snapshot = snapshot
        return self._load_complete(view)

    async def load_metadata_viewer(self) -> bool:
        view = Section.METADATA.value
        token = self._begin_load(view)
        try:
            metadata = await self.api.get_metadata()
        except APIError as e:
            return self._load_failed(view, e)
        if self._is_stale(view, token):
            return False
        self.metadata_view = build_metadata_view(metadata)
        return self._load_complete(view)

    async def load_cluster_status(self) -> bool:
        view = Section.CLUSTER.value
        token = self._begin_load(view)
        try:
            cluster = await self.api.get_cluster()
        except APIError as e:
            return self._load_failed(view, e)
        if self._is_stale(view, token):
            return False
        self.cluster_view = build_cluster_view(cluster)
        return self._load_complete(view)

    async def _enter_business(self) -> bool:
        self.business_tab = BusinessTab.OVERVIEW
        self.pagination.reset()
        return await self.load_business_manager()

    async def load_business_manager(self) -> bool:
        view = Section.BUSINESS.value
        token = self._begin_load(view)
        try:
            info = await self.api.get_business()
        except APIError as e:
            return self._load_failed(view, e)
        if self._is_stale(view, token):
            return False
        self.business_overview = build_business_overview(info)
        return self._load_complete(view)

    # -------------------------------------------------------------------------
    # Paginated business tables
    # -------------------------------------------------------------------------

    async def load_page_data(self) -> bool:
        """Load the current page of the active business tab.

        The overview tab has no table and loads nothing.
        """
        tab = self.business_tab
        if not tab.is_paginated:
            return True

        token = self._begin_load(BUSINESS_PAGE_VIEW)
        try:
            if tab is BusinessTab.INSTANCES:
                info = await self.api.get_business()
                collection: list[Any] = list(info.instances.items())
                build_rows: Callable[[list[Any]], list[Any]] = build_instance_rows
            elif tab is BusinessTab.DATA_VIEWER:
                data = await self.api.get_business_data()
                collection = self.filter.apply(data.items)
                build_rows = build_data_rows
            else:
                info = await self.api.get_business()
                collection = list(info.plugins)
                build_rows = build_plugin_rows
        except APIError as e:
            return self._load_failed(BUSINESS_PAGE_VIEW, e)

        if self._is_stale(BUSINESS_PAGE_VIEW, token):
            return False

        self.pagination.update_total(len(collection))
        page = paginate(collection, self.pagination.current_page, self.pagination.page_size)
        self.business_tables[tab] = TableView(
            tab=tab.value,
            rows=build_rows(page.items),
            pagination=self.pagination.to_dict(),
        )
        return self._load_complete(BUSINESS_PAGE_VIEW)

    async def _load_moved_page(self, previous: tuple[int, int]) -> bool:
        """Load the page the cursor was just moved to.

        If that load fails and no newer page load has started, the cursor
        goes back to ``previous`` (page, page size) so it matches the table
        still on display.
        """
        token = self._load_sequence[BUSINESS_PAGE_VIEW] + 1
        if await self.load_page_data():
            return True
        if self._load_sequence[BUSINESS_PAGE_VIEW] == token:
            self.pagination.current_page, self.pagination.page_size = previous
        return False

    def _cursor(self) -> tuple[int, int]:
        return self.pagination.current_page, self.pagination.page_size

    async def next_page(self) -> bool:
        previous = self._cursor()
        if not self.pagination.next_page():
            return False
        return await self._load_moved_page(previous)

    async def previous_page(self) -> bool:
        previous = self._cursor()
        if not self.pagination.previous_page():
            return False
        return await self._load_moved_page(previous)

    async def go_to_page(self, page: int) -> bool:
        previous = self._cursor()
        self.pagination.go_to(page)
        return await self._load_moved_page(previous)

    async def change_page_size(self, page_size: int | str) -> bool:
        """Change rows per page, keep the current page valid and reload."""
        previous = self._cursor()
        try:
            self.pagination.set_page_size(int(page_size))
        except (PaginationError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring invalid page size {page_size!r}: {e}")
            return False
        return await self._load_moved_page(previous)

    async def apply_filter(self, search: str | None = None, tag_type: str | None = None) -> bool:
        """Apply a new data viewer filter and return to page 1."""
        self.filter = FilterCriteria(search=search or "", tag_type=tag_type or "")
        self.pagination.reset()
        return await self.load_page_data()

    async def reset_filter(self) -> bool:
        return await self.apply_filter()

    # -------------------------------------------------------------------------
    # Configuration writes
    # -------------------------------------------------------------------------

    @property
    def config_view(self) -> ConfigManagerView | None:
        if self.config_snapshot is None:
            return None
        return build_config_manager(self.config_snapshot, self.config_tab, self.form_drafts)

    async def save_config(self, key: str, entries: FormEntries) -> bool:
        """Merge submitted form entries into a record and store it.

        On failure the submitted entries are kept as a draft so the form
        still shows the user's input.
        """
        pairs = list(entries.items()) if isinstance(entries, Mapping) else list(entries)
        value = flatten_form_to_config(pairs)
        try:
            await self.api.update_config(key, value)
        except APIError as e:
            self.form_drafts[key] = [(name, "" if raw is None else str(raw)) for name, raw in pairs]
            log_event(logger, logging.WARNING, EventType.CONFIG_SAVE_FAILED, key, e.message)
            return False

        self.form_drafts.pop(key, None)
        log_event(logger, logging.INFO, EventType.CONFIG_SAVED, key, "stored", fields=len(pairs))
        self.notifier.notify("Configuration saved", NotificationSeverity.SUCCESS)
        await self.load_config_manager()
        return True

    async def delete_instance_config(self, instance_id: str) -> bool:
        """Ask the API to remove an instance's configuration record."""
        key = instance_config_key(instance_id)
        try:
            await self.api.update_config(key, DELETE_SENTINEL)
        except APIError as e:
            log_event(logger, logging.WARNING, EventType.CONFIG_SAVE_FAILED, key, e.message)
            return False

        self.form_drafts.pop(key, None)
        log_event(logger, logging.INFO, EventType.CONFIG_SAVED, key, "deleted")
        self.notifier.notify("Instance configuration deleted", NotificationSeverity.SUCCESS)
        await self.load_config_manager()
        return True

    # -------------------------------------------------------------------------
    # Instance lifecycle
    # -------------------------------------------------------------------------

    async def create_instance(self, instance_id: str | None, business_type: str | None) -> bool:
        """Create an instance, then reload from page 1.

        Blank identifiers are treated as a cancelled prompt.
        """
        instance_id = (instance_id or "").strip()
        business_type = (business_type or "").strip()
        if not instance_id or not business_type:
            return False

        try:
            await self.api.create_instance(instance_id, business_type)
        except APIError as e:
            log_event(logger, logging.WARNING, EventType.INSTANCE_ACTION_FAILED, instance_id, e.message, action="create")
            return False

        log_event(logger, logging.INFO, EventType.INSTANCE_ACTION, instance_id, "created", type=business_type)
        self.notifier.notify("Instance created", NotificationSeverity.SUCCESS)
        self.pagination.reset()
        await self.load_page_data()
        return True

    async def start_instance(self, instance_id: str) -> bool:
        return await self._instance_action("start", instance_id, self.api.start_instance, "Instance started")

    async def stop_instance(self, instance_id: str) -> bool:
        return await self._instance_action("stop", instance_id, self.api.stop_instance, "Instance stopped")

    async def delete_instance(self, instance_id: str) -> bool:
        return await self._instance_action("delete", instance_id, self.api.delete_instance, "Instance deleted")

    async def toggle_instance(self, instance_id: str, is_running: bool) -> bool:
        if is_running:
            return await self.stop_instance(instance_id)
        return await self.start_instance(instance_id)

    async def refresh_instances(self) -> bool:
        self.pagination.reset()
        return await self.load_page_data()

    async def _instance_action(
        self,
        action: str,
        instance_id: str,
        call: Callable[[str], Awaitable[Any]],
        success_message: str,
    ) -> bool:
        try:
            await call(instance_id)
        except APIError as e:
            log_event(logger, logging.WARNING, EventType.INSTANCE_ACTION_FAILED, instance_id, e.message, action=action)
            return False

        log_event(logger, logging.INFO, EventType.INSTANCE_ACTION, instance_id, action)
        self.notifier.notify(success_message, NotificationSeverity.SUCCESS)
        await self.load_page_data()
        return True

    # -------------------------------------------------------------------------
    # Presentation
    # -------------------------------------------------------------------------

    @property
    def instances_table(self) -> TableView | None:
        return self.business_tables.get(BusinessTab.INSTANCES)

    @property
    def data_table(self) -> TableView | None:
        return self.business_tables.get(BusinessTab.DATA_VIEWER)

    @property
    def plugins_table(self) -> TableView | None:
        return self.business_tables.get(BusinessTab.PLUGINS)

    def snapshot(self) -> dict[str, Any]:
        """Full view state as plain data for rendering."""
        notification = self.notifier.current
        pagination = self.pagination.to_dict()
        pagination["page_size_options"] = list(self._config.pagination.page_size_options)
        return {
            "active_section": self.active_section.value,
            "config_tab": self.config_tab.value,
            "dashboard": to_plain(self.dashboard),
            "config": to_plain(self.config_view),
            "metadata": to_plain(self.metadata_view),
            "cluster": to_plain(self.cluster_view),
            "business": {
                "active_tab": self.business_tab.value,
                "overview": to_plain(self.business_overview),
                "tables": {tab.value: to_plain(table) for tab, table in self.business_tables.items()},
                "pagination": pagination,
                "filter": self.filter.to_dict(),
                "data_type_options": list(DATA_TYPE_OPTIONS),
            },
            "notification": notification.to_dict() if notification else None,
        }


def build_controller(config: ConsoleConfig | None = None) -> ViewStateController:
    """Wire a notification channel, API client and controller together."""
    config = config or get_config()
    channel = NotificationChannel(config.notifications)
    client = ConsoleApiClient(config.api, notifier=channel)
    return ViewStateController(client, channel, config)

