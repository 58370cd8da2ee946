"""
Plain view models handed to the presentation layer.

Builders in this module turn validated API payloads into the rows, cards
and form descriptions each section displays. They hold no state and do no
I/O; the controller decides when to call them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from tsdb_console.api.models import (
    BusinessConfig,
    BusinessInfo,
    BusinessInstance,
    ClusterInfo,
    ConfigSnapshot,
    DataPoint,
    InstanceConfig,
    MetadataResponse,
    SystemConfig,
)
from tsdb_console.core.constants import (
    COMPRESSION_OPTIONS,
    PLUGIN_STATUS_INSTALLED,
    SYSTEM_CONFIG_KEY,
    UNKNOWN_LABEL,
    ConfigTab,
    business_config_key,
    instance_config_key,
)

# Defaults shown when a record omits a field
DEFAULT_BLOCK_SIZE = 60
DEFAULT_RETENTION_DAYS = 30
DEFAULT_COMPRESSION = "none"
DEFAULT_SERVER_PORT = 6379
DEFAULT_SERVER_BIND = "0.0.0.0"
DEFAULT_MAX_CONNECTIONS = 10000
DEFAULT_DATA_DIR = "./data"
DEFAULT_WRITE_BUFFER_SIZE = 64 * 1024 * 1024


def to_plain(value: Any) -> Any:
    """Recursively convert view models into JSON-friendly structures."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value


# =============================================================================
# Dashboard
# =============================================================================


@dataclass
class DashboardView:
    """Stat cards on the dashboard. ``cluster_nodes`` is None while loading."""

    config_count: int = 0
    business_count: int = 0
    cluster_nodes: int | None = None
    total_points: int = 0


# =============================================================================
# Configuration editor
# =============================================================================


@dataclass
class FormField:
    """One input of a configuration form, named by its dotted path."""

    name: str
    label: str
    value: Any
    input_type: str = "text"
    required: bool = False
    min_value: int | None = None
    max_value: int | None = None
    options: list[str] = field(default_factory=list)


@dataclass
class ConfigForm:
    """Editable form for one configuration record."""

    key: str
    title: str
    fields: list[FormField]
    description: str | None = None
    deletable: bool = False
    has_draft: bool = False

    def entries(self) -> list[tuple[str, str]]:
        """Current field values as (dotted key, string value) pairs."""
        return [(f.name, "" if f.value is None else str(f.value)) for f in self.fields]


@dataclass
class ConfigManagerView:
    active_tab: str
    business_forms: list[ConfigForm]
    system_form: ConfigForm | None
    instance_forms: list[ConfigForm]


def _apply_draft(form: ConfigForm, drafts: Mapping[str, list[tuple[str, str]]]) -> ConfigForm:
    draft = drafts.get(form.key)
    if not draft:
        return form
    values = dict(draft)
    for form_field in form.fields:
        if form_field.name in values:
            form_field.value = values[form_field.name]
    form.has_draft = True
    return form


def build_business_form(business_type: str, config: BusinessConfig) -> ConfigForm:
    return ConfigForm(
        key=business_config_key(business_type),
        title=config.name or business_type,
        description=config.description,
        fields=[
            FormField("name", "Business name", config.name or "", required=True),
            FormField("description", "Description", config.description or "", input_type="textarea"),
            FormField(
                "block_size", "Block size (seconds)", config.block_size or DEFAULT_BLOCK_SIZE,
                input_type="number", min_value=1,
            ),
            FormField(
                "retention_days", "Retention (days)", config.retention_days or DEFAULT_RETENTION_DAYS,
                input_type="number", min_value=1,
            ),
            FormField(
                "compression", "Compression", config.compression or DEFAULT_COMPRESSION,
                input_type="select", options=list(COMPRESSION_OPTIONS),
            ),
        ],
    )


def build_system_form(config: SystemConfig) -> ConfigForm:
    server = config.server
    storage = config.storage
    return ConfigForm(
        key=SYSTEM_CONFIG_KEY,
        title="System configuration",
        fields=[
            FormField(
                "server.port", "Port", (server and server.port) or DEFAULT_SERVER_PORT,
                input_type="number", min_value=1, max_value=65535,
            ),
            FormField("server.bind", "Bind address", (server and server.bind) or DEFAULT_SERVER_BIND),
            FormField(
                "server.max_connections", "Max connections",
                (server and server.max_connections) or DEFAULT_MAX_CONNECTIONS,
                input_type="number", min_value=1,
            ),
            FormField("storage.data_dir", "Data directory", (storage and storage.data_dir) or DEFAULT_DATA_DIR),
            FormField(
                "storage.write_buffer_size", "Write buffer size (bytes)",
                (storage and storage.write_buffer_size) or DEFAULT_WRITE_BUFFER_SIZE,
                input_type="number", min_value=1,
            ),
        ],
    )


def build_instance_form(instance_id: str, config: InstanceConfig) -> ConfigForm:
    return ConfigForm(
        key=instance_config_key(instance_id),
        title=f"Instance: {instance_id}",
        deletable=True,
        fields=[
            FormField("name", "Instance name", config.name or instance_id),
            FormField("business_type", "Business type", config.business_type or ""),
            FormField("node_id", "Node ID", config.node_id or ""),
        ],
    )


def build_config_manager(
    snapshot: ConfigSnapshot,
    active_tab: ConfigTab,
    drafts: Mapping[str, list[tuple[str, str]]] | None = None,
) -> ConfigManagerView:
    """Build every configuration form, overlaying unsaved drafts."""
    drafts = drafts or {}
    business_forms = [
        _apply_draft(build_business_form(biz_type, cfg), drafts)
        for biz_type, cfg in snapshot.business_configs.items()
    ]
    system_form = (
        _apply_draft(build_system_form(snapshot.system_config), drafts)
        if snapshot.system_config is not None
        else None
    )
    instance_forms = [
        _apply_draft(build_instance_form(instance_id, cfg), drafts)
        for instance_id, cfg in snapshot.instance_configs.items()
    ]
    return ConfigManagerView(
        active_tab=active_tab.value,
        business_forms=business_forms,
        system_form=system_form,
        instance_forms=instance_forms,
    )


# =============================================================================
# Metadata and cluster
# =============================================================================


@dataclass
class BusinessTypeRow:
    type_id: str
    name: str
    description: str


@dataclass
class MetadataView:
    config_count: int
    business_type_count: int
    business_types: list[BusinessTypeRow]
    raw: dict[str, Any]


def build_metadata_view(metadata: MetadataResponse) -> MetadataView:
    rows = [
        BusinessTypeRow(
            type_id=f"biz_type_{index}",
            name=biz_type,
            description=f"Data processing module for the {biz_type} business type",
        )
        for index, biz_type in enumerate(metadata.business_types, start=1)
    ]
    return MetadataView(
        config_count=metadata.config_count,
        business_type_count=len(metadata.business_types),
        business_types=rows,
        raw=metadata.model_dump(mode="json"),
    )


@dataclass
class NodeRow:
    node_id: str
    address: str
    status: str
    is_online: bool
    last_active: Any = None


@dataclass
class ClusterView:
    status: str
    is_online: bool
    leader: str | None
    node_count: int
    nodes: list[NodeRow]


def build_cluster_view(cluster: ClusterInfo) -> ClusterView:
    nodes = [
        NodeRow(
            node_id=node.id or UNKNOWN_LABEL,
            address=node.address or UNKNOWN_LABEL,
            status=node.status or UNKNOWN_LABEL,
            is_online=node.is_online,
            last_active=node.last_active,
        )
        for node in cluster.nodes
    ]
    return ClusterView(
        status=cluster.status or UNKNOWN_LABEL,
        is_online=cluster.is_online,
        leader=cluster.leader,
        node_count=len(nodes),
        nodes=nodes,
    )


# =============================================================================
# Business section
# =============================================================================


@dataclass
class BusinessOverview:
    instance_count: int
    plugin_count: int
    write_rate: float
    query_rate: float
    cache_hit_rate: float


def build_business_overview(info: BusinessInfo) -> BusinessOverview:
    return BusinessOverview(
        instance_count=len(info.instances),
        plugin_count=len(info.plugins),
        write_rate=info.performance.write_rate,
        query_rate=info.performance.query_rate,
        cache_hit_rate=info.performance.cache_hit_rate,
    )


@dataclass
class InstanceRow:
    instance_id: str
    business_type: str
    status: str
    is_running: bool
    last_update: datetime | None
    data_points: int
    toggle_action: str


def build_instance_rows(instances: Iterable[tuple[str, BusinessInstance]]) -> list[InstanceRow]:
    rows = []
    for instance_id, instance in instances:
        last_update = (
            datetime.fromtimestamp(instance.last_update, tz=timezone.utc)
            if instance.last_update
            else None
        )
        rows.append(
            InstanceRow(
                instance_id=instance_id,
                business_type=instance.type or UNKNOWN_LABEL,
                status=instance.status.value,
                is_running=instance.is_running,
                last_update=last_update,
                data_points=instance.data_points or 0,
                toggle_action="stop" if instance.is_running else "start",
            )
        )
    return rows


@dataclass
class DataRow:
    timestamp: Any
    value: Any
    type: str
    tags: dict[str, str]


def _tag_text(value: Any) -> str:
    return "" if value is None else str(value)


def build_data_rows(items: Iterable[DataPoint]) -> list[DataRow]:
    return [
        DataRow(
            timestamp=item.timestamp,
            value=item.value if item.value is not None else 0,
            type=_tag_text(item.tags.get("type")) or UNKNOWN_LABEL,
            tags={k: _tag_text(v) for k, v in item.tags.items() if k != "type"},
        )
        for item in items
    ]


@dataclass
class PluginRow:
    name: str
    status: str = PLUGIN_STATUS_INSTALLED


def build_plugin_rows(plugins: Iterable[str]) -> list[PluginRow]:
    return [PluginRow(name=name or UNKNOWN_LABEL) for name in plugins]


@dataclass
class TableView:
    """One rendered page of a business table."""

    tab: str
    rows: list[Any]
    pagination: dict[str, Any]
