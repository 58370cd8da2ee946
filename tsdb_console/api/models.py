"""
Pydantic data models for the database management API.

This module defines the data contracts for:
- Read payloads (/stats, /metadata, /config, /cluster, /business, /business/data)
- Write request bodies (/config/update, /business/instance/*)

Read models are lenient: missing or null containers fall back to empty
defaults and unknown fields are kept, so a partially populated backend
response still renders.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from tsdb_console.core.constants import InstanceStatus


def _none_to_empty_dict(value: Any) -> Any:
    return {} if value is None else value


def _none_to_empty_list(value: Any) -> Any:
    return [] if value is None else value


def _scalar_to_text(value: Any) -> Any:
    # Saved forms store numeric-looking text as numbers
    if isinstance(value, (bool, int, float)):
        return str(value)
    return value


# Text inputs; a saved "1" comes back as the number 1
TextLeaf = Annotated[str | None, BeforeValidator(_scalar_to_text)]

# Number inputs; a value typed as "1.5" or "abc" is stored as-is and must still load
NumericLeaf = int | float | str | None


# =============================================================================
# Dashboard / Metadata Models
# =============================================================================


class StorageStats(BaseModel):
    """Storage engine counters."""

    total_points: int = Field(0, ge=0, description="Total stored data points")

    @field_validator("total_points", mode="before")
    @classmethod
    def _null_points(cls, value: Any) -> Any:
        return 0 if value is None else value

    class Config:
        extra = "allow"


class StatsResponse(BaseModel):
    """Aggregate statistics returned by GET /stats."""

    storage: StorageStats = Field(default_factory=StorageStats)

    @field_validator("storage", mode="before")
    @classmethod
    def _null_storage(cls, value: Any) -> Any:
        return _none_to_empty_dict(value)

    class Config:
        extra = "allow"


class MetadataResponse(BaseModel):
    """Metadata summary returned by GET /metadata."""

    config_count: int = Field(0, ge=0, description="Number of stored config records")
    business_types: list[str] = Field(default_factory=list, description="Known business types")

    @field_validator("config_count", mode="before")
    @classmethod
    def _null_count(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("business_types", mode="before")
    @classmethod
    def _null_types(cls, value: Any) -> Any:
        return _none_to_empty_list(value)

    class Config:
        extra = "allow"


# =============================================================================
# Configuration Models
# =============================================================================


class BusinessConfig(BaseModel):
    """Settings of one business type (record key ``business:<type>``)."""

    name: TextLeaf = None
    description: TextLeaf = None
    block_size: NumericLeaf = Field(None, description="Block size in seconds")
    retention_days: NumericLeaf = Field(None, description="Retention in days")
    compression: TextLeaf = Field(None, description="lz4, snappy or none")

    class Config:
        extra = "allow"


class ServerSettings(BaseModel):
    port: NumericLeaf = None
    bind: TextLeaf = None
    max_connections: NumericLeaf = None

    class Config:
        extra = "allow"


class StorageSettings(BaseModel):
    data_dir: TextLeaf = None
    write_buffer_size: NumericLeaf = Field(None, description="Write buffer size in bytes")

    class Config:
        extra = "allow"


class SystemConfig(BaseModel):
    """System settings (record key ``system:main``)."""

    server: ServerSettings | None = None
    storage: StorageSettings | None = None

    class Config:
        extra = "allow"


class InstanceConfig(BaseModel):
    """Settings of one instance (record key ``instance:<id>``)."""

    name: TextLeaf = None
    business_type: TextLeaf = None
    node_id: TextLeaf = None

    class Config:
        extra = "allow"


class ConfigSnapshot(BaseModel):
    """All configuration records returned by GET /config."""

    business_configs: dict[str, BusinessConfig] = Field(default_factory=dict)
    system_config: SystemConfig | None = None
    instance_configs: dict[str, InstanceConfig] = Field(default_factory=dict)

    @field_validator("business_configs", "instance_configs", mode="before")
    @classmethod
    def _null_maps(cls, value: Any) -> Any:
        return _none_to_empty_dict(value)

    class Config:
        extra = "allow"


class ConfigUpdateRequest(BaseModel):
    """Body of POST /config/update. A null value deletes the record."""

    key: str = Field(..., min_length=1, description="Record key, e.g. system:main")
    value: dict[str, Any] | None = Field(..., description="Nested record value or null")


# =============================================================================
# Cluster Models
# =============================================================================


class ClusterNode(BaseModel):
    id: str | None = None
    address: str | None = None
    status: str | None = None
    last_active: Any = None

    @property
    def is_online(self) -> bool:
        return self.status == "online"

    class Config:
        extra = "allow"


class ClusterInfo(BaseModel):
    """Cluster state returned by GET /cluster."""

    status: str | None = None
    leader: str | None = None
    nodes: list[ClusterNode] = Field(default_factory=list)

    @field_validator("nodes", mode="before")
    @classmethod
    def _null_nodes(cls, value: Any) -> Any:
        return _none_to_empty_list(value)

    @property
    def is_online(self) -> bool:
        return self.status == "online"

    class Config:
        extra = "allow"


# =============================================================================
# Business Models
# =============================================================================


class BusinessInstance(BaseModel):
    """One business instance as listed by GET /business."""

    type: str | None = None
    status: InstanceStatus = InstanceStatus.UNKNOWN
    last_update: float | None = Field(None, description="Epoch seconds")
    data_points: int | None = Field(None, ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Any:
        if isinstance(value, InstanceStatus):
            return value
        try:
            return InstanceStatus(value)
        except ValueError:
            return InstanceStatus.UNKNOWN

    @property
    def is_running(self) -> bool:
        return self.status is InstanceStatus.RUNNING

    class Config:
        extra = "allow"


class Performance(BaseModel):
    write_rate: float = 0
    query_rate: float = 0
    cache_hit_rate: float = 0

    @field_validator("write_rate", "query_rate", "cache_hit_rate", mode="before")
    @classmethod
    def _null_rates(cls, value: Any) -> Any:
        return 0 if value is None else value

    class Config:
        extra = "allow"


class BusinessInfo(BaseModel):
    """Business overview returned by GET /business."""

    instances: dict[str, BusinessInstance] = Field(default_factory=dict)
    plugins: list[str] = Field(default_factory=list)
    performance: Performance = Field(default_factory=Performance)

    @field_validator("instances", "performance", mode="before")
    @classmethod
    def _null_maps(cls, value: Any) -> Any:
        return _none_to_empty_dict(value)

    @field_validator("plugins", mode="before")
    @classmethod
    def _null_plugins(cls, value: Any) -> Any:
        return _none_to_empty_list(value)

    class Config:
        extra = "allow"


class DataPoint(BaseModel):
    """One row of GET /business/data."""

    timestamp: Any = None
    value: Any = None
    tags: dict[str, Any] = Field(default_factory=dict)

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: Any) -> Any:
        return _none_to_empty_dict(value)

    class Config:
        extra = "allow"


class DataResponse(BaseModel):
    items: list[DataPoint] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        return _none_to_empty_list(value)

    class Config:
        extra = "allow"


class CreateInstanceRequest(BaseModel):
    """Body of POST /business/instance/create."""

    instance_id: str = Field(..., min_length=1)
    business_type: str = Field(..., min_length=1)


class InstanceActionRequest(BaseModel):
    """Body of POST /business/instance/{start,stop,delete}."""

    instance_id: str = Field(..., min_length=1)
