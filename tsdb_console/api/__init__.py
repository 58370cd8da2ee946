"""
API module - data models and client for the database management API.

This module contains:
    - models: Pydantic data models for API payloads
    - client: requests-based client with uniform fault surfacing
"""

from tsdb_console.api.client import ConsoleApiClient
from tsdb_console.api.models import (
    BusinessConfig,
    BusinessInfo,
    BusinessInstance,
    ClusterInfo,
    ClusterNode,
    ConfigSnapshot,
    ConfigUpdateRequest,
    CreateInstanceRequest,
    DataPoint,
    DataResponse,
    InstanceActionRequest,
    InstanceConfig,
    MetadataResponse,
    Performance,
    ServerSettings,
    StatsResponse,
    StorageSettings,
    StorageStats,
    SystemConfig,
)

__all__ = [
    # Client
    "ConsoleApiClient",
    # Read models
    "StatsResponse",
    "StorageStats",
    "MetadataResponse",
    "ConfigSnapshot",
    "BusinessConfig",
    "SystemConfig",
    "ServerSettings",
    "StorageSettings",
    "InstanceConfig",
    "ClusterInfo",
    "ClusterNode",
    "BusinessInfo",
    "BusinessInstance",
    "Performance",
    "DataPoint",
    "DataResponse",
    # Write models
    "ConfigUpdateRequest",
    "CreateInstanceRequest",
    "InstanceActionRequest",
]
