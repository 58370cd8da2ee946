"""
Client for the database management API.

Every outbound call goes through ``ConsoleApiClient.call``, which prefixes
the endpoint with the API root, sends JSON, and maps failures onto
``TransportFault`` / ``ParseFault``. A failure is logged, surfaced as an
error notification and re-raised so the caller can abort its load.
Calls are at-most-once: no retries happen at this layer.
"""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any, Final, TypeVar

import requests
import urllib3
from pydantic import BaseModel, ValidationError

from tsdb_console.api.models import (
    BusinessInfo,
    ClusterInfo,
    ConfigSnapshot,
    ConfigUpdateRequest,
    CreateInstanceRequest,
    DataResponse,
    InstanceActionRequest,
    MetadataResponse,
    StatsResponse,
)
from tsdb_console.core.config import ApiConfig, get_config
from tsdb_console.core.constants import NotificationSeverity
from tsdb_console.core.exceptions import APIError, ParseFault, TransportFault
from tsdb_console.core.logging import EventType, get_logger, log_event
from tsdb_console.core.protocols import ConsoleApi, NotificationSink

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_HEADERS: Final[dict[str, str]] = {"Content-Type": "application/json"}


class ConsoleApiClient(ConsoleApi):
    """API client with uniform error surfacing.

    The blocking ``requests`` call runs in a worker thread so the event
    loop stays free; all state changes and notifications happen back on
    the loop.

    Example:
        >>> client = ConsoleApiClient(notifier=channel)
        >>> stats = await client.get_stats()
        >>> stats.storage.total_points
    """

    # Endpoints below the API prefix
    STATS: Final[str] = "/stats"
    METADATA: Final[str] = "/metadata"
    CONFIG: Final[str] = "/config"
    CONFIG_UPDATE: Final[str] = "/config/update"
    CLUSTER: Final[str] = "/cluster"
    BUSINESS: Final[str] = "/business"
    BUSINESS_DATA: Final[str] = "/business/data"
    INSTANCE_CREATE: Final[str] = "/business/instance/create"
    INSTANCE_START: Final[str] = "/business/instance/start"
    INSTANCE_STOP: Final[str] = "/business/instance/stop"
    INSTANCE_DELETE: Final[str] = "/business/instance/delete"

    def __init__(
        self,
        config: ApiConfig | None = None,
        notifier: NotificationSink | None = None,
        base_url: str | None = None,
    ) -> None:
        """Initialize the API client."""
        self._config = config or get_config().api
        if base_url:
            self._config = ApiConfig(
                base_url=base_url,
                api_prefix=self._config.api_prefix,
                timeout_seconds=self._config.timeout_seconds,
                pool_connections=self._config.pool_connections,
                pool_maxsize=self._config.pool_maxsize,
            )
        self._api_root = self._config.api_root
        self._notifier = notifier
        self._session = self._create_session()

    @property
    def api_root(self) -> str:
        """Get the configured API root URL."""
        return self._api_root

    @property
    def notifier(self) -> NotificationSink | None:
        return self._notifier

    @notifier.setter
    def notifier(self, notifier: NotificationSink | None) -> None:
        self._notifier = notifier

    def _create_session(self) -> requests.Session:
        """Create a requests session with connection pooling and no retries."""
        session = requests.Session()

        adapter = requests.adapters.HTTPAdapter(
            pool_connections=self._config.pool_connections,
            pool_maxsize=self._config.pool_maxsize,
            max_retries=urllib3.util.retry.Retry(total=0, read=False, redirect=False),
            pool_block=False,
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update(JSON_HEADERS)

        return session

    def url_for(self, endpoint: str) -> str:
        """Join an endpoint onto the API root."""
        return f"{self._api_root}/{endpoint.lstrip('/')}"

    # -------------------------------------------------------------------------
    # Raw calls
    # -------------------------------------------------------------------------

    async def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: dict[str, Any] | None = None,
    ) -> Any:
        """Issue one request and return the decoded JSON payload."""
        try:
            return await asyncio.to_thread(self._request, endpoint, method.upper(), body)
        except APIError as e:
            self._report(e)
            raise

    def _request(self, endpoint: str, method: str, body: dict[str, Any] | None) -> Any:
        url = self.url_for(endpoint)
        logger.debug(f"{method} {url}")

        try:
            response = self._session.request(
                method,
                url,
                json=body,
                headers=JSON_HEADERS,
                timeout=self._config.timeout_seconds,
            )
        except requests.exceptions.RequestException as e:
            raise TransportFault(endpoint, reason=str(e), cause=e) from e

        if not 200 <= response.status_code < 300:
            raise TransportFault(endpoint, status_code=response.status_code, reason=response.reason)

        try:
            return response.json()
        except ValueError as e:
            # requests.JSONDecodeError is a ValueError
            raise ParseFault(endpoint, reason=f"invalid JSON ({e})", cause=e) from e

    def _report(self, fault: APIError) -> None:
        log_event(logger, logging.ERROR, EventType.API_CALL_FAILED, fault.endpoint, fault.message)
        if self._notifier is not None:
            self._notifier.notify(f"API call failed: {fault.message}", NotificationSeverity.ERROR)

    def parse(self, endpoint: str, payload: Any, model: type[ModelT]) -> ModelT:
        """Validate a payload against a response model.

        Raises:
            ParseFault: If the payload does not have the expected shape.
        """
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            fault = ParseFault(endpoint, reason=f"{e.error_count()} validation error(s)", cause=e)
            self._report(fault)
            raise fault from e

    async def _get(self, endpoint: str, model: type[ModelT]) -> ModelT:
        payload = await self.call(endpoint)
        return self.parse(endpoint, payload, model)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_stats(self) -> StatsResponse:
        return await self._get(self.STATS, StatsResponse)

    async def get_metadata(self) -> MetadataResponse:
        return await self._get(self.METADATA, MetadataResponse)

    async def get_config_snapshot(self) -> ConfigSnapshot:
        return await self._get(self.CONFIG, ConfigSnapshot)

    async def get_cluster(self) -> ClusterInfo:
        return await self._get(self.CLUSTER, ClusterInfo)

    async def get_business(self) -> BusinessInfo:
        return await self._get(self.BUSINESS, BusinessInfo)

    async def get_business_data(self) -> DataResponse:
        return await self._get(self.BUSINESS_DATA, DataResponse)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def update_config(self, key: str, value: dict[str, Any] | None) -> Any:
        """Store a config record, or delete it when ``value`` is None."""
        body = ConfigUpdateRequest(key=key, value=value).model_dump()
        return await self.call(self.CONFIG_UPDATE, "POST", body)

    async def create_instance(self, instance_id: str, business_type: str) -> Any:
        body = CreateInstanceRequest(instance_id=instance_id, business_type=business_type).model_dump()
        return await self.call(self.INSTANCE_CREATE, "POST", body)

    async def start_instance(self, instance_id: str) -> Any:
        body = InstanceActionRequest(instance_id=instance_id).model_dump()
        return await self.call(self.INSTANCE_START, "POST", body)

    async def stop_instance(self, instance_id: str) -> Any:
        body = InstanceActionRequest(instance_id=instance_id).model_dump()
        return await self.call(self.INSTANCE_STOP, "POST", body)

    async def delete_instance(self, instance_id: str) -> Any:
        body = InstanceActionRequest(instance_id=instance_id).model_dump()
        return await self.call(self.INSTANCE_DELETE, "POST", body)

    def close(self) -> None:
        """Close the session and clean up resources."""
        self._session.close()

    def __enter__(self) -> ConsoleApiClient:
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Context manager exit."""
        self.close()
