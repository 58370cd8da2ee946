"""
Tests for constants, enumerations and the exception hierarchy.
"""

from __future__ import annotations

import logging

from tsdb_console.core import (
    APIError,
    BusinessTab,
    ConfigTab,
    ConsoleError,
    EventType,
    LogContext,
    PaginationError,
    ParseFault,
    Section,
    TransportFault,
    business_config_key,
    instance_config_key,
    log_event,
)


class TestSection:
    """Tests for Section enum."""

    def test_values(self):
        assert [s.value for s in Section] == ["dashboard", "config", "metadata", "cluster", "business"]

    def test_parse(self):
        assert Section.parse("cluster") is Section.CLUSTER
        assert Section.parse(Section.CONFIG) is Section.CONFIG
        assert Section.parse("Cluster") is None
        assert Section.parse("reports") is None


class TestBusinessTab:
    def test_parse(self):
        assert BusinessTab.parse("data-viewer") is BusinessTab.DATA_VIEWER
        assert BusinessTab.parse("data_viewer") is None

    def test_only_overview_is_unpaginated(self):
        assert not BusinessTab.OVERVIEW.is_paginated
        assert all(tab.is_paginated for tab in BusinessTab if tab is not BusinessTab.OVERVIEW)


class TestKeys:
    def test_record_keys(self):
        assert instance_config_key("inst-1") == "instance:inst-1"
        assert business_config_key("stock") == "business:stock"

    def test_config_tab_values(self):
        assert {t.value for t in ConfigTab} == {"business", "system", "instance"}


class TestExceptions:
    """Tests for the exception hierarchy."""

    def test_hierarchy(self):
        assert issubclass(TransportFault, APIError)
        assert issubclass(ParseFault, APIError)
        assert issubclass(APIError, ConsoleError)
        assert issubclass(PaginationError, ConsoleError)

    def test_transport_fault_with_status(self):
        fault = TransportFault("/stats", status_code=500, reason="Internal Server Error")
        assert fault.message == "HTTP 500: Internal Server Error"
        assert fault.context == {"endpoint": "/stats", "status_code": 500}
        assert "endpoint=/stats" in str(fault)

    def test_transport_fault_status_without_reason(self):
        assert TransportFault("/stats", status_code=502).message == "HTTP 502"

    def test_transport_fault_network(self):
        cause = ConnectionError("refused")
        fault = TransportFault("/cluster", reason="refused", cause=cause)
        assert fault.message == "Request to /cluster failed: refused"
        assert fault.status_code is None
        assert "Caused by: refused" in str(fault)

    def test_parse_fault(self):
        fault = ParseFault("/business", reason="invalid JSON")
        assert fault.message == "Malformed response from /business: invalid JSON"
        assert fault.endpoint == "/business"

    def test_pagination_error(self):
        error = PaginationError(field_name="page_size", value=0, reason="must be positive")
        assert error.message == "Invalid page_size: must be positive"
        assert error.context == {"field": "page_size", "value": 0}


class TestLogging:
    """Tests for structured log helpers."""

    def test_log_event_format(self, caplog):
        logger = logging.getLogger("tsdb_console.tests")
        with caplog.at_level(logging.INFO, logger="tsdb_console.tests"):
            log_event(logger, logging.INFO, EventType.LOAD_FAILED, "cluster", "HTTP 500", seq=3)
        assert "LOAD_FAILED - cluster: HTTP 500 [seq=3]" in caplog.text

    def test_log_context_restores_levels(self):
        api = logging.getLogger("tsdb_console.tests.api")
        ctl = logging.getLogger("tsdb_console.tests.controller")
        api.setLevel(logging.WARNING)
        ctl.setLevel(logging.ERROR)

        with LogContext("debug", "tsdb_console.tests.api", "tsdb_console.tests.controller"):
            assert api.level == logging.DEBUG
            assert ctl.level == logging.DEBUG

        assert api.level == logging.WARNING
        assert ctl.level == logging.ERROR

    def test_log_event_skipped_when_disabled(self, caplog):
        logger = logging.getLogger("tsdb_console.tests.quiet")
        with caplog.at_level(logging.WARNING, logger="tsdb_console.tests.quiet"):
            log_event(logger, logging.DEBUG, EventType.LOAD_STARTED, "dashboard", "loading")
        assert "LOAD_STARTED" not in caplog.text
