"""
Controller module - navigation state machine and view models.

This module contains:
    - view_state: ViewStateController and its factory
    - views: plain data structures consumed by presentation
"""

from tsdb_console.controller.view_state import (
    BUSINESS_PAGE_VIEW,
    ViewStateController,
    build_controller,
)
from tsdb_console.controller.views import (
    BusinessOverview,
    BusinessTypeRow,
    ClusterView,
    ConfigForm,
    ConfigManagerView,
    DashboardView,
    DataRow,
    FormField,
    InstanceRow,
    MetadataView,
    NodeRow,
    PluginRow,
    TableView,
    to_plain,
)

__all__ = [
    # Controller
    "BUSINESS_PAGE_VIEW",
    "ViewStateController",
    "build_controller",
    # Views
    "BusinessOverview",
    "BusinessTypeRow",
    "ClusterView",
    "ConfigForm",
    "ConfigManagerView",
    "DashboardView",
    "DataRow",
    "FormField",
    "InstanceRow",
    "MetadataView",
    "NodeRow",
    "PluginRow",
    "TableView",
    "to_plain",
]
