"""
Web module - FastAPI presentation seam over the console controller.
"""

from tsdb_console.web.app import ConsoleAccessLogMiddleware, create_app

__all__ = [
    "ConsoleAccessLogMiddleware",
    "create_app",
]
