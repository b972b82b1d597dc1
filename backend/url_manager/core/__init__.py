"""Core module - foundational components."""

from url_manager.core.database import get_db
from url_manager.core.exceptions import AppException
from url_manager.core.logging import get_logger

__all__ = ["get_db", "AppException", "get_logger"]
