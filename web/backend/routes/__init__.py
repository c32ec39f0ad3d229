"""Backend API routes."""

from .flow import router as flow_router
from .providers import router as providers_router
from .ui_config import router as ui_config_router

__all__ = ["flow_router", "providers_router", "ui_config_router"]
