"""UI configuration endpoints for flow viewer clients."""

from __future__ import annotations

from fastapi import APIRouter

from ..models import UIConfig
from ..services.settings import load_settings

router = APIRouter(tags=["ui"])


@router.get("/config", response_model=UIConfig)
async def ui_config() -> UIConfig:
    return UIConfig(showStartEndNode=load_settings().show_start_end_node)
